"""
Pytest configuration and shared fixtures.
"""
import json
from itertools import count
from pathlib import Path
from typing import Dict, List
from unittest.mock import Mock

import pytest
import yaml

from flickr_to_google_photos.models import Album, DestinationAlbum, Photo
from flickr_to_google_photos.source.base import SourceCatalog
from flickr_to_google_photos.uploader.base import DestinationClient

ENV_OVERRIDES = (
    'GOOGLE_CLIENT_ID',
    'GOOGLE_CLIENT_SECRET',
    'FLICKR_DATA_DIRECTORY',
    'FLICKR_API_KEY',
    'FLICKR_API_SECRET',
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the developer's environment out of configuration loading."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'xdg'))


@pytest.fixture
def sample_config(tmp_path) -> Dict:
    """Fixture providing a sample configuration dictionary."""
    return {
        'google_photos': {
            'client_id': 'test_client_id',
            'client_secret': 'test_client_secret',
            'token_file': str(tmp_path / 'token.json'),
            'redirect_port': 3000,
            'oauth_timeout_seconds': 300,
        },
        'flickr': {
            'source': 'export',
            'data_directory': str(tmp_path / 'flickr-export'),
        },
        'transfer': {
            'batch_size': 10,
            'sleep_time_between_batches': 0,
            'job_storage_dir': str(tmp_path / '.transfer-jobs'),
            'max_retries': 0,
        },
        'logging': {
            'level': 'INFO',
            'file': None,
        }
    }


@pytest.fixture
def config_file(tmp_path, sample_config) -> Path:
    """Create a temporary config.yaml file."""
    config_path = tmp_path / 'config.yaml'
    with open(config_path, 'w') as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture
def flickr_export(tmp_path) -> Path:
    """
    Create a small Flickr export.

    Album "Holidays" holds photos 1001, 1002 and 1003 (1003 has metadata but
    no media file); album "Empty" has no photos.
    """
    export_dir = tmp_path / 'flickr-export'
    metadata_dir = export_dir / 'metadata'
    media_dir = export_dir / 'media' / 'data-download-1'
    metadata_dir.mkdir(parents=True)
    media_dir.mkdir(parents=True)

    albums = {
        'albums': [
            {
                'id': '72157600000000001',
                'title': 'Holidays',
                'description': 'Summer trips',
                'photo_count': '3',
                'created': '1500000000',
                'last_updated': '1500000100',
                'photos': ['1001', '1002', '1003', '0'],
            },
            {
                'id': '72157600000000002',
                'title': 'Empty',
                'description': '',
                'photo_count': '0',
                'photos': [],
            },
        ]
    }
    with open(metadata_dir / 'albums.json', 'w') as f:
        json.dump(albums, f)

    photos = {
        '1001': {
            'id': '1001',
            'name': 'Beach',
            'description': 'Sunset at the beach',
            'date_taken': '2017-07-01 19:00:00',
            'tags': [{'tag': 'sunset'}, {'tag': 'beach'}],
            'geo': [{'latitude': '43.7', 'longitude': '7.26'}],
        },
        '1002': {'id': '1002', 'name': 'Harbour', 'description': ''},
        '1003': {
            'id': '1003',
            'name': 'Lost',
            'original': 'https://live.staticflickr.com/1/1003_abc_o.jpg',
        },
    }
    for photo_id, metadata in photos.items():
        with open(metadata_dir / f'photo_{photo_id}.json', 'w') as f:
            json.dump(metadata, f)

    (media_dir / 'beach_1001_o.jpg').write_bytes(b'beach-bytes')
    (media_dir / 'harbour_1002_o.png').write_bytes(b'harbour-bytes')
    return export_dir


def make_photos(n: int, prefix: str = 'p') -> List[Photo]:
    return [Photo(id=f'{prefix}{i}', name=f'Photo {i}', url=f'{prefix}{i}.jpg')
            for i in range(1, n + 1)]


def make_album(n_photos: int, album_id: str = 'album1', title: str = 'Album 1',
               description: str = '') -> Album:
    photos = make_photos(n_photos)
    return Album(id=album_id, title=title, description=description,
                 photo_count=n_photos, photos=photos)


@pytest.fixture
def mock_source():
    """Source returning fixed bytes for every photo."""
    source = Mock(spec=SourceCatalog)
    source.get_photo_bytes.return_value = b'image-bytes'
    return source


@pytest.fixture
def mock_destination():
    """Destination handing out sequential media item ids."""
    destination = Mock(spec=DestinationClient)
    destination.create_album.return_value = DestinationAlbum(id='dest_album_1', title='Album 1')
    ids = count(1)
    destination.upload_photo.side_effect = lambda data, filename, description: f'media_{next(ids)}'
    return destination


@pytest.fixture
def album_factory():
    """Build an album with ``n`` photos."""
    return make_album


@pytest.fixture
def photo_factory():
    """Build ``n`` photos."""
    return make_photos
