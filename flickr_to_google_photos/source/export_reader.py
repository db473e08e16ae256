"""
Read albums and photos from an unpacked Flickr data export.

A Flickr account export consists of metadata archives (``albums.json``, one
``photo_<id>.json`` per photo) and media archives whose files embed the photo
id in their names, e.g. ``sunset_5234567890_o.jpg``. Once unpacked they may
sit in one directory or be spread over several sub-directories.
"""
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from flickr_to_google_photos.exceptions import NotFoundError, DownloadError
from flickr_to_google_photos.models import Album, Photo
from flickr_to_google_photos.source.base import SourceCatalog
from flickr_to_google_photos.utils.security import validate_file_path

logger = logging.getLogger(__name__)

METADATA_FILE_PATTERN = re.compile(r'^photo_(\d+)\.json$')


class FlickrExportCatalog(SourceCatalog):
    """
    SourceCatalog backed by a Flickr bulk export on disk.

    Album and photo metadata are read lazily on first use and cached for the
    lifetime of the catalog.
    """

    def __init__(self, data_directory: str):
        """
        Args:
            data_directory: Root directory of the unpacked export
        """
        self.data_dir = Path(data_directory)
        self._albums: Optional[List[Dict[str, Any]]] = None
        self._metadata_files: Optional[Dict[str, Path]] = None
        self._media_files: Optional[Dict[str, Path]] = None

    # ------------------------------------------------------------------
    # SourceCatalog
    # ------------------------------------------------------------------
    def list_albums(self) -> List[Album]:
        return [self._build_album(raw) for raw in self._load_albums()]

    def get_album_details(self, album_id: str) -> Album:
        for raw in self._load_albums():
            if str(raw.get('id')) == str(album_id):
                return self._build_album(raw)
        raise NotFoundError(f"Album {album_id} not found in {self.data_dir}")

    def get_photo_bytes(self, photo: Photo) -> bytes:
        media_path = self._resolve_media_path(photo)
        try:
            return media_path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"Photo file not found: {media_path}") from e
        except OSError as e:
            raise DownloadError(f"Could not read photo file {media_path}: {e}") from e

    # ------------------------------------------------------------------
    # Album loading
    # ------------------------------------------------------------------
    def _load_albums(self) -> List[Dict[str, Any]]:
        """Load albums data (single file or multi-part)."""
        if self._albums is not None:
            return self._albums

        if not self.data_dir.is_dir():
            raise NotFoundError(f"Flickr data directory not found: {self.data_dir}")

        part_files = sorted(self.data_dir.rglob('albums_part*.json'))
        if part_files:
            albums = []
            for part_file in part_files:
                albums.extend(self._read_json(part_file).get('albums', []))
            logger.debug(f"Loaded {len(albums)} albums from {len(part_files)} album files")
        else:
            albums_file = self._find_file('albums.json')
            if albums_file is None:
                raise NotFoundError(f"No albums.json found in {self.data_dir}")
            data = self._read_json(albums_file)
            if 'albums' not in data:
                raise NotFoundError(f"Invalid albums file {albums_file}: 'albums' key not found")
            albums = data['albums']

        self._albums = albums
        return albums

    def _build_album(self, raw: Dict[str, Any]) -> Album:
        photo_ids = [str(photo_id) for photo_id in raw.get('photos', [])]
        # photo ids of "0" appear in exports for albums whose cover was deleted
        photos = [self._build_photo(photo_id) for photo_id in photo_ids if photo_id != '0']
        return Album(
            id=str(raw['id']),
            title=raw.get('title', ''),
            description=raw.get('description') or '',
            photo_count=_to_int(raw.get('photo_count'), default=len(photos)),
            photos=photos,
            date_created=raw.get('created'),
            date_updated=raw.get('last_updated'),
        )

    # ------------------------------------------------------------------
    # Photo loading
    # ------------------------------------------------------------------
    def _build_photo(self, photo_id: str) -> Photo:
        metadata = self._load_photo_metadata(photo_id)
        if metadata is None:
            logger.debug(f"Metadata file not found for photo {photo_id}")
            metadata = {}

        media_file = self._index_media_files().get(photo_id)
        latitude, longitude = _parse_geo(metadata.get('geo'))

        return Photo(
            id=photo_id,
            name=metadata.get('name') or '',
            description=metadata.get('description') or '',
            url=str(media_file.relative_to(self.data_dir)) if media_file else metadata.get('original', ''),
            filename=media_file.name if media_file else None,
            latitude=latitude,
            longitude=longitude,
            tags=_parse_tags(metadata.get('tags')),
            date_taken=metadata.get('date_taken'),
            date_upload=metadata.get('date_imported'),
        )

    def _load_photo_metadata(self, photo_id: str) -> Optional[Dict[str, Any]]:
        metadata_file = self._index_metadata_files().get(photo_id)
        if metadata_file is None:
            return None
        try:
            return self._read_json(metadata_file)
        except NotFoundError as e:
            logger.warning(f"Skipping unreadable metadata for photo {photo_id}: {e}")
            return None

    def _resolve_media_path(self, photo: Photo) -> Path:
        if not photo.url:
            raise NotFoundError(f"No media file found for photo {photo.id}")
        if photo.url.startswith(('http://', 'https://')):
            # Only the metadata's remote URL is known; the export lacks the file
            raise NotFoundError(f"Media file for photo {photo.id} is not part of the export")
        try:
            return validate_file_path(photo.url, self.data_dir)
        except ValueError as e:
            raise NotFoundError(str(e)) from e

    def _index_metadata_files(self) -> Dict[str, Path]:
        if self._metadata_files is None:
            self._metadata_files = {}
            for path in self.data_dir.rglob('photo_*.json'):
                match = METADATA_FILE_PATTERN.match(path.name)
                if match:
                    self._metadata_files[match.group(1)] = path
        return self._metadata_files

    def _index_media_files(self) -> Dict[str, Path]:
        """Map photo ids to media files, using the id embedded in the file name."""
        if self._media_files is None:
            wanted = {photo_id for raw in self._load_albums()
                      for photo_id in map(str, raw.get('photos', []))}
            self._media_files = {}
            for path in sorted(self.data_dir.rglob('*')):
                if not path.is_file() or path.suffix.lower() == '.json':
                    continue
                photo_id = _extract_photo_id(path.name, wanted)
                if photo_id is None:
                    continue
                if photo_id in self._media_files:
                    logger.warning(f"Multiple files found for photo {photo_id}, "
                                   f"using {self._media_files[photo_id].name}")
                    continue
                self._media_files[photo_id] = path
        return self._media_files

    def _find_file(self, name: str) -> Optional[Path]:
        direct = self.data_dir / name
        if direct.exists():
            return direct
        return next(iter(sorted(self.data_dir.rglob(name))), None)

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError, OSError) as e:
            raise NotFoundError(f"Could not read {path}: {e}") from e


def _extract_photo_id(filename: str, wanted: set) -> Optional[str]:
    """Find a known photo id among the underscore-separated parts of a file name."""
    stem = filename.rsplit('.', 1)[0]
    for part in stem.split('_'):
        if part in wanted:
            return part
    return None


def _parse_geo(geo: Any) -> Tuple[Optional[float], Optional[float]]:
    if isinstance(geo, list):
        geo = geo[0] if geo else None
    if not isinstance(geo, dict):
        return None, None
    try:
        return float(geo['latitude']), float(geo['longitude'])
    except (KeyError, TypeError, ValueError):
        return None, None


def _parse_tags(tags: Any) -> List[str]:
    if not tags:
        return []
    parsed = []
    for tag in tags:
        if isinstance(tag, dict):
            value = tag.get('tag')
            if value:
                parsed.append(str(value))
        else:
            parsed.append(str(tag))
    return parsed


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
