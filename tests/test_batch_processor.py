"""
Tests for the per-chunk photo pipeline.
"""
import logging

import pytest

from flickr_to_google_photos.exceptions import NotFoundError, UploadError
from flickr_to_google_photos.models import Photo
from flickr_to_google_photos.transfer.batch_processor import (
    BatchProcessor,
    chunk_photos,
    create_google_description,
    upload_filename,
)
from flickr_to_google_photos.utils.metrics import AlbumMetrics


class TestCreateGoogleDescription:
    """Tests for create_google_description."""

    def test_name_and_description(self):
        assert create_google_description("Photo 1", "Description 1") == "Photo 1 - Description 1"

    def test_name_only(self):
        assert create_google_description("Photo 1", "") == "Photo 1"

    def test_description_only(self):
        assert create_google_description("", "Description 1") == "Description 1"

    def test_neither(self):
        assert create_google_description("", "") == ""

    def test_none_values(self):
        assert create_google_description(None, None) == ""


class TestChunkPhotos:
    def test_chunk_count(self, photo_factory):
        chunks = list(chunk_photos(photo_factory(25), 10))
        assert [len(c) for c in chunks] == [10, 10, 5]


class TestUploadFilename:
    def test_uses_extension_of_content(self):
        assert upload_filename(Photo(id='42', url='media/img_42_o.png')) == '42.png'

    def test_defaults_to_jpeg(self):
        assert upload_filename(Photo(id='42', url='')) == '42.jpg'
        assert upload_filename(Photo(id='42', url='media/img_42_o.jpeg')) == '42.jpg'

    def test_prefers_export_filename(self):
        photo = Photo(id='42', url='https://example.com/42', filename='x_42_o.gif')
        assert upload_filename(photo) == '42.gif'


class TestBatchProcessor:
    """Tests for BatchProcessor.process_chunk."""

    def test_uploads_every_photo_in_order(self, mock_source, mock_destination, photo_factory):
        photos = photo_factory(3)
        processor = BatchProcessor(mock_source, mock_destination)

        ids = processor.process_chunk(photos)

        assert ids == ['media_1', 'media_2', 'media_3']
        first_call = mock_destination.upload_photo.call_args_list[0]
        assert first_call.args == (b'image-bytes', 'p1.jpg', 'Photo 1')

    def test_failed_fetch_skips_photo(self, mock_source, mock_destination, photo_factory, caplog):
        photos = photo_factory(5)
        mock_source.get_photo_bytes.side_effect = [
            b'1', NotFoundError('missing'), b'3', b'4', b'5'
        ]
        metrics = AlbumMetrics(album_id='a', album_title='A')
        processor = BatchProcessor(mock_source, mock_destination)

        with caplog.at_level(logging.WARNING):
            ids = processor.process_chunk(photos, metrics=metrics)

        assert len(ids) == 4
        assert mock_destination.upload_photo.call_count == 4
        assert metrics.photos_failed == 1
        assert metrics.photos_uploaded == 4
        assert metrics.bytes_uploaded == 4
        assert any('p2' in record.message and 'missing' in record.message
                   for record in caplog.records)

    def test_failed_upload_skips_photo(self, mock_source, mock_destination, photo_factory):
        mock_destination.upload_photo.side_effect = [UploadError('rejected'), 'media_x']
        processor = BatchProcessor(mock_source, mock_destination)

        ids = processor.process_chunk(photo_factory(2))

        assert ids == ['media_x']

    def test_all_failures_return_empty_list(self, mock_source, mock_destination, photo_factory):
        mock_source.get_photo_bytes.side_effect = RuntimeError('disk gone')
        processor = BatchProcessor(mock_source, mock_destination)
        assert processor.process_chunk(photo_factory(3)) == []

    def test_dry_run_makes_no_calls(self, mock_source, mock_destination, photo_factory, caplog):
        processor = BatchProcessor(mock_source, mock_destination)

        with caplog.at_level(logging.INFO):
            ids = processor.process_chunk(photo_factory(2), dry_run=True)

        assert ids == ['dry_run_p1', 'dry_run_p2']
        mock_source.get_photo_bytes.assert_not_called()
        mock_destination.upload_photo.assert_not_called()
        would = [r.message for r in caplog.records if 'Would transfer' in r.message]
        assert would == ['[DRY RUN] Would transfer: Photo 1', '[DRY RUN] Would transfer: Photo 2']
