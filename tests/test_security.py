"""
Tests for security utilities.
"""
import pytest

from flickr_to_google_photos.utils.security import sanitize_filename, validate_file_path


class TestValidateFilePath:
    """Tests for validate_file_path function."""

    def test_valid_relative_path(self, tmp_path):
        (tmp_path / 'media').mkdir()
        target = tmp_path / 'media' / 'photo_1.jpg'
        target.write_bytes(b'x')
        assert validate_file_path('media/photo_1.jpg', tmp_path) == target.resolve()

    def test_path_traversal_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="within base directory"):
            validate_file_path('../../etc/passwd', tmp_path)

    def test_absolute_path_outside_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            validate_file_path('/etc/passwd', tmp_path)

    def test_empty_path_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="cannot be empty"):
            validate_file_path('', tmp_path)


class TestSanitizeFilename:
    """Tests for sanitize_filename function."""

    def test_normal_filename(self):
        assert sanitize_filename('1001.jpg') == '1001.jpg'

    def test_strips_directories(self):
        assert sanitize_filename('../secret/1001.jpg') == '1001.jpg'

    def test_replaces_header_breaking_characters(self):
        assert sanitize_filename('a\r\nb;c.jpg') == 'a__b_c.jpg'

    def test_truncates_long_names(self):
        result = sanitize_filename('x' * 300 + '.jpg')
        assert len(result) == 254
        assert result.endswith('.jpg')
