"""
Tests for configuration validation.
"""
import os
import stat

import pytest
import yaml

from flickr_to_google_photos.config import (
    AppConfig,
    FlickrConfig,
    GooglePhotosConfig,
    LoggingConfig,
    TransferConfig,
    default_token_file,
)
from flickr_to_google_photos.exceptions import ConfigurationError


class TestGooglePhotosConfig:
    """Tests for GooglePhotosConfig."""

    def test_defaults(self, tmp_path):
        config = GooglePhotosConfig()
        assert config.client_id is None
        assert config.redirect_port == 3000
        assert config.oauth_timeout_seconds == 300
        assert config.token_file == str(tmp_path / 'xdg' / 'flickr-to-google-photos' / 'token.json')
        assert not config.has_client_credentials

    def test_env_credentials(self, monkeypatch):
        monkeypatch.setenv('GOOGLE_CLIENT_ID', 'env_id')
        monkeypatch.setenv('GOOGLE_CLIENT_SECRET', 'env_secret')
        config = GooglePhotosConfig()
        assert config.client_id == 'env_id'
        assert config.has_client_credentials

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="redirect_port"):
            GooglePhotosConfig(redirect_port=70000)

    def test_default_token_file_without_xdg(self, monkeypatch, tmp_path):
        monkeypatch.delenv('XDG_CONFIG_HOME')
        monkeypatch.setenv('HOME', str(tmp_path))
        assert default_token_file().endswith(os.path.join('.config', 'flickr-to-google-photos', 'token.json'))


class TestFlickrConfig:
    """Tests for FlickrConfig."""

    def test_defaults(self):
        config = FlickrConfig()
        assert config.source == 'export'
        assert config.data_directory == './flickr-export'

    def test_invalid_source(self):
        with pytest.raises(ValueError, match="Invalid flickr source"):
            FlickrConfig(source='ftp')

    def test_env_data_directory(self, monkeypatch):
        monkeypatch.setenv('FLICKR_DATA_DIRECTORY', '/data/flickr')
        assert FlickrConfig().data_directory == '/data/flickr'


class TestTransferConfig:
    """Tests for TransferConfig."""

    def test_defaults(self):
        config = TransferConfig()
        assert config.batch_size == 10
        assert config.sleep_time_between_batches == 0
        assert str(config.job_storage_path) == '.transfer-jobs'

    def test_rejects_batch_size_below_one(self):
        with pytest.raises(ValueError, match="batch_size"):
            TransferConfig(batch_size=0)

    def test_rejects_negative_sleep(self):
        with pytest.raises(ValueError):
            TransferConfig(sleep_time_between_batches=-5)


class TestLoggingConfig:
    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid logging level"):
            LoggingConfig(level="LOUD")

    def test_rotation_defaults(self):
        config = LoggingConfig()
        assert config.rotate is True
        assert config.max_bytes == 10 * 1024 * 1024
        assert config.backup_count == 5
        assert config.json_format is False

    def test_invalid_max_bytes(self):
        with pytest.raises(ValueError, match="max_bytes"):
            LoggingConfig(max_bytes=0)

    def test_schema_rejects_unknown_logging_key(self, tmp_path):
        config_path = tmp_path / 'config.yaml'
        config_path.write_text(yaml.dump({'logging': {'colour': True}}))
        with pytest.raises(ConfigurationError):
            AppConfig.from_yaml(str(config_path))

    def test_logging_section_from_yaml(self, tmp_path):
        config_path = tmp_path / 'config.yaml'
        config_path.write_text(yaml.dump({'logging': {
            'json_format': True, 'rotate': False, 'backup_count': 2}}))
        config = AppConfig.from_yaml(str(config_path))
        assert config.logging.json_format is True
        assert config.logging.rotate is False
        assert config.logging.backup_count == 2


class TestAppConfig:
    """Tests for AppConfig loading and validation."""

    def test_from_yaml(self, config_file, sample_config):
        config = AppConfig.from_yaml(str(config_file))
        assert config.google_photos.client_id == 'test_client_id'
        assert config.flickr.data_directory == sample_config['flickr']['data_directory']
        assert config.transfer.max_retries == 0
        assert config.logging.file is None

    def test_load_missing_file_uses_defaults(self, tmp_path):
        config = AppConfig.load(str(tmp_path / 'missing.yaml'))
        assert config.transfer.batch_size == 10
        assert config.flickr.source == 'export'

    def test_empty_file_uses_defaults(self, tmp_path):
        config_path = tmp_path / 'config.yaml'
        config_path.write_text('')
        config = AppConfig.from_yaml(str(config_path))
        assert config.transfer.batch_size == 10

    def test_schema_rejects_zero_batch_size(self, tmp_path, sample_config):
        sample_config['transfer']['batch_size'] = 0
        config_path = tmp_path / 'config.yaml'
        config_path.write_text(yaml.dump(sample_config))
        with pytest.raises(ConfigurationError, match="batch_size"):
            AppConfig.from_yaml(str(config_path))

    def test_schema_rejects_unknown_keys(self, tmp_path, sample_config):
        sample_config['transfer']['parallel_uploads'] = 4
        config_path = tmp_path / 'config.yaml'
        config_path.write_text(yaml.dump(sample_config))
        with pytest.raises(ConfigurationError):
            AppConfig.from_yaml(str(config_path))

    def test_dataclass_validation_without_schema(self, sample_config):
        sample_config['transfer']['batch_size'] = 0
        with pytest.raises(ValueError):
            AppConfig.from_dict(sample_config)

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / 'config.yaml'
        config_path.write_text('transfer: [unclosed')
        with pytest.raises(ConfigurationError, match="Failed to load"):
            AppConfig.from_yaml(str(config_path))

    def test_env_overrides_file_values(self, config_file, monkeypatch):
        monkeypatch.setenv('GOOGLE_CLIENT_ID', 'from_env')
        monkeypatch.setenv('FLICKR_API_KEY', 'flickr_key')
        config = AppConfig.from_yaml(str(config_file))
        assert config.google_photos.client_id == 'from_env'
        assert config.flickr.api_key == 'flickr_key'

    def test_to_yaml_round_trip_and_permissions(self, tmp_path, config_file):
        config = AppConfig.from_yaml(str(config_file))
        out_path = tmp_path / 'out' / 'config.yaml'

        config.to_yaml(str(out_path))

        assert stat.S_IMODE(os.stat(out_path).st_mode) == 0o600
        reloaded = AppConfig.from_yaml(str(out_path))
        assert reloaded == config
