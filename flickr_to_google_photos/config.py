"""
Configuration management using dataclasses for type safety and validation.
"""
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any
import yaml
import json
import os
import jsonschema
import logging

from flickr_to_google_photos.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'config.yaml'
APP_NAME = 'flickr-to-google-photos'


def default_token_file() -> str:
    """
    Per-user location for the OAuth token.

    The token file holds a refresh token, so it lives in the user's config
    directory rather than next to the project.
    """
    xdg_config_home = os.environ.get('XDG_CONFIG_HOME')
    base_dir = Path(xdg_config_home) if xdg_config_home else (Path.home() / '.config')
    return str(base_dir / APP_NAME / 'token.json')


@dataclass
class GooglePhotosConfig:
    """Google Photos (destination) configuration."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    token_file: Optional[str] = None
    redirect_port: int = 3000
    oauth_timeout_seconds: int = 300
    request_timeout_seconds: int = 360

    def __post_init__(self):
        """Apply environment variable overrides and defaults."""
        if not self.client_id:
            self.client_id = os.getenv('GOOGLE_CLIENT_ID')
        if not self.client_secret:
            self.client_secret = os.getenv('GOOGLE_CLIENT_SECRET')
        if not self.token_file:
            self.token_file = default_token_file()
        if not 0 < self.redirect_port < 65536:
            raise ValueError(f"Invalid redirect_port: {self.redirect_port}")

    @property
    def has_client_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def token_path(self) -> Path:
        return Path(self.token_file).expanduser()


@dataclass
class FlickrConfig:
    """Flickr (source) configuration."""
    source: str = "export"  # 'export' or 'api'
    data_directory: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    user_id: Optional[str] = None

    def __post_init__(self):
        """Validate source selection and apply environment overrides."""
        if self.source not in ('export', 'api'):
            raise ValueError(f"Invalid flickr source: {self.source}. Must be 'export' or 'api'")
        if not self.data_directory:
            self.data_directory = os.getenv('FLICKR_DATA_DIRECTORY', './flickr-export')
        if not self.api_key:
            self.api_key = os.getenv('FLICKR_API_KEY')
        if not self.api_secret:
            self.api_secret = os.getenv('FLICKR_API_SECRET')


@dataclass
class TransferConfig:
    """Transfer pipeline defaults."""
    batch_size: int = 10
    sleep_time_between_batches: int = 0  # milliseconds
    job_storage_dir: str = ".transfer-jobs"
    max_retries: int = 3
    retry_delay: float = 1.0

    def __post_init__(self):
        """Validate transfer configuration."""
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.sleep_time_between_batches < 0:
            raise ValueError("sleep_time_between_batches must not be negative")
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")

    @property
    def job_storage_path(self) -> Path:
        return Path(self.job_storage_dir)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = "transfer.log"
    json_format: bool = False
    rotate: bool = True
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    separate_error_log: bool = True

    def __post_init__(self):
        """Validate logging level and rotation settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid logging level: {self.level}. Must be one of {valid_levels}")
        if self.max_bytes < 1:
            raise ValueError("logging.max_bytes must be at least 1")
        if self.backup_count < 0:
            raise ValueError("logging.backup_count must not be negative")


@dataclass
class AppConfig:
    """Main application configuration."""
    google_photos: GooglePhotosConfig = field(default_factory=GooglePhotosConfig)
    flickr: FlickrConfig = field(default_factory=FlickrConfig)
    transfer: TransferConfig = field(default_factory=TransferConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str = DEFAULT_CONFIG_PATH) -> 'AppConfig':
        """
        Load configuration, falling back to defaults when the file is absent.

        Raises:
            ConfigurationError: If the file exists but is invalid
        """
        if not Path(config_path).exists():
            logger.debug(f"No configuration file at {config_path}, using defaults")
            try:
                return cls.from_dict(cls._apply_env_overrides({}))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(str(e)) from e
        return cls.from_yaml(config_path)

    @classmethod
    def from_yaml(cls, config_path: str, validate: bool = True) -> 'AppConfig':
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file
            validate: Whether to validate against JSON schema

        Returns:
            AppConfig instance

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        try:
            with open(config_path, 'r') as f:
                config_dict = yaml.safe_load(f)
        except (yaml.YAMLError, IOError, OSError) as e:
            raise ConfigurationError(f"Failed to load configuration file '{config_path}': {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Configuration file '{config_path}' is empty or invalid")

        if validate:
            cls._validate_schema(config_dict)

        config_dict = cls._apply_env_overrides(config_dict)

        try:
            return cls.from_dict(config_dict)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration in '{config_path}': {e}") from e

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'AppConfig':
        """
        Create configuration from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            AppConfig instance
        """
        return cls(
            google_photos=GooglePhotosConfig(**(config_dict.get('google_photos') or {})),
            flickr=FlickrConfig(**(config_dict.get('flickr') or {})),
            transfer=TransferConfig(**(config_dict.get('transfer') or {})),
            logging=LoggingConfig(**(config_dict.get('logging') or {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_yaml(self, config_path: str) -> Path:
        """Write configuration to a YAML file readable only by the owner."""
        path = Path(config_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        try:
            os.chmod(path, 0o600)
        except OSError as e:
            logger.warning(f"Could not restrict permissions on {path}: {e}")
        return path

    @staticmethod
    def _validate_schema(config_dict: Dict[str, Any]) -> None:
        """Validate configuration against JSON schema."""
        try:
            schema_path = Path(__file__).parent / 'config_schema.json'
            if schema_path.exists():
                with open(schema_path, 'r') as f:
                    schema = json.load(f)

                jsonschema.validate(instance=config_dict, schema=schema)
                logger.debug("Configuration validated against schema")
        except jsonschema.ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e.message}\n"
                f"Path: {'.'.join(str(p) for p in e.path)}"
            ) from e
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load configuration schema for validation: {e}")

    @staticmethod
    def _apply_env_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration dictionary."""
        config = json.loads(json.dumps(config_dict))

        overrides = {
            ('google_photos', 'client_id'): 'GOOGLE_CLIENT_ID',
            ('google_photos', 'client_secret'): 'GOOGLE_CLIENT_SECRET',
            ('flickr', 'data_directory'): 'FLICKR_DATA_DIRECTORY',
            ('flickr', 'api_key'): 'FLICKR_API_KEY',
            ('flickr', 'api_secret'): 'FLICKR_API_SECRET',
        }
        for (section, key), env_name in overrides.items():
            value = os.getenv(env_name)
            if value:
                config.setdefault(section, {})
                if config[section] is None:
                    config[section] = {}
                config[section][key] = value

        return config
