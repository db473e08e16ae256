"""
Flickr to Google Photos Transfer Tool

Transfers Flickr albums (from a bulk data export or the live Flickr API)
into Google Photos albums, carrying photo titles and descriptions across.
"""
__version__ = "1.0.0"

# Import main classes for easy access
from flickr_to_google_photos.config import AppConfig
from flickr_to_google_photos.exceptions import (
    MigrationError,
    ConfigurationError,
    AuthenticationError,
    NotFoundError,
    DownloadError,
    UploadError,
    AlbumError,
    JobStateError,
)

__all__ = [
    '__version__',
    'AppConfig',
    'MigrationError',
    'ConfigurationError',
    'AuthenticationError',
    'NotFoundError',
    'DownloadError',
    'UploadError',
    'AlbumError',
    'JobStateError',
]
