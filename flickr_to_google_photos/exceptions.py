"""
Custom exceptions for the Flickr to Google Photos transfer tool.
"""


class MigrationError(Exception):
    """Base exception for migration errors."""
    pass


class ConfigurationError(MigrationError):
    """Error related to configuration."""
    pass


class AuthenticationError(MigrationError):
    """Error during authentication."""
    pass


class NotFoundError(MigrationError):
    """A source album, photo record or photo content does not exist."""
    pass


class DownloadError(MigrationError):
    """Error while fetching photo content from the source."""
    pass


class UploadError(MigrationError):
    """Error during photo upload to the destination."""
    pass


class AlbumError(MigrationError):
    """Error related to album operations (creation, membership)."""
    pass


class JobStateError(MigrationError):
    """Illegal transfer job status transition."""
    def __init__(self, message: str, current: str = None, requested: str = None):
        super().__init__(message)
        self.current = current
        self.requested = requested
