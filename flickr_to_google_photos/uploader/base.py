"""
Contract for photo destinations.
"""
from abc import ABC, abstractmethod
from typing import List

from flickr_to_google_photos.models import DestinationAlbum

# Largest number of media item ids the destination accepts per membership call
MAX_ALBUM_BATCH_SIZE = 50


class DestinationClient(ABC):
    """Write-side operations the transfer pipeline needs from a destination."""

    def check_credentials(self) -> None:
        """
        Fail before any album is touched if the client cannot authenticate.

        Raises:
            ConfigurationError: If client credentials are missing
            AuthenticationError: If no usable token is available
        """

    @abstractmethod
    def create_album(self, title: str) -> DestinationAlbum:
        """Create an album holding only a title."""

    @abstractmethod
    def upload_photo(self, data: bytes, filename: str, description: str = "") -> str:
        """Upload one photo and return the destination-assigned photo id."""

    @abstractmethod
    def add_photos_to_album(self, album_id: str, photo_ids: List[str]) -> None:
        """
        Add photos to an album.

        Implementations deduplicate ``photo_ids`` and submit them in windows
        of at most ``MAX_ALBUM_BATCH_SIZE``, in order.
        """
