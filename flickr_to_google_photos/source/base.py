"""
Contract for photo sources.
"""
from abc import ABC, abstractmethod
from typing import List

from flickr_to_google_photos.models import Album, Photo


class SourceCatalog(ABC):
    """
    Read-only view of the albums and photos to migrate.

    The transfer pipeline depends only on this interface, so a live API
    reader and a bulk-export reader are interchangeable.
    """

    @abstractmethod
    def list_albums(self) -> List[Album]:
        """Return every album with its photo list."""

    @abstractmethod
    def get_album_details(self, album_id: str) -> Album:
        """
        Return a single album.

        Raises:
            NotFoundError: If no album has this id
        """

    @abstractmethod
    def get_photo_bytes(self, photo: Photo) -> bytes:
        """
        Return the photo's content.

        Raises:
            NotFoundError: If the content is missing
        """
