"""
Per-chunk photo pipeline: fetch from the source, upload to the destination.
"""
import logging
import mimetypes
from typing import Iterator, List, Optional, Sequence

from flickr_to_google_photos.models import Photo
from flickr_to_google_photos.source.base import SourceCatalog
from flickr_to_google_photos.uploader.base import DestinationClient
from flickr_to_google_photos.utils.batching import chunked
from flickr_to_google_photos.utils.metrics import AlbumMetrics

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = 'image/jpeg'
DRY_RUN_PHOTO_PREFIX = 'dry_run_'


def create_google_description(name: str, description: str) -> str:
    """
    Combine a photo's title and description into one destination description.

    >>> create_google_description("Photo 1", "Description 1")
    'Photo 1 - Description 1'
    >>> create_google_description("Photo 1", "")
    'Photo 1'
    """
    name = name or ""
    description = description or ""
    if name and description:
        return f"{name} - {description}"
    return name or description


def chunk_photos(photos: Sequence[Photo], batch_size: int) -> Iterator[Sequence[Photo]]:
    return chunked(photos, batch_size)


def upload_filename(photo: Photo) -> str:
    """Name the upload ``<photo_id><ext>`` with the extension of its MIME type."""
    mime_type, _ = mimetypes.guess_type(photo.filename or photo.url or '')
    mime_type = mime_type or DEFAULT_MIME_TYPE
    extension = mimetypes.guess_extension(mime_type) or '.jpg'
    # guess_extension returns .jpe on some platforms
    if mime_type == 'image/jpeg':
        extension = '.jpg'
    return f"{photo.id}{extension}"


class BatchProcessor:
    """
    Transfers one chunk of photos at a time.

    Photos are handled strictly in order. A failure to fetch or upload one
    photo is logged and the photo skipped; it never fails the chunk.
    """

    def __init__(self, source: SourceCatalog, destination: DestinationClient):
        self.source = source
        self.destination = destination

    def process_chunk(self, photos: Sequence[Photo], dry_run: bool = False,
                      metrics: Optional[AlbumMetrics] = None) -> List[str]:
        """
        Transfer a chunk of photos.

        Args:
            photos: Photos of this chunk, in album order
            dry_run: Log what would be transferred without any network access
            metrics: Album counters to update

        Returns:
            Destination photo ids of the photos that made it, in order
        """
        photo_ids = []
        for photo in photos:
            if dry_run:
                logger.info(f"[DRY RUN] Would transfer: {photo.name or photo.id}")
                photo_ids.append(f"{DRY_RUN_PHOTO_PREFIX}{photo.id}")
                continue

            try:
                photo_id, size = self._transfer_photo(photo)
            except Exception as e:
                logger.warning(f"⚠️  Failed to transfer photo {photo.id} "
                               f"({photo.name or 'untitled'}): {e}")
                if metrics is not None:
                    metrics.record_photo(successful=False, error=f"{photo.id}: {e}")
                continue

            photo_ids.append(photo_id)
            if metrics is not None:
                metrics.record_photo(successful=True, bytes_uploaded=size)
        return photo_ids

    def _transfer_photo(self, photo: Photo):
        data = self.source.get_photo_bytes(photo)
        description = create_google_description(photo.name, photo.description)
        filename = upload_filename(photo)

        if photo.has_location:
            # The Library API offers no way to set a location on upload
            logger.debug(f"Location ({photo.latitude}, {photo.longitude}) of photo "
                         f"{photo.id} cannot be written to Google Photos")

        photo_id = self.destination.upload_photo(data, filename, description)
        logger.debug(f"Uploaded {filename} as {photo_id}")
        return photo_id, len(data)
