"""
Transfer orchestrator: drives albums through the chunked photo pipeline.
"""
import logging
import time
from typing import Callable, List, Optional

from tqdm import tqdm

from flickr_to_google_photos.models import Album, JobStatus, TransferJob, TransferOptions
from flickr_to_google_photos.source.base import SourceCatalog
from flickr_to_google_photos.transfer.batch_processor import BatchProcessor, chunk_photos
from flickr_to_google_photos.uploader.base import DestinationClient
from flickr_to_google_photos.utils.batching import dedupe_preserving_order
from flickr_to_google_photos.utils.job_tracker import JobTracker
from flickr_to_google_photos.utils.metrics import TransferMetrics

logger = logging.getLogger(__name__)

DRY_RUN_ALBUM_ID = 'dry_run_album'
DESCRIPTION_PREVIEW_LENGTH = 100

STATUS_ICONS = {
    JobStatus.COMPLETED: '✓',
    JobStatus.FAILED: 'X',
    JobStatus.IN_PROGRESS: '⏳',
    JobStatus.PENDING: '⏸',
}


class TransferOrchestrator:
    """
    Moves albums from a source catalog to a destination, one at a time.

    Within an album, photo failures are tolerated: the photo is skipped and
    the album carries on. Failing to create an album or to add photos to it
    fails that album's job and stops the run.
    """

    def __init__(self, source: Optional[SourceCatalog],
                 destination: Optional[DestinationClient],
                 job_tracker: Optional[JobTracker] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 show_progress: bool = True):
        """
        Args:
            source: Where albums and photo content come from
            destination: Where albums are created and photos uploaded
            job_tracker: Persists per-album progress; optional
            sleep: Called with seconds between chunks
            show_progress: Display a progress bar per album
        """
        self.source = source
        self.destination = destination
        self.job_tracker = job_tracker
        self.batch_processor = BatchProcessor(source, destination)
        self._sleep = sleep
        self.show_progress = show_progress
        self.metrics = TransferMetrics()

    def list_albums(self) -> List[Album]:
        """Log every source album and return them."""
        albums = self.source.list_albums()
        logger.info(f"Found {len(albums)} albums:")
        for index, album in enumerate(albums, 1):
            logger.info(f"{index}. {album.title}")
            logger.info(f"   ID: {album.id}")
            logger.info(f"   Photos: {album.photo_count}")
            if album.description:
                description = album.description
                if len(description) > DESCRIPTION_PREVIEW_LENGTH:
                    description = description[:DESCRIPTION_PREVIEW_LENGTH] + '...'
                logger.info(f"   Description: {description}")
        return albums

    def transfer_albums(self, options: TransferOptions) -> None:
        """
        Transfer one album (``options.album_id``) or all of them.

        Raises:
            MigrationError: From credential checks, album lookup, album
                creation or the album membership call
        """
        if not options.dry_run:
            self.destination.check_credentials()

        if options.album_id:
            albums = [self.source.get_album_details(options.album_id)]
        else:
            albums = self.source.list_albums()

        mode = " (dry run)" if options.dry_run else ""
        logger.info(f"Transferring {len(albums)} album(s){mode}")

        try:
            for album in albums:
                self._transfer_album(album, options)
        finally:
            self.metrics.log_summary()

    def _transfer_album(self, album: Album, options: TransferOptions) -> None:
        logger.info(f"📂 Transferring album: {album.title} ({len(album.photos)} photos)")
        if len(album.photos) != album.photo_count:
            logger.debug(f"Album {album.id} declares {album.photo_count} photos, "
                         f"{len(album.photos)} found")

        job = self.job_tracker.create_job(album) if self.job_tracker else None
        album_metrics = self.metrics.start_album(album.id, album.title)

        try:
            if album.description and album.description.strip():
                logger.warning(f"⚠️  Album description for '{album.title}' cannot be "
                               f"transferred: Google Photos does not support album descriptions")

            if options.dry_run:
                logger.info(f"[DRY RUN] Would create album: {album.title}")
                destination_album_id = DRY_RUN_ALBUM_ID
            else:
                destination_album = self.destination.create_album(album.title)
                destination_album_id = destination_album.id
                logger.info(f"Created album '{album.title}' ({destination_album_id})")

            photo_ids = []
            total = len(album.photos)
            with tqdm(total=total, desc=f"Album {album.title}", unit="photo",
                      disable=not self.show_progress) as progress:
                for index, chunk in enumerate(chunk_photos(album.photos, options.batch_size)):
                    if index > 0 and options.sleep_time_between_batches > 0:
                        self._sleep(options.sleep_time_between_batches / 1000)

                    photo_ids.extend(self.batch_processor.process_chunk(
                        chunk, dry_run=options.dry_run, metrics=album_metrics))
                    progress.update(len(chunk))

                    if job is not None:
                        self.job_tracker.record_progress(
                            job, index * options.batch_size + len(chunk))

            photo_ids = dedupe_preserving_order(photo_ids)
            if options.dry_run:
                logger.info(f"[DRY RUN] Would add {len(photo_ids)} photos to album {album.title}")
            elif not photo_ids:
                logger.warning(f"⚠️  No photos were uploaded for album {album.title}")
            else:
                self.destination.add_photos_to_album(destination_album_id, photo_ids)
                logger.info(f"Added {len(photo_ids)} photos to album {album.title}")

        except Exception as e:
            album_metrics.finish(succeeded=False)
            logger.error(f"✗ Failed to transfer album {album.title}: {e}")
            if job is not None:
                self.job_tracker.fail_job(job, str(e))
            raise

        album_metrics.finish(succeeded=True)
        if job is not None:
            self.job_tracker.complete_job(job)
        logger.info(f"✓ Album {album.title} transferred "
                    f"({album_metrics.photos_failed} photo(s) failed)")

    def check_transfer_status(self, job_id: Optional[str] = None):
        """
        Log stored job records.

        Returns:
            The requested job (None if unknown) when ``job_id`` is given,
            otherwise every job, newest first
        """
        if self.job_tracker is None:
            logger.warning("Job tracking is not enabled")
            return None if job_id else []

        if job_id:
            job = self.job_tracker.get_job(job_id)
            if job is None:
                logger.error(f"Job {job_id} not found")
                return None
            self._log_job(job)
            return job

        jobs = self.job_tracker.list_jobs()
        if not jobs:
            logger.info("No transfer jobs found")
            return jobs
        logger.info(f"Found {len(jobs)} transfer jobs:")
        for job in jobs:
            self._log_job(job)
        return jobs

    @staticmethod
    def _log_job(job: TransferJob) -> None:
        icon = STATUS_ICONS.get(job.status, '❓')
        logger.info(f"{icon} {job.album_title} ({job.id})")
        logger.info(f"   Progress: {job.processed_photos}/{job.total_photos} photos")
        logger.info(f"   Status: {job.status.value}")
        logger.info(f"   Started: {job.start_time.isoformat()}")
        if job.end_time:
            logger.info(f"   Ended: {job.end_time.isoformat()}")
        if job.error:
            logger.info(f"   Error: {job.error}")
