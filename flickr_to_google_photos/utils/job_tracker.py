"""
Job tracking for transfer progress inspection and manual resumption.
"""
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from flickr_to_google_photos.models import Album, JobStatus, TransferJob
from flickr_to_google_photos.utils.security import validate_file_path

logger = logging.getLogger(__name__)

DEFAULT_JOB_DIR = '.transfer-jobs'


class JobTracker:
    """
    Stores one JSON record per album transfer job.

    Records are rewritten at job creation, after every chunk and at the
    terminal state, so after an interruption the stored record reflects the
    last completed chunk.
    """

    def __init__(self, storage_dir: Path):
        """
        Initialize job tracker.

        Args:
            storage_dir: Directory holding the job files
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _job_path(self, job_id: str) -> Path:
        """
        Resolve the record file for ``job_id`` inside the storage directory.

        Raises:
            ValueError: If the id would resolve outside the storage directory
        """
        return validate_file_path(f"{job_id}.json", self.storage_dir)

    def save_job(self, job: TransferJob) -> None:
        """
        Write the job record to disk.

        Records only support status inspection, so a failed write is logged
        and the transfer carries on.
        """
        try:
            job_path = self._job_path(job.id)
            with open(job_path, 'w') as f:
                json.dump(job.to_dict(), f, indent=2)
        except (OSError, ValueError) as e:
            logger.error(f"❌ Could not save job record {job.id}: {e}")
            logger.error("   Status for this job may be stale. Check file permissions and disk space.")
            return
        logger.debug(f"Job saved: {job.id} -> {job.status.value} "
                     f"({job.processed_photos}/{job.total_photos})")

    @staticmethod
    def generate_job_id(album_id: str) -> str:
        return f"job_{int(time.time() * 1000)}_{album_id}"

    def create_job(self, album: Album) -> TransferJob:
        """Create and persist a pending job for ``album``."""
        job = TransferJob(
            id=self.generate_job_id(album.id),
            album_id=album.id,
            album_title=album.title,
            total_photos=len(album.photos),
        )
        self.save_job(job)
        return job

    def record_progress(self, job: TransferJob, chunk_end_index: int) -> None:
        """
        Record that photos up to ``chunk_end_index`` have been processed.

        Args:
            job: Job to update
            chunk_end_index: Index one past the last photo of the finished chunk
        """
        processed = min(chunk_end_index, job.total_photos)
        job.transition_to(JobStatus.IN_PROGRESS)
        job.processed_photos = max(job.processed_photos, processed)
        self.save_job(job)

    def complete_job(self, job: TransferJob) -> None:
        """Mark job as completed."""
        job.transition_to(JobStatus.COMPLETED)
        job.end_time = datetime.now()
        self.save_job(job)

    def fail_job(self, job: TransferJob, error: str) -> None:
        """Mark job as failed with the triggering error."""
        job.transition_to(JobStatus.FAILED)
        job.error = error
        job.end_time = datetime.now()
        self.save_job(job)

    def get_job(self, job_id: str) -> Optional[TransferJob]:
        """Load a single job, or None if it does not exist or cannot be read."""
        try:
            job_path = self._job_path(job_id)
        except ValueError as e:
            logger.warning(f"⚠️  Invalid job id {job_id!r}: {e}")
            return None
        if not job_path.exists():
            return None
        return self._load_job(job_path)

    def list_jobs(self) -> List[TransferJob]:
        """Load all jobs, newest first."""
        jobs = []
        for job_path in self.storage_dir.glob('*.json'):
            job = self._load_job(job_path)
            if job is not None:
                jobs.append(job)
        return sorted(jobs, key=lambda job: job.start_time, reverse=True)

    def _load_job(self, job_path: Path) -> Optional[TransferJob]:
        try:
            with open(job_path, 'r') as f:
                return TransferJob.from_dict(json.load(f))
        except (json.JSONDecodeError, IOError, KeyError, ValueError) as e:
            logger.warning(f"⚠️  Could not load job record {job_path}: {e}")
            return None
