"""
Metrics tracking for transfer runs.
"""
import time
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class AlbumMetrics:
    """Counters for a single album transfer."""
    album_id: str
    album_title: str
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    photos_attempted: int = 0
    photos_uploaded: int = 0
    photos_failed: int = 0
    bytes_uploaded: int = 0
    succeeded: Optional[bool] = None
    errors: List[str] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Get duration in seconds."""
        if self.end_time:
            return self.end_time - self.start_time
        return time.time() - self.start_time

    @property
    def success_rate(self) -> float:
        """Get photo success rate as percentage."""
        if self.photos_attempted == 0:
            return 0.0
        return (self.photos_uploaded / self.photos_attempted) * 100

    def record_photo(self, successful: bool = True, bytes_uploaded: int = 0,
                     error: Optional[str] = None) -> None:
        self.photos_attempted += 1
        if successful:
            self.photos_uploaded += 1
            self.bytes_uploaded += bytes_uploaded
        else:
            self.photos_failed += 1
            if error:
                self.errors.append(error)

    def finish(self, succeeded: bool) -> None:
        """Mark album as finished."""
        self.end_time = time.time()
        self.succeeded = succeeded

    def to_dict(self) -> Dict:
        return {
            'album_id': self.album_id,
            'album_title': self.album_title,
            'duration_seconds': self.duration,
            'photos_attempted': self.photos_attempted,
            'photos_uploaded': self.photos_uploaded,
            'photos_failed': self.photos_failed,
            'bytes_uploaded': self.bytes_uploaded,
            'success_rate_percent': self.success_rate,
            'succeeded': self.succeeded,
            'error_count': len(self.errors),
        }


class TransferMetrics:
    """Tracks metrics across all albums of one run."""

    def __init__(self):
        self.albums: Dict[str, AlbumMetrics] = {}
        self.start_time = time.time()

    def start_album(self, album_id: str, album_title: str) -> AlbumMetrics:
        metrics = AlbumMetrics(album_id=album_id, album_title=album_title)
        self.albums[album_id] = metrics
        return metrics

    def get_summary(self) -> Dict:
        """Get summary of all metrics."""
        albums = list(self.albums.values())
        attempted = sum(a.photos_attempted for a in albums)
        uploaded = sum(a.photos_uploaded for a in albums)
        return {
            'total_duration_seconds': time.time() - self.start_time,
            'albums_total': len(albums),
            'albums_succeeded': sum(1 for a in albums if a.succeeded),
            'albums_failed': sum(1 for a in albums if a.succeeded is False),
            'photos_attempted': attempted,
            'photos_uploaded': uploaded,
            'photos_failed': sum(a.photos_failed for a in albums),
            'bytes_uploaded': sum(a.bytes_uploaded for a in albums),
            'overall_success_rate_percent': (uploaded / attempted * 100) if attempted > 0 else 0,
            'albums': {a.album_id: a.to_dict() for a in albums},
        }

    def log_summary(self) -> None:
        summary = self.get_summary()
        logger.info(
            f"Transfer summary: {summary['albums_succeeded']}/{summary['albums_total']} albums, "
            f"{summary['photos_uploaded']}/{summary['photos_attempted']} photos "
            f"({summary['photos_failed']} failed, "
            f"{summary['bytes_uploaded'] / (1024 * 1024):.1f} MB) "
            f"in {summary['total_duration_seconds']:.1f}s"
        )
