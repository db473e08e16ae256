"""
Data model shared by the source catalogs, the destination client and the
transfer pipeline.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from flickr_to_google_photos.exceptions import JobStateError


@dataclass
class Photo:
    """A single source photo."""
    id: str
    name: str = ""
    description: str = ""
    url: str = ""  # local path or remote URL of the content
    filename: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    # Source-only attributes, carried but not used by the pipeline
    tags: List[str] = field(default_factory=list)
    width: int = 0
    height: int = 0
    date_taken: Optional[str] = None
    date_upload: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class Album:
    """
    A source album.

    ``photo_count`` is what the source declares; ``photos`` is what could be
    enumerated. The two may disagree and only ``photos`` is transferred.
    """
    id: str
    title: str
    description: str = ""
    photo_count: int = 0
    photos: List[Photo] = field(default_factory=list)
    date_created: Optional[str] = None
    date_updated: Optional[str] = None


@dataclass
class DestinationAlbum:
    """Album as returned by the destination after creation."""
    id: str
    title: str
    media_items_count: int = 0
    is_writeable: bool = False
    cover_photo_base_url: Optional[str] = None


@dataclass
class TransferOptions:
    """Options for a single transfer run."""
    album_id: Optional[str] = None
    dry_run: bool = False
    batch_size: int = 10
    sleep_time_between_batches: int = 0  # milliseconds
    data_directory: Optional[str] = None

    def __post_init__(self):
        """Validate transfer options."""
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.sleep_time_between_batches < 0:
            raise ValueError("sleep_time_between_batches must not be negative")


class JobStatus(Enum):
    """Lifecycle states of a transfer job."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    def can_transition_to(self, new_status: 'JobStatus') -> bool:
        return new_status in _ALLOWED_TRANSITIONS[self]


# An album with no photos goes straight from pending to completed, and an
# album whose creation fails goes straight from pending to failed.
_ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.IN_PROGRESS, JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.IN_PROGRESS: {JobStatus.IN_PROGRESS, JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


@dataclass
class TransferJob:
    """Durable record of one album's transfer progress."""
    id: str
    album_id: str
    album_title: str
    total_photos: int
    status: JobStatus = JobStatus.PENDING
    processed_photos: int = 0
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    error: Optional[str] = None

    def transition_to(self, new_status: JobStatus) -> None:
        """
        Move the job to ``new_status``.

        Raises:
            JobStateError: If the transition is not allowed from the current status
        """
        if not self.status.can_transition_to(new_status):
            raise JobStateError(
                f"Illegal job transition for {self.id}: "
                f"{self.status.value} -> {new_status.value}",
                current=self.status.value,
                requested=new_status.value,
            )
        self.status = new_status

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the on-disk (camelCase) job record shape."""
        data = {
            'id': self.id,
            'status': self.status.value,
            'albumId': self.album_id,
            'albumTitle': self.album_title,
            'totalPhotos': self.total_photos,
            'processedPhotos': self.processed_photos,
            'startTime': self.start_time.isoformat(),
        }
        if self.end_time is not None:
            data['endTime'] = self.end_time.isoformat()
        if self.error is not None:
            data['error'] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransferJob':
        end_time = data.get('endTime')
        return cls(
            id=data['id'],
            album_id=data['albumId'],
            album_title=data.get('albumTitle', ''),
            total_photos=int(data.get('totalPhotos', 0)),
            status=JobStatus(data.get('status', JobStatus.PENDING.value)),
            processed_photos=int(data.get('processedPhotos', 0)),
            start_time=_parse_timestamp(data['startTime']),
            end_time=_parse_timestamp(end_time) if end_time else None,
            error=data.get('error'),
        )


def _parse_timestamp(value: str) -> datetime:
    # Records written by other tools may carry a trailing "Z"
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        # Keep every timestamp naive local time so jobs stay comparable
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
