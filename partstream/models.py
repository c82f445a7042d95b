"""Models used by the upload engine and its transports."""

from dataclasses import dataclass
from enum import Enum


class UploadState(str, Enum):
    """Lifecycle states for an upload.

    State transitions:
    - IDLE -> INITIATING -> ACTIVE (transaction opened)
    - INITIATING -> ABORTED (initiation failed, nothing to clean up)
    - ACTIVE -> DRAINING (end of stream) -> FINALIZING -> COMPLETED
    - ACTIVE | DRAINING | FINALIZING -> ABORTED (on error or producer abort)
    """

    IDLE = "idle"
    INITIATING = "initiating"
    ACTIVE = "active"
    DRAINING = "draining"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions can happen."""
        return self in (UploadState.COMPLETED, UploadState.ABORTED)


@dataclass(frozen=True)
class Destination:
    """Bucket and key of the object being written."""

    bucket: str
    key: str

    def __str__(self) -> str:
        return f"{self.bucket}/{self.key}"


@dataclass(frozen=True)
class TransactionHandle:
    """An open multipart transaction returned by the transport."""

    destination: Destination
    upload_id: str


@dataclass(frozen=True)
class ChunkReceipt:
    """What the transport reports back for one uploaded chunk.

    ``bytes_accepted`` is None when the service does not report how many bytes
    it stored for the part, as with S3 `UploadPart`.
    """

    completion_tag: str
    bytes_accepted: int | None = None


@dataclass(frozen=True)
class ChunkResult:
    """Outcome of one successfully uploaded chunk."""

    sequence_number: int
    completion_tag: str
    byte_count: int


@dataclass(frozen=True)
class PartProgress:
    """Progress notification emitted after each chunk completes.

    Attributes:
        sequence_number: Part number of the chunk that just completed.
        completion_tag: Tag returned by the transport for that part.
        byte_count: Size of that part.
        bytes_received: Total bytes accepted from the producer so far.
        bytes_uploaded: Total bytes recorded in the ledger so far.
    """

    sequence_number: int
    completion_tag: str
    byte_count: int
    bytes_received: int
    bytes_uploaded: int


@dataclass(frozen=True)
class CompletedUpload:
    """Final result of a committed transaction."""

    destination: Destination
    location: str
    completion_tag: str
