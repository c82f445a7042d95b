"""Exception classes for the streaming upload workflow."""

from __future__ import annotations


class UploadStreamError(Exception):
    """Base error for the streaming upload workflow.

    Attributes:
        cause: The underlying exception that triggered this error, if any.
        abort_error: Set when the transaction abort that followed this error
            failed as well. It never replaces the original error.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause
        self.abort_error: TransactionAbortFailed | None = None


class TransactionInitiationFailed(UploadStreamError):
    """Raised when the remote multipart transaction cannot be opened."""


class ChunkUploadFailed(UploadStreamError):
    """Raised when a single chunk upload fails."""

    def __init__(self, sequence_number: int, cause: BaseException) -> None:
        """Initialize ChunkUploadFailed.

        Args:
            sequence_number: 1-based part number of the chunk that failed.
            cause: Exception raised by the transport.
        """
        super().__init__(f"Upload of part {sequence_number} failed: {cause}", cause)
        self.sequence_number = sequence_number


class TransactionCompletionFailed(UploadStreamError):
    """Raised when the completion call fails or cannot be issued."""


class TransactionAbortFailed(UploadStreamError):
    """Raised when aborting the remote transaction fails."""


class UploadAbortedError(UploadStreamError):
    """Raised when the producer aborted the upload."""


class UploadClosedError(UploadStreamError):
    """Raised on writes after the stream was ended or the upload completed."""


class ConfigLoadError(UploadStreamError):
    """Raised when the upload config file cannot be read or parsed."""
