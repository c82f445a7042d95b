"""Stream bytes of unknown length into multipart object-storage uploads."""

from .api import upload_fileobj, upload_stream
from .config_manager.config import ConfigManager
from .config_manager.upload_config import UploadConfig
from .event_emitter import Emitter
from .exceptions import (
    ChunkUploadFailed,
    ConfigLoadError,
    TransactionAbortFailed,
    TransactionCompletionFailed,
    TransactionInitiationFailed,
    UploadAbortedError,
    UploadClosedError,
    UploadStreamError,
)
from .models import (
    ChunkResult,
    CompletedUpload,
    Destination,
    PartProgress,
    UploadState,
)
from .progress import attach_progress_bar
from .upload_management.upload_engine import UploadEngine

__version__ = "0.1.0"

__all__ = [
    "ChunkResult",
    "ChunkUploadFailed",
    "CompletedUpload",
    "ConfigLoadError",
    "ConfigManager",
    "Destination",
    "Emitter",
    "PartProgress",
    "TransactionAbortFailed",
    "TransactionCompletionFailed",
    "TransactionInitiationFailed",
    "UploadAbortedError",
    "UploadClosedError",
    "UploadConfig",
    "UploadEngine",
    "UploadState",
    "UploadStreamError",
    "attach_progress_bar",
    "upload_fileobj",
    "upload_stream",
]
