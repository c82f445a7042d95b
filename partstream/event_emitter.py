"""Event emitter carrying upload notifications to observers."""

import asyncio
import logging
from typing import Any

from pyee.asyncio import AsyncIOEventEmitter

logger = logging.getLogger(__name__)


class Emitter(AsyncIOEventEmitter):
    """Per-upload event emitter.

    Every engine owns one emitter; nothing here is process-wide. Exceptions
    raised by listeners are logged and never reach the code that emitted.
    """

    # Engine -> observers, once per completed chunk
    PART_UPLOADED = "PART_UPLOADED"
    # (progress: PartProgress)

    # Engine -> observers, terminal success
    UPLOADED = "UPLOADED"
    # (result: CompletedUpload)

    # Engine -> observers, terminal failure
    UPLOAD_FAILED = "UPLOAD_FAILED"
    # (error: UploadStreamError)

    # Engine -> observers, abort after a failure did not go through
    ABORT_FAILED = "ABORT_FAILED"
    # (error: TransactionAbortFailed)

    # Engine -> producer, writes suspended on a saturated gate
    PAUSE = "PAUSE"
    # ()

    # Engine -> producer, a slot was freed and writes continue
    RESUME = "RESUME"
    # ()

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the event emitter.

        Args:
            loop: The event loop to use for async event handlers. Defaults to
                the loop running when a handler is scheduled.
        """
        super().__init__(loop=loop)
        self.on("error", self._log_listener_error)

    def _log_listener_error(self, exc: BaseException) -> None:
        logger.error("Event listener failed: %s", exc, exc_info=exc)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> bool:
        """Emit an event with logging.

        Args:
            event: The event name to emit.
            *args: Positional arguments to pass to handlers.
            **kwargs: Keyword arguments to pass to handlers.

        Returns:
            True if the event had listeners, False otherwise.
        """
        formatted_args = []
        for arg in args:
            r = repr(arg)
            if len(r) > 100:
                formatted_args.append(f"{r[:100]}...")
            else:
                formatted_args.append(r)
        logger.debug("EVENT %s: %s", event, ", ".join(formatted_args))
        return super().emit(event, *args, **kwargs)
