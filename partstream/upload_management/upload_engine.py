"""Upload engine turning a byte stream into a multipart upload.

This module provides the UploadEngine class: the producer-facing side of a
streaming upload. It sizes incoming bytes into parts, numbers them in stream
order, uploads them with bounded parallelism and drives the remote
transaction to exactly one outcome, committed or aborted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Iterable
from typing import IO, NoReturn

from partstream.config_manager.upload_config import UploadConfig
from partstream.const import DEFAULT_READ_SIZE
from partstream.event_emitter import Emitter
from partstream.exceptions import (
    ChunkUploadFailed,
    TransactionAbortFailed,
    TransactionCompletionFailed,
    TransactionInitiationFailed,
    UploadAbortedError,
    UploadClosedError,
    UploadStreamError,
)
from partstream.models import (
    ChunkResult,
    CompletedUpload,
    Destination,
    PartProgress,
    TransactionHandle,
    UploadState,
)
from partstream.transports.chunk_transport import ChunkTransport

from .chunk_buffer import ChunkBuffer
from .chunk_uploader import ChunkUploader
from .concurrency_gate import ConcurrencyGate
from .transaction_ledger import TransactionLedger

logger = logging.getLogger(__name__)


class UploadEngine:
    """Streams bytes from a single producer into a multipart upload.

    The producer awaits :meth:`write` for each piece of data and :meth:`end`
    once the stream is over. A full part is drained from the buffer before it
    waits for a gate slot, and the write that filled it stays suspended until
    one of the ``concurrent_parts`` in-flight uploads finishes. Memory is
    therefore bounded by ``(concurrent_parts + 1) * max_part_size``: the
    in-flight payloads plus the one part waiting for a slot.

    Observers subscribe to :attr:`emitter` for ``PART_UPLOADED``,
    ``UPLOADED``, ``UPLOAD_FAILED``, ``ABORT_FAILED``, ``PAUSE`` and
    ``RESUME``. Ledger updates and notifications happen in the same
    synchronous step on the event loop, so observers always see the ledger
    state a notification describes. Observers that raise are logged by the
    emitter and do not affect the upload.
    """

    def __init__(
        self,
        transport: ChunkTransport,
        destination: Destination,
        config: UploadConfig | None = None,
        emitter: Emitter | None = None,
    ) -> None:
        """Initialize the engine. No remote call is made until started.

        Args:
            transport: Remote side of the multipart upload.
            destination: Bucket and key to write.
            config: Part size, concurrency and upload options.
            emitter: Event emitter for notifications; one is created if omitted.
        """
        self._config = config or UploadConfig()
        self._transport = transport
        self._destination = destination
        self.emitter = emitter or Emitter()

        self._buffer = ChunkBuffer(self._config.max_part_size)
        self._gate = ConcurrencyGate(self._config.concurrent_parts)
        self._uploader = ChunkUploader(transport)
        self._ledger = TransactionLedger()

        self._state = UploadState.IDLE
        self._handle: TransactionHandle | None = None
        self._bytes_received = 0
        self._bytes_uploaded = 0
        self._paused = False
        self._ending = False
        self._error: UploadStreamError | None = None
        self._in_flight: set[asyncio.Task] = set()

        self._start_task: asyncio.Task | None = None
        self._finish_task: asyncio.Task | None = None
        self._abort_task: asyncio.Task | None = None

    @property
    def config(self) -> UploadConfig:
        return self._config

    @property
    def destination(self) -> Destination:
        return self._destination

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def upload_id(self) -> str | None:
        """Transaction id issued by the transport, once initiated."""
        return self._handle.upload_id if self._handle else None

    @property
    def bytes_received(self) -> int:
        return self._bytes_received

    @property
    def bytes_uploaded(self) -> int:
        return self._bytes_uploaded

    @property
    def ledger(self) -> TransactionLedger:
        return self._ledger

    @property
    def gate(self) -> ConcurrencyGate:
        return self._gate

    @property
    def error(self) -> UploadStreamError | None:
        """The error that sent the upload towards ABORTED, if any."""
        return self._error

    @property
    def is_paused(self) -> bool:
        """Whether a write is currently suspended on the concurrency gate."""
        return self._paused

    async def __aenter__(self) -> UploadEngine:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            await self.end()
        else:
            await self.abort(exc)
        return False

    async def start(self) -> None:
        """Open the remote transaction. Safe to call more than once.

        Raises:
            TransactionInitiationFailed: If the transport refused to open it.
        """
        if self._start_task is None:
            self._start_task = asyncio.ensure_future(self._initiate())
        await asyncio.shield(self._start_task)

    async def _initiate(self) -> None:
        self._state = UploadState.INITIATING
        logger.info(
            "Initiating upload: destination=%s max_part_size=%d concurrent_parts=%d",
            self._destination,
            self._config.max_part_size,
            self._config.concurrent_parts,
        )
        try:
            handle = await self._transport.initiate_transaction(
                self._destination, dict(self._config.upload_options)
            )
        except Exception as exc:
            error = TransactionInitiationFailed(
                f"Failed to open multipart upload for {self._destination}: {exc}", exc
            )
            self._error = error
            self._state = UploadState.ABORTED
            logger.error("Upload initiation failed for %s: %s", self._destination, exc)
            self.emitter.emit(Emitter.UPLOAD_FAILED, error)
            raise error from exc

        self._handle = handle
        self._state = UploadState.ACTIVE
        logger.info(
            "Upload active: destination=%s upload_id=%s",
            self._destination,
            handle.upload_id,
        )

    async def write(self, data: bytes | bytearray | memoryview) -> None:
        """Accept the next piece of the stream.

        Suspends while the concurrency gate is saturated and a full part is
        waiting for a slot.

        Raises:
            UploadClosedError: If :meth:`end` was already called.
            UploadStreamError: The error that failed the upload, re-raised on
                every write once the transaction has been aborted.
        """
        if self._error is not None:
            await self._raise_error()
        if self._ending or self._state.is_terminal:
            raise UploadClosedError(
                f"Upload to {self._destination} no longer accepts writes "
                f"(state={self._state.value})"
            )
        await self.start()

        view = memoryview(data).cast("B")
        while view:
            if self._error is not None:
                await self._raise_error()
            take = min(len(view), self._buffer.space_remaining)
            full = self._buffer.write(view[:take])
            self._bytes_received += take
            view = view[take:]
            if full:
                await self._submit(self._buffer.drain())

    async def end(self) -> CompletedUpload:
        """Signal end of stream and wait for the transaction to finish.

        Calling it again returns the same outcome without further effect.

        Returns:
            Location and completion tag of the committed object.

        Raises:
            UploadStreamError: The error that caused the upload to be aborted.
        """
        if self._finish_task is None:
            self._ending = True
            self._finish_task = asyncio.ensure_future(self._finish())
        return await asyncio.shield(self._finish_task)

    async def abort(self, cause: BaseException | None = None) -> None:
        """Abort the upload on behalf of the producer.

        Waits for in-flight parts, then aborts the remote transaction once.
        Does nothing if the upload already reached a terminal state. If
        :meth:`end` was already called, waits for its outcome instead.

        Args:
            cause: Why the producer gave up, e.g. the source stream's error.
        """
        if self._finish_task is not None:
            await asyncio.gather(self._finish_task, return_exceptions=True)
            return
        if self._start_task is not None:
            try:
                await asyncio.shield(self._start_task)
            except TransactionInitiationFailed:
                return
        if self._state.is_terminal:
            return

        if self._error is None:
            error = UploadAbortedError(
                f"Upload to {self._destination} aborted by producer", cause
            )
            if self._handle is None:
                self._error = error
                self._state = UploadState.ABORTED
                logger.info("Upload to %s aborted before start", self._destination)
                self.emitter.emit(Emitter.UPLOAD_FAILED, error)
                return
            self._fail(error)

        await asyncio.shield(self._begin_abort())

    async def pipe(
        self,
        source: IO[bytes] | Iterable[bytes] | AsyncIterable[bytes],
        read_size: int = DEFAULT_READ_SIZE,
    ) -> CompletedUpload:
        """Feed a whole source into the upload and end it.

        Args:
            source: Binary file object (read in an executor), iterable of
                bytes, or async iterable of bytes.
            read_size: Bytes per read when ``source`` is a file object.

        Returns:
            The committed upload.

        Raises:
            UploadStreamError: If the upload failed.
            Exception: Whatever the source raised; the upload is aborted first.
        """
        try:
            if hasattr(source, "read"):
                loop = asyncio.get_running_loop()
                while True:
                    data = await loop.run_in_executor(None, source.read, read_size)
                    if not data:
                        break
                    await self.write(data)
            elif hasattr(source, "__aiter__"):
                async for data in source:
                    await self.write(data)
            else:
                for data in source:
                    await self.write(data)
        except UploadStreamError:
            raise
        except Exception as exc:
            logger.warning("Source for %s failed: %s", self._destination, exc)
            await self.abort(exc)
            raise

        return await self.end()

    async def _submit(self, payload: bytes) -> None:
        """Number a drained part and hand it to an upload task."""
        sequence_number = self._ledger.next_sequence_number()

        if self._gate.saturated:
            self._paused = True
            logger.debug(
                "Writes paused: part=%d waiting for one of %d slots",
                sequence_number,
                self._gate.max_concurrent,
            )
            self.emitter.emit(Emitter.PAUSE)

        await self._gate.acquire()

        if self._paused:
            self._paused = False
            self.emitter.emit(Emitter.RESUME)

        if self._error is not None:
            self._gate.release()
            await self._raise_error()

        task = asyncio.ensure_future(self._upload_chunk(sequence_number, payload))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _upload_chunk(self, sequence_number: int, payload: bytes) -> None:
        assert self._handle is not None
        try:
            result = await self._uploader.upload(
                self._handle, sequence_number, payload
            )
        except ChunkUploadFailed as exc:
            self._fail(exc)
            return
        finally:
            self._gate.release()
        self._record(result)

    def _record(self, result: ChunkResult) -> None:
        if self._error is not None:
            logger.debug(
                "Discarding part %d of failed upload %s",
                result.sequence_number,
                self.upload_id,
            )
            return

        self._ledger.record(result)
        self._bytes_uploaded += result.byte_count
        self.emitter.emit(
            Emitter.PART_UPLOADED,
            PartProgress(
                sequence_number=result.sequence_number,
                completion_tag=result.completion_tag,
                byte_count=result.byte_count,
                bytes_received=self._bytes_received,
                bytes_uploaded=self._bytes_uploaded,
            ),
        )

    def _fail(self, error: UploadStreamError) -> None:
        """Record the first failure and start the abort; later ones are logged."""
        if self._error is not None:
            logger.warning(
                "Ignoring further failure of upload %s: %s", self.upload_id, error
            )
            return
        self._error = error
        logger.error("Upload %s failed: %s", self.upload_id, error)
        self._begin_abort()

    def _begin_abort(self) -> asyncio.Task:
        if self._abort_task is None:
            self._abort_task = asyncio.ensure_future(self._abort_transaction())
        return self._abort_task

    async def _abort_transaction(self) -> None:
        """Let in-flight siblings drain, then abort the transaction once."""
        assert self._error is not None
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

        if self._handle is not None:
            try:
                await self._transport.abort_transaction(self._handle)
            except Exception as exc:
                abort_error = TransactionAbortFailed(
                    f"Failed to abort multipart upload {self._handle.upload_id}: "
                    f"{exc}",
                    exc,
                )
                self._error.abort_error = abort_error
                logger.error(
                    "Abort failed for upload %s: %s", self._handle.upload_id, exc
                )
                self.emitter.emit(Emitter.ABORT_FAILED, abort_error)

        self._state = UploadState.ABORTED
        logger.info("Upload %s aborted", self.upload_id)
        self.emitter.emit(Emitter.UPLOAD_FAILED, self._error)

    async def _raise_error(self) -> NoReturn:
        """Wait for a pending abort, then raise the error that caused it."""
        assert self._error is not None
        if self._abort_task is not None:
            await asyncio.shield(self._abort_task)
        raise self._error

    async def _finish(self) -> CompletedUpload:
        await self.start()
        if self._error is not None:
            await self._raise_error()

        self._state = UploadState.DRAINING
        remainder = self._buffer.flush_remainder()
        if remainder:
            await self._submit(remainder)
        if self._in_flight:
            logger.info(
                "Waiting for %d in-flight parts of upload %s",
                len(self._in_flight),
                self.upload_id,
            )
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
        if self._error is not None:
            await self._raise_error()

        self._state = UploadState.FINALIZING
        assert self._handle is not None
        try:
            parts = self._ledger.completed_parts()
            result = await self._transport.complete_transaction(self._handle, parts)
        except Exception as exc:
            self._fail(
                TransactionCompletionFailed(
                    f"Failed to complete multipart upload {self._handle.upload_id}: "
                    f"{exc}",
                    exc,
                )
            )
            await self._raise_error()

        self._state = UploadState.COMPLETED
        logger.info(
            "Upload complete: destination=%s parts=%d bytes=%d location=%s",
            self._destination,
            len(parts),
            self._bytes_uploaded,
            result.location,
        )
        self.emitter.emit(Emitter.UPLOADED, result)
        return result
