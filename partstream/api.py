"""One-call helpers for streaming a source into an object store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Iterable
from typing import IO, Any

from partstream.config_manager.config import ConfigManager
from partstream.config_manager.upload_config import UploadConfig
from partstream.const import DEFAULT_READ_SIZE
from partstream.models import CompletedUpload, Destination
from partstream.progress import attach_progress_bar
from partstream.transports.chunk_transport import ChunkTransport
from partstream.transports.transport_factory import make_chunk_transport
from partstream.upload_management.upload_engine import UploadEngine

logger = logging.getLogger(__name__)


async def upload_stream(
    source: IO[bytes] | Iterable[bytes] | AsyncIterable[bytes],
    bucket: str,
    key: str,
    transport: ChunkTransport | None = None,
    config: UploadConfig | None = None,
    show_progress: bool = False,
    read_size: int = DEFAULT_READ_SIZE,
    **config_overrides: Any,
) -> CompletedUpload:
    """Upload everything ``source`` produces to ``bucket``/``key``.

    Args:
        source: Binary file object, iterable of bytes or async iterable of bytes.
        bucket: Destination bucket.
        key: Destination object key.
        transport: Remote transport; an S3 transport is built from the
            config if omitted.
        config: Upload configuration. Resolved through ConfigManager (config
            file, environment, ``config_overrides``) if omitted.
        show_progress: Display a tqdm progress bar while uploading.
        read_size: Bytes per read for file objects.
        **config_overrides: Explicit UploadConfig fields, e.g. ``max_part_size``.

    Returns:
        The committed upload.

    Raises:
        UploadStreamError: If the upload failed and was aborted.
    """
    if config is None:
        config = ConfigManager().resolve(**config_overrides)
    if transport is None:
        transport = make_chunk_transport(config)

    engine = UploadEngine(transport, Destination(bucket=bucket, key=key), config)
    if show_progress:
        attach_progress_bar(engine.emitter, description=key)

    logger.info("Streaming upload to %s/%s", bucket, key)
    return await engine.pipe(source, read_size=read_size)


def upload_fileobj(
    fileobj: IO[bytes] | Iterable[bytes],
    bucket: str,
    key: str,
    transport: ChunkTransport | None = None,
    config: UploadConfig | None = None,
    show_progress: bool = False,
    **config_overrides: Any,
) -> CompletedUpload:
    """Blocking variant of :func:`upload_stream` that runs its own event loop.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(
        upload_stream(
            fileobj,
            bucket,
            key,
            transport=transport,
            config=config,
            show_progress=show_progress,
            **config_overrides,
        )
    )
