"""S3 multipart upload transport backed by a boto3 client.

boto3 calls block, so every call is run in an executor to keep the engine's
event loop free while parts are in flight. boto3 clients are thread safe,
which allows several parts to be sent at once from the same client.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Sequence
from concurrent.futures import Executor
from typing import Any

import boto3

from partstream.models import (
    ChunkReceipt,
    CompletedUpload,
    Destination,
    TransactionHandle,
)

from .chunk_transport import ChunkTransport

logger = logging.getLogger(__name__)


class S3ChunkTransport(ChunkTransport):
    """Multipart upload against S3 (or any S3-compatible service)."""

    def __init__(self, client: Any = None, executor: Executor | None = None) -> None:
        """Initialize the transport.

        Args:
            client: boto3 S3 client. A default client is created if omitted.
            executor: Executor running the blocking client calls. Defaults to
                the event loop's default executor.
        """
        self._client = client if client is not None else boto3.client("s3")
        self._executor = executor

    @property
    def client(self) -> Any:
        """The underlying boto3 S3 client."""
        return self._client

    async def _call(self, method: str, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, functools.partial(getattr(self._client, method), **kwargs)
        )

    async def initiate_transaction(
        self, destination: Destination, options: dict[str, Any]
    ) -> TransactionHandle:
        response = await self._call(
            "create_multipart_upload",
            Bucket=destination.bucket,
            Key=destination.key,
            **options,
        )
        upload_id = response["UploadId"]
        logger.info(
            "CreateMultipartUpload: destination=%s upload_id=%s",
            destination,
            upload_id,
        )
        return TransactionHandle(destination=destination, upload_id=upload_id)

    async def upload_chunk(
        self, handle: TransactionHandle, sequence_number: int, payload: bytes
    ) -> ChunkReceipt:
        response = await self._call(
            "upload_part",
            Bucket=handle.destination.bucket,
            Key=handle.destination.key,
            UploadId=handle.upload_id,
            PartNumber=sequence_number,
            Body=payload,
            ContentLength=len(payload),
        )
        return ChunkReceipt(completion_tag=response["ETag"])

    async def complete_transaction(
        self, handle: TransactionHandle, parts: Sequence[tuple[int, str]]
    ) -> CompletedUpload:
        destination = handle.destination
        response = await self._call(
            "complete_multipart_upload",
            Bucket=destination.bucket,
            Key=destination.key,
            UploadId=handle.upload_id,
            MultipartUpload={
                "Parts": [
                    {"PartNumber": part_number, "ETag": tag}
                    for part_number, tag in parts
                ]
            },
        )
        logger.info(
            "CompleteMultipartUpload: destination=%s upload_id=%s parts=%d",
            destination,
            handle.upload_id,
            len(parts),
        )
        return CompletedUpload(
            destination=destination,
            location=response.get("Location")
            or f"s3://{destination.bucket}/{destination.key}",
            completion_tag=response.get("ETag", ""),
        )

    async def abort_transaction(self, handle: TransactionHandle) -> None:
        await self._call(
            "abort_multipart_upload",
            Bucket=handle.destination.bucket,
            Key=handle.destination.key,
            UploadId=handle.upload_id,
        )
        logger.info(
            "AbortMultipartUpload: destination=%s upload_id=%s",
            handle.destination,
            handle.upload_id,
        )
