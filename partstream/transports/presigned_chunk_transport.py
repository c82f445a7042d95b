from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any

import aiohttp

from partstream.const import (
    DEFAULT_PART_TIMEOUT_SECONDS,
    DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS,
    PART_SUCCESS_STATUS_CODES,
)
from partstream.models import ChunkReceipt, TransactionHandle

from .s3_chunk_transport import S3ChunkTransport

logger = logging.getLogger(__name__)


class PresignedS3ChunkTransport(S3ChunkTransport):
    """
    S3 multipart upload where part bodies go over plain HTTP.

    The transaction calls use the boto3 client; each part is PUT with aiohttp
    against a presigned `upload_part` URL and its ETag is read from the
    response headers.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        client: Any = None,
        executor: Executor | None = None,
        expires_in: int = DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS,
        timeout_seconds: float = DEFAULT_PART_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client=client, executor=executor)
        self._session = session
        self._expires_in = expires_in
        self._timeout_seconds = timeout_seconds

    async def _presign_part(
        self, handle: TransactionHandle, sequence_number: int
    ) -> str:
        return await self._call(
            "generate_presigned_url",
            ClientMethod="upload_part",
            Params={
                "Bucket": handle.destination.bucket,
                "Key": handle.destination.key,
                "UploadId": handle.upload_id,
                "PartNumber": sequence_number,
            },
            ExpiresIn=self._expires_in,
        )

    async def upload_chunk(
        self, handle: TransactionHandle, sequence_number: int, payload: bytes
    ) -> ChunkReceipt:
        url = await self._presign_part(handle, sequence_number)

        timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
        async with self._session.put(
            url,
            headers={"Content-Length": str(len(payload))},
            data=payload,
            timeout=timeout,
        ) as response:
            if response.status not in PART_SUCCESS_STATUS_CODES:
                body = await response.text()
                logger.warning(
                    "PUT part failed: status=%d upload_id=%s part=%d response=%s",
                    response.status,
                    handle.upload_id,
                    sequence_number,
                    body[:200],
                )
                raise aiohttp.ClientResponseError(
                    response.request_info,
                    response.history,
                    status=response.status,
                    message=f"Part upload failed: {body[:200]}",
                )
            etag = response.headers.get("ETag")

        if not etag:
            raise RuntimeError(
                f"Part {sequence_number} upload response carried no ETag header"
            )
        return ChunkReceipt(completion_tag=etag)
