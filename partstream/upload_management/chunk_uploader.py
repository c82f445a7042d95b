"""Single-chunk upload against the remote transport."""

import logging

from partstream.exceptions import ChunkUploadFailed
from partstream.models import ChunkResult, TransactionHandle
from partstream.transports.chunk_transport import ChunkTransport

logger = logging.getLogger(__name__)


class ChunkUploader:
    """Upload one chunk and turn the transport's answer into a ChunkResult.

    Stateless apart from the transport, so one instance serves every
    concurrent part of an upload. Failures are not retried here.
    """

    def __init__(self, transport: ChunkTransport) -> None:
        """Initialize the chunk uploader.

        Args:
            transport: Remote side of the multipart upload.
        """
        self._transport = transport

    async def upload(
        self, handle: TransactionHandle, sequence_number: int, payload: bytes
    ) -> ChunkResult:
        """Upload a chunk as part ``sequence_number`` of the transaction.

        Args:
            handle: Open transaction the part belongs to.
            sequence_number: 1-based part number.
            payload: Bytes of the part.

        Returns:
            The completion tag and size of the uploaded part.

        Raises:
            ChunkUploadFailed: If the transport raised, or reported accepting a
                different number of bytes than were sent.
        """
        logger.debug(
            "PUT part: upload_id=%s part=%d bytes=%d",
            handle.upload_id,
            sequence_number,
            len(payload),
        )
        try:
            receipt = await self._transport.upload_chunk(
                handle, sequence_number, payload
            )
        except Exception as exc:
            logger.warning(
                "Part upload failed: upload_id=%s part=%d error=%s",
                handle.upload_id,
                sequence_number,
                exc,
            )
            raise ChunkUploadFailed(sequence_number, exc) from exc

        if (
            receipt.bytes_accepted is not None
            and receipt.bytes_accepted != len(payload)
        ):
            raise ChunkUploadFailed(
                sequence_number,
                ValueError(
                    "Upload size mismatch: "
                    f"Local={len(payload)}, Server={receipt.bytes_accepted}"
                ),
            )

        logger.debug(
            "Part uploaded: upload_id=%s part=%d tag=%s",
            handle.upload_id,
            sequence_number,
            receipt.completion_tag,
        )
        return ChunkResult(
            sequence_number=sequence_number,
            completion_tag=receipt.completion_tag,
            byte_count=len(payload),
        )
