from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from partstream.models import (
    ChunkReceipt,
    CompletedUpload,
    Destination,
    TransactionHandle,
)


class ChunkTransport(ABC):
    """
    Strategy interface for the remote side of a multipart upload.

    Implementations must:
      - Be safe to call `upload_chunk` concurrently for different part numbers.
      - Leave retry policy to the underlying SDK; any exception raised here is
        treated as a final failure of that call.
    """

    @abstractmethod
    async def initiate_transaction(
        self, destination: Destination, options: dict[str, Any]
    ) -> TransactionHandle:
        """Open a multipart transaction for `destination`."""
        ...

    @abstractmethod
    async def upload_chunk(
        self, handle: TransactionHandle, sequence_number: int, payload: bytes
    ) -> ChunkReceipt:
        """Upload one part; `sequence_number` is the 1-based part number."""
        ...

    @abstractmethod
    async def complete_transaction(
        self, handle: TransactionHandle, parts: Sequence[tuple[int, str]]
    ) -> CompletedUpload:
        """Commit the transaction; `parts` is in ascending part order."""
        ...

    @abstractmethod
    async def abort_transaction(self, handle: TransactionHandle) -> None:
        """Discard the transaction and any uploaded parts."""
        ...
