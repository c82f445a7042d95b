"""Shared fixtures for partstream unit tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from partstream.config_manager.upload_config import UploadConfig
from partstream.const import BYTES_PER_MIB
from partstream.models import (
    ChunkReceipt,
    CompletedUpload,
    Destination,
    TransactionHandle,
)
from partstream.transports.chunk_transport import ChunkTransport

MIB = BYTES_PER_MIB


class FakeChunkTransport(ChunkTransport):
    """In-memory multipart service recording every call it receives.

    Hooks let tests fail individual calls or control part completion order:
      - ``fail_parts``: part numbers whose upload raises.
      - ``part_delays``: seconds to sleep before answering a part.
      - ``fail_initiate`` / ``fail_complete`` / ``fail_abort``: exceptions to raise.
      - ``reject_empty_completion``: refuse zero-part completions, as S3 does.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.parts: dict[int, bytes] = {}
        self.completion_order: list[int] = []
        self.completed_with: list[tuple[int, str]] | None = None
        self.abort_count = 0
        self.in_flight = 0
        self.peak_in_flight = 0
        self.fail_parts: set[int] = set()
        self.part_delays: dict[int, float] = {}
        self.default_delay = 0.0
        self.fail_initiate: Exception | None = None
        self.fail_complete: Exception | None = None
        self.fail_abort: Exception | None = None
        self.reject_empty_completion = False
        self.on_part: Callable[[int], None] | None = None

    def calls_named(self, name: str) -> list[Any]:
        return [args for call, args in self.calls if call == name]

    async def initiate_transaction(
        self, destination: Destination, options: dict[str, Any]
    ) -> TransactionHandle:
        self.calls.append(("initiate", (destination, options)))
        if self.fail_initiate is not None:
            raise self.fail_initiate
        return TransactionHandle(destination=destination, upload_id="upload-1")

    async def upload_chunk(
        self, handle: TransactionHandle, sequence_number: int, payload: bytes
    ) -> ChunkReceipt:
        self.calls.append(("upload", sequence_number))
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(
                self.part_delays.get(sequence_number, self.default_delay)
            )
            if self.on_part is not None:
                self.on_part(sequence_number)
            if sequence_number in self.fail_parts:
                raise ConnectionError(f"part {sequence_number} dropped")
            self.parts[sequence_number] = bytes(payload)
            self.completion_order.append(sequence_number)
            return ChunkReceipt(
                completion_tag=f'"etag-{sequence_number}"',
                bytes_accepted=len(payload),
            )
        finally:
            self.in_flight -= 1

    async def complete_transaction(
        self, handle: TransactionHandle, parts: Sequence[tuple[int, str]]
    ) -> CompletedUpload:
        self.calls.append(("complete", list(parts)))
        if self.fail_complete is not None:
            raise self.fail_complete
        if not parts and self.reject_empty_completion:
            raise ValueError("MalformedXML: at least one part is required")
        self.completed_with = list(parts)
        destination = handle.destination
        return CompletedUpload(
            destination=destination,
            location=f"https://{destination.bucket}.example/{destination.key}",
            completion_tag=f'"final-{len(parts)}"',
        )

    async def abort_transaction(self, handle: TransactionHandle) -> None:
        self.calls.append(("abort", handle.upload_id))
        self.abort_count += 1
        if self.fail_abort is not None:
            raise self.fail_abort

    def assembled(self) -> bytes:
        return b"".join(self.parts[number] for number in sorted(self.parts))


@pytest.fixture
def transport() -> FakeChunkTransport:
    return FakeChunkTransport()


@pytest.fixture
def destination() -> Destination:
    return Destination(bucket="test-bucket", key="logs/stream.bin")


@pytest.fixture
def config() -> UploadConfig:
    return UploadConfig(max_part_size=5 * MIB, concurrent_parts=1)
