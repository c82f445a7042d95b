"""Byte accumulator that sizes the stream into parts."""

from partstream.const import DEFAULT_PART_SIZE


class ChunkBuffer:
    """Accumulates incoming bytes until the flush threshold is reached.

    Purely a sizing primitive: no I/O and no error conditions.
    """

    def __init__(self, threshold: int = DEFAULT_PART_SIZE) -> None:
        """Initialize the buffer.

        Args:
            threshold: Size in bytes at which the buffer reports itself full.
        """
        self.threshold = threshold
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def space_remaining(self) -> int:
        """Bytes that fit before the threshold is reached."""
        return max(0, self.threshold - len(self._buffer))

    @property
    def is_full(self) -> bool:
        """Whether the threshold has been reached."""
        return len(self._buffer) >= self.threshold

    def write(self, data: bytes | bytearray | memoryview) -> bool:
        """Append data and report whether the threshold has been reached."""
        self._buffer.extend(data)
        return self.is_full

    def drain(self) -> bytes:
        """Remove and return the entire contents, leaving the buffer empty."""
        payload = bytes(self._buffer)
        self._buffer = bytearray()
        return payload

    def flush_remainder(self) -> bytes:
        """Return the tail at end of stream; may be empty or below threshold."""
        return self.drain()
