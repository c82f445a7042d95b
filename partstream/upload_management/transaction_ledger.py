"""Ordered record of the parts of one multipart transaction."""

from partstream.models import ChunkResult


class TransactionLedger:
    """Maps part numbers to their upload results.

    Results arrive in completion order, which under concurrency differs from
    part order; :meth:`completed_parts` always answers in part order.
    """

    def __init__(self) -> None:
        self._results: dict[int, ChunkResult] = {}
        self._last_assigned = 0

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, sequence_number: object) -> bool:
        return sequence_number in self._results

    @property
    def last_assigned(self) -> int:
        """Highest part number handed out so far, 0 if none."""
        return self._last_assigned

    @property
    def bytes_recorded(self) -> int:
        """Total size of all recorded parts."""
        return sum(result.byte_count for result in self._results.values())

    def next_sequence_number(self) -> int:
        """Assign the next part number; numbers start at 1 and never repeat."""
        self._last_assigned += 1
        return self._last_assigned

    def record(self, result: ChunkResult) -> None:
        """Store the result of a successfully uploaded part.

        Raises:
            ValueError: If the part number was never assigned or already has
                a result.
        """
        number = result.sequence_number
        if not 1 <= number <= self._last_assigned:
            raise ValueError(f"Part {number} was never assigned")
        if number in self._results:
            raise ValueError(f"Part {number} already recorded")
        self._results[number] = result

    def missing(self) -> list[int]:
        """Assigned part numbers that have no result yet."""
        return [
            number
            for number in range(1, self._last_assigned + 1)
            if number not in self._results
        ]

    def is_complete(self) -> bool:
        """Whether every assigned part number has a result."""
        return len(self._results) == self._last_assigned

    def results(self) -> list[ChunkResult]:
        """Recorded results in ascending part order."""
        return [self._results[number] for number in sorted(self._results)]

    def completed_parts(self) -> list[tuple[int, str]]:
        """(part number, completion tag) pairs for the completion request.

        Raises:
            ValueError: If any assigned part is still missing.
        """
        missing = self.missing()
        if missing:
            raise ValueError(f"Ledger has gaps, missing parts: {missing}")
        return [(r.sequence_number, r.completion_tag) for r in self.results()]
