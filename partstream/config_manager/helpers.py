"""Helpers for parsing byte-sized configuration values."""

import re

_SIZE_PATTERN = re.compile(r"(\d+)([a-z]*)")

_UNIT_MULTIPLIERS = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "m": 1024**2,
    "mb": 1024**2,
    "g": 1024**3,
    "gb": 1024**3,
}


def parse_bytes(value: int | str) -> int:
    """Parse a part size such as ``5242880``, ``"8mb"`` or ``"1G"``.

    Units are binary and case-insensitive; no space is allowed between the
    number and the unit.

    Raises:
        ValueError: If the value is not a whole number with a known unit.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid byte value: {value!r}")
    if isinstance(value, int):
        return value

    match = _SIZE_PATTERN.fullmatch(str(value).strip().lower())
    if match is None:
        raise ValueError(f"Invalid byte value: {value!r}")

    number, unit = match.groups()
    if unit not in _UNIT_MULTIPLIERS:
        raise ValueError(f"Unknown byte unit in value: {value!r}")
    return int(number) * _UNIT_MULTIPLIERS[unit]
