"""Bounded reads of an appended byte range."""

from __future__ import annotations

from pathlib import Path

from .errors import ReadRaceError


def read_range(path: Path, start: int, end: int) -> bytes:
    """Read exactly the bytes in ``[start, end)``.

    The file is opened and closed on every call so rotation or replacement
    between reads is never masked by a stale handle. Raises ReadRaceError
    when the file no longer holds ``end`` bytes.
    """
    if start < 0 or end < start:
        raise ValueError(f"Invalid byte range [{start}, {end})")
    if end == start:
        return b""

    with open(path, "rb") as f:
        f.seek(start)
        data = f.read(end - start)

    if len(data) < end - start:
        raise ReadRaceError(path, start, end, len(data))
    return data
