"""Exception types raised by csvtail."""

from __future__ import annotations


class CsvTailError(Exception):
    """Base class for csvtail errors."""


class WatchTargetNotFound(CsvTailError, FileNotFoundError):
    """The file to watch does not exist when watching starts."""

    def __init__(self, path):
        super().__init__(f"File not found: {path}")
        self.path = path


class ReadRaceError(CsvTailError, OSError):
    """The file shrank between stat and read, so the range is short."""

    def __init__(self, path, start: int, end: int, got: int):
        super().__init__(
            f"Expected {end - start} bytes at [{start}, {end}) of {path}, got {got}"
        )
        self.path = path
        self.start = start
        self.end = end
        self.got = got


class MalformedRecord(CsvTailError, ValueError):
    """A logical record that could not be parsed into fields."""

    def __init__(self, raw: bytes, reason: str):
        super().__init__(f"Malformed record ({reason}): {raw[:80]!r}")
        self.raw = raw
        self.reason = reason


class ConfigError(CsvTailError, ValueError):
    """An environment or command-line setting has an invalid value."""
