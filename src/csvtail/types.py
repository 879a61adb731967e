"""Core data types for csvtail."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union


class WatchState(Enum):
    """Lifecycle of a TailWatchSession."""

    IDLE = "idle"
    WATCHING = "watching"
    SHRUNK = "shrunk"
    REMOVED = "removed"
    STOPPED = "stopped"


@dataclass(frozen=True)
class GrowthEvent:
    """The file grew past the session's read position."""

    previous_size: int
    current_size: int


@dataclass(frozen=True)
class Shrink:
    """The file got smaller than what was read, or was replaced by a new file."""

    previous_size: int
    current_size: int
    replaced: bool = False
    inode: int | None = None


@dataclass(frozen=True)
class Removed:
    """The watched file no longer exists. Terminal."""

    path: Path


@dataclass(frozen=True)
class StatFailed:
    """A stat call failed for a reason other than the file being gone."""

    error: OSError


@dataclass(frozen=True)
class HeaderResolved:
    """The first record of a fresh file was captured as the field names."""

    fields: list[str]


# Signals produced by the GrowthDetector
Signal = Union[GrowthEvent, Shrink, Removed, StatFailed]

# Informational events delivered through Sink.on_info
InfoEvent = Union[HeaderResolved, Shrink, Removed]

# A parsed record: keyed by header when one is known, positional otherwise
ParsedRow = Union[dict[str, str], list[str]]
