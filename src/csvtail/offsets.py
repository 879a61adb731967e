"""Per-file read bookkeeping for a tail session. Pure state, no I/O."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class OffsetStore:
    """Where a session is in its file.

    Every byte before ``offset`` belongs to a record that has already been
    emitted (or deliberately skipped). ``fragment`` holds the bytes read
    after ``offset`` that do not yet form a complete record, so the next
    read starts at ``read_position``.
    """

    path: Path
    offset: int = 0
    header: list[str] | None = None
    fragment: bytes = b""
    header_pending: bool = True
    inode: int | None = None

    @classmethod
    def at_end_of(cls, path: Path, size: int, inode: int | None = None) -> OffsetStore:
        """Start from the current end of the file.

        A header is only captured when the file is empty, otherwise rows are
        emitted positionally.
        """
        return cls(path=path, offset=size, header_pending=size == 0, inode=inode)

    @property
    def read_position(self) -> int:
        return self.offset + len(self.fragment)

    def commit(self, nbytes: int) -> None:
        """Advance past one consumed record."""
        if nbytes < 0:
            raise ValueError(f"Cannot commit a negative byte count: {nbytes}")
        self.offset += nbytes

    def adopt_header(self, header: list[str]) -> None:
        self.header = list(header)
        self.header_pending = False

    def reset(self, inode: int | None = None) -> None:
        """Forget everything; the file is treated as brand new."""
        self.offset = 0
        self.fragment = b""
        self.header = None
        self.header_pending = True
        if inode is not None:
            self.inode = inode
