"""Record parsing and header resolution."""

from __future__ import annotations

import csv
import io

from .errors import MalformedRecord
from .offsets import OffsetStore
from .reassembler import strip_terminator
from .types import ParsedRow


def parse_record(raw: bytes, delimiter: str = ",", encoding: str = "utf-8") -> list[str]:
    """Parse one logical record into its fields.

    Returns an empty list for a blank line. Raises MalformedRecord when the
    bytes cannot be decoded or the csv module rejects the quoting.
    """
    try:
        text = strip_terminator(raw).decode(encoding)
    except UnicodeDecodeError as e:
        raise MalformedRecord(raw, f"not valid {encoding}: {e.reason}") from e

    if not text.strip():
        return []

    try:
        rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True))
    except csv.Error as e:
        raise MalformedRecord(raw, str(e)) from e

    if len(rows) != 1:
        raise MalformedRecord(raw, f"expected one record, found {len(rows)}")
    return rows[0]


def resolve_header(store: OffsetStore, fields: list[str]) -> list[str] | None:
    """Return ``fields`` as the schema if the store is still waiting for one.

    Returns None when the record is ordinary data (the header is already
    known, or the session is headerless because it started on a non-empty
    file). The store is left untouched; the caller adopts the header once
    the header record has been delivered.
    """
    if not store.header_pending:
        return None
    return list(fields)


def to_row(raw: bytes, fields: list[str], header: list[str] | None) -> ParsedRow:
    """Map fields onto the header, or keep them positional when headerless."""
    if header is None:
        return list(fields)
    if len(fields) != len(header):
        raise MalformedRecord(raw, f"expected {len(header)} fields, got {len(fields)}")
    return dict(zip(header, fields))
