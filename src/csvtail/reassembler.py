"""Reassemble complete CSV records from arbitrarily chunked bytes.

Reads can end anywhere: mid-field, mid-line, or inside a quoted value that
spans several physical lines. Only bytes up to a record terminator that sits
outside any quoted field are handed out as records; everything after it is
returned as the fragment to carry into the next call.

The byte scan relies on ``\\n``, ``"`` and the delimiter each being a single
byte that never appears inside another character's encoding, which holds
for ASCII-compatible encodings only.
"""

from __future__ import annotations

NEWLINE = b"\n"
QUOTE = b'"'

# scanner states, as in the csv module's reader
_FIELD_START, _IN_FIELD, _IN_QUOTED, _QUOTE_IN_QUOTED = range(4)


def split_records(fragment: bytes, data: bytes, delimiter: bytes = b",") -> tuple[list[bytes], bytes]:
    """Split ``fragment + data`` into complete records and a new fragment.

    Each returned record keeps its terminator so callers can account for
    its exact byte length. The trailing bytes after the last terminator are
    never a record, even when they end exactly at the end of ``data``.

    A quote only opens a quoted field at the start of a field. Inside one,
    ``""`` is an escaped quote and a lone ``"`` closes it; a quote anywhere
    else is an ordinary character (``1,12" monitor`` is one plain record).
    A newline ends the record unless it falls inside a quoted field.
    """
    if len(delimiter) != 1:
        raise ValueError(f"delimiter must be a single byte, got {delimiter!r}")
    buf = fragment + data
    newline, quote, delim = NEWLINE[0], QUOTE[0], delimiter[0]
    records: list[bytes] = []
    start = 0
    state = _FIELD_START

    for i, c in enumerate(buf):
        if state == _IN_QUOTED:
            if c == quote:
                state = _QUOTE_IN_QUOTED
            continue
        if state == _QUOTE_IN_QUOTED:
            if c == quote:
                state = _IN_QUOTED
                continue
            # the quoted section closed on the previous byte
            state = _IN_FIELD
        if c == newline:
            records.append(buf[start:i + 1])
            start = i + 1
            state = _FIELD_START
        elif c == delim:
            state = _FIELD_START
        elif c == quote and state == _FIELD_START:
            state = _IN_QUOTED
        else:
            state = _IN_FIELD

    return records, buf[start:]


def strip_terminator(record: bytes) -> bytes:
    """Drop the trailing ``\\n`` or ``\\r\\n`` from a record."""
    if record.endswith(b"\r\n"):
        return record[:-2]
    if record.endswith(NEWLINE):
        return record[:-1]
    return record
