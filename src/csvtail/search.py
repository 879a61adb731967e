"""One-shot substring search over a whole CSV file."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class SearchResult:
    """Matching rows of a search, in file order."""

    headers: list[str]
    rows: list[dict[str, str]] = field(default_factory=list)


def _trim(row: dict) -> dict[str, str]:
    out = {}
    for key, value in row.items():
        if key is None:
            # surplus fields beyond the header land under None
            continue
        out[key.strip()] = (value or "").strip()
    return out


def search_file(
    path: str | Path,
    term: str,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> SearchResult:
    """Return rows where any field contains ``term``, ignoring case.

    The first line is the header. Every field is whitespace-trimmed before
    matching and in the result.
    """
    if not term:
        raise ValueError("Search term cannot be empty")

    needle = term.lower()
    with open(path, newline="", encoding=encoding) as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        headers = [h.strip() for h in (reader.fieldnames or [])]
        result = SearchResult(headers=headers)
        for raw in reader:
            row = _trim(raw)
            if any(needle in value.lower() for value in row.values()):
                result.rows.append(row)
    return result
