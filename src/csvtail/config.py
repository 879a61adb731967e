"""Settings from the environment (and an optional .env file)."""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .detector import DEFAULT_DEBOUNCE_MS
from .errors import ConfigError


@dataclass
class Settings:
    delimiter: str = ","
    encoding: str = "utf-8"
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    log_level: str = "WARNING"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def check_format(delimiter: str, encoding: str) -> None:
    """Reject a delimiter/encoding pair the byte-level record splitter cannot handle.

    Records are split on raw ``\\n``, ``"`` and delimiter bytes, so the
    encoding must write those as the same single bytes ASCII does (UTF-8,
    Latin-1, cp1252 are fine; UTF-16 and UTF-32 are not).
    """
    if len(delimiter) != 1:
        raise ConfigError(f"Delimiter must be a single character, got {delimiter!r}")
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ConfigError(f"Unknown encoding {encoding!r}") from e
    sample = '\n"' + delimiter
    try:
        encoded = sample.encode(encoding)
    except UnicodeEncodeError as e:
        raise ConfigError(f"Delimiter {delimiter!r} cannot be written in {encoding}") from e
    if len(encoded) != 3 or encoded[:2] != b'\n"':
        raise ConfigError(f"Encoding {encoding!r} is not ASCII-compatible; use UTF-8 or a single-byte encoding")


def load_settings(dotenv: bool = True) -> Settings:
    """Build Settings from CSVTAIL_* environment variables.

    Variables already set in the environment win over the .env file.
    """
    if dotenv:
        load_dotenv()

    delimiter = os.getenv("CSVTAIL_DELIMITER", ",")
    if len(delimiter) != 1:
        raise ConfigError(f"CSVTAIL_DELIMITER must be a single character, got {delimiter!r}")
    encoding = os.getenv("CSVTAIL_ENCODING", "utf-8")
    check_format(delimiter, encoding)

    return Settings(
        delimiter=delimiter,
        encoding=encoding,
        debounce_ms=_int_env("CSVTAIL_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS),
        log_level=os.getenv("CSVTAIL_LOG_LEVEL", "WARNING").upper(),
    )
