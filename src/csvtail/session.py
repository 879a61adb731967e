"""Tail-watch session: stream newly appended CSV records to a sink.

A session watches one file from its current end. Each growth signal is
handled to completion before the next one is looked at:

    read [read_position, size)  ->  split into complete records
    ->  parse, resolve header  ->  sink  ->  advance offset

The offset only moves past a record once the sink has returned for it, so
an interrupted emission is replayed rather than lost. A sink that raises
does not end the session: the failure is logged and reported to
``on_error``, and delivery resumes from the same record on the next change.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Protocol

from .detector import DEFAULT_DEBOUNCE_MS, GrowthDetector, NotificationSource
from .errors import MalformedRecord, WatchTargetNotFound
from .offsets import OffsetStore
from .reader import read_range
from .reassembler import split_records
from .records import parse_record, resolve_header, to_row
from .types import (
    GrowthEvent,
    HeaderResolved,
    InfoEvent,
    ParsedRow,
    Removed,
    Shrink,
    Signal,
    StatFailed,
    WatchState,
)

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Receives what a session produces. Methods may be sync or async."""

    def on_record(self, row: ParsedRow) -> Awaitable[Any] | None: ...

    def on_info(self, event: InfoEvent) -> Awaitable[Any] | None: ...

    def on_error(self, error: Exception) -> Awaitable[Any] | None: ...


async def _deliver(callback, arg) -> None:
    result = callback(arg)
    if inspect.isawaitable(result):
        await result


class TailWatchSession:
    """Watch one CSV file and deliver every newly appended record once, in order."""

    def __init__(
        self,
        path: str | Path,
        sink: Sink,
        delimiter: str = ",",
        encoding: str = "utf-8",
        notifications: NotificationSource | None = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        self.path = Path(path)
        self.sink = sink
        self.delimiter = delimiter
        self.encoding = encoding
        self._delimiter_byte = delimiter.encode(encoding)
        if len(self._delimiter_byte) != 1:
            raise ValueError(f"Delimiter {delimiter!r} is not a single byte in {encoding}")
        self.state = WatchState.IDLE
        self.store: OffsetStore | None = None
        self.detector: GrowthDetector | None = None
        self._notifications = notifications
        self._debounce_ms = debounce_ms
        self._lock = asyncio.Lock()
        self._stop_requested = False

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def start(self) -> OffsetStore:
        """Begin watching from the current end of the file.

        Raises WatchTargetNotFound if the file does not exist; the session
        then stays IDLE.
        """
        if self.state is not WatchState.IDLE:
            raise RuntimeError(f"Session already {self.state.value}")
        try:
            st = os.stat(self.path)
        except FileNotFoundError as e:
            raise WatchTargetNotFound(self.path) from e

        self.store = OffsetStore.at_end_of(self.path, st.st_size, inode=st.st_ino or None)
        self.detector = GrowthDetector(self.store, self._notifications, self._debounce_ms)
        self.state = WatchState.WATCHING
        logger.info("Watching %s from byte %d", self.path, st.st_size)
        return self.store

    async def run(self) -> WatchState:
        """Process signals until the file is removed or stop() is called.

        Returns the final state. The notification subscription is closed
        before this returns.
        """
        if self.state is WatchState.IDLE and not self._stop_requested:
            self.start()
        if self.state is not WatchState.WATCHING:
            return self.state

        events = self.detector.observe()
        try:
            async for signal in events:
                await self.handle(signal)
                if self.state is not WatchState.WATCHING or self._stop_requested:
                    break
        finally:
            await events.aclose()
            if self.state is WatchState.WATCHING:
                self.state = WatchState.STOPPED
                logger.info("Stopped watching %s", self.path)
        return self.state

    def stop(self) -> None:
        """Request a stop. Honoured between signals, never mid-read or mid-emit."""
        self._stop_requested = True
        if self.detector is not None:
            self.detector.stop()
        if self.state is WatchState.IDLE:
            self.state = WatchState.STOPPED

    # ─── Signal handling ─────────────────────────────────────────────────────

    async def handle(self, signal: Signal) -> None:
        """Apply one detector signal. Calls are serialized."""
        async with self._lock:
            if self.state is not WatchState.WATCHING:
                return
            if isinstance(signal, GrowthEvent):
                await self._on_growth(signal)
            elif isinstance(signal, Shrink):
                await self._on_shrink(signal)
            elif isinstance(signal, Removed):
                self.state = WatchState.REMOVED
                logger.info("%s was removed", self.path)
                await self._notify(self.sink.on_info, signal)
            elif isinstance(signal, StatFailed):
                logger.warning("Could not stat %s: %s", self.path, signal.error)
                await self._notify(self.sink.on_error, signal.error)

    async def _notify(self, callback, arg) -> bool:
        """Call one sink method. Returns False if it raised.

        A failure is logged and passed to ``on_error``, unless ``on_error``
        itself is what failed.
        """
        try:
            await _deliver(callback, arg)
        except Exception as e:
            name = getattr(callback, "__name__", repr(callback))
            logger.exception("Sink %s failed while watching %s", name, self.path)
            if callback != self.sink.on_error:
                await self._notify(self.sink.on_error, e)
            return False
        return True

    async def _on_growth(self, event: GrowthEvent) -> None:
        store = self.store
        start = store.read_position
        if event.current_size <= start:
            return

        try:
            data = await asyncio.to_thread(read_range, self.path, start, event.current_size)
        except OSError as e:
            # the next signal re-stats and retries
            logger.warning("Read of %s [%d, %d) failed: %s", self.path, start, event.current_size, e)
            await self._notify(self.sink.on_error, e)
            return

        records, fragment = split_records(store.fragment, data, self._delimiter_byte)
        logger.debug(
            "%s: read %d bytes, %d complete records, %d bytes pending",
            self.path, len(data), len(records), len(fragment),
        )

        # While records are being delivered the store only vouches for what
        # has been committed; anything undelivered is re-read next time.
        store.fragment = b""
        for raw in records:
            if not await self._consume(raw):
                logger.warning("Delivery stopped at byte %d of %s; retrying on the next change", store.offset, self.path)
                return
            store.commit(len(raw))
        store.fragment = fragment

    async def _consume(self, raw: bytes) -> bool:
        """Hand one record to the sink. False means it must be replayed."""
        store = self.store
        try:
            fields = parse_record(raw, self.delimiter, self.encoding)
            if not fields:
                return True
            header = resolve_header(store, fields)
            if header is None:
                row = to_row(raw, fields, store.header)
        except MalformedRecord as e:
            logger.info("Skipping malformed record at byte %d of %s: %s", store.offset, self.path, e.reason)
            # skipped either way, even if the report does not get through
            await self._notify(self.sink.on_error, e)
            return True

        if header is None:
            return await self._notify(self.sink.on_record, row)
        if not await self._notify(self.sink.on_info, HeaderResolved(header)):
            return False
        store.adopt_header(header)
        return True

    async def _on_shrink(self, signal: Shrink) -> None:
        self.state = WatchState.SHRUNK
        logger.info(
            "%s %s (%d -> %d bytes); starting over",
            self.path,
            "was replaced" if signal.replaced else "shrank",
            signal.previous_size,
            signal.current_size,
        )
        self.store.reset(inode=signal.inode)
        await self._notify(self.sink.on_info, signal)
        self.state = WatchState.WATCHING
