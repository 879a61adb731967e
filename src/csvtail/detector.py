"""File growth detection for tail sessions.

Change notifications come from watchfiles (inotify on Linux, FSEvents on
macOS, polling elsewhere). A notification only means "look again": every
batch triggers a fresh stat, and the stat compared with the session's read
position decides what, if anything, is yielded. Bursts of notifications
therefore collapse into a single net size change.
"""

from __future__ import annotations

import asyncio
import logging
import os
from functools import partial
from pathlib import Path
from typing import AsyncIterator, Callable, Iterator

from watchfiles import awatch

from .offsets import OffsetStore
from .types import GrowthEvent, Removed, Shrink, Signal, StatFailed

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 50

# (path, stop_event) -> async iterator of opaque "something changed" batches
NotificationSource = Callable[[Path, asyncio.Event], AsyncIterator[object]]


async def watch_notifications(
    path: Path,
    stop_event: asyncio.Event,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
) -> AsyncIterator[object]:
    """Yield change batches that touch ``path``.

    The parent directory is watched rather than the file itself so deletion,
    re-creation and rename-over rotation are all seen.
    """
    target = path.resolve()
    async for changes in awatch(
        target.parent,
        stop_event=stop_event,
        debounce=debounce_ms,
        recursive=False,
    ):
        relevant = {(change, p) for change, p in changes if Path(p).resolve() == target}
        if relevant:
            yield relevant


class GrowthDetector:
    """Turn filesystem notifications for one file into growth signals."""

    def __init__(
        self,
        store: OffsetStore,
        notifications: NotificationSource | None = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        self.store = store
        self.path = store.path
        self._notifications = notifications or partial(watch_notifications, debounce_ms=debounce_ms)
        self._stop = asyncio.Event()

    def check(self) -> Signal | None:
        """Stat the file once and compare it with the store."""
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return Removed(self.path)
        except OSError as e:
            return StatFailed(e)

        position = self.store.read_position
        inode = st.st_ino or None
        if self.store.inode is not None and inode is not None and inode != self.store.inode:
            return Shrink(position, st.st_size, replaced=True, inode=inode)
        if st.st_size < position:
            return Shrink(position, st.st_size, inode=inode)
        if st.st_size > position:
            return GrowthEvent(position, st.st_size)
        return None

    def _settle(self) -> Iterator[Signal]:
        """Signals for one wake-up.

        After a Shrink has been handled the file is checked once more, so
        content already sitting in a truncated or replaced file is not left
        waiting for another notification.
        """
        signal = self.check()
        if signal is None:
            return
        logger.debug("%s: %s", self.path, signal)
        yield signal
        if isinstance(signal, Shrink):
            follow = self.check()
            # still a Shrink means the consumer did not reset; wait for the next notification
            if follow is not None and not isinstance(follow, Shrink):
                logger.debug("%s: %s", self.path, follow)
                yield follow

    async def observe(self) -> AsyncIterator[Signal]:
        """Yield signals until the file is removed or stop() is called.

        Not restartable. The file is stat'ed once as soon as the
        subscription is opened, so writes made between start() and now are
        not held back until some later notification.
        """
        notifications = self._notifications(self.path, self._stop)
        try:
            for signal in self._settle():
                yield signal
                if isinstance(signal, Removed):
                    return
            async for _ in notifications:
                if self._stop.is_set():
                    break
                for signal in self._settle():
                    yield signal
                    if isinstance(signal, Removed):
                        return
        finally:
            # release the subscription before anyone observes us as finished
            self._stop.set()
            aclose = getattr(notifications, "aclose", None)
            if aclose is not None:
                await aclose()

    def stop(self) -> None:
        self._stop.set()
