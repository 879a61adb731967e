"""Shared test doubles."""

from __future__ import annotations

import asyncio


class RecordingSink:
    """Sink that remembers everything it was given."""

    def __init__(self):
        self.rows = []
        self.infos = []
        self.errors = []

    def on_record(self, row):
        self.rows.append(row)

    def on_info(self, event):
        self.infos.append(event)

    def on_error(self, error):
        self.errors.append(error)


class FakeNotifications:
    """Notification source driven by the test instead of the filesystem.

    poke() delivers one "something changed" batch; finish() ends the stream
    once everything queued before it has been delivered.
    """

    def __init__(self):
        self.queue: asyncio.Queue = asyncio.Queue()
        self.opened = False
        self.closed = False

    def poke(self, times: int = 1) -> None:
        for _ in range(times):
            self.queue.put_nowait({"changed"})

    def finish(self) -> None:
        self.queue.put_nowait(None)

    async def __call__(self, path, stop_event):
        self.opened = True
        try:
            while not stop_event.is_set():
                get = asyncio.ensure_future(self.queue.get())
                stopped = asyncio.ensure_future(stop_event.wait())
                done, pending = await asyncio.wait({get, stopped}, return_when=asyncio.FIRST_COMPLETED)
                for task in pending:
                    task.cancel()
                if get not in done:
                    return
                item = get.result()
                if item is None:
                    return
                yield item
        finally:
            self.closed = True


async def wait_for(predicate, timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it is true or the timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
