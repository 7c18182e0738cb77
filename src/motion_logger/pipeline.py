"""Single-consumer event pipeline feeding the log and the display."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Tuple

from .display import DisplaySink, apply_records
from .events import SensorEvent
from .logs import LogAppender
from .normalizer import normalize

logger = logging.getLogger(__name__)

_STOP = object()


class EventPipeline:
    """
    Serializes sensor events onto one consumer task.

    Producers call ``submit`` from any thread. The consumer normalizes each
    event, appends the records to the log and updates the display, one event
    at a time, so the appender and display only ever see a single writer.
    """

    def __init__(self, appender: LogAppender, display: DisplaySink) -> None:
        self.appender = appender
        self.display = display

        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._consumer: Optional[asyncio.Task] = None
        self._accepting = False
        self._closed = False

        # Statistics
        self.processed_count = 0
        self.record_count = 0
        self.dropped_count = 0
        self.error_count = 0

    @property
    def is_running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    async def start(self) -> None:
        """Start the consumer task on the running loop."""
        if self.is_running:
            return

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._accepting = True
        self._closed = False
        self._consumer = asyncio.create_task(self._consume())

    async def stop(self) -> None:
        """Process everything already submitted, then stop the consumer."""
        if not self.is_running:
            return

        self._accepting = False
        # Queue behind callbacks already scheduled by other threads
        self._loop.call_soon(self._close_queue)
        await self._consumer
        self._consumer = None

    def submit(self, event: SensorEvent) -> None:
        """Queue an event for logging and display. Safe from any thread."""
        self._enqueue(event, True)

    def show(self, event: SensorEvent) -> None:
        """Queue an event for display only; nothing is written to the log."""
        self._enqueue(event, False)

    def process(self, event: SensorEvent, persist: bool = True) -> int:
        """Normalize one event and fan the records out; return records written."""
        records = normalize(event)
        written = 0

        if persist:
            for record in records:
                if self.appender.append(record):
                    written += 1

        apply_records(self.display, records)

        self.processed_count += 1
        self.record_count += written
        return written

    def _enqueue(self, event: SensorEvent, persist: bool) -> None:
        if not self._accepting or self._loop is None:
            self.dropped_count += 1
            logger.debug(f"Pipeline not running, dropped {type(event).__name__}")
            return

        item: Tuple[SensorEvent, bool] = (event, persist)
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._queue.put_nowait(item)
        else:
            self._loop.call_soon_threadsafe(self._deliver, item)

    def _deliver(self, item: Tuple[SensorEvent, bool]) -> None:
        # A threaded submit can pass the accepting check just before stop()
        if self._closed:
            self.dropped_count += 1
            logger.debug(f"Pipeline stopped, dropped {type(item[0]).__name__}")
            return
        self._queue.put_nowait(item)

    def _close_queue(self) -> None:
        self._closed = True
        self._queue.put_nowait(_STOP)

    async def _consume(self) -> None:
        while True:
            item = await self._queue.get()
            if item is _STOP:
                break

            event, persist = item
            try:
                self.process(event, persist)
            except Exception as e:
                self.error_count += 1
                logger.error(f"Failed to process {type(event).__name__}: {e}")
