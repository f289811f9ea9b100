"""Single-consumer event queue in front of the moderation pipeline.

Events are processed strictly one at a time in arrival order, which keeps
cooldown decisions for the same (user, channel) ordered.
"""

from __future__ import annotations

import asyncio
import contextlib

from rule_guardian.logging import get_logger
from rule_guardian.moderation.models import MessageEvent
from rule_guardian.moderation.pipeline import ModerationPipeline

log = get_logger("rule_guardian.moderation.dispatcher")

# Max seconds to wait for queued events on shutdown before cancelling.
_DRAIN_TIMEOUT_SECONDS = 10


class MessageDispatcher:
    """Feed message events to a :class:`ModerationPipeline` from one worker task."""

    def __init__(self, pipeline: ModerationPipeline, maxsize: int = 0) -> None:
        self._pipeline = pipeline
        self._queue: asyncio.Queue[MessageEvent] = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Spawn the consumer task."""
        if self.is_running:
            log.warning("dispatcher_already_running")
            return
        self._worker = asyncio.create_task(self._consume(), name="rule-guardian-dispatcher")
        log.info("dispatcher_started", maxsize=self._queue.maxsize)

    async def submit(self, event: MessageEvent) -> None:
        """Queue *event*, waiting for room if a bounded queue is full.

        Events are never dropped: a full queue holds the caller back instead.
        """
        if self._queue.full():
            log.warning(
                "dispatch_queue_full",
                message_id=event.message_id,
                channel_id=event.channel_id,
                pending=self._queue.qsize(),
            )
        await self._queue.put(event)

    async def join(self) -> None:
        """Wait until every queued event has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        """Drain queued events (bounded wait), then cancel the consumer."""
        worker = self._worker
        if worker is None:
            return

        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._queue.join(), timeout=_DRAIN_TIMEOUT_SECONDS)

        worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker
        self._worker = None
        log.info("dispatcher_stopped", dropped=self._queue.qsize())

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._pipeline.handle(event)
            except Exception:
                log.exception("pipeline_failed", message_id=event.message_id)
            finally:
                self._queue.task_done()
