"""
Queue mutations for fuzzytunes.
"""
import concurrent.futures
from typing import Callable, Optional, Sequence

from fuzzytunes.client import ControlClient
from fuzzytunes.logging_config import get_logger

logger = get_logger('dispatch')

NEXT = "next"
PREV = "prev"


class QueueDispatcher:
    """Turns confirmed selections into control client calls.

    Background calls are best effort: a failure is logged and dropped.
    """

    def __init__(self, client: ControlClient, background_workers: int = 2):
        self.client = client
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=background_workers, thread_name_prefix="fuzzytunes-queue"
        )

    def _submit(self, description: str, fn: Callable, *args) -> None:
        future = self._executor.submit(fn, *args)

        def _log_failure(done: concurrent.futures.Future) -> None:
            error = done.exception()
            if error is not None:
                logger.debug(f"Background {description} failed: {error}")

        future.add_done_callback(_log_failure)

    def enqueue(self, items: Sequence[str]) -> int:
        """Append ``items`` to the queue in order. Returns how many were added."""
        if not items:
            return 0
        self.client.add(list(items))
        logger.info(f"Enqueued {len(items)} items")
        return len(items)

    def enqueue_and_play(self, items: Sequence[str]) -> Optional[int]:
        """Enqueue ``items`` and start playing the first of them.

        Returns the queue position played, or None if there was nothing to add.
        """
        if not items:
            return None
        before = len(self.client.queue("%position%"))
        count = self.enqueue(items)
        if count == 1:
            index = before + 1
        else:
            after = len(self.client.queue("%position%"))
            index = after - count + 1
        self.client.play(index)
        logger.info(f"Playing queue position {index}")
        return index

    def delete(self, positions: Sequence[int], background: bool = False) -> None:
        if not positions:
            return
        if background:
            self._submit("delete", self.client.delete, list(positions))
        else:
            self.client.delete(list(positions))

    def play(self, position: int, background: bool = False) -> None:
        if background:
            self._submit("play", self.client.play, position)
        else:
            self.client.play(position)

    def jump(self, direction: str) -> None:
        """Skip to the next or previous track."""
        if direction == NEXT:
            self.client.next()
        elif direction == PREV:
            self.client.prev()
        else:
            raise ValueError(f"Unknown jump direction: {direction}")

    def clear(self) -> None:
        self.client.clear()
        logger.info("Queue cleared")

    def close(self) -> None:
        """Wait for pending background calls."""
        self._executor.shutdown(wait=True)
