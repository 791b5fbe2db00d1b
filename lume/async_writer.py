import asyncio
import logging
from typing import Callable, Optional

from lume.domain import AppState

logger = logging.getLogger(__name__)


class AsyncStateWriter:
    """Persist state snapshots off the event loop, one at a time and in order.

    ``submit`` only records the newest snapshot; a single drain task writes
    whatever is newest when the previous write finishes. Snapshots submitted
    while a write is in flight may be skipped, but an older snapshot is never
    written after a newer one.
    """

    def __init__(self, save: Callable[[AppState], None]):
        self._save = save
        self._pending: Optional[AppState] = None
        self._task: Optional[asyncio.Task] = None
        self.version = 0
        self.saved_version = 0

    def submit(self, state: AppState) -> None:
        self.version += 1
        self._pending = state
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending is not None:
            state, version = self._pending, self.version
            self._pending = None
            try:
                await asyncio.to_thread(self._save, state)
            except Exception:
                logger.exception("Background save of state version %d failed", version)
                continue
            self.saved_version = version

    async def flush(self) -> None:
        if self._task is not None:
            await self._task
