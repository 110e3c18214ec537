# requests_bridge/workers/patch_worker.py
"""
Background worker that retries the index.html patch while the web client is being deployed.

Started once when the host service boots; stops after the first success, after
MAX_ATTEMPTS tries, or as soon as the host asks it to shut down.
"""

import asyncio
import contextlib
import enum
import logging
from typing import Callable, Optional

from requests_bridge.patcher import locate_and_patch

logger = logging.getLogger("requests_bridge.workers.patch_worker")

MAX_ATTEMPTS = 60  # 30 seconds at the default delay
DELAY_SECONDS = 0.5
PROGRESS_EVERY = 10

EXHAUSTED_MESSAGE = (
    "Could not patch index.html automatically. The plugin keeps working, "
    "but the 'Discover' button will not be displayed. Manual fix: insert the "
    "script tag into index.html, or start the container with a writable "
    "jellyfin-web volume."
)


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


class PatchScheduler:
    def __init__(
        self,
        patch: Callable[[], Optional[object]] = locate_and_patch,
        max_attempts: int = MAX_ATTEMPTS,
        delay_seconds: float = DELAY_SECONDS,
    ):
        self.patch = patch
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self.state = SchedulerState.IDLE
        self.attempts = 0
        self.patched_path = None
        self._task: Optional[asyncio.Task] = None
        self._stop: Optional[asyncio.Event] = None

    def start(self) -> None:
        """Launch the retry loop on the running event loop. Only the first call has any effect."""
        if self.state is not SchedulerState.IDLE:
            logger.debug("Patch scheduler already started (state=%s)", self.state.value)
            return
        self._stop = asyncio.Event()
        self.state = SchedulerState.RUNNING
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop.set()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task

    async def wait(self) -> SchedulerState:
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        return self.state

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "attempts": self.attempts,
            "max_attempts": self.max_attempts,
            "patched_path": str(self.patched_path) if self.patched_path else None,
        }

    async def _sleep_or_stop(self) -> bool:
        """Wait out the delay; True when a stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.delay_seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _run(self) -> None:
        try:
            for attempt in range(1, self.max_attempts + 1):
                if self._stop.is_set():
                    self.state = SchedulerState.CANCELLED
                    return

                self.attempts = attempt
                try:
                    path = self.patch()
                except Exception:
                    logger.warning("Attempt %d/%d failed", attempt, self.max_attempts, exc_info=True)
                    path = None

                if path is not None:
                    self.patched_path = path
                    self.state = SchedulerState.SUCCEEDED
                    logger.info("Requests script tag injected into %s", path)
                    return

                if attempt % PROGRESS_EVERY == 0:
                    logger.debug("Attempt %d/%d - waiting for index.html", attempt, self.max_attempts)

                if attempt < self.max_attempts and await self._sleep_or_stop():
                    self.state = SchedulerState.CANCELLED
                    return

            self.state = SchedulerState.EXHAUSTED
            logger.warning(EXHAUSTED_MESSAGE)
        except asyncio.CancelledError:
            self.state = SchedulerState.CANCELLED
            raise


async def run_once() -> SchedulerState:
    scheduler = PatchScheduler()
    scheduler.start()
    try:
        return await scheduler.wait()
    finally:
        await scheduler.stop()


if __name__ == "__main__":
    from requests_bridge.config import settings
    from requests_bridge.telemetry import configure_logging

    configure_logging(settings.LOG_LEVEL, settings.DEBUG)
    asyncio.run(run_once())
