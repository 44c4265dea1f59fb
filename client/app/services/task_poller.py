"""
Import task poller.

Drives an import task to a terminal status (Completed / Failed) by
refreshing it from the backend at a fixed interval.

Lifecycle per task id: Idle -> Polling -> (Completed | Failed)

- start_polling() fetches the task immediately, in the caller's context:
  a failure of this first fetch is raised to the caller
- unknown or already-terminal tasks stop right away, nothing is scheduled
- otherwise an asyncio task keeps refreshing every `interval` seconds until
  a terminal status is observed, and each refresh upserts the task into the
  TaskStore (which also moves its current-task pointer)
- fetch failures inside the loop are retried with exponential backoff; once
  `max_retries` consecutive failures are reached the loop halts, keeping
  the failure on the handle (and on TaskStore.error)
- every loop is reachable through its PollHandle, which can be cancelled
- one live loop per task id: starting again returns the running handle,
  also while the first fetch of an earlier start is still in flight
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

from client.app.errors import RemoteCallFailed, ShellError
from client.app.logging_config import get_logger
from client.app.schemas.tasks import ITStatus
from client.app.services.session import SessionContext
from client.app.stores.task_store import TaskStore

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PollHandle:
    """Handle of one task's polling loop."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        self.final_status: Optional[ITStatus] = None
        self.error: Optional[Exception] = None
        self.polls = 0
        self.cancelled = False
        self._task: Optional[asyncio.Task] = None

    @property
    def done(self) -> bool:
        return self._task is None or self._task.done()

    def cancel(self) -> bool:
        """Stop the loop. Returns False if it had already finished."""
        if self.done:
            return False
        self.cancelled = True
        self._task.cancel()
        return True

    async def wait(self) -> Optional[ITStatus]:
        """Wait for the loop to finish and return the terminal status observed (if any)."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                if not self.cancelled:
                    raise
        return self.final_status

    def __repr__(self) -> str:
        state = "done" if self.done else "polling"
        return f"PollHandle(task_id={self.task_id!r}, {state}, final_status={self.final_status})"


class TaskPoller:
    """Starts and tracks polling loops for import tasks."""

    def __init__(
        self,
        store: TaskStore,
        interval: float = 2.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        max_backoff: float = 30.0,
        sleep: Sleep = asyncio.sleep
        ):
        self.store = store
        self.interval = interval
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff
        self._sleep = sleep
        self._handles: Dict[str, PollHandle] = {}
        self._starting: Dict[str, asyncio.Future] = {}
        self._generation = 0

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_handle(self, task_id: str) -> Optional[PollHandle]:
        return self._handles.get(task_id)

    def active_handles(self) -> List[PollHandle]:
        return [handle for handle in self._handles.values() if not handle.done]

    async def start_polling(self, ctx: SessionContext, task_id: str) -> PollHandle:
        """
        Begin tracking `task_id` until it reaches a terminal status.

        Concurrent calls for the same id share one start: every caller gets
        the same handle (or the same first-fetch error).

        Raises:
            NotAuthenticated, RemoteCallFailed: if the immediate first fetch fails
        """
        running = self._handles.get(task_id)
        if running is not None and not running.done:
            logger.debug("Polling already running", task_id=task_id)
            return running

        starting = self._starting.get(task_id)
        if starting is not None:
            logger.debug("Polling start already in progress", task_id=task_id)
            return await asyncio.shield(starting)

        future = asyncio.get_running_loop().create_future()
        self._starting[task_id] = future
        try:
            handle = await self._start(ctx, task_id)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            future.exception()  # mark retrieved
            raise
        finally:
            if self._starting.get(task_id) is future:
                del self._starting[task_id]
        future.set_result(handle)
        return handle

    async def _start(self, ctx: SessionContext, task_id: str) -> PollHandle:
        handle = PollHandle(task_id)
        generation = self._generation

        known = self.store.get(task_id)
        if known is not None and known.status.is_terminal:
            handle.final_status = known.status
            return handle

        task = await self.store.fetch_import_task(ctx, task_id)
        handle.polls = 1
        if task is None:
            logger.info("Import task not found, not polling", task_id=task_id)
            return handle
        if task.status.is_terminal:
            handle.final_status = task.status
            return handle
        if generation != self._generation:
            handle.cancelled = True
            logger.info("Polling cancelled before start", task_id=task_id)
            return handle

        handle._task = asyncio.create_task(self._run(ctx, handle), name=f"poll-import-task-{task_id}")
        self._handles[task_id] = handle
        logger.info("Polling started", task_id=task_id, status=task.status.value, interval=self.interval)
        return handle

    def cancel(self, task_id: str) -> bool:
        handle = self._handles.get(task_id)
        return handle.cancel() if handle is not None else False

    def cancel_all(self) -> int:
        """
        Cancel every live loop and return how many were cancelled.

        Starts still waiting on their first fetch complete without a loop.
        """
        self._generation += 1
        return sum(1 for handle in list(self._handles.values()) if handle.cancel())

    async def shutdown(self) -> None:
        """Cancel every loop and wait for them to unwind."""
        handles = list(self._handles.values())
        self.cancel_all()
        for handle in handles:
            await handle.wait()
        self._handles.clear()

    # =========================================================================
    # LOOP
    # =========================================================================

    def backoff_delay(self, failures: int) -> float:
        """Delay before the retry following `failures` consecutive failures."""
        return min(self.interval * (self.backoff_factor ** failures), self.max_backoff)

    async def _run(self, ctx: SessionContext, handle: PollHandle) -> None:
        failures = 0
        try:
            while True:
                await self._sleep(self.interval if failures == 0 else self.backoff_delay(failures))
                try:
                    task = await self.store.fetch_import_task(ctx, handle.task_id)
                except RemoteCallFailed as e:
                    failures += 1
                    if failures > self.max_retries:
                        handle.error = e
                        logger.error("Polling halted after repeated failures", task_id=handle.task_id, failures=failures, error=e.message)
                        return
                    logger.warning("Poll failed, retrying", task_id=handle.task_id, failures=failures, retry_in=self.backoff_delay(failures))
                    continue
                except ShellError as e:
                    handle.error = e
                    logger.error("Polling halted", task_id=handle.task_id, error=e.message)
                    return

                failures = 0
                handle.polls += 1
                if task is None:
                    logger.info("Import task disappeared, polling stopped", task_id=handle.task_id)
                    return
                if task.status.is_terminal:
                    handle.final_status = task.status
                    logger.info("Import task finished", task_id=handle.task_id, status=task.status.value, polls=handle.polls)
                    return
        except asyncio.CancelledError:
            logger.info("Polling cancelled", task_id=handle.task_id)
            raise
        finally:
            if self._handles.get(handle.task_id) is handle:
                del self._handles[handle.task_id]
