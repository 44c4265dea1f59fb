"""
Import task store.

Tracks background historical-data imports. Newly seen tasks are prepended
(most recent first) and the last task written becomes `current_task`.

Status never moves backwards: a response reporting an earlier status than
the one already stored (an out-of-order poll response) is ignored.

The store also keeps the list of datasets earlier imports made available
(`available_data`), refreshed as a whole.
"""
from __future__ import annotations

from typing import List, Optional

from client.app.errors import RemoteCallFailed
from client.app.logging_config import get_logger
from client.app.schemas.tasks import ITAvailableData, ITStartItem, ITStatus, ITTask
from client.app.services.gateway import Command
from client.app.services.session import SessionContext
from client.app.stores.base import EntityStore

logger = get_logger(__name__)


class TaskStore(EntityStore[ITTask]):
    """Store of import tasks."""

    store_name = "task"
    record_type = ITTask

    def __init__(self, gateway):
        super().__init__(gateway)
        self.current_task: Optional[ITTask] = None
        self.available_data: List[ITAvailableData] = []

    # =========================================================================
    # GETTERS
    # =========================================================================

    def _with_status(self, *statuses: ITStatus) -> List[ITTask]:
        return [task for task in self._items if task.status in statuses]

    def pending_tasks(self) -> List[ITTask]:
        """Tasks not yet finished (Pending or Running)."""
        return self._with_status(ITStatus.PENDING, ITStatus.RUNNING)

    def completed_tasks(self) -> List[ITTask]:
        return self._with_status(ITStatus.COMPLETED)

    def failed_tasks(self) -> List[ITTask]:
        return self._with_status(ITStatus.FAILED)

    def available_data_by_type(self, asset_type: str) -> List[ITAvailableData]:
        return [data for data in self.available_data if data.asset_type == asset_type]

    # =========================================================================
    # LOCAL WRITES
    # =========================================================================

    def upsert_task(self, task: ITTask) -> ITTask:
        """
        Replace the task with the same id or prepend it, and make it current.

        Returns:
            The task now stored (the existing one if `task` would regress its status)
        """
        existing = self.get(task.id)
        if existing is not None and task.status.rank < existing.status.rank:
            logger.warning(
                "Ignoring out-of-order task status",
                task_id=task.id,
                stored=existing.status.value,
                received=task.status.value,
                )
            return existing
        if existing is not None and existing.status.is_terminal and task.status != existing.status:
            logger.warning("Ignoring status change of finished task", task_id=task.id, stored=existing.status.value)
            return existing

        self._upsert(task, prepend=True)
        self.current_task = task
        return task

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def fetch_import_tasks(self, ctx: SessionContext) -> List[ITTask]:
        """Replace the whole collection with the backend's task list."""
        async with self._operation("fetch_import_tasks"):
            ctx.require_user_id()
            data = await self._call(Command.GET_IMPORT_TASKS)
            tasks = self._parse_many(Command.GET_IMPORT_TASKS, data)
            self._merge_replace(tasks, lambda item: True)
            logger.info("Import tasks loaded", count=len(tasks))
            return tasks

    async def fetch_import_task(self, ctx: SessionContext, task_id: str) -> Optional[ITTask]:
        """
        Refresh one task.

        Returns:
            The stored task, or None when the backend does not know the id
        """
        async with self._operation("fetch_import_task", task_id=task_id):
            ctx.require_user_id()
            data = await self._call(Command.GET_IMPORT_TASK, {"id": task_id})
            if data is None:
                return None
            task = self._parse(Command.GET_IMPORT_TASK, data)
            return self.upsert_task(task)

    async def start_import(self, ctx: SessionContext, item: ITStartItem) -> ITTask:
        """Ask the backend to start an import; the new task becomes current."""
        async with self._operation("start_import", symbol=item.symbol):
            ctx.require_user_id()
            data = await self._call(Command.START_IMPORT, item.to_command_args())
            task = self._parse(Command.START_IMPORT, data)
            self.upsert_task(task)
            logger.info("Import started", task_id=task.id, symbol=item.symbol, source=item.source)
            return task

    async def fetch_available_data(self, ctx: SessionContext) -> List[ITAvailableData]:
        """Replace `available_data` with the datasets the backend already holds."""
        async with self._operation("fetch_available_data"):
            ctx.require_user_id()
            data = await self._call(Command.GET_AVAILABLE_DATA)
            if data is None:
                data = []
            if not isinstance(data, list):
                raise RemoteCallFailed(Command.GET_AVAILABLE_DATA.value, "expected a list of datasets")
            datasets = [self._parse_as(ITAvailableData, Command.GET_AVAILABLE_DATA, item) for item in data]
            self.available_data = datasets
            logger.info("Available data loaded", count=len(datasets))
            return list(datasets)

    def reset(self) -> None:
        super().reset()
        self.current_task = None
        self.available_data = []
