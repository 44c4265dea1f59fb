"""
Shell state container.

Everything the client shell keeps in memory (stores, reconciler, poller,
views, caches) lives in one explicit ShellState built by
create_shell_state() and passed to whoever needs it. There is no
module-level instance: tests and the CLI each build their own, and reset()
brings one back to its freshly created state.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from client.app.config import Settings, get_settings
from client.app.logging_config import get_logger
from client.app.services.gateway import CommandGateway
from client.app.services.reconciler import PositionReconciler
from client.app.services.session import SessionContext
from client.app.services.task_poller import TaskPoller
from client.app.services.view_registry import ViewRegistry
from client.app.stores.asset_store import AssetStore
from client.app.stores.group_store import GroupStore
from client.app.stores.plan_store import PlanStore
from client.app.stores.task_store import TaskStore
from client.app.utils.cache_utils import CacheRegistry

logger = get_logger(__name__)


@dataclass
class ShellState:
    gateway: CommandGateway
    settings: Settings
    caches: CacheRegistry
    reconciler: PositionReconciler
    assets: AssetStore
    groups: GroupStore
    plans: PlanStore
    tasks: TaskStore
    poller: TaskPoller
    views: ViewRegistry

    @property
    def positions(self) -> Dict[str, dict]:
        """Current Position projection keyed by asset code."""
        return self.reconciler.snapshot()

    async def init_data(self, ctx: SessionContext) -> None:
        """
        Load the user's data in dependency order: asset types, groups, assets, plans.

        Stops at the first failure; stores loaded before it keep their data.
        """
        await self.assets.fetch_asset_types()
        await self.groups.fetch_user_groups(ctx)
        await self.assets.fetch_user_assets(ctx)
        await self.plans.fetch_user_plans(ctx)
        logger.info(
            "Shell data loaded",
            user_id=ctx.user_id,
            groups=len(self.groups),
            assets=len(self.assets),
            plans=len(self.plans),
            )

    async def delete_group(self, ctx: SessionContext, group_id: int):
        """
        Delete a group and un-assign the local assets that referenced it.

        The backend does not cascade; assets are kept with group_id=None.
        """
        response = await self.groups.delete(ctx, group_id)
        self.assets.orphan_group(group_id)
        return response

    def reset(self) -> None:
        """Cancel polling and drop every store, projection, view and cache."""
        cancelled = self.poller.cancel_all()
        self.assets.reset()
        self.groups.reset()
        self.plans.reset()
        self.tasks.reset()
        self.reconciler.reset()
        self.views.reset()
        self.caches.clear_all()
        logger.info("Shell state reset", cancelled_polls=cancelled)


def create_shell_state(gateway: CommandGateway, settings: Optional[Settings] = None) -> ShellState:
    """Build a fresh ShellState wired around `gateway`."""
    settings = settings or get_settings()
    caches = CacheRegistry()
    reconciler = PositionReconciler()
    tasks = TaskStore(gateway)
    return ShellState(
        gateway=gateway,
        settings=settings,
        caches=caches,
        reconciler=reconciler,
        assets=AssetStore(gateway, reconciler, caches, asset_types_ttl=settings.ASSET_TYPES_CACHE_TTL),
        groups=GroupStore(gateway),
        plans=PlanStore(gateway, reconciler),
        tasks=tasks,
        poller=TaskPoller(
            tasks,
            interval=settings.POLL_INTERVAL_SECONDS,
            max_retries=settings.POLL_MAX_RETRIES,
            backoff_factor=settings.POLL_BACKOFF_FACTOR,
            max_backoff=settings.POLL_MAX_BACKOFF_SECONDS,
            ),
        views=ViewRegistry(settings.DEFAULT_VIEW_ID, settings.DEFAULT_VIEW_TITLE),
        )
