"""
Asset store.

Owns the acting user's assets and the asset-type reference list. Every
successful asset write is forwarded to the PositionReconciler, which owns
the holdings half (cost, amount) of the position projection.

Asset types change rarely and are cached in a TTL cache owned by the shell
state; pass force=True to bypass it.
"""
from __future__ import annotations

from typing import List, Optional

from client.app.logging_config import get_logger
from client.app.schemas.assets import (
    FAAsset,
    FAAssetCreateItem,
    FAAssetFilter,
    FAAssetType,
    FAAssetUpdateItem,
    )
from client.app.services.gateway import Command, CommandGateway
from client.app.services.reconciler import PositionReconciler
from client.app.services.session import SessionContext
from client.app.stores.base import CrudStore
from client.app.utils.cache_utils import CacheRegistry

logger = get_logger(__name__)

ASSET_TYPES_CACHE = "asset_types"


class AssetStore(CrudStore[FAAsset]):
    """Store of the acting user's assets."""

    store_name = "asset"
    record_type = FAAsset
    list_command = Command.ASSET_GET_USER_ASSETS
    create_command = Command.ASSET_CREATE_ASSET
    update_command = Command.ASSET_UPDATE_ASSET
    delete_command = Command.ASSET_DELETE_ASSET

    def __init__(
        self,
        gateway: CommandGateway,
        reconciler: PositionReconciler,
        caches: CacheRegistry,
        asset_types_ttl: int = 3600
        ):
        super().__init__(gateway)
        self.reconciler = reconciler
        self._asset_types_cache = caches.get_ttl_cache(ASSET_TYPES_CACHE, maxsize=1, ttl=asset_types_ttl)
        self.asset_types: List[FAAssetType] = []

    # =========================================================================
    # ASSET TYPES (reference data)
    # =========================================================================

    async def fetch_asset_types(self, force: bool = False) -> List[FAAssetType]:
        """
        Load the asset-type list, from cache unless expired or `force` is set.

        Asset types are global reference data, so no ownership context is needed.
        """
        if not force:
            cached = self._asset_types_cache.get(ASSET_TYPES_CACHE)
            if cached is not None:
                self.asset_types = list(cached)
                return list(cached)

        async with self._operation("fetch_asset_types"):
            data = await self._call(Command.ASSET_GET_ASSET_TYPES)
            if not isinstance(data, list):
                data = []
            types = [self._parse_as(FAAssetType, Command.ASSET_GET_ASSET_TYPES, item) for item in data]
            self._asset_types_cache[ASSET_TYPES_CACHE] = tuple(types)
            self.asset_types = types
            logger.info("Asset types loaded", count=len(types))
            return list(types)

    # =========================================================================
    # RECONCILER HOOKS
    # =========================================================================

    def _list_payload(self, user_id: int, flt: Optional[FAAssetFilter]) -> dict:
        return {
            "request": {
                "user_id": user_id,
                "asset_type_id": flt.asset_type_id if flt else None,
                "group_id": flt.group_id if flt else None,
                }
            }

    def _after_upsert(self, record: FAAsset) -> None:
        self.reconciler.apply_asset(record)

    def _after_delete(self, entity_id, record: Optional[FAAsset]) -> None:
        if record is not None:
            self.reconciler.remove_asset(record.code)

    def _after_list(self, fresh: List[FAAsset], removed: List[FAAsset]) -> None:
        fresh_codes = {asset.code for asset in fresh}
        for asset in removed:
            if asset.code not in fresh_codes:
                self.reconciler.remove_asset(asset.code)
        self.reconciler.apply_assets(fresh)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def init_asset_data(self, ctx: SessionContext) -> List[FAAsset]:
        """Load asset types, then the user's assets (fails fast, in order)."""
        async with self._operation("init_asset_data"):
            await self.fetch_asset_types()
            return await self.list(ctx)

    async def fetch_user_assets(
        self,
        ctx: SessionContext,
        asset_type_id: Optional[int] = None,
        group_id: Optional[int] = None
        ) -> List[FAAsset]:
        flt = None
        if asset_type_id is not None or group_id is not None:
            flt = FAAssetFilter(asset_type_id=asset_type_id, group_id=group_id)
        return await self.list(ctx, flt)

    async def create_asset(
        self,
        ctx: SessionContext,
        asset_type_id: int,
        code: str,
        name: str,
        group_id: Optional[int] = None,
        current_price: Optional[float] = None
        ) -> FAAsset:
        item = FAAssetCreateItem(
            group_id=group_id,
            asset_type_id=asset_type_id,
            code=code,
            name=name,
            current_price=current_price,
            )
        return await self.create(ctx, item)

    async def update_position(
        self,
        ctx: SessionContext,
        code: str,
        cost: Optional[float],
        amount: Optional[float]
        ) -> Optional[FAAsset]:
        """
        Update the holdings of the asset with `code` through the backend.

        The projection is only touched once the update succeeded. Unknown
        codes are a no-op (returns None).
        """
        asset = self.get_by_code(code)
        if asset is None:
            logger.debug("update_position for unknown asset code", code=code)
            return None
        item = FAAssetUpdateItem.from_asset(asset, position_cost=cost, position_amount=amount)
        return await self.update(ctx, asset.id, item)

    # =========================================================================
    # LOCAL QUERIES / MAINTENANCE
    # =========================================================================

    def get_by_code(self, code: str) -> Optional[FAAsset]:
        for asset in self._items:
            if asset.code == code:
                return asset
        return None

    def by_group(self, group_id: Optional[int]) -> List[FAAsset]:
        return [asset for asset in self._items if asset.group_id == group_id]

    def orphan_group(self, group_id: int) -> int:
        """
        Un-assign local assets from a deleted group (group_id -> None).

        Returns:
            Number of assets changed
        """
        changed = 0
        for index, asset in enumerate(self._items):
            if asset.group_id == group_id:
                self._items[index] = asset.model_copy(update={"group_id": None, "group_name": None})
                changed += 1
        if changed:
            logger.info("Assets un-assigned from deleted group", group_id=group_id, count=changed)
        return changed

    def reset(self) -> None:
        super().reset()
        self.asset_types = []
        self._asset_types_cache.clear()
