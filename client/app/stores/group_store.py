"""
User group store.

Groups organise a user's assets of one asset type. Deleting a group never
deletes assets; the Asset store keeps them, and ShellState.delete_group()
un-assigns them locally once the delete succeeded.
"""
from __future__ import annotations

from typing import List, Optional

from client.app.schemas.assets import FAGroup, FAGroupCreateItem, FAGroupFilter, FAGroupUpdateItem
from client.app.services.gateway import Command
from client.app.services.session import SessionContext
from client.app.stores.base import CrudStore


class GroupStore(CrudStore[FAGroup]):
    """Store of the acting user's asset groups."""

    store_name = "group"
    record_type = FAGroup
    list_command = Command.ASSET_GET_USER_GROUPS
    create_command = Command.ASSET_CREATE_GROUP
    update_command = Command.ASSET_UPDATE_GROUP
    delete_command = Command.ASSET_DELETE_GROUP

    def _list_payload(self, user_id: int, flt: Optional[FAGroupFilter]) -> dict:
        return {"userId": user_id, "assetTypeId": flt.asset_type_id if flt else None}

    async def fetch_user_groups(self, ctx: SessionContext, asset_type_id: Optional[int] = None) -> List[FAGroup]:
        flt = FAGroupFilter(asset_type_id=asset_type_id) if asset_type_id is not None else None
        return await self.list(ctx, flt)

    async def create_group(
        self,
        ctx: SessionContext,
        name: str,
        asset_type_id: int,
        description: Optional[str] = None
        ) -> FAGroup:
        item = FAGroupCreateItem(name=name, asset_type_id=asset_type_id, description=description)
        return await self.create(ctx, item)

    async def update_group(
        self,
        ctx: SessionContext,
        group_id: int,
        name: str,
        description: Optional[str] = None
        ) -> FAGroup:
        return await self.update(ctx, group_id, FAGroupUpdateItem(name=name, description=description))

    def for_asset_type(self, asset_type_id: int) -> List[FAGroup]:
        return [group for group in self._items if group.asset_type_id == asset_type_id]
