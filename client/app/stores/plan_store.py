"""
Investment plan store.

Owns the acting user's recurring investment plans. Every successful plan
write is forwarded to the PositionReconciler together with the other active
plans of the same asset code, so the schedule half of the projection always
reflects the latest active plan (or is cleared when none is left).
"""
from __future__ import annotations

from typing import Any, List, Optional

from client.app.errors import ShellError
from client.app.logging_config import get_logger
from client.app.schemas.common import MessageResponse
from client.app.schemas.plans import IPCreateItem, IPFilter, IPFrequency, IPPlan, IPUpdateItem
from client.app.services.gateway import Command, CommandGateway
from client.app.services.reconciler import PositionReconciler
from client.app.services.session import SessionContext
from client.app.stores.base import CrudStore

logger = get_logger(__name__)


class PlanStore(CrudStore[IPPlan]):
    """Store of the acting user's investment plans."""

    store_name = "plan"
    record_type = IPPlan
    list_command = Command.PLAN_GET_USER_PLANS
    create_command = Command.PLAN_CREATE
    update_command = Command.PLAN_UPDATE
    delete_command = Command.PLAN_DELETE

    def __init__(self, gateway: CommandGateway, reconciler: PositionReconciler):
        super().__init__(gateway)
        self.reconciler = reconciler
        self.message: Optional[str] = None

    # =========================================================================
    # GETTERS
    # =========================================================================

    def active_plans(self) -> List[IPPlan]:
        return [plan for plan in self._items if plan.is_active]

    def plans_for_asset(self, asset_id: int) -> List[IPPlan]:
        return [plan for plan in self._items if plan.asset_id == asset_id]

    def active_plans_for_code(self, code: str, exclude_id: Optional[int] = None) -> List[IPPlan]:
        return [
            plan for plan in self._items
            if plan.is_active and plan.asset_code == code and plan.id != exclude_id
            ]

    def clear_notifications(self) -> None:
        self.error = None
        self.message = None

    # =========================================================================
    # RECONCILER HOOKS
    # =========================================================================

    def _list_payload(self, user_id: int, flt: Optional[IPFilter]) -> dict:
        return {"userId": user_id, "assetId": flt.asset_id if flt else None}

    def _after_upsert(self, record: IPPlan) -> None:
        self.reconciler.apply_plan(record, self.active_plans_for_code(record.asset_code, exclude_id=record.id))

    def _after_delete(self, entity_id, record: Optional[IPPlan]) -> None:
        if record is not None:
            self.reconciler.remove_plan(record, self.active_plans_for_code(record.asset_code))

    def _after_list(self, fresh: List[IPPlan], removed: List[IPPlan]) -> None:
        codes = {plan.asset_code for plan in removed} | {plan.asset_code for plan in fresh}
        for code in codes:
            self.reconciler.sync_schedule(code, self.active_plans_for_code(code))

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def create(self, ctx: SessionContext, item: IPCreateItem) -> IPPlan:
        plan = await super().create(ctx, item)
        self.message = "Investment plan created"
        return plan

    async def update(self, ctx: SessionContext, entity_id, item: IPUpdateItem) -> IPPlan:
        plan = await super().update(ctx, entity_id, item)
        self.message = "Investment plan updated"
        return plan

    async def delete(self, ctx: SessionContext, entity_id) -> Any:
        response = await super().delete(ctx, entity_id)
        if isinstance(response, dict) and "message" in response:
            self.message = MessageResponse.model_validate(response).message
        else:
            self.message = "Investment plan deleted"
        return response

    async def create_plan(
        self,
        ctx: SessionContext,
        asset_id: int,
        name: str,
        frequency: IPFrequency,
        amount: float,
        day_of_week: Optional[int] = None,
        day_of_month: Optional[int] = None
        ) -> IPPlan:
        item = IPCreateItem(
            asset_id=asset_id,
            name=name,
            frequency=frequency,
            day_of_week=day_of_week,
            day_of_month=day_of_month,
            amount=amount,
            )
        return await self.create(ctx, item)

    async def set_active(self, ctx: SessionContext, plan_id: int, is_active: bool) -> Optional[IPPlan]:
        """Toggle a local plan's active flag through the backend (unknown id: no-op)."""
        plan = self.get(plan_id)
        if plan is None:
            return None
        async with self._operation("set_active", entity_id=plan_id):
            try:
                frequency = IPFrequency(plan.frequency.upper())
            except ValueError:
                raise ShellError(
                    f"Plan {plan_id} has unsupported frequency '{plan.frequency}'",
                    "INVALID_FREQUENCY",
                    {"plan_id": plan_id, "frequency": plan.frequency}
                    )
            item = IPUpdateItem(
                name=plan.name or plan.asset_code,
                frequency=frequency,
                day_of_week=plan.day_of_week,
                day_of_month=plan.day_of_month,
                amount=plan.amount,
                is_active=is_active,
                )
        return await self.update(ctx, plan_id, item)

    async def fetch_user_plans(self, ctx: SessionContext, asset_id: Optional[int] = None) -> List[IPPlan]:
        flt = IPFilter(asset_id=asset_id) if asset_id is not None else None
        return await self.list(ctx, flt)

    def reset(self) -> None:
        super().reset()
        self.message = None
