"""
Position reconciler.

Maintains the derived position projection (one PSPosition per asset code)
consistent with its two independent writers:

- Asset store  -> holdings fields (cost, amount)
- Plan store   -> schedule fields (investment_type, day_of_week,
                  day_of_month, investment_amount) of the ACTIVE plan

Merge rules:
- Entries are created lazily on first write for a code
- Each writer overwrites only the fields it owns
- A plan that is deleted or deactivated clears the schedule fields, unless
  another active plan for the same code remains (that one is re-applied)
- An asset that is deleted or drops out of a refresh clears only the
  holdings fields; a schedule still owned by an active plan stays
- An entry left with no field set is dropped

The reconciler performs no I/O and is invoked synchronously by the stores
right after a successful gateway call; it never accepts writes from
anywhere else.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from client.app.logging_config import get_logger
from client.app.schemas.assets import FAAsset
from client.app.schemas.plans import IPPlan
from client.app.schemas.positions import PSPosition

logger = get_logger(__name__)

FREQUENCY_TO_INVESTMENT_TYPE = {
    "DAILY": "daily",
    "WEEKLY": "weekly",
    "BIWEEKLY": "biweekly",
    "MONTHLY": "monthly",
    }
UNKNOWN_INVESTMENT_TYPE = "none"


def investment_type_for(frequency: Optional[str]) -> str:
    """Map a backend frequency code to the UI investment-type token."""
    if not frequency:
        return UNKNOWN_INVESTMENT_TYPE
    return FREQUENCY_TO_INVESTMENT_TYPE.get(frequency.upper(), UNKNOWN_INVESTMENT_TYPE)


class PositionReconciler:
    """Owner of the position projection."""

    def __init__(self):
        self._positions: Dict[str, PSPosition] = {}

    # =========================================================================
    # READ
    # =========================================================================

    def get(self, code: str) -> Optional[PSPosition]:
        """Copy of the position for `code` (None if absent)."""
        position = self._positions.get(code)
        return position.model_copy() if position is not None else None

    def codes(self) -> list[str]:
        return list(self._positions)

    def snapshot(self) -> Dict[str, dict]:
        """Projection in the UI shape: {code: {"cost": ..., "investmentType": ...}}."""
        return {code: position.to_view() for code, position in self._positions.items()}

    def __contains__(self, code: str) -> bool:
        return code in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def reset(self) -> None:
        self._positions.clear()

    # =========================================================================
    # ASSET SOURCE
    # =========================================================================

    def apply_asset(self, asset: FAAsset) -> None:
        """Write the asset's holdings into its position (schedule fields untouched)."""
        if asset.has_position:
            position = self._positions.setdefault(asset.code, PSPosition())
            position.cost = asset.position_cost
            position.amount = asset.position_amount
            logger.debug("Position holdings applied", code=asset.code, cost=asset.position_cost, amount=asset.position_amount)
            return

        position = self._positions.get(asset.code)
        if position is None:
            return
        position.cost = None
        position.amount = None
        self._drop_if_empty(asset.code)
        logger.debug("Position holdings cleared", code=asset.code)

    def apply_assets(self, assets: Iterable[FAAsset]) -> None:
        for asset in assets:
            self.apply_asset(asset)

    def remove_asset(self, code: str) -> None:
        """Clear the holdings of an asset that is gone (schedule fields untouched)."""
        position = self._positions.get(code)
        if position is None:
            return
        position.cost = None
        position.amount = None
        self._drop_if_empty(code)
        logger.debug("Position holdings removed", code=code)

    # =========================================================================
    # PLAN SOURCE
    # =========================================================================

    def apply_plan(self, plan: IPPlan, other_active: Sequence[IPPlan] = ()) -> None:
        """
        Reconcile after a plan create/update.

        Args:
            plan: The plan as returned by the backend
            other_active: Remaining active plans for the same asset code
                (excluding `plan`), in store order
        """
        if plan.is_active:
            self._write_schedule(plan)
        else:
            self.sync_schedule(plan.asset_code, other_active)

    def remove_plan(self, plan: IPPlan, other_active: Sequence[IPPlan] = ()) -> None:
        """Reconcile after a plan delete."""
        self.sync_schedule(plan.asset_code, other_active)

    def sync_schedule(self, code: str, active_plans: Sequence[IPPlan]) -> None:
        """
        Set the schedule of `code` from the given active plans.

        The last plan in `active_plans` wins; with no active plan the schedule
        fields are cleared and cost/amount are preserved.
        """
        if active_plans:
            self._write_schedule(active_plans[-1])
            return

        position = self._positions.get(code)
        if position is None or not position.has_schedule:
            return
        position.clear_schedule()
        self._drop_if_empty(code)
        logger.debug("Position schedule cleared", code=code)

    def _write_schedule(self, plan: IPPlan) -> None:
        investment_type = investment_type_for(plan.frequency)
        if investment_type == UNKNOWN_INVESTMENT_TYPE:
            logger.warning("Unknown plan frequency", plan_id=plan.id, frequency=plan.frequency)

        position = self._positions.setdefault(plan.asset_code, PSPosition())
        position.investment_type = investment_type
        position.day_of_week = plan.day_of_week
        position.day_of_month = plan.day_of_month
        position.investment_amount = plan.amount
        logger.debug("Position schedule applied", code=plan.asset_code, plan_id=plan.id, investment_type=investment_type)

    def _drop_if_empty(self, code: str) -> None:
        position = self._positions.get(code)
        if position is not None and position.is_empty:
            del self._positions[code]
