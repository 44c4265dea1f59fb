"""
Investment Plan (IP) schemas: recurring contributions into an asset.

**Naming Conventions**:
- IP prefix: Investment Plan domain

**Design Notes**:
- IPFrequency lists the codes the backend accepts; write requests are
  validated against it (day_of_week/day_of_month consistency included)
- IPPlan keeps `frequency` as the raw backend code, so a record carrying an
  unknown code is still loaded and reconciled (mapped to "none")
- asset_code is denormalized on the plan so the position projection can be
  keyed without looking the asset up
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from client.app.schemas.common import BackendRecord, RequestItem
from client.app.utils.validation_utils import validate_plan_schedule


class IPFrequency(str, Enum):
    """
    Recurring investment frequency.

    - DAILY: every day, no day fields
    - WEEKLY: every week on day_of_week (1 = Monday ... 7 = Sunday)
    - BIWEEKLY: every other week on day_of_week
    - MONTHLY: every month on day_of_month (1..31, clamped to month length)
    """
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"


class IPPlan(BackendRecord):
    """An investment plan as stored by the backend."""
    id: int
    user_id: int
    asset_id: int
    asset_code: str
    asset_name: Optional[str] = None
    name: str = ""
    frequency: str
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    amount: float
    is_active: bool = True
    last_executed: Optional[int] = None
    next_execution: Optional[int] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


class _IPScheduleItem(RequestItem):
    """Shared schedule fields and their consistency check."""
    name: str = Field(..., min_length=1, max_length=100)
    frequency: IPFrequency
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    amount: float = Field(..., gt=0)

    @model_validator(mode="after")
    def check_schedule(self):
        validate_plan_schedule(self.frequency.value, self.day_of_week, self.day_of_month)
        return self


class IPCreateItem(_IPScheduleItem):
    """Payload for plan_create_investment_plan."""
    asset_id: int


class IPUpdateItem(_IPScheduleItem):
    """Payload for plan_update_investment_plan."""
    is_active: bool = True


class IPFilter(RequestItem):
    """Partial refresh of plans (None = every plan of the user)."""
    asset_id: Optional[int] = None

    def matches(self, plan: IPPlan) -> bool:
        return self.asset_id is None or plan.asset_id == self.asset_id
