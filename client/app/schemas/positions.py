"""
Position (PS) schema: the derived per-asset projection.

A position is keyed by asset code and merges two independently written
halves:
- holdings (cost, amount), written from the Asset store
- schedule (investment_type, day_of_week, day_of_month, investment_amount),
  written from the active investment plan of that asset

The UI consumes the camelCase shape (investmentType, dayOfWeek, ...), which
is what to_view() returns; absent fields are omitted.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SCHEDULE_FIELDS = ("investment_type", "day_of_week", "day_of_month", "investment_amount")
HOLDING_FIELDS = ("cost", "amount")


class PSPosition(BaseModel):
    """Merged holdings + recurring-investment schedule for one asset code."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)

    cost: Optional[float] = None
    amount: Optional[float] = None
    investment_type: Optional[str] = None
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    investment_amount: Optional[float] = None

    @property
    def has_schedule(self) -> bool:
        return self.investment_type is not None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in HOLDING_FIELDS + SCHEDULE_FIELDS)

    def clear_schedule(self) -> None:
        for name in SCHEDULE_FIELDS:
            setattr(self, name, None)

    def to_view(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
