"""
Validation utilities for Pydantic models.

Provides reusable validator functions for investment plan schedules and
asset holdings.
"""
from typing import Optional

# Frequencies that need a weekday (1 = Monday ... 7 = Sunday)
WEEKDAY_FREQUENCIES = ("WEEKLY", "BIWEEKLY")


def validate_plan_schedule(
    frequency: str,
    day_of_week: Optional[int],
    day_of_month: Optional[int]
    ) -> None:
    """
    Validate that day_of_week/day_of_month are consistent with a plan frequency.

    Ensures that:
    - DAILY has neither a weekday nor a day of month
    - WEEKLY/BIWEEKLY have a weekday in 1..7 and no day of month
    - MONTHLY has a day of month in 1..31 and no weekday

    Args:
        frequency: Backend frequency code (DAILY, WEEKLY, BIWEEKLY, MONTHLY)
        day_of_week: Weekday (1 = Monday, 7 = Sunday) or None
        day_of_month: Day of month (1..31) or None

    Raises:
        ValueError: If the fields are missing, out of range or mutually inconsistent

    Examples:
        >>> validate_plan_schedule("MONTHLY", None, 1)  # OK
        >>> validate_plan_schedule("WEEKLY", 3, None)  # OK
        >>> validate_plan_schedule("DAILY", 1, None)  # ValueError
        >>> validate_plan_schedule("MONTHLY", 2, 15)  # ValueError
    """
    if frequency == "DAILY":
        if day_of_week is not None or day_of_month is not None:
            raise ValueError("DAILY plans must not set day_of_week or day_of_month")
    elif frequency in WEEKDAY_FREQUENCIES:
        if day_of_week is None or not 1 <= day_of_week <= 7:
            raise ValueError(f"{frequency} plans require day_of_week in 1..7")
        if day_of_month is not None:
            raise ValueError(f"{frequency} plans must not set day_of_month")
    elif frequency == "MONTHLY":
        if day_of_month is None or not 1 <= day_of_month <= 31:
            raise ValueError("MONTHLY plans require day_of_month in 1..31")
        if day_of_week is not None:
            raise ValueError("MONTHLY plans must not set day_of_week")
    else:
        raise ValueError(
            f"Invalid frequency '{frequency}', supported: DAILY, WEEKLY, BIWEEKLY, MONTHLY"
            )


def validate_position_pair(position_amount, position_cost) -> None:
    """
    A position is all-or-nothing: amount and cost are both set or both None.

    Raises:
        ValueError: If exactly one of the two is set
    """
    if (position_amount is None) != (position_cost is None):
        raise ValueError("position_amount and position_cost must be both set or both empty")
