"""
Import Task (IT) schemas: background historical-data imports.

**Design Notes**:
- Status only moves forward: Pending -> Running -> Completed | Failed
- Completed and Failed are terminal
- Task ids are opaque strings (UUIDs generated by the backend)
- ITAvailableData lists the datasets finished imports produced
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from client.app.schemas.common import BackendRecord, RequestItem


class ITStatus(str, Enum):
    """Import task lifecycle status."""
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ITStatus.COMPLETED, ITStatus.FAILED)

    @property
    def rank(self) -> int:
        """Position in the lifecycle; both terminal states share the last rank."""
        return {ITStatus.PENDING: 0, ITStatus.RUNNING: 1}.get(self, 2)


class ITTask(BackendRecord):
    """An import task as reported by the backend."""
    id: str
    status: ITStatus
    asset_type: Optional[str] = None
    symbol: Optional[str] = None
    source: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    interval: Optional[str] = None
    progress: float = 0.0
    error: Optional[str] = None
    total_candles: Optional[int] = None
    imported_candles: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ITStartItem(RequestItem):
    """Parameters for start_import (sent with camelCase keys)."""
    asset_type: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    interval: str = Field(..., min_length=1)

    @field_validator("end_time")
    @classmethod
    def validate_time_range(cls, v, info):
        """Ensure end_time is not before start_time."""
        if "start_time" in info.data and v < info.data["start_time"]:
            raise ValueError("end_time must be on or after start_time")
        return v

    def to_command_args(self) -> dict:
        return {
            "assetType": self.asset_type,
            "symbol": self.symbol,
            "source": self.source,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "interval": self.interval,
            }


class ITAvailableData(BackendRecord):
    """A dataset already imported and available locally."""
    asset_type: str
    symbol: Optional[str] = None
    name: Optional[str] = None
    source: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    candle_count: int = 0
    intervals: List[str] = Field(default_factory=list)
