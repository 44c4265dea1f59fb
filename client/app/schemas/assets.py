"""
Financial Asset (FA) schemas: asset types, user groups and assets.

**Naming Conventions**:
- FA prefix: Financial Assets domain
- Item suffix: write request (e.g., FAAssetCreateItem)
- Filter suffix: partial-refresh filter for list operations

**Design Notes**:
- Timestamps are epoch seconds, as transmitted by the backend
- A position is all-or-nothing: position_amount and position_cost are
  either both set or both None (validated on records and requests)
- group_id is nullable: an asset may be unassigned, and deleting a group
  leaves its assets in place
"""
from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from client.app.schemas.common import BackendRecord, RequestItem
from client.app.utils.validation_utils import validate_position_pair


# ============================================================================
# RECORDS
# ============================================================================

class FAAssetType(BackendRecord):
    """Asset category (stock, fund, crypto, ...). Read-only reference data."""
    id: int
    name: str
    description: Optional[str] = None


class FAGroup(BackendRecord):
    """User-defined group of assets of a single asset type."""
    id: int
    user_id: int
    name: str
    asset_type_id: int
    asset_type_name: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


class FAAsset(BackendRecord):
    """
    A financial asset tracked by a user.

    Attributes:
        code: Stable external symbol, unique within user + asset type
        group_id: Owning group, None when unassigned
        position_amount: Quantity held (None when no position)
        position_cost: Cost basis of the held quantity (None when no position)
    """
    id: int
    user_id: int
    group_id: Optional[int] = None
    group_name: Optional[str] = None
    asset_type_id: int
    asset_type_name: Optional[str] = None
    code: str
    name: str
    current_price: Optional[float] = None
    position_amount: Optional[float] = None
    position_cost: Optional[float] = None
    last_updated: Optional[int] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    total_profit: Optional[float] = None
    total_profit_percent: Optional[float] = None

    @model_validator(mode="after")
    def check_position(self) -> FAAsset:
        validate_position_pair(self.position_amount, self.position_cost)
        return self

    @property
    def has_position(self) -> bool:
        return self.position_amount is not None


# ============================================================================
# REQUESTS
# ============================================================================

class FAGroupCreateItem(RequestItem):
    """Payload for asset_create_group (user_id is filled in by the store)."""
    name: str = Field(..., min_length=1, max_length=100)
    asset_type_id: int
    description: Optional[str] = Field(default=None, max_length=500)


class FAGroupUpdateItem(RequestItem):
    """Payload for asset_update_group."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class FAAssetCreateItem(RequestItem):
    """Payload for asset_create_asset."""
    group_id: Optional[int] = None
    asset_type_id: int
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    current_price: Optional[float] = None


class FAAssetUpdateItem(RequestItem):
    """
    Payload for asset_update_asset.

    The backend replaces every field, so callers send the full editable state.
    """
    name: str = Field(..., min_length=1)
    group_id: Optional[int] = None
    current_price: Optional[float] = None
    position_amount: Optional[float] = None
    position_cost: Optional[float] = None

    @model_validator(mode="after")
    def check_position(self) -> FAAssetUpdateItem:
        validate_position_pair(self.position_amount, self.position_cost)
        return self

    @classmethod
    def from_asset(cls, asset: FAAsset, **changes) -> FAAssetUpdateItem:
        """Build an update carrying the asset's current editable state plus changes."""
        data = {
            "name": asset.name,
            "group_id": asset.group_id,
            "current_price": asset.current_price,
            "position_amount": asset.position_amount,
            "position_cost": asset.position_cost,
            }
        data.update(changes)
        return cls(**data)


# ============================================================================
# FILTERS
# ============================================================================

class FAGroupFilter(RequestItem):
    """Partial refresh of groups (None = every group of the user)."""
    asset_type_id: Optional[int] = None

    def matches(self, group: FAGroup) -> bool:
        return self.asset_type_id is None or group.asset_type_id == self.asset_type_id


class FAAssetFilter(RequestItem):
    """Partial refresh of assets by type and/or group (all None = full refresh)."""
    asset_type_id: Optional[int] = None
    group_id: Optional[int] = None

    def matches(self, asset: FAAsset) -> bool:
        if self.asset_type_id is not None and asset.asset_type_id != self.asset_type_id:
            return False
        if self.group_id is not None and asset.group_id != self.group_id:
            return False
        return True
