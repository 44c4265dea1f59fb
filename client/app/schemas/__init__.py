"""
Pydantic schemas for the WolfQuant client shell.

**Organization by Domain**:
- common.py: Shared bases (BackendRecord, RequestItem, DeleteItem, MessageResponse)
- assets.py: Asset types, groups and assets (FA prefix)
- plans.py: Investment plans (IP prefix)
- tasks.py: Import tasks (IT prefix)
- positions.py: Derived position projection (PS prefix)
- views.py: Open views / tabs (VW prefix)
"""
from client.app.schemas.assets import (
    FAAsset,
    FAAssetCreateItem,
    FAAssetFilter,
    FAAssetType,
    FAAssetUpdateItem,
    FAGroup,
    FAGroupCreateItem,
    FAGroupFilter,
    FAGroupUpdateItem,
    )
from client.app.schemas.common import BackendRecord, DeleteItem, MessageResponse, RequestItem
from client.app.schemas.plans import IPCreateItem, IPFilter, IPFrequency, IPPlan, IPUpdateItem
from client.app.schemas.positions import PSPosition
from client.app.schemas.tasks import ITAvailableData, ITStartItem, ITStatus, ITTask
from client.app.schemas.views import VWView

__all__ = [
    # Common
    "BackendRecord",
    "RequestItem",
    "DeleteItem",
    "MessageResponse",
    # Assets
    "FAAssetType",
    "FAGroup",
    "FAAsset",
    "FAGroupCreateItem",
    "FAGroupUpdateItem",
    "FAAssetCreateItem",
    "FAAssetUpdateItem",
    "FAGroupFilter",
    "FAAssetFilter",
    # Plans
    "IPFrequency",
    "IPPlan",
    "IPCreateItem",
    "IPUpdateItem",
    "IPFilter",
    # Tasks
    "ITStatus",
    "ITTask",
    "ITStartItem",
    "ITAvailableData",
    # Positions / views
    "PSPosition",
    "VWView",
    ]
