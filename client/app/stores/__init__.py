"""
Entity stores.

One store per record kind, each owning its ordered collection:
- AssetStore (FA prefix): assets and the cached asset-type list
- GroupStore (FA prefix): asset groups
- PlanStore (IP prefix): recurring investment plans
- TaskStore (IT prefix): historical-data import tasks

Asset and Plan writes are forwarded to the PositionReconciler.
"""
from client.app.stores.asset_store import AssetStore
from client.app.stores.base import CrudStore, EntityStore
from client.app.stores.group_store import GroupStore
from client.app.stores.plan_store import PlanStore
from client.app.stores.task_store import TaskStore

__all__ = [
    "EntityStore",
    "CrudStore",
    "AssetStore",
    "GroupStore",
    "PlanStore",
    "TaskStore",
    ]
