"""
View (VW) schema: one open, uniquely-keyed unit of UI state (a tab).

The component is opaque to the shell (a class, a factory or a registered
name); props are arbitrary display parameters handed to it.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VWView(BaseModel):
    """An open view tracked by the view registry."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(..., min_length=1)
    title: str
    component: Any = None
    props: dict[str, Any] = Field(default_factory=dict)
    closable: bool = True
