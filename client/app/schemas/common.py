"""
Common schemas shared across stores.

**Domain Coverage**:
- BackendRecord: base for every record received from the gateway
- RequestItem: base for every write request sent to the gateway
- DeleteItem: id + owner pair used by every delete command
- MessageResponse: plain acknowledgement returned by some commands

**Design Notes**:
- Records ignore unknown fields, so a newer backend adding columns never
  breaks an older client
- Requests forbid unknown fields, so typos fail before the gateway call
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BackendRecord(BaseModel):
    """Base class for records returned by the remote gateway."""
    model_config = ConfigDict(extra="ignore")


class RequestItem(BaseModel):
    """Base class for write payloads sent to the remote gateway."""
    model_config = ConfigDict(extra="forbid")


class DeleteItem(RequestItem):
    """Delete request: every delete command identifies the row and its owner."""
    id: int
    user_id: int


class MessageResponse(BackendRecord):
    """Acknowledgement with a human-readable message."""
    message: str
