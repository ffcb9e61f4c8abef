"""Read models for mirrored gateway data."""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import SyncKind


class SessionRecord(BaseModel):
    """Cached remote session."""

    id: str
    gateway_id: str
    session_key: str
    kind: Optional[str] = None
    channel: Optional[str] = None
    model: Optional[str] = None
    last_message_at: Optional[int] = None
    message_count: int = 0
    created_at: int
    updated_at: int

    model_config = ConfigDict(from_attributes=True)


class CronJobRecord(BaseModel):
    """Cached cron definition.

    The schedule and payload stay serialized; callers branch on the
    ``*_kind`` discriminators and decode the blob only when they need it.
    """

    id: str
    gateway_id: str
    name: Optional[str] = None
    schedule_kind: Optional[str] = None
    schedule_data: str = "{}"
    payload_kind: Optional[str] = None
    payload_data: str = "{}"
    session_target: Optional[str] = None
    enabled: bool = False
    last_run_at: Optional[int] = None
    next_run_at: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    def schedule(self) -> Dict[str, Any]:
        return json.loads(self.schedule_data)

    def payload(self) -> Dict[str, Any]:
        return json.loads(self.payload_data)


class MessageRecord(BaseModel):
    id: str
    session_id: str
    position: int
    remote_id: Optional[str] = None
    role: str = "user"
    content: str = ""
    timestamp: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class UsageStatRecord(BaseModel):
    gateway_id: str
    date: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    updated_at: int

    model_config = ConfigDict(from_attributes=True)


class SyncResult(BaseModel):
    """Outcome of one successful sync invocation."""

    gateway_id: str
    kind: SyncKind
    synced: int = Field(..., ge=0, description="Number of records applied")

    model_config = ConfigDict(use_enum_values=True)
