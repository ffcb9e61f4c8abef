"""Read-only access to the mirrored gateway data."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from models import CronJobRecord, MessageRecord, SessionRecord, UsageStatRecord
from services import CacheReader

from .dependencies import get_cache_reader

router = APIRouter(prefix="/api/gateways", tags=["cache"])


@router.get("/{gateway_id}/sessions", response_model=List[SessionRecord])
def list_sessions(gateway_id: str, reader: CacheReader = Depends(get_cache_reader)) -> List[SessionRecord]:
    return reader.sessions(gateway_id)


@router.get("/{gateway_id}/cron", response_model=List[CronJobRecord])
def list_cron_jobs(gateway_id: str, reader: CacheReader = Depends(get_cache_reader)) -> List[CronJobRecord]:
    return reader.cron_jobs(gateway_id)


@router.get("/{gateway_id}/sessions/{session_key:path}/messages", response_model=List[MessageRecord])
def list_messages(
    gateway_id: str, session_key: str, reader: CacheReader = Depends(get_cache_reader)
) -> List[MessageRecord]:
    return reader.messages(gateway_id, session_key)


@router.get("/{gateway_id}/usage", response_model=List[UsageStatRecord])
def list_usage(
    gateway_id: str,
    start: Optional[date] = Query(default=None, description="First day, inclusive"),
    end: Optional[date] = Query(default=None, description="Last day, inclusive"),
    reader: CacheReader = Depends(get_cache_reader),
) -> List[UsageStatRecord]:
    return reader.usage(
        gateway_id,
        start=start.isoformat() if start else None,
        end=end.isoformat() if end else None,
    )
