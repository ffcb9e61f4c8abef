"""Sync trigger router.

Each endpoint performs one sync for one gateway and entity kind and
returns the number of records applied. Remote failures surface as 502
and flip the gateway's status to ``error``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from models import SyncKind, SyncResult
from services import SyncOrchestrator

from .dependencies import get_orchestrator

router = APIRouter(prefix="/api/gateways", tags=["sync"])


@router.post("/{gateway_id}/sync-sessions", response_model=SyncResult)
async def sync_sessions(
    gateway_id: str, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> SyncResult:
    return await orchestrator.sync_async(gateway_id, SyncKind.SESSIONS)


@router.post("/{gateway_id}/sync-cron", response_model=SyncResult)
async def sync_cron(
    gateway_id: str, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> SyncResult:
    return await orchestrator.sync_async(gateway_id, SyncKind.CRON)


@router.post("/{gateway_id}/sync-usage", response_model=SyncResult)
async def sync_usage(
    gateway_id: str, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> SyncResult:
    return await orchestrator.sync_async(gateway_id, SyncKind.USAGE)


@router.post("/{gateway_id}/sessions/{session_key:path}/sync-messages", response_model=SyncResult)
async def sync_messages(
    gateway_id: str,
    session_key: str,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> SyncResult:
    return await orchestrator.sync_async(
        gateway_id, SyncKind.MESSAGES, session_key=session_key, limit=limit
    )
