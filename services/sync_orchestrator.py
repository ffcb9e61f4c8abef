"""Sync orchestration for Gateway Mirror.

One sync is one sequential unit of work for one gateway and one entity
kind: fetch from the gateway, reconcile into the cache, then record the
gateway's health. A failed fetch never reaches a reconciler.

Overlapping syncs of the same gateway and kind are not serialized; the
last one to commit wins.
"""

import asyncio
import contextvars
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from functools import partial
from typing import Any, Optional, Tuple, Union

from prometheus_client import Counter

from config import ApplicationConfig
from models import Gateway, ProxyRequest, SyncKind, SyncResult
from storage import Database
from utils import create_contextual_logger

from .errors import GatewayNotFound, ReconcileStorageFailure, RemoteError
from .gateway_client import GatewayClient
from .gateway_registry import GatewayRegistry
from .health_tracker import HealthTracker
from .reconcilers import (
    CronJobReconciler,
    MessageReconciler,
    SessionReconciler,
    UsageReconciler,
)

gateway_syncs = Counter(
    "gateway_sync_total",
    "Total number of gateway sync invocations",
    ["kind", "outcome"],
)

gateway_sync_records = Counter(
    "gateway_sync_records_total",
    "Total number of records applied to the cache by syncs",
    ["kind"],
)


class SyncOrchestrator:
    """Entry point for syncing one entity kind from one gateway."""

    def __init__(
        self,
        config: ApplicationConfig,
        registry: GatewayRegistry,
        client: GatewayClient,
        health_tracker: HealthTracker,
        sessions: SessionReconciler,
        cron_jobs: CronJobReconciler,
        messages: MessageReconciler,
        usage: UsageReconciler,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.client = client
        self.health_tracker = health_tracker
        self.sessions = sessions
        self.cron_jobs = cron_jobs
        self.messages = messages
        self.usage = usage
        self.executor = executor
        self.logger = create_contextual_logger(__name__, service="sync_orchestrator")

    @classmethod
    def build(
        cls,
        config: ApplicationConfig,
        database: Database,
        client: Optional[GatewayClient] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> "SyncOrchestrator":
        """Wire an orchestrator whose components all share ``database``."""
        return cls(
            config=config,
            registry=GatewayRegistry(database),
            client=client or GatewayClient(config),
            health_tracker=HealthTracker(database),
            sessions=SessionReconciler(database),
            cron_jobs=CronJobReconciler(database),
            messages=MessageReconciler(database),
            usage=UsageReconciler(database),
            executor=executor,
        )

    # --- Blocking API, run on worker threads ---
    def sync(
        self,
        gateway_id: str,
        kind: Union[SyncKind, str],
        session_key: Optional[str] = None,
        limit: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> SyncResult:
        """Fetch, reconcile and record health for one gateway and kind.

        Raises:
            GatewayNotFound: unknown gateway; nothing is changed.
            RemoteError: the fetch failed; the gateway is marked ``error``.
            ReconcileStorageFailure: the cache write failed; the gateway is
                still marked online because it answered.
        """
        kind = SyncKind(kind)
        if kind is SyncKind.MESSAGES and not session_key:
            raise ValueError("session_key is required to sync messages")

        try:
            gateway = self.registry.get(gateway_id)
        except GatewayNotFound:
            gateway_syncs.labels(kind.value, "not_found").inc()
            raise
        logger = self.logger.bind(gateway_id=gateway.id, kind=kind.value)

        try:
            fetched = self._fetch(gateway, kind, session_key, limit)
        except RemoteError as e:
            self.health_tracker.record_failure(gateway.id, e)
            gateway_syncs.labels(kind.value, "remote_error").inc()
            logger.warning("Sync aborted, gateway call failed", error=str(e))
            raise

        try:
            synced = self._reconcile(gateway, kind, fetched, session_key, on_date)
        except ReconcileStorageFailure:
            self.health_tracker.record_success(gateway.id)
            gateway_syncs.labels(kind.value, "storage_error").inc()
            raise

        self.health_tracker.record_success(gateway.id)
        gateway_syncs.labels(kind.value, "success").inc()
        gateway_sync_records.labels(kind.value).inc(synced)
        logger.info("Sync completed", synced=synced)
        return SyncResult(gateway_id=gateway.id, kind=kind, synced=synced)

    def _fetch(
        self, gateway: Gateway, kind: SyncKind, session_key: Optional[str], limit: Optional[int]
    ) -> Any:
        if kind is SyncKind.SESSIONS:
            return self.client.list_sessions(gateway)
        if kind is SyncKind.CRON:
            return self.client.list_cron(gateway)
        if kind is SyncKind.MESSAGES:
            return self.client.fetch_history(gateway, session_key, limit or self.config.history_fetch_limit)
        return self.client.fetch_status(gateway)

    def _reconcile(
        self,
        gateway: Gateway,
        kind: SyncKind,
        fetched: Any,
        session_key: Optional[str],
        on_date: Optional[date],
    ) -> int:
        if kind is SyncKind.SESSIONS:
            return self.sessions.apply(gateway.id, fetched)
        if kind is SyncKind.CRON:
            return self.cron_jobs.apply(gateway.id, fetched)
        if kind is SyncKind.MESSAGES:
            return self.messages.apply(gateway.id, session_key, fetched)
        return self.usage.apply(gateway.id, fetched, on_date)

    def sync_sessions(self, gateway_id: str) -> SyncResult:
        return self.sync(gateway_id, SyncKind.SESSIONS)

    def sync_cron(self, gateway_id: str) -> SyncResult:
        return self.sync(gateway_id, SyncKind.CRON)

    def sync_messages(self, gateway_id: str, session_key: str, limit: Optional[int] = None) -> SyncResult:
        return self.sync(gateway_id, SyncKind.MESSAGES, session_key=session_key, limit=limit)

    def sync_usage(self, gateway_id: str, on_date: Optional[date] = None) -> SyncResult:
        return self.sync(gateway_id, SyncKind.USAGE, on_date=on_date)

    def proxy(self, gateway_id: str, request: ProxyRequest) -> Tuple[int, Any]:
        """Forward a request to the gateway and relay its status and body.

        A 2xx answer marks the gateway online; a transport or decode
        failure marks it as errored. Other statuses are relayed untouched.
        """
        gateway = self.registry.get(gateway_id)
        try:
            status_code, body = self.client.request(gateway, request.method, request.endpoint, request.body)
        except RemoteError as e:
            self.health_tracker.record_failure(gateway.id, e)
            raise

        if 200 <= status_code < 300:
            self.health_tracker.record_success(gateway.id)
        return status_code, body

    # --- Async API for request handlers ---
    async def _run(self, func, *args, **kwargs):
        # Worker threads do not inherit context vars; carry the correlation ID over.
        context = contextvars.copy_context()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, context.run, partial(func, *args, **kwargs))

    async def sync_async(
        self,
        gateway_id: str,
        kind: Union[SyncKind, str],
        session_key: Optional[str] = None,
        limit: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> SyncResult:
        """Async version of sync, executed on the worker pool."""
        return await self._run(
            self.sync, gateway_id, kind, session_key=session_key, limit=limit, on_date=on_date
        )

    async def proxy_async(self, gateway_id: str, request: ProxyRequest) -> Tuple[int, Any]:
        return await self._run(self.proxy, gateway_id, request)
