"""Unit tests for sync orchestration, health side effects and cascade."""

import time
from datetime import date
from unittest.mock import Mock

import pytest
from prometheus_client import REGISTRY

from conftest import create_mock_cron_job, create_mock_session, insert_gateway
from models import ProxyRequest, SyncKind
from services import CacheReader, SyncOrchestrator
from services.errors import (
    GatewayNotFound,
    ReconcileStorageFailure,
    RemoteCallFailed,
    RemoteProtocolError,
    RemoteUnreachable,
)


def sync_count(kind: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value("gateway_sync_total", {"kind": kind, "outcome": outcome})
    return value or 0.0


@pytest.fixture
def reader(database) -> CacheReader:
    return CacheReader(database)


class TestSyncOrchestrator:
    """Test cases for SyncOrchestrator class."""

    def test_usage_scenario(self, orchestrator, mock_gateway_client, registry, reader, gateway) -> None:
        """A /status snapshot becomes one usage row and marks the gateway online."""
        mock_gateway_client.fetch_status.return_value = {
            "status": "ok",
            "model": "gpt-4",
            "usage": {"inputTokens": 1000, "outputTokens": 500, "costUsd": 0.05},
        }

        result = orchestrator.sync_usage("gw1", on_date=date(2026, 2, 16))

        assert result.synced == 1
        assert result.kind == "usage"
        stats = reader.usage("gw1")
        assert [(s.gateway_id, s.date, s.model, s.input_tokens, s.output_tokens, s.cost_usd) for s in stats] == [
            ("gw1", "2026-02-16", "gpt-4", 1000, 500, 0.05)
        ]
        assert registry.get("gw1").status == "online"

    def test_unreachable_sessions_scenario(
        self, orchestrator, mock_gateway_client, registry, reader, gateway
    ) -> None:
        """Connection refused: error raised, gateway errored, cache unchanged."""
        mock_gateway_client.list_sessions.return_value = [create_mock_session("main")]
        orchestrator.sync_sessions("gw1")
        before = reader.sessions("gw1")
        last_seen = registry.get("gw1").last_seen_at

        mock_gateway_client.list_sessions.side_effect = RemoteUnreachable(ConnectionRefusedError("refused"))
        with pytest.raises(RemoteUnreachable):
            orchestrator.sync_sessions("gw1")

        refreshed = registry.get("gw1")
        assert refreshed.status == "error"
        assert refreshed.last_seen_at == last_seen
        assert reader.sessions("gw1") == before

    @pytest.mark.parametrize("kind", list(SyncKind))
    def test_success_marks_online_for_every_kind(
        self, orchestrator, registry, gateway, kind
    ) -> None:
        before = int(time.time())

        orchestrator.sync("gw1", kind, session_key="main")

        refreshed = registry.get("gw1")
        assert refreshed.status == "online"
        assert refreshed.last_seen_at >= before

    @pytest.mark.parametrize(
        "error",
        [RemoteCallFailed(500), RemoteProtocolError("body is not valid JSON"), RemoteUnreachable(TimeoutError())],
    )
    def test_remote_failure_skips_reconcile(
        self, orchestrator, mock_gateway_client, registry, reader, gateway, error
    ) -> None:
        mock_gateway_client.list_cron.return_value = [create_mock_cron_job("A"), create_mock_cron_job("B")]
        orchestrator.sync_cron("gw1")

        mock_gateway_client.list_cron.side_effect = error
        with pytest.raises(type(error)):
            orchestrator.sync_cron("gw1")

        assert {j.id for j in reader.cron_jobs("gw1")} == {"gw1_A", "gw1_B"}
        assert registry.get("gw1").status == "error"

    def test_unknown_gateway(self, orchestrator, mock_gateway_client, database) -> None:
        before = sync_count("sessions", "not_found")

        with pytest.raises(GatewayNotFound):
            orchestrator.sync_sessions("nope")

        mock_gateway_client.list_sessions.assert_not_called()
        assert sync_count("sessions", "not_found") == before + 1

    def test_oversized_remote_numbers_still_sync(
        self, orchestrator, mock_gateway_client, registry, reader, gateway
    ) -> None:
        mock_gateway_client.list_sessions.return_value = [
            create_mock_session("main", messageCount=1e20, lastMessageAt=1e25)
        ]

        assert orchestrator.sync_sessions("gw1").synced == 1
        assert registry.get("gw1").status == "online"
        assert reader.sessions("gw1")[0].last_message_at is None

    def test_storage_failure_keeps_gateway_online(
        self, orchestrator, mock_gateway_client, registry, gateway
    ) -> None:
        orchestrator.sessions = Mock()
        orchestrator.sessions.apply.side_effect = ReconcileStorageFailure("sessions", RuntimeError("locked"))

        with pytest.raises(ReconcileStorageFailure):
            orchestrator.sync_sessions("gw1")

        assert registry.get("gw1").status == "online"

    def test_cron_sync_twice_is_identical(self, orchestrator, mock_gateway_client, reader, gateway) -> None:
        mock_gateway_client.list_cron.return_value = [create_mock_cron_job("A"), create_mock_cron_job("B")]

        orchestrator.sync_cron("gw1")
        first = [j.model_dump() for j in reader.cron_jobs("gw1")]
        orchestrator.sync_cron("gw1")
        second = [j.model_dump() for j in reader.cron_jobs("gw1")]

        assert first == second

    def test_messages_use_configured_limit(
        self, orchestrator, mock_gateway_client, reader, gateway, mock_config
    ) -> None:
        mock_gateway_client.fetch_history.return_value = [{"role": "user", "content": "hi"}]

        result = orchestrator.sync_messages("gw1", "main")

        assert result.synced == 1
        _, session_key, limit = mock_gateway_client.fetch_history.call_args.args
        assert (session_key, limit) == ("main", mock_config.history_fetch_limit)
        orchestrator.sync_messages("gw1", "main", limit=5)
        assert mock_gateway_client.fetch_history.call_args.args[2] == 5

    def test_messages_require_session_key(self, orchestrator, gateway) -> None:
        with pytest.raises(ValueError):
            orchestrator.sync("gw1", "messages")

    def test_delete_cascades_to_mirrored_data(
        self, orchestrator, mock_gateway_client, registry, reader, database, gateway
    ) -> None:
        insert_gateway(database, "gw2")
        mock_gateway_client.list_sessions.return_value = [create_mock_session("main")]
        mock_gateway_client.list_cron.return_value = [create_mock_cron_job("A")]
        mock_gateway_client.fetch_history.return_value = [{"content": "hi"}]
        mock_gateway_client.fetch_status.return_value = {"model": "gpt-4", "usage": {"inputTokens": 1}}
        for gateway_id in ("gw1", "gw2"):
            orchestrator.sync_sessions(gateway_id)
            orchestrator.sync_cron(gateway_id)
            orchestrator.sync_messages(gateway_id, "main")
            orchestrator.sync_usage(gateway_id)

        registry.delete("gw1")

        assert reader.sessions("gw1") == []
        assert reader.cron_jobs("gw1") == []
        assert reader.messages("gw1", "main") == []
        assert reader.usage("gw1") == []
        assert len(reader.messages("gw2", "main")) == 1
        assert len(reader.usage("gw2")) == 1

    @pytest.mark.asyncio
    async def test_sync_async(self, orchestrator, mock_gateway_client, reader, gateway) -> None:
        mock_gateway_client.list_sessions.return_value = [create_mock_session("main")]

        result = await orchestrator.sync_async("gw1", SyncKind.SESSIONS)

        assert result.synced == 1
        assert [s.session_key for s in reader.sessions("gw1")] == ["main"]


class TestProxy:
    """Test cases for the pass-through proxy."""

    def test_success_marks_online(self, orchestrator: SyncOrchestrator, mock_gateway_client, registry, gateway) -> None:
        mock_gateway_client.request.return_value = (200, {"ok": True})

        result = orchestrator.proxy("gw1", ProxyRequest(endpoint="/status"))

        assert result == (200, {"ok": True})
        mock_gateway_client.request.assert_called_once()
        assert registry.get("gw1").status == "online"

    def test_error_status_is_relayed_without_health_change(
        self, orchestrator, mock_gateway_client, registry, gateway
    ) -> None:
        mock_gateway_client.request.return_value = (404, {"error": "nope"})

        assert orchestrator.proxy("gw1", ProxyRequest(endpoint="/missing")) == (404, {"error": "nope"})
        assert registry.get("gw1").status == "unknown"

    def test_transport_failure_marks_error(self, orchestrator, mock_gateway_client, registry, gateway) -> None:
        mock_gateway_client.request.side_effect = RemoteUnreachable(ConnectionError("refused"))

        with pytest.raises(RemoteUnreachable):
            orchestrator.proxy("gw1", ProxyRequest(endpoint="/status"))
        assert registry.get("gw1").status == "error"
