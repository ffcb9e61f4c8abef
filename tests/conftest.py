"""Test utilities and fixtures for Gateway Mirror tests."""

import os
import sys
from typing import Any, Dict, Generator, Optional
from unittest.mock import Mock

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from config import ApplicationConfig
from models import Gateway
from services import GatewayClient, GatewayRegistry, SyncOrchestrator
from storage import Database, GatewayRow


@pytest.fixture
def mock_config(tmp_path) -> ApplicationConfig:
    """Configuration pointing at a throwaway SQLite file."""
    return ApplicationConfig(
        DATABASE_URL=f"sqlite:///{tmp_path / 'cache.db'}",
        GATEWAY_REQUEST_TIMEOUT=2.5,
        HISTORY_FETCH_LIMIT=50,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def database(mock_config: ApplicationConfig) -> Generator[Database, None, None]:
    """Fresh cache database with all tables created."""
    db = Database.from_config(mock_config)
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def registry(database: Database) -> GatewayRegistry:
    return GatewayRegistry(database)


@pytest.fixture
def gateway(database: Database) -> Gateway:
    """Gateway ``gw1`` at http://x, inserted directly with a fixed id."""
    return insert_gateway(database, "gw1")


@pytest.fixture
def mock_gateway_client() -> Mock:
    """Gateway client double; tests set return values per operation."""
    client = Mock(spec=GatewayClient)
    client.list_sessions.return_value = []
    client.list_cron.return_value = []
    client.fetch_history.return_value = []
    client.fetch_status.return_value = {}
    return client


@pytest.fixture
def orchestrator(
    mock_config: ApplicationConfig, database: Database, mock_gateway_client: Mock
) -> SyncOrchestrator:
    return SyncOrchestrator.build(mock_config, database, client=mock_gateway_client)


def insert_gateway(
    database: Database,
    gateway_id: str,
    url: str = "http://x",
    token: str = "secret-token",
    status: str = "unknown",
    last_seen_at: Optional[int] = None,
) -> Gateway:
    with database.transaction() as session:
        row = GatewayRow(
            id=gateway_id,
            name=gateway_id,
            url=url,
            token=token,
            status=status,
            last_seen_at=last_seen_at,
            created_at=1_700_000_000,
            updated_at=1_700_000_000,
        )
        session.add(row)
        session.flush()
        return Gateway.model_validate(row)


def create_mock_session(session_key: str, **overrides: Any) -> Dict[str, Any]:
    """Remote session record as a gateway reports it."""
    record = {
        "sessionKey": session_key,
        "kind": "direct",
        "channel": "telegram",
        "model": "claude-3-opus",
        "lastMessageAt": "2026-02-16T10:00:00Z",
        "messageCount": 12,
    }
    record.update(overrides)
    return record


def create_mock_cron_job(job_id: str, **overrides: Any) -> Dict[str, Any]:
    """Remote cron job record as a gateway reports it."""
    record = {
        "jobId": job_id,
        "name": f"job {job_id}",
        "schedule": {"kind": "every", "everyMs": 60000},
        "payload": {"kind": "systemEvent", "text": "ping"},
        "sessionTarget": "main",
        "enabled": True,
        "lastRunAt": "2026-02-16T09:59:00Z",
        "nextRunAt": "2026-02-16T10:00:00Z",
    }
    record.update(overrides)
    return record
