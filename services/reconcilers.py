"""Reconcilers that apply freshly fetched gateway records to the local cache.

Each entity kind has its own identity and merge policy:

* sessions - upsert by ``<gateway>_<sessionKey>``; rows missing from a
  fetch are kept.
* cron jobs - replace-all per gateway inside one transaction.
* messages - replace-all per session inside one transaction.
* usage - upsert by ``(gateway, date, model)``; values are overwritten,
  never summed.
"""

from datetime import date
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import delete, insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import str_to_bool
from models import SyncKind
from storage import CronJobRow, Database, MessageRow, SessionRow, UsageStatRow
from utils import create_contextual_logger
from utils.normalize import (
    coerce_float,
    coerce_int,
    cron_job_id,
    extract_kind,
    iso_date,
    message_id,
    now_epoch,
    session_id,
    to_canonical_json,
    to_epoch_seconds,
    to_text,
)

from .errors import ReconcileStorageFailure

Record = Dict[str, Any]


def _first_present(record: Record, *keys: str) -> Optional[str]:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


class Reconciler:
    """Shared transaction handling for all reconcilers."""

    kind: SyncKind

    def __init__(self, database: Database) -> None:
        self.database = database
        self.logger = create_contextual_logger(__name__, service=f"{self.kind.value}_reconciler")

    def _write(self, gateway_id: str, work: Callable[[Session], None]) -> None:
        """Run ``work`` in one transaction; storage errors roll back and are wrapped."""
        try:
            with self.database.transaction() as session:
                work(session)
        # The sqlite3 driver raises OverflowError unwrapped for out-of-range integers.
        except (SQLAlchemyError, OverflowError) as e:
            self.logger.error("Cache write failed", gateway_id=gateway_id, error=str(e))
            raise ReconcileStorageFailure(self.kind.value, e) from e


class SessionReconciler(Reconciler):
    kind = SyncKind.SESSIONS

    def apply(self, gateway_id: str, sessions: List[Record]) -> int:
        now = now_epoch()
        rows = []
        for remote in sessions:
            key = _first_present(remote, "sessionKey")
            if key is None:
                self.logger.warning("Skipping session without sessionKey", gateway_id=gateway_id)
                continue
            rows.append({
                "id": session_id(gateway_id, key),
                "gateway_id": gateway_id,
                "session_key": key,
                "kind": _optional_text(remote.get("kind")),
                "channel": _optional_text(remote.get("channel")),
                "model": _optional_text(remote.get("model")),
                "last_message_at": to_epoch_seconds(remote.get("lastMessageAt")),
                "message_count": coerce_int(remote.get("messageCount")),
                "created_at": now,
                "updated_at": now,
            })

        def upsert(session: Session) -> None:
            for row in rows:
                stmt = sqlite_insert(SessionRow).values(**row)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[SessionRow.id],
                    set_={
                        "kind": stmt.excluded.kind,
                        "channel": stmt.excluded.channel,
                        "model": stmt.excluded.model,
                        "last_message_at": stmt.excluded.last_message_at,
                        "message_count": stmt.excluded.message_count,
                        "updated_at": stmt.excluded.updated_at,
                    },
                )
                session.execute(stmt)

        if rows:
            self._write(gateway_id, upsert)
        self.logger.info("Sessions reconciled", gateway_id=gateway_id, synced=len(rows))
        return len(rows)


class CronJobReconciler(Reconciler):
    kind = SyncKind.CRON

    def apply(self, gateway_id: str, jobs: List[Record]) -> int:
        rows: Dict[str, Record] = {}
        for job in jobs:
            remote_id = _first_present(job, "jobId", "id")
            if remote_id is None:
                self.logger.warning("Skipping cron job without jobId/id", gateway_id=gateway_id)
                continue
            schedule = job.get("schedule")
            payload = job.get("payload")
            local_id = cron_job_id(gateway_id, remote_id)
            # Later duplicates of the same id replace earlier ones.
            rows[local_id] = {
                "id": local_id,
                "gateway_id": gateway_id,
                "name": _optional_text(job.get("name")),
                "schedule_kind": extract_kind(schedule),
                "schedule_data": to_canonical_json(schedule if schedule is not None else {}),
                "payload_kind": extract_kind(payload),
                "payload_data": to_canonical_json(payload if payload is not None else {}),
                "session_target": _optional_text(job.get("sessionTarget")),
                "enabled": str_to_bool(job.get("enabled", False)),
                "last_run_at": to_epoch_seconds(job.get("lastRunAt")),
                "next_run_at": to_epoch_seconds(job.get("nextRunAt")),
            }

        def replace_all(session: Session) -> None:
            session.execute(delete(CronJobRow).where(CronJobRow.gateway_id == gateway_id))
            if rows:
                session.execute(insert(CronJobRow), list(rows.values()))

        self._write(gateway_id, replace_all)
        self.logger.info("Cron jobs replaced", gateway_id=gateway_id, synced=len(rows))
        return len(rows)


class MessageReconciler(Reconciler):
    kind = SyncKind.MESSAGES

    def apply(self, gateway_id: str, session_key: str, messages: List[Record]) -> int:
        local_session_id = session_id(gateway_id, session_key)
        rows = [
            {
                "id": message_id(local_session_id, position),
                "session_id": local_session_id,
                "position": position,
                "remote_id": _optional_text(remote.get("id")),
                "role": _optional_text(remote.get("role")) or "user",
                "content": to_text(remote.get("content")),
                "timestamp": to_epoch_seconds(remote.get("timestamp")),
            }
            for position, remote in enumerate(messages)
        ]
        now = now_epoch()

        def replace_all(session: Session) -> None:
            # History may be pulled before the session list; keep the FK satisfied.
            session.execute(
                sqlite_insert(SessionRow)
                .values(
                    id=local_session_id,
                    gateway_id=gateway_id,
                    session_key=session_key,
                    message_count=0,
                    created_at=now,
                    updated_at=now,
                )
                .on_conflict_do_nothing(index_elements=[SessionRow.id])
            )
            session.execute(delete(MessageRow).where(MessageRow.session_id == local_session_id))
            if rows:
                session.execute(insert(MessageRow), rows)

        self._write(gateway_id, replace_all)
        self.logger.info(
            "Messages replaced", gateway_id=gateway_id, session_key=session_key, synced=len(rows)
        )
        return len(rows)


class UsageReconciler(Reconciler):
    kind = SyncKind.USAGE

    def apply(self, gateway_id: str, snapshot: Record, on_date: Optional[date] = None) -> int:
        usage = snapshot.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        row = {
            "gateway_id": gateway_id,
            "date": iso_date(on_date),
            "model": _optional_text(snapshot.get("model")) or "unknown",
            "input_tokens": coerce_int(usage.get("inputTokens")),
            "output_tokens": coerce_int(usage.get("outputTokens")),
            "cost_usd": coerce_float(usage.get("costUsd")),
            "updated_at": now_epoch(),
        }

        def upsert(session: Session) -> None:
            stmt = sqlite_insert(UsageStatRow).values(**row)
            stmt = stmt.on_conflict_do_update(
                index_elements=[UsageStatRow.gateway_id, UsageStatRow.date, UsageStatRow.model],
                set_={
                    "input_tokens": stmt.excluded.input_tokens,
                    "output_tokens": stmt.excluded.output_tokens,
                    "cost_usd": stmt.excluded.cost_usd,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            session.execute(stmt)

        self._write(gateway_id, upsert)
        self.logger.info("Usage reconciled", gateway_id=gateway_id, date=row["date"], model=row["model"])
        return 1
