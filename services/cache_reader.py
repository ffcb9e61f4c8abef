"""Read access to the mirrored data. Never calls a gateway."""

from typing import List, Optional

from sqlalchemy import select

from models import CronJobRecord, MessageRecord, SessionRecord, UsageStatRecord
from storage import CronJobRow, Database, MessageRow, SessionRow, UsageStatRow
from utils.normalize import session_id


class CacheReader:
    def __init__(self, database: Database) -> None:
        self.database = database

    def sessions(self, gateway_id: str) -> List[SessionRecord]:
        """Most recently active first; sessions with no activity last."""
        stmt = (
            select(SessionRow)
            .where(SessionRow.gateway_id == gateway_id)
            .order_by(SessionRow.last_message_at.desc().nulls_last(), SessionRow.id)
        )
        with self.database.session() as session:
            return [SessionRecord.model_validate(row) for row in session.scalars(stmt)]

    def cron_jobs(self, gateway_id: str) -> List[CronJobRecord]:
        stmt = select(CronJobRow).where(CronJobRow.gateway_id == gateway_id).order_by(CronJobRow.id)
        with self.database.session() as session:
            return [CronJobRecord.model_validate(row) for row in session.scalars(stmt)]

    def messages(self, gateway_id: str, session_key: str) -> List[MessageRecord]:
        stmt = (
            select(MessageRow)
            .where(MessageRow.session_id == session_id(gateway_id, session_key))
            .order_by(MessageRow.position)
        )
        with self.database.session() as session:
            return [MessageRecord.model_validate(row) for row in session.scalars(stmt)]

    def usage(
        self, gateway_id: str, start: Optional[str] = None, end: Optional[str] = None
    ) -> List[UsageStatRecord]:
        """Usage buckets in the inclusive [start, end] date range (YYYY-MM-DD)."""
        stmt = select(UsageStatRow).where(UsageStatRow.gateway_id == gateway_id)
        if start is not None:
            stmt = stmt.where(UsageStatRow.date >= start)
        if end is not None:
            stmt = stmt.where(UsageStatRow.date <= end)
        stmt = stmt.order_by(UsageStatRow.date, UsageStatRow.model)
        with self.database.session() as session:
            return [UsageStatRecord.model_validate(row) for row in session.scalars(stmt)]
