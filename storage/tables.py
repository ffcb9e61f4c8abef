"""SQLAlchemy ORM models for the local gateway cache.

Every dependent table references ``gateways`` with ON DELETE CASCADE so
deleting a gateway removes everything mirrored from it.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from utils.normalize import now_epoch


class Base(DeclarativeBase):
    pass


# ── Gateways ───────────────────────────────────────────────────────────────────

class GatewayRow(Base):
    """Registered remote gateway and its last observed health."""
    __tablename__ = "gateways"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    token: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="unknown")
    last_seen_at: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False, default=now_epoch)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False, default=now_epoch)

    def __repr__(self) -> str:
        return f"<Gateway id={self.id} name={self.name!r} status={self.status}>"


# ── Sessions ───────────────────────────────────────────────────────────────────

class SessionRow(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(512), primary_key=True)
    gateway_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("gateways.id", ondelete="CASCADE"), nullable=False
    )
    session_key: Mapped[str] = mapped_column(String(448), nullable=False)
    kind: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    channel: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    last_message_at: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False, default=now_epoch)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False, default=now_epoch)

    __table_args__ = (
        Index("ix_sessions_gateway_last_message", "gateway_id", "last_message_at"),
    )


# ── Cron jobs ──────────────────────────────────────────────────────────────────

class CronJobRow(Base):
    """Mirrored cron definition.

    schedule_data and payload_data hold the remote sub-objects as canonical
    JSON text; the *_kind columns carry their discriminators.
    """
    __tablename__ = "cron_jobs"

    id: Mapped[str] = mapped_column(String(512), primary_key=True)
    gateway_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("gateways.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    schedule_kind: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    schedule_data: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    payload_kind: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    payload_data: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    session_target: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_run_at: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    next_run_at: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


# ── Messages ───────────────────────────────────────────────────────────────────

class MessageRow(Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(600), primary_key=True)
    session_id: Mapped[str] = mapped_column(
        String(512), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    remote_id: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="user")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_messages_session_position", "session_id", "position"),
    )


# ── Usage ──────────────────────────────────────────────────────────────────────

class UsageStatRow(Base):
    """Daily usage bucket; (gateway_id, date, model) is the natural key."""
    __tablename__ = "usage_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gateway_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("gateways.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    model: Mapped[str] = mapped_column(String(128), nullable=False, default="unknown")
    input_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    output_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cost_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False, default=now_epoch)

    __table_args__ = (
        UniqueConstraint("gateway_id", "date", "model", name="uq_usage_gateway_date_model"),
    )
