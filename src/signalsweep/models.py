"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class SignalStatus(str, Enum):
    ACTIVE = "active"
    PROCESSED = "processed"


class Signal(Base):
    """One step of a call-setup handshake (offer, answer or ICE candidate)."""

    __tablename__ = "signals"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    status: Mapped[str | None] = mapped_column(String(20))  # active, processed; NULL when untracked

    # Payload (never inspected by the sweeper)
    room_id: Mapped[str | None] = mapped_column(String(255))
    sender_id: Mapped[str | None] = mapped_column(String(255))
    kind: Mapped[str | None] = mapped_column(String(30))  # offer, answer, ice-candidate
    payload: Mapped[dict[str, Any]] = mapped_column(JSON().with_variant(JSONB, "postgresql"), default=dict)

    __table_args__ = (
        CheckConstraint("status IS NULL OR status IN ('active', 'processed')", name="ck_signals_status"),
        Index("ix_signals_created_at", "created_at"),
        Index("ix_signals_status_created_at", "status", "created_at"),
    )
