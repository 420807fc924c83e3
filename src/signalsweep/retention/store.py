"""Gateway to the signals table."""

from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from signalsweep.errors import StoreError
from signalsweep.models import Signal

logger = structlog.get_logger()


class SignalStore:
    """Filtered delete-and-return plus count queries over ``signals``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def delete_matching(self, clause: ColumnElement[bool]) -> list[UUID]:
        """Delete every row matching ``clause`` in one statement.

        Returns the ids the database reports as deleted, which can be fewer
        than were matching a moment earlier if another sweep got there first.
        """
        stmt = delete(Signal).where(clause).returning(Signal.id).execution_options(synchronize_session=False)
        try:
            return list(self.session.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.error("Signal delete failed", error=str(e))
            raise StoreError("delete", e) from e

    def count(self, clause: ColumnElement[bool] | None = None) -> int:
        stmt = select(func.count()).select_from(Signal)
        if clause is not None:
            stmt = stmt.where(clause)
        try:
            return int(self.session.scalar(stmt) or 0)
        except SQLAlchemyError as e:
            logger.error("Signal count failed", error=str(e))
            raise StoreError("count", e) from e

    def commit(self) -> None:
        """Make completed deletes durable before any follow-up reads."""
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Signal delete commit failed", error=str(e))
            raise StoreError("commit", e) from e
