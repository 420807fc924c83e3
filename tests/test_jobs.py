"""Tests for the sweep job wrapper."""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from signalsweep.errors import StoreError
from signalsweep.models import Base, Signal
from signalsweep.retention.policy import EvictionPolicy
from signalsweep.retention.store import SignalStore


class TestRunSweep:
    def test_uses_configured_policy(self, db_session, make_signal, now):
        from signalsweep.jobs.sweep import run_sweep

        old = make_signal(now - timedelta(minutes=5), status="active")
        fresh = make_signal(now, status="processed")

        with patch("signalsweep.jobs.sweep.get_db") as mock_get_db:
            mock_get_db.return_value.__enter__ = lambda s: db_session
            mock_get_db.return_value.__exit__ = MagicMock(return_value=False)

            result = run_sweep(now=now)

        assert result.policy is EvictionPolicy.AGE_ONLY
        assert set(result.deleted_ids) == {old.id}
        assert set(db_session.scalars(select(Signal.id)).all()) == {fresh.id}

    def test_policy_override(self, db_session, make_signal, now):
        from signalsweep.jobs.sweep import run_sweep

        processed = make_signal(now, status="processed")

        with patch("signalsweep.jobs.sweep.get_db") as mock_get_db:
            mock_get_db.return_value.__enter__ = lambda s: db_session
            mock_get_db.return_value.__exit__ = MagicMock(return_value=False)

            result = run_sweep(now=now, policy=EvictionPolicy.STATUS_OR_AGE)

        assert set(result.deleted_ids) == {processed.id}

    def test_store_error_propagates(self, now):
        from signalsweep.jobs.sweep import run_sweep

        with (
            patch("signalsweep.jobs.sweep.get_db"),
            patch("signalsweep.jobs.sweep.sweep", side_effect=StoreError("delete", Exception("timeout"))),
        ):
            with pytest.raises(StoreError, match="timeout"):
                run_sweep(now=now)

    def test_defaults_now_to_utc(self, db_session):
        from signalsweep.jobs.sweep import run_sweep

        with patch("signalsweep.jobs.sweep.get_db") as mock_get_db:
            mock_get_db.return_value.__enter__ = lambda s: db_session
            mock_get_db.return_value.__exit__ = MagicMock(return_value=False)

            result = run_sweep()

        assert result.threshold.tzinfo is not None
        assert result.completed_at - result.threshold >= timedelta(minutes=2)


class TestDeleteDurability:
    """The delete commits on its own; later observability reads cannot undo it."""

    @pytest.fixture
    def file_db(self, tmp_path, monkeypatch):
        from signalsweep.db import get_engine, get_sessionmaker

        monkeypatch.setenv("SIGNALSWEEP_DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'signals.db'}")
        get_engine.cache_clear()
        get_sessionmaker.cache_clear()
        engine = get_engine()
        Base.metadata.create_all(engine)
        yield engine
        engine.dispose()
        get_engine.cache_clear()
        get_sessionmaker.cache_clear()

    def test_failed_after_count_keeps_rows_deleted(self, file_db, now):
        from signalsweep.jobs.sweep import run_sweep

        with Session(file_db) as session:
            session.add(Signal(created_at=now - timedelta(minutes=5), kind="offer"))
            session.commit()

        after_count_error = StoreError("count", Exception("connection reset"))
        with patch.object(SignalStore, "count", side_effect=[1, after_count_error]):
            with pytest.raises(StoreError, match="connection reset"):
                run_sweep(now=now)

        with Session(file_db) as session:
            assert session.scalar(select(func.count()).select_from(Signal)) == 0

    def test_successful_sweep_is_committed(self, file_db, now):
        from signalsweep.jobs.sweep import run_sweep

        with Session(file_db) as session:
            session.add(Signal(created_at=now - timedelta(minutes=5), kind="offer"))
            session.add(Signal(created_at=now, kind="answer"))
            session.commit()

        result = run_sweep(now=now)

        assert result.deleted_count == 1
        with Session(file_db) as session:
            assert session.scalar(select(func.count()).select_from(Signal)) == 1
