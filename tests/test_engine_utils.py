# tests/test_engine_utils.py
"""
Tests for engine infrastructure: event bus, time machine, participant locks,
database helpers.
"""
import threading
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, inspect

from database import setup_database, drop_all_tables
from rank_engine.events.event_bus import EventBus, eventBus
from rank_engine.utils.participant_locks import ParticipantLocks, participantLocks
from rank_engine.utils.time_machine import TimeMachine, timeMachine


# =============================================================================
# TEST CLASS: event bus
# =============================================================================

class TestEventBus:

    def test_singleton(self):
        assert EventBus() is eventBus

    def test_handlers_run_in_order(self):
        calls = []

        def first(data):
            calls.append(("first", data["n"]))

        def second(data):
            calls.append(("second", data["n"]))

        eventBus.subscribe("test.event", first)
        eventBus.subscribe("test.event", second)
        eventBus.emit("test.event", {"n": 1})

        assert calls == [("first", 1), ("second", 1)]

    def test_emit_without_subscribers(self):
        eventBus.emit("nobody.listens", {})

    def test_unsubscribe(self):
        calls = []

        def handler(data):
            calls.append(data)

        eventBus.subscribe("test.event", handler)
        eventBus.unsubscribe("test.event", handler)
        eventBus.unsubscribe("test.event", handler)
        eventBus.emit("test.event", {"n": 1})

        assert calls == []

    def test_failing_handler_logged_and_skipped(self, caplog):
        calls = []

        def broken(data):
            raise RuntimeError("boom")

        def healthy(data):
            calls.append(data)

        eventBus.subscribe("test.event", broken)
        eventBus.subscribe("test.event", healthy)
        eventBus.emit("test.event", {"n": 2})

        assert calls == [{"n": 2}]
        assert "boom" in caplog.text


# =============================================================================
# TEST CLASS: time machine
# =============================================================================

class TestTimeMachine:

    def test_singleton(self):
        assert TimeMachine() is timeMachine

    def test_frozen_by_fixture(self, frozen_time):
        assert timeMachine.isTestMode
        assert timeMachine.now == frozen_time

    def test_naive_time_treated_as_utc(self):
        timeMachine.setTime(datetime(2024, 3, 1, 12, 0))

        assert timeMachine.now == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_advance(self, frozen_time):
        timeMachine.advanceTime(days=1, hours=2)

        assert timeMachine.now == frozen_time + timedelta(days=1, hours=2)

    def test_advance_requires_test_mode(self):
        timeMachine.resetToRealTime()

        with pytest.raises(ValueError):
            timeMachine.advanceTime(days=1)

        assert not timeMachine.isTestMode
        assert timeMachine.now.tzinfo is not None


# =============================================================================
# TEST CLASS: participant locks
# =============================================================================

class TestParticipantLocks:

    def test_singleton(self):
        assert ParticipantLocks() is participantLocks

    def test_same_lock_per_participant(self):
        assert participantLocks.lockFor(1) is participantLocks.lockFor(1)
        assert participantLocks.lockFor(1) is not participantLocks.lockFor(2)

    def test_hold_serializes_updates(self):
        """
        TEST: Read-modify-write under hold() never loses an update.
        """
        state = {"cc": 0}

        def worker():
            for _ in range(200):
                with participantLocks.hold(42):
                    current = state["cc"]
                    state["cc"] = current + 1

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert state["cc"] == 800

    def test_other_participant_not_blocked(self):
        with participantLocks.hold(1):
            acquired = participantLocks.lockFor(2).acquire(timeout=1)
            participantLocks.lockFor(2).release()

        assert acquired


# =============================================================================
# TEST CLASS: database helpers
# =============================================================================

class TestDatabaseSetup:

    def test_setup_and_drop(self):
        engine = create_engine("sqlite://")

        setup_database(engine)
        assert {"participants", "sales", "rank_history"} <= set(inspect(engine).get_table_names())

        drop_all_tables(engine)
        assert inspect(engine).get_table_names() == []

        engine.dispose()

    def test_rank_history_columns(self):
        from models import RankHistory

        assert set(RankHistory.__table__.columns.keys()) == {
            "historyID", "createdAt", "participantID", "rankId", "newRankId",
            "dateAchieved", "totalCCAtTime", "transactionId",
        }
