# tests/conftest.py
"""
Pytest configuration and shared fixtures for the rank engine tests.

Run:
    pytest tests -v
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import setup_database
from rank_engine.config.ranks import DEFAULT_RANK_TABLE
from rank_engine.config.roles import Role
from rank_engine.events.event_bus import eventBus, EngineEvents
from rank_engine.participant import Participant, RankProgress
from rank_engine.services.sale_service import SaleService
from rank_engine.utils.participant_locks import participantLocks
from rank_engine.utils.time_machine import timeMachine

# =============================================================================
# CONSTANTS
# =============================================================================

FROZEN_NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
CYCLE_START = datetime(2023, 12, 1, 9, 0, tzinfo=timezone.utc)

ALL_EVENTS = [
    value for key, value in vars(EngineEvents).items()
    if not key.startswith('_')
]


# =============================================================================
# ENGINE STATE FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def frozen_time():
    """Pin engine time so history dates are predictable."""
    timeMachine.setTime(FROZEN_NOW, operator="pytest")
    yield FROZEN_NOW
    timeMachine.resetToRealTime()


@pytest.fixture(autouse=True)
def clean_engine_state():
    """Event handlers and locks are process-wide singletons."""
    eventBus.clear()
    participantLocks.clear()
    yield
    eventBus.clear()
    participantLocks.clear()


@pytest.fixture
def captured_events():
    """Subscribe to every engine event; returns list of (eventName, data)."""
    events = []

    def _make_handler(eventName):
        def handler(data):
            events.append((eventName, data))

        handler.__name__ = f"capture_{eventName.replace('.', '_')}"
        return handler

    for eventName in ALL_EVENTS:
        eventBus.subscribe(eventName, _make_handler(eventName))

    return events


# =============================================================================
# PARTICIPANT FIXTURES
# =============================================================================

@pytest.fixture
def make_participant():
    """
    Build a Participant value object.

    targetCC defaults to the rank definition's target.
    """

    def _make(
            rankId="NOVUS",
            cycle="0",
            lifetime="0",
            targetCC=None,
            role=Role.STUDENT,
            history=(),
            participantId=1
    ):
        if targetCC is None:
            definition = DEFAULT_RANK_TABLE.get(rankId)
            targetCC = definition.targetCC if definition else Decimal("2")
        return Participant(
            participantId=participantId,
            role=role,
            caseCredits=Decimal(str(lifetime)),
            rankProgress=RankProgress(
                currentRankId=rankId,
                currentCycleCC=Decimal(str(cycle)),
                targetCC=Decimal(str(targetCC)),
                cycleStartDate=CYCLE_START,
                history=tuple(history)
            )
        )

    return _make


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory database for each test."""
    engine = create_engine("sqlite://")
    setup_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create database session for each test."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def sale_service(session):
    return SaleService(session)


@pytest.fixture
def student(sale_service):
    """Freshly registered student at NOVUS."""
    return sale_service.createParticipant("@bob_builder", name="Bob Builder")
