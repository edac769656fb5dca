"""Shared fixtures for the planning test suite.

Every engine runs against an in-memory repository and a frozen clock, so
dates such as "today" and "days until" are deterministic.
"""

from datetime import date, datetime

import pytest

from core.models import (
    Application,
    ApplicationStatus,
    Module,
    Operator,
    Session,
    SessionStatus,
    Setup,
)
from planning.container import build_services
from repository.memory import InMemoryRepository

FIXED_NOW = datetime(2025, 1, 6, 9, 0, 0)  # a Monday
TODAY = FIXED_NOW.date()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def repo(clock):
    """Region `east`: two active setups, one retired, one operator.
    Region `west`: one setup, no operator."""
    repo = InMemoryRepository(clock=clock)
    repo.add_setup(Setup(id="east-1", region_id="east", name="East One"))
    repo.add_setup(Setup(id="east-2", region_id="east", name="East Two"))
    repo.add_setup(Setup(id="east-0", region_id="east", active=False))
    repo.add_setup(Setup(id="west-1", region_id="west"))
    repo.upsert_operator(Operator(id="op1", region_id="east", name="Op One", email="op1@example.com"))
    repo.add_module(Module(id="mod-small", name="Small", capacity_max=8))
    repo.add_module(Module(id="mod-large", name="Large", capacity_max=16))
    repo.add_module(Module(id="mod-open", name="Open"))
    return repo


@pytest.fixture
def services(repo, clock):
    return build_services(repo, clock)


@pytest.fixture
def make_session(repo):
    """Create a session directly in the repository, bypassing the booking rules."""

    def _make(
        session_id,
        day,
        status=SessionStatus.CONFIRMED,
        setup_ids=None,
        region_id="east",
        min_operators=1,
        visible=True,
        capacity_max=4,
        client_id="client-1",
    ):
        if isinstance(day, str):
            day = date.fromisoformat(day)
        return repo.create_session(
            Session(
                id=session_id,
                client_id=client_id,
                region_id=region_id,
                date=day,
                status=status,
                setup_ids=list(setup_ids or []),
                min_operators=min_operators,
                marketplace_visible=visible,
                capacity_max=capacity_max,
            )
        )

    return _make


@pytest.fixture
def make_operator(repo):
    def _make(operator_id, region_id="east", active=True, unavailable=(), available=()):
        return repo.upsert_operator(
            Operator(
                id=operator_id,
                region_id=region_id,
                name=operator_id.upper(),
                active=active,
                unavailable_dates={date.fromisoformat(d) for d in unavailable},
                available_dates={date.fromisoformat(d) for d in available},
            )
        )

    return _make


@pytest.fixture
def accept_on(repo):
    """Record an already-accepted application, as if accepted earlier."""

    def _accept(session_id, operator_id):
        return repo.add_application(
            Application(
                session_id=session_id,
                operator_id=operator_id,
                status=ApplicationStatus.ACCEPTED,
                applied_at=FIXED_NOW,
                responded_at=FIXED_NOW,
            )
        )

    return _accept
