"""
Test configuration and fixtures.

Provides:
- A fresh in-memory SQLite database per test (StaticPool, one connection)
- Factory fixtures for organizations, contractors, jobs and teams
- A recording notifier installed in place of the default one
- HTTPX AsyncClient with get_db overridden and caller headers helper
"""
import os
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the app's own engine off the developer database
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

from coordinator.core.deps import ORG_HEADER, ROLE_HEADER, USER_HEADER, get_db
from coordinator.db.base import Base
from coordinator.db.enums import JobPriority, OrgLinkStatus
from coordinator.db.models import (
    ContractorOrgLink,
    ContractorProfile,
    FavoriteContractor,
    Job,
    Organization,
    Team,
)
from coordinator.main import app
from coordinator.services import notification_facade


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(test_engine) -> Generator[Session, None, None]:
    """Session on the per-test database. App code may commit freely."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)()
    yield session
    session.close()


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def make_org(db: Session):
    def factory(name: str = "Test Organization", tz: str = "America/Los_Angeles", owner_user_id=None):
        org = Organization(
            name=name,
            timezone=tz,
            owner_user_id=owner_user_id or uuid.uuid4(),
        )
        db.add(org)
        db.commit()
        return org
    return factory


@pytest.fixture
def make_contractor(db: Session):
    """Create a contractor profile; returns the contractor's user id."""
    def factory(is_available: bool = True) -> uuid.UUID:
        user_id = uuid.uuid4()
        db.add(
            ContractorProfile(
                user_id=user_id,
                display_name=f"Contractor {user_id.hex[:6]}",
                is_available=is_available,
            )
        )
        db.commit()
        return user_id
    return factory


@pytest.fixture
def link_contractor(db: Session):
    def factory(contractor_id, org, status: str = OrgLinkStatus.ACTIVE.value) -> ContractorOrgLink:
        link = ContractorOrgLink(contractor_id=contractor_id, org_id=org.id, status=status)
        db.add(link)
        db.commit()
        return link
    return factory


@pytest.fixture
def favorite_contractor(db: Session):
    def factory(contractor_id, org) -> FavoriteContractor:
        favorite = FavoriteContractor(contractor_id=contractor_id, org_id=org.id)
        db.add(favorite)
        db.commit()
        return favorite
    return factory


@pytest.fixture
def make_job(db: Session):
    def factory(
        org=None,
        title: str = "Leaking kitchen faucet",
        is_urgent: bool = False,
        restrict_to_favorites: bool = False,
        priority: str = JobPriority.MEDIUM.value,
        posted_at: datetime | None = None,
        reporter_user_id=None,
        estimated_cost: Decimal | None = None,
        assigned_contractor_id=None,
    ) -> Job:
        job = Job(
            org_id=org.id if org else None,
            title=title,
            is_urgent=is_urgent,
            restrict_to_favorites=restrict_to_favorites,
            priority=priority,
            posted_at=posted_at or datetime.now(timezone.utc),
            reporter_user_id=reporter_user_id or uuid.uuid4(),
            estimated_cost=estimated_cost,
            assigned_contractor_id=assigned_contractor_id,
        )
        db.add(job)
        db.commit()
        return job
    return factory


@pytest.fixture
def make_team(db: Session):
    def factory(org, name: str = "Crew A") -> Team:
        team = Team(org_id=org.id, name=name)
        db.add(team)
        db.commit()
        return team
    return factory


@pytest.fixture
def test_org(make_org) -> Organization:
    return make_org()


@pytest.fixture
def contractor(make_contractor) -> uuid.UUID:
    return make_contractor()


@pytest.fixture
def linked_contractor(contractor, test_org, link_contractor) -> uuid.UUID:
    """A contractor with an active link to test_org."""
    link_contractor(contractor, test_org)
    return contractor


# =============================================================================
# Notifier
# =============================================================================

class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple] = []

    def notify(self, user_id, message, metadata=None):
        self.sent.append((user_id, message, metadata or {}))

    def of_type(self, kind: str) -> list[tuple]:
        return [n for n in self.sent if n[2].get("type") == kind]


class FailingNotifier:
    def notify(self, user_id, message, metadata=None):
        raise RuntimeError("notification gateway down")


@pytest.fixture
def notifier() -> Generator[RecordingNotifier, None, None]:
    recorder = RecordingNotifier()
    previous = notification_facade.set_notifier(recorder)
    yield recorder
    notification_facade.set_notifier(previous)


@pytest.fixture
def failing_notifier() -> Generator[FailingNotifier, None, None]:
    failing = FailingNotifier()
    previous = notification_facade.set_notifier(failing)
    yield failing
    notification_facade.set_notifier(previous)


# =============================================================================
# Client Fixtures
# =============================================================================

def caller_headers(user_id, role: str, org_id=None) -> dict[str, str]:
    headers = {USER_HEADER: str(user_id), ROLE_HEADER: role}
    if org_id:
        headers[ORG_HEADER] = str(org_id)
    return headers


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the app with get_db bound to the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def as_caller():
    """Build identity headers: as_caller(user_id, "tenant", org_id)."""
    return caller_headers
