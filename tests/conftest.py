"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database session (tables created/dropped per test)
- HTTPX AsyncClient against the ASGI app
- In-memory fakes for the notification collaborators
"""
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Generator

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-bytes")
os.environ.setdefault("INTERNAL_SECRET", "test-internal-secret")
os.environ.setdefault("CORS_ORIGINS", "https://app.example.com")
os.environ.setdefault("SENTRY_DSN", "")

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from helpdesk.core.config import settings
from helpdesk.core.deps import get_db
from helpdesk.db.base import Base
from helpdesk.db.enums import Role, TICKET_TRIAGE_ROLES
from helpdesk.db.session import SessionLocal, engine
from helpdesk.main import app
from helpdesk.services.identity_service import UserLookupError
from helpdesk.services.notification_email_service import NotificationDependencies
from helpdesk.services.resend_email_service import EmailDeliveryError
from helpdesk.services.ticket_snapshot_service import (
    NotificationPreferences,
    TicketSnapshot,
    UserProfile,
)

import helpdesk.db.models  # noqa: F401  (register tables on Base.metadata)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema per test on the shared in-memory connection."""
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient bound to the app, with get_db pointing at the test session."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_access_token(user_id: uuid.UUID, **overrides) -> str:
    """Mint an identity-service style access token for tests."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "aud": settings.SUPABASE_JWT_AUDIENCE,
        "role": "authenticated",
        "iat": now,
        "exp": now + timedelta(hours=1),
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


# =============================================================================
# Notification fakes
# =============================================================================

class FakeTicketStore:
    """In-memory TicketStore."""

    def __init__(
        self,
        tickets: list[TicketSnapshot] | None = None,
        profiles: list[UserProfile] | None = None,
        preferences: list[NotificationPreferences] | None = None,
        companies: dict[str, str] | None = None,
    ) -> None:
        self.tickets = {t.id: t for t in tickets or []}
        self.profiles = {p.user_id: p for p in profiles or []}
        self.preferences = {p.user_id: p for p in preferences or []}
        self.companies = companies or {}

    def get_ticket_snapshot(self, ticket_id):
        return self.tickets.get(ticket_id)

    def list_company_staff(self, company_id):
        triage_roles = {role.value for role in TICKET_TRIAGE_ROLES}
        return [
            p.user_id
            for p in self.profiles.values()
            if p.company_id == company_id and p.role in triage_roles
        ]

    def get_profiles(self, user_ids):
        return {uid: self.profiles[uid] for uid in user_ids if uid in self.profiles}

    def get_preferences(self, user_ids):
        return {uid: self.preferences[uid] for uid in user_ids if uid in self.preferences}

    def get_company_name(self, company_id):
        return self.companies.get(company_id)


class FakeUserDirectory:
    def __init__(self, emails: dict[str, str] | None = None, failing: set[str] | None = None):
        self.emails = emails or {}
        self.failing = failing or set()
        self.lookups: list[str] = []

    async def get_email(self, user_id: str) -> str:
        self.lookups.append(user_id)
        if user_id in self.failing:
            raise UserLookupError(f"Lookup failed for {user_id}")
        if user_id not in self.emails:
            raise UserLookupError(f"User {user_id} has no email address")
        return self.emails[user_id]


class FakeEmailProvider:
    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.sent: list[dict] = []

    async def send(self, *, from_address, to, subject, html):
        self.sent.append({"from": from_address, "to": to, "subject": subject, "html": html})
        if to in self.failing:
            raise EmailDeliveryError("Resend API error: 422 (Invalid `to` field)")
        return {"id": f"msg_{len(self.sent)}"}


def make_deps(
    store: FakeTicketStore,
    directory: FakeUserDirectory | None = None,
    provider: FakeEmailProvider | None = None,
) -> NotificationDependencies:
    return NotificationDependencies(
        store=store,
        directory=directory or FakeUserDirectory(),
        provider=provider or FakeEmailProvider(),
        from_email="noreply@example.com",
        frontend_url="https://helpdesk.example.com",
        timezone="America/Sao_Paulo",
        default_company_name="Sistema de Tickets",
    )


def make_ticket(**overrides) -> TicketSnapshot:
    data = {
        "id": "t1",
        "company_id": "c1",
        "title": "Printer broken",
        "description": "Paper jam on floor 2",
        "status": "open",
        "priority": "high",
        "created_at": datetime(2024, 3, 5, 15, 30, tzinfo=timezone.utc),
        "created_by": "userC",
        "assigned_to": None,
        "category_name": "Hardware",
        "client_name": None,
        "creator_name": "Carla",
        "assignee_name": None,
    }
    data.update(overrides)
    return TicketSnapshot(**data)


def staff(user_id: str, role: Role = Role.TECHNICIAN, company_id: str = "c1") -> UserProfile:
    return UserProfile(user_id=user_id, name=user_id, role=role.value, company_id=company_id)


def client_user(user_id: str, company_id: str = "c1") -> UserProfile:
    return UserProfile(
        user_id=user_id, name=user_id, role=Role.CLIENT_USER.value, company_id=company_id
    )


def prefs(user_id: str, **flags) -> NotificationPreferences:
    return NotificationPreferences(user_id=user_id, **flags)


ALL_ON = {
    "email_on_new_ticket": True,
    "email_on_status_change": True,
    "email_on_assignment": True,
    "email_on_my_ticket_status_change": True,
    "email_on_my_ticket_comments": True,
    "email_on_my_ticket_resolved": True,
}
