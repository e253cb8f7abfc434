"""Ticket Snapshot data access.

Everything the notification fan-out reads from the database goes through a
``TicketStore``: the joined ticket snapshot, company staff, profiles,
notification preferences and the company display name. ``SqlTicketStore`` is
the SQLAlchemy implementation; tests substitute an in-memory store.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Protocol

from sqlalchemy.orm import Session, aliased

from helpdesk.db.enums import NotificationPreference, TICKET_TRIAGE_ROLES
from helpdesk.db.models import (
    Category,
    Client,
    Company,
    Profile,
    Ticket,
    UserNotificationSettings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TicketSnapshot:
    """Denormalized read of a ticket used to build notifications."""

    id: str
    company_id: str
    title: str
    description: str
    status: str | None
    priority: str | None
    created_at: datetime | None
    created_by: str
    assigned_to: str | None = None
    category_name: str | None = None
    client_name: str | None = None
    creator_name: str | None = None
    assignee_name: str | None = None


@dataclass(frozen=True)
class UserProfile:
    user_id: str
    name: str
    role: str
    company_id: str


@dataclass(frozen=True)
class NotificationPreferences:
    """One user's email toggles. Defaults mirror a missing row (all OFF)."""

    user_id: str
    email_on_new_ticket: bool = False
    email_on_status_change: bool = False
    email_on_assignment: bool = False
    email_on_my_ticket_status_change: bool = False
    email_on_my_ticket_comments: bool = False
    email_on_my_ticket_resolved: bool = False

    def enabled(self, preference: NotificationPreference) -> bool:
        return bool(getattr(self, preference.value))


class TicketStore(Protocol):
    def get_ticket_snapshot(self, ticket_id: str) -> TicketSnapshot | None:
        """Load the ticket with category, client and people names joined."""

    def list_company_staff(self, company_id: str) -> list[str]:
        """User ids of active admins/technicians in the company."""

    def get_profiles(self, user_ids: Iterable[str]) -> dict[str, UserProfile]:
        """Profiles keyed by user id; unknown ids are absent."""

    def get_preferences(self, user_ids: Iterable[str]) -> dict[str, NotificationPreferences]:
        """Preference rows keyed by user id; users without a row are absent."""

    def get_company_name(self, company_id: str) -> str | None:
        """Company display name, or None when the company is unknown."""


def _as_uuid(value: str | uuid.UUID | None) -> uuid.UUID | None:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _as_uuids(values: Iterable[str]) -> list[uuid.UUID]:
    parsed = (_as_uuid(v) for v in values)
    return [v for v in parsed if v is not None]


class SqlTicketStore:
    """TicketStore backed by the helpdesk database."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_ticket_snapshot(self, ticket_id: str) -> TicketSnapshot | None:
        ticket_uuid = _as_uuid(ticket_id)
        if ticket_uuid is None:
            return None

        creator = aliased(Profile)
        assignee = aliased(Profile)
        row = (
            self.db.query(
                Ticket,
                Category.name,
                Client.name,
                creator.name,
                assignee.name,
            )
            .outerjoin(Category, Category.id == Ticket.category_id)
            .outerjoin(Client, Client.id == Ticket.client_id)
            .outerjoin(creator, creator.user_id == Ticket.created_by)
            .outerjoin(assignee, assignee.user_id == Ticket.assigned_to)
            .filter(Ticket.id == ticket_uuid)
            .first()
        )
        if row is None:
            return None

        ticket, category_name, client_name, creator_name, assignee_name = row
        return TicketSnapshot(
            id=str(ticket.id),
            company_id=str(ticket.company_id),
            title=ticket.title,
            description=ticket.description or "",
            status=ticket.status,
            priority=ticket.priority,
            created_at=ticket.created_at,
            created_by=str(ticket.created_by),
            assigned_to=str(ticket.assigned_to) if ticket.assigned_to else None,
            category_name=category_name,
            client_name=client_name,
            creator_name=creator_name,
            assignee_name=assignee_name,
        )

    def list_company_staff(self, company_id: str) -> list[str]:
        company_uuid = _as_uuid(company_id)
        if company_uuid is None:
            return []
        rows = (
            self.db.query(Profile.user_id)
            .filter(
                Profile.company_id == company_uuid,
                Profile.active == True,  # noqa: E712
                Profile.role.in_([role.value for role in TICKET_TRIAGE_ROLES]),
            )
            .all()
        )
        return [str(user_id) for (user_id,) in rows]

    def get_profiles(self, user_ids: Iterable[str]) -> dict[str, UserProfile]:
        ids = _as_uuids(user_ids)
        if not ids:
            return {}
        profiles = self.db.query(Profile).filter(Profile.user_id.in_(ids)).all()
        return {
            str(p.user_id): UserProfile(
                user_id=str(p.user_id),
                name=p.name,
                role=p.role,
                company_id=str(p.company_id),
            )
            for p in profiles
        }

    def get_preferences(self, user_ids: Iterable[str]) -> dict[str, NotificationPreferences]:
        ids = _as_uuids(user_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(UserNotificationSettings)
            .filter(UserNotificationSettings.user_id.in_(ids))
            .all()
        )
        return {str(row.user_id): preferences_from_row(row) for row in rows}

    def get_company_name(self, company_id: str) -> str | None:
        company_uuid = _as_uuid(company_id)
        if company_uuid is None:
            return None
        row = self.db.query(Company.name).filter(Company.id == company_uuid).first()
        return row[0] if row else None


def preferences_from_row(row: UserNotificationSettings) -> NotificationPreferences:
    return NotificationPreferences(
        user_id=str(row.user_id),
        **{pref.value: bool(getattr(row, pref.value)) for pref in NotificationPreference},
    )
