"""
Notification recipients - stakeholder resolution and preference filtering.

Two steps, both free of I/O apart from the staff lookup for new tickets:

1. resolve_candidates(): who might care about this event (set of user ids).
2. filter_recipients(): who actually gets an email, given role and toggles.

Clients (role client_user) only ever hear about tickets they opened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from helpdesk.core.structured_logging import build_log_context
from helpdesk.db.enums import NotificationEventType, NotificationPreference, Role
from helpdesk.schemas.notification import NotificationRequest
from helpdesk.services.ticket_snapshot_service import (
    NotificationPreferences,
    TicketSnapshot,
    TicketStore,
    UserProfile,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recipient:
    """A candidate that passed filtering. Email is resolved at send time."""

    user_id: str
    role: str
    name: str
    authorized_by: NotificationPreference

    @property
    def is_client(self) -> bool:
        return self.role == Role.CLIENT_USER.value


# =============================================================================
# Stakeholder Resolver
# =============================================================================


def resolve_candidates(
    event: NotificationRequest,
    ticket: TicketSnapshot,
    store: TicketStore,
) -> set[str]:
    """Return the de-duplicated user ids that may be notified about ``event``."""
    candidates: set[str] = set()

    if event.type == NotificationEventType.NEW_TICKET:
        candidates.update(store.list_company_staff(ticket.company_id))

    elif event.type == NotificationEventType.STATUS_CHANGE:
        candidates.add(ticket.created_by)
        if ticket.assigned_to:
            candidates.add(ticket.assigned_to)

    elif event.type == NotificationEventType.ASSIGNMENT:
        candidates.add(ticket.created_by)
        new_assignee = event.new_assigned_to or ticket.assigned_to
        if new_assignee:
            candidates.add(new_assignee)
        if event.old_assigned_to:
            candidates.add(event.old_assigned_to)

    elif event.type == NotificationEventType.NEW_COMMENT:
        candidates.add(ticket.created_by)
        if ticket.assigned_to:
            candidates.add(ticket.assigned_to)

    candidates.discard("")
    return candidates


# =============================================================================
# Preference & Role Filter
# =============================================================================


def authorizing_preference(
    event: NotificationRequest,
    ticket: TicketSnapshot,
    profile: UserProfile,
) -> NotificationPreference | None:
    """
    Pick the toggle that governs this user for this event.

    None means the user is never eligible, whatever their toggles say.
    """
    is_client = profile.role == Role.CLIENT_USER.value
    is_creator = profile.user_id == ticket.created_by

    if event.type == NotificationEventType.NEW_TICKET:
        return None if is_client else NotificationPreference.EMAIL_ON_NEW_TICKET

    if event.type == NotificationEventType.STATUS_CHANGE:
        if is_client:
            return NotificationPreference.EMAIL_ON_MY_TICKET_STATUS_CHANGE if is_creator else None
        return NotificationPreference.EMAIL_ON_STATUS_CHANGE

    if event.type == NotificationEventType.ASSIGNMENT:
        return None if is_client else NotificationPreference.EMAIL_ON_ASSIGNMENT

    if event.type == NotificationEventType.NEW_COMMENT:
        if is_client:
            if event.is_private or not is_creator:
                return None
            return NotificationPreference.EMAIL_ON_MY_TICKET_COMMENTS
        # Staff have no comment toggle; the status-change toggle covers comments
        return NotificationPreference.EMAIL_ON_STATUS_CHANGE

    return None


def filter_recipients(
    event: NotificationRequest,
    ticket: TicketSnapshot,
    candidates: set[str],
    profiles: dict[str, UserProfile],
    preferences: dict[str, NotificationPreferences],
) -> list[Recipient]:
    """Narrow candidates down to recipients, one entry per user."""
    recipients: list[Recipient] = []

    for user_id in sorted(candidates):
        profile = profiles.get(user_id)
        if profile is None:
            logger.warning(
                "Dropping notification candidate without profile",
                extra=build_log_context(
                    user_id=user_id, ticket_id=ticket.id, event_type=event.type.value
                ),
            )
            continue

        preference = authorizing_preference(event, ticket, profile)
        if preference is None:
            continue

        prefs = preferences.get(user_id) or NotificationPreferences(user_id=user_id)
        if not prefs.enabled(preference):
            continue

        recipients.append(
            Recipient(
                user_id=user_id,
                role=profile.role,
                name=profile.name,
                authorized_by=preference,
            )
        )

    return recipients
