"""Enum definitions for application constants."""

from helpdesk.db.enums.auth import Role, TICKET_TRIAGE_ROLES
from helpdesk.db.enums.notifications import NotificationEventType, NotificationPreference
from helpdesk.db.enums.ticketing import TicketPriority, TicketStatus

__all__ = [
    "NotificationEventType",
    "NotificationPreference",
    "Role",
    "TICKET_TRIAGE_ROLES",
    "TicketPriority",
    "TicketStatus",
]
