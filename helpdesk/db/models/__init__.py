"""SQLAlchemy ORM models."""

from helpdesk.db.models.auth import Profile
from helpdesk.db.models.companies import Category, Client, Company
from helpdesk.db.models.notifications import UserNotificationSettings
from helpdesk.db.models.ticketing import Ticket, TicketComment

__all__ = [
    "Category",
    "Client",
    "Company",
    "Profile",
    "Ticket",
    "TicketComment",
    "UserNotificationSettings",
]
