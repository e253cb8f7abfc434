"""Notification preference ORM model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import func, text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.db.base import Base


class UserNotificationSettings(Base):
    """
    Per-user email notification preferences.

    Missing row = every toggle OFF.
    """

    __tablename__ = "user_notification_settings"

    user_id: Mapped[uuid.UUID] = mapped_column(primary_key=True)

    # Staff toggles
    email_on_new_ticket: Mapped[bool] = mapped_column(default=False, server_default=text("false"))
    email_on_status_change: Mapped[bool] = mapped_column(
        default=False, server_default=text("false")
    )
    email_on_assignment: Mapped[bool] = mapped_column(default=False, server_default=text("false"))

    # Client toggles (tickets the user opened)
    email_on_my_ticket_status_change: Mapped[bool] = mapped_column(
        default=False, server_default=text("false")
    )
    email_on_my_ticket_comments: Mapped[bool] = mapped_column(
        default=False, server_default=text("false")
    )
    email_on_my_ticket_resolved: Mapped[bool] = mapped_column(
        default=False, server_default=text("false")
    )

    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
