"""Ticket and comment ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.db.base import Base
from helpdesk.db.enums import TicketPriority, TicketStatus

if TYPE_CHECKING:
    from helpdesk.db.models import Category, Client


class Ticket(Base):
    """
    Support ticket.

    created_by/assigned_to hold identity-service user ids (profiles.user_id).
    priority/status are plain strings; unknown values are tolerated on read.
    """

    __tablename__ = "tickets"
    __table_args__ = (
        Index("idx_tickets_company_status", "company_id", "status"),
        Index("idx_tickets_assigned", "assigned_to"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    priority: Mapped[str | None] = mapped_column(
        String(20), default=TicketPriority.MEDIUM.value, nullable=True
    )
    status: Mapped[str | None] = mapped_column(
        String(20), default=TicketStatus.OPEN.value, nullable=True
    )

    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
    resolved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    category: Mapped["Category | None"] = relationship()
    client: Mapped["Client | None"] = relationship()


class TicketComment(Base):
    __tablename__ = "ticket_comments"
    __table_args__ = (Index("idx_ticket_comments_ticket", "ticket_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    ticket_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_private: Mapped[bool] = mapped_column(default=False, server_default=text("false"))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
