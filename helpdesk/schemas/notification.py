"""Pydantic schemas for ticket notifications and notification settings."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from helpdesk.db.enums import NotificationEventType


class NotificationRequest(BaseModel):
    """Event descriptor posted by the caller when a ticket changes."""

    model_config = ConfigDict(extra="ignore")

    type: NotificationEventType
    ticket_id: str
    ticket_title: str
    ticket_description: str | None = None
    old_status: str | None = None
    new_status: str | None = None
    old_assigned_to: str | None = None
    new_assigned_to: str | None = None
    created_by: str | None = None
    assigned_to: str | None = None
    updated_by: str | None = None
    company_id: str
    comment_user: str | None = None
    is_private: bool | None = None


class NotificationSendResult(BaseModel):
    """Outcome of one recipient's email."""
    success: bool
    email: str | None
    response: dict[str, Any] | None = None
    error: str | None = None


class NotificationResponse(BaseModel):
    success: bool
    message: str
    results: list[NotificationSendResult] | None = None


class NotificationErrorResponse(BaseModel):
    error: str


class NotificationSettingsRead(BaseModel):
    """User notification settings."""
    email_on_new_ticket: bool
    email_on_status_change: bool
    email_on_assignment: bool
    email_on_my_ticket_status_change: bool
    email_on_my_ticket_comments: bool
    email_on_my_ticket_resolved: bool


class NotificationSettingsUpdate(BaseModel):
    """Update notification settings."""
    email_on_new_ticket: bool | None = None
    email_on_status_change: bool | None = None
    email_on_assignment: bool | None = None
    email_on_my_ticket_status_change: bool | None = None
    email_on_my_ticket_comments: bool | None = None
    email_on_my_ticket_resolved: bool | None = None


class DatabaseWebhookPayload(BaseModel):
    """Row-change payload sent by the database webhook."""

    model_config = ConfigDict(extra="ignore")

    type: str
    table: str
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None
