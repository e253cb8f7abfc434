"""Ticket row changes -> notification event descriptors.

Database webhooks deliver raw rows. These helpers decide which notification
(if any) a change implies, so callers never have to build descriptors by hand.
"""

from __future__ import annotations

from typing import Any

from helpdesk.db.enums import NotificationEventType
from helpdesk.schemas.notification import NotificationRequest

Row = dict[str, Any]


def _str_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def classify_ticket_change(
    change_type: str,
    record: Row | None,
    old_record: Row | None = None,
) -> NotificationRequest | None:
    """
    Map an INSERT/UPDATE on tickets to a notification.

    A status change wins over a reassignment made in the same update.
    Returns None when the change is not worth notifying about.
    """
    current = record or {}
    previous = old_record or {}
    row = current or previous

    ticket_id = _str_or_none(row.get("id"))
    company_id = _str_or_none(row.get("company_id"))
    if not ticket_id or not company_id:
        return None

    base: dict[str, Any] = {
        "ticket_id": ticket_id,
        "ticket_title": row.get("title") or "",
        "company_id": company_id,
        "created_by": _str_or_none(current.get("created_by")),
    }

    change = change_type.upper()
    if change == "INSERT":
        return NotificationRequest(
            type=NotificationEventType.NEW_TICKET,
            ticket_description=current.get("description"),
            assigned_to=_str_or_none(current.get("assigned_to")),
            **base,
        )

    if change != "UPDATE" or not previous:
        return None

    if previous.get("status") != current.get("status"):
        return NotificationRequest(
            type=NotificationEventType.STATUS_CHANGE,
            old_status=_str_or_none(previous.get("status")),
            new_status=_str_or_none(current.get("status")),
            assigned_to=_str_or_none(current.get("assigned_to")),
            **base,
        )

    if _str_or_none(previous.get("assigned_to")) != _str_or_none(current.get("assigned_to")):
        return NotificationRequest(
            type=NotificationEventType.ASSIGNMENT,
            old_assigned_to=_str_or_none(previous.get("assigned_to")),
            new_assigned_to=_str_or_none(current.get("assigned_to")),
            **base,
        )

    return None


def classify_comment_insert(
    comment: Row,
    *,
    ticket_title: str,
    company_id: str,
    created_by: str,
) -> NotificationRequest | None:
    """Map a new ticket_comments row (plus its ticket) to a new_comment notification."""
    ticket_id = _str_or_none(comment.get("ticket_id"))
    if not ticket_id:
        return None
    return NotificationRequest(
        type=NotificationEventType.NEW_COMMENT,
        ticket_id=ticket_id,
        ticket_title=ticket_title,
        company_id=company_id,
        created_by=created_by,
        comment_user=_str_or_none(comment.get("user_id")),
        is_private=bool(comment.get("is_private")),
    )
