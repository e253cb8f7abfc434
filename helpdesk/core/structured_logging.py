"""Structured logging helpers."""

from typing import Any


def build_log_context(
    *,
    user_id: str | None = None,
    company_id: str | None = None,
    ticket_id: str | None = None,
    event_type: str | None = None,
    route: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict for ``extra=``, skipping empty values.

    Email addresses and ticket content never go into the log context.
    """
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if company_id:
        context["company_id"] = company_id
    if ticket_id:
        context["ticket_id"] = ticket_id
    if event_type:
        context["event_type"] = event_type
    if route:
        context["route"] = route
    return context
