"""
Ticket notification email fan-out.

send_ticket_notification() is the whole flow for one ticket event:
load snapshot -> resolve candidates -> filter by role/preferences ->
render + send per recipient (concurrently) -> summary.

Collaborators come in through NotificationDependencies so tests can swap
the database, identity service and email provider for fakes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from helpdesk.core.structured_logging import build_log_context
from helpdesk.schemas.notification import NotificationRequest
from helpdesk.services.identity_service import UserDirectory
from helpdesk.services.notification_dispatch import (
    DeliverySummary,
    OutboundEmail,
    dispatch,
)
from helpdesk.services.notification_recipients import (
    Recipient,
    filter_recipients,
    resolve_candidates,
)
from helpdesk.services.notification_templates import build_links, render_notification
from helpdesk.services.resend_email_service import EmailProvider, format_from_address
from helpdesk.services.ticket_snapshot_service import TicketStore
from helpdesk.types import JsonObject

logger = logging.getLogger(__name__)

NO_CANDIDATES_MESSAGE = "Nenhum usuário para notificar"
NO_RECIPIENTS_MESSAGE = "Nenhum usuário tem esta notificação ativada"


class TicketNotFoundError(Exception):
    """The ticket behind a notification could not be loaded."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__("Ticket não encontrado")
        self.ticket_id = ticket_id


@dataclass
class NotificationDependencies:
    store: TicketStore
    directory: UserDirectory
    provider: EmailProvider
    from_email: str
    frontend_url: str
    timezone: str
    default_company_name: str


@dataclass
class NotificationOutcome:
    message: str
    summary: DeliverySummary | None = None

    @property
    def attempted(self) -> int:
        return len(self.summary.results) if self.summary else 0

    def to_response(self) -> JsonObject:
        body: JsonObject = {"success": True, "message": self.message}
        if self.summary is not None:
            body["results"] = [result.to_dict() for result in self.summary.results]
        return body


async def send_ticket_notification(
    event: NotificationRequest,
    deps: NotificationDependencies,
) -> NotificationOutcome:
    """
    Notify everyone who should hear about ``event``.

    Raises:
        TicketNotFoundError: the ticket could not be loaded; nothing is sent.
    """
    log_context = build_log_context(
        ticket_id=event.ticket_id,
        company_id=event.company_id,
        event_type=event.type.value,
    )
    logger.info("Processing ticket notification", extra=log_context)

    ticket = deps.store.get_ticket_snapshot(event.ticket_id)
    if ticket is None:
        logger.error("Ticket not found for notification", extra=log_context)
        raise TicketNotFoundError(event.ticket_id)

    if ticket.company_id != event.company_id:
        logger.warning(
            "Notification company_id does not match ticket; using ticket company",
            extra=log_context,
        )

    candidates = resolve_candidates(event, ticket, deps.store)
    if not candidates:
        logger.info("No users to notify", extra=log_context)
        return NotificationOutcome(message=NO_CANDIDATES_MESSAGE)

    # Profiles for people named in the email too, not only candidates
    named_users = {
        user_id
        for user_id in (event.old_assigned_to, event.new_assigned_to, event.comment_user)
        if user_id
    }
    profiles = deps.store.get_profiles(candidates | named_users)
    preferences = deps.store.get_preferences(candidates)

    recipients = filter_recipients(event, ticket, candidates, profiles, preferences)
    if not recipients:
        logger.info("No user has this notification enabled", extra=log_context)
        return NotificationOutcome(message=NO_RECIPIENTS_MESSAGE)

    company_name = deps.store.get_company_name(ticket.company_id) or deps.default_company_name
    links = build_links(deps.frontend_url, ticket.id)
    display_names = {user_id: profile.name for user_id, profile in profiles.items()}

    async def prepare(recipient: Recipient) -> OutboundEmail:
        email = await deps.directory.get_email(recipient.user_id)
        rendered = render_notification(
            event,
            ticket,
            recipient,
            company_name,
            links,
            tz_name=deps.timezone,
            display_names=display_names,
        )
        return OutboundEmail(to=email, subject=rendered.subject, html=rendered.html)

    summary = await dispatch(
        recipients,
        prepare=prepare,
        provider=deps.provider,
        from_address=format_from_address(company_name, deps.from_email),
    )

    message = (
        f"{summary.sent_count} emails enviados com sucesso, "
        f"{summary.failed_count} falharam"
    )
    logger.info(
        "Ticket notification finished: %s sent, %s failed",
        summary.sent_count,
        summary.failed_count,
        extra=log_context,
    )
    return NotificationOutcome(message=message, summary=summary)
