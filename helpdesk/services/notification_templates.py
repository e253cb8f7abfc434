"""Ticket notification email templates.

Two mutually exclusive templates:
- staff (company_admin, technician, system_owner): full ticket detail block
  plus an "Alterações" section with only the fields this event changed.
- client (client_user): title, one-line summary and a link, no internal
  metadata.

Copy is pt-BR. Every interpolated value goes through html.escape.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping
from zoneinfo import ZoneInfo

from helpdesk.db.enums import NotificationEventType, TicketPriority, TicketStatus
from helpdesk.schemas.notification import NotificationRequest
from helpdesk.services.notification_recipients import Recipient
from helpdesk.services.ticket_snapshot_service import TicketSnapshot

NEUTRAL_COLOR = "#6b7280"
UNSET_LABEL = "N/A"
UNASSIGNED_LABEL = "Não atribuído"


@dataclass(frozen=True)
class Badge:
    label: str
    color: str


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


@dataclass(frozen=True)
class NotificationLinks:
    ticket_url: str
    dashboard_url: str


def build_links(frontend_url: str, ticket_id: str) -> NotificationLinks:
    base = frontend_url.rstrip("/")
    return NotificationLinks(
        ticket_url=f"{base}/tickets/{ticket_id}",
        dashboard_url=f"{base}/dashboard",
    )


# =============================================================================
# Display tables
# =============================================================================

PRIORITY_BADGES: dict[TicketPriority, Badge] = {
    TicketPriority.LOW: Badge("BAIXA", "#16a34a"),
    TicketPriority.MEDIUM: Badge("MÉDIA", "#d97706"),
    TicketPriority.HIGH: Badge("ALTA", "#ea580c"),
    TicketPriority.URGENT: Badge("URGENTE", "#dc2626"),
}

STATUS_BADGES: dict[TicketStatus, Badge] = {
    TicketStatus.OPEN: Badge("ABERTO", "#3b82f6"),
    TicketStatus.IN_PROGRESS: Badge("EM ANDAMENTO", "#f59e0b"),
    TicketStatus.RESOLVED: Badge("RESOLVIDO", "#10b981"),
    TicketStatus.CLOSED: Badge("FECHADO", NEUTRAL_COLOR),
}

SUBJECT_PREFIXES: dict[NotificationEventType, str] = {
    NotificationEventType.NEW_TICKET: "Novo Ticket",
    NotificationEventType.STATUS_CHANGE: "Status Alterado",
    NotificationEventType.ASSIGNMENT: "Ticket Atribuído",
    NotificationEventType.NEW_COMMENT: "Atualização do Ticket",
}

# (icon, title, description) shown in the staff alert banner
STAFF_ALERTS: dict[NotificationEventType, tuple[str, str, str]] = {
    NotificationEventType.NEW_TICKET: (
        "🎫",
        "Novo Ticket Criado",
        "Um novo ticket foi criado no sistema e requer atenção.",
    ),
    NotificationEventType.STATUS_CHANGE: (
        "🔄",
        "Status do Ticket Alterado",
        "O status do ticket foi atualizado.",
    ),
    NotificationEventType.ASSIGNMENT: (
        "👤",
        "Ticket Atribuído",
        "O responsável pelo ticket foi alterado.",
    ),
    NotificationEventType.NEW_COMMENT: (
        "💬",
        "Novo Comentário",
        "Um novo comentário foi adicionado ao ticket.",
    ),
}


def _require_exhaustive(table: Mapping[Enum, object], enum_cls: type[Enum]) -> None:
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise RuntimeError(f"{enum_cls.__name__} values without display entry: {missing}")


_require_exhaustive(PRIORITY_BADGES, TicketPriority)
_require_exhaustive(STATUS_BADGES, TicketStatus)
_require_exhaustive(SUBJECT_PREFIXES, NotificationEventType)
_require_exhaustive(STAFF_ALERTS, NotificationEventType)


def _badge(raw: str | None, enum_cls: type[Enum], table: Mapping[Enum, Badge]) -> Badge:
    if not raw:
        return Badge(UNSET_LABEL, NEUTRAL_COLOR)
    try:
        return table[enum_cls(raw.lower())]
    except ValueError:
        return Badge(raw.replace("_", " ").upper(), NEUTRAL_COLOR)


def priority_badge(raw: str | None) -> Badge:
    return _badge(raw, TicketPriority, PRIORITY_BADGES)


def status_badge(raw: str | None) -> Badge:
    return _badge(raw, TicketStatus, STATUS_BADGES)


def format_datetime(value: datetime | None, tz_name: str) -> str:
    """dd/mm/YYYY HH:MM in the given zone; naive values are taken as UTC."""
    if value is None:
        return UNSET_LABEL
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name)).strftime("%d/%m/%Y %H:%M")


def short_ticket_id(ticket_id: str) -> str:
    return ticket_id[:8].upper()


def build_subject(event: NotificationRequest, company_name: str) -> str:
    prefix = SUBJECT_PREFIXES.get(event.type, "Atualização do Ticket")
    return f"{company_name} - {prefix}: {event.ticket_title}"


# =============================================================================
# Staff template
# =============================================================================


def change_details(
    event: NotificationRequest,
    ticket: TicketSnapshot,
    display_names: Mapping[str, str],
) -> list[tuple[str, str]]:
    """(label, value) rows for the "Alterações" section."""

    def person(user_id: str | None) -> str:
        if not user_id:
            return UNASSIGNED_LABEL
        return display_names.get(user_id, user_id)

    if event.type == NotificationEventType.NEW_TICKET:
        description = event.ticket_description or ticket.description
        return [("Descrição", description)] if description else []

    if event.type == NotificationEventType.STATUS_CHANGE:
        return [
            ("Status Anterior", status_badge(event.old_status).label),
            ("Novo Status", status_badge(event.new_status or ticket.status).label),
        ]

    if event.type == NotificationEventType.ASSIGNMENT:
        return [
            ("Responsável Anterior", person(event.old_assigned_to)),
            ("Novo Responsável", person(event.new_assigned_to or ticket.assigned_to)),
        ]

    if event.type == NotificationEventType.NEW_COMMENT:
        rows = [("Visibilidade", "Privado" if event.is_private else "Público")]
        if event.comment_user:
            rows.insert(0, ("Comentário de", person(event.comment_user)))
        return rows

    return []


def _detail_row(label: str, value: str, color: str | None = None) -> str:
    value_style = "font-size: 14px; color: #1e293b; margin: 0;"
    if color:
        value_style = f"font-size: 14px; color: {color}; font-weight: bold; margin: 0;"
    return (
        "<tr>"
        '<td style="width: 140px; vertical-align: top; padding: 0 0 12px 0;'
        ' font-size: 14px; color: #64748b; font-weight: 600;">'
        f"{html.escape(label)}:</td>"
        f'<td style="vertical-align: top; padding: 0 0 12px 16px; {value_style}">'
        f"{html.escape(value)}</td>"
        "</tr>"
    )


def render_staff_email(
    event: NotificationRequest,
    ticket: TicketSnapshot,
    company_name: str,
    links: NotificationLinks,
    *,
    tz_name: str,
    display_names: Mapping[str, str],
) -> str:
    icon, alert_title, alert_description = STAFF_ALERTS[event.type]
    priority = priority_badge(ticket.priority)
    status = status_badge(ticket.status)
    company = html.escape(company_name)

    rows = [
        _detail_row("ID do Ticket", f"#{short_ticket_id(ticket.id)}"),
        _detail_row("Título", event.ticket_title or ticket.title),
        _detail_row("Categoria", ticket.category_name or UNSET_LABEL),
    ]
    if ticket.client_name:
        rows.append(_detail_row("Cliente", ticket.client_name))
    rows += [
        _detail_row("Prioridade", priority.label, priority.color),
        _detail_row("Status", status.label, status.color),
        _detail_row("Criado por", ticket.creator_name or UNSET_LABEL),
    ]
    if ticket.assigned_to:
        rows.append(_detail_row("Responsável", ticket.assignee_name or ticket.assigned_to))
    rows.append(_detail_row("Data de Criação", format_datetime(ticket.created_at, tz_name)))

    rows_html = "".join(rows)

    changes = change_details(event, ticket, display_names)
    changes_html = ""
    if changes:
        changes_html = (
            '<div style="padding: 16px 24px 24px 24px; background-color: #fffbeb;'
            ' border-top: 1px solid #fbbf24; border-bottom: 1px solid #fbbf24;">'
            '<h3 style="font-size: 18px; color: #1e293b; margin: 0 0 16px 0;">Alterações</h3>'
            '<table role="presentation" cellpadding="0" cellspacing="0" border="0" width="100%">'
            + "".join(_detail_row(label, value) for label, value in changes)
            + "</table></div>"
        )

    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head><meta charset="utf-8"><title>{html.escape(alert_title)}</title></head>
<body style="background-color: #f6f9fc; font-family: -apple-system, 'Segoe UI', Roboto, 'Helvetica Neue', sans-serif; margin: 0; padding: 20px 0;">
  <div style="background-color: #ffffff; margin: 0 auto; max-width: 600px; border-radius: 8px; overflow: hidden;">
    <div style="background-color: #1e40af; padding: 24px; text-align: center;">
      <h1 style="font-size: 24px; color: #ffffff; margin: 0 0 8px 0;">{company}</h1>
      <p style="font-size: 14px; color: #e0e7ff; margin: 0;">Sistema de Gestão de Tickets</p>
    </div>
    <div style="padding: 24px; background-color: #f8fafc; border-bottom: 1px solid #e2e8f0;">
      <h2 style="font-size: 20px; color: #1e293b; margin: 0 0 8px 0;">{icon} {html.escape(alert_title)}</h2>
      <p style="font-size: 16px; color: #64748b; margin: 0;">{html.escape(alert_description)}</p>
    </div>
    <div style="padding: 24px;">
      <h3 style="font-size: 18px; color: #1e293b; margin: 0 0 16px 0;">Detalhes do Ticket</h3>
      <table role="presentation" cellpadding="0" cellspacing="0" border="0" width="100%">{rows_html}</table>
    </div>
    {changes_html}
    <div style="padding: 24px; text-align: center;">
      <a href="{html.escape(links.ticket_url, quote=True)}" style="background-color: #1e40af; border-radius: 6px; color: #ffffff; font-size: 14px; font-weight: bold; text-decoration: none; display: inline-block; padding: 12px 24px; margin: 0 4px;">Ver Ticket Completo</a>
      <a href="{html.escape(links.dashboard_url, quote=True)}" style="background-color: #ffffff; border: 1px solid #d1d5db; border-radius: 6px; color: #374151; font-size: 14px; font-weight: bold; text-decoration: none; display: inline-block; padding: 12px 24px; margin: 0 4px;">Ir para Dashboard</a>
    </div>
    <div style="padding: 24px; background-color: #f8fafc; text-align: center;">
      <p style="font-size: 12px; color: #6b7280; margin: 0 0 8px 0;">Este é um email automático do sistema de gestão de tickets do {company}.</p>
      <p style="font-size: 12px; color: #6b7280; margin: 0;">Para alterar suas preferências de notificação, acesse seu painel de controle.</p>
    </div>
  </div>
</body>
</html>"""


# =============================================================================
# Client template
# =============================================================================


def client_summary(event: NotificationRequest) -> str:
    if event.type == NotificationEventType.STATUS_CHANGE:
        old = status_badge(event.old_status).label
        new = status_badge(event.new_status).label
        return f'O status do seu chamado foi atualizado de "{old}" para "{new}".'
    if event.type == NotificationEventType.NEW_COMMENT:
        return "Há um novo comentário no seu chamado."
    return "Houve uma atualização no seu chamado."


def render_client_email(
    event: NotificationRequest,
    ticket: TicketSnapshot,
    company_name: str,
    links: NotificationLinks,
    *,
    now: datetime | None = None,
) -> str:
    ticket_ref = short_ticket_id(ticket.id)
    if event.type == NotificationEventType.STATUS_CHANGE:
        heading = f"Atualização do seu chamado #{ticket_ref}"
    else:
        heading = f"Atualização do chamado #{ticket_ref}"
    company = html.escape(company_name)
    year = (now or datetime.now(timezone.utc)).year

    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head><meta charset="utf-8"><title>{html.escape(heading)}</title></head>
<body style="background-color: #f6f9fc; font-family: -apple-system, 'Segoe UI', Roboto, 'Helvetica Neue', sans-serif; margin: 0; padding: 20px 0;">
  <div style="background-color: #ffffff; margin: 0 auto; max-width: 600px; padding: 20px 0 48px;">
    <h1 style="color: #333333; font-size: 24px; margin: 40px 48px;">{html.escape(heading)}</h1>
    <div style="padding: 0 48px;">
      <p style="color: #333333; font-size: 16px;">Olá!</p>
      <p style="color: #333333; font-size: 16px;">{html.escape(client_summary(event))}</p>
      <p style="color: #333333; font-size: 16px;"><strong>Chamado:</strong> {html.escape(event.ticket_title or ticket.title)}</p>
      <div style="text-align: center; margin: 32px 0;">
        <a href="{html.escape(links.ticket_url, quote=True)}" style="background-color: #2563eb; border-radius: 6px; color: #ffffff; font-size: 16px; font-weight: bold; text-decoration: none; display: inline-block; padding: 12px 24px;">Visualizar Chamado</a>
      </div>
      <p style="color: #666666; font-size: 14px;">Para acompanhar o andamento do seu chamado, clique no botão acima ou acesse o sistema da {company}.</p>
      <p style="color: #666666; font-size: 14px;">Se você não solicitou este chamado ou tem dúvidas, entre em contato conosco.</p>
    </div>
    <p style="color: #8898aa; font-size: 12px; text-align: center; padding: 0 48px; margin-top: 32px;">© {year} {company}. Todos os direitos reservados.</p>
  </div>
</body>
</html>"""


def render_notification(
    event: NotificationRequest,
    ticket: TicketSnapshot,
    recipient: Recipient,
    company_name: str,
    links: NotificationLinks,
    *,
    tz_name: str,
    display_names: Mapping[str, str] | None = None,
) -> RenderedEmail:
    """Render subject + HTML for one recipient, picking the template by role."""
    subject = build_subject(event, company_name)
    if recipient.is_client:
        body = render_client_email(event, ticket, company_name, links)
    else:
        body = render_staff_email(
            event,
            ticket,
            company_name,
            links,
            tz_name=tz_name,
            display_names=display_names or {},
        )
    return RenderedEmail(subject=subject, html=body)
