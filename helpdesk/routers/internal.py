"""
Internal endpoints for database webhooks.

Protected by X-Internal-Secret header.
Configure the database to POST row changes on tickets and ticket_comments here.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from helpdesk.core.deps import get_notification_dependencies, verify_internal_secret
from helpdesk.routers.notifications import run_notification
from helpdesk.schemas.notification import DatabaseWebhookPayload, NotificationRequest
from helpdesk.services.notification_email_service import NotificationDependencies
from helpdesk.services.ticket_events import classify_comment_insert, classify_ticket_change

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/internal/webhooks",
    tags=["internal"],
    dependencies=[Depends(verify_internal_secret)],
)

NO_NOTIFICATION_MESSAGE = "Nenhuma notificação para esta alteração"


@router.post("/ticket-events")
async def ticket_events_webhook(
    payload: DatabaseWebhookPayload,
    deps: NotificationDependencies = Depends(get_notification_dependencies),
):
    """
    Turn a tickets/ticket_comments row change into a notification.

    Tickets: INSERT -> new_ticket, status change -> status_change,
    assignee change -> assignment. Comments: INSERT -> new_comment.
    """
    event: NotificationRequest | None = None

    if payload.table == "tickets":
        event = classify_ticket_change(payload.type, payload.record, payload.old_record)

    elif payload.table == "ticket_comments" and payload.type.upper() == "INSERT":
        comment = payload.record or {}
        ticket = deps.store.get_ticket_snapshot(str(comment.get("ticket_id") or ""))
        if ticket is None:
            logger.warning("Comment webhook for unknown ticket %s", comment.get("ticket_id"))
            return JSONResponse(status_code=500, content={"error": "Ticket não encontrado"})
        event = classify_comment_insert(
            comment,
            ticket_title=ticket.title,
            company_id=ticket.company_id,
            created_by=ticket.created_by,
        )

    if event is None:
        return {"success": True, "message": NO_NOTIFICATION_MESSAGE}

    return await run_notification(event, deps)
