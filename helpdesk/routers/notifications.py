"""
Notification function endpoint - /functions/v1/send-notification-email.

Called by the rest of the system after a ticket mutation. Always answers with
permissive CORS headers, including on preflight.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from helpdesk.core.deps import get_notification_dependencies
from helpdesk.core.structured_logging import build_log_context
from helpdesk.schemas.notification import (
    NotificationErrorResponse,
    NotificationRequest,
    NotificationResponse,
)
from helpdesk.services import notification_email_service
from helpdesk.services.notification_email_service import (
    NotificationDependencies,
    TicketNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["notifications"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


async def run_notification(
    event: NotificationRequest,
    deps: NotificationDependencies,
) -> JSONResponse:
    """Run the fan-out and map the outcome to the function's JSON contract."""
    try:
        outcome = await notification_email_service.send_ticket_notification(event, deps)
    except TicketNotFoundError as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)}, headers=CORS_HEADERS)
    except SQLAlchemyError:
        logger.exception(
            "Database error while loading notification data",
            extra=build_log_context(ticket_id=event.ticket_id, event_type=event.type.value),
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Erro ao carregar dados do ticket"},
            headers=CORS_HEADERS,
        )

    return JSONResponse(status_code=200, content=outcome.to_response(), headers=CORS_HEADERS)


@router.options("/send-notification-email", include_in_schema=False)
def notification_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "/send-notification-email",
    response_model=NotificationResponse,
    responses={500: {"model": NotificationErrorResponse}},
)
async def send_notification_email(
    event: NotificationRequest,
    deps: NotificationDependencies = Depends(get_notification_dependencies),
):
    """Email everyone who should hear about a ticket event."""
    return await run_notification(event, deps)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    """Default 422 body; function routes keep their CORS headers on it."""
    response = await request_validation_exception_handler(request, exc)
    if request.url.path.startswith(router.prefix + "/"):
        response.headers.update(CORS_HEADERS)
    return response
