"""Delivery Dispatcher.

Runs every recipient's pipeline concurrently and collects one result per
recipient. A failure in one pipeline (email lookup, rendering, provider) is
recorded for that recipient only; siblings keep going. No retries.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

from helpdesk.services.notification_recipients import Recipient
from helpdesk.services.resend_email_service import EmailProvider
from helpdesk.types import JsonObject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    subject: str
    html: str


@dataclass(frozen=True)
class DeliveryResult:
    user_id: str
    success: bool
    email: str | None
    response: JsonObject | None = None
    error: str | None = None

    def to_dict(self) -> JsonObject:
        data: JsonObject = {"success": self.success, "email": self.email}
        if self.success:
            data["response"] = self.response
        else:
            data["error"] = self.error
        return data


@dataclass
class DeliverySummary:
    results: list[DeliveryResult] = field(default_factory=list)

    @property
    def sent_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)


PrepareFn = Callable[[Recipient], Awaitable[OutboundEmail]]


async def _deliver_one(
    recipient: Recipient,
    *,
    prepare: PrepareFn,
    provider: EmailProvider,
    from_address: str,
) -> DeliveryResult:
    email: str | None = None
    try:
        message = await prepare(recipient)
        email = message.to
        response = await provider.send(
            from_address=from_address,
            to=message.to,
            subject=message.subject,
            html=message.html,
        )
    except Exception as exc:
        logger.warning(
            "Notification email failed for user %s: %s",
            recipient.user_id,
            exc,
            exc_info=True,
        )
        return DeliveryResult(
            user_id=recipient.user_id,
            success=False,
            email=email,
            error=str(exc) or exc.__class__.__name__,
        )

    logger.info(
        "Notification email sent for user %s, message_id=%s",
        recipient.user_id,
        response.get("id"),
    )
    return DeliveryResult(
        user_id=recipient.user_id,
        success=True,
        email=email,
        response=response,
    )


async def dispatch(
    recipients: Sequence[Recipient],
    *,
    prepare: PrepareFn,
    provider: EmailProvider,
    from_address: str,
) -> DeliverySummary:
    """Prepare and send one email per recipient, all at once."""
    results = await asyncio.gather(
        *(
            _deliver_one(
                recipient,
                prepare=prepare,
                provider=provider,
                from_address=from_address,
            )
            for recipient in recipients
        )
    )
    return DeliverySummary(results=list(results))
