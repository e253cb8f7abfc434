"""Resend Email Service.

Sends transactional notification emails via the Resend API. One attempt per
call: failures raise EmailDeliveryError and are reported by the caller.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

import httpx

from helpdesk.core.config import settings
from helpdesk.types import JsonObject

logger = logging.getLogger(__name__)

RESEND_SEND_URL = "https://api.resend.com/emails"
RESEND_TIMEOUT_SECONDS = 20.0


class EmailDeliveryError(Exception):
    """Raised when the provider rejects or cannot accept a message."""


class EmailProvider(Protocol):
    async def send(
        self,
        *,
        from_address: str,
        to: str,
        subject: str,
        html: str,
    ) -> JsonObject:
        """Send one message and return the provider's response body."""


def _html_to_text(content: str) -> str:
    """Convert HTML into readable text (deliverability + inbox previews)."""
    import html as html_module

    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", "", content, flags=re.DOTALL | re.I)
    text = re.sub(r"<[^>]+>", " ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return html_module.unescape(text)


def format_from_address(display_name: str, from_email: str) -> str:
    # Quotes and angle brackets in a display name would break the header
    name = re.sub(r'["<>]', "", display_name).strip()
    return f"{name} <{from_email}>" if name else from_email


class ResendEmailProvider:
    """EmailProvider backed by the Resend HTTP API."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    @classmethod
    def from_settings(cls) -> "ResendEmailProvider":
        return cls(settings.RESEND_API_KEY)

    async def send(
        self,
        *,
        from_address: str,
        to: str,
        subject: str,
        html: str,
    ) -> JsonObject:
        if not self.api_key:
            raise EmailDeliveryError("Email sender not configured (missing RESEND_API_KEY)")

        payload: dict[str, object] = {
            "from": from_address,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        text = _html_to_text(html)
        if text:
            payload["text"] = text

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=RESEND_TIMEOUT_SECONDS) as client:
                response = await client.post(RESEND_SEND_URL, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise EmailDeliveryError("Connection timeout") from exc
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"Connection error: {exc.__class__.__name__}") from exc

        if 200 <= response.status_code < 300:
            data = response.json()
            if isinstance(data, dict) and data.get("id"):
                return data
            raise EmailDeliveryError("Resend API returned success without message id")

        # Best-effort parse of error response
        detail = None
        try:
            data = response.json()
            if isinstance(data, dict):
                detail = data.get("message") or data.get("error")
        except ValueError:
            detail = None

        error_msg = f"Resend API error: {response.status_code}"
        if detail:
            error_msg = f"{error_msg} ({detail})"
        raise EmailDeliveryError(error_msg)
