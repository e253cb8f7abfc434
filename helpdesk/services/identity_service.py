"""Identity service lookups (user id -> email).

Emails are not stored in profiles; they live in the identity service and are
fetched through its admin API with the service-role key.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from helpdesk.core.config import settings

logger = logging.getLogger(__name__)

IDENTITY_TIMEOUT_SECONDS = 10.0


class UserLookupError(Exception):
    """Raised when a user's email address cannot be resolved."""


class UserDirectory(Protocol):
    async def get_email(self, user_id: str) -> str:
        """Return the user's email address or raise UserLookupError."""


class SupabaseUserDirectory:
    """UserDirectory backed by the identity service admin endpoint."""

    def __init__(self, base_url: str, service_role_key: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_role_key = service_role_key

    @classmethod
    def from_settings(cls) -> "SupabaseUserDirectory":
        return cls(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)

    async def get_email(self, user_id: str) -> str:
        if not self.base_url or not self.service_role_key:
            raise UserLookupError("Identity service not configured (missing SUPABASE_URL or key)")

        headers = {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
        }
        url = f"{self.base_url}/auth/v1/admin/users/{user_id}"

        try:
            async with httpx.AsyncClient(timeout=IDENTITY_TIMEOUT_SECONDS) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise UserLookupError(f"Identity lookup failed: {exc.__class__.__name__}") from exc

        if response.status_code == 404:
            raise UserLookupError(f"User {user_id} not found")
        if not 200 <= response.status_code < 300:
            raise UserLookupError(f"Identity service error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise UserLookupError("Identity service returned invalid JSON") from exc

        # Older API versions wrap the user object
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]

        email = data.get("email") if isinstance(data, dict) else None
        if not isinstance(email, str) or not email:
            raise UserLookupError(f"User {user_id} has no email address")
        return email
