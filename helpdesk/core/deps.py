"""FastAPI dependencies for authentication, database access and notification collaborators."""

from typing import Generator
from uuid import UUID

import jwt
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from helpdesk.core.config import settings
from helpdesk.core.security import decode_access_token, user_id_from_claims
from helpdesk.db.session import SessionLocal
from helpdesk.services.identity_service import SupabaseUserDirectory
from helpdesk.services.notification_email_service import NotificationDependencies
from helpdesk.services.resend_email_service import ResendEmailProvider
from helpdesk.services.ticket_snapshot_service import SqlTicketStore


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(request: Request) -> UUID:
    """
    Get the authenticated user id from the Authorization bearer token.

    Raises:
        HTTPException 401: Authentication failed
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        claims = decode_access_token(token)
        return user_id_from_claims(claims)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session")


def verify_internal_secret(x_internal_secret: str = Header(...)) -> None:
    """Verify the internal secret header."""
    expected = settings.INTERNAL_SECRET
    if not expected:
        raise HTTPException(status_code=501, detail="INTERNAL_SECRET not configured")
    if x_internal_secret != expected:
        raise HTTPException(status_code=403, detail="Invalid internal secret")


def get_notification_dependencies(
    db: Session = Depends(get_db),
) -> NotificationDependencies:
    """Build the notification collaborators for this request."""
    return NotificationDependencies(
        store=SqlTicketStore(db),
        directory=SupabaseUserDirectory.from_settings(),
        provider=ResendEmailProvider.from_settings(),
        from_email=settings.NOTIFICATION_FROM_EMAIL,
        frontend_url=settings.frontend_base_url,
        timezone=settings.NOTIFICATION_TIMEZONE,
        default_company_name=settings.DEFAULT_COMPANY_NAME,
    )
