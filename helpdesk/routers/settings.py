"""
Settings Router - /me/notification-settings.

Lets a user read and change their own email notification toggles.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from helpdesk.core.deps import get_current_user_id, get_db
from helpdesk.schemas.notification import NotificationSettingsRead, NotificationSettingsUpdate
from helpdesk.services import notification_settings_service


router = APIRouter(prefix="/me", tags=["settings"])


@router.get("/notification-settings", response_model=NotificationSettingsRead)
def get_notification_settings(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get the current user's notification settings."""
    settings = notification_settings_service.get_user_settings(db=db, user_id=user_id)
    return NotificationSettingsRead(**settings)


@router.patch("/notification-settings", response_model=NotificationSettingsRead)
def update_notification_settings(
    data: NotificationSettingsUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Update the current user's notification settings (only provided fields)."""
    settings = notification_settings_service.update_user_settings(
        db=db,
        user_id=user_id,
        updates=data.model_dump(exclude_unset=True),
    )
    return NotificationSettingsRead(**settings)
