"""
Notification Settings Service - per-user email toggles.

Read and update a user's own row in user_notification_settings.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from helpdesk.db.enums import NotificationPreference
from helpdesk.db.models import UserNotificationSettings


def _settings_dict(settings: UserNotificationSettings | None) -> dict[str, bool]:
    return {
        pref.value: bool(getattr(settings, pref.value)) if settings else False
        for pref in NotificationPreference
    }


def get_user_settings(db: Session, user_id: UUID) -> dict[str, bool]:
    """
    Get user notification settings.

    Returns defaults (all OFF) if no row exists.
    """
    settings = db.query(UserNotificationSettings).filter(
        UserNotificationSettings.user_id == user_id,
    ).first()
    return _settings_dict(settings)


def update_user_settings(db: Session, user_id: UUID, updates: dict) -> dict[str, bool]:
    """
    Update user notification settings.

    Creates row if it doesn't exist. Unknown keys and None values are ignored.
    """
    settings = db.query(UserNotificationSettings).filter(
        UserNotificationSettings.user_id == user_id,
    ).first()

    if not settings:
        settings = UserNotificationSettings(
            user_id=user_id,
            **{pref.value: False for pref in NotificationPreference},
        )
        db.add(settings)

    allowed = {pref.value for pref in NotificationPreference}
    for key, value in updates.items():
        if key in allowed and value is not None:
            setattr(settings, key, bool(value))

    db.commit()
    db.refresh(settings)

    return _settings_dict(settings)
