"""Notification-related enums."""

from enum import Enum


class NotificationEventType(str, Enum):
    """Ticket events that fan out email notifications."""

    NEW_TICKET = "new_ticket"
    STATUS_CHANGE = "status_change"
    ASSIGNMENT = "assignment"
    NEW_COMMENT = "new_comment"


class NotificationPreference(str, Enum):
    """Boolean columns of user_notification_settings."""

    EMAIL_ON_NEW_TICKET = "email_on_new_ticket"
    EMAIL_ON_STATUS_CHANGE = "email_on_status_change"
    EMAIL_ON_ASSIGNMENT = "email_on_assignment"
    EMAIL_ON_MY_TICKET_STATUS_CHANGE = "email_on_my_ticket_status_change"
    EMAIL_ON_MY_TICKET_COMMENTS = "email_on_my_ticket_comments"
    EMAIL_ON_MY_TICKET_RESOLVED = "email_on_my_ticket_resolved"
