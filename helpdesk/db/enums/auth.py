"""Authentication and role enums."""

from enum import Enum


class Role(str, Enum):
    """Profile roles. Everything except CLIENT_USER counts as staff."""

    COMPANY_ADMIN = "company_admin"
    TECHNICIAN = "technician"
    CLIENT_USER = "client_user"
    SYSTEM_OWNER = "system_owner"


# Roles that receive new_ticket notifications for their company
TICKET_TRIAGE_ROLES = (Role.COMPANY_ADMIN, Role.TECHNICIAN)
