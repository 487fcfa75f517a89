"""Role-based permissions for household tasks."""

import logging
from enum import StrEnum

from src.core.errors import ForbiddenError
from src.domain.household import HouseholdMember, HouseholdRole
from src.domain.task import ServiceType, Task


logger = logging.getLogger(__name__)


class Permission(StrEnum):
    """Actions a household member may be granted."""

    VIEW_TASKS = "VIEW_TASKS"
    EDIT_TASKS = "EDIT_TASKS"
    MANAGE_IMPORTANT_DATES = "MANAGE_IMPORTANT_DATES"
    GENERATE_MOMENTS = "GENERATE_MOMENTS"


ROLE_PERMISSIONS: dict[HouseholdRole, frozenset[Permission]] = {
    HouseholdRole.ASSISTANT: frozenset(Permission),
    HouseholdRole.CLIENT: frozenset({Permission.VIEW_TASKS}),
    HouseholdRole.STAFF: frozenset({Permission.VIEW_TASKS, Permission.EDIT_TASKS}),
}

# Roles that may only touch tasks assigned to them; default service lines when
# the member has no service_type of their own
LIMITED_ROLE_SERVICE_TYPES: dict[HouseholdRole, frozenset[ServiceType]] = {
    HouseholdRole.STAFF: frozenset({ServiceType.CLEANING}),
}


def has_permission(member: HouseholdMember | None, permission: Permission) -> bool:
    """Check whether a member's role grants a permission."""
    if member is None:
        return False
    return permission in ROLE_PERMISSIONS.get(member.role, frozenset())


def allowed_service_types(member: HouseholdMember) -> frozenset[ServiceType] | None:
    """Return the service lines a limited-role member may act on, or None if unrestricted."""
    defaults = LIMITED_ROLE_SERVICE_TYPES.get(member.role)
    if defaults is None:
        return None
    if member.service_type is not None:
        return frozenset({member.service_type})
    return defaults


def require_permission(member: HouseholdMember | None, permission: Permission) -> HouseholdMember:
    """Return the member if they hold the permission, else raise ForbiddenError."""
    if member is None:
        msg = "User is not a member of this household"
        raise ForbiddenError(msg)
    if not has_permission(member, permission):
        msg = f"Role {member.role} lacks permission {permission}"
        raise ForbiddenError(msg)
    return member


def authorize_task_action(member: HouseholdMember, task: Task) -> None:
    """Apply the task-level checks for limited roles.

    A limited role may only act on tasks assigned to the member, and only on
    tasks in the member's service line (or the role's default lines).

    Raises:
        ForbiddenError: If the member may not act on this task
    """
    service_types = allowed_service_types(member)
    if service_types is None:
        return

    if task.assigned_to != member.user_id:
        logger.warning("User %s denied on task %s: not the assignee", member.user_id, task.id)
        msg = "You can only act on tasks assigned to you"
        raise ForbiddenError(msg)

    if task.service_type not in service_types:
        logger.warning("User %s denied on task %s: service type %s", member.user_id, task.id, task.service_type)
        msg = f"Your role cannot act on {task.service_type} tasks"
        raise ForbiddenError(msg)
