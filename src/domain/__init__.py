"""Domain models and DTOs."""

from src.domain.create_models import HouseholdCreate, ImportantDateCreate, MemberCreate, TaskCreate
from src.domain.household import Household, HouseholdMember, HouseholdRole
from src.domain.important_date import ImportantDate, ImportantDateType
from src.domain.task import Recurrence, ServiceType, Task, TaskCategory, TaskStatus, Urgency
from src.domain.update_models import RecurrenceGroupUpdate, TaskCancellationUpdate, TaskStatusUpdate


__all__ = [
    "Household",
    "HouseholdCreate",
    "HouseholdMember",
    "HouseholdRole",
    "ImportantDate",
    "ImportantDateCreate",
    "ImportantDateType",
    "MemberCreate",
    "Recurrence",
    "RecurrenceGroupUpdate",
    "ServiceType",
    "Task",
    "TaskCancellationUpdate",
    "TaskCategory",
    "TaskCreate",
    "TaskStatus",
    "TaskStatusUpdate",
    "Urgency",
]
