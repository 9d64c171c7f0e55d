from tasktracker.models.category import DEFAULT_CATEGORY_COLOR, Category
from tasktracker.models.session import RefreshSession
from tasktracker.models.task import Task, TaskPriority, TaskStatus, task_shares
from tasktracker.models.user import User, UserRole

__all__ = [
    "Category",
    "DEFAULT_CATEGORY_COLOR",
    "RefreshSession",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
    "UserRole",
    "task_shares",
]
