"""
Task models, ordering, view resolution, defaults and the task service.
"""

from .models import GroupingMode, ResolvedView, Task, TaskDraft, TaskGroup
from .ordering import (
    UNRANKED,
    compare_by_perspective_then_order,
    compare_by_project_then_order,
    perspective_rank,
    project_rank,
    sort_by_order,
    sort_by_perspective_then_order,
    sort_by_project_then_order,
)
from .resolver import resolve
from .defaults import effective_perspective_id, effective_project_id, new_task_draft, validate_draft
from .retry import RetryHandler
from .service import TaskService

__all__ = [
    "GroupingMode",
    "ResolvedView",
    "Task",
    "TaskDraft",
    "TaskGroup",
    "UNRANKED",
    "compare_by_perspective_then_order",
    "compare_by_project_then_order",
    "perspective_rank",
    "project_rank",
    "sort_by_order",
    "sort_by_perspective_then_order",
    "sort_by_project_then_order",
    "resolve",
    "effective_perspective_id",
    "effective_project_id",
    "new_task_draft",
    "validate_draft",
    "RetryHandler",
    "TaskService",
]
