"""
Task Models for TaskScope

Core Components:
- Task: persisted task record, immutable during a resolution pass
- TaskDraft: unsaved task carrying the effective default ids
- TaskGroup: named display bucket produced by the resolver
- ResolvedView: everything the task list needs for one navigation state
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskscope.workspace.navigation import ViewType


class Task(BaseModel):
    """
    Single task belonging to one workspace and one project.

    ``order`` ranks the task among siblings of the same project and is not
    globally unique. ``perspective_id`` None means the task has no perspective.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Task id")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Optional free-form description")
    completed: bool = Field(default=False, description="Completion flag")
    perspective_id: Optional[str] = Field(None, description="Perspective the task is filed under")
    project_id: Optional[str] = Field(None, description="Owning project")
    workspace_id: str = Field(..., description="Owning workspace")
    order: float = Field(default=0, description="Rank among sibling tasks")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=datetime.now, description="Last update timestamp")

    @field_validator("perspective_id", "project_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_project(self) -> bool:
        return bool(self.project_id)


class TaskDraft(BaseModel):
    """Unsaved task with defaults stamped from the navigation state"""

    title: str = Field(default="", description="Task title")
    description: Optional[str] = Field(None, description="Optional description")
    project_id: str = Field(default="", description="Target project")
    perspective_id: Optional[str] = Field(None, description="Target perspective")
    workspace_id: str = Field(default="", description="Target workspace")
    completed: bool = Field(default=False)


class TaskGroup(BaseModel):
    """Named bucket of tasks for display, never persisted"""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    tasks: Tuple[Task, ...] = Field(default_factory=tuple)

    @property
    def task_ids(self) -> Tuple[str, ...]:
        return tuple(task.id for task in self.tasks)


class GroupingMode(str, Enum):
    """Attribute used to split active tasks into groups"""
    PROJECT = "project"
    PERSPECTIVE = "perspective"
    NONE = "none"


class ResolvedView(BaseModel):
    """Result of resolving a task collection against a navigation state"""

    model_config = ConfigDict(frozen=True)

    view: ViewType
    filtered: Tuple[Task, ...] = Field(default_factory=tuple)
    groups: Tuple[TaskGroup, ...] = Field(default_factory=tuple)
    active_tasks: Tuple[Task, ...] = Field(default_factory=tuple)
    completed_tasks: Tuple[Task, ...] = Field(default_factory=tuple)
    grouping: GroupingMode = GroupingMode.NONE
    effective_perspective_id: Optional[str] = None
    view_title: str = "Tasks"
    project_names: Dict[str, str] = Field(default_factory=dict, description="Project id to display name")
    perspective_names: Dict[str, str] = Field(default_factory=dict, description="Perspective id to display name")

    @property
    def active_count(self) -> int:
        return len(self.active_tasks)

    @property
    def completed_count(self) -> int:
        return len(self.completed_tasks)

    @property
    def is_empty(self) -> bool:
        return not self.filtered

    @property
    def has_completed(self) -> bool:
        return bool(self.completed_tasks)

    @property
    def show_project_badge(self) -> bool:
        # Redundant when grouped by project or scoped to a single project
        return self.grouping != GroupingMode.PROJECT and self.view != ViewType.PROJECT

    @property
    def show_perspective_badge(self) -> bool:
        return self.grouping != GroupingMode.PERSPECTIVE and self.view != ViewType.PERSPECTIVE

    def task_project_name(self, task: Task) -> str:
        """Badge label for a task's project; unknown ids show as-is"""
        if not task.project_id:
            return ""
        return self.project_names.get(task.project_id) or task.project_id

    def task_perspective_name(self, task: Task) -> str:
        """Badge label for a task's perspective; unknown ids show nothing"""
        if not task.perspective_id:
            return ""
        return self.perspective_names.get(task.perspective_id, "")
