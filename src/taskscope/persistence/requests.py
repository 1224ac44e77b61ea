"""
Request types for persistence mutations and queries.

Partial updates follow one convention: a field left as None is absent and
keeps its stored value. Optional text fields that must be clearable take a
FieldUpdate, a tagged union of SetField (store this value) and ClearField
(store nothing), so "leave unchanged" and "clear" stay distinguishable.
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# FIELD UPDATES
# ============================================================================

class SetField(BaseModel):
    """Replace the stored value"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["set"] = "set"
    value: str


class ClearField(BaseModel):
    """Remove the stored value"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["clear"] = "clear"


FieldUpdate = Union[SetField, ClearField]


def set_field(value: str) -> SetField:
    return SetField(value=value)


def clear_field() -> ClearField:
    return ClearField()


def should_update_field(update: Optional[FieldUpdate]) -> bool:
    """True when the request carries an update for the field"""
    return update is not None


def field_value(update: Optional[FieldUpdate]) -> Optional[str]:
    """Value to store for an update; None for a clear or an absent update"""
    if isinstance(update, SetField):
        return update.value
    return None


def _wrap_plain_value(v):
    # Plain strings are shorthand for SetField
    if isinstance(v, str):
        return SetField(value=v)
    return v


# ============================================================================
# WORKSPACE / PERSPECTIVE / PROJECT REQUESTS
# ============================================================================

class CreateWorkspaceRequest(BaseModel):
    id: Optional[str] = Field(None, description="Explicit id; generated when omitted")
    name: str = Field(..., min_length=1)


class UpdateWorkspaceRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)


class CreatePerspectiveRequest(BaseModel):
    id: Optional[str] = Field(None, description="Explicit id such as 'inbox'; generated when omitted")
    name: str = Field(..., min_length=1)
    icon: str = Field(default="inbox")
    order: Optional[int] = Field(None, description="Rank; appended after the last perspective when omitted")


class UpdatePerspectiveRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    icon: Optional[str] = None
    order: Optional[int] = None


class CreateProjectRequest(BaseModel):
    id: Optional[str] = Field(None, description="Explicit id; generated when omitted")
    name: str = Field(..., min_length=1)
    icon: Optional[str] = None
    order: Optional[int] = Field(None, description="Rank; appended after the last project when omitted")


class UpdateProjectRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    icon: Optional[FieldUpdate] = None
    order: Optional[int] = None

    @field_validator("icon", mode="before")
    @classmethod
    def wrap_plain_value(cls, v):
        return _wrap_plain_value(v)


# ============================================================================
# TASK REQUESTS
# ============================================================================

class CreateTaskRequest(BaseModel):
    """New task; the store assigns id, order and timestamps"""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    project_id: str = Field(..., min_length=1)
    perspective_id: Optional[str] = None


class UpdateTaskRequest(BaseModel):
    """Partial task update"""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[FieldUpdate] = None
    project_id: Optional[str] = Field(None, min_length=1)
    perspective_id: Optional[FieldUpdate] = None
    completed: Optional[bool] = None
    order: Optional[float] = None

    @field_validator("description", "perspective_id", mode="before")
    @classmethod
    def wrap_plain_value(cls, v):
        return _wrap_plain_value(v)

    def is_empty(self) -> bool:
        return all(value is None for value in self.__dict__.values())


# ============================================================================
# QUERIES
# ============================================================================

SORTABLE_TASK_FIELDS = frozenset({"order", "title", "created_at", "updated_at", "completed"})


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortSpec(BaseModel):
    field: str
    direction: SortDirection = SortDirection.ASC

    @field_validator("field")
    @classmethod
    def validate_sortable(cls, v: str) -> str:
        if v not in SORTABLE_TASK_FIELDS:
            raise ValueError(f"Cannot sort tasks by '{v}'")
        return v


class TaskFilter(BaseModel):
    """Workspace-scoped task filter; the workspace is implied by the API"""

    model_config = ConfigDict(extra="forbid")

    project_id: Optional[str] = None
    perspective_id: Optional[str] = None
    completed: Optional[bool] = None
    search: Optional[str] = Field(None, description="Case-insensitive match on title or description")


class GlobalTaskFilter(TaskFilter):
    """Filter for listing tasks across every workspace"""

    workspace_id: Optional[str] = None


class TaskQuery(BaseModel):
    """Filter/sort/pagination envelope for task listings"""

    filter: Optional[Union[GlobalTaskFilter, TaskFilter]] = None
    sort: List[SortSpec] = Field(default_factory=list)
    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: Optional[int] = Field(None, ge=1, le=1000, description="Page size; no pagination when omitted")

    @property
    def offset(self) -> int:
        if self.page_size is None:
            return 0
        return (self.page - 1) * self.page_size
