"""
Persistence port, request types and the SQLite-backed store.
"""

from .interfaces import WorkspaceAPI, WorkspaceScopedAPI
from .requests import (
    ClearField,
    CreatePerspectiveRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    CreateWorkspaceRequest,
    FieldUpdate,
    GlobalTaskFilter,
    SetField,
    SortDirection,
    SortSpec,
    TaskFilter,
    TaskQuery,
    UpdatePerspectiveRequest,
    UpdateProjectRequest,
    UpdateTaskRequest,
    UpdateWorkspaceRequest,
    clear_field,
    field_value,
    set_field,
    should_update_field,
)
from .repository import SqlWorkspaceScope, SqlWorkspaceStore
from .seed import seed_default_workspaces, seed_if_empty

__all__ = [
    "WorkspaceAPI",
    "WorkspaceScopedAPI",
    "ClearField",
    "CreatePerspectiveRequest",
    "CreateProjectRequest",
    "CreateTaskRequest",
    "CreateWorkspaceRequest",
    "FieldUpdate",
    "GlobalTaskFilter",
    "SetField",
    "SortDirection",
    "SortSpec",
    "TaskFilter",
    "TaskQuery",
    "UpdatePerspectiveRequest",
    "UpdateProjectRequest",
    "UpdateTaskRequest",
    "UpdateWorkspaceRequest",
    "clear_field",
    "field_value",
    "set_field",
    "should_update_field",
    "SqlWorkspaceScope",
    "SqlWorkspaceStore",
    "seed_default_workspaces",
    "seed_if_empty",
]
