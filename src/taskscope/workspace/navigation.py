"""
Navigation state and its query-parameter representation.

A navigation state selects what the task list shows: one perspective, one
project, all projects, or every task. Only the id matching the view is
meaningful; the other one is ignored by the resolver.
"""

from enum import Enum
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from taskscope.workspace.models import WorkspaceConfig


class ViewType(str, Enum):
    """Task list view modes"""
    PERSPECTIVE = "perspective"
    PROJECT = "project"
    PROJECT_ALL = "project-all"
    ALL = "all"


class NavigationState(BaseModel):
    """Current view selector"""

    model_config = ConfigDict(frozen=True)

    view: ViewType = Field(default=ViewType.PERSPECTIVE, description="Selected view mode")
    perspective_id: Optional[str] = Field(None, description="Selected perspective (perspective view)")
    project_id: Optional[str] = Field(None, description="Selected project (project view)")


class NavigationParams(BaseModel):
    """Raw navigation parameters as read from a URL query"""

    workspace: Optional[str] = None
    view: Optional[str] = None
    perspective: Optional[str] = None
    project: Optional[str] = None


def is_valid_view(view: Optional[str]) -> bool:
    """Check whether a raw string names a known view"""
    return view is not None and view in {v.value for v in ViewType}


def parse_navigation_params(params: Mapping[str, str]) -> NavigationParams:
    """Extract navigation parameters from a query mapping"""
    return NavigationParams(
        workspace=params.get("workspace") or None,
        view=params.get("view") or None,
        perspective=params.get("perspective") or None,
        project=params.get("project") or None,
    )


def _default_perspective_state(workspace: WorkspaceConfig) -> NavigationState:
    default = workspace.default_perspective()
    return NavigationState(
        view=ViewType.PERSPECTIVE,
        perspective_id=default.id if default else None,
    )


def initialize_navigation(params: NavigationParams, workspace: WorkspaceConfig) -> NavigationState:
    """
    Build a navigation state from raw parameters.

    Unknown perspective ids fall back to the default perspective; an unknown
    project id falls back to the default perspective view; a missing or
    invalid view opens the default perspective.
    """
    if not is_valid_view(params.view):
        return _default_perspective_state(workspace)

    view = ViewType(params.view)

    if view == ViewType.PERSPECTIVE:
        if workspace.has_perspective(params.perspective):
            return NavigationState(view=view, perspective_id=params.perspective)
        return _default_perspective_state(workspace)

    if view == ViewType.PROJECT:
        if workspace.has_project(params.project):
            return NavigationState(view=view, project_id=params.project)
        return _default_perspective_state(workspace)

    return NavigationState(view=view)


def navigation_query(nav: NavigationState, workspace_id: Optional[str] = None) -> Dict[str, str]:
    """Query parameters describing a navigation state"""
    query: Dict[str, str] = {}
    if workspace_id:
        query["workspace"] = workspace_id

    query["view"] = nav.view.value

    if nav.view == ViewType.PERSPECTIVE and nav.perspective_id:
        query["perspective"] = nav.perspective_id
    if nav.view == ViewType.PROJECT and nav.project_id:
        query["project"] = nav.project_id

    return query


def navigation_for_workspace_change(
    current: NavigationState,
    workspace: WorkspaceConfig,
) -> NavigationState:
    """
    Navigation to use after switching to another workspace.

    Projects are workspace-specific, so project views reset to the default
    perspective. A perspective view keeps its id when the new workspace has
    that perspective.
    """
    if current.view in (ViewType.PROJECT, ViewType.PROJECT_ALL):
        return _default_perspective_state(workspace)

    if current.view == ViewType.PERSPECTIVE:
        if workspace.has_perspective(current.perspective_id):
            return NavigationState(view=current.view, perspective_id=current.perspective_id)
        return _default_perspective_state(workspace)

    return NavigationState(view=current.view)
