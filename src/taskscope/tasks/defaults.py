"""
Defaults for new tasks.

Task creation needs a target project and perspective even when the
navigation state does not pin one. These helpers compute the effective ids
from the navigation state and the workspace configuration. A workspace
without projects cannot receive tasks, so that case raises instead of
degrading.
"""

from typing import List, Optional

from taskscope.core.exceptions import NoDefaultPerspectiveError, NoDefaultProjectError
from taskscope.tasks.models import TaskDraft
from taskscope.workspace.models import WorkspaceConfig
from taskscope.workspace.navigation import NavigationState, ViewType

DEFAULT_FALLBACK_PERSPECTIVE_ID = "inbox"


def effective_project_id(nav: NavigationState, workspace: WorkspaceConfig) -> str:
    """
    Project a new task should be filed under.

    Raises:
        NoDefaultProjectError: If the workspace has no projects
    """
    if nav.view == ViewType.PROJECT and nav.project_id:
        return nav.project_id

    default = workspace.default_project()
    if default is None:
        raise NoDefaultProjectError(workspace_id=workspace.id)
    return default.id


def effective_perspective_id(
    nav: NavigationState,
    workspace: WorkspaceConfig,
    fallback: Optional[str] = DEFAULT_FALLBACK_PERSPECTIVE_ID,
) -> str:
    """
    Perspective a new task should be filed under.

    Args:
        nav: Current navigation state
        workspace: Workspace configuration snapshot
        fallback: Id used when the workspace has no perspectives; None
            raises instead

    Raises:
        NoDefaultPerspectiveError: If the workspace has no perspectives and
            no fallback is given
    """
    if nav.view == ViewType.PERSPECTIVE and nav.perspective_id:
        return nav.perspective_id

    default = workspace.default_perspective()
    if default is not None:
        return default.id
    if fallback is None:
        raise NoDefaultPerspectiveError(workspace_id=workspace.id)
    return fallback


def new_task_draft(
    nav: NavigationState,
    workspace: WorkspaceConfig,
    title: str = "",
    description: Optional[str] = None,
    fallback: Optional[str] = DEFAULT_FALLBACK_PERSPECTIVE_ID,
) -> TaskDraft:
    """Draft of a new task with the effective ids stamped on it"""
    return TaskDraft(
        title=title,
        description=description,
        project_id=effective_project_id(nav, workspace),
        perspective_id=effective_perspective_id(nav, workspace, fallback),
        workspace_id=workspace.id,
    )


def validate_draft(draft: TaskDraft) -> List[str]:
    """Return the list of problems preventing the draft from being saved"""
    errors: List[str] = []

    if not draft.title or not draft.title.strip():
        errors.append("Task title is required")
    if not draft.workspace_id:
        errors.append("Workspace ID is required")
    if not draft.project_id:
        errors.append("Project ID is required")

    return errors
