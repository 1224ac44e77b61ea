"""
Task view resolution.

Given the tasks of one workspace, its configuration and a navigation state,
``resolve`` computes the filtered task set, splits the active part of it into
display groups and separates completed tasks. The functions here are pure:
they never perform I/O, never mutate their inputs and never raise for
unknown ids. A stale perspective or project id simply matches nothing, ranks
last, or is shown under its raw id.
"""

from typing import Dict, List, Optional, Sequence

from taskscope.tasks.models import GroupingMode, ResolvedView, Task, TaskGroup
from taskscope.tasks.ordering import (
    project_rank,
    sort_by_order,
    sort_by_perspective_then_order,
    sort_by_project_then_order,
)
from taskscope.workspace.models import WorkspaceConfig
from taskscope.workspace.navigation import NavigationState, ViewType

ACTIONS_GROUP_ID = "actions"
ACTIONS_GROUP_TITLE = "Actions"
FLAT_GROUP_ID = "all"
FLAT_GROUP_TITLE = "Tasks"

_VIEW_GROUPING = {
    ViewType.PERSPECTIVE: GroupingMode.PROJECT,
    ViewType.ALL: GroupingMode.PROJECT,
    ViewType.PROJECT: GroupingMode.PERSPECTIVE,
    ViewType.PROJECT_ALL: GroupingMode.PERSPECTIVE,
}


# ============================================================================
# FILTERING
# ============================================================================

def effective_view_perspective_id(workspace: WorkspaceConfig, nav: NavigationState) -> Optional[str]:
    """Perspective shown by a perspective view: the requested one if known, else the default"""
    if workspace.has_perspective(nav.perspective_id):
        return nav.perspective_id
    default = workspace.default_perspective()
    return default.id if default else None


def filter_tasks(tasks: Sequence[Task], workspace: WorkspaceConfig, nav: NavigationState) -> List[Task]:
    """Tasks visible in the navigation state's view, in input order"""
    if nav.view == ViewType.PERSPECTIVE:
        perspective_id = effective_view_perspective_id(workspace, nav)
        if perspective_id is None:
            return []
        return [
            task for task in tasks
            if task.perspective_id == perspective_id and not task.completed
        ]

    if nav.view == ViewType.PROJECT:
        if not nav.project_id:
            return list(tasks)
        return [task for task in tasks if task.project_id == nav.project_id]

    if nav.view == ViewType.PROJECT_ALL:
        return [task for task in tasks if task.has_project]

    return list(tasks)


# ============================================================================
# GROUPING
# ============================================================================

def grouping_for_view(view: ViewType) -> GroupingMode:
    return _VIEW_GROUPING.get(view, GroupingMode.NONE)


def group_by_project(tasks: Sequence[Task], workspace: WorkspaceConfig) -> List[TaskGroup]:
    """
    Split active tasks by project.

    Tasks without a project lead in a synthetic "Actions" group. Project groups
    follow the workspace project order; projects missing from the workspace
    come last in order of first appearance and are titled with their raw id.
    """
    active = [task for task in tasks if not task.completed]
    groups: List[TaskGroup] = []

    unassigned = [task for task in active if not task.has_project]
    if unassigned:
        groups.append(TaskGroup(
            id=ACTIONS_GROUP_ID,
            title=ACTIONS_GROUP_TITLE,
            tasks=tuple(sort_by_perspective_then_order(unassigned, workspace.perspectives)),
        ))

    by_project: Dict[str, List[Task]] = {}
    for task in active:
        if task.has_project:
            by_project.setdefault(task.project_id, []).append(task)

    # dicts keep insertion order, so unknown projects stay in first-seen order
    project_ids = sorted(by_project, key=lambda pid: project_rank(pid, workspace.projects))

    for project_id in project_ids:
        project = workspace.find_project(project_id)
        groups.append(TaskGroup(
            id=f"project-{project_id}",
            title=project.name if project else project_id,
            tasks=tuple(sort_by_perspective_then_order(by_project[project_id], workspace.perspectives)),
        ))

    return groups


def group_by_perspective(
    tasks: Sequence[Task],
    workspace: WorkspaceConfig,
    scoped_to_project: bool = True,
) -> List[TaskGroup]:
    """
    Split active tasks by perspective, in workspace perspective order.

    Tasks without a perspective land in the default perspective's group.
    Tasks whose perspective is unknown to the workspace are left out.
    Within a single project tasks sort by their own order; across projects
    they sort by project rank first.
    """
    active = [task for task in tasks if not task.completed]
    default = workspace.default_perspective()

    buckets: Dict[str, List[Task]] = {p.id: [] for p in workspace.perspectives}
    for task in active:
        perspective_id = task.perspective_id or (default.id if default else None)
        if perspective_id in buckets:
            buckets[perspective_id].append(task)

    groups: List[TaskGroup] = []
    for perspective in workspace.perspectives:
        bucket = buckets[perspective.id]
        if not bucket:
            continue
        if scoped_to_project:
            ordered = sort_by_order(bucket)
        else:
            ordered = sort_by_project_then_order(bucket, workspace.projects)
        groups.append(TaskGroup(
            id=f"perspective-{perspective.id}",
            title=perspective.name,
            tasks=tuple(ordered),
        ))

    return groups


def group_flat(tasks: Sequence[Task]) -> List[TaskGroup]:
    """Single "Tasks" group of every active task, omitted when empty"""
    active = [task for task in tasks if not task.completed]
    if not active:
        return []
    return [TaskGroup(id=FLAT_GROUP_ID, title=FLAT_GROUP_TITLE, tasks=tuple(sort_by_order(active)))]


def build_groups(
    tasks: Sequence[Task],
    workspace: WorkspaceConfig,
    nav: NavigationState,
    grouping: Optional[GroupingMode] = None,
) -> List[TaskGroup]:
    grouping = grouping or grouping_for_view(nav.view)

    if grouping == GroupingMode.PROJECT:
        return group_by_project(tasks, workspace)
    if grouping == GroupingMode.PERSPECTIVE:
        return group_by_perspective(
            tasks,
            workspace,
            scoped_to_project=nav.view != ViewType.PROJECT_ALL,
        )
    return group_flat(tasks)


# ============================================================================
# RESOLUTION
# ============================================================================

def view_title(workspace: WorkspaceConfig, nav: NavigationState) -> str:
    if nav.view == ViewType.ALL:
        return "All"
    if nav.view == ViewType.PROJECT_ALL:
        return "All Projects"
    if nav.view == ViewType.PROJECT:
        project = workspace.find_project(nav.project_id)
        return project.name if project else "Project"
    perspective = workspace.find_perspective(effective_view_perspective_id(workspace, nav))
    return perspective.name if perspective else "Tasks"


def resolve(
    tasks: Sequence[Task],
    workspace: WorkspaceConfig,
    nav: NavigationState,
    grouping: Optional[GroupingMode] = None,
) -> ResolvedView:
    """
    Resolve a workspace's tasks for one navigation state.

    Args:
        tasks: All tasks of the workspace
        workspace: Workspace configuration snapshot
        nav: Current navigation state
        grouping: Override for the grouping implied by the view

    Returns:
        ResolvedView with filtered tasks, display groups and the
        active/completed split
    """
    filtered = filter_tasks(tasks, workspace, nav)
    grouping = grouping or grouping_for_view(nav.view)

    effective_perspective = None
    if nav.view == ViewType.PERSPECTIVE:
        effective_perspective = effective_view_perspective_id(workspace, nav)

    return ResolvedView(
        view=nav.view,
        filtered=tuple(filtered),
        groups=tuple(build_groups(filtered, workspace, nav, grouping)),
        active_tasks=tuple(task for task in filtered if not task.completed),
        completed_tasks=tuple(task for task in filtered if task.completed),
        grouping=grouping,
        effective_perspective_id=effective_perspective,
        view_title=view_title(workspace, nav),
        project_names={project.id: project.name for project in workspace.projects},
        perspective_names={perspective.id: perspective.name for perspective in workspace.perspectives},
    )
