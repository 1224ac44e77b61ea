"""
Tests for new-task defaults and draft validation.
"""

import pytest

from taskscope.core.exceptions import NoDefaultPerspectiveError, NoDefaultProjectError, ResolutionError
from taskscope.tasks.defaults import (
    effective_perspective_id,
    effective_project_id,
    new_task_draft,
    validate_draft,
)
from taskscope.tasks.models import TaskDraft
from taskscope.workspace.models import WorkspaceConfig
from taskscope.workspace.navigation import NavigationState, ViewType

from conftest import make_perspective, make_project


class TestEffectiveProject:

    def test_project_view_uses_selected_project(self, rich_workspace):
        state = NavigationState(view=ViewType.PROJECT, project_id="p2")
        assert effective_project_id(state, rich_workspace) == "p2"

    def test_other_views_use_default_project(self, rich_workspace):
        for view in (ViewType.PERSPECTIVE, ViewType.ALL, ViewType.PROJECT_ALL):
            assert effective_project_id(NavigationState(view=view, project_id="p2"), rich_workspace) == "p1"

    def test_project_view_without_id_uses_default(self, rich_workspace):
        assert effective_project_id(NavigationState(view=ViewType.PROJECT), rich_workspace) == "p1"

    def test_no_projects_raises(self, empty_workspace):
        with pytest.raises(NoDefaultProjectError) as exc_info:
            effective_project_id(NavigationState(view=ViewType.PROJECT), empty_workspace)

        assert isinstance(exc_info.value, ResolutionError)
        assert exc_info.value.error_code == "NO_DEFAULT_PROJECT"
        assert "Create a project before adding tasks" in str(exc_info.value)


class TestEffectivePerspective:

    def test_perspective_view_uses_selected_perspective(self, rich_workspace):
        state = NavigationState(view=ViewType.PERSPECTIVE, perspective_id="someday")
        assert effective_perspective_id(state, rich_workspace) == "someday"

    def test_default_is_first_perspective_by_order(self):
        workspace = WorkspaceConfig(id="w1", perspectives=(make_perspective("next", 1),))
        assert effective_perspective_id(NavigationState(view=ViewType.ALL), workspace) == "next"

    def test_fallback_when_workspace_has_no_perspectives(self, empty_workspace):
        state = NavigationState(view=ViewType.ALL)
        assert effective_perspective_id(state, empty_workspace) == "inbox"
        assert effective_perspective_id(state, empty_workspace, fallback="triage") == "triage"

    def test_strict_mode_raises(self, empty_workspace):
        with pytest.raises(NoDefaultPerspectiveError):
            effective_perspective_id(NavigationState(view=ViewType.ALL), empty_workspace, fallback=None)


class TestDrafts:

    def test_new_task_draft_stamps_effective_ids(self, rich_workspace):
        state = NavigationState(view=ViewType.PROJECT, project_id="p2")

        draft = new_task_draft(state, rich_workspace, title="Write tests")

        assert draft.project_id == "p2"
        assert draft.perspective_id == "inbox"
        assert draft.workspace_id == "w1"
        assert draft.completed is False
        assert validate_draft(draft) == []

    def test_new_task_draft_without_projects_raises(self):
        workspace = WorkspaceConfig(id="w1", perspectives=(make_perspective("inbox", 0),))
        with pytest.raises(NoDefaultProjectError):
            new_task_draft(NavigationState(), workspace, title="x")

    def test_validate_draft_reports_every_problem(self):
        errors = validate_draft(TaskDraft(title="   "))
        assert errors == [
            "Task title is required",
            "Workspace ID is required",
            "Project ID is required",
        ]

    def test_validate_draft_accepts_complete_draft(self):
        workspace = WorkspaceConfig(id="w1", projects=(make_project("p1", 0),))
        draft = new_task_draft(NavigationState(view=ViewType.ALL), workspace, title="Ship it")
        assert validate_draft(draft) == []
        assert draft.perspective_id == "inbox"
