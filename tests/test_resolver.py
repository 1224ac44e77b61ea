"""
Tests for task view resolution: filtering, grouping, titles and badges.
"""

import pytest

from taskscope.tasks.models import GroupingMode
from taskscope.tasks.resolver import (
    ACTIONS_GROUP_ID,
    build_groups,
    effective_view_perspective_id,
    filter_tasks,
    group_by_perspective,
    group_by_project,
    group_flat,
    grouping_for_view,
    resolve,
    view_title,
)
from taskscope.workspace.models import WorkspaceConfig
from taskscope.workspace.navigation import NavigationState, ViewType

from conftest import make_perspective, make_project, make_task


def nav(view: ViewType, perspective_id=None, project_id=None) -> NavigationState:
    return NavigationState(view=view, perspective_id=perspective_id, project_id=project_id)


class TestScenarios:

    def test_perspective_view_keeps_matching_active_tasks(self, workspace):
        t1 = make_task("t1", perspective_id="inbox")
        t2 = make_task("t2", perspective_id="next")

        view = resolve([t1, t2], workspace, nav(ViewType.PERSPECTIVE, perspective_id="inbox"))

        assert list(view.filtered) == [t1]
        assert view.effective_perspective_id == "inbox"
        assert view.view_title == "Inbox"

    def test_all_view_groups_by_project(self, workspace):
        t1 = make_task("t1", perspective_id="inbox")
        t2 = make_task("t2", perspective_id="next")

        view = resolve([t1, t2], workspace, nav(ViewType.ALL))

        assert list(view.filtered) == [t1, t2]
        assert len(view.groups) == 1
        assert view.groups[0].id == "project-p1"
        assert view.groups[0].title == "Project One"
        assert view.groups[0].task_ids == ("t1", "t2")

    def test_unknown_project_degrades_to_raw_id(self, workspace):
        stale = make_task("t1", project_id="deleted-project")

        view = resolve([stale], workspace, nav(ViewType.PROJECT_ALL))
        assert list(view.filtered) == [stale]

        groups = group_by_project([stale], workspace)
        assert [(g.id, g.title) for g in groups] == [("project-deleted-project", "deleted-project")]


class TestFiltering:

    def test_perspective_view_drops_completed(self, workspace):
        done = make_task("done", perspective_id="inbox", completed=True)
        open_ = make_task("open", perspective_id="inbox")

        filtered = filter_tasks([done, open_], workspace, nav(ViewType.PERSPECTIVE, perspective_id="inbox"))

        assert filtered == [open_]

    def test_unknown_perspective_uses_default(self, workspace):
        t1 = make_task("t1", perspective_id="inbox")
        t2 = make_task("t2", perspective_id="next")

        view = resolve([t1, t2], workspace, nav(ViewType.PERSPECTIVE, perspective_id="ghost"))

        assert view.effective_perspective_id == "inbox"
        assert list(view.filtered) == [t1]

    def test_missing_perspective_id_uses_default(self, workspace):
        assert effective_view_perspective_id(workspace, nav(ViewType.PERSPECTIVE)) == "inbox"

    def test_no_perspectives_yields_empty_view(self):
        bare = WorkspaceConfig(id="w1", projects=(make_project("p1", 0),))
        tasks = [make_task("t1", perspective_id="inbox")]

        view = resolve(tasks, bare, nav(ViewType.PERSPECTIVE, perspective_id="inbox"))

        assert view.effective_perspective_id is None
        assert view.is_empty
        assert view.groups == ()
        assert view.view_title == "Tasks"

    def test_tasks_without_perspective_never_match_perspective_view(self, workspace):
        loose = make_task("loose", perspective_id=None)
        filtered = filter_tasks([loose], workspace, nav(ViewType.PERSPECTIVE, perspective_id="inbox"))
        assert filtered == []

    def test_project_view_keeps_completed_tasks(self, workspace):
        tasks = [
            make_task("a", project_id="p1"),
            make_task("b", project_id="p1", completed=True),
            make_task("c", project_id="p2"),
        ]

        filtered = filter_tasks(tasks, workspace, nav(ViewType.PROJECT, project_id="p1"))

        assert [t.id for t in filtered] == ["a", "b"]

    def test_project_view_without_project_id_is_unfiltered(self, workspace):
        tasks = [make_task("a", project_id="p1"), make_task("b", project_id=None)]
        assert filter_tasks(tasks, workspace, nav(ViewType.PROJECT)) == tasks

    def test_project_all_requires_a_project(self, workspace):
        tasks = [
            make_task("a", project_id="p1"),
            make_task("b", project_id=None),
            make_task("c", project_id="elsewhere", completed=True),
        ]

        filtered = filter_tasks(tasks, workspace, nav(ViewType.PROJECT_ALL))

        assert [t.id for t in filtered] == ["a", "c"]

    def test_all_view_keeps_every_task(self, workspace):
        tasks = [
            make_task("a"),
            make_task("b", completed=True),
            make_task("c", project_id=None, perspective_id=None),
            make_task("d", project_id="stale", perspective_id="stale"),
        ]

        view = resolve(tasks, workspace, nav(ViewType.ALL))

        assert len(view.filtered) == len(tasks)
        assert list(view.filtered) == tasks


class TestGrouping:

    def test_grouping_for_view(self):
        assert grouping_for_view(ViewType.PERSPECTIVE) == GroupingMode.PROJECT
        assert grouping_for_view(ViewType.ALL) == GroupingMode.PROJECT
        assert grouping_for_view(ViewType.PROJECT) == GroupingMode.PERSPECTIVE
        assert grouping_for_view(ViewType.PROJECT_ALL) == GroupingMode.PERSPECTIVE

    def test_actions_group_leads_project_grouping(self, rich_workspace):
        tasks = [
            make_task("in-p2", project_id="p2"),
            make_task("loose-next", project_id=None, perspective_id="next"),
            make_task("in-p1", project_id="p1"),
            make_task("loose-inbox", project_id=None, perspective_id="inbox"),
        ]

        groups = group_by_project(tasks, rich_workspace)

        assert [g.id for g in groups] == [ACTIONS_GROUP_ID, "project-p1", "project-p2"]
        assert groups[0].title == "Actions"
        assert groups[0].task_ids == ("loose-inbox", "loose-next")

    def test_no_actions_group_when_every_task_has_a_project(self, workspace):
        groups = group_by_project([make_task("a")], workspace)
        assert [g.id for g in groups] == ["project-p1"]

    def test_unknown_projects_follow_known_ones_in_first_seen_order(self, rich_workspace):
        tasks = [
            make_task("z", project_id="zeta"),
            make_task("b", project_id="p2"),
            make_task("a", project_id="alpha"),
            make_task("c", project_id="p1"),
        ]

        groups = group_by_project(tasks, rich_workspace)

        assert [g.id for g in groups] == ["project-p1", "project-p2", "project-zeta", "project-alpha"]

    def test_project_groups_sort_by_perspective_then_order(self, rich_workspace):
        tasks = [
            make_task("someday", perspective_id="someday", order=0),
            make_task("inbox-2", perspective_id="inbox", order=2),
            make_task("inbox-1", perspective_id="inbox", order=1),
        ]

        groups = group_by_project(tasks, rich_workspace)

        assert groups[0].task_ids == ("inbox-1", "inbox-2", "someday")

    def test_project_grouping_covers_active_tasks_exactly_once(self, rich_workspace):
        tasks = [
            make_task("a", project_id="p1"),
            make_task("b", project_id=None),
            make_task("c", project_id="p2", completed=True),
            make_task("d", project_id="unknown"),
            make_task("e", project_id="p2", perspective_id=None),
        ]

        view = resolve(tasks, rich_workspace, nav(ViewType.ALL))
        grouped = [t.id for g in view.groups for t in g.tasks]

        assert sorted(grouped) == sorted(t.id for t in view.active_tasks)
        assert len(grouped) == len(set(grouped))
        assert "c" not in grouped

    def test_perspective_grouping_follows_perspective_order(self, rich_workspace):
        tasks = [
            make_task("s", perspective_id="someday"),
            make_task("n", perspective_id="next"),
            make_task("i", perspective_id="inbox"),
        ]

        groups = group_by_perspective(tasks, rich_workspace)

        assert [g.id for g in groups] == ["perspective-inbox", "perspective-next", "perspective-someday"]
        assert [g.title for g in groups] == ["Inbox", "Next", "Someday"]

    def test_tasks_without_perspective_join_default_group(self, rich_workspace):
        tasks = [
            make_task("i", perspective_id="inbox", order=2),
            make_task("none", perspective_id=None, order=1),
        ]

        groups = group_by_perspective(tasks, rich_workspace)

        assert len(groups) == 1
        assert groups[0].task_ids == ("none", "i")

    def test_unknown_perspective_tasks_are_left_out_of_groups(self, rich_workspace):
        tasks = [make_task("ghost", perspective_id="ghost"), make_task("n", perspective_id="next")]

        view = resolve(tasks, rich_workspace, nav(ViewType.PROJECT, project_id="p1"))

        assert [t.id for t in view.filtered] == ["ghost", "n"]
        assert [g.id for g in view.groups] == ["perspective-next"]

    def test_aggregate_perspective_groups_sort_by_project_first(self, rich_workspace):
        tasks = [
            make_task("p2-first", project_id="p2", order=0),
            make_task("p1-late", project_id="p1", order=5),
        ]

        aggregate = build_groups(tasks, rich_workspace, nav(ViewType.PROJECT_ALL))
        scoped = build_groups(tasks, rich_workspace, nav(ViewType.PROJECT))

        assert aggregate[0].task_ids == ("p1-late", "p2-first")
        assert scoped[0].task_ids == ("p2-first", "p1-late")

    def test_flat_grouping(self, workspace):
        tasks = [make_task("b", order=2), make_task("a", order=1), make_task("done", completed=True)]

        groups = group_flat(tasks)

        assert len(groups) == 1
        assert (groups[0].id, groups[0].title) == ("all", "Tasks")
        assert groups[0].task_ids == ("a", "b")
        assert group_flat([make_task("x", completed=True)]) == []

    def test_explicit_grouping_override(self, workspace):
        tasks = [make_task("a", order=1)]

        view = resolve(tasks, workspace, nav(ViewType.ALL), grouping=GroupingMode.NONE)

        assert view.grouping == GroupingMode.NONE
        assert [g.id for g in view.groups] == ["all"]

    def test_empty_project_groups_are_not_emitted(self, rich_workspace):
        groups = group_by_project([make_task("a", project_id="p2")], rich_workspace)
        assert [g.id for g in groups] == ["project-p2"]


class TestResolvedView:

    def test_active_and_completed_split(self, workspace):
        tasks = [
            make_task("a", project_id="p1"),
            make_task("b", project_id="p1", completed=True),
        ]

        view = resolve(tasks, workspace, nav(ViewType.PROJECT, project_id="p1"))

        assert [t.id for t in view.active_tasks] == ["a"]
        assert [t.id for t in view.completed_tasks] == ["b"]
        assert view.active_count == 1
        assert view.completed_count == 1
        assert view.has_completed
        assert all(not t.completed for g in view.groups for t in g.tasks)

    def test_resolve_is_idempotent(self, rich_workspace):
        tasks = [
            make_task("a", project_id="p2", perspective_id="next"),
            make_task("b", project_id=None),
            make_task("c", project_id="p1", completed=True),
        ]
        state = nav(ViewType.ALL)

        assert resolve(tasks, rich_workspace, state) == resolve(tasks, rich_workspace, state)

    def test_resolve_does_not_mutate_inputs(self, workspace):
        tasks = [make_task("b", order=2), make_task("a", order=1)]
        snapshot = list(tasks)

        resolve(tasks, workspace, nav(ViewType.ALL))

        assert tasks == snapshot

    @pytest.mark.parametrize("view, project_id, expected", [
        (ViewType.ALL, None, "All"),
        (ViewType.PROJECT_ALL, None, "All Projects"),
        (ViewType.PROJECT, "p1", "Project One"),
        (ViewType.PROJECT, "gone", "Project"),
        (ViewType.PERSPECTIVE, None, "Inbox"),
    ])
    def test_view_title(self, workspace, view, project_id, expected):
        assert view_title(workspace, nav(view, project_id=project_id)) == expected

    @pytest.mark.parametrize("view, project_badge, perspective_badge", [
        (ViewType.PERSPECTIVE, False, False),
        (ViewType.ALL, False, True),
        (ViewType.PROJECT, False, False),
        (ViewType.PROJECT_ALL, True, False),
    ])
    def test_badges(self, workspace, view, project_badge, perspective_badge):
        result = resolve([], workspace, nav(view, project_id="p1" if view == ViewType.PROJECT else None))
        assert result.show_project_badge is project_badge
        assert result.show_perspective_badge is perspective_badge

    def test_badges_follow_grouping_override(self, workspace):
        result = resolve([], workspace, nav(ViewType.ALL), grouping=GroupingMode.NONE)
        assert result.show_project_badge
        assert result.show_perspective_badge

    def test_soft_miss_never_raises(self):
        bare = WorkspaceConfig(id="w1", perspectives=(make_perspective("inbox", 0),))
        tasks = [make_task("a", project_id="nope", perspective_id="nope")]

        for view in ViewType:
            resolve(tasks, bare, nav(view, perspective_id="nope", project_id="nope"))

    def test_badge_names(self, workspace):
        known = make_task("a", project_id="p1", perspective_id="next")
        stale = make_task("b", project_id="gone", perspective_id="gone")
        bare = make_task("c", project_id=None, perspective_id=None)

        view = resolve([known, stale, bare], workspace, nav(ViewType.ALL))

        assert view.task_project_name(known) == "Project One"
        assert view.task_perspective_name(known) == "Next"
        assert view.task_project_name(stale) == "gone"
        assert view.task_perspective_name(stale) == ""
        assert view.task_project_name(bare) == ""
        assert view.task_perspective_name(bare) == ""
