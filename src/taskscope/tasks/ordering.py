"""
Task ordering policy.

Pure functions computing a total order over tasks. Ranks come from the
position of a perspective or project in the workspace's ordered lists; ids
that are missing or unknown rank after every real entry. All sorting goes
through ``sorted``, which is stable, so tasks with equal keys keep their
input order.
"""

import functools
import math
from typing import Iterable, List, Optional, Sequence, Union

from taskscope.tasks.models import Task
from taskscope.workspace.models import Perspective, Project

UNRANKED = math.inf

Rank = Union[int, float]


def perspective_rank(perspective_id: Optional[str], perspectives: Sequence[Perspective]) -> Rank:
    """Index of the perspective in the ordered list, UNRANKED if absent"""
    if not perspective_id:
        return UNRANKED
    for index, perspective in enumerate(perspectives):
        if perspective.id == perspective_id:
            return index
    return UNRANKED


def project_rank(project_id: Optional[str], projects: Sequence[Project]) -> Rank:
    """Index of the project in the ordered list, UNRANKED if absent"""
    if not project_id:
        return UNRANKED
    for index, project in enumerate(projects):
        if project.id == project_id:
            return index
    return UNRANKED


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _compare_ranks(rank_a: Rank, rank_b: Rank) -> int:
    if rank_a == rank_b:
        return 0
    return -1 if rank_a < rank_b else 1


def compare_by_perspective_then_order(a: Task, b: Task, perspectives: Sequence[Perspective]) -> int:
    """Perspective rank first, then the task's own order"""
    result = _compare_ranks(
        perspective_rank(a.perspective_id, perspectives),
        perspective_rank(b.perspective_id, perspectives),
    )
    if result:
        return result
    return _sign(a.order - b.order)


def compare_by_project_then_order(a: Task, b: Task, projects: Sequence[Project]) -> int:
    """Project rank first, then the task's own order"""
    result = _compare_ranks(
        project_rank(a.project_id, projects),
        project_rank(b.project_id, projects),
    )
    if result:
        return result
    return _sign(a.order - b.order)


def sort_by_perspective_then_order(tasks: Iterable[Task], perspectives: Sequence[Perspective]) -> List[Task]:
    compare = functools.partial(compare_by_perspective_then_order, perspectives=perspectives)
    return sorted(tasks, key=functools.cmp_to_key(compare))


def sort_by_project_then_order(tasks: Iterable[Task], projects: Sequence[Project]) -> List[Task]:
    compare = functools.partial(compare_by_project_then_order, projects=projects)
    return sorted(tasks, key=functools.cmp_to_key(compare))


def sort_by_order(tasks: Iterable[Task]) -> List[Task]:
    return sorted(tasks, key=lambda task: task.order)
