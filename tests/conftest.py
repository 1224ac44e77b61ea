"""
Shared fixtures for the TaskScope test suite.
"""

from typing import Optional

import pytest
import pytest_asyncio

from taskscope.core.config import RetryConfig, StorageConfig, TaskScopeConfig
from taskscope.persistence.repository import SqlWorkspaceStore
from taskscope.persistence.requests import (
    CreatePerspectiveRequest,
    CreateProjectRequest,
    CreateWorkspaceRequest,
)
from taskscope.tasks.models import Task
from taskscope.workspace.models import Perspective, Project, WorkspaceConfig


def make_task(
    task_id: str,
    perspective_id: Optional[str] = "inbox",
    project_id: Optional[str] = "p1",
    order: float = 0,
    completed: bool = False,
    workspace_id: str = "w1",
    title: Optional[str] = None,
) -> Task:
    return Task(
        id=task_id,
        title=title or f"Task {task_id}",
        perspective_id=perspective_id,
        project_id=project_id,
        workspace_id=workspace_id,
        order=order,
        completed=completed,
    )


def make_perspective(perspective_id: str, order: int, name: Optional[str] = None) -> Perspective:
    return Perspective(id=perspective_id, name=name or perspective_id.capitalize(), order=order)


def make_project(project_id: str, order: int, name: Optional[str] = None, workspace_id: str = "w1") -> Project:
    return Project(id=project_id, name=name or project_id.upper(), order=order, workspace_id=workspace_id)


@pytest.fixture
def workspace() -> WorkspaceConfig:
    """Workspace with inbox/next perspectives and one project"""
    return WorkspaceConfig(
        id="w1",
        name="Personal",
        perspectives=(make_perspective("inbox", 0), make_perspective("next", 1)),
        projects=(make_project("p1", 0, name="Project One"),),
    )


@pytest.fixture
def rich_workspace() -> WorkspaceConfig:
    """Workspace with three perspectives and two projects, declared out of order"""
    return WorkspaceConfig(
        id="w1",
        name="Work",
        perspectives=(
            make_perspective("someday", 2),
            make_perspective("inbox", 0),
            make_perspective("next", 1),
        ),
        projects=(
            make_project("p2", 1, name="Second"),
            make_project("p1", 0, name="First"),
        ),
    )


@pytest.fixture
def empty_workspace() -> WorkspaceConfig:
    return WorkspaceConfig(id="w-empty", name="Empty")


@pytest.fixture
def fast_config() -> TaskScopeConfig:
    """Configuration with immediate retries and no simulated latency"""
    return TaskScopeConfig(
        storage=StorageConfig(),
        retry=RetryConfig(max_retries=2, base_delay=0.0, max_delay=0.0, jitter=False, operation_timeout=5.0),
    )


@pytest_asyncio.fixture
async def store():
    """Initialized in-memory SQL store"""
    sql_store = SqlWorkspaceStore(config=StorageConfig())
    await sql_store.initialize()
    yield sql_store
    await sql_store.close()


@pytest_asyncio.fixture
async def populated_store(store):
    """Store with workspace w1, perspectives inbox/next and project p1"""
    await store.create_workspace(CreateWorkspaceRequest(id="w1", name="Personal"))
    scope = store.for_workspace("w1")
    await scope.create_perspective(CreatePerspectiveRequest(id="inbox", name="Inbox"))
    await scope.create_perspective(CreatePerspectiveRequest(id="next", name="Next", icon="arrow-right"))
    await scope.create_project(CreateProjectRequest(id="p1", name="Project One"))
    return store
