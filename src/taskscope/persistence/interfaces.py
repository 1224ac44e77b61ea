"""
Persistence Protocols

Contracts the task service talks to. The resolution core never calls these;
callers load a WorkspaceConfig and task list through them first and hand
the loaded data to the resolver.

Conventions:
- get_* returns None for an unknown id
- update_* and delete_* raise EntityNotFoundError for an unknown id
- deleting a project deletes its tasks; deleting a workspace deletes its
  perspectives, projects and tasks
"""

from typing import List, Optional, Protocol

from taskscope.persistence.requests import (
    CreatePerspectiveRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    CreateWorkspaceRequest,
    TaskQuery,
    UpdatePerspectiveRequest,
    UpdateProjectRequest,
    UpdateTaskRequest,
    UpdateWorkspaceRequest,
)
from taskscope.tasks.models import Task
from taskscope.workspace.models import Perspective, Project, Workspace, WorkspaceConfig


class WorkspaceScopedAPI(Protocol):
    """Operations scoped to one workspace"""

    workspace_id: str

    # Perspectives
    async def list_perspectives(self) -> List[Perspective]: ...

    async def get_perspective(self, perspective_id: str) -> Optional[Perspective]: ...

    async def create_perspective(self, request: CreatePerspectiveRequest) -> Perspective: ...

    async def update_perspective(self, perspective_id: str, request: UpdatePerspectiveRequest) -> Perspective: ...

    async def delete_perspective(self, perspective_id: str) -> None: ...

    # Projects
    async def list_projects(self) -> List[Project]: ...

    async def get_project(self, project_id: str) -> Optional[Project]: ...

    async def create_project(self, request: CreateProjectRequest) -> Project: ...

    async def update_project(self, project_id: str, request: UpdateProjectRequest) -> Project: ...

    async def delete_project(self, project_id: str) -> None: ...

    # Tasks
    async def list_tasks(self, query: Optional[TaskQuery] = None) -> List[Task]:
        """
        List tasks of the workspace.

        Args:
            query: Optional filter/sort/pagination envelope; without a sort
                the stored insertion order is kept

        Returns:
            Matching tasks
        """
        ...

    async def get_task(self, task_id: str) -> Optional[Task]: ...

    async def create_task(self, request: CreateTaskRequest) -> Task:
        """
        Create a task.

        The store assigns the id, timestamps and ``order`` as the maximum
        order among tasks of the same project plus one.
        """
        ...

    async def update_task(self, task_id: str, request: UpdateTaskRequest) -> Task: ...

    async def delete_task(self, task_id: str) -> None: ...

    # Snapshot
    async def load_config(self) -> WorkspaceConfig:
        """
        Load the workspace with its ordered perspectives and projects.

        Raises:
            EntityNotFoundError: If the workspace does not exist
        """
        ...


class WorkspaceAPI(Protocol):
    """Top-level workspace management"""

    async def list_workspaces(self) -> List[Workspace]: ...

    async def get_workspace(self, workspace_id: str) -> Optional[Workspace]: ...

    async def create_workspace(self, request: CreateWorkspaceRequest) -> Workspace: ...

    async def update_workspace(self, workspace_id: str, request: UpdateWorkspaceRequest) -> Workspace: ...

    async def delete_workspace(self, workspace_id: str) -> None: ...

    async def list_tasks(self, query: Optional[TaskQuery] = None) -> List[Task]:
        """List tasks across every workspace; accepts a GlobalTaskFilter"""
        ...

    def for_workspace(self, workspace_id: str) -> WorkspaceScopedAPI: ...
