"""
Task Service Layer

Orchestrates the persistence store and the pure resolution core:
- loads workspace snapshots and tasks through the store
- resolves views for a navigation state
- creates tasks with project/perspective defaults
- serializes mutations per task id
- wraps store calls with timeout and backoff retries
"""

import asyncio
import contextlib
from typing import AsyncIterator, Dict, List, Optional

from taskscope.core.logging import get_logger
from taskscope.core.config import TaskScopeConfig, get_config
from taskscope.core.exceptions import EntityNotFoundError, ValidationError
from taskscope.persistence.interfaces import WorkspaceAPI, WorkspaceScopedAPI
from taskscope.persistence.requests import CreateTaskRequest, UpdateTaskRequest
from taskscope.tasks.defaults import effective_perspective_id, effective_project_id, validate_draft
from taskscope.tasks.models import GroupingMode, ResolvedView, Task, TaskDraft
from taskscope.tasks.resolver import resolve
from taskscope.tasks.retry import RetryHandler
from taskscope.workspace.models import WorkspaceConfig
from taskscope.workspace.navigation import NavigationState

logger = get_logger("service")


class TaskService:
    """
    High-level task operations for one store.

    Store calls go through a RetryHandler; mutations of the same task id
    never overlap.
    """

    def __init__(self, store: WorkspaceAPI, config: Optional[TaskScopeConfig] = None):
        self.store = store
        self.config = config or get_config()
        self.retry = RetryHandler(self.config.retry)

        self._mutation_locks: Dict[str, asyncio.Lock] = {}
        # Holders plus waiters per task id; the lock is dropped at zero
        self._lock_users: Dict[str, int] = {}

        self.stats = {
            "tasks_created": 0,
            "tasks_updated": 0,
            "tasks_deleted": 0,
            "views_resolved": 0,
        }

    @classmethod
    async def create(cls, config: Optional[TaskScopeConfig] = None) -> "TaskService":
        """Build a service over an initialized SQL store, seeding it if configured"""
        from taskscope.persistence.repository import SqlWorkspaceStore
        from taskscope.persistence.seed import seed_if_empty

        config = config or get_config()
        store = SqlWorkspaceStore(config=config.storage)
        await store.initialize()

        if config.storage.seed_on_init:
            await seed_if_empty(store)

        return cls(store, config)

    async def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            await close()

    def _scope(self, workspace_id: str) -> WorkspaceScopedAPI:
        return self.store.for_workspace(workspace_id)

    @contextlib.asynccontextmanager
    async def _lock_for(self, task_id: str) -> AsyncIterator[None]:
        lock = self._mutation_locks.setdefault(task_id, asyncio.Lock())
        self._lock_users[task_id] = self._lock_users.get(task_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[task_id] -= 1
            if not self._lock_users[task_id]:
                del self._lock_users[task_id]
                del self._mutation_locks[task_id]

    # ============================================================================
    # READ OPERATIONS
    # ============================================================================

    async def load_workspace(self, workspace_id: str) -> WorkspaceConfig:
        """
        Load the workspace snapshot used by the resolver.

        Raises:
            EntityNotFoundError: If the workspace does not exist
        """
        return await self.retry.run(self._scope(workspace_id).load_config)

    async def list_tasks(self, workspace_id: str) -> List[Task]:
        return await self.retry.run(self._scope(workspace_id).list_tasks)

    async def resolve_view(
        self,
        workspace_id: str,
        nav: NavigationState,
        grouping: Optional[GroupingMode] = None,
    ) -> ResolvedView:
        """Load the workspace and its tasks, then resolve them for ``nav``"""
        workspace, tasks = await asyncio.gather(
            self.load_workspace(workspace_id),
            self.list_tasks(workspace_id),
        )
        view = resolve(tasks, workspace, nav, grouping)
        self.stats["views_resolved"] += 1

        logger.debug("View resolved",
                     workspace_id=workspace_id,
                     view=nav.view.value,
                     active=view.active_count,
                     completed=view.completed_count,
                     groups=len(view.groups))
        return view

    # ============================================================================
    # MUTATIONS
    # ============================================================================

    async def create_task(
        self,
        workspace_id: str,
        nav: NavigationState,
        title: str,
        description: Optional[str] = None,
        project_id: Optional[str] = None,
        perspective_id: Optional[str] = None,
    ) -> Task:
        """
        Create a task, defaulting its project and perspective from ``nav``.

        Raises:
            NoDefaultProjectError: If no project is given and the workspace has none
            NoDefaultPerspectiveError: In strict mode, if no perspective is
                given and the workspace has none
            ValidationError: If the resulting draft is incomplete
        """
        workspace = await self.load_workspace(workspace_id)

        draft = TaskDraft(
            title=title,
            description=description,
            project_id=project_id or effective_project_id(nav, workspace),
            perspective_id=perspective_id or effective_perspective_id(
                nav, workspace, self.config.resolver.effective_fallback
            ),
            workspace_id=workspace.id,
        )

        errors = validate_draft(draft)
        if errors:
            raise ValidationError(
                "; ".join(errors),
                context={"workspace_id": workspace_id},
            )

        request = CreateTaskRequest(
            title=draft.title.strip(),
            description=draft.description,
            project_id=draft.project_id,
            perspective_id=draft.perspective_id,
        )
        task = await self.retry.run(self._scope(workspace_id).create_task, request)
        self.stats["tasks_created"] += 1

        logger.info("Task created via service",
                    workspace_id=workspace_id,
                    task_id=task.id,
                    project_id=task.project_id,
                    perspective_id=task.perspective_id)
        return task

    async def update_task(self, workspace_id: str, task_id: str, request: UpdateTaskRequest) -> Task:
        async with self._lock_for(task_id):
            task = await self.retry.run(self._scope(workspace_id).update_task, task_id, request)

        self.stats["tasks_updated"] += 1
        return task

    async def toggle_task_complete(self, workspace_id: str, task_id: str) -> Task:
        """Flip the completion flag of a task"""
        scope = self._scope(workspace_id)

        async with self._lock_for(task_id):
            current = await self.retry.run(scope.get_task, task_id)
            if current is None:
                raise EntityNotFoundError(
                    f"Task {task_id} not found",
                    entity_type="task",
                    entity_id=task_id,
                    context={"workspace_id": workspace_id},
                )

            task = await self.retry.run(
                scope.update_task, task_id, UpdateTaskRequest(completed=not current.completed)
            )

        self.stats["tasks_updated"] += 1
        logger.info("Task completion toggled", task_id=task_id, completed=task.completed)
        return task

    async def delete_task(self, workspace_id: str, task_id: str) -> None:
        async with self._lock_for(task_id):
            await self.retry.run(self._scope(workspace_id).delete_task, task_id)

        self.stats["tasks_deleted"] += 1

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)
