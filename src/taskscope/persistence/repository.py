"""
Workspace Store - SQLAlchemy Integration

Async implementation of the persistence protocols on top of SQLAlchemy Core
and aiosqlite.

Key Features:
- Async CRUD for workspaces, perspectives, projects and tasks
- Type-safe conversion between database rows and pydantic models
- Cascading deletes inside a single transaction
- Task order assignment at insert time
- Filter/sort/pagination envelope for task listings
- Optional simulated latency and transient failures
"""

import asyncio
import random
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection

from taskscope.core.config import StorageConfig
from taskscope.core.exceptions import (
    EntityNotFoundError,
    PersistenceError,
    TransientPersistenceError,
)
from taskscope.core.logging import get_logger
from taskscope.database.connection import ConnectionPool
from taskscope.database.schema import perspectives, projects, tasks, workspaces
from taskscope.persistence.requests import (
    CreatePerspectiveRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    CreateWorkspaceRequest,
    GlobalTaskFilter,
    SortDirection,
    TaskQuery,
    UpdatePerspectiveRequest,
    UpdateProjectRequest,
    UpdateTaskRequest,
    UpdateWorkspaceRequest,
    field_value,
    should_update_field,
)
from taskscope.tasks.models import Task
from taskscope.workspace.models import Perspective, Project, Workspace, WorkspaceConfig

logger = get_logger("persistence")

_SORT_COLUMNS = {
    "order": tasks.c.sort_order,
    "title": tasks.c.title,
    "created_at": tasks.c.created_at,
    "updated_at": tasks.c.updated_at,
    "completed": tasks.c.completed,
}


def _new_id() -> str:
    return uuid4().hex


# ============================================================================
# ROW CONVERSION
# ============================================================================

def _row_to_workspace(row) -> Workspace:
    data = row._mapping
    return Workspace(
        id=data["id"],
        name=data["name"],
        created_at=data["created_at"],
        updated_at=data["updated_at"],
    )


def _row_to_perspective(row) -> Perspective:
    data = row._mapping
    return Perspective(
        id=data["id"],
        name=data["name"],
        icon=data["icon"] or "inbox",
        order=data["sort_order"] or 0,
    )


def _row_to_project(row) -> Project:
    data = row._mapping
    return Project(
        id=data["id"],
        name=data["name"],
        icon=data["icon"],
        order=data["sort_order"] or 0,
        workspace_id=data["workspace_id"],
        created_at=data["created_at"],
    )


def _row_to_task(row) -> Task:
    data = row._mapping
    return Task(
        id=data["id"],
        title=data["title"],
        description=data["description"],
        completed=bool(data["completed"]),
        perspective_id=data["perspective_id"],
        project_id=data["project_id"],
        workspace_id=data["workspace_id"],
        order=data["sort_order"],
        created_at=data["created_at"],
        updated_at=data["updated_at"],
    )


def _task_conditions(query: Optional[TaskQuery]) -> List[Any]:
    if query is None or query.filter is None:
        return []

    task_filter = query.filter
    conditions: List[Any] = []

    if isinstance(task_filter, GlobalTaskFilter) and task_filter.workspace_id:
        conditions.append(tasks.c.workspace_id == task_filter.workspace_id)
    if task_filter.project_id:
        conditions.append(tasks.c.project_id == task_filter.project_id)
    if task_filter.perspective_id:
        conditions.append(tasks.c.perspective_id == task_filter.perspective_id)
    if task_filter.completed is not None:
        conditions.append(tasks.c.completed == task_filter.completed)
    if task_filter.search:
        conditions.append(or_(
            tasks.c.title.icontains(task_filter.search, autoescape=True),
            tasks.c.description.icontains(task_filter.search, autoescape=True),
        ))

    return conditions


def _apply_task_query(stmt, query: Optional[TaskQuery]):
    if query is not None:
        for spec in query.sort:
            column = _SORT_COLUMNS[spec.field]
            stmt = stmt.order_by(column.desc() if spec.direction == SortDirection.DESC else column.asc())
    # Insertion order breaks remaining ties
    stmt = stmt.order_by(tasks.c.seq.asc())

    if query is not None and query.page_size is not None:
        stmt = stmt.limit(query.page_size).offset(query.offset)
    return stmt


class SqlWorkspaceStore:
    """
    Async store implementing WorkspaceAPI.

    Provides the top-level workspace operations and hands out
    workspace-scoped views through ``for_workspace``.
    """

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        config: Optional[StorageConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or StorageConfig()
        self.pool = pool or ConnectionPool.from_config(self.config)
        self.rng = rng or random.Random()

    async def initialize(self) -> None:
        await self.pool.initialize()

    async def close(self) -> None:
        await self.pool.close()

    async def _delay(self) -> None:
        """Simulate network latency when configured."""
        if self.config.max_latency_ms <= 0:
            return
        delay_ms = self.rng.uniform(self.config.min_latency_ms, self.config.max_latency_ms)
        await asyncio.sleep(delay_ms / 1000.0)

    def _maybe_fail(self, operation: str) -> None:
        """Inject a transient failure with the configured probability."""
        if self.config.failure_rate > 0 and self.rng.random() < self.config.failure_rate:
            logger.warning("Injected transient failure", operation=operation)
            raise TransientPersistenceError(
                "Network error", error_code="TRANSIENT", context={"operation": operation}
            )

    # ============================================================================
    # WORKSPACE OPERATIONS
    # ============================================================================

    async def list_workspaces(self) -> List[Workspace]:
        await self._delay()
        async with self.pool.read_transaction() as conn:
            result = await conn.execute(
                select(workspaces).order_by(workspaces.c.created_at, workspaces.c.id)
            )
            return [_row_to_workspace(row) for row in result.fetchall()]

    async def get_workspace(self, workspace_id: str) -> Optional[Workspace]:
        await self._delay()
        async with self.pool.read_transaction() as conn:
            return await self._fetch_workspace(conn, workspace_id)

    async def _fetch_workspace(self, conn: AsyncConnection, workspace_id: str) -> Optional[Workspace]:
        result = await conn.execute(select(workspaces).where(workspaces.c.id == workspace_id))
        row = result.fetchone()
        return _row_to_workspace(row) if row else None

    async def _require_workspace(self, conn: AsyncConnection, workspace_id: str) -> Workspace:
        workspace = await self._fetch_workspace(conn, workspace_id)
        if workspace is None:
            raise EntityNotFoundError(
                f"Workspace {workspace_id} not found",
                entity_type="workspace",
                entity_id=workspace_id,
            )
        return workspace

    async def create_workspace(self, request: CreateWorkspaceRequest) -> Workspace:
        await self._delay()
        workspace_id = request.id or _new_id()
        now = datetime.now()

        try:
            async with self.pool.write_transaction() as conn:
                await conn.execute(insert(workspaces).values(
                    id=workspace_id,
                    name=request.name,
                    created_at=now,
                    updated_at=now,
                ))
        except IntegrityError as e:
            raise PersistenceError(
                f"Workspace {workspace_id} already exists",
                table="workspaces",
                error_code="DUPLICATE",
            ) from e

        logger.info("Workspace created", workspace_id=workspace_id, name=request.name)
        return Workspace(id=workspace_id, name=request.name, created_at=now, updated_at=now)

    async def update_workspace(self, workspace_id: str, request: UpdateWorkspaceRequest) -> Workspace:
        await self._delay()
        async with self.pool.write_transaction() as conn:
            await self._require_workspace(conn, workspace_id)

            values: Dict[str, Any] = {"updated_at": datetime.now()}
            if request.name is not None:
                values["name"] = request.name

            await conn.execute(
                update(workspaces).where(workspaces.c.id == workspace_id).values(**values)
            )
            return await self._require_workspace(conn, workspace_id)

    async def delete_workspace(self, workspace_id: str) -> None:
        """Delete a workspace with its perspectives, projects and tasks"""
        await self._delay()
        async with self.pool.write_transaction() as conn:
            await self._require_workspace(conn, workspace_id)
            await conn.execute(delete(tasks).where(tasks.c.workspace_id == workspace_id))
            await conn.execute(delete(projects).where(projects.c.workspace_id == workspace_id))
            await conn.execute(delete(perspectives).where(perspectives.c.workspace_id == workspace_id))
            await conn.execute(delete(workspaces).where(workspaces.c.id == workspace_id))

        logger.info("Workspace deleted", workspace_id=workspace_id)

    async def list_tasks(self, query: Optional[TaskQuery] = None) -> List[Task]:
        """List tasks across every workspace"""
        await self._delay()
        stmt = select(tasks)
        conditions = _task_conditions(query)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = _apply_task_query(stmt, query)

        async with self.pool.read_transaction() as conn:
            result = await conn.execute(stmt)
            return [_row_to_task(row) for row in result.fetchall()]

    def for_workspace(self, workspace_id: str) -> "SqlWorkspaceScope":
        return SqlWorkspaceScope(self, workspace_id)


class SqlWorkspaceScope:
    """Async store implementing WorkspaceScopedAPI for one workspace"""

    def __init__(self, store: SqlWorkspaceStore, workspace_id: str):
        self.store = store
        self.pool = store.pool
        self.workspace_id = workspace_id

    def _not_found(self, entity_type: str, entity_id: str) -> EntityNotFoundError:
        return EntityNotFoundError(
            f"{entity_type.capitalize()} {entity_id} not found",
            entity_type=entity_type,
            entity_id=entity_id,
            context={"workspace_id": self.workspace_id},
        )

    # ============================================================================
    # PERSPECTIVE OPERATIONS
    # ============================================================================

    async def list_perspectives(self) -> List[Perspective]:
        await self.store._delay()
        async with self.pool.read_transaction() as conn:
            return await self._fetch_perspectives(conn)

    async def _fetch_perspectives(self, conn: AsyncConnection) -> List[Perspective]:
        result = await conn.execute(
            select(perspectives)
            .where(perspectives.c.workspace_id == self.workspace_id)
            .order_by(perspectives.c.sort_order)
        )
        return [_row_to_perspective(row) for row in result.fetchall()]

    async def _fetch_perspective(self, conn: AsyncConnection, perspective_id: str) -> Optional[Perspective]:
        result = await conn.execute(
            select(perspectives).where(and_(
                perspectives.c.workspace_id == self.workspace_id,
                perspectives.c.id == perspective_id,
            ))
        )
        row = result.fetchone()
        return _row_to_perspective(row) if row else None

    async def get_perspective(self, perspective_id: str) -> Optional[Perspective]:
        await self.store._delay()
        async with self.pool.read_transaction() as conn:
            return await self._fetch_perspective(conn, perspective_id)

    async def create_perspective(self, request: CreatePerspectiveRequest) -> Perspective:
        await self.store._delay()
        perspective_id = request.id or _new_id()

        try:
            async with self.pool.write_transaction() as conn:
                await self.store._require_workspace(conn, self.workspace_id)

                order = request.order
                if order is None:
                    result = await conn.execute(
                        select(func.max(perspectives.c.sort_order))
                        .where(perspectives.c.workspace_id == self.workspace_id)
                    )
                    current_max = result.scalar()
                    order = 0 if current_max is None else current_max + 1

                await conn.execute(insert(perspectives).values(
                    workspace_id=self.workspace_id,
                    id=perspective_id,
                    name=request.name,
                    icon=request.icon,
                    sort_order=order,
                ))
        except IntegrityError as e:
            raise PersistenceError(
                f"Perspective {perspective_id} already exists",
                table="perspectives",
                error_code="DUPLICATE",
            ) from e

        logger.info("Perspective created", workspace_id=self.workspace_id, perspective_id=perspective_id)
        return Perspective(id=perspective_id, name=request.name, icon=request.icon, order=order)

    async def update_perspective(self, perspective_id: str, request: UpdatePerspectiveRequest) -> Perspective:
        await self.store._delay()
        async with self.pool.write_transaction() as conn:
            if await self._fetch_perspective(conn, perspective_id) is None:
                raise self._not_found("perspective", perspective_id)

            values: Dict[str, Any] = {}
            if request.name is not None:
                values["name"] = request.name
            if request.icon is not None:
                values["icon"] = request.icon
            if request.order is not None:
                values["sort_order"] = request.order

            if values:
                await conn.execute(
                    update(perspectives)
                    .where(and_(
                        perspectives.c.workspace_id == self.workspace_id,
                        perspectives.c.id == perspective_id,
                    ))
                    .values(**values)
                )
            return await self._fetch_perspective(conn, perspective_id)

    async def delete_perspective(self, perspective_id: str) -> None:
        """Delete a perspective; tasks filed under it keep the stale id"""
        await self.store._delay()
        async with self.pool.write_transaction() as conn:
            result = await conn.execute(
                delete(perspectives).where(and_(
                    perspectives.c.workspace_id == self.workspace_id,
                    perspectives.c.id == perspective_id,
                ))
            )
            if result.rowcount == 0:
                raise self._not_found("perspective", perspective_id)

        logger.info("Perspective deleted", workspace_id=self.workspace_id, perspective_id=perspective_id)

    # ============================================================================
    # PROJECT OPERATIONS
    # ============================================================================

    async def list_projects(self) -> List[Project]:
        await self.store._delay()
        async with self.pool.read_transaction() as conn:
            return await self._fetch_projects(conn)

    async def _fetch_projects(self, conn: AsyncConnection) -> List[Project]:
        result = await conn.execute(
            select(projects)
            .where(projects.c.workspace_id == self.workspace_id)
            .order_by(projects.c.sort_order)
        )
        return [_row_to_project(row) for row in result.fetchall()]

    async def _fetch_project(self, conn: AsyncConnection, project_id: str) -> Optional[Project]:
        result = await conn.execute(
            select(projects).where(and_(
                projects.c.workspace_id == self.workspace_id,
                projects.c.id == project_id,
            ))
        )
        row = result.fetchone()
        return _row_to_project(row) if row else None

    async def get_project(self, project_id: str) -> Optional[Project]:
        await self.store._delay()
        async with self.pool.read_transaction() as conn:
            return await self._fetch_project(conn, project_id)

    async def create_project(self, request: CreateProjectRequest) -> Project:
        await self.store._delay()
        project_id = request.id or _new_id()
        now = datetime.now()

        try:
            async with self.pool.write_transaction() as conn:
                await self.store._require_workspace(conn, self.workspace_id)

                order = request.order
                if order is None:
                    result = await conn.execute(
                        select(func.max(projects.c.sort_order))
                        .where(projects.c.workspace_id == self.workspace_id)
                    )
                    current_max = result.scalar()
                    order = 0 if current_max is None else current_max + 1

                await conn.execute(insert(projects).values(
                    id=project_id,
                    workspace_id=self.workspace_id,
                    name=request.name,
                    icon=request.icon,
                    sort_order=order,
                    created_at=now,
                ))
        except IntegrityError as e:
            raise PersistenceError(
                f"Project {project_id} already exists",
                table="projects",
                error_code="DUPLICATE",
            ) from e

        logger.info("Project created", workspace_id=self.workspace_id, project_id=project_id)
        return Project(
            id=project_id,
            name=request.name,
            icon=request.icon,
            order=order,
            workspace_id=self.workspace_id,
            created_at=now,
        )

    async def update_project(self, project_id: str, request: UpdateProjectRequest) -> Project:
        await self.store._delay()
        async with self.pool.write_transaction() as conn:
            if await self._fetch_project(conn, project_id) is None:
                raise self._not_found("project", project_id)

            values: Dict[str, Any] = {}
            if request.name is not None:
                values["name"] = request.name
            if should_update_field(request.icon):
                values["icon"] = field_value(request.icon)
            if request.order is not None:
                values["sort_order"] = request.order

            if values:
                await conn.execute(
                    update(projects)
                    .where(and_(
                        projects.c.workspace_id == self.workspace_id,
                        projects.c.id == project_id,
                    ))
                    .values(**values)
                )
            return await self._fetch_project(conn, project_id)

    async def delete_project(self, project_id: str) -> None:
        """Delete a project and every task filed under it"""
        await self.store._delay()
        async with self.pool.write_transaction() as conn:
            if await self._fetch_project(conn, project_id) is None:
                raise self._not_found("project", project_id)

            removed = await conn.execute(
                delete(tasks).where(and_(
                    tasks.c.workspace_id == self.workspace_id,
                    tasks.c.project_id == project_id,
                ))
            )
            tasks_removed = removed.rowcount
            await conn.execute(
                delete(projects).where(and_(
                    projects.c.workspace_id == self.workspace_id,
                    projects.c.id == project_id,
                ))
            )

        logger.info("Project deleted",
                    workspace_id=self.workspace_id,
                    project_id=project_id,
                    tasks_removed=tasks_removed)

    # ============================================================================
    # TASK OPERATIONS
    # ============================================================================

    async def list_tasks(self, query: Optional[TaskQuery] = None) -> List[Task]:
        await self.store._delay()
        conditions = [tasks.c.workspace_id == self.workspace_id]
        conditions.extend(_task_conditions(query))
        stmt = _apply_task_query(select(tasks).where(and_(*conditions)), query)

        async with self.pool.read_transaction() as conn:
            result = await conn.execute(stmt)
            return [_row_to_task(row) for row in result.fetchall()]

    async def _fetch_task(self, conn: AsyncConnection, task_id: str) -> Optional[Task]:
        result = await conn.execute(
            select(tasks).where(and_(
                tasks.c.workspace_id == self.workspace_id,
                tasks.c.id == task_id,
            ))
        )
        row = result.fetchone()
        return _row_to_task(row) if row else None

    async def get_task(self, task_id: str) -> Optional[Task]:
        await self.store._delay()
        async with self.pool.read_transaction() as conn:
            return await self._fetch_task(conn, task_id)

    async def create_task(self, request: CreateTaskRequest) -> Task:
        """Create a task ordered after its project siblings"""
        await self.store._delay()
        self.store._maybe_fail("create_task")

        task_id = _new_id()
        now = datetime.now()

        async with self.pool.write_transaction() as conn:
            await self.store._require_workspace(conn, self.workspace_id)

            result = await conn.execute(
                select(func.max(tasks.c.sort_order)).where(and_(
                    tasks.c.workspace_id == self.workspace_id,
                    tasks.c.project_id == request.project_id,
                ))
            )
            max_order = result.scalar()
            order = 0.0 if max_order is None else max_order + 1

            result = await conn.execute(select(func.max(tasks.c.seq)))
            seq = (result.scalar() or 0) + 1

            await conn.execute(insert(tasks).values(
                id=task_id,
                workspace_id=self.workspace_id,
                project_id=request.project_id,
                perspective_id=request.perspective_id or None,
                title=request.title,
                description=request.description,
                completed=False,
                sort_order=order,
                seq=seq,
                created_at=now,
                updated_at=now,
            ))

        logger.info("Task created",
                    workspace_id=self.workspace_id,
                    task_id=task_id,
                    project_id=request.project_id,
                    order=order)

        return Task(
            id=task_id,
            title=request.title,
            description=request.description,
            completed=False,
            perspective_id=request.perspective_id,
            project_id=request.project_id,
            workspace_id=self.workspace_id,
            order=order,
            created_at=now,
            updated_at=now,
        )

    async def update_task(self, task_id: str, request: UpdateTaskRequest) -> Task:
        """Apply a partial update; absent fields keep their stored value"""
        await self.store._delay()
        async with self.pool.write_transaction() as conn:
            if await self._fetch_task(conn, task_id) is None:
                raise self._not_found("task", task_id)

            values: Dict[str, Any] = {"updated_at": datetime.now()}
            if request.title is not None:
                values["title"] = request.title
            if should_update_field(request.description):
                values["description"] = field_value(request.description)
            if request.project_id is not None:
                values["project_id"] = request.project_id
            if should_update_field(request.perspective_id):
                values["perspective_id"] = field_value(request.perspective_id)
            if request.completed is not None:
                values["completed"] = request.completed
            if request.order is not None:
                values["sort_order"] = request.order

            await conn.execute(
                update(tasks)
                .where(and_(tasks.c.workspace_id == self.workspace_id, tasks.c.id == task_id))
                .values(**values)
            )
            updated = await self._fetch_task(conn, task_id)

        logger.debug("Task updated",
                     workspace_id=self.workspace_id,
                     task_id=task_id,
                     fields=sorted(k for k in values if k != "updated_at"))
        return updated

    async def delete_task(self, task_id: str) -> None:
        await self.store._delay()
        async with self.pool.write_transaction() as conn:
            result = await conn.execute(
                delete(tasks).where(and_(tasks.c.workspace_id == self.workspace_id, tasks.c.id == task_id))
            )
            if result.rowcount == 0:
                raise self._not_found("task", task_id)

        logger.info("Task deleted", workspace_id=self.workspace_id, task_id=task_id)

    # ============================================================================
    # SNAPSHOT
    # ============================================================================

    async def load_config(self) -> WorkspaceConfig:
        """Load the workspace with its ordered perspectives and projects"""
        await self.store._delay()
        async with self.pool.read_transaction() as conn:
            workspace = await self.store._require_workspace(conn, self.workspace_id)
            return WorkspaceConfig.from_workspace(
                workspace,
                await self._fetch_perspectives(conn),
                await self._fetch_projects(conn),
            )
