"""
Default workspace data loaded into an empty store.
"""

from typing import Any, Dict, List

from taskscope.core.logging import get_logger
from taskscope.persistence.interfaces import WorkspaceAPI
from taskscope.persistence.requests import (
    CreatePerspectiveRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    CreateWorkspaceRequest,
    UpdateTaskRequest,
)

logger = get_logger("seed")

DEFAULT_PERSPECTIVES: List[Dict[str, Any]] = [
    {"id": "inbox", "name": "Inbox", "icon": "inbox"},
    {"id": "first", "name": "First", "icon": "star"},
    {"id": "next", "name": "Next", "icon": "arrow-right"},
    {"id": "someday", "name": "Someday", "icon": "clock"},
]

DEFAULT_WORKSPACES: List[Dict[str, Any]] = [
    {
        "id": "personal",
        "name": "Personal",
        "projects": [
            {"id": "personal-default", "name": "Personal"},
            {"id": "family", "name": "Family", "icon": "users"},
        ],
        "tasks": [
            {
                "title": "Review GTD weekly",
                "description": "Go through all inboxes and process items",
                "project_id": "personal-default",
                "perspective_id": "next",
            },
            {
                "title": "Plan family vacation",
                "project_id": "family",
                "perspective_id": "someday",
            },
            {
                "title": "Fix authentication bug",
                "description": "Users were getting logged out randomly",
                "project_id": "personal-default",
                "perspective_id": "inbox",
                "completed": True,
            },
        ],
    },
    {
        "id": "work",
        "name": "Work",
        "projects": [
            {"id": "work-default", "name": "Work"},
            {"id": "api-redesign", "name": "API Redesign", "icon": "code"},
        ],
        "tasks": [
            {
                "title": "Deploy API changes",
                "project_id": "api-redesign",
                "perspective_id": "next",
            },
            {
                "title": "Write API documentation",
                "project_id": "api-redesign",
                "perspective_id": "next",
                "completed": True,
            },
        ],
    },
    {
        "id": "hobby",
        "name": "Hobby",
        "projects": [
            {"id": "hobby-default", "name": "Hobby"},
        ],
        "tasks": [],
    },
]


async def seed_default_workspaces(store: WorkspaceAPI) -> int:
    """
    Create the default workspaces with their perspectives, projects and tasks.

    Returns:
        Number of tasks created
    """
    created_tasks = 0

    for spec in DEFAULT_WORKSPACES:
        await store.create_workspace(CreateWorkspaceRequest(id=spec["id"], name=spec["name"]))
        scope = store.for_workspace(spec["id"])

        for perspective in DEFAULT_PERSPECTIVES:
            await scope.create_perspective(CreatePerspectiveRequest(**perspective))

        for project in spec["projects"]:
            await scope.create_project(CreateProjectRequest(**project))

        for task_spec in spec["tasks"]:
            fields = dict(task_spec)
            completed = fields.pop("completed", False)
            task = await scope.create_task(CreateTaskRequest(**fields))
            if completed:
                await scope.update_task(task.id, UpdateTaskRequest(completed=True))
            created_tasks += 1

    logger.info("Default workspaces seeded",
                workspaces=len(DEFAULT_WORKSPACES),
                tasks=created_tasks)
    return created_tasks


async def seed_if_empty(store: WorkspaceAPI) -> bool:
    """Seed the store only when it holds no workspaces"""
    if await store.list_workspaces():
        logger.debug("Store already populated, skipping seed")
        return False

    await seed_default_workspaces(store)
    return True
