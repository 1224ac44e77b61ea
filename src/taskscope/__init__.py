"""
TaskScope - workspace-scoped task organization.

Resolves which tasks a navigation state shows and how they are grouped
and ordered, with an async SQLite store and a task service on top.
"""

__version__ = "0.1.0"

from taskscope.core import TaskScopeConfig, TaskScopeError, configure_logging, get_config
from taskscope.tasks import ResolvedView, Task, TaskService, resolve
from taskscope.workspace import NavigationState, ViewType, WorkspaceConfig

__all__ = [
    "__version__",
    "TaskScopeConfig",
    "TaskScopeError",
    "configure_logging",
    "get_config",
    "ResolvedView",
    "Task",
    "TaskService",
    "resolve",
    "NavigationState",
    "ViewType",
    "WorkspaceConfig",
]
