"""
Database layer: SQLAlchemy Core schema and async connection management.
"""

from taskscope.database.connection import ConnectionPool
from taskscope.database.schema import metadata, perspectives, projects, tasks, workspaces

__all__ = [
    "ConnectionPool",
    "metadata",
    "perspectives",
    "projects",
    "tasks",
    "workspaces",
]
