"""
Database schema definition using SQLAlchemy Core.

Defines the workspace, perspective, project and task tables.
Uses SQLAlchemy Core (not the ORM); rows are mapped to pydantic models by
the repository layer.
"""

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.sql import func

# Metadata container for all tables
metadata = MetaData()

workspaces = Table(
    "workspaces",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("created_at", TIMESTAMP, server_default=func.current_timestamp()),
    Column("updated_at", TIMESTAMP, nullable=True),
)

perspectives = Table(
    "perspectives",
    metadata,
    Column(
        "workspace_id",
        String(64),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    # Perspective ids such as 'inbox' repeat across workspaces
    Column("id", String(64), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("icon", String(64), nullable=False, default="inbox"),
    Column("sort_order", Integer, nullable=False, default=0),
    Index("idx_perspectives_workspace_order", "workspace_id", "sort_order"),
)

projects = Table(
    "projects",
    metadata,
    Column("id", String(64), primary_key=True),
    Column(
        "workspace_id",
        String(64),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("name", String(200), nullable=False),
    Column("icon", String(64), nullable=True),
    Column("sort_order", Integer, nullable=False, default=0),
    Column("created_at", TIMESTAMP, server_default=func.current_timestamp()),
    Index("idx_projects_workspace_order", "workspace_id", "sort_order"),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", String(64), primary_key=True),
    Column(
        "workspace_id",
        String(64),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
    ),
    # No foreign key: stale project ids are kept and shown under their raw id
    Column("project_id", String(64), nullable=True),
    Column("perspective_id", String(64), nullable=True),
    Column("title", String(500), nullable=False),
    Column("description", Text, nullable=True),
    Column("completed", Boolean, nullable=False, default=False),
    Column("sort_order", Float, nullable=False, default=0.0),
    # Monotonic insertion counter; keeps listings in creation order
    Column("seq", Integer, nullable=False, default=0),
    Column("created_at", TIMESTAMP, server_default=func.current_timestamp()),
    Column("updated_at", TIMESTAMP, server_default=func.current_timestamp()),
    Index("idx_tasks_workspace_project", "workspace_id", "project_id"),
    Index("idx_tasks_workspace_perspective", "workspace_id", "perspective_id"),
)
