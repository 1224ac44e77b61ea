"""
Workspace configuration and navigation state.
"""

from .models import Perspective, Project, Workspace, WorkspaceConfig
from .navigation import (
    NavigationParams,
    NavigationState,
    ViewType,
    initialize_navigation,
    is_valid_view,
    navigation_for_workspace_change,
    navigation_query,
    parse_navigation_params,
)

__all__ = [
    "Perspective",
    "Project",
    "Workspace",
    "WorkspaceConfig",
    "NavigationParams",
    "NavigationState",
    "ViewType",
    "initialize_navigation",
    "is_valid_view",
    "navigation_for_workspace_change",
    "navigation_query",
    "parse_navigation_params",
]
