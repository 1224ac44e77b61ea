"""
Workspace Models

Immutable snapshots of a workspace's configuration:
- Perspective: named, ordered lens over tasks (Inbox, Next, Someday...)
- Project: ordered container of tasks inside one workspace
- Workspace: persisted workspace identity
- WorkspaceConfig: identity plus ordered perspectives and projects, the
  read-only input of every resolution pass
"""

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Perspective(BaseModel):
    """Named view used to filter tasks independent of project"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Perspective id, unique within the workspace")
    name: str = Field(..., description="Display name")
    icon: str = Field(default="inbox", description="Icon identifier")
    order: int = Field(default=0, description="Display and tie-break rank")


class Project(BaseModel):
    """Ordered grouping of tasks within one workspace"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Project id, unique within the workspace")
    name: str = Field(..., description="Display name")
    icon: Optional[str] = Field(None, description="Optional icon identifier")
    order: int = Field(default=0, description="Display rank")
    workspace_id: str = Field(..., description="Owning workspace")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")


class Workspace(BaseModel):
    """Persisted workspace identity"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Workspace id")
    name: str = Field(..., description="Display name")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class WorkspaceConfig(BaseModel):
    """
    Workspace identity with its ordered perspectives and projects.

    Both lists are stably sorted by ``order`` on construction, so the list
    index is the rank and the first element is the default. Empty lists are
    valid; the default lookups then return None.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Workspace id")
    name: str = Field(default="", description="Workspace name")
    perspectives: Tuple[Perspective, ...] = Field(default_factory=tuple)
    projects: Tuple[Project, ...] = Field(default_factory=tuple)

    @field_validator("perspectives", "projects")
    @classmethod
    def sort_by_order(cls, v):
        return tuple(sorted(v, key=lambda item: item.order))

    @model_validator(mode="after")
    def validate_unique_ids(self):
        for label, items in (("perspective", self.perspectives), ("project", self.projects)):
            seen = set()
            for item in items:
                if item.id in seen:
                    raise ValueError(f"Duplicate {label} id: {item.id}")
                seen.add(item.id)
        return self

    @classmethod
    def from_workspace(
        cls,
        workspace: Workspace,
        perspectives: List[Perspective],
        projects: List[Project],
    ) -> "WorkspaceConfig":
        return cls(
            id=workspace.id,
            name=workspace.name,
            perspectives=tuple(perspectives),
            projects=tuple(projects),
        )

    # Projects

    def find_project(self, project_id: Optional[str]) -> Optional[Project]:
        if not project_id:
            return None
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def has_project(self, project_id: Optional[str]) -> bool:
        return self.find_project(project_id) is not None

    def default_project(self) -> Optional[Project]:
        return self.projects[0] if self.projects else None

    def project_ids(self) -> List[str]:
        return [project.id for project in self.projects]

    # Perspectives

    def find_perspective(self, perspective_id: Optional[str]) -> Optional[Perspective]:
        if not perspective_id:
            return None
        for perspective in self.perspectives:
            if perspective.id == perspective_id:
                return perspective
        return None

    def has_perspective(self, perspective_id: Optional[str]) -> bool:
        return self.find_perspective(perspective_id) is not None

    def default_perspective(self) -> Optional[Perspective]:
        return self.perspectives[0] if self.perspectives else None

    def perspective_ids(self) -> List[str]:
        return [perspective.id for perspective in self.perspectives]
