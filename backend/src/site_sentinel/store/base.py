from __future__ import annotations

from typing import Protocol

from site_sentinel.inspector.models import Finding
from site_sentinel.store.models import Project, ProjectCreate, ProjectUpdate

# Conflict target for finding inserts. `description_hash` is a generated
# md5 of `description`; long stack traces do not fit in a btree entry.
NATURAL_KEY_COLUMNS = ("project_id", "category", "title", "description_hash", "url")


class ProjectStore(Protocol):
    def list_projects(self) -> list[Project]: ...

    def create_project(self, data: ProjectCreate) -> Project: ...

    def find_project(self, project_id: str) -> Project | None: ...

    def update_project(self, project_id: str, data: ProjectUpdate) -> Project | None: ...

    def delete_project(self, project_id: str) -> bool: ...

    def create_findings(self, project_id: str, findings: list[Finding]) -> int:
        """Insert findings, silently skipping natural-key duplicates.

        Returns the number of rows actually inserted.
        """
        ...

    def list_findings(self, project_id: str) -> list[Finding]: ...
