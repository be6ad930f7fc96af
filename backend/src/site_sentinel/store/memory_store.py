from __future__ import annotations

from site_sentinel.errors import StoreError
from site_sentinel.inspector.models import Finding
from site_sentinel.store.models import Project, ProjectCreate, ProjectUpdate


class InMemoryProjectStore:
    """Process-local store used when Supabase is not configured."""

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._findings: dict[str, list[Finding]] = {}

    def list_projects(self) -> list[Project]:
        return sorted(self._projects.values(), key=lambda p: p.created_at, reverse=True)

    def create_project(self, data: ProjectCreate) -> Project:
        project = Project(**data.model_dump())
        self._projects[project.id] = project
        self._findings[project.id] = []
        return project

    def find_project(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def update_project(self, project_id: str, data: ProjectUpdate) -> Project | None:
        project = self._projects.get(project_id)
        if project is None:
            return None
        updated = project.model_copy(update=data.changes())
        self._projects[project_id] = updated
        return updated

    def delete_project(self, project_id: str) -> bool:
        if project_id not in self._projects:
            return False
        del self._projects[project_id]
        # Findings go with their project.
        self._findings.pop(project_id, None)
        return True

    def create_findings(self, project_id: str, findings: list[Finding]) -> int:
        if project_id not in self._projects:
            raise StoreError(f"Unknown project {project_id}")
        stored = self._findings[project_id]
        seen = {f.natural_key for f in stored}
        inserted = 0
        for finding in findings:
            if finding.natural_key in seen:
                continue
            seen.add(finding.natural_key)
            stored.append(finding.model_copy(update={"project_id": project_id}))
            inserted += 1
        return inserted

    def list_findings(self, project_id: str) -> list[Finding]:
        return sorted(self._findings.get(project_id, []), key=lambda f: f.created_at, reverse=True)
