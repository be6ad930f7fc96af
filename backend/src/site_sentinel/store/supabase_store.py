from __future__ import annotations

import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, create_client

from site_sentinel.errors import StoreError
from site_sentinel.inspector.models import Finding
from site_sentinel.store.base import NATURAL_KEY_COLUMNS
from site_sentinel.store.models import Project, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

PROJECT_COLUMNS = "id, name, url, created_at, error_types, frequency"
FINDING_COLUMNS = "id, title, description, severity, category, url, project_id, created_at"


def _project_from_row(row: dict[str, Any]) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        url=row["url"],
        created_at=row["created_at"],
        error_types=row.get("error_types") or [],
        frequency=row.get("frequency"),
    )


def _finding_from_row(row: dict[str, Any]) -> Finding:
    return Finding(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        severity=row["severity"],
        category=row["category"],
        url=row.get("url"),
        project_id=row["project_id"],
        created_at=row["created_at"],
    )


def _finding_to_row(project_id: str, finding: Finding) -> dict[str, Any]:
    return {
        "id": finding.id,
        "title": finding.title,
        "description": finding.description,
        "severity": finding.severity.value,
        "category": finding.category.value,
        "url": finding.url,
        "project_id": project_id,
        "created_at": finding.created_at.isoformat(),
    }


class SupabaseProjectStore:
    """Project and finding store backed by Supabase (tables `projects`, `errors`)."""

    def __init__(self, url: str, key: str, client: Client | None = None) -> None:
        if client is None:
            if not url or not key:
                raise StoreError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
            client = create_client(url, key)
        self._client = client

    def list_projects(self) -> list[Project]:
        response = self._execute(
            self._client.table("projects").select(PROJECT_COLUMNS).order("created_at", desc=True)
        )
        return [_project_from_row(row) for row in response.data or []]

    def create_project(self, data: ProjectCreate) -> Project:
        project = Project(**data.model_dump())
        payload = project.model_dump(mode="json")
        response = self._execute(self._client.table("projects").insert(payload))
        rows = response.data or [payload]
        return _project_from_row(rows[0])

    def find_project(self, project_id: str) -> Project | None:
        response = self._execute(
            self._client.table("projects").select(PROJECT_COLUMNS).eq("id", project_id).limit(1)
        )
        rows = response.data or []
        return _project_from_row(rows[0]) if rows else None

    def update_project(self, project_id: str, data: ProjectUpdate) -> Project | None:
        changes = data.model_dump(mode="json", exclude_unset=True)
        if not changes:
            return self.find_project(project_id)
        response = self._execute(self._client.table("projects").update(changes).eq("id", project_id))
        rows = response.data or []
        return _project_from_row(rows[0]) if rows else None

    def delete_project(self, project_id: str) -> bool:
        # `errors.project_id` references `projects.id` with ON DELETE CASCADE.
        response = self._execute(self._client.table("projects").delete().eq("id", project_id))
        return bool(response.data)

    def create_findings(self, project_id: str, findings: list[Finding]) -> int:
        if not findings:
            return 0
        rows = [_finding_to_row(project_id, f) for f in findings]
        response = self._execute(
            self._client.table("errors").upsert(
                rows,
                on_conflict=",".join(NATURAL_KEY_COLUMNS),
                ignore_duplicates=True,
            )
        )
        # With ignore_duplicates only the rows that were actually inserted come back.
        inserted = len(response.data or [])
        logger.info("Stored %d new finding(s) for project %s", inserted, project_id)
        return inserted

    def list_findings(self, project_id: str) -> list[Finding]:
        response = self._execute(
            self._client.table("errors")
            .select(FINDING_COLUMNS)
            .eq("project_id", project_id)
            .order("created_at", desc=True)
        )
        return [_finding_from_row(row) for row in response.data or []]

    def _execute(self, query: Any) -> Any:
        try:
            return query.execute()
        except APIError as exc:
            raise StoreError(f"Supabase request failed: {exc.message}") from exc
