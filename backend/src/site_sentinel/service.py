from __future__ import annotations

import logging
from dataclasses import dataclass

from site_sentinel.errors import ProjectNotFoundError
from site_sentinel.inspector.inspector import Inspector
from site_sentinel.inspector.models import Finding, dedupe_findings
from site_sentinel.store.base import ProjectStore

logger = logging.getLogger(__name__)

CHECK_COMPLETED = "Site check completed."
CHECK_STORAGE_FAILED = "Site check completed, but findings could not be stored."


@dataclass(frozen=True)
class CheckResult:
    message: str
    detected_errors: list[Finding]
    stored_count: int


class MonitoringService:
    """Runs an inspection for a stored project and persists its findings."""

    def __init__(self, store: ProjectStore, inspector: Inspector) -> None:
        self._store = store
        self._inspector = inspector

    async def run_check(self, project_id: str) -> CheckResult:
        project = self._store.find_project(project_id)
        if project is None or not project.url:
            raise ProjectNotFoundError(f"Project {project_id} not found or URL missing")

        findings = await self._inspector.inspect(project.id, project.url)

        # An empty filter tracks every category.
        if project.error_types:
            tracked = set(project.error_types)
            findings = [f for f in findings if f.category in tracked]

        if not findings:
            logger.info("No findings for project %s", project_id)
            return CheckResult(message=CHECK_COMPLETED, detected_errors=[], stored_count=0)

        try:
            # Repeats within one run are reported but stored once.
            stored = self._store.create_findings(project.id, dedupe_findings(findings))
        except Exception:
            logger.exception("Failed to store %d finding(s) for project %s", len(findings), project_id)
            return CheckResult(message=CHECK_STORAGE_FAILED, detected_errors=findings, stored_count=0)

        logger.info("Stored %d of %d finding(s) for project %s", stored, len(findings), project_id)
        return CheckResult(message=CHECK_COMPLETED, detected_errors=findings, stored_count=stored)
