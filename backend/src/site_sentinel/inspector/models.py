from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Category(str, Enum):
    SSL = "SSL"
    CONSOLE = "Console"
    RESOURCE = "Resource"
    REDIRECT = "Redirect"
    STATUS_CODE = "Status Code"


# The dashboard shows "critical" for what is stored as "error".
SEVERITY_ALIASES = {"critical": Severity.ERROR}


def normalize_severity(value: object) -> object:
    if isinstance(value, str):
        return SEVERITY_ALIASES.get(value.lower(), value.lower())
    return value


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Finding(BaseModel):
    """One classified observation about a target site (an "error" record)."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(default_factory=_new_id)
    title: str
    description: str
    severity: Severity
    category: Category = Field(alias="type")
    url: str | None = None
    project_id: str
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_alias(cls, value: object) -> object:
        return normalize_severity(value)

    @property
    def natural_key(self) -> tuple[str, str, str, str | None]:
        return (self.category.value, self.title, self.description, self.url)


def dedupe_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Keep the first finding per natural key, preserving order."""
    seen: set[tuple[str, str, str, str | None]] = set()
    unique: list[Finding] = []
    for finding in findings:
        if finding.natural_key in seen:
            continue
        seen.add(finding.natural_key)
        unique.append(finding)
    return unique
