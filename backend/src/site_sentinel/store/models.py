from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from site_sentinel.inspector.models import Category

DEFAULT_FREQUENCY = "weekly"

_CAMEL = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class Project(BaseModel):
    model_config = _CAMEL

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    url: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error_types: list[Category] = Field(default_factory=list)
    frequency: str | None = DEFAULT_FREQUENCY


class ProjectCreate(BaseModel):
    model_config = _CAMEL

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    error_types: list[Category] = Field(default_factory=list)
    frequency: str | None = DEFAULT_FREQUENCY


class ProjectUpdate(BaseModel):
    """Partial update; only fields that were sent are applied."""

    model_config = _CAMEL

    name: str | None = None
    url: str | None = None
    error_types: list[Category] | None = None
    frequency: str | None = None

    @field_validator("name", "url", "error_types", mode="before")
    @classmethod
    def _not_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
