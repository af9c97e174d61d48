"""
app/schemas/metadata.py

Request and response schemas for dataset metadata endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.domain.dataset_status import DatasetStatus


class CamelModel(BaseModel):
    """
    Base for API payloads: snake_case in Python, camelCase on the wire.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MetadataDraft(BaseModel):
    """
    User-authored metadata submitted for review.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    category: str = ""

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part for part in (tag.strip() for tag in value.split(",")) if part]
        return value

    @field_validator("tags")
    @classmethod
    def _drop_blank_tags(cls, value: list[str]) -> list[str]:
        return [tag.strip() for tag in value if tag and tag.strip()]


class MetadataSuggestionResponse(BaseModel):
    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    category: str = ""


class SuggestionRequest(BaseModel):
    """
    Body of POST /datasets/{id}/metadata. The whole body is optional.
    """

    language: str | None = None


class DraftRequest(BaseModel):
    """
    Body of PUT /datasets/{id}/metadata.
    """

    metadata: MetadataDraft | None = None
    language: str | None = None


class ReviewRequest(CamelModel):
    """
    Body of PUT /datasets/{id}/publish.
    """

    status: str | None = None
    review_comment: str | None = None


class MetadataStateResponse(CamelModel):
    suggested: MetadataSuggestionResponse
    draft: MetadataDraft | None = None
    language: str
    status: DatasetStatus
