"""Structured output schema for AI metadata suggestions."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, field_validator


class MetadataSuggestion(BaseModel):
    """Title, description, tags and category proposed for a dataset.

    Every field always has a value: missing or malformed fields collapse to
    the empty string or an empty tag list, so an all-empty instance is the
    "no suggestion available" result.
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
    )

    title: str = ""
    description: str = ""
    tags: List[str] = []
    category: str = ""

    @field_validator("title", "description", "category", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value if item is not None)
        return str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            return []
        tags = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                tags.append(text)
        return tags

    @classmethod
    def empty(cls) -> "MetadataSuggestion":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.description or self.tags or self.category)
