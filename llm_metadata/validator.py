"""Parsing layer for raw metadata-suggestion responses.

Strict path: strip code fences, parse JSON, validate against
MetadataSuggestion. Lenient path: pull ``title:``/``description:``/
``tags:``/``category:`` lines out of free text when the model ignored the
JSON instruction.
"""

import json
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from llm_metadata.schema import MetadataSuggestion

_KEYS = ("title", "description", "tags", "category")

# Optional list markers, heading hashes, bold markers and quotes before the key.
_KEY_PREFIX = r"^[ \t>*#\-\d.)]*[\"'*_]*"
_KEY_SUFFIX = r"[\"'*_]*[ \t]*[:：][ \t]*"

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


class MetadataOutputValidationError(Exception):
    """Raised when a response cannot be read as a MetadataSuggestion.

    Attributes:
        stage: Which validation step failed ("json_parse" or "schema").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed validation.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"Metadata output validation failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)


def _strip_markdown_fences(text: str) -> str:
    """Remove markdown code fences wherever they appear.

    Models sometimes wrap output in ```json ... ``` or add fences around
    only part of the answer despite instructions.
    """
    stripped = text.strip()
    match = re.match(
        r"^```(?:json)?\s*\n?(.*?)\n?\s*```$",
        stripped,
        re.DOTALL | re.IGNORECASE,
    )
    if match:
        return match.group(1).strip()
    return _FENCE_PATTERN.sub("", stripped).strip()


def parse_metadata_response(raw_response: str) -> MetadataSuggestion:
    """Parse a raw model response as JSON metadata.

    Args:
        raw_response: The raw string returned by the LLM adapter.

    Returns:
        A MetadataSuggestion. Missing keys become empty values.

    Raises:
        MetadataOutputValidationError: If the text is not a JSON object.
    """
    cleaned = _strip_markdown_fences(raw_response or "")

    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MetadataOutputValidationError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc

    if not isinstance(data, dict):
        raise MetadataOutputValidationError(
            stage="schema",
            errors=["top-level JSON must be an object"],
            raw_response=raw_response,
        )

    lowered = {str(key).strip().lower(): value for key, value in data.items()}
    try:
        return MetadataSuggestion.model_validate({key: lowered.get(key) for key in _KEYS})
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        raise MetadataOutputValidationError(
            stage="schema",
            errors=errors,
            raw_response=raw_response,
        ) from exc


def _clean_value(value: str) -> str:
    text = value.strip().rstrip(",").strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1]
    return text.strip().strip("*_").strip()


def _match_line(key: str, text: str) -> Optional[str]:
    pattern = re.compile(_KEY_PREFIX + key + _KEY_SUFFIX + r"(?P<value>\S.*)$", re.IGNORECASE | re.MULTILINE)
    match = pattern.search(text)
    if not match:
        return None
    return _clean_value(match.group("value"))


def _match_description(text: str) -> Optional[str]:
    """Description runs from its key line to the next blank line or next key."""
    start = re.compile(
        _KEY_PREFIX + "description" + _KEY_SUFFIX + r"(?P<value>.*)$",
        re.IGNORECASE | re.MULTILINE,
    ).search(text)
    if not start:
        return None

    next_key = re.compile(_KEY_PREFIX + r"(?:title|tags|category)" + _KEY_SUFFIX, re.IGNORECASE)
    parts = [start.group("value")]
    for line in text[start.end():].splitlines()[1:]:
        if not line.strip() or next_key.match(line):
            break
        parts.append(line.strip())
    return _clean_value("\n".join(part for part in parts if part.strip()))


def _split_tags(value: Optional[str]) -> List[str]:
    if not value:
        return []
    value = value.strip().strip("[]")
    tags = []
    for part in re.split(r"[,;،]", value):
        tag = _clean_value(part)
        if tag:
            tags.append(tag)
    return tags


def extract_metadata_from_text(text: str) -> MetadataSuggestion:
    """Best-effort extraction of metadata fields from free-form text.

    Each field is matched independently; a field that cannot be found is
    left empty.
    """
    source = _strip_markdown_fences(text or "")
    payload: Dict[str, Any] = {
        "title": _match_line("title", source) or "",
        "description": _match_description(source) or "",
        "tags": _split_tags(_match_line("tags", source)),
        "category": _match_line("category", source) or "",
    }
    return MetadataSuggestion.model_validate(payload)
