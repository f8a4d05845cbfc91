"""Recover typed results from free-text model output.

Summaries and query answers are returned trimmed. Extraction output goes
through two tiers:

1. Strict: strip a surrounding code fence, parse JSON, keep the seven
   ExtractionRecord keys that are present and mark the rest "unknown".
2. Fallback: scan the raw text for ``"<key>": "<value>"`` pairs, one
   targeted pattern per key, first match wins.

normalize() never raises for the extract task. An empty or unparseable
response yields a record with every field set to "unknown".
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog

from src.meeting_ai.ai.schemas import (
    EXTRACTION_FIELDS,
    UNKNOWN,
    ExtractionRecord,
    TaskType,
)
from src.meeting_ai.core.monitoring import extraction_fallback_total

logger = structlog.get_logger(__name__)

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*$")

# One pattern per key: quoted key, colon, quoted non-empty value.
_FIELD_PATTERNS: dict[str, re.Pattern[str]] = {
    field: re.compile(
        rf"""["']{field}["']\s*:\s*(?:"([^"]+)"|'([^']+)')"""
    )
    for field in EXTRACTION_FIELDS
}


def strip_code_fence(text: str) -> str:
    """Remove a leading ```lang fence and a trailing ``` fence if present."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
        cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _coerce_value(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(str(item) for item in value if item is not None)
    return str(value)


class ResponseNormalizer:
    """Converts raw model text into the task's result type."""

    def normalize(self, task_type: TaskType, raw_text: str) -> ExtractionRecord | str:
        if task_type is TaskType.EXTRACT:
            return self.normalize_extraction(raw_text)
        return (raw_text or "").strip()

    def normalize_extraction(self, raw_text: str) -> ExtractionRecord:
        raw_text = raw_text or ""
        record = self._parse_strict(raw_text)
        if record is not None:
            return record

        logger.warning(
            "extraction.strict_parse_failed",
            raw_length=len(raw_text),
            raw_preview=raw_text[:200],
        )
        return self._parse_fallback(raw_text)

    def _parse_strict(self, raw_text: str) -> ExtractionRecord | None:
        try:
            parsed = json.loads(strip_code_fence(raw_text))
        except (ValueError, RecursionError):
            return None
        if not isinstance(parsed, dict):
            return None

        values = {
            field: _coerce_value(parsed[field]) if field in parsed else UNKNOWN
            for field in EXTRACTION_FIELDS
        }
        return ExtractionRecord(**values)

    def _parse_fallback(self, raw_text: str) -> ExtractionRecord:
        extraction_fallback_total.inc()
        values: dict[str, str] = {}
        for field, pattern in _FIELD_PATTERNS.items():
            match = pattern.search(raw_text)
            if match:
                values[field] = match.group(1) if match.group(1) is not None else match.group(2)
            else:
                values[field] = UNKNOWN

        recovered = [field for field, value in values.items() if value != UNKNOWN]
        logger.info("extraction.fallback_recovered", fields=recovered)
        return ExtractionRecord(**values)
