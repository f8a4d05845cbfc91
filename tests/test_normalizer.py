"""Unit tests for ResponseNormalizer.

Covers the strict JSON tier (with and without code fences), the per-key
pattern fallback, and the guarantee that extraction always yields all seven
keys.
"""

from __future__ import annotations

import pytest

from src.meeting_ai.ai.normalizer import ResponseNormalizer, strip_code_fence
from src.meeting_ai.ai.schemas import EXTRACTION_FIELDS, UNKNOWN, ExtractionRecord, TaskType


@pytest.fixture
def normalizer():
    return ResponseNormalizer()


class TestStripCodeFence:

    def test_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence_is_trimmed(self):
        assert strip_code_fence('  {"a": 1}  \n') == '{"a": 1}'


class TestStrictTier:

    def test_all_seven_keys(self, normalizer):
        raw = (
            '{"title": "Budget Review", "date": "2024-03-01", "time": "14:00", '
            '"location": "Boardroom", "client": "Acme Ltd", "project": "Apollo", '
            '"attendees": "Alice, Bob"}'
        )
        record = normalizer.normalize(TaskType.EXTRACT, raw)
        assert record == ExtractionRecord(
            title="Budget Review",
            date="2024-03-01",
            time="14:00",
            location="Boardroom",
            client="Acme Ltd",
            project="Apollo",
            attendees="Alice, Bob",
        )

    def test_partial_object_fills_unknown(self, normalizer):
        record = normalizer.normalize(
            TaskType.EXTRACT, '{"title":"Budget Review","date":"2024-03-01"}'
        )
        assert record.model_dump() == {
            "title": "Budget Review",
            "date": "2024-03-01",
            "time": UNKNOWN,
            "location": UNKNOWN,
            "client": UNKNOWN,
            "project": UNKNOWN,
            "attendees": UNKNOWN,
        }

    def test_fenced_object(self, normalizer):
        raw = '```json\n{"title": "Kickoff", "client": "Acme Ltd", "time": "09:30"}\n```'
        record = normalizer.normalize(TaskType.EXTRACT, raw)
        assert record.title == "Kickoff"
        assert record.client == "Acme Ltd"
        assert record.time == "09:30"
        assert record.location == UNKNOWN

    def test_explicit_null_is_kept(self, normalizer):
        record = normalizer.normalize(TaskType.EXTRACT, '{"title": "Sync", "location": null}')
        assert record.location is None
        assert record.project == UNKNOWN

    def test_list_attendees_are_joined(self, normalizer):
        record = normalizer.normalize(
            TaskType.EXTRACT, '{"attendees": ["Alice", "Bob"], "title": "Review"}'
        )
        assert record.attendees == "Alice, Bob"

    def test_extra_keys_are_dropped(self, normalizer):
        record = normalizer.normalize(TaskType.EXTRACT, '{"title": "Sync", "mood": "good"}')
        assert set(record.model_dump()) == set(EXTRACTION_FIELDS)


class TestFallbackTier:

    def test_recovers_pairs_from_truncated_json(self, normalizer):
        raw = '{"title": "Quarterly Planning", "date": "2024-05-02", "client": "Glob'
        record = normalizer.normalize(TaskType.EXTRACT, raw)
        assert record.title == "Quarterly Planning"
        assert record.date == "2024-05-02"
        assert record.client == UNKNOWN

    def test_recovers_pairs_from_surrounding_prose(self, normalizer):
        raw = 'Here you go: "title": "Design Review", and "location": "Room 4"'
        record = normalizer.normalize(TaskType.EXTRACT, raw)
        assert record.title == "Design Review"
        assert record.location == "Room 4"
        assert record.attendees == UNKNOWN

    def test_single_quoted_pairs(self, normalizer):
        raw = "{'title': 'Weekly Sync', 'client': 'Globex'}"
        record = normalizer.normalize(TaskType.EXTRACT, raw)
        assert record.title == "Weekly Sync"
        assert record.client == "Globex"
        assert record.project == UNKNOWN

    def test_first_match_wins(self, normalizer):
        raw = '"title": "First", "title": "Second" oops'
        assert normalizer.normalize(TaskType.EXTRACT, raw).title == "First"

    def test_prose_without_pairs_is_all_unknown(self, normalizer):
        record = normalizer.normalize(TaskType.EXTRACT, "I could not find any meeting details.")
        assert record == ExtractionRecord()
        assert all(value == UNKNOWN for value in record.model_dump().values())

    @pytest.mark.parametrize("raw", ["", "   ", "[1, 2, 3]", '"just a string"', "null"])
    def test_non_object_output_never_raises(self, normalizer, raw):
        record = normalizer.normalize(TaskType.EXTRACT, raw)
        assert isinstance(record, ExtractionRecord)
        assert len(record.model_dump()) == 7

    def test_deeply_nested_output_falls_back(self, normalizer):
        raw = "[" * 200_000 + "]" * 200_000
        record = normalizer.normalize(TaskType.EXTRACT, raw)
        assert record == ExtractionRecord()


class TestTextTasks:

    @pytest.mark.parametrize("task_type", [TaskType.SUMMARIZE, TaskType.QUERY])
    def test_text_is_trimmed(self, normalizer, task_type):
        assert normalizer.normalize(task_type, "\n  # Summary\nBody  \n") == "# Summary\nBody"

    def test_json_looking_summary_is_not_parsed(self, normalizer):
        assert normalizer.normalize(TaskType.SUMMARIZE, '{"title": "x"}') == '{"title": "x"}'
