"""
Unit tests for ci_common.decode and ci_common.normalize.

Covers the whole-body decode errors (Tier 1) and the field fallback primitive.
"""

import pytest

from ci_common.decode import (
    DecodeError,
    as_float,
    as_int,
    as_str_list,
    as_timestamp,
    decode_field,
    parse_body,
)
from ci_common.models import JobResult, JobSummary, QueueStatus
from ci_common.normalize import EntityKind, decode_entity, decode_entity_list


class TestParseBody:
    """Test suite for parse_body."""

    def test_valid_json(self):
        assert parse_body('[{"job_id": "a"}]') == [{"job_id": "a"}]

    def test_invalid_json_raises(self):
        with pytest.raises(DecodeError, match="Invalid JSON"):
            parse_body("{not json")

    def test_empty_body_raises_by_default(self):
        with pytest.raises(DecodeError, match="Empty response body"):
            parse_body("")

    def test_empty_body_allowed(self):
        assert parse_body("   ", allow_empty=True) is None

    def test_decode_error_is_value_error(self):
        assert issubclass(DecodeError, ValueError)


class TestDecodeField:
    """Test suite for the decode-with-fallback primitive."""

    def test_first_convertible_key_wins(self):
        data = {"a": 1, "b": "two"}

        assert decode_field(data, ("a", "b"), lambda v: v if isinstance(v, str) else None) == "two"

    def test_default_when_nothing_converts(self):
        assert decode_field({}, "missing", as_int, 7) == 7

    def test_single_key_string(self):
        assert decode_field({"n": 3}, "n", as_int) == 3

    def test_converters(self):
        assert as_int(3) == 3
        assert as_int(3.0) is None
        assert as_float(2) == 2.0
        assert as_float(float("inf")) is None
        assert as_float("2.5") is None
        assert as_str_list(["a", "", 1, None, "b"]) == ("a", "b")
        assert as_str_list("a") is None
        assert as_timestamp("") is None
        assert as_timestamp(None) is None


class TestDecodeEntity:
    """Test suite for decode_entity."""

    def test_builds_each_kind(self):
        assert isinstance(decode_entity({}, EntityKind.JOB_SUMMARY), JobSummary)
        assert isinstance(decode_entity({}, EntityKind.QUEUE_STATUS), QueueStatus)
        assert isinstance(decode_entity({}, EntityKind.JOB_RESULT), JobResult)

    @pytest.mark.parametrize("payload", [[], "text", 3, None])
    def test_wrong_top_level_shape_raises(self, payload):
        with pytest.raises(DecodeError, match="Expected a JSON object"):
            decode_entity(payload, EntityKind.JOB_RESULT)

    def test_partially_malformed_payload_still_decodes(self):
        result = decode_entity(
            {"job_id": "j1", "messages": "oops", "duration_seconds": "slow"},
            EntityKind.JOB_RESULT,
        )

        assert result.id == "j1"
        assert result.messages == ()
        assert result.duration_seconds == 0.0


class TestDecodeEntityList:
    """Test suite for decode_entity_list."""

    def test_none_payload_is_empty(self):
        assert decode_entity_list(None, EntityKind.JOB_SUMMARY) == []

    def test_skips_non_object_items(self):
        jobs = decode_entity_list(
            [{"job_id": "a"}, "junk", 5, None, {"id": "b"}], EntityKind.JOB_SUMMARY
        )

        assert [job.id for job in jobs] == ["a", "b"]

    def test_non_list_payload_raises(self):
        with pytest.raises(DecodeError, match="Expected a JSON list"):
            decode_entity_list({"jobs": []}, EntityKind.JOB_SUMMARY)
