"""Unit tests for identity and value normalization helpers."""

import json
import re
from datetime import date, datetime, timezone

import pytest

from utils.normalize import (
    INT64_MAX,
    coerce_float,
    coerce_int,
    cron_job_id,
    extract_kind,
    iso_date,
    message_id,
    new_gateway_id,
    session_id,
    to_canonical_json,
    to_epoch_seconds,
    to_text,
)

TEN_AM = int(datetime(2026, 2, 16, 10, 0, 0, tzinfo=timezone.utc).timestamp())


class TestToEpochSeconds:
    """Test cases for remote timestamp normalization."""

    @pytest.mark.parametrize(
        "value",
        [
            "2026-02-16T10:00:00Z",
            "2026-02-16T10:00:00.999Z",
            "2026-02-16T12:00:00+02:00",
            "2026-02-16T10:00:00",
        ],
    )
    def test_iso_strings(self, value: str) -> None:
        """ISO-8601 strings floor to whole seconds; a missing offset means UTC."""
        assert to_epoch_seconds(value) == TEN_AM

    def test_numbers_are_milliseconds(self) -> None:
        assert to_epoch_seconds(TEN_AM * 1000 + 999) == TEN_AM
        assert to_epoch_seconds(1999.5) == 1

    @pytest.mark.parametrize(
        "value", [None, "", "yesterday-ish", True, {"at": 1}, float("nan"), "1700000000", " 1700000000.5 ", 1e25, 10 ** 400]
    )
    def test_unusable_values_become_none(self, value) -> None:
        assert to_epoch_seconds(value) is None


class TestIdentity:
    """Test cases for derived identities."""

    def test_session_id_is_scoped_by_gateway(self) -> None:
        assert session_id("gw1", "main") == "gw1_main"
        assert session_id("gw1", "main") != session_id("gw2", "main")

    def test_cron_and_message_ids(self) -> None:
        assert cron_job_id("gw1", "job-7") == "gw1_job-7"
        assert message_id("gw1_main", 0) == "gw1_main_0"

    def test_new_gateway_id_format(self) -> None:
        gateway_id = new_gateway_id()
        assert re.fullmatch(r"gw_\d{13}_[a-z0-9]{9}", gateway_id)
        assert new_gateway_id() != gateway_id


class TestValueHelpers:
    """Test cases for payload serialization and coercion."""

    def test_canonical_json_is_key_sorted_and_compact(self) -> None:
        assert to_canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_to_text_keeps_strings_verbatim(self) -> None:
        assert to_text("  hello {not json}  ") == "  hello {not json}  "

    def test_to_text_serializes_structured_content(self) -> None:
        content = [{"type": "text", "text": "hi"}]
        text = to_text(content)
        assert isinstance(text, str)
        assert json.loads(text) == content

    def test_to_text_missing_content(self) -> None:
        assert to_text(None) == ""

    def test_extract_kind(self) -> None:
        assert extract_kind({"kind": "cron", "expr": "* * * * *"}) == "cron"
        assert extract_kind({"expr": "* * * * *"}) is None
        assert extract_kind("every 5m") is None

    def test_coercion_defaults_to_zero(self) -> None:
        assert coerce_int("42") == 42
        assert coerce_int(None) == 0
        assert coerce_int("many") == 0
        assert coerce_float("0.07") == 0.07
        assert coerce_float(None) == 0.0
        assert coerce_float(float("inf")) == 0.0

    def test_coerce_int_fits_sqlite_integer(self) -> None:
        assert coerce_int(1e20) == INT64_MAX
        assert coerce_int(-(10 ** 30)) == -INT64_MAX - 1
        assert coerce_int(float("inf")) == 0
        assert coerce_float(10 ** 400) == 0.0

    def test_iso_date(self) -> None:
        assert iso_date(date(2026, 2, 16)) == "2026-02-16"
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", iso_date())
