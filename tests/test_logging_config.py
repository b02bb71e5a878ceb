from __future__ import annotations

import json
import logging

import pytest

from repoquery.logging_config import (
    JsonLogFormatter,
    configure_logging,
    format_log_fields,
    log_with_fields,
    normalize_log_level,
)
from repoquery.settings import Settings


def test_format_log_fields_escapes_control_characters() -> None:
    fields = format_log_fields(entity="User\nforged", note="a\rb\tc\x00")

    assert "entity=User\\nforged" in fields
    assert "note=a\\rb\\tc\\x00" in fields
    assert "\n" not in fields.replace("\\n", "")
    assert "\r" not in fields.replace("\\r", "")


def test_format_log_fields_sorts_keys_and_skips_none() -> None:
    assert format_log_fields(rows=3, operation="list", ordering=None) == "operation=list rows=3"


def test_log_with_fields_appends_fields_to_message(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("repoquery.tests")
    caplog.set_level(logging.INFO, logger="repoquery.tests")

    log_with_fields(logger, logging.INFO, "query completed", operation="count", total=7)
    log_with_fields(logger, logging.INFO, "bare message")

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["query completed operation=count total=7", "bare message"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("debug", "DEBUG"), (" Warning ", "WARNING"), ("verbose", "INFO"), ("", "INFO")],
)
def test_normalize_log_level(raw: str, expected: str) -> None:
    assert normalize_log_level(raw) == expected


def test_json_log_formatter_emits_one_json_object() -> None:
    record = logging.LogRecord(
        name="repoquery.queries",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="query failed %s",
        args=("operation=list",),
        exc_info=None,
    )

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "repoquery.queries"
    assert payload["message"] == "query failed operation=list"
    assert "timestamp" in payload


def test_configure_logging_sets_levels_from_settings() -> None:
    configure_logging(Settings(log_level="WARNING", log_queries=False))

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("repoquery.queries").getEffectiveLevel() == logging.WARNING

    configure_logging(Settings(log_level="WARNING", log_queries=True))

    assert logging.getLogger("repoquery.queries").getEffectiveLevel() == logging.DEBUG
