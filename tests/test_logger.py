import json
import logging

from playerzero.logger import JsonFormatter


def test_json_formatter_fields():
    record = logging.LogRecord(
        "playerzero.test", logging.WARNING, __file__, 1, "audit: %s", ("free mode on",), None
    )
    data = json.loads(JsonFormatter().format(record))
    assert data["level"] == "warning"
    assert data["logger"] == "playerzero.test"
    assert data["message"] == "audit: free mode on"
    assert "exc" not in data


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        import sys

        record = logging.LogRecord(
            "playerzero.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )
    data = json.loads(JsonFormatter().format(record))
    assert "ValueError: boom" in data["exc"]


def test_json_formatter_context_fields():
    record = logging.LogRecord(
        "playerzero.test", logging.INFO, __file__, 1, "stats updated", (), None
    )
    record.user_id = 7
    record.period = "week"
    data = json.loads(JsonFormatter().format(record))
    assert data["user_id"] == 7
    assert data["period"] == "week"
    assert "tier" not in data
