"""Tests for the JSON log formatter."""
import json
import logging

from egzamin8.core.config import settings
from egzamin8.core.logging import JsonFormatter


def _record(msg, **extra):
    record = logging.LogRecord("egzamin8.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_payload_carries_env_and_whitelisted_extra():
    line = JsonFormatter().format(
        _record("callback_processed", granted_id="pakiet", unlocked=("matematyka", "polski"), secret="x")
    )
    payload = json.loads(line)
    assert payload["message"] == "callback_processed"
    assert payload["level"] == "INFO"
    assert payload["env"] == settings.app_env
    assert payload["granted_id"] == "pakiet"
    assert payload["unlocked"] == ["matematyka", "polski"]
    assert "secret" not in payload


def test_polish_text_is_not_escaped():
    line = JsonFormatter().format(_record("katalog", product_id="język"))
    assert "język" in line
