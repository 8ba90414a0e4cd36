import json
import logging

from apollo_chat.logging import JsonFormatter


def test_json_formatter_keeps_extra_fields() -> None:
    record = logging.LogRecord("apollo", logging.WARNING, __file__, 1, "failed %s", ("call",), None)
    record.status_code = 429

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "failed call"
    assert payload["level"] == "WARNING"
    assert payload["status_code"] == 429
    assert "pathname" not in payload
    assert "args" not in payload
