import json
import logging
import re

from hybridserve.logging_config import ConsoleFormatter, JsonFormatter, log


def _record(msg="hello", **extra):
    record = logging.LogRecord("hybridserve.http", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_console_format_uses_twelve_hour_clock_and_source():
    line = ConsoleFormatter().format(_record("GET /api/x 200 in 3ms", source="http"))

    assert re.fullmatch(r"\d{1,2}:\d{2}:\d{2} (AM|PM) \[http\] GET /api/x 200 in 3ms", line)


def test_console_format_falls_back_to_logger_name():
    line = ConsoleFormatter().format(_record())

    assert "[hybridserve.http] hello" in line


def test_json_format_carries_component_and_env(monkeypatch):
    monkeypatch.setenv("ENV", "production")

    payload = json.loads(JsonFormatter().format(_record(source="server", meta={"port": 5000})))

    assert payload["level"] == "INFO"
    assert payload["component"] == "server"
    assert payload["msg"] == "hello"
    assert payload["env"] == "production"
    assert payload["meta"] == {"port": 5000}
    assert "timestamp" in payload


def test_log_helper_routes_by_source(caplog):
    caplog.set_level(logging.INFO)

    log("Server listening on port 5000", source="server")
    log("GET /api/x 200 in 1ms")

    by_name = {(r.name, r.source) for r in caplog.records}
    assert ("hybridserve.server", "server") in by_name
    assert ("hybridserve.http", "http") in by_name
