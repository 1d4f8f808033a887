import json
import logging

import pytest
from pythonjsonlogger.json import JsonFormatter

from music_library.api.logging_config import _JsonFormatter, configure_logging, request_id_var


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _lines(capsys, marker):
    return [line for line in capsys.readouterr().out.splitlines() if marker in line]


def test_json_lines_carry_request_id(capsys):
    configure_logging("info", "json")
    token = request_id_var.set("req-7")
    try:
        logging.getLogger("music_library.test").info("track_played: id=%s", 3)
    finally:
        request_id_var.reset(token)

    (line,) = _lines(capsys, "track_played")
    record = json.loads(line)
    assert record["message"] == "track_played: id=3"
    assert record["level"] == "INFO"
    assert record["logger"] == "music_library.test"
    assert record["request_id"] == "req-7"
    assert "timestamp" in record


def test_json_formatter_uses_current_module():
    assert issubclass(_JsonFormatter, JsonFormatter)


def test_console_format_and_level(capsys):
    configure_logging("warn", "console")
    log = logging.getLogger("music_library.test")
    log.info("quiet_event")
    log.warning("loud_event: n=%d", 1)

    out = capsys.readouterr().out
    assert "quiet_event" not in out
    assert "WARNING" in out and "loud_event: n=1" in out
