import json
import logging

from app.core.logging import JsonFormatter, configure_logging


def test_root_handlers_emit_json():
    configure_logging("INFO")
    handlers = logging.getLogger().handlers
    assert handlers
    assert all(isinstance(h.formatter, JsonFormatter) for h in handlers)

def test_json_formatter_fields():
    record = logging.LogRecord("app.test", logging.WARNING, __file__, 1, "backing off %ss", (30,), None)
    line = json.loads(JsonFormatter().format(record))
    assert line["level"] == "WARNING"
    assert line["logger"] == "app.test"
    assert line["msg"] == "backing off 30s"
    assert "exc" not in line
