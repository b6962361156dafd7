import json
import logging

from reflim.utils.logging import ContextFilter, JSONFormatter


def test_json_formatter_includes_context_fields():
    record = logging.LogRecord("reflim.test", logging.WARNING, __file__, 1, "trimmed %d values", (5,), None)
    ContextFilter(run_id="run-1", component="truncation").filter(record)
    record.analyte = "alt"
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "trimmed 5 values"
    assert payload["level"] == "WARNING"
    assert payload["run_id"] == "run-1"
    assert payload["component"] == "truncation"
    assert payload["analyte"] == "alt"
    assert payload["timestamp"].endswith("Z")


def test_context_filter_keeps_explicit_values():
    record = logging.LogRecord("reflim.test", logging.INFO, __file__, 1, "msg", (), None)
    record.component = "pipeline"
    ContextFilter(component="cli").filter(record)
    assert record.component == "pipeline"


def test_json_formatter_includes_diagnostic_fields():
    record = logging.LogRecord("reflim.test", logging.ERROR, __file__, 1, "Estimation failed for hb", (), None)
    record.error = "Need at least 100 finite values, got 12"
    record.r_squared = 0.998
    payload = json.loads(JSONFormatter().format(record))
    assert payload["error"] == "Need at least 100 finite values, got 12"
    assert payload["r_squared"] == 0.998
