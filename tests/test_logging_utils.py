# tests/test_logging_utils.py
import json
import logging
import sys

from propkpi.adapters.logging_utils import JsonLogFormatter, ctx


def _record(msg, extra=None, exc_info=None):
    rec = logging.LogRecord("propkpi.test", logging.WARNING, __file__, 1, msg, None, exc_info)
    for k, v in (extra or {}).items():
        setattr(rec, k, v)
    return rec


def test_context_fields_are_merged():
    out = json.loads(JsonLogFormatter().format(_record("deal_model_parse_failed", ctx(property_id=7, error="bad"))))
    assert out["message"] == "deal_model_parse_failed"
    assert out["level"] == "WARNING"
    assert out["property_id"] == 7
    assert out["error"] == "bad"


def test_context_cannot_clobber_core_keys():
    out = json.loads(JsonLogFormatter().format(_record("real", ctx(message="fake", level="DEBUG"))))
    assert out["message"] == "real"
    assert out["level"] == "WARNING"
    assert out["ctx_message"] == "fake"
    assert out["ctx_level"] == "DEBUG"


def test_exceptions_and_odd_values_serialize():
    try:
        raise ZeroDivisionError("boom")
    except ZeroDivisionError:
        rec = _record("property_financials_failed", ctx(property_id=object()), exc_info=sys.exc_info())

    out = json.loads(JsonLogFormatter().format(rec))
    assert "ZeroDivisionError" in out["exc"]
    assert isinstance(out["property_id"], str)
