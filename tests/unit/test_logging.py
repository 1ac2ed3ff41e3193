"""
Unit tests for logging context helpers.
"""

import logging

from studygen.core.logging import ContextFilter, log_context
from studygen.modules.artifacts.models import ArtifactKind


def test_filter_fills_missing_context():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)

    assert ContextFilter().filter(record)
    assert record.session == "-"
    assert record.artifact == "-"


def test_filter_keeps_given_context():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
    record.artifact = "quiz"

    ContextFilter().filter(record)

    assert record.artifact == "quiz"


def test_log_context_uses_enum_values():
    assert log_context("abc#1", ArtifactKind.MATCHING) == {"session": "abc#1", "artifact": "matching"}
    assert log_context() == {"session": "-", "artifact": "-"}
