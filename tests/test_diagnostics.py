"""Tests for the diagnostics sink."""

import logging

from algloop.core.status import LogCategory
from algloop.utils.diagnostics import Diagnostics


def test_records_are_timestamped_and_structured():
    """Test record fields."""
    diagnostics = Diagnostics()

    diagnostics.debug("hello", LogCategory.NLS, iteration=3)

    (record,) = diagnostics.records
    assert record.message == "hello"
    assert record.level == logging.DEBUG
    assert record.category == LogCategory.NLS
    assert record.data == {"iteration": 3}
    assert record.timestamp > 0


def test_vector_format():
    """Vectors are written as name = {v0, v1}."""
    diagnostics = Diagnostics()

    diagnostics.vector("y", [1.5, 2.0])

    assert list(diagnostics.messages()) == ["y = {1.5, 2.0}"]
    assert diagnostics.records[0].data["values"] == [1.5, 2.0]


def test_min_level_filters():
    """Records below min_level are dropped."""
    diagnostics = Diagnostics(min_level=logging.WARNING)

    diagnostics.debug("skipped")
    diagnostics.vector("y", [1.0])
    diagnostics.warning("kept")

    assert list(diagnostics.messages()) == ["kept"]


def test_forwarded_to_logger(caplog):
    """Records also reach the standard logger."""
    diagnostics = Diagnostics(logging.getLogger("test.diagnostics"))

    with caplog.at_level(logging.WARNING, logger="test.diagnostics"):
        diagnostics.warning("analytic Jacobian failed", LogCategory.LS)

    assert "[LS] analytic Jacobian failed" in caplog.text


def test_instances_do_not_share_records():
    """No process-wide record store."""
    first, second = Diagnostics(), Diagnostics()

    first.debug("only here")

    assert second.records == []
    first.clear()
    assert first.records == []
