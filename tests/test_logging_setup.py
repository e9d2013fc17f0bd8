"""Tests for logging configuration."""

import logging

from carpool_map.config import ObservabilityConfig
from carpool_map.logging_setup import ExtraFieldsFormatter, configure_logging


def test_extra_fields_appended():
    formatter = ExtraFieldsFormatter("%(message)s")
    record = logging.LogRecord("carpool_map.x", logging.INFO, __file__, 1, "Saved", None, None)
    record.entity_id = "c1"
    record.fields = ["departure_lat"]
    assert formatter.format(record) == "Saved | entity_id='c1' fields=['departure_lat']"


def test_plain_record_unchanged():
    formatter = ExtraFieldsFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("carpool_map.x", logging.WARNING, __file__, 1, "Hi", None, None)
    assert formatter.format(record) == "WARNING Hi"


def test_configure_replaces_handler():
    configure_logging(ObservabilityConfig(level="debug", structured=True))
    configure_logging(ObservabilityConfig(level="warning"))
    logger = logging.getLogger("carpool_map")
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    assert not isinstance(logger.handlers[0].formatter, ExtraFieldsFormatter)
