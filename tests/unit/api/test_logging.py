"""Tests for the loguru setup."""

import logging

import pytest
from loguru import logger

from src.catalog import __version__
from src.catalog.api.utils.app_startup import SERVICE_NAME, configure_logging


@pytest.fixture
def records():
    configure_logging()
    captured = []
    sink_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(sink_id)


def test_records_carry_service_identity(records):
    logger.info("catalog ready")

    extra = records[-1]["extra"]
    assert extra["service"] == SERVICE_NAME
    assert extra["version"] == __version__
    assert extra["request_id"] == "-"


def test_request_context_overrides_default_request_id(records):
    with logger.contextualize(request_id="req-42"):
        logger.info("inside request")

    assert records[-1]["extra"]["request_id"] == "req-42"
    assert records[-1]["extra"]["service"] == SERVICE_NAME


def test_stdlib_records_are_forwarded(records):
    logging.getLogger("catalog.tests").warning("from the standard library")

    forwarded = [r for r in records if r["message"] == "from the standard library"]
    assert forwarded
    assert forwarded[0]["extra"]["logger_name"] == "catalog.tests"
    assert forwarded[0]["level"].name == "WARNING"


def test_http_client_noise_is_quiet(records):
    assert logging.getLogger("httpx").getEffectiveLevel() == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").getEffectiveLevel() == logging.WARNING
