from __future__ import annotations

import json
import logging
from io import StringIO
from typing import TYPE_CHECKING

import pytest

from waterfalls_client.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def stream_logger() -> Generator[tuple[logging.Logger, StringIO], None, None]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger("tests.structured_logging")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger, stream
    logger.removeHandler(handler)
    logger.propagate = True
    clear_correlation_id()


##############################################
#     Tests for correlation ID management    #
##############################################


def test_get_correlation_id_initially_none() -> None:
    """Test that correlation ID is initially None."""
    clear_correlation_id()
    assert get_correlation_id() is None


def test_set_and_clear_correlation_id() -> None:
    set_correlation_id("sync-123")
    assert get_correlation_id() == "sync-123"
    clear_correlation_id()
    assert get_correlation_id() is None


def test_correlation_id_context_manager_restores_previous_value() -> None:
    set_correlation_id("outer")
    with correlation_id("inner"):
        assert get_correlation_id() == "inner"
    assert get_correlation_id() == "outer"
    clear_correlation_id()


##########################################
#     Tests for StructuredFormatter      #
##########################################


def test_structured_formatter_outputs_json(
    stream_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = stream_logger
    logger.info("tip fetched")
    data = json.loads(stream.getvalue())
    assert data["message"] == "tip fetched"
    assert data["level"] == "INFO"
    assert data["logger"] == "tests.structured_logging"
    assert data["timestamp"].endswith("Z")
    assert "correlation_id" not in data


def test_structured_formatter_includes_correlation_id(
    stream_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = stream_logger
    with correlation_id("wallet-sync"):
        logger.info("query")
    assert json.loads(stream.getvalue())["correlation_id"] == "wallet-sync"


def test_structured_formatter_includes_exception(
    stream_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = stream_logger
    try:
        msg = "boom"
        raise ValueError(msg)
    except ValueError:
        logger.exception("failed")
    assert "ValueError: boom" in json.loads(stream.getvalue())["exception"]


def test_structured_formatter_serializes_unknown_values(
    stream_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = stream_logger
    logger.info("odd value", extra={"payload": frozenset()})
    assert json.loads(stream.getvalue())["payload"] == "frozenset()"


##################################
#     Tests for log_structured    #
##################################


def test_log_structured_adds_fields(stream_logger: tuple[logging.Logger, StringIO]) -> None:
    logger, stream = stream_logger
    log_structured(
        logger,
        logging.DEBUG,
        "will retry",
        url="https://waterfalls.example.com/api/blocks/tip/hash",
        attempt=2,
        delay=0.512,
        status_code=None,
    )
    data = json.loads(stream.getvalue())
    assert data["message"] == "will retry"
    assert data["attempt"] == 2
    assert data["delay"] == 0.512
    assert "status_code" not in data


def test_log_structured_skips_disabled_level(
    stream_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = stream_logger
    logger.setLevel(logging.WARNING)
    log_structured(logger, logging.DEBUG, "hidden", attempt=1)
    assert stream.getvalue() == ""
