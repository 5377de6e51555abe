import logging
from unittest.mock import patch

import pytest
from calltrace.core.invocation import InvocationRecord
from calltrace.core.logging import (
    DEFAULT_LOG_LEVEL,
    NOISY_LIBRARIES,
    log_invocation_state,
    resolve_log_level,
    setup_logging,
)
from calltrace.core.operation import Operation


# Ensure clean logging state between tests
@pytest.fixture(autouse=True)
def reset_logging():
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    root.handlers.clear()

    yield

    root.handlers.clear()
    root.handlers.extend(original_handlers)
    root.setLevel(original_level)


@patch("calltrace.core.logging.Settings")
def test_setup_logging_default_level(MockSettings):
    """Test setup_logging configures logging with default level and quiets noisy libraries."""
    mock_settings_instance = MockSettings.return_value
    mock_settings_instance.get_log_level.return_value = DEFAULT_LOG_LEVEL

    setup_logging()

    root_logger = logging.getLogger()
    assert root_logger.level == logging.INFO
    assert len(root_logger.handlers) >= 1  # At least console handler
    assert isinstance(root_logger.handlers[0], logging.StreamHandler)

    for lib_name in NOISY_LIBRARIES:
        assert logging.getLogger(lib_name).level == logging.WARNING


@patch("calltrace.core.logging.Settings")
def test_setup_logging_specific_level(MockSettings):
    """Test setup_logging uses the level provided by settings."""
    MockSettings.return_value.get_log_level.return_value = "DEBUG"

    setup_logging()

    assert logging.getLogger().level == logging.DEBUG


@patch("calltrace.core.logging.Settings")
def test_setup_logging_invalid_level(MockSettings, capsys):
    """Test setup_logging defaults to INFO and warns on invalid level."""
    invalid_level = "INVALID_LEVEL"
    MockSettings.return_value.get_log_level.return_value = invalid_level

    setup_logging()

    captured = capsys.readouterr()
    assert f"WARNING: Invalid LOG_LEVEL '{invalid_level}'" in captured.err
    assert logging.getLogger().level == logging.INFO


@pytest.mark.parametrize(
    "name, expected",
    [("debug", logging.DEBUG), ("INFO", logging.INFO), ("Error", logging.ERROR), ("loud", logging.INFO)],
)
def test_resolve_log_level(name, expected):
    assert resolve_log_level(name) == expected


def test_resolve_log_level_custom_default():
    assert resolve_log_level("nope", default=logging.WARNING) == logging.WARNING


class Catalog:
    def find(self, sku: str): ...


def test_log_invocation_state(caplog):
    record = InvocationRecord.create(Operation.for_method(Catalog, Catalog.find), ["sku-1"])

    with caplog.at_level(logging.DEBUG, logger="calltrace.client.dispatch"):
        log_invocation_state(record, "created", {"method": "GET"})

    assert len(caplog.records) == 1
    log_record = caplog.records[0]
    assert log_record.name == "calltrace.client.dispatch"
    assert log_record.stage == "created"
    assert log_record.operation == f"{__name__}.Catalog.find"
    assert log_record.argument_count == 1
    assert log_record.method == "GET"
    assert "Invocation created" in log_record.getMessage()
