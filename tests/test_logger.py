"""Tests for the logging wrapper."""

import logging
from unittest.mock import patch

import pytest

import crossrepo.logger as logger_module
from crossrepo.logger import Logger, get_logger, setup_global_logging
from crossrepo.settings import settings


@pytest.fixture
def unconfigured():
    logger_module._configured = False
    yield
    logger_module._configured = False


class TestSetupGlobalLogging:
    @pytest.mark.parametrize(
        "level,expected",
        [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), ("CRITICAL", logging.CRITICAL), ("bogus", logging.INFO)],
    )
    def test_level(self, unconfigured, level, expected):
        with patch("logging.basicConfig") as basic_config:
            setup_global_logging(level)
        assert basic_config.call_args.kwargs["level"] == expected

    def test_configures_once(self, unconfigured):
        with patch("logging.basicConfig") as basic_config:
            setup_global_logging()
            setup_global_logging("DEBUG")
        basic_config.assert_called_once()

    def test_logger_triggers_setup(self, unconfigured):
        with patch("crossrepo.logger.setup_global_logging") as setup:
            Logger("x")
        setup.assert_called_once_with(settings.LOG_LEVEL)


class TestLogger:
    @pytest.fixture
    def logger(self):
        return get_logger("crossrepo.tests")

    def test_name(self, logger):
        assert logger.name == "crossrepo.tests"

    @pytest.mark.parametrize("method", ["debug", "info", "warning", "error", "critical"])
    def test_delegates(self, logger, method):
        with patch.object(logger._logger, method) as target:
            getattr(logger, method)("hello %s", "ana")
        target.assert_called_once_with("hello %s", "ana")

    @pytest.mark.parametrize("level", ["", "INFO"])
    def test_message_at_info(self, logger, level):
        with patch.object(settings, "LOG_LEVEL", level), patch.object(logger, "info") as info:
            logger.message("stored")
        info.assert_called_once_with("stored")

    def test_message_at_configured_level(self, logger):
        with patch.object(settings, "LOG_LEVEL", "warning"), patch.object(logger._logger, "log") as log:
            logger.message("stored")
        assert log.call_args.args[0] == logging.WARNING

    def test_event_formats_fields(self, logger):
        with patch.object(logger, "message") as message:
            logger.event("update_one", id=3, fields=["name"])
        message.assert_called_once_with("%s %s", "update_one", "id=3 fields=['name']")

    def test_event_without_fields(self, logger):
        with patch.object(logger, "message") as message:
            logger.event("get_all")
        message.assert_called_once_with("%s", "get_all")
