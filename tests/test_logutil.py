import logging

import pytest

from logutil import SCAPY_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def restore_scapy_level():
    logger = logging.getLogger(SCAPY_LOGGER)
    saved = logger.level
    yield
    logger.setLevel(saved)


class TestSetupLogging:
    def test_scapy_quiet_outside_debug(self):
        assert setup_logging("info") == logging.INFO
        assert logging.getLogger(SCAPY_LOGGER).level == logging.ERROR

    def test_scapy_verbose_when_debugging(self):
        assert setup_logging("DEBUG") == logging.DEBUG
        assert logging.getLogger(SCAPY_LOGGER).level == logging.DEBUG

    def test_unknown_level_falls_back_to_debug(self):
        assert setup_logging("chatty") == logging.DEBUG
