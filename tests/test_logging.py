import logging

import pytest

from booking_core.utils.my_logging import APP_LOGGER, BOOKING_LOGGERS, NOISY_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_levels():
    names = [APP_LOGGER, *BOOKING_LOGGERS, *NOISY_LOGGERS]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_booking_warnings_survive_a_quiet_log_level():
    setup_logging("error")

    assert logging.getLogger(APP_LOGGER).level == logging.ERROR
    assert logging.getLogger("booking_core.services.reservation").isEnabledFor(logging.WARNING)
    assert not logging.getLogger("booking_core.services.availability").isEnabledFor(logging.WARNING)
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_debug_level_opens_everything():
    setup_logging("DEBUG")

    assert logging.getLogger("booking_core.services.reservation").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG


def test_unknown_level_falls_back_to_info():
    setup_logging("chatty")

    assert logging.getLogger(APP_LOGGER).level == logging.INFO
    assert logging.getLogger("booking_core.services.settings").level == logging.WARNING
