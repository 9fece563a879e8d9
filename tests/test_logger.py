import logging

import pytest

from mail_relay.logger import ERROR_LOG_NAME, INFO_LOG_NAME, configure_logging, get_logger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_get_logger_reuses_existing_logger():
    logger = get_logger("TestLogger")
    handler_count = len(logger.handlers)

    same_logger = get_logger("TestLogger")
    assert logger is same_logger
    assert len(same_logger.handlers) == handler_count


def test_info_and_error_files(tmp_path, restore_root_logger):
    log_dir = tmp_path / "logs"
    configure_logging("INFO", str(log_dir))

    logger = get_logger("FileLoggingTest")
    logger.info("request received")
    logger.error("dispatch failed")
    for handler in logging.getLogger().handlers:
        handler.flush()

    info_text = (log_dir / INFO_LOG_NAME).read_text()
    error_text = (log_dir / ERROR_LOG_NAME).read_text()
    assert "[INFO] request received" in info_text
    assert "[ERROR] dispatch failed" in info_text
    assert "dispatch failed" in error_text
    assert "request received" not in error_text


def test_console_only_without_log_dir(restore_root_logger):
    configure_logging("warning")

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert not any(isinstance(handler, logging.FileHandler) for handler in root.handlers)
