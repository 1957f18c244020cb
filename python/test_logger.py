#!/usr/bin/env python3
"""ロガーのテスト"""
import logging

from s3_transfer_manager.models.config import LoggingConfig
from s3_transfer_manager.utils.logger import LOGGER_NAME, LoggerManager


def test_get_logger_before_setup():
    """setup 前でもパッケージロガーを返す"""
    logger = LoggerManager.get_logger()

    assert logger.name == LOGGER_NAME


def test_logger_writes_to_file(tmp_path):
    """ファイルハンドラーにも出力される"""
    log_file = tmp_path / "logs" / "transfer.log"
    logger = LoggerManager.setup(LoggingConfig(level="debug", file=str(log_file)))

    logger.debug("debug message")
    logger.info("transfer finished")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert LoggerManager.get_logger() is logger
    content = log_file.read_text(encoding="utf-8")
    assert "debug message" in content
    assert "INFO - transfer finished" in content


def test_setup_is_done_once():
    first = LoggerManager.setup(LoggingConfig(level="WARNING"))
    second = LoggerManager.setup(LoggingConfig(level="DEBUG"))

    assert first is second
    assert second.level == logging.WARNING
