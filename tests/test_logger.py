# File: tests/test_logger.py
import logging

import pytest

from page_scout.logger import adopt_aiohttp_loggers, configure, for_target, init_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    init_logging()


def test_target_adapter_prefixes_messages():
    msg, kwargs = for_target("https://example.com/").process("Analysis started", {})
    assert msg == "[https://example.com/] Analysis started"
    assert kwargs == {}


def test_configure_writes_logfile(tmp_path):
    log_file = tmp_path / "scout.log"
    lg = configure(level="DEBUG", log_file=log_file)
    for_target("https://example.com/").debug("probe %s done", "sitemap")
    for handler in lg.handlers:
        handler.flush()
    assert "[https://example.com/] probe sitemap done" in log_file.read_text(encoding="utf-8")
    assert len(lg.handlers) == 2
    assert lg.propagate is False


def test_reconfigure_replaces_handlers(tmp_path):
    configure(log_file=tmp_path / "a.log")
    lg = configure(level="ERROR")
    assert len(lg.handlers) == 1
    assert lg.level == logging.ERROR


def test_aiohttp_loggers_share_handlers():
    lg = configure(level="INFO")
    adopt_aiohttp_loggers()
    access = logging.getLogger("aiohttp.access")
    assert access.handlers == lg.handlers
    assert access.level == logging.INFO
    assert access.propagate is False
