import logging
from pathlib import Path

import pytest

from mbop import util


@pytest.fixture
def clean_logger():
    yield
    logger = logging.getLogger(util.LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _file_paths(logger):
    return [
        Path(handler.baseFilename).resolve()
        for handler in logger.handlers
        if isinstance(handler, logging.FileHandler)
    ]


def test_short_text_is_unchanged():
    assert util.elliptical_truncate("short", 40) == "short"


def test_text_of_exact_length_is_unchanged():
    text = "a" * 10
    assert util.elliptical_truncate(text, 10) == text


def test_truncates_at_last_space():
    assert util.elliptical_truncate("hello world foo", 8) == "hello..."


def test_truncates_at_limit_without_space():
    assert util.elliptical_truncate("abcdefghij", 4) == "abcd..."


def test_truncated_result_is_prefix_plus_ellipsis():
    text = "the quick brown fox jumps over the lazy dog and keeps running far away"
    result = util.elliptical_truncate(text, 40)
    assert result.endswith("...")
    assert text.startswith(result[:-3])
    assert len(result) - 3 <= 40


def test_banner_mentions_name():
    assert "Merry Band of Pirates - Multi Agent Automation" in util.banner()


def test_print_banner_writes_banner(capsys):
    util.print_banner()
    assert capsys.readouterr().out == util.banner() + "\n"


def test_setup_logging_creates_default_file(tmp_path, monkeypatch, clean_logger):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DISABLE_LOG_FILE", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)
    logger = util.setup_logging("mbop")
    log_path = tmp_path / "logs" / "mbop.log"
    assert len(logger.handlers) == 2
    assert _file_paths(logger) == [log_path.resolve()]
    logger.info("first entry")
    for handler in logger.handlers:
        handler.flush()
    assert log_path.exists()
    assert "first entry" in log_path.read_text(encoding="utf-8")


def test_setup_logging_respects_log_file(tmp_path, monkeypatch, clean_logger):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "custom.log"
    monkeypatch.delenv("DISABLE_LOG_FILE", raising=False)
    monkeypatch.setenv("LOG_FILE", str(target))
    logger = util.setup_logging("mbop")
    assert _file_paths(logger) == [target.resolve()]
    logger.warning("custom entry")
    for handler in logger.handlers:
        handler.flush()
    assert "custom entry" in target.read_text(encoding="utf-8")
    assert not (tmp_path / "logs").exists()


def test_setup_logging_can_disable_file(tmp_path, monkeypatch, clean_logger):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DISABLE_LOG_FILE", "true")
    logger = util.setup_logging("mbop")
    assert not (tmp_path / "logs").exists()
    assert len(logger.handlers) == 1


def test_setup_logging_replaces_handlers(tmp_path, monkeypatch, clean_logger):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DISABLE_LOG_FILE", "1")
    util.setup_logging("mbop")
    logger = util.setup_logging("mbop")
    assert len(logger.handlers) == 1