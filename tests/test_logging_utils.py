import logging

import colorlog
from rich.logging import RichHandler

from spectra_pipeline.config import Config
from spectra_pipeline.utils.logging_utils import LogTimer, get_logger, setup_logging


def test_setup_is_idempotent(restore_root_logging):
    root = setup_logging(level="WARNING", log_to_file=False)
    assert root is logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)

    setup_logging(level="DEBUG")
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1


def test_colorlog_console_and_file(restore_root_logging, tmp_path):
    root = setup_logging(level="DEBUG", log_dir=tmp_path / "logs", use_rich=False)
    assert isinstance(root.handlers[0].formatter, colorlog.ColoredFormatter)

    get_logger("spectra_pipeline.test").info("hello file")
    for handler in root.handlers:
        handler.flush()

    log_file = tmp_path / "logs" / "spectra_pipeline.log"
    assert "hello file" in log_file.read_text(encoding="utf-8")


def test_config_setup_logging(restore_root_logging):
    config = Config.from_dict({"logging": {"level": "error", "log_to_console": False}})
    root = config.setup_logging()
    assert root.level == logging.ERROR
    assert root.handlers == []


def test_log_timer(caplog):
    logger = get_logger("spectra_pipeline.timer")
    with caplog.at_level(logging.DEBUG, logger="spectra_pipeline.timer"):
        with LogTimer(logger, "work", level=logging.DEBUG) as timer:
            sum(range(100))
    assert timer.elapsed >= 0
    assert "[TIMER] work:" in caplog.text


def test_level_names(restore_root_logging):
    root = setup_logging(level="loud", log_to_console=False)
    assert root.level == logging.INFO
    assert logging.getLogger("joblib").level == logging.WARNING
