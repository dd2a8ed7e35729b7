"""Tests for logging setup and ContextualLogger."""

import logging

from flowfit.log_config.logger import ContextualLogger, setup_logging


class TestSetupLogging:
    def test_file_handler_created(self, tmp_path):
        setup_logging("DEBUG", str(tmp_path))
        try:
            logging.getLogger("flowfit.test").info("hello file")
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "hello file" in (tmp_path / "flowfit.log").read_text(encoding="utf-8")
            assert logging.getLogger("urllib3").level == logging.WARNING
        finally:
            setup_logging("INFO", None)

    def test_console_only(self):
        setup_logging("WARNING", None)
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        setup_logging("INFO", None)


class TestContextualLogger:
    def test_prefix_and_bind(self, caplog):
        log = ContextualLogger(logging.getLogger("flowfit.ctx"), user="u-1")
        with caplog.at_level(logging.INFO, logger="flowfit.ctx"):
            log.info("Paused with %d ms left", 5)
            log.bind(phase="recovery").warning("late")

        assert caplog.messages == [
            "[user=u-1] Paused with 5 ms left",
            "[user=u-1] [phase=recovery] late",
        ]
