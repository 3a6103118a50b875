"""Tests for logging setup and command-line parsing."""

import io
import json
import logging
import sys

import pytest

from json_workbench.main import parse_args
from json_workbench.models.errors import MalformedPath
from json_workbench.utils.logging_config import JSONFormatter, log_error_with_context, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogging:
    """Tests for setup_logging and the JSON formatter."""

    def test_console_only(self, restore_root_logger):
        stream = io.StringIO()
        summary = setup_logging("debug", stream=stream)
        assert summary == {"log_level": "DEBUG", "log_file": None, "json_logging": False, "handlers_count": 1}

        logging.getLogger("json_workbench.test").debug("hello")
        assert "json_workbench.test - DEBUG - hello" in stream.getvalue()

    def test_rotating_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "workbench.log"
        summary = setup_logging("INFO", log_file=str(log_file), stream=io.StringIO())
        assert summary["handlers_count"] == 2

        logging.getLogger("json_workbench.test").info("written")
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "written" in log_file.read_text(encoding="utf-8")

    def test_json_lines(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging("INFO", enable_json_logging=True, stream=stream)
        logging.getLogger("json_workbench.test").info("analyzed", extra={"issues": 3})

        entry = json.loads(stream.getvalue().strip())
        assert entry["message"] == "analyzed"
        assert entry["level"] == "INFO"
        assert entry["issues"] == 3

    def test_formatter_includes_exception(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, exc_info=None)
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"]["type"] == "ValueError"
        assert entry["exception"]["message"] == "bad value"

    def test_error_with_context(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging("INFO", enable_json_logging=True, stream=stream)
        error = MalformedPath("Empty segment", "a..b")
        log_error_with_context(logging.getLogger("json_workbench.test"), error, {"path": "a..b"}, "resolve_path")

        entry = json.loads(stream.getvalue().strip())
        assert entry["operation"] == "resolve_path"
        assert entry["error_code"] == "MALFORMED_PATH"
        assert entry["path"] == "a..b"


class TestArguments:
    """Tests for the command line."""

    def test_defaults(self):
        args = parse_args([])
        assert args.config is None
        assert args.env_file is None
        assert args.json_logs is False

    def test_all_options(self):
        args = parse_args(["cfg.yaml", "--env-file", "prod.env", "--log-file", "out.log", "--json-logs"])
        assert (args.config, args.env_file, args.log_file, args.json_logs) == ("cfg.yaml", "prod.env", "out.log", True)
