#!/usr/bin/env python3
"""Tests for the structured Logger."""

import io
import logging
import threading

import pytest

from apivisibility.infrastructure.logger import (
    Logger,
    LogLevel,
    configure_logging,
    get_logger,
    set_global_logger,
)


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def logger(stream):
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    return Logger("apivisibility.test_logger", level=LogLevel.DEBUG, handlers=[handler])


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_matches_logging(self):
        assert LogLevel.DEBUG == logging.DEBUG
        assert LogLevel.ERROR == logging.ERROR


class TestLogger:
    """Tests for Logger output and context."""

    def test_plain_message(self, logger, stream):
        logger.info("Visibility applied")
        assert stream.getvalue() == "INFO Visibility applied\n"

    def test_context_rendered(self, logger, stream):
        logger.debug("Visibility decided", group="User", visible=False)
        assert "Visibility decided | group=User visible=False" in stream.getvalue()

    def test_level_filtering(self, logger, stream):
        logger.set_level("WARNING")
        logger.info("hidden")
        logger.warning("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "WARNING shown" in output
        assert logger.get_level() == LogLevel.WARNING
        assert not logger.is_enabled_for("INFO")
        assert logger.is_enabled_for(LogLevel.ERROR)

    def test_string_level(self):
        logger = Logger("apivisibility.test_string", level="debug", handlers=[])
        assert logger.get_level() == LogLevel.DEBUG

    def test_add_context(self, logger, stream):
        with logger.add_context(app="demo"):
            logger.info("Route hidden", operation="User.DeleteUser")
        logger.info("after")

        lines = stream.getvalue().splitlines()
        assert lines[0] == "INFO Route hidden | app=demo operation=User.DeleteUser"
        assert lines[1] == "INFO after"

    def test_context_is_thread_local(self, logger, stream):
        seen = []

        def worker():
            logger.info("from thread")
            seen.append(True)

        with logger.add_context(app="main"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen
        assert "INFO from thread\n" in stream.getvalue()

    def test_exception(self, logger, stream):
        try:
            raise ValueError("bad mask")
        except ValueError as e:
            logger.exception("Failed", e, pattern="Get(*")

        output = stream.getvalue()
        assert "exception_type=ValueError" in output
        assert "exception_message=bad mask" in output
        assert "Traceback" in output

    def test_file_handler(self, logger, tmp_path):
        path = tmp_path / "apivisibility.log"
        handler = logger.create_file_handler(path)
        logger.add_handler(handler)

        logger.error("written", code=1)
        handler.flush()
        logger.remove_handler(handler)
        handler.close()

        assert "written | code=1" in path.read_text()

    def test_does_not_propagate(self, logger):
        assert logger.logger.propagate is False


class TestGetLogger:
    """Tests for named logger lookup."""

    def test_same_name_same_instance(self):
        assert get_logger("apivisibility.same") is get_logger("apivisibility.same")

    def test_different_names(self):
        assert get_logger("apivisibility.a") is not get_logger("apivisibility.b")

    def test_set_global_logger(self):
        logger = Logger("apivisibility.custom", handlers=[])
        set_global_logger(logger)
        assert get_logger("apivisibility.custom") is logger

class TestPackageLoggers:
    """Tests for loggers below the apivisibility logger."""

    @pytest.fixture
    def parent_stream(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(name)s %(levelname)s %(message)s"))
        set_global_logger(Logger("apivisibility", level=LogLevel.WARNING, handlers=[handler]))
        return stream

    def test_child_inherits_parent_level(self, parent_stream):
        child = get_logger("apivisibility.engine")
        child.info("Visibility rules loaded", mode="none")
        child.warning("Check masks", count=2)

        assert parent_stream.getvalue() == "apivisibility.engine WARNING Check masks | count=2\n"
        assert child.get_level() == LogLevel.WARNING

    def test_child_has_no_handlers_of_its_own(self):
        child = get_logger("apivisibility.child_handlers")
        assert child.logger.handlers == []
        assert child.logger.propagate is True

    def test_configure_logging_reaches_children(self, tmp_path):
        log_path = tmp_path / "apivisibility.log"
        configure_logging("DEBUG", log_path)

        get_logger("apivisibility.fastapi").debug("Route hidden from catalogue", operation="User.DeleteUser")
        for handler in get_logger("apivisibility").logger.handlers:
            handler.flush()

        assert "apivisibility.fastapi - DEBUG - Route hidden from catalogue | operation=User.DeleteUser" in log_path.read_text()

    def test_configure_logging_level(self):
        configure_logging("ERROR")
        assert not get_logger("apivisibility.engine").is_enabled_for(LogLevel.WARNING)

        configure_logging(LogLevel.DEBUG)
        assert get_logger("apivisibility.engine").is_enabled_for(LogLevel.DEBUG)

    def test_configure_logging_registers_instance(self):
        logger = configure_logging()
        assert get_logger("apivisibility") is logger
