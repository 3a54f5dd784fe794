# -*- coding: utf-8 -*-
"""
Tests for the logging helpers: logger naming, the compact formatter,
the callback bridge and handler failure messages.
"""

import io
import logging
from unittest import mock

from ghjson.logger import (
    ROOT_LOGGER_NAME, GhJsonFormatter, add_log_callback, get_logger,
    log_handler_failure, remove_log_callback, setup_logging,
)


class TestLoggers:
    """Named child loggers and formatting."""

    def test_child_of_root(self):
        assert get_logger("DataTree").name == "GhJSON.DataTree"
        assert get_logger("DataTree").parent is logging.getLogger(ROOT_LOGGER_NAME)

    def test_formatter_uses_module_tag(self):
        record = logging.LogRecord("GhJSON.ValueCodec", logging.WARNING, __file__, 1,
                                   "Registered codec", None, None)
        assert GhJsonFormatter().format(record) == "[ValueCodec] WARNING Registered codec"

    def test_setup_logging_does_not_stack_handlers(self):
        root = logging.getLogger(ROOT_LOGGER_NAME)
        before = list(root.handlers)
        stream = io.StringIO()
        try:
            setup_logging(logging.INFO, stream=stream)
            setup_logging(logging.INFO, stream=stream)
            added = [h for h in root.handlers if h not in before]
            assert len(added) == 1
            get_logger("Test").info("hello")
            assert "[Test] INFO  hello" in stream.getvalue()
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
            root.setLevel(logging.NOTSET)


class TestCallbacks:
    """Routing log records into host callbacks."""

    def test_callback_receives_records(self):
        seen = []

        def collect(level, tag, message):
            seen.append((level, tag, message))

        add_log_callback(collect)
        try:
            get_logger("Bridge").warning("careful")
        finally:
            remove_log_callback(collect)
        assert seen == [("WARNING", "Bridge", "[Bridge] WARNING careful")]

    def test_removed_callback_is_silent(self):
        collect = mock.Mock()
        add_log_callback(collect)
        remove_log_callback(collect)
        get_logger("Bridge").warning("nobody listens")
        collect.assert_not_called()

    def test_failing_callback_does_not_raise(self):
        explode = mock.Mock(side_effect=RuntimeError("callback failure"))
        add_log_callback(explode)
        try:
            get_logger("Bridge").warning("still fine")
        finally:
            remove_log_callback(explode)
        explode.assert_called_once()


class TestHandlerFailure:
    """One consistent message for every handler failure."""

    def test_message_with_field(self, caplog):
        log = get_logger("Props")
        with caplog.at_level(logging.WARNING, logger=ROOT_LOGGER_NAME):
            message = log_handler_failure(log, "FontPropertyHandler", "Panel", ValueError("bad"),
                                          field="Font")
        assert message == "Handler 'FontPropertyHandler' failed on 'Panel'.Font: ValueError: bad"
        assert message in caplog.text

    def test_message_without_field(self):
        message = log_handler_failure(get_logger("Props"), "H", "Node", KeyError("k"))
        assert message.startswith("Handler 'H' failed on 'Node': KeyError")
