"""Tests for logging setup and the in-memory log buffer."""

import logging
import threading

from playwait.log_buffer import LogBuffer, LogHandler
from playwait.logger import LoggingFormatter, PlainFormatter, get_log_buffer, get_logger


def test_get_logger_names_and_handlers():
    logger = get_logger("example")
    assert logger.name == "playwait.example"
    assert logger.propagate is False
    assert any(isinstance(h, LogHandler) for h in logger.handlers)
    # Handlers are attached once, however often the logger is fetched.
    assert len(get_logger("example").handlers) == len(logger.handlers)


def test_logger_writes_to_shared_buffer(logs):
    get_logger("example").warning("queue %s stalled", "A")
    assert logs is get_log_buffer()
    assert "queue A stalled" in logs
    line = logs.get_lines(tail=1)[0]
    assert "WARNING" in line
    assert "playwait.example" in line
    assert "\x1b[" not in line


def test_buffer_tail_and_bound():
    buffer = LogBuffer(max_lines=3)
    for i in range(5):
        buffer.append(f"line {i}")
    assert buffer.max_lines == 3
    assert buffer.get_lines() == ["line 2", "line 3", "line 4"]
    assert buffer.get_lines(tail=2) == ["line 3", "line 4"]
    assert buffer.get_lines(tail=0) == []
    buffer.clear()
    assert buffer.get_lines() == []


def test_buffer_accepts_lines_from_threads():
    buffer = LogBuffer(max_lines=1000)
    threads = [threading.Thread(target=lambda n=n: [buffer.append(f"{n}") for _ in range(50)]) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(buffer.get_lines()) == 200


def test_formatters():
    record = logging.LogRecord("playwait.test", logging.ERROR, __file__, 1, "boom %s", ("x",), None)
    plain = PlainFormatter().format(record)
    assert "ERROR" in plain and "boom x" in plain
    colored = LoggingFormatter().format(record)
    assert "boom x" in colored and "\x1b[31m" in colored


def test_file_handler_writes_plain_lines(tmp_path, monkeypatch):
    import playwait.logger as logger_module

    log_path = tmp_path / "logs" / "playwait.log"
    monkeypatch.setenv("LOG_FILE_PATH", str(log_path))
    monkeypatch.setattr(logger_module, "LOG_FILE_PATH", log_path)
    monkeypatch.setattr(logger_module, "_file_handler", None)

    logger = get_logger("file_output")
    file_handler = logger_module._file_handler
    try:
        assert isinstance(file_handler, logging.FileHandler)
        assert isinstance(file_handler.formatter, PlainFormatter)
        assert file_handler in logger.handlers

        logger.warning("buffered %s seconds", 4)
        file_handler.flush()

        content = log_path.read_text(encoding="utf-8")
        assert "WARNING" in content
        assert "playwait.file_output  buffered 4 seconds" in content
        assert "\x1b[" not in content
    finally:
        logger.removeHandler(file_handler)
        file_handler.close()
