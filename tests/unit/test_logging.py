"""Unit tests for structured logging."""

from __future__ import annotations

import io
import json
import logging

import pytest

from github_label_sync.logging import JsonFormatter, configure_logging


def test_json_formatter_nests_extra_fields() -> None:
    record = logging.LogRecord(
        name="github_label_sync.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Repository reconciled",
        args=None,
        exc_info=None,
    )
    record.repo = "octo-org/api"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "github_label_sync.engine"
    assert payload["message"] == "Repository reconciled"
    assert payload["extra"] == {"repo": "octo-org/api"}


def test_configure_logging_replaces_handlers() -> None:
    stream = io.StringIO()
    root = logging.getLogger()
    previous = list(root.handlers), root.level
    try:
        configure_logging("debug", stream=stream)
        configure_logging("debug", stream=stream)

        assert len(root.handlers) == 1
        logging.getLogger("github_label_sync.test").debug("hello", extra={"count": 2})

        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert line["message"] == "hello"
        assert line["extra"] == {"count": 2}
        assert logging.getLogger("github").level == logging.INFO
    finally:
        root.handlers[:] = previous[0]
        root.setLevel(previous[1])


def test_configure_logging_writes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    root = logging.getLogger()
    previous = list(root.handlers), root.level
    try:
        configure_logging("info")
        logging.getLogger("github_label_sync.test").info("to stderr")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err.strip().splitlines()[-1])["message"] == "to stderr"
    finally:
        root.handlers[:] = previous[0]
        root.setLevel(previous[1])
