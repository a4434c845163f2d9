"""Tests for structlog configuration."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
import structlog

from ruleskit.config.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("ruleskit").setLevel(logging.NOTSET)
    structlog.reset_defaults()


class TestConfigureLogging:
    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, logging.WARNING),
            ({"verbose": True}, logging.DEBUG),
            ({"quiet": True}, logging.ERROR),
            ({"verbose": True, "quiet": True}, logging.DEBUG),
        ],
    )
    def test_levels(self, kwargs: dict[str, bool], expected: int) -> None:
        configure_logging(**kwargs)
        assert logging.getLogger("ruleskit").level == expected

    def test_single_stderr_handler(self) -> None:
        configure_logging()
        configure_logging()
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        logging.getLogger("ruleskit.test").warning("hello %s", "world")
        err = capsys.readouterr().err
        assert '"event": "hello world"' in err
        assert '"level": "warning"' in err
