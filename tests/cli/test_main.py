from __future__ import annotations

import logging
from typing import Any, Dict, Iterator

import pytest

from mailbox_chess.cli import main as cli


@pytest.fixture
def captured_run(monkeypatch: pytest.MonkeyPatch) -> Iterator[Dict[str, Any]]:
    calls: Dict[str, Any] = {}

    def fake_run(app: Any, **kwargs: Any) -> None:
        calls["app"] = app
        calls.update(kwargs)

    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    yield calls
    root.setLevel(level)


def test_log_level_option_reaches_engine_loggers(captured_run: Dict[str, Any]) -> None:
    cli.main(["--log-level", "DEBUG", "--port", "9001"])
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("mailbox_chess.engine.board").isEnabledFor(logging.DEBUG)
    assert captured_run["port"] == 9001
    assert captured_run["log_level"] == "debug"


def test_log_level_can_be_raised(captured_run: Dict[str, Any]) -> None:
    cli.main(["--log-level", "warning"])
    assert logging.getLogger().level == logging.WARNING
    assert not logging.getLogger("mailbox_chess.engine.game").isEnabledFor(logging.INFO)


def test_history_capacity_must_be_positive(captured_run: Dict[str, Any]) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--history-capacity", "0"])
    assert "app" not in captured_run
