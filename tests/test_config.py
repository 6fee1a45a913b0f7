import logging

import pytest
from flask import Flask

from geoguess.config import _env_bool, _env_choice, _env_int, _env_radii
from geoguess.logging_config import ShortPathFilter, configure_app_logging


def test_env_int_falls_back_on_invalid(monkeypatch):
    monkeypatch.setenv("GEOGUESS_TEST_INT", "nope")
    assert _env_int("GEOGUESS_TEST_INT", 4) == 4
    monkeypatch.setenv("GEOGUESS_TEST_INT", " 12 ")
    assert _env_int("GEOGUESS_TEST_INT", 4) == 12


@pytest.mark.parametrize("raw,expected", [("yes", True), ("OFF", False), ("maybe", True), ("", True)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("GEOGUESS_TEST_BOOL", raw)
    assert _env_bool("GEOGUESS_TEST_BOOL", True) is expected


def test_env_choice(monkeypatch):
    monkeypatch.setenv("GEOGUESS_TEST_CHOICE", "Score_Gated")
    assert _env_choice("GEOGUESS_TEST_CHOICE", "weighted", {"weighted", "score_gated"}) == "score_gated"
    monkeypatch.setenv("GEOGUESS_TEST_CHOICE", "both")
    assert _env_choice("GEOGUESS_TEST_CHOICE", "weighted", {"weighted", "score_gated"}) == "weighted"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("25, 100,400", (25, 100, 400)),
        ("100,50", (50, 150, 300, 600)),
        ("0,50", (50, 150, 300, 600)),
        ("a,b", (50, 150, 300, 600)),
        ("", (50, 150, 300, 600)),
    ],
)
def test_env_radii(monkeypatch, raw, expected):
    monkeypatch.setenv("GEOGUESS_TEST_RADII", raw)
    assert _env_radii("GEOGUESS_TEST_RADII", (50, 150, 300, 600)) == expected


def test_short_path_filter_sets_parent_file():
    record = logging.LogRecord("x", logging.INFO, "/a/geoguess/services/rounds.py", 10, "msg", None, None)
    assert ShortPathFilter().filter(record)
    assert record.parent_file == "services/rounds.py"


def _app_with(**config):
    app = Flask(__name__)
    app.config.update(config)
    return app


def test_app_logging_writes_rotating_file(tmp_path):
    app = _app_with(LOG_LEVEL="debug", LOG_DIR=str(tmp_path), LOG_FILE="game", LOG_TO_FILE=True)
    configure_app_logging(app)

    logging.getLogger("geoguess.services.test").info("hello from the test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = (tmp_path / "game.log").read_text(encoding="utf-8")
    assert "hello from the test" in content
    assert "| INFO    |" in content
    assert "tests/test_config.py" in content
    assert logging.getLogger().level == logging.DEBUG


def test_app_logging_console_only_and_werkzeug_level(tmp_path):
    app = _app_with(
        LOG_LEVEL="nonsense",
        LOG_DIR=str(tmp_path / "logs"),
        LOG_TO_FILE=False,
        WERKZEUG_LOG_LEVEL="WARNING",
    )
    configure_app_logging(app)

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert any(type(h) is logging.StreamHandler for h in root.handlers)
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
    assert not (tmp_path / "logs").exists()
    assert logging.getLogger("werkzeug").level == logging.WARNING
