from pathlib import Path

from core import config


def test_defaults(monkeypatch):
    for name in ("PORT", "HOST", "LEADERBOARD_FILE", "LEADERBOARD_MAX_ENTRIES", "LEADERBOARD_TOP_N", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    assert config.port() == 3000
    assert config.host() == "0.0.0.0"
    assert config.leaderboard_file().name == "leaderboard.json"
    assert config.max_entries() == 100
    assert config.top_n() == 10
    assert config.log_level() == "INFO"


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", " 8080 ")
    monkeypatch.setenv("LEADERBOARD_FILE", str(tmp_path / "board.json"))
    monkeypatch.setenv("LEADERBOARD_TOP_N", "5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert config.port() == 8080
    assert config.leaderboard_file() == Path(tmp_path / "board.json")
    assert config.top_n() == 5
    assert config.log_level() == "DEBUG"


def test_bad_values_fall_back(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    monkeypatch.setenv("LEADERBOARD_MAX_ENTRIES", "0")
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert config.port() == 3000
    assert config.max_entries() == 1
    assert config.log_level() == "INFO"
