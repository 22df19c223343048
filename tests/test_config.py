from __future__ import annotations

from agent_spaces.config import Config, load_config, save_config
from agent_spaces.core.focus import FocusMode


def test_defaults(tmp_path):
    config = load_config(tmp_path / "config.json")

    assert config.gui.focus_mode is FocusMode.CLICK
    assert config.terminal.settle_delay_s == 0.3
    assert config.terminal.launch_delay_s == 0.3
    assert config.storage_path.name == ".agent-spaces"


def test_environment_override(monkeypatch, tmp_path):
    monkeypatch.setenv("AGENT_SPACES_GUI__FOCUS_MODE", "hover")
    monkeypatch.setenv("AGENT_SPACES_LOG_LEVEL", "DEBUG")

    config = load_config(tmp_path / "missing.json")

    assert config.gui.focus_mode is FocusMode.HOVER
    assert config.log_level == "DEBUG"


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = Config()
    config.gui.focus_mode = FocusMode.HOVER
    config.terminal.default_shell = "/bin/bash"

    save_config(config, path)
    loaded = load_config(path)

    assert loaded.gui.focus_mode is FocusMode.HOVER
    assert loaded.terminal.default_shell == "/bin/bash"


def test_unreadable_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")
    assert load_config(path).gui.focus_mode is FocusMode.CLICK


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"gui": {"focus_mode": "telepathy"}}', encoding="utf-8")
    assert load_config(path).gui.focus_mode is FocusMode.CLICK


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"gui": {"focus_mode": "hover", "legacy": 1}, "extra": true}', encoding="utf-8")
    assert load_config(path).gui.focus_mode is FocusMode.HOVER


def test_storage_path_expands_user(tmp_path):
    config = Config(storage_dir=str(tmp_path / "data"))
    assert config.storage_path == tmp_path / "data"
    assert config.log_path.parent == tmp_path / "data" / "logs"
