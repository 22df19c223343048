from __future__ import annotations

import json

from agent_spaces.gui.state_store import (
    MIN_HEIGHT,
    MIN_WIDTH,
    WindowState,
    load_window_state,
    save_window_state,
)


def test_round_trip(tmp_path):
    path = tmp_path / "gui" / "gui_state.json"
    save_window_state(WindowState(width=1200, height=700, x=10, y=20), path)

    state = load_window_state(path)

    assert state == WindowState(1200, 700, 10, 20)
    assert state.geometry == "1200x700+10+20"
    assert json.loads(path.read_text(encoding="utf-8")) == {"height": 700, "width": 1200, "x": 10, "y": 20}


def test_negative_offsets_stay_left_relative():
    assert WindowState(1200, 700, -1280, 0).geometry == "1200x700+-1280+0"


def test_minimised_size_is_clamped(tmp_path):
    path = tmp_path / "gui_state.json"
    path.write_text('{"width": 1, "height": 1, "x": 5, "y": 6}', encoding="utf-8")

    assert load_window_state(path) == WindowState(MIN_WIDTH, MIN_HEIGHT, 5, 6)


def test_missing_or_broken_file(tmp_path):
    path = tmp_path / "gui_state.json"
    assert load_window_state(path) is None

    path.write_text('{"width": 10}', encoding="utf-8")
    assert load_window_state(path) is None

    path.write_text("not json", encoding="utf-8")
    assert load_window_state(path) is None
