from __future__ import annotations

from agent_spaces.core.focus import FocusCoordinator, FocusMode


class _Session:
    def __init__(self) -> None:
        self.focus_requests = 0

    def focus_request(self) -> None:
        self.focus_requests += 1


def _coordinator(mode: FocusMode):
    sessions = {"a": _Session(), "b": _Session()}
    claimed: list[str] = []
    coordinator = FocusCoordinator(claimed.append, sessions.get, mode)
    return coordinator, claimed, sessions


def test_click_mode_claims_on_press_only():
    coordinator, claimed, sessions = _coordinator(FocusMode.CLICK)

    coordinator.pointer_entered("a")
    assert claimed == []

    coordinator.pointer_pressed("a")
    coordinator.pointer_pressed("a")
    assert claimed == ["a", "a"]
    assert sessions["a"].focus_requests == 2


def test_hover_mode_claims_once_per_entry():
    coordinator, claimed, sessions = _coordinator(FocusMode.HOVER)

    coordinator.pointer_entered("a")
    coordinator.pointer_entered("a")
    assert claimed == ["a"]

    coordinator.pointer_entered("b")
    assert claimed == ["a", "b"]
    assert sessions["b"].focus_requests == 1


def test_hover_rearms_after_leaving():
    coordinator, claimed, _ = _coordinator(FocusMode.HOVER)

    coordinator.pointer_entered("a")
    coordinator.pointer_left("b")
    coordinator.pointer_entered("a")
    assert claimed == ["a"]

    coordinator.pointer_left("a")
    coordinator.pointer_entered("a")
    assert claimed == ["a", "a"]


def test_press_still_claims_in_hover_mode():
    coordinator, claimed, _ = _coordinator(FocusMode.HOVER)
    coordinator.pointer_entered("a")
    coordinator.pointer_pressed("a")
    assert claimed == ["a", "a"]


def test_switching_mode_resets_hover_state():
    coordinator, claimed, _ = _coordinator(FocusMode.HOVER)
    coordinator.pointer_entered("a")

    coordinator.mode = FocusMode.CLICK
    coordinator.pointer_entered("b")
    assert claimed == ["a"]

    coordinator.mode = "hover"
    assert coordinator.mode is FocusMode.HOVER
    coordinator.pointer_entered("a")
    assert claimed == ["a", "a"]


def test_unknown_session_still_reaches_sink():
    coordinator, claimed, _ = _coordinator(FocusMode.CLICK)
    coordinator.pointer_pressed("ghost")
    assert claimed == ["ghost"]


def test_mode_titles():
    assert FocusMode.CLICK.title == "Click to focus"
    assert FocusMode.HOVER.title == "Hover to focus"
