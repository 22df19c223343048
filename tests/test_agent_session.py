from __future__ import annotations

import shlex

import pytest

from agent_spaces.core.agent_session import AgentSession, SessionTimings, resolve_shell
from agent_spaces.utils.helpers import home_dir


def _session(terminal_factory, scheduler, timings, working_directory, **kwargs) -> AgentSession:
    return AgentSession(
        "Agent 1",
        working_directory,
        terminal_factory=terminal_factory,
        scheduler=scheduler,
        timings=timings,
        **kwargs,
    )


def test_resolve_shell_prefers_environment(monkeypatch):
    monkeypatch.setenv("SHELL", "/usr/bin/fish")
    assert resolve_shell() == ("/usr/bin/fish", "-fish")


def test_resolve_shell_falls_back_to_default(monkeypatch):
    monkeypatch.delenv("SHELL", raising=False)
    assert resolve_shell("/bin/bash") == ("/bin/bash", "-bash")


def test_timings_from_config_use_default_shell_when_blank():
    from agent_spaces.config.schema import TerminalConfig

    timings = SessionTimings.from_config(TerminalConfig(default_shell="", settle_delay_s=1.5))
    assert timings.default_shell == "/bin/zsh"
    assert timings.settle_delay_s == 1.5


def test_launch_records_command_once(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    reasons = []
    session.changes.subscribe(reasons.append)

    session.launch("claude")
    session.launch("codex")

    assert session.has_launched
    assert session.is_running
    assert session.launch_command == "claude"
    assert reasons == ["launched"]
    assert terminal_factory.created == []


def test_terminal_handle_is_created_once(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))

    first = session.get_or_create_terminal()
    second = session.get_or_create_terminal()

    assert first is second
    assert len(terminal_factory.created) == 1


def test_start_if_needed_starts_exactly_once(monkeypatch, terminal_factory, scheduler, timings, tmp_path):
    monkeypatch.setenv("SHELL", "/bin/bash")
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.launch("claude")

    assert session.start_if_needed() is True
    assert session.start_if_needed() is False

    terminal = session.terminal
    assert terminal.start_calls == [("/bin/bash", "-bash")]
    assert session.is_started
    assert session.is_process_alive


def test_cd_then_launch_command_are_typed_in_order(
    monkeypatch, terminal_factory, scheduler, timings, tmp_path
):
    monkeypatch.setenv("SHELL", "/bin/zsh")
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.launch("claude --resume")
    session.start_if_needed()
    terminal = session.terminal

    scheduler.advance(0.2)
    assert terminal.sent == []

    scheduler.advance(0.1)
    assert terminal.sent == [f"cd {shlex.quote(str(tmp_path))} && clear\n"]

    scheduler.advance(0.3)
    assert terminal.sent[1] == "claude --resume\n"
    assert scheduler.pending == 0


def test_directory_with_spaces_is_quoted(terminal_factory, scheduler, timings, tmp_path):
    target = tmp_path / "my project's dir"
    target.mkdir()
    session = _session(terminal_factory, scheduler, timings, str(target))
    session.launch("")
    session.start_if_needed()
    scheduler.run_all()

    sent = session.terminal.sent
    assert sent == [f"cd {shlex.quote(str(target))} && clear\n"]
    assert shlex.split(sent[0])[1] == str(target)


def test_shell_only_session_types_no_launch_command(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.launch("")
    session.start_if_needed()
    scheduler.run_all()

    assert len(session.terminal.sent) == 1
    assert session.terminal.sent[0].startswith("cd ")


def test_missing_directory_falls_back_to_home(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path / "gone"))
    session.launch("codex")
    session.start_if_needed()
    scheduler.run_all()

    assert session.terminal.sent[0] == f"cd {shlex.quote(home_dir())} && clear\n"


def test_start_failure_is_recorded_and_not_retried(terminal_factory, scheduler, timings, tmp_path):
    terminal_factory.fail_start = OSError("no such shell")
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    reasons = []
    session.changes.subscribe(reasons.append)
    session.launch("claude")

    assert session.start_if_needed() is True
    assert session.start_if_needed() is False

    assert session.start_error == "no such shell"
    assert "start_failed" in reasons
    assert not session.is_process_alive
    assert scheduler.pending == 0
    assert len(session.terminal.start_calls) == 1


def test_destroy_closes_terminal_and_is_idempotent(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.launch("claude")
    session.start_if_needed()
    terminal = session.terminal

    session.destroy()
    session.destroy()

    assert terminal.closed
    assert terminal.subscriber_count == 0
    assert session.terminal is None
    assert session.is_destroyed


def test_pending_injections_after_destroy_do_nothing(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.launch("claude")
    session.start_if_needed()
    terminal = session.terminal

    session.destroy()
    scheduler.run_all()

    assert terminal.sent == []


def test_terminal_access_after_destroy_raises(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.destroy()

    with pytest.raises(RuntimeError):
        session.get_or_create_terminal()
    assert session.start_if_needed() is False


def test_launch_after_destroy_is_ignored(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.destroy()
    session.launch("claude")
    assert not session.has_launched


def test_focus_request_without_terminal_is_noop(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.focus_request()
    assert scheduler.pending == 0


def test_focus_request_is_delivered_on_next_turn(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    terminal = session.get_or_create_terminal()

    session.focus_request()
    assert terminal.focus_requests == 0

    scheduler.advance(0)
    assert terminal.focus_requests == 1


def test_process_exit_notifies_without_touching_launch_state(
    terminal_factory, scheduler, timings, tmp_path
):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.launch("claude")
    session.start_if_needed()
    reasons = []
    session.changes.subscribe(reasons.append)

    session.terminal.set_running(False)

    assert reasons == ["process"]
    assert not session.is_process_alive
    assert session.has_launched


def test_metadata_setters_notify_only_on_change(terminal_factory, scheduler, timings, tmp_path):
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    reasons = []
    session.changes.subscribe(reasons.append)

    session.name = "Agent 1"
    session.name = "Reviewer"
    session.working_directory = str(tmp_path)
    session.working_directory = "/elsewhere"

    assert reasons == ["name", "working_directory"]
    assert session.name == "Reviewer"


def test_directory_change_before_start_is_used_for_cd(terminal_factory, scheduler, timings, tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    session = _session(terminal_factory, scheduler, timings, str(first))
    session.launch("claude")

    session.working_directory = str(second)
    session.start_if_needed()
    scheduler.run_all()

    assert session.terminal.sent == [
        f"cd {shlex.quote(str(second))} && clear\n",
        "claude\n",
    ]


def test_directory_change_after_start_is_cosmetic(terminal_factory, scheduler, timings, tmp_path):
    other = tmp_path / "other"
    other.mkdir()
    session = _session(terminal_factory, scheduler, timings, str(tmp_path))
    session.launch("claude")
    session.start_if_needed()
    scheduler.run_all()
    sent_before = list(session.terminal.sent)

    session.working_directory = str(other)
    scheduler.run_all()

    assert session.working_directory == str(other)
    assert session.terminal.sent == sent_before
    assert scheduler.pending == 0
