from __future__ import annotations

import pytest

from agent_spaces.config.schema import Config
from agent_spaces.core.controller import WorkspaceController
from agent_spaces.core.focus import FocusMode
from agent_spaces.session.workspace_store import WorkspaceStore


@pytest.fixture
def saved_configs() -> list[Config]:
    return []


@pytest.fixture
def controller(store, manager, saved_configs) -> WorkspaceController:
    return WorkspaceController(store, manager, Config(), save_config=saved_configs.append)


def test_create_workspace_starts_one_session_at_root(controller, project_dirs):
    workspace = controller.create_workspace(project_dirs[0])

    assert controller.selected_workspace_id == workspace.id
    assert controller.selected_project_id == workspace.id
    assert controller.current_directory == project_dirs[0]
    sessions = controller.sessions.sessions
    assert len(sessions) == 1
    assert sessions[0].name == "Agent 1"
    assert sessions[0].working_directory == project_dirs[0]
    assert not sessions[0].has_launched


def test_create_workspace_with_custom_name_is_persisted(controller, store, project_dirs):
    controller.create_workspace(project_dirs[0], "Backend")

    reloaded = WorkspaceStore(store.root)
    assert [w.name for w in reloaded.workspaces] == ["Backend"]


def test_switching_workspace_replaces_sessions(controller, project_dirs):
    first = controller.create_workspace(project_dirs[0])
    controller.add_agent_session()
    old_sessions = controller.sessions.sessions
    controller.create_workspace(project_dirs[1])

    assert all(s.is_destroyed for s in old_sessions)
    controller.select_workspace(first.id)
    assert controller.current_directory == project_dirs[0]
    assert [s.name for s in controller.sessions.sessions] == ["Agent 1"]


def test_select_current_or_unknown_workspace_is_noop(controller, project_dirs):
    workspace = controller.create_workspace(project_dirs[0])
    session = controller.sessions.selected

    controller.select_workspace(workspace.id)
    controller.select_workspace("missing")

    assert controller.sessions.selected is session
    assert not session.is_destroyed


def test_bootstrap_activates_first_workspace(store, manager, project_dirs):
    WorkspaceController(store, manager).create_workspace(project_dirs[1])
    manager.shutdown()

    controller = WorkspaceController(WorkspaceStore(store.root), manager)
    controller.bootstrap()

    assert controller.current_directory == project_dirs[1]
    assert len(manager) == 1


def test_bootstrap_without_workspaces_has_no_sessions(controller):
    reasons = []
    controller.changes.subscribe(reasons.append)

    controller.bootstrap()

    assert controller.selected_workspace is None
    assert len(controller.sessions) == 0
    assert reasons == ["workspace"]


def test_add_project_selects_it_and_retargets_sessions(controller, project_dirs):
    controller.create_workspace(project_dirs[0])
    session = controller.sessions.selected

    project = controller.add_project(project_dirs[1])

    assert project is not None
    assert controller.selected_project_id == project.id
    assert controller.current_directory == project_dirs[1]
    assert session.working_directory == project_dirs[1]
    assert controller.add_agent_session().working_directory == project_dirs[1]


def test_add_duplicate_or_root_project_is_rejected(controller, project_dirs):
    controller.create_workspace(project_dirs[0])
    controller.add_project(project_dirs[1])

    assert controller.add_project(project_dirs[1]) is None
    assert controller.add_project(project_dirs[0]) is None
    assert len(controller.selected_workspace.projects) == 2


def test_add_project_without_workspace_returns_none(controller, project_dirs):
    assert controller.add_project(project_dirs[0]) is None


def test_remove_selected_project_falls_back_to_root(controller, project_dirs):
    workspace = controller.create_workspace(project_dirs[0])
    project = controller.add_project(project_dirs[1])

    controller.remove_project(project.id)

    assert controller.selected_project_id == workspace.id
    assert controller.current_directory == project_dirs[0]
    assert controller.sessions.selected.working_directory == project_dirs[0]


def test_root_project_cannot_be_removed(controller, project_dirs):
    workspace = controller.create_workspace(project_dirs[0])
    controller.remove_project(workspace.root_project.id)
    assert len(controller.selected_workspace.projects) == 1


def test_remove_unselected_project_keeps_selection(controller, project_dirs):
    controller.create_workspace(project_dirs[0])
    lib = controller.add_project(project_dirs[1])
    docs = controller.add_project(project_dirs[2])

    controller.remove_project(lib.id)

    assert controller.selected_project_id == docs.id
    assert [p.path for p in controller.selected_workspace.projects] == [project_dirs[0], project_dirs[2]]


def test_delete_selected_workspace_activates_next(controller, project_dirs):
    first = controller.create_workspace(project_dirs[0])
    second = controller.create_workspace(project_dirs[1])

    controller.delete_workspace(second.id)

    assert controller.selected_workspace_id == first.id
    assert controller.sessions.selected.working_directory == project_dirs[0]


def test_delete_last_workspace_leaves_home_session(controller, project_dirs, tmp_path):
    workspace = controller.create_workspace(project_dirs[0])

    controller.delete_workspace(workspace.id)

    assert controller.selected_workspace is None
    assert controller.selected_project_id is None
    sessions = controller.sessions.sessions
    assert len(sessions) == 1
    assert sessions[0].working_directory == str(tmp_path / "home")


def test_delete_unselected_workspace_keeps_sessions(controller, project_dirs):
    first = controller.create_workspace(project_dirs[0])
    second = controller.create_workspace(project_dirs[1])
    session = controller.sessions.selected

    controller.delete_workspace(first.id)

    assert controller.selected_workspace_id == second.id
    assert controller.sessions.selected is session


def test_rename_workspace(controller, project_dirs):
    workspace = controller.create_workspace(project_dirs[0])
    controller.rename_workspace(workspace.id, "API")
    assert controller.selected_workspace.name == "API"
    controller.rename_workspace(workspace.id, "")
    assert controller.selected_workspace.name == "alpha"


def test_send_command_requires_started_session(controller, project_dirs, scheduler):
    controller.create_workspace(project_dirs[0])
    session = controller.sessions.selected

    assert controller.send_command("ls") is False

    session.launch("")
    session.start_if_needed()
    scheduler.run_all()

    assert controller.send_command("ls -la") is True
    assert session.terminal.sent[-1] == "ls -la\n"


def test_send_command_without_sessions(controller):
    assert controller.send_command("ls") is False


def test_focus_mode_is_persisted_once(controller, saved_configs):
    reasons = []
    controller.changes.subscribe(reasons.append)

    controller.focus_mode = FocusMode.HOVER
    controller.focus_mode = FocusMode.HOVER

    assert controller.focus_mode is FocusMode.HOVER
    assert len(saved_configs) == 1
    assert saved_configs[0].gui.focus_mode is FocusMode.HOVER
    assert reasons == ["focus_mode"]


def test_model_operations_delegate_to_store(controller, store):
    controller.move_model([0], 4)
    assert [m.name for m in controller.model_configs] == ["Codex", "Gemini", "Shell", "Claude"]

    controller.delete_model(controller.model_configs[0].id)
    assert controller.model_configs[0].name == "Gemini"

    controller.reset_models()
    assert [m.name for m in store.model_configs] == ["Claude", "Codex", "Gemini", "Shell"]


def test_new_workspace_then_launch_claude(controller, project_dirs):
    from agent_spaces.core.launcher import Launcher, SelectMode

    controller.create_workspace(project_dirs[0])
    session = controller.sessions.selected
    launcher = Launcher(session, lambda: controller.model_configs)

    launcher.choose_model(0)
    assert isinstance(launcher.state, SelectMode)
    launcher.launch_new()

    assert session.launch_command == "claude"
    assert session.has_launched
    assert session.is_running
