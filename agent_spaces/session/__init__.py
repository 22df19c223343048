"""Persistent workspace and model-preset storage."""

from agent_spaces.session.workspace_store import ModelConfig, Project, Workspace, WorkspaceStore

__all__ = ["ModelConfig", "Project", "Workspace", "WorkspaceStore"]
