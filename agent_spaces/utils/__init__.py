"""Utility functions for agent-spaces."""

from agent_spaces.utils.helpers import ensure_dir, get_data_path, home_dir, last_path_component

__all__ = ["ensure_dir", "get_data_path", "home_dir", "last_path_component"]
