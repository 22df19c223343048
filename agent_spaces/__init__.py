"""agent-spaces - workspaces and side-by-side CLI agent sessions."""

__version__ = "0.1.0"
