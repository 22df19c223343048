"""Core session, launcher and focus logic (no GUI imports)."""
