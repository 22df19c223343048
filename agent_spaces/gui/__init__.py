"""customtkinter desktop shell for agent-spaces."""
