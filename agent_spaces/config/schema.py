"""Configuration schema for agent-spaces."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_spaces.core.focus import FocusMode


class TerminalConfig(BaseModel):
    """Process start and terminal emulation settings."""

    model_config = ConfigDict(extra="ignore")

    default_shell: str = "/bin/zsh"
    settle_delay_s: float = Field(default=0.3, ge=0.0)
    launch_delay_s: float = Field(default=0.3, ge=0.0)
    focus_delay_s: float = Field(default=0.0, ge=0.0)
    cols: int = Field(default=120, gt=0)
    rows: int = Field(default=36, gt=0)
    scrollback: int = Field(default=5000, ge=0)


class GUIConfig(BaseModel):
    """Desktop GUI configuration."""

    model_config = ConfigDict(extra="ignore")

    theme: str = "dark"
    width: int = 1400
    height: int = 800
    font_size: int = 13
    focus_mode: FocusMode = FocusMode.CLICK
    divider_width: int = 1
    sidebar_width: int = 240


class Config(BaseSettings):
    """Root configuration for agent-spaces."""

    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    gui: GUIConfig = Field(default_factory=GUIConfig)
    storage_dir: str = "~/.agent-spaces"
    log_level: str = "INFO"

    @property
    def storage_path(self) -> Path:
        """Get expanded storage directory."""
        return Path(self.storage_dir).expanduser()

    @property
    def log_path(self) -> Path:
        return self.storage_path / "logs" / "agent-spaces.log"

    model_config = SettingsConfigDict(
        env_prefix="AGENT_SPACES_",
        env_nested_delimiter="__",
        extra="ignore",
    )
