"""Configuration module for agent-spaces."""

from agent_spaces.config.loader import get_config_path, load_config, save_config
from agent_spaces.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "save_config"]
