"""Launcher state machine shown in every session that has not launched yet.

Flow: pick a model preset, then pick "new" or "resume" for it. Shell-only
presets skip the mode step. A free-form command can be typed instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence, Union

from loguru import logger

from agent_spaces.core.events import ChangeNotifier

if TYPE_CHECKING:
    from agent_spaces.core.agent_session import AgentSession
    from agent_spaces.session.workspace_store import ModelConfig


@dataclass(frozen=True)
class SelectModel:
    pass


@dataclass(frozen=True)
class SelectMode:
    model: "ModelConfig"


@dataclass(frozen=True)
class CustomCommand:
    pass


LauncherState = Union[SelectModel, SelectMode, CustomCommand]

MODE_NEW = "new"
MODE_RESUME = "resume"

ModelsProvider = Callable[[], Sequence["ModelConfig"]]


class Launcher:
    """Per-session launcher. Calls ``session.launch`` exactly once."""

    def __init__(
        self,
        session: "AgentSession",
        models_provider: ModelsProvider,
        on_open_settings: Callable[[], None] | None = None,
    ) -> None:
        self._session = session
        self._models_provider = models_provider
        self._on_open_settings = on_open_settings
        self.state: LauncherState = SelectModel()
        self.selected_index = 0
        self.custom_text = ""
        self.changes = ChangeNotifier()

    @property
    def session(self) -> "AgentSession":
        return self._session

    @property
    def finished(self) -> bool:
        return self._session.has_launched or self._session.is_destroyed

    @property
    def models(self) -> list["ModelConfig"]:
        return list(self._models_provider())

    @property
    def mode_options(self) -> list[str]:
        """Options offered in ``SelectMode``; resume only when the preset has one."""
        if not isinstance(self.state, SelectMode):
            return []
        options = [MODE_NEW]
        if self.state.model.can_resume:
            options.append(MODE_RESUME)
        return options

    def _option_count(self) -> int:
        if isinstance(self.state, SelectModel):
            return len(self.models)
        if isinstance(self.state, SelectMode):
            return len(self.mode_options)
        return 0

    def _enter(self, state: LauncherState) -> None:
        self.state = state
        self.selected_index = 0
        self.changes.notify("state")

    # ------------------------------------------------------------------ #
    # Cursor                                                               #
    # ------------------------------------------------------------------ #

    def move_up(self) -> None:
        if self.finished:
            return
        if self.selected_index > 0:
            self.selected_index -= 1
            self.changes.notify("cursor")

    def move_down(self) -> None:
        if self.finished:
            return
        if self.selected_index < self._option_count() - 1:
            self.selected_index += 1
            self.changes.notify("cursor")

    def confirm(self) -> None:
        """Act on the option under the cursor."""
        if self.finished:
            return
        state = self.state
        if isinstance(state, SelectModel):
            self.choose_model(self.selected_index)
        elif isinstance(state, SelectMode):
            options = self.mode_options
            if not options:
                return
            index = min(self.selected_index, len(options) - 1)
            if options[index] == MODE_RESUME:
                self.launch_resume()
            else:
                self.launch_new()
        else:
            self.submit_custom()

    # ------------------------------------------------------------------ #
    # Model selection                                                      #
    # ------------------------------------------------------------------ #

    def choose_model(self, index: int) -> None:
        if self.finished or not isinstance(self.state, SelectModel):
            return
        models = self.models
        if not 0 <= index < len(models):
            return
        model = models[index]
        if model.is_shell_only:
            self._launch("")
            return
        self._enter(SelectMode(model))

    def choose_shortcut(self, key: str) -> bool:
        """Jump to and choose the preset whose shortcut is *key*."""
        if self.finished or not isinstance(self.state, SelectModel) or not key:
            return False
        for index, model in enumerate(self.models):
            if model.shortcut == key:
                self.selected_index = index
                self.choose_model(index)
                return True
        return False

    def open_custom(self) -> None:
        if self.finished or not isinstance(self.state, SelectModel):
            return
        self.custom_text = ""
        self._enter(CustomCommand())

    def open_settings(self) -> None:
        if self._on_open_settings is not None:
            self._on_open_settings()

    # ------------------------------------------------------------------ #
    # Mode selection                                                       #
    # ------------------------------------------------------------------ #

    def launch_new(self) -> None:
        if self.finished or not isinstance(self.state, SelectMode):
            return
        self._launch(self.state.model.new_command)

    def launch_resume(self) -> None:
        if self.finished or not isinstance(self.state, SelectMode):
            return
        command = self.state.model.resume_command
        if not command:
            return
        self._launch(command)

    def back(self) -> None:
        if self.finished or isinstance(self.state, SelectModel):
            return
        self.custom_text = ""
        self._enter(SelectModel())

    # ------------------------------------------------------------------ #
    # Custom command                                                       #
    # ------------------------------------------------------------------ #

    def set_custom_text(self, text: str) -> None:
        if self.finished or not isinstance(self.state, CustomCommand):
            return
        self.custom_text = text

    def submit_custom(self) -> None:
        if self.finished or not isinstance(self.state, CustomCommand):
            return
        if not self.custom_text.strip():
            return
        self._launch(self.custom_text)

    # ------------------------------------------------------------------ #
    # Keyboard                                                             #
    # ------------------------------------------------------------------ #

    def handle_key(self, key: str) -> bool:
        """Map a key name (Tk keysym or a single character) to an action.

        Returns True when the key was consumed.
        """
        if self.finished:
            return False
        state = self.state

        if isinstance(state, CustomCommand):
            # Text entry owns every other key while typing.
            if key == "Return":
                self.submit_custom()
                return True
            if key == "Escape":
                self.back()
                return True
            return False

        if key == "Up":
            self.move_up()
            return True
        if key == "Down":
            self.move_down()
            return True
        if key == "Return":
            self.confirm()
            return True

        if isinstance(state, SelectModel):
            if key == "c":
                self.open_custom()
                return True
            if key == "e":
                self.open_settings()
                return True
            if len(key) == 1 and key.isdigit():
                return self.choose_shortcut(key)
            return False

        if key == "Escape":
            self.back()
            return True
        if key == "n":
            self.launch_new()
            return True
        if key == "r":
            self.launch_resume()
            return True
        return False

    def _launch(self, command: str) -> None:
        logger.debug("[launcher] {} -> {!r}", self._session.name, command)
        self._session.launch(command)
        self.changes.notify("launched")
