from __future__ import annotations

import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

from termprompt.input import base as input_base
from termprompt.logger import logger
from termprompt.status import Focus, Status


@dataclass(frozen=True)
class KeyBinding:
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False


# Named keys trigger their operation whatever the modifiers are.
NAMED_KEYS: typing.Final[dict[str, str]] = {
    "enter": "complete",
    "esc": "abort",
    "left": "move_left",
    "right": "move_right",
    "home": "move_start",
    "end": "move_end",
    "backspace": "backspace",
    "delete": "delete",
}

CHORD_KEYS: typing.Final[dict[KeyBinding, str]] = {
    KeyBinding("c", ctrl=True): "abort",
    KeyBinding("b", ctrl=True): "move_left",
    KeyBinding("f", ctrl=True): "move_right",
    KeyBinding("a", ctrl=True): "move_start",
    KeyBinding("e", ctrl=True): "move_end",
    KeyBinding("h", ctrl=True): "backspace",
    KeyBinding("d", ctrl=True): "delete",
    KeyBinding("k", ctrl=True): "kill",
    KeyBinding("u", ctrl=True): "truncate",
}


class State(ABC):
    """
    Editable prompt state.

    Implementations provide the five fields as mutable attributes; every
    editing operation is implemented here in terms of them.

    Keybindings:
    - Enter: complete
    - Esc | Ctrl+C: abort
    - Left | Ctrl+B: move cursor left
    - Right | Ctrl+F: move cursor right
    - Home | Ctrl+A: move cursor to start of line
    - End | Ctrl+E: move cursor to end of line
    - Backspace | Ctrl+H: delete character before cursor
    - Delete | Ctrl+D: delete character under cursor
    - Ctrl+K: delete from cursor to end of line
    - Ctrl+U: clear the line
    """

    @property
    @abstractmethod
    def status(self) -> Status:
        raise NotImplementedError

    @status.setter
    @abstractmethod
    def status(self, value: Status) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def focus_state(self) -> Focus:
        raise NotImplementedError

    @focus_state.setter
    @abstractmethod
    def focus_state(self, value: Focus) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def position(self) -> int:
        raise NotImplementedError

    @position.setter
    @abstractmethod
    def position(self, value: int) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def cursor(self) -> tuple[int, int]:
        raise NotImplementedError

    @cursor.setter
    @abstractmethod
    def cursor(self, value: tuple[int, int]) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def value(self) -> str:
        raise NotImplementedError

    @value.setter
    @abstractmethod
    def value(self, value: str) -> None:
        raise NotImplementedError

    def is_finished(self) -> bool:
        return self.status.is_finished()

    def is_focused(self) -> bool:
        return self.focus_state.is_focused()

    def _edit_position(self) -> int:
        return max(0, min(self.position, len(self.value)))

    def handle_key_event(self, event: input_base.KeyEvent) -> None:
        if not event.is_press:
            logger.debug("Ignoring key release", key=event.key)
            return

        operation = CHORD_KEYS.get(
            KeyBinding(key=event.key, ctrl=event.ctrl, alt=event.alt, shift=event.shift)
        )
        if operation is None:
            operation = NAMED_KEYS.get(event.key)
        if operation is not None:
            getattr(self, operation)()
            return

        if event.ctrl or event.alt or not event.text:
            return
        for ch in event.text:
            if ch.isprintable():
                self.push(ch)

    def complete(self) -> None:
        if self.is_finished():
            return
        self.status = Status.DONE
        logger.info("Prompt completed", length=len(self.value))

    def abort(self) -> None:
        if self.is_finished():
            return
        self.status = Status.ABORTED
        logger.info("Prompt aborted")

    def focus(self) -> None:
        self.focus_state = Focus.FOCUSED

    def blur(self) -> None:
        self.focus_state = Focus.UNFOCUSED

    def push(self, ch: str) -> None:
        if self.is_finished():
            return
        position = self._edit_position()
        value = self.value
        self.value = value[:position] + ch + value[position:]
        self.position = position + len(ch)

    def backspace(self) -> None:
        if self.is_finished():
            return
        position = self._edit_position()
        if position == 0:
            return
        value = self.value
        self.value = value[: position - 1] + value[position:]
        self.position = position - 1

    def delete(self) -> None:
        if self.is_finished():
            return
        position = self._edit_position()
        value = self.value
        if position >= len(value):
            return
        self.value = value[:position] + value[position + 1 :]
        self.position = position

    def move_left(self) -> None:
        if self.is_finished():
            return
        self.position = max(0, self._edit_position() - 1)

    def move_right(self) -> None:
        if self.is_finished():
            return
        self.position = min(len(self.value), self._edit_position() + 1)

    def move_start(self) -> None:
        if self.is_finished():
            return
        self.position = 0

    def move_end(self) -> None:
        if self.is_finished():
            return
        self.position = len(self.value)

    def kill(self) -> None:
        if self.is_finished():
            return
        position = self._edit_position()
        self.value = self.value[:position]
        self.position = position

    def truncate(self) -> None:
        if self.is_finished():
            return
        self.value = ""
        self.position = 0


@dataclass
class TextState(State):
    status: Status = Status.PENDING
    focus_state: Focus = Focus.UNFOCUSED
    position: int = 0
    cursor: tuple[int, int] = (0, 0)
    value: str = ""

    def with_value(self, value: str) -> TextState:
        return replace(self, value=value)

    def with_status(self, status: Status) -> TextState:
        return replace(self, status=status)

    def with_focus(self, focus: Focus) -> TextState:
        return replace(self, focus_state=focus)
