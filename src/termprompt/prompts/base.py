from __future__ import annotations

import typing
from abc import ABC, abstractmethod

from termprompt.buffer import Buffer
from termprompt.layout import Rect
from termprompt.state import State
from termprompt.terminal import Frame

StateT = typing.TypeVar("StateT", bound=State)


class Prompt(ABC, typing.Generic[StateT]):
    """A prompt that can be rendered into a buffer and drawn to a frame."""

    @abstractmethod
    def render(self, area: Rect, buffer: Buffer, state: StateT) -> None:
        raise NotImplementedError

    def draw(self, frame: Frame, area: Rect, state: StateT) -> None:
        """
        Render the prompt into the frame and, when the state is focused, place
        the frame's visible cursor at the state's cursor. An unfocused prompt
        still updates ``state.cursor`` but never surfaces it, and neither does
        a prompt whose area has no cell for the cursor.
        """
        self.render(area, frame.buffer, state)
        if state.is_focused() and area.contains(*state.cursor):
            frame.set_cursor(*state.cursor)
