from __future__ import annotations

import enum
import typing

if typing.TYPE_CHECKING:
    from termprompt.state import State


MASK_CHAR: typing.Final[str] = "*"


class TextRenderStyle(str, enum.Enum):
    DEFAULT = "default"
    PASSWORD = "password"
    INVISIBLE = "invisible"

    def render(self, state: State) -> str:
        """Return the text displayed for the state's value in this mode."""
        if self is TextRenderStyle.PASSWORD:
            return MASK_CHAR * len(state.value)
        if self is TextRenderStyle.INVISIBLE:
            return ""
        return state.value
