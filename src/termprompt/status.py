from __future__ import annotations

import enum
import typing

from rich import segment as rich_segment
from rich import style as rich_style

from termprompt import unicode as tui_unicode


STATUS_STYLES: typing.Final[dict[str, rich_style.Style]] = {
    "pending": rich_style.Style(color="cyan"),
    "aborted": rich_style.Style(color="red"),
    "done": rich_style.Style(color="green"),
}


class Status(str, enum.Enum):
    """The lifecycle of a prompt. Done and Aborted are terminal."""

    PENDING = "pending"
    ABORTED = "aborted"
    DONE = "done"

    def is_finished(self) -> bool:
        return self in (Status.ABORTED, Status.DONE)

    def symbol(
        self, unicode_manager: tui_unicode.UnicodeManager | None = None
    ) -> rich_segment.Segment:
        manager = unicode_manager or tui_unicode.DEFAULT_UNICODE_MANAGER
        return rich_segment.Segment(manager.glyph(self.value), STATUS_STYLES[self.value])


class Focus(str, enum.Enum):
    UNFOCUSED = "unfocused"
    FOCUSED = "focused"

    def is_focused(self) -> bool:
        return self is Focus.FOCUSED
