from __future__ import annotations

import itertools
import typing
from dataclasses import dataclass, replace

from rich import segment as rich_segment
from rich import style as rich_style

from termprompt import lines as tui_lines
from termprompt import unicode as tui_unicode
from termprompt.buffer import Buffer
from termprompt.layout import Block, Rect
from termprompt.logger import logger
from termprompt.prompts.base import Prompt
from termprompt.render_style import TextRenderStyle
from termprompt.state import State


MESSAGE_STYLE: typing.Final[rich_style.Style] = rich_style.Style(bold=True)
SEPARATOR_STYLE: typing.Final[rich_style.Style] = rich_style.Style(color="cyan", dim=True)


def map_cursor(logical_position: int, area: Rect) -> tuple[int, int]:
    """
    Map a column offset from the start of the prompt line to screen
    coordinates inside ``area``.

    The offset is clamped to the last cell of the area. Positions past the
    end of the wrapped value are not clamped to the value itself, so a large
    offset can land after the last character on the last row.
    """
    width = area.width
    if width <= 0 or area.height <= 0:
        return (area.x, area.y)
    position = min(max(0, logical_position), area.area() - 1)
    row, column = divmod(position, width)
    return (area.x + column, area.y + row)


@dataclass(frozen=True)
class TextPrompt(Prompt[State]):
    """
    A prompt that displays a status glyph, a message and a text input.

    The line is wrapped at character boundaries to the width of the area;
    rows below the area are dropped.
    """

    message: str = ""
    block: Block | None = None
    render_style: TextRenderStyle = TextRenderStyle.DEFAULT
    unicode_manager: tui_unicode.UnicodeManager | None = None

    @classmethod
    def from_message(cls, message: str) -> TextPrompt:
        return cls(message=message)

    def with_block(self, block: Block) -> TextPrompt:
        return replace(self, block=block)

    def with_render_style(self, render_style: TextRenderStyle) -> TextPrompt:
        return replace(self, render_style=render_style)

    def with_unicode_manager(
        self, unicode_manager: tui_unicode.UnicodeManager
    ) -> TextPrompt:
        return replace(self, unicode_manager=unicode_manager)

    def prefix(self, state: State) -> tui_lines.Line:
        manager = self.unicode_manager or tui_unicode.DEFAULT_UNICODE_MANAGER
        separator = f" {manager.glyph('separator')} "
        return [
            state.status.symbol(manager),
            rich_segment.Segment(" "),
            rich_segment.Segment(self.message, MESSAGE_STYLE),
            rich_segment.Segment(separator, SEPARATOR_STYLE),
        ]

    def compose(self, state: State) -> tuple[tui_lines.Line, int]:
        """Build the logical prompt line and return it with its prefix width."""
        prefix = self.prefix(state)
        value = self.render_style.render(state)
        return [*prefix, rich_segment.Segment(value)], tui_lines.line_width(prefix)

    def render(self, area: Rect, buffer: Buffer, state: State) -> None:
        area = self._render_block(area, buffer)
        if area.is_empty():
            logger.debug("Prompt area is empty", area=area)

        line, prefix_width = self.compose(state)
        wrapped = list(
            itertools.islice(tui_lines.wrap(line, area.width), max(0, area.height))
        )
        state.cursor = map_cursor(prefix_width + state.position, area)
        buffer.set_lines(area, wrapped)

    def _render_block(self, area: Rect, buffer: Buffer) -> Rect:
        block = self.block
        if block is None:
            return area
        block.render(area, buffer)
        return block.inner(area)
