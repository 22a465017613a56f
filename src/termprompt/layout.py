from __future__ import annotations

import enum
import typing
from dataclasses import dataclass

from rich import box as rich_box
from rich import style as rich_style

if typing.TYPE_CHECKING:
    from termprompt.buffer import Buffer


@dataclass(frozen=True)
class Rect:
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def area(self) -> int:
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def left(self) -> int:
        return self.x

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def top(self) -> int:
        return self.y

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, x: int, y: int) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def intersection(self, other: Rect) -> Rect:
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.right, other.right)
        y2 = min(self.bottom, other.bottom)
        return Rect(x1, y1, max(0, x2 - x1), max(0, y2 - y1))

    def split_horizontal(self, left_width: int) -> tuple[Rect, Rect]:
        left_width = max(0, min(left_width, self.width))
        left = Rect(self.x, self.y, left_width, self.height)
        right = Rect(self.x + left_width, self.y, self.width - left_width, self.height)
        return left, right

    def split_vertical(self, top_height: int) -> tuple[Rect, Rect]:
        top_height = max(0, min(top_height, self.height))
        top = Rect(self.x, self.y, self.width, top_height)
        bottom = Rect(self.x, self.y + top_height, self.width, self.height - top_height)
        return top, bottom


class Borders(enum.Flag):
    NONE = 0
    TOP = enum.auto()
    RIGHT = enum.auto()
    BOTTOM = enum.auto()
    LEFT = enum.auto()
    ALL = TOP | RIGHT | BOTTOM | LEFT


@dataclass(frozen=True)
class Block:
    """
    A border drawn around a prompt.

    The border glyphs come from a ``rich.box.Box``. The title is drawn on the
    top row, after the top-left corner.
    """

    borders: Borders = Borders.NONE
    title: str | None = None
    box: rich_box.Box = rich_box.SQUARE
    border_style: rich_style.Style | str | None = None
    title_style: rich_style.Style | str | None = None

    def inner(self, area: Rect) -> Rect:
        x, y, width, height = area.x, area.y, area.width, area.height
        if Borders.LEFT in self.borders:
            x = min(x + 1, area.right)
            width = max(0, width - 1)
        if Borders.TOP in self.borders or self.title:
            y = min(y + 1, area.bottom)
            height = max(0, height - 1)
        if Borders.RIGHT in self.borders:
            width = max(0, width - 1)
        if Borders.BOTTOM in self.borders:
            height = max(0, height - 1)
        return Rect(x, y, width, height)

    def render(self, area: Rect, buffer: Buffer) -> None:
        if area.is_empty():
            return
        borders = self.borders
        box = self.box
        style = self.border_style
        last_x = area.right - 1
        last_y = area.bottom - 1

        if Borders.LEFT in borders:
            for y in range(area.top, area.bottom):
                buffer.set_string(area.left, y, box.mid_left, style)
        if Borders.RIGHT in borders:
            for y in range(area.top, area.bottom):
                buffer.set_string(last_x, y, box.mid_right, style)
        if Borders.TOP in borders:
            for x in range(area.left, area.right):
                buffer.set_string(x, area.top, box.top, style)
        if Borders.BOTTOM in borders:
            for x in range(area.left, area.right):
                buffer.set_string(x, last_y, box.bottom, style)

        if Borders.TOP in borders and Borders.LEFT in borders:
            buffer.set_string(area.left, area.top, box.top_left, style)
        if Borders.TOP in borders and Borders.RIGHT in borders:
            buffer.set_string(last_x, area.top, box.top_right, style)
        if Borders.BOTTOM in borders and Borders.LEFT in borders:
            buffer.set_string(area.left, last_y, box.bottom_left, style)
        if Borders.BOTTOM in borders and Borders.RIGHT in borders:
            buffer.set_string(last_x, last_y, box.bottom_right, style)

        if self.title:
            left = area.left + (1 if Borders.LEFT in borders else 0)
            right = area.right - (1 if Borders.RIGHT in borders else 0)
            buffer.set_string(left, area.top, self.title, self.title_style, right - left)
