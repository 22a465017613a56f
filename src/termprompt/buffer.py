from __future__ import annotations

import typing
from dataclasses import dataclass, field

from rich import cells as rich_cells
from rich import segment as rich_segment
from rich import style as rich_style

from termprompt.layout import Rect
from termprompt.lines import Line, Lines


StyleLike = typing.Union[rich_style.Style, str, None]


def _to_style(style: StyleLike) -> rich_style.Style:
    if style is None:
        return rich_style.Style.null()
    if isinstance(style, str):
        return rich_style.Style.parse(style)
    return style


@dataclass
class Cell:
    symbol: str = " "
    style: rich_style.Style = field(default_factory=rich_style.Style.null)

    def reset(self) -> None:
        self.symbol = " "
        self.style = rich_style.Style.null()


class Buffer:
    """
    A grid of styled cells covering ``area``.

    A double-width character occupies its cell and the one to its right; the
    second cell holds an empty symbol so that text export skips it.
    """

    def __init__(self, area: Rect) -> None:
        self.area = area
        self._cells: list[Cell] = [Cell() for _ in range(max(0, area.area()))]

    @classmethod
    def empty(cls, area: Rect) -> Buffer:
        return cls(area)

    @classmethod
    def with_lines(cls, lines: typing.Sequence[str]) -> Buffer:
        height = len(lines)
        width = max((rich_cells.cell_len(line) for line in lines), default=0)
        buffer = cls(Rect(0, 0, width, height))
        for y, line in enumerate(lines):
            buffer.set_string(0, y, line)
        return buffer

    def _index(self, x: int, y: int) -> int:
        if not self.area.contains(x, y):
            raise IndexError(f"({x}, {y}) is outside of {self.area}")
        return (y - self.area.y) * self.area.width + (x - self.area.x)

    def get(self, x: int, y: int) -> Cell:
        return self._cells[self._index(x, y)]

    def reset(self) -> None:
        for cell in self._cells:
            cell.reset()

    def set_string(
        self,
        x: int,
        y: int,
        text: str,
        style: StyleLike = None,
        max_width: int | None = None,
    ) -> int:
        """Write text at (x, y), clipped to the buffer and to ``max_width``."""
        if y < self.area.top or y >= self.area.bottom:
            return x
        limit = self.area.right
        if max_width is not None:
            limit = min(limit, x + max(0, max_width))
        resolved = _to_style(style)
        for ch in text:
            width = rich_cells.cell_len(ch)
            if width == 0:
                continue
            if x + width > limit:
                break
            if x >= self.area.left:
                cell = self.get(x, y)
                cell.symbol = ch
                cell.style = resolved
                for offset in range(1, width):
                    filler = self.get(x + offset, y)
                    filler.symbol = ""
                    filler.style = resolved
            x += width
        return x

    def set_line(self, x: int, y: int, line: Line, max_width: int) -> int:
        limit = x + max(0, max_width)
        for segment in line:
            if x >= limit:
                break
            x = self.set_string(x, y, segment.text, segment.style, limit - x)
        return x

    def set_lines(self, area: Rect, lines: typing.Iterable[Line]) -> None:
        for row, line in enumerate(lines):
            if row >= area.height:
                break
            self.set_line(area.x, area.y + row, line, area.width)

    def set_style(self, area: Rect, style: StyleLike) -> None:
        resolved = _to_style(style)
        target = self.area.intersection(area)
        for y in range(target.top, target.bottom):
            for x in range(target.left, target.right):
                cell = self.get(x, y)
                cell.style = cell.style + resolved

    def row_text(self, y: int) -> str:
        return "".join(self.get(x, y).symbol for x in range(self.area.left, self.area.right))

    def text_lines(self) -> list[str]:
        return [self.row_text(y) for y in range(self.area.top, self.area.bottom)]

    def row_segments(self, y: int) -> Line:
        segments = (
            rich_segment.Segment(cell.symbol, cell.style or None)
            for cell in (self.get(x, y) for x in range(self.area.left, self.area.right))
            if cell.symbol
        )
        return list(rich_segment.Segment.simplify(segments))

    def to_lines(self) -> Lines:
        return [self.row_segments(y) for y in range(self.area.top, self.area.bottom)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Buffer):
            return NotImplemented
        if self.area != other.area:
            return False
        return all(
            a.symbol == b.symbol and a.style == b.style
            for a, b in zip(self._cells, other._cells)
        )

    def __repr__(self) -> str:
        rows = "\n".join(f"    {line!r}," for line in self.text_lines())
        return f"Buffer(area={self.area!r}, lines=[\n{rows}\n])"
