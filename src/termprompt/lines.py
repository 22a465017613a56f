"""
Styled lines and the character-based wrap engine.

A styled line is a list of ``rich.segment.Segment`` runs. Widths are always
measured in terminal display columns, while run splitting happens at a
character index inside the run.
"""

from __future__ import annotations

import typing

from rich import cells as rich_cells
from rich import segment as rich_segment


Line = typing.List[rich_segment.Segment]
Lines = typing.List[Line]


def line_width(line: typing.Iterable[rich_segment.Segment]) -> int:
    return sum(rich_cells.cell_len(segment.text) for segment in line)


def line_text(line: typing.Iterable[rich_segment.Segment]) -> str:
    return "".join(segment.text for segment in line)


def split_segment_at(
    segment: rich_segment.Segment, mid: int
) -> tuple[rich_segment.Segment, rich_segment.Segment]:
    """
    Split a run into two runs sharing its style.

    ``mid`` is used as a character index. For double-width text it does not
    correspond to the column offset, so the first part may be wider than
    ``mid`` columns.
    """
    text = segment.text
    first = rich_segment.Segment(text[:mid], segment.style, segment.control)
    second = rich_segment.Segment(text[mid:], segment.style, segment.control)
    return first, second


def split_line_at(line: Line, mid: int) -> tuple[Line, Line]:
    first: Line = []
    second: Line = []
    first_width = 0
    for segment in line:
        segment_width = rich_cells.cell_len(segment.text)
        if first_width + segment_width <= mid:
            first.append(segment)
            first_width += segment_width
        elif first_width < mid:
            segment_first, segment_second = split_segment_at(segment, mid - first_width)
            first.append(segment_first)
            second.append(segment_second)
            first_width += rich_cells.cell_len(segment_first.text)
        else:
            second.append(segment)
    return first, second


class Wrapped:
    """
    Restartable view of a line wrapped to ``width`` columns.

    Every iteration starts from the original line. Lines are produced lazily,
    so callers can stop after as many rows as they can display.
    """

    def __init__(self, line: Line, width: int) -> None:
        self._line = list(line)
        self._width = width

    def __iter__(self) -> typing.Iterator[Line]:
        width = self._width
        if width <= 0:
            return
        rest = self._line
        while True:
            rest_width = line_width(rest)
            if rest_width > width:
                first, rest = split_line_at(rest, width)
                yield first
            elif rest_width > 0:
                yield rest
                return
            else:
                return


def wrap(line: Line, width: int) -> Wrapped:
    return Wrapped(line, width)
