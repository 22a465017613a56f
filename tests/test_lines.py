from __future__ import annotations

import typing

import pytest
from rich import segment as rich_segment
from rich import style as rich_style

from termprompt import lines as tui_lines


RED = rich_style.Style(color="red")


def _texts(lines: tui_lines.Lines) -> list[str]:
    return [tui_lines.line_text(line) for line in lines]


def test_line_width_counts_columns() -> None:
    line = [rich_segment.Segment("ab"), rich_segment.Segment("🔍")]
    assert tui_lines.line_width(line) == 4
    assert tui_lines.line_text(line) == "ab🔍"


def test_split_segment_at_keeps_style() -> None:
    first, second = tui_lines.split_segment_at(rich_segment.Segment("hello", RED), 2)
    assert first == rich_segment.Segment("he", RED)
    assert second == rich_segment.Segment("llo", RED)


def test_split_line_at_splits_straddling_run() -> None:
    line = [rich_segment.Segment("ab", RED), rich_segment.Segment("cde")]
    first, second = tui_lines.split_line_at(line, 3)
    assert first == [rich_segment.Segment("ab", RED), rich_segment.Segment("c")]
    assert second == [rich_segment.Segment("de")]


def test_split_line_at_run_boundary() -> None:
    line = [rich_segment.Segment("ab", RED), rich_segment.Segment("cd")]
    first, second = tui_lines.split_line_at(line, 2)
    assert first == [rich_segment.Segment("ab", RED)]
    assert second == [rich_segment.Segment("cd")]


def test_wrap_breaks_at_character_boundaries() -> None:
    line = [rich_segment.Segment("hello world")]
    assert _texts(list(tui_lines.wrap(line, 5))) == ["hello", " worl", "d"]


def test_wrap_preserves_all_content_and_styles() -> None:
    line = [
        rich_segment.Segment("?", RED),
        rich_segment.Segment(" prompt "),
        rich_segment.Segment("value", RED),
    ]
    wrapped = list(tui_lines.wrap(line, 4))

    assert "".join(_texts(wrapped)) == "? prompt value"
    assert all(tui_lines.line_width(row) <= 4 for row in wrapped)
    assert wrapped[-1] == [rich_segment.Segment("ue", RED)]


def test_wrap_line_that_fits() -> None:
    line = [rich_segment.Segment("abc")]
    assert _texts(list(tui_lines.wrap(line, 3))) == ["abc"]
    assert _texts(list(tui_lines.wrap(line, 10))) == ["abc"]


def test_wrap_is_restartable() -> None:
    wrapped = tui_lines.wrap([rich_segment.Segment("abcdefg")], 3)
    first_pass = _texts(list(wrapped))
    second_pass = _texts(list(wrapped))
    assert first_pass == ["abc", "def", "g"]
    assert second_pass == first_pass


def test_wrap_degenerate_input_yields_nothing() -> None:
    assert list(tui_lines.wrap([rich_segment.Segment("abc")], 0)) == []
    assert list(tui_lines.wrap([rich_segment.Segment("abc")], -1)) == []
    assert list(tui_lines.wrap([], 5)) == []
    assert list(tui_lines.wrap([rich_segment.Segment("")], 5)) == []


def test_wrap_splits_wide_glyph_run_by_character_index() -> None:
    # The straddling run is cut at a character index, so a double-width
    # glyph before the cut makes the row one column wider than requested.
    line = [rich_segment.Segment("ab🔍c")]
    wrapped = list(tui_lines.wrap(line, 3))
    assert _texts(wrapped) == ["ab🔍", "c"]
    assert tui_lines.line_width(wrapped[0]) == 4


def test_wrap_wide_glyphs_narrower_than_glyph_terminates() -> None:
    line = [rich_segment.Segment("🔍🔍")]
    assert _texts(list(tui_lines.wrap(line, 1))) == ["🔍", "🔍"]


SWEEP_LINE = [
    rich_segment.Segment("?", rich_style.Style(color="cyan")),
    rich_segment.Segment(" "),
    rich_segment.Segment("label", rich_style.Style(bold=True)),
    rich_segment.Segment(" > ", rich_style.Style(color="cyan", dim=True)),
    rich_segment.Segment("the quick brown fox"),
    rich_segment.Segment(""),
    rich_segment.Segment("äëï", RED),
]


def _styled_chars(lines: typing.Iterable[tui_lines.Line]) -> list[tuple[str, object]]:
    return [(ch, segment.style) for line in lines for segment in line for ch in segment.text]


@pytest.mark.parametrize("width", range(1, 36))
def test_wrap_single_width_sweep(width: int) -> None:
    total = tui_lines.line_width(SWEEP_LINE)
    wrapped = list(tui_lines.wrap(SWEEP_LINE, width))

    assert "".join(_texts(wrapped)) == tui_lines.line_text(SWEEP_LINE)
    assert _styled_chars(wrapped) == _styled_chars([SWEEP_LINE])
    assert len(wrapped) == -(-total // width)
    for row in wrapped[:-1]:
        assert tui_lines.line_width(row) == width
    assert 0 < tui_lines.line_width(wrapped[-1]) <= width
