from __future__ import annotations

import io

import pytest
from rich import console as rich_console
from rich import style as rich_style

from termprompt.buffer import Buffer
from termprompt.layout import Block, Borders, Rect
from termprompt.prompts import TextPrompt, map_cursor
from termprompt.render_style import TextRenderStyle
from termprompt.state import TextState
from termprompt.status import Status
from termprompt.terminal import Terminal


def _render(
    prompt: TextPrompt, state: TextState, area: Rect
) -> Buffer:
    buffer = Buffer.empty(area)
    prompt.render(area, buffer, state)
    return buffer


def test_render_empty_value() -> None:
    prompt = TextPrompt.from_message("prompt")
    state = TextState()
    buffer = _render(prompt, state, Rect(0, 0, 15, 1))

    assert buffer.text_lines() == ["? prompt ›     "]
    assert state.cursor == (11, 0)


def test_render_prefix_styles() -> None:
    prompt = TextPrompt.from_message("prompt")
    buffer = _render(prompt, TextState(), Rect(0, 0, 15, 1))

    assert buffer.get(0, 0).style == rich_style.Style(color="cyan")
    assert not buffer.get(1, 0).style
    for x in range(2, 8):
        assert buffer.get(x, 0).style == rich_style.Style(bold=True)
    for x in range(8, 11):
        assert buffer.get(x, 0).style == rich_style.Style(color="cyan", dim=True)


def test_render_emoji_message() -> None:
    prompt = TextPrompt.from_message("🔍")
    state = TextState()
    buffer = _render(prompt, state, Rect(0, 0, 11, 1))

    assert buffer.text_lines() == ["? 🔍 ›     "]
    assert state.cursor == (7, 0)


@pytest.mark.parametrize(
    "status, glyph, color",
    [
        (Status.DONE, "✔", "green"),
        (Status.ABORTED, "✘", "red"),
    ],
)
def test_render_finished_status(status: Status, glyph: str, color: str) -> None:
    prompt = TextPrompt.from_message("prompt")
    buffer = _render(prompt, TextState(status=status), Rect(0, 0, 15, 1))

    assert buffer.row_text(0) == f"{glyph} prompt ›     "
    assert buffer.get(0, 0).style == rich_style.Style(color=color)


def test_render_with_value() -> None:
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="value")
    buffer = _render(prompt, state, Rect(0, 0, 15, 1))

    assert buffer.text_lines() == ["? prompt › valu"]
    assert state.cursor == (11, 0)


def test_render_with_block() -> None:
    prompt = TextPrompt.from_message("prompt").with_block(
        Block(borders=Borders.ALL, title="Title")
    )
    state = TextState()
    buffer = _render(prompt, state, Rect(0, 0, 15, 3))

    assert buffer.text_lines() == [
        "┌Title────────┐",
        "│? prompt ›   │",
        "└─────────────┘",
    ]
    assert buffer.get(1, 1).style == rich_style.Style(color="cyan")
    for x in range(3, 9):
        assert buffer.get(x, 1).style == rich_style.Style(bold=True)
    for x in range(9, 12):
        assert buffer.get(x, 1).style == rich_style.Style(color="cyan", dim=True)
    assert state.cursor == (12, 1)


def test_render_password() -> None:
    prompt = TextPrompt.from_message("prompt").with_render_style(
        TextRenderStyle.PASSWORD
    )
    state = TextState(value="value", position=5)
    buffer = _render(prompt, state, Rect(0, 0, 20, 1))

    assert buffer.text_lines() == ["? prompt › *****    "]
    assert state.cursor == (16, 0)


def test_render_invisible() -> None:
    prompt = TextPrompt.from_message("prompt").with_render_style(
        TextRenderStyle.INVISIBLE
    )
    state = TextState(value="value", position=5)
    buffer = _render(prompt, state, Rect(0, 0, 20, 1))

    assert buffer.text_lines() == ["? prompt ›          "]
    # the cursor still follows the logical position
    assert state.cursor == (16, 0)


def test_render_ascii_fallback_prompt() -> None:
    from termprompt import unicode as tui_unicode
    from termprompt.settings import TUIOptions

    manager = tui_unicode.UnicodeManager(TUIOptions(ascii_fallback=True))
    prompt = TextPrompt.from_message("prompt").with_unicode_manager(manager)
    buffer = _render(prompt, TextState(status=Status.DONE), Rect(0, 0, 11, 1))

    assert buffer.text_lines() == ["v prompt > "]


@pytest.mark.parametrize(
    "position, expected",
    [
        (0, (11, 0)),
        (2, (13, 0)),
        (4, (15, 0)),
        (5, (16, 0)),
        (6, (0, 1)),
        (7, (1, 1)),
        (22, (16, 1)),
        (99, (16, 1)),
    ],
)
def test_cursor_unwrapped_value(position: int, expected: tuple[int, int]) -> None:
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="hello", position=position)
    buffer = _render(prompt, state, Rect(0, 0, 17, 2))

    assert buffer.text_lines() == ["? prompt › hello ", " " * 17]
    assert state.cursor == expected


@pytest.mark.parametrize(
    "position, expected",
    [
        (0, (11, 0)),
        (3, (14, 0)),
        (5, (16, 0)),
        (6, (0, 1)),
        (7, (1, 1)),
        (10, (4, 1)),
        (12, (6, 1)),
        (13, (7, 1)),
        (22, (16, 1)),
        (99, (16, 1)),
    ],
)
def test_cursor_wrapped_value(position: int, expected: tuple[int, int]) -> None:
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="hello world", position=position)
    buffer = _render(prompt, state, Rect(0, 0, 17, 2))

    assert buffer.text_lines() == ["? prompt › hello ", "world            "]
    assert state.cursor == expected


def test_rows_below_area_are_dropped() -> None:
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="hello world and more", position=20)
    buffer = _render(prompt, state, Rect(0, 0, 17, 1))

    assert buffer.text_lines() == ["? prompt › hello "]
    assert state.cursor == (16, 0)


def test_render_offset_area() -> None:
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="hello world", position=7)
    area = Rect(0, 0, 20, 5)
    buffer = Buffer.empty(area)
    prompt.render(Rect(2, 3, 17, 2), buffer, state)

    assert buffer.row_text(3) == "  ? prompt › hello  "
    assert buffer.row_text(4) == "  world             "
    assert state.cursor == (3, 4)


def test_render_empty_area() -> None:
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="abc", position=3)
    area = Rect(4, 2, 0, 0)
    buffer = Buffer.empty(Rect(0, 0, 10, 3))
    prompt.render(area, buffer, state)

    assert buffer.text_lines() == [" " * 10] * 3
    assert state.cursor == (4, 2)


def test_map_cursor_degenerate_areas() -> None:
    assert map_cursor(5, Rect(3, 4, 0, 2)) == (3, 4)
    assert map_cursor(5, Rect(3, 4, 10, 0)) == (3, 4)
    assert map_cursor(-3, Rect(0, 0, 10, 1)) == (0, 0)


def test_map_cursor_is_monotonic_and_inside_area() -> None:
    area = Rect(1, 1, 17, 2)
    previous = -1
    for position in range(60):
        x, y = map_cursor(position, area)
        assert area.contains(x, y)
        index = (y - area.y) * area.width + (x - area.x)
        assert index >= previous
        previous = index
    assert previous == area.area() - 1


def test_compose_returns_prefix_width() -> None:
    prompt = TextPrompt.from_message("🔍")
    line, prefix_width = prompt.compose(TextState(value="abc"))

    assert prefix_width == 7
    assert "".join(segment.text for segment in line) == "? 🔍 › abc"


def _terminal(monkeypatch) -> tuple[Terminal, io.StringIO]:
    monkeypatch.setenv("TERM", "xterm-256color")
    output = io.StringIO()
    console = rich_console.Console(
        file=output,
        force_terminal=True,
        color_system=None,
        width=17,
        height=2,
    )
    return Terminal(console=console), output


def test_draw_unfocused_hides_cursor(monkeypatch) -> None:
    terminal, _ = _terminal(monkeypatch)
    prompt = TextPrompt.from_message("prompt")
    state = TextState()

    terminal.draw(lambda frame: prompt.draw(frame, frame.size(), state))

    assert state.cursor == (11, 0)
    assert terminal.cursor is None


def test_draw_focused_shows_cursor(monkeypatch) -> None:
    terminal, output = _terminal(monkeypatch)
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="hello world", position=7)
    state.focus()

    terminal.draw(lambda frame: prompt.draw(frame, frame.size(), state))

    assert state.cursor == (1, 1)
    assert terminal.cursor == (1, 1)
    assert "\x1b[2;2H" in output.getvalue()


def test_draw_focused_into_zero_height_area_surfaces_no_cursor(monkeypatch) -> None:
    terminal, _ = _terminal(monkeypatch)
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="hello")
    state.focus()

    terminal.draw(lambda frame: prompt.draw(frame, Rect(0, 2, 17, 0), state))

    assert state.cursor == (0, 2)
    assert terminal.cursor is None


def test_unfocused_render_is_repeatable(monkeypatch) -> None:
    terminal, _ = _terminal(monkeypatch)
    prompt = TextPrompt.from_message("prompt")
    state = TextState(value="hello")

    first = terminal.draw(lambda frame: prompt.draw(frame, frame.size(), state))
    assert terminal.cursor is None
    second = terminal.draw(lambda frame: prompt.draw(frame, frame.size(), state))
    assert terminal.cursor is None

    assert first.buffer == second.buffer
    assert first.buffer.text_lines() == ["? prompt › hello ", " " * 17]
    assert first.cursor is None
    assert second.cursor is None
    assert state.cursor == (11, 0)
