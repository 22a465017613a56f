from __future__ import annotations

import asyncio
import typing

from rich import console as rich_console
from rich import control as rich_control
from rich import segment as rich_segment

from termprompt import controls as tui_controls
from termprompt.buffer import Buffer
from termprompt.input import base as input_base
from termprompt.layout import Rect
from termprompt.logger import logger


class Widget(typing.Protocol):
    def render(self, area: Rect, buffer: Buffer) -> None:
        ...


class Frame:
    """One draw pass: a cell buffer plus an optional visible cursor."""

    def __init__(self, area: Rect) -> None:
        self._area = area
        self.buffer = Buffer.empty(area)
        self.cursor: tuple[int, int] | None = None

    def size(self) -> Rect:
        return self._area

    def render_widget(self, widget: Widget, area: Rect) -> None:
        widget.render(area, self.buffer)

    def set_cursor(self, x: int, y: int) -> None:
        self.cursor = (x, y)


class Terminal:
    def __init__(
        self,
        console: rich_console.Console | None = None,
        input_handler: input_base.InputHandler | None = None,
    ) -> None:
        self._console: rich_console.Console = (
            console if console is not None else rich_console.Console()
        )
        self._input_handler = input_handler
        self._input_task: asyncio.Task[None] | None = None
        self._cursor: tuple[int, int] | None = None
        self._last_buffer: Buffer | None = None

    @property
    def console(self) -> rich_console.Console:
        return self._console

    @property
    def input_handler(self) -> input_base.InputHandler | None:
        return self._input_handler

    @property
    def cursor(self) -> tuple[int, int] | None:
        """The cursor position shown by the last draw, or None if hidden."""
        return self._cursor

    @property
    def last_buffer(self) -> Buffer | None:
        return self._last_buffer

    def size(self) -> Rect:
        size = self._console.size
        return Rect(0, 0, max(0, size.width), max(0, size.height))

    def draw(self, callback: typing.Callable[[Frame], None]) -> Frame:
        frame = Frame(self.size())
        callback(frame)
        self._flush(frame)
        self._last_buffer = frame.buffer
        return frame

    def clear(self) -> None:
        self._console.control(
            rich_control.Control.clear(),
            rich_control.Control.home(),
        )
        self._last_buffer = None

    def show_cursor(self, show: bool = True) -> None:
        self._console.control(rich_control.Control.show_cursor(show))
        if not show:
            self._cursor = None

    def _flush(self, frame: Frame) -> None:
        area = frame.size()
        if area.is_empty():
            logger.debug("Skipping draw of empty frame", area=area)
            return

        batched: list[rich_segment.Segment] = []
        lines = frame.buffer.to_lines()
        for index, line in enumerate(lines):
            batched.extend(line)
            if index < len(lines) - 1:
                batched.append(rich_segment.Segment.line())

        self._console.control(
            tui_controls.CustomControl.sync_update_start(),
            rich_control.Control.home(),
        )
        self._console.print(rich_segment.Segments(batched), end="")
        self._console.control(tui_controls.CustomControl.erase_down())

        cursor = frame.cursor
        if cursor is not None:
            self._console.control(
                rich_control.Control.move_to(cursor[0], cursor[1]),
                rich_control.Control.show_cursor(True),
            )
        else:
            self._console.control(rich_control.Control.show_cursor(False))
        self._cursor = cursor
        self._console.control(tui_controls.CustomControl.sync_update_end())

    async def start(self) -> None:
        self.clear()
        if self._input_handler is None:
            return
        if self._input_task is not None and not self._input_task.done():
            return
        loop = asyncio.get_running_loop()
        self._input_task = loop.create_task(self._input_handler.run())
        await asyncio.sleep(0)

    async def stop(self) -> None:
        task = self._input_task
        if task is None:
            return
        self._input_task = None
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.show_cursor(True)

    async def wait(self) -> None:
        if self._input_handler is None:
            raise RuntimeError("Terminal has no input handler")
        task = self._input_task
        if task is None:
            return
        await task
