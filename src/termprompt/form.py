from __future__ import annotations

import typing
from dataclasses import dataclass

from rich import box as rich_box

from termprompt import unicode as tui_unicode
from termprompt.input import base as input_base
from termprompt.layout import Block, Borders, Rect
from termprompt.logger import logger
from termprompt.prompts.text_prompt import TextPrompt
from termprompt.settings import FieldSettings
from termprompt.state import TextState
from termprompt.status import Status
from termprompt.terminal import Frame


@dataclass
class FormField:
    name: str
    prompt: TextPrompt
    state: TextState
    rows: int = 1

    @classmethod
    def from_settings(
        cls,
        settings: FieldSettings,
        unicode_manager: tui_unicode.UnicodeManager | None = None,
    ) -> FormField:
        prompt = TextPrompt.from_message(settings.label).with_render_style(
            settings.render_style
        )
        if unicode_manager is not None:
            prompt = prompt.with_unicode_manager(unicode_manager)
        rows = settings.height
        if settings.border:
            prompt = prompt.with_block(
                Block(borders=Borders.ALL, title=settings.title, box=rich_box.ROUNDED)
            )
            rows += 2
        return cls(name=settings.name, prompt=prompt, state=TextState(), rows=rows)

    @property
    def display_value(self) -> str:
        return self.prompt.render_style.render(self.state)


class Form:
    """
    A vertical stack of prompts with one focused field.

    Enter completes the focused field and moves focus to the next unfinished
    one; Tab and Shift+Tab cycle focus between unfinished fields.
    """

    def __init__(self, fields: typing.Sequence[FormField]) -> None:
        self.fields = list(fields)
        if self.fields:
            self.fields[0].state.focus()

    def focused_index(self) -> int | None:
        for index, field in enumerate(self.fields):
            if field.state.is_focused():
                return index
        return None

    def focused(self) -> FormField | None:
        index = self.focused_index()
        if index is None:
            return None
        return self.fields[index]

    def focus_next(self, step: int = 1) -> None:
        count = len(self.fields)
        current = self.focused_index()
        start = current if current is not None else -1
        for field in self.fields:
            field.state.blur()
        for offset in range(1, count + 1):
            index = (start + offset * step) % count
            field = self.fields[index]
            if not field.state.is_finished():
                field.state.focus()
                logger.debug("Focus moved", field=field.name)
                return

    def handle_key_event(self, event: input_base.KeyEvent) -> None:
        if not event.is_press:
            return
        field = self.focused()
        if field is None:
            return
        if event.key == "tab" and not event.ctrl and not event.alt:
            self.focus_next(-1 if event.shift else 1)
            return
        field.state.handle_key_event(event)
        if field.state.is_finished():
            self.focus_next()

    def is_aborted(self) -> bool:
        return any(field.state.status is Status.ABORTED for field in self.fields)

    def is_finished(self) -> bool:
        if self.is_aborted():
            return True
        return all(field.state.is_finished() for field in self.fields)

    def rows(self) -> int:
        return sum(field.rows for field in self.fields)

    def draw(self, frame: Frame, area: Rect) -> None:
        y = area.y
        for field in self.fields:
            if y >= area.bottom:
                logger.debug("Field below the visible area", field=field.name)
                break
            height = min(field.rows, area.bottom - y)
            field.prompt.draw(frame, Rect(area.x, y, area.width, height), field.state)
            y += field.rows

    def values(self) -> dict[str, str]:
        return {field.name: field.state.value for field in self.fields}

    def display_values(self) -> dict[str, str]:
        return {field.name: field.display_value for field in self.fields}
