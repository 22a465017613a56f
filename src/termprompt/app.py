from __future__ import annotations

import asyncio
import dataclasses
import typing
from pathlib import Path

import click
from rich import console as rich_console
from rich import style as rich_style

from termprompt import logger as tui_logger
from termprompt import unicode as tui_unicode
from termprompt.form import Form, FormField
from termprompt.input import base as input_base
from termprompt.input import posix as input_posix
from termprompt.layout import Rect
from termprompt.logger import logger
from termprompt.settings import Settings, SettingsError, load_settings
from termprompt.terminal import Frame, Terminal

DEBUG_STYLE: typing.Final[rich_style.Style] = rich_style.Style(dim=True)
INPUT_IDLE_TIMEOUT: typing.Final[float] = 0.1
DEBUG_LOG_ENTRIES: typing.Final[int] = 5


class App:
    def __init__(
        self,
        settings: Settings,
        debug: bool = False,
        console: rich_console.Console | None = None,
        input_handler: input_base.InputHandler | None = None,
    ) -> None:
        self._settings = settings
        self._debug = debug
        manager = tui_unicode.UnicodeManager(settings.tui)
        self.form = Form(
            [FormField.from_settings(field, manager) for field in settings.fields]
        )
        if input_handler is None:
            input_handler = input_posix.PosixInputHandler(
                select_idle_timeout=INPUT_IDLE_TIMEOUT
            )
        self._input_handler = input_handler
        self.terminal = Terminal(console=console, input_handler=input_handler)
        self._finished: asyncio.Event | None = None

    def draw_ui(self, frame: Frame) -> None:
        area = frame.size()
        if self._debug:
            prompt_area, debug_area = area.split_horizontal(area.width // 2)
            self.form.draw(frame, prompt_area)
            self.draw_debug(frame, debug_area)
        else:
            self.form.draw(frame, area)

    def draw_debug(self, frame: Frame, area: Rect) -> None:
        """Show the focused field's state and the latest captured log records."""
        field = self.form.focused()
        if field is None:
            return
        lines = [f"{field.name}:"]
        for item in dataclasses.fields(field.state):
            lines.append(f"  {item.name}: {getattr(field.state, item.name)!r}")
        log_manager = tui_logger.get_log_manager()
        if log_manager is not None:
            records = log_manager.get_records()[-DEBUG_LOG_ENTRIES:]
            lines.append("log:")
            lines.extend(
                f"  {record.level_name.lower()}: {record.message}" for record in records
            )
        for row, line in enumerate(lines[: area.height]):
            frame.buffer.set_string(area.x, area.y + row, line, DEBUG_STYLE, area.width)

    def redraw(self) -> None:
        self.terminal.draw(self.draw_ui)

    def on_input(self, event: input_base.InputEvent) -> None:
        if isinstance(event, input_base.KeyEvent):
            self.form.handle_key_event(event)
        self.redraw()
        if self.form.is_finished() and self._finished is not None:
            self._finished.set()

    async def run(self) -> dict[str, str]:
        self._finished = asyncio.Event()
        self._input_handler.subscribe(self.on_input)
        logger.info("Prompt session started", fields=len(self.form.fields))
        await self.terminal.start()
        try:
            self.redraw()
            finished = asyncio.create_task(self._finished.wait())
            closed = asyncio.create_task(self.terminal.wait())
            done, pending = await asyncio.wait(
                {finished, closed}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            if closed in done and not self.form.is_finished():
                logger.warning("Input closed before the form was finished")
        finally:
            self._input_handler.unsubscribe(self.on_input)
            await self.terminal.stop()
            logger.info("Prompt session stopped", aborted=self.form.is_aborted())
        return self.form.values()


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML or JSON settings file.",
)
@click.option("--debug", is_flag=True, default=False, help="Show the focused state and recent log records.")
def main(config_path: Path | None, debug: bool) -> None:
    if config_path is None:
        settings = Settings()
    else:
        try:
            settings = load_settings(config_path)
        except SettingsError as e:
            raise click.BadParameter(str(e), param_hint="--config") from e

    tui_logger.configure_logging(settings.log_level.value, settings.log_file)
    tui_logger.init_log_manager(max_entries=1000)

    app = App(settings, debug=debug)
    asyncio.run(app.run())
    click.echo()

    if app.form.is_aborted():
        click.echo("Aborted", err=True)
        raise SystemExit(1)
    for name, value in app.form.display_values().items():
        click.echo(f"{name}: {value}")


if __name__ == "__main__":
    main()
