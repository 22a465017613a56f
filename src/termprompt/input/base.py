from __future__ import annotations

import asyncio
import inspect
import typing
from dataclasses import dataclass


KeyAction = typing.Literal["down", "up"]


@dataclass(frozen=True)
class KeyEvent:
    action: KeyAction
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    text: typing.Optional[str] = None

    @property
    def is_press(self) -> bool:
        return self.action == "down"


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


InputEvent = typing.Union[KeyEvent, ResizeEvent]
EventSubscriber = typing.Callable[[InputEvent], typing.Awaitable[None] | None]


class InputHandler:
    def __init__(self) -> None:
        self._subscribers: list[EventSubscriber] = []

    def subscribe(self, subscriber: EventSubscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: EventSubscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def publish(self, event: InputEvent) -> None:
        if not self._subscribers:
            return
        for subscriber in list(self._subscribers):
            result = subscriber(event)
            if inspect.isawaitable(result):
                loop = asyncio.get_running_loop()
                loop.create_task(typing.cast(typing.Awaitable[None], result))

    async def run(self) -> None:
        raise NotImplementedError
