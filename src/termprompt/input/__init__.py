from __future__ import annotations

from . import base as _base
from . import posix as _posix

KeyAction = _base.KeyAction
KeyEvent = _base.KeyEvent
ResizeEvent = _base.ResizeEvent
InputEvent = _base.InputEvent
EventSubscriber = _base.EventSubscriber
InputHandler = _base.InputHandler
PosixInputHandler = _posix.PosixInputHandler
PosixInputDecoder = _posix.PosixInputDecoder
