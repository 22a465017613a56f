from __future__ import annotations

import typing

from typing import Final

from termprompt.settings import TUIOptions


class UnicodeManager:
    _GLYPH_UNICODE: Final[dict[str, str]] = {
        "pending": "?",
        "aborted": "\u2718",  # ✘
        "done": "\u2714",  # ✔
        "separator": "\u203a",  # ›
    }

    _GLYPH_ASCII: Final[dict[str, str]] = {
        "pending": "?",
        "aborted": "x",
        "done": "v",
        "separator": ">",
    }

    def __init__(self, settings: TUIOptions | None = None) -> None:
        unicode_enabled = True if settings is None else bool(settings.unicode)
        ascii_fallback = False if settings is None else bool(settings.ascii_fallback)
        self._ascii_fallback = (not unicode_enabled) or ascii_fallback

    @property
    def ascii_fallback(self) -> bool:
        return self._ascii_fallback

    def glyph(self, name: str, *, ascii: bool | None = None) -> str:
        use_ascii = self._ascii_fallback if ascii is None else ascii
        if use_ascii:
            mapped = self._GLYPH_ASCII.get(name)
            if mapped is not None:
                return mapped
            return name if name.isascii() else "?"
        mapped = self._GLYPH_UNICODE.get(name)
        if mapped is not None:
            return mapped
        return name


DEFAULT_UNICODE_MANAGER: typing.Final[UnicodeManager] = UnicodeManager()
