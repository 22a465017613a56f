from .buffer import Buffer
from .layout import Block, Borders, Rect
from .lines import Line, Lines, wrap
from .prompts import Prompt, TextPrompt, map_cursor
from .render_style import TextRenderStyle
from .state import State, TextState
from .status import Focus, Status
from .terminal import Frame, Terminal

__all__ = [
    "Block",
    "Borders",
    "Buffer",
    "Focus",
    "Frame",
    "Line",
    "Lines",
    "Prompt",
    "Rect",
    "State",
    "Status",
    "Terminal",
    "TextPrompt",
    "TextRenderStyle",
    "TextState",
    "map_cursor",
    "wrap",
]
