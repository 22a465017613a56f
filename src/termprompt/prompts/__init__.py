from .base import Prompt
from .text_prompt import TextPrompt, map_cursor

__all__ = [
    "Prompt",
    "TextPrompt",
    "map_cursor",
]
