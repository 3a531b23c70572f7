"""
Content: exercise item bank loading and learner-facing message text.
"""

from decodequest.content.bank import load_content_bank, parse_content_item, parse_content_items
from decodequest.content.messages import (
    GAME_DESCRIPTIONS,
    GAME_DISPLAY_NAMES,
    MessageKind,
    get_random_message,
)

__all__ = [
    "load_content_bank",
    "parse_content_item",
    "parse_content_items",
    "MessageKind",
    "get_random_message",
    "GAME_DISPLAY_NAMES",
    "GAME_DESCRIPTIONS",
]
