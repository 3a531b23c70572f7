"""
Content bank loader.

Reads exercise items from a JSON document (either a list of records
or ``{"items": [...]}``) and builds the typed item variants. Records
use the stored camelCase keys (``gameType``, ``targetWord``, ...);
snake_case keys are accepted too.

Malformed records fail fast with ContentBankError rather than being
skipped, so a broken bank is noticed before a session starts.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from loguru import logger

from decodequest.core.errors import ContentBankError, InvalidInputError
from decodequest.core.models import (
    BlendBuilderItem,
    ContentItem,
    GameType,
    MorphemeMatchItem,
    SoundSnapItem,
    SyllableSprintItem,
)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

ITEM_TYPES: dict[GameType, type[ContentItem]] = {
    GameType.SOUND_SNAP: SoundSnapItem,
    GameType.BLEND_BUILDER: BlendBuilderItem,
    GameType.SYLLABLE_SPRINT: SyllableSprintItem,
    GameType.MORPHEME_MATCH: MorphemeMatchItem,
}

# Scalar text fields; null or numbers are rejected
_STRING_FIELDS = {
    "id",
    "skill",
    "pattern",
    "mode",
    "target",
    "target_pronunciation",
    "word",
    "target_word",
    "slow_blend",
    "smooth_blend",
    "meaning",
}

# Fields stored as JSON arrays but held as tuples on the item
_SEQUENCE_FIELDS = {
    "distractors",
    "distractor_pronunciations",
    "phonemes",
    "distractor_phonemes",
    "syllables",
    "vowel_positions",
    "morphemes",
    "meaning_distractors",
}

_INT_SEQUENCE_FIELDS = {"vowel_positions"}


def _snake_case(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _check_field_types(item_id: Any, fields: dict[str, Any]) -> None:
    """Reject values whose JSON type does not match the item field."""
    for name in _STRING_FIELDS & fields.keys():
        if not isinstance(fields[name], str):
            raise ContentBankError(
                f"Item {item_id}: {name} must be a string, got {type(fields[name]).__name__}"
            )

    for name in _SEQUENCE_FIELDS & fields.keys():
        value = fields[name]
        element_type = int if name in _INT_SEQUENCE_FIELDS else str
        if not isinstance(value, (list, tuple)) or not all(
            isinstance(v, element_type) and not isinstance(v, bool) for v in value
        ):
            raise ContentBankError(
                f"Item {item_id}: {name} must be a list of {element_type.__name__}"
            )

    if "stress_index" in fields and (
        isinstance(fields["stress_index"], bool) or not isinstance(fields["stress_index"], int)
    ):
        raise ContentBankError(f"Item {item_id}: stress_index must be an integer")
    if "is_nonword" in fields and not isinstance(fields["is_nonword"], bool):
        raise ContentBankError(f"Item {item_id}: is_nonword must be true or false")
    meanings = fields.get("morpheme_meanings")
    if meanings is not None and not (
        isinstance(meanings, dict)
        and all(isinstance(k, str) and isinstance(v, str) for k, v in meanings.items())
    ):
        raise ContentBankError(f"Item {item_id}: morpheme_meanings must map strings to strings")


def parse_content_item(record: dict[str, Any]) -> ContentItem:
    """
    Build a typed content item from one raw record.

    Raises:
        ContentBankError: Unknown game type, missing fields, or bad values
    """
    if not isinstance(record, dict):
        raise ContentBankError(f"Content record must be an object, got {type(record).__name__}")

    fields = {_snake_case(k): v for k, v in record.items()}
    item_id = fields.get("id", "<no id>")

    try:
        game_type = GameType.parse(fields.get("game_type", ""))
    except InvalidInputError as e:
        raise ContentBankError(f"Item {item_id}: {e}") from e

    item_cls = ITEM_TYPES[game_type]
    known = set(item_cls.__dataclass_fields__)
    kwargs = {k: v for k, v in fields.items() if k in known}
    kwargs["game_type"] = game_type
    _check_field_types(item_id, kwargs)
    for name in _SEQUENCE_FIELDS & kwargs.keys():
        kwargs[name] = tuple(kwargs[name])

    try:
        return item_cls(**kwargs)
    except (TypeError, InvalidInputError) as e:
        raise ContentBankError(f"Item {item_id}: {e}") from e


def parse_content_items(records: Iterable[dict[str, Any]]) -> list[ContentItem]:
    """Parse records and reject duplicate item ids."""
    items: list[ContentItem] = []
    seen: set[str] = set()
    for record in records:
        item = parse_content_item(record)
        if item.id in seen:
            raise ContentBankError(f"Duplicate item id {item.id!r}")
        seen.add(item.id)
        items.append(item)
    return items


def load_content_bank(path: str | Path) -> list[ContentItem]:
    """Load and validate a content bank JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ContentBankError(f"Could not read content bank {path}: {e}") from e

    records = data.get("items") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ContentBankError(f"Content bank {path} must be a list or contain an 'items' list")

    items = parse_content_items(records)
    counts = {game.value: sum(1 for i in items if i.game_type is game) for game in GameType}
    logger.info(f"Loaded {len(items)} content items from {path}: {counts}")
    return items
