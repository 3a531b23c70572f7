"""
Adaptive Content Engine.

Components:
- error_detection: Guessing detector, error classifier, feedback pipeline
- item_selector: Item priority scoring and mixed round selection
- mission_builder: Profile-weighted allocation of game rounds
"""
from decodequest.adaptive.error_detection import (
    ErrorDetectionResult,
    classify_error,
    detect_errors,
    detect_guessing,
    get_error_feedback,
)
from decodequest.adaptive.item_selector import (
    ITEMS_PER_GAME_ROUND,
    ScoredItem,
    calculate_item_priority,
    rank_items,
    select_items,
)
from decodequest.adaptive.mission_builder import (
    allocate_rounds,
    build_mission,
    mission_weights,
)

__all__ = [
    # Error detection
    "ErrorDetectionResult",
    "detect_guessing",
    "classify_error",
    "get_error_feedback",
    "detect_errors",
    # Selection
    "ITEMS_PER_GAME_ROUND",
    "ScoredItem",
    "calculate_item_priority",
    "rank_items",
    "select_items",
    # Missions
    "allocate_rounds",
    "build_mission",
    "mission_weights",
]
