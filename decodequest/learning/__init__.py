"""
Learning: per-attempt scoring and progress tracking.

- mastery: attempt score, EMA mastery, difficulty adaptation, XP
- progress: submission pipeline and ProgressData helpers
"""

from decodequest.learning.mastery import (
    calculate_difficulty,
    calculate_recent_accuracy,
    calculate_xp,
    score_attempt,
    update_game_progress,
    update_skill_mastery,
)
from decodequest.learning.progress import (
    AttemptOutcome,
    add_badge,
    add_session_summary,
    create_default_progress,
    create_default_settings,
    find_mastery,
    record_attempt,
    trim_for_storage,
    upsert_skill_mastery,
)

__all__ = [
    "score_attempt",
    "update_skill_mastery",
    "calculate_recent_accuracy",
    "calculate_difficulty",
    "calculate_xp",
    "update_game_progress",
    "AttemptOutcome",
    "record_attempt",
    "find_mastery",
    "upsert_skill_mastery",
    "add_session_summary",
    "add_badge",
    "create_default_progress",
    "create_default_settings",
    "trim_for_storage",
]
