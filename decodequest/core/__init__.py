"""
Core Module - Shared domain models and interfaces.

Components:
- models: Value types (ItemAttempt, SkillMastery, GameProgress, ContentItem, ...)
- profile: LearnerProfile parsing and the resolved ScoringPolicy
- errors: Exception hierarchy

All engine packages (learning/, adaptive/, content/) import shared
concepts from here rather than redefining them.
"""

from decodequest.core.errors import (
    ContentBankError,
    DecodeQuestError,
    InvalidInputError,
    ProfileValidationError,
)
from decodequest.core.models import (
    AppSettings,
    Badge,
    BlendBuilderItem,
    ContentItem,
    ErrorType,
    GameProgress,
    GameType,
    ItemAttempt,
    MorphemeMatchItem,
    ProgressData,
    SessionSummary,
    SkillMastery,
    SoundSnapItem,
    SyllableSprintItem,
)
from decodequest.core.profile import (
    LearnerProfile,
    MasteryWeights,
    ScoringPolicy,
    get_mastery_weights,
    load_profile,
    parse_profile,
    resolve_policy,
)

__all__ = [
    # Errors
    "DecodeQuestError",
    "InvalidInputError",
    "ProfileValidationError",
    "ContentBankError",
    # Models
    "GameType",
    "ErrorType",
    "ItemAttempt",
    "SkillMastery",
    "GameProgress",
    "SessionSummary",
    "Badge",
    "ProgressData",
    "AppSettings",
    "ContentItem",
    "SoundSnapItem",
    "BlendBuilderItem",
    "SyllableSprintItem",
    "MorphemeMatchItem",
    # Profile
    "LearnerProfile",
    "MasteryWeights",
    "ScoringPolicy",
    "get_mastery_weights",
    "load_profile",
    "parse_profile",
    "resolve_policy",
]
