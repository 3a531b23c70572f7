"""
Core Domain Models.

Plain value types shared by the learning and adaptive packages.
Every engine operation takes these as immutable inputs and returns
new instances (``dataclasses.replace``) instead of mutating them.

Design:
- GameType / ErrorType: string enums matching the stored JSON values
- ItemAttempt: one submitted answer, created by the exercise UI
- SkillMastery: smoothed 0-100 estimate per (skill, pattern)
- GameProgress: per-game XP, difficulty and rolling accuracy
- ContentItem + four variants: read-only exercise content
- ProgressData: the caller-owned aggregate for one learner
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from decodequest.core.errors import InvalidInputError

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

MASTERY_MIN = 0
MASTERY_MAX = 100
REVIEW_THRESHOLD = 70  # mastery below this always needs review

SCHEMA_VERSION = 1


class GameType(str, Enum):
    """The four decoding games, in fixed allocation order."""

    SOUND_SNAP = "sound_snap"  # grapheme <-> phoneme
    BLEND_BUILDER = "blend_builder"  # build words from phoneme tiles
    SYLLABLE_SPRINT = "syllable_sprint"  # syllable division + stress
    MORPHEME_MATCH = "morpheme_match"  # prefixes, roots, suffixes

    @classmethod
    def parse(cls, value: str | GameType) -> GameType:
        """Convert a raw value to a GameType, failing fast on unknown names."""
        if isinstance(value, GameType):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            valid = ", ".join(g.value for g in cls)
            raise InvalidInputError(f"Unknown game type {value!r} (expected one of: {valid})")

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()


class ErrorType(str, Enum):
    """Error categories produced by the classifier."""

    OMISSION = "omission"  # left off a sound
    ADDITION = "addition"  # inserted an extra sound
    VISUAL_GUESSING = "visual_guessing"  # right shape, wrong word
    NONE = "none"


def validate_difficulty(value: int) -> int:
    """Return ``value`` if it is a valid 1-5 difficulty, else raise."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"Difficulty must be an integer, got {value!r}")
    if not MIN_DIFFICULTY <= value <= MAX_DIFFICULTY:
        raise InvalidInputError(
            f"Difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}, got {value}"
        )
    return value


def utc_now() -> datetime:
    return datetime.now(UTC)


def hours_between(earlier: datetime, later: datetime) -> float:
    """
    Hours elapsed from ``earlier`` to ``later``.

    Naive datetimes are treated as UTC.
    """
    if earlier.tzinfo is None:
        earlier = earlier.replace(tzinfo=UTC)
    if later.tzinfo is None:
        later = later.replace(tzinfo=UTC)
    return (later - earlier).total_seconds() / 3600.0


# ============================================================================
# Attempts & Mastery
# ============================================================================


@dataclass(frozen=True)
class ItemAttempt:
    """
    A single submitted answer.

    Attributes:
        item_id: Content item identifier
        game_type: Game the item belongs to
        timestamp: When the answer was submitted
        correct: Whether the answer was right
        hints_used: Number of hint ladder steps revealed (>= 0)
        time_ms: Time from presentation to submission
        error_type: Classifier output, if one was run
        was_guessing: Guessing detector output, if one was run
    """

    item_id: str
    game_type: GameType
    timestamp: datetime
    correct: bool
    hints_used: int = 0
    time_ms: int = 0
    error_type: ErrorType | None = None
    was_guessing: bool = False

    def __post_init__(self):
        object.__setattr__(self, "game_type", GameType.parse(self.game_type))
        if self.hints_used < 0:
            raise InvalidInputError(f"hints_used must be >= 0, got {self.hints_used}")
        if self.time_ms < 0:
            raise InvalidInputError(f"time_ms must be >= 0, got {self.time_ms}")


@dataclass(frozen=True)
class SkillMastery:
    """Smoothed mastery state for one (skill, pattern) pair."""

    skill: str = ""
    pattern: str = ""
    mastery: int = 0  # 0-100
    total_attempts: int = 0
    correct_attempts: int = 0
    last_attempted: datetime | None = None
    last_correct: datetime | None = None
    streak: int = 0
    needs_review: bool = True

    @property
    def accuracy(self) -> float:
        """Lifetime fraction of correct attempts (0-1)."""
        if self.total_attempts == 0:
            return 0.0
        return self.correct_attempts / self.total_attempts

    @property
    def key(self) -> tuple[str, str]:
        return (self.skill, self.pattern)


@dataclass(frozen=True)
class GameProgress:
    """Per-game progress counters."""

    game_type: GameType
    total_xp: int = 0
    sessions_completed: int = 0
    current_difficulty: int = MIN_DIFFICULTY
    recent_accuracy: int = 0  # rolling last 10, percent
    last_played: datetime | None = None


@dataclass(frozen=True)
class SessionSummary:
    """Recap of a finished mission."""

    date: datetime
    duration_ms: int
    games_played: tuple[GameType, ...] = ()
    total_items: int = 0
    correct_items: int = 0
    hints_used: int = 0
    xp_earned: int = 0
    improvements: tuple[str, ...] = ()
    next_focus: tuple[str, ...] = ()


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    earned_at: datetime
    icon: str = ""


def _default_game_progress() -> dict[GameType, GameProgress]:
    return {game: GameProgress(game_type=game) for game in GameType}


@dataclass(frozen=True)
class ProgressData:
    """
    Everything the engine knows about one learner.

    Owned by the caller and persisted opaquely; the engine only ever
    returns modified copies.
    """

    version: int = SCHEMA_VERSION
    first_load: datetime = field(default_factory=utc_now)
    last_session: datetime | None = None
    total_xp: int = 0
    current_streak: int = 0  # consecutive days
    longest_streak: int = 0
    skill_masteries: tuple[SkillMastery, ...] = ()
    game_progress: dict[GameType, GameProgress] = field(default_factory=_default_game_progress)
    recent_attempts: tuple[ItemAttempt, ...] = ()
    session_history: tuple[SessionSummary, ...] = ()
    badges: tuple[Badge, ...] = ()
    tutorials_shown: tuple[GameType, ...] = ()


@dataclass(frozen=True)
class AppSettings:
    """Presentation settings seeded from the profile's recommendations."""

    version: int = SCHEMA_VERSION
    font_family: str = "atkinson"
    font_size: str = "medium"
    letter_spacing: str = "wide"
    line_height: str = "relaxed"
    high_contrast: bool = False
    reduced_motion: bool = False
    audio_instructions: bool = True
    show_timers: bool = False
    session_minutes: int = 6
    extended_hint_ladder: bool = True
    profile_loaded: bool = False


# ============================================================================
# Content Items
# ============================================================================


@dataclass(frozen=True, kw_only=True)
class ContentItem:
    """
    Fields shared by every exercise variant.

    ``skill`` is the coarse category (e.g. "digraphs"), ``pattern`` the
    specific instance (e.g. "sh").
    """

    id: str
    game_type: GameType
    difficulty: int
    skill: str
    pattern: str
    is_nonword: bool = False

    def __post_init__(self):
        object.__setattr__(self, "game_type", GameType.parse(self.game_type))
        validate_difficulty(self.difficulty)


@dataclass(frozen=True, kw_only=True)
class SoundSnapItem(ContentItem):
    game_type: GameType = GameType.SOUND_SNAP
    mode: str  # grapheme_to_sound | sound_to_grapheme
    target: str
    target_pronunciation: str
    word: str
    distractors: tuple[str, ...] = ()
    distractor_pronunciations: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class BlendBuilderItem(ContentItem):
    game_type: GameType = GameType.BLEND_BUILDER
    phonemes: tuple[str, ...]
    target_word: str
    slow_blend: str = ""
    smooth_blend: str = ""
    distractor_phonemes: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class SyllableSprintItem(ContentItem):
    game_type: GameType = GameType.SYLLABLE_SPRINT
    word: str
    syllables: tuple[str, ...]
    stress_index: int = 0
    vowel_positions: tuple[int, ...] = ()


@dataclass(frozen=True, kw_only=True)
class MorphemeMatchItem(ContentItem):
    game_type: GameType = GameType.MORPHEME_MATCH
    morphemes: tuple[str, ...]
    target_word: str
    meaning: str
    meaning_distractors: tuple[str, ...] = ()
    morpheme_meanings: dict[str, str] = field(default_factory=dict)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)
