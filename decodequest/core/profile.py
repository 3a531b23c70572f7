"""
Learner Profile and Resolved Scoring Policy.

The profile is a JSON document produced by an external assessment.
It is parsed once per session into a frozen pydantic model and then
resolved into a small ScoringPolicy value so that scoring, error
classification, item priority and mission building never re-derive
weights from raw diagnosis strings.

A missing profile (``None``) is fully supported: every consumer falls
back to the neutral policy. A present-but-malformed profile fails fast
with ProfileValidationError.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from decodequest.core.errors import ProfileValidationError
from decodequest.core.models import GameType


class _ProfileSection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class LearnerInfo(_ProfileSection):
    age: int
    diagnoses: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()


class AssessmentSummary(_ProfileSection):
    basic_reading_skills: str
    reading_fluency: str
    spelling: str
    oral_language: str
    working_memory: str
    processing_speed: str


class InstructionalPriorities(_ProfileSection):
    top_targets: tuple[str, ...] = ()
    reduce: tuple[str, ...] = ()


class RecommendedSettings(_ProfileSection):
    session_minutes: int = Field(..., ge=1)
    audio_instructions_default: bool
    timers_default: bool
    reduced_motion_default: bool
    extended_hint_ladder: bool


class SkillWeighting(_ProfileSection):
    """Relative weight per game type; sums need not be exactly 1."""

    sound_snap: float = Field(..., ge=0)
    blend_builder: float = Field(..., ge=0)
    syllable_sprint: float = Field(..., ge=0)
    morpheme_match: float = Field(..., ge=0)

    def as_dict(self) -> dict[GameType, float]:
        return {game: getattr(self, game.value) for game in GameType}


class ErrorFocus(_ProfileSection):
    omission_errors: bool
    addition_errors: bool
    visual_guessing: bool


class LearnerProfile(_ProfileSection):
    """Immutable learner profile, supplied once per session."""

    learner: LearnerInfo
    assessment_summary: AssessmentSummary
    instructional_priorities: InstructionalPriorities
    recommended_settings: RecommendedSettings
    skill_weighting: SkillWeighting
    error_focus: ErrorFocus


def parse_profile(data: dict[str, Any]) -> LearnerProfile:
    """
    Validate a raw profile mapping.

    Raises:
        ProfileValidationError: If any required section or field is
            missing or has the wrong type.
    """
    try:
        return LearnerProfile.model_validate(data)
    except ValidationError as e:
        raise ProfileValidationError(f"Invalid learner profile: {e}") from e


def load_profile(path: str | Path) -> LearnerProfile:
    """Read and validate a profile JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ProfileValidationError(f"Could not read profile {path}: {e}") from e
    if not isinstance(data, dict):
        raise ProfileValidationError(f"Profile {path} must contain a JSON object")
    profile = parse_profile(data)
    logger.debug(f"Loaded learner profile from {path}")
    return profile


# ============================================================================
# Scoring Policy
# ============================================================================


@dataclass(frozen=True)
class MasteryWeights:
    """Sub-score weights for a single attempt score."""

    accuracy: float
    hints: float
    time: float


# Precision over speed for attention / processing-speed profiles
ATTENTION_WEIGHTS = MasteryWeights(accuracy=0.75, hints=0.20, time=0.05)
DEFAULT_WEIGHTS = MasteryWeights(accuracy=0.60, hints=0.20, time=0.20)

ATTENTION_KEYWORDS = ("adhd", "attention")
SLOW_PROCESSING_RATINGS = ("Variable", "Low")

EQUAL_SKILL_WEIGHTING: dict[GameType, float] = {game: 0.25 for game in GameType}


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Profile-derived parameters, resolved once per session.

    Attributes:
        weights: Attempt score weights
        omission_focus / addition_focus / visual_guessing_focus: error_focus flags
        top_targets: Skills to boost in item priority
        skill_weighting: Mission weight per game type
        has_profile: False when resolved from ``None``
    """

    weights: MasteryWeights = DEFAULT_WEIGHTS
    omission_focus: bool = False
    addition_focus: bool = False
    visual_guessing_focus: bool = False
    top_targets: tuple[str, ...] = ()
    skill_weighting: dict[GameType, float] = field(
        default_factory=lambda: dict(EQUAL_SKILL_WEIGHTING)
    )
    has_profile: bool = False

    @property
    def boosts_phoneme_games(self) -> bool:
        """Omission/addition focus shifts mission weight to blending and sound work."""
        return self.omission_focus or self.addition_focus


NEUTRAL_POLICY = ScoringPolicy()


def get_mastery_weights(profile: LearnerProfile | None) -> MasteryWeights:
    """
    Pick attempt score weights for a profile.

    Attention-related diagnoses (case-insensitive "adhd" or "attention")
    or a Variable/Low processing speed rating minimise the time weight.
    """
    if profile is None:
        return DEFAULT_WEIGHTS

    has_attention_concerns = any(
        keyword in diagnosis.lower()
        for diagnosis in profile.learner.diagnoses
        for keyword in ATTENTION_KEYWORDS
    )
    has_processing_concerns = (
        profile.assessment_summary.processing_speed in SLOW_PROCESSING_RATINGS
    )

    if has_attention_concerns or has_processing_concerns:
        return ATTENTION_WEIGHTS
    return DEFAULT_WEIGHTS


def resolve_policy(profile: LearnerProfile | ScoringPolicy | None) -> ScoringPolicy:
    """Resolve a profile (or None) into a ScoringPolicy; policies pass through."""
    if isinstance(profile, ScoringPolicy):
        return profile
    if profile is None:
        return NEUTRAL_POLICY

    policy = ScoringPolicy(
        weights=get_mastery_weights(profile),
        omission_focus=profile.error_focus.omission_errors,
        addition_focus=profile.error_focus.addition_errors,
        visual_guessing_focus=profile.error_focus.visual_guessing,
        top_targets=tuple(profile.instructional_priorities.top_targets),
        skill_weighting=profile.skill_weighting.as_dict(),
        has_profile=True,
    )
    logger.debug(f"Resolved scoring policy: weights={policy.weights}")
    return policy
