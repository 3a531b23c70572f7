"""
Mastery Update Engine.

Converts each attempt into a 0-100 quality score, folds that score into
a per-(skill, pattern) exponential moving average, adapts per-game
difficulty from rolling performance, and shapes the XP reward.

Personalization:
- Attention / processing speed profiles weight time-to-answer minimally
  (precision over speed).
- Hint usage is penalised gently so hints stay shame-free.
- Accuracy is always the dominant factor.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from loguru import logger

from decodequest.core.models import (
    MASTERY_MAX,
    MASTERY_MIN,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    REVIEW_THRESHOLD,
    GameProgress,
    ItemAttempt,
    SkillMastery,
    round_half_up,
    validate_difficulty,
)
from decodequest.core.profile import LearnerProfile, ScoringPolicy, resolve_policy

# EMA factor: the newest attempt moves mastery 30% of the way to its score
SMOOTHING_ALPHA = 0.3
RECENT_WINDOW = 10
DEFAULT_MAX_HINTS = 4

# Time sub-score: full marks up to 30s, then -2 points per second
FULL_TIME_CREDIT_SECONDS = 30
TIME_DECAY_PER_SECOND = 2

# Difficulty adaptation thresholds
PROMOTE_ACCURACY = 85
PROMOTE_MAX_AVG_HINTS = 0.5
DEMOTE_ACCURACY = 60

# XP shaping
XP_PARTICIPATION = 2
XP_BASE = 10
XP_PER_DIFFICULTY = 3
XP_SCORE_DIVISOR = 20
XP_NO_HINT_BONUS = 5


def score_attempt(
    attempt: ItemAttempt,
    profile: LearnerProfile | ScoringPolicy | None,
    max_hints: int = DEFAULT_MAX_HINTS,
) -> int:
    """
    Calculate a 0-100 quality score for a single attempt.

    Sub-scores:
        accuracy: 100 if correct else 0
        hints: 100 scaled down linearly as hints_used/max_hints approaches 1
        time: 100 up to 30s, then 2 points lost per extra second, floored at 0

    Args:
        attempt: The submitted answer
        profile: Learner profile, resolved policy, or None for neutral weights
        max_hints: Hint count at which the hint sub-score reaches 0

    Returns:
        Weighted score, rounded to an integer in [0, 100]
    """
    weights = resolve_policy(profile).weights

    accuracy_score = 100 if attempt.correct else 0

    hint_penalty = min(attempt.hints_used / max_hints, 1.0) if max_hints > 0 else 1.0
    hint_score = (1 - hint_penalty) * 100

    time_sec = attempt.time_ms / 1000
    if time_sec <= FULL_TIME_CREDIT_SECONDS:
        time_score = 100.0
    else:
        time_score = max(0.0, 100 - (time_sec - FULL_TIME_CREDIT_SECONDS) * TIME_DECAY_PER_SECOND)

    score = round_half_up(
        accuracy_score * weights.accuracy
        + hint_score * weights.hints
        + time_score * weights.time
    )
    return min(MASTERY_MAX, max(MASTERY_MIN, score))


def update_skill_mastery(
    existing: SkillMastery | None,
    attempt: ItemAttempt,
    attempt_score: int,
) -> SkillMastery:
    """
    Fold an attempt into the mastery estimate for a skill+pattern.

    Uses an exponential moving average so recent performance matters
    more. The tracker is key-agnostic: a new record has empty skill and
    pattern, and the caller assigns them (see progress.upsert_skill_mastery).

    Returns:
        A new SkillMastery; ``existing`` is left untouched.
    """
    when = attempt.timestamp

    if existing is None:
        return SkillMastery(
            mastery=min(MASTERY_MAX, max(MASTERY_MIN, attempt_score)),
            total_attempts=1,
            correct_attempts=1 if attempt.correct else 0,
            last_attempted=when,
            last_correct=when if attempt.correct else None,
            streak=1 if attempt.correct else 0,
            needs_review=not attempt.correct,
        )

    new_mastery = round_half_up(
        min(
            MASTERY_MAX,
            max(
                MASTERY_MIN,
                existing.mastery * (1 - SMOOTHING_ALPHA) + attempt_score * SMOOTHING_ALPHA,
            ),
        )
    )

    return replace(
        existing,
        mastery=new_mastery,
        total_attempts=existing.total_attempts + 1,
        correct_attempts=existing.correct_attempts + (1 if attempt.correct else 0),
        last_attempted=when,
        last_correct=when if attempt.correct else existing.last_correct,
        streak=existing.streak + 1 if attempt.correct else 0,
        needs_review=new_mastery < REVIEW_THRESHOLD or not attempt.correct,
    )


def calculate_recent_accuracy(
    attempts: Sequence[ItemAttempt], window: int = RECENT_WINDOW
) -> int:
    """Percentage correct (0-100) over the last ``window`` attempts."""
    if not attempts:
        return 0
    recent = list(attempts)[-window:]
    correct = sum(1 for a in recent if a.correct)
    return round_half_up(correct / len(recent) * 100)


def average_recent_hints(
    attempts: Sequence[ItemAttempt], window: int = RECENT_WINDOW
) -> float:
    """Mean hints per item over the last ``window`` attempts."""
    recent = list(attempts)[-window:]
    if not recent:
        return 0.0
    return sum(a.hints_used for a in recent) / len(recent)


def calculate_difficulty(
    current_difficulty: int,
    recent_accuracy: float,
    recent_avg_hints: float,
) -> int:
    """
    Adapt a game's difficulty from rolling performance.

    Rules (first match wins):
    - accuracy >= 85 and average hints < 0.5 -> one level harder
    - accuracy < 60 -> one level easier
    - otherwise unchanged

    Heavy hint use blocks promotion even at high accuracy.
    """
    validate_difficulty(current_difficulty)

    if recent_accuracy >= PROMOTE_ACCURACY and recent_avg_hints < PROMOTE_MAX_AVG_HINTS:
        return min(MAX_DIFFICULTY, current_difficulty + 1)

    if recent_accuracy < DEMOTE_ACCURACY:
        return max(MIN_DIFFICULTY, current_difficulty - 1)

    return current_difficulty


def calculate_xp(attempt: ItemAttempt, difficulty: int, attempt_score: int) -> int:
    """
    XP earned for an attempt.

    Misses earn a flat participation reward (never zero). Correct answers
    earn base + difficulty bonus + score bonus, plus a flat bonus when no
    hints were used.
    """
    validate_difficulty(difficulty)

    if not attempt.correct:
        return XP_PARTICIPATION

    difficulty_bonus = difficulty * XP_PER_DIFFICULTY
    score_bonus = round_half_up(attempt_score / XP_SCORE_DIVISOR)
    no_hint_bonus = XP_NO_HINT_BONUS if attempt.hints_used == 0 else 0

    return XP_BASE + difficulty_bonus + score_bonus + no_hint_bonus


def update_game_progress(
    progress: GameProgress,
    attempt: ItemAttempt,
    all_recent_attempts: Sequence[ItemAttempt],
    attempt_score: int,
    now: datetime | None = None,
) -> GameProgress:
    """
    Update one game's progress after an attempt.

    Args:
        progress: Current progress for the attempt's game type
        attempt: The attempt just submitted
        all_recent_attempts: Full history including ``attempt``; filtered
            here to the game type before the rolling window is taken
        attempt_score: Score from score_attempt under the session policy
        now: Timestamp for last_played (defaults to the attempt time)
    """
    game_attempts = [a for a in all_recent_attempts if a.game_type == progress.game_type]
    recent_accuracy = calculate_recent_accuracy(game_attempts)
    avg_hints = average_recent_hints(game_attempts)

    xp = calculate_xp(attempt, progress.current_difficulty, attempt_score)
    new_difficulty = calculate_difficulty(progress.current_difficulty, recent_accuracy, avg_hints)

    if new_difficulty != progress.current_difficulty:
        logger.debug(
            f"{progress.game_type.value}: difficulty {progress.current_difficulty} -> "
            f"{new_difficulty} (accuracy {recent_accuracy}%, avg hints {avg_hints:.2f})"
        )

    return replace(
        progress,
        total_xp=progress.total_xp + xp,
        current_difficulty=new_difficulty,
        recent_accuracy=recent_accuracy,
        last_played=now or attempt.timestamp,
    )
