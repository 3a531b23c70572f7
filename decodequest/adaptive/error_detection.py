"""
Error Pattern Detection.

Instead of treating every wrong answer the same, this module labels
the kind of mistake so the exercise UI can give targeted, supportive
feedback.

Detects:
1. GUESSING - a fast, unaided, wrong answer right after another unaided miss
2. OMISSION - a sound left off the built answer
3. ADDITION - an extra sound added to the built answer
4. VISUAL_GUESSING - right first/last letter, wrong middle (word-shape guess)

Omission, addition and visual guessing are each gated by the matching
profile error_focus flag. Guessing is profile-independent. It replaces the
classifier's feedback and forces scaffold mode and a difficulty reduction.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from decodequest.core.models import ErrorType, ItemAttempt
from decodequest.core.profile import LearnerProfile, ScoringPolicy, resolve_policy

THRESHOLDS = {
    "fast_answer_ms": 3000,  # under 3s is suspiciously fast
}

GUESSING_FEEDBACK = "Let's slow down and work through this step by step. No rush!"

ERROR_FEEDBACK: dict[ErrorType, str] = {
    ErrorType.OMISSION: (
        "Almost! Let's check. It looks like a sound might be missing. "
        "Tap through each sound carefully."
    ),
    ErrorType.ADDITION: (
        "Close! There might be an extra sound in there. "
        "Let's listen to each part one at a time."
    ),
    ErrorType.VISUAL_GUESSING: (
        "That word looks similar! Let's slow down and decode it sound by sound "
        "instead of guessing the shape."
    ),
}


@dataclass(frozen=True)
class ErrorDetectionResult:
    """
    Combined guessing + classification result for one attempt.

    Attributes:
        is_guessing: Timing pattern looks like random guessing
        error_type: Classifier label (NONE for correct answers or when nothing matched)
        should_force_scaffold: Switch the exercise into guided scaffold mode
        feedback_message: Supportive text for the learner, or None
        should_reduce_difficulty: Signal to step difficulty down
    """

    is_guessing: bool
    error_type: ErrorType
    should_force_scaffold: bool
    feedback_message: str | None
    should_reduce_difficulty: bool

    def to_dict(self) -> dict:
        return {
            "is_guessing": self.is_guessing,
            "error_type": self.error_type.value,
            "should_force_scaffold": self.should_force_scaffold,
            "feedback_message": self.feedback_message,
            "should_reduce_difficulty": self.should_reduce_difficulty,
        }


def _is_fast_unaided_miss(attempt: ItemAttempt) -> bool:
    return (
        not attempt.correct
        and attempt.time_ms < THRESHOLDS["fast_answer_ms"]
        and attempt.hints_used == 0
    )


def detect_guessing(
    current: ItemAttempt,
    recent_history: Sequence[ItemAttempt],
) -> bool:
    """
    Detect rapid-fire guessing from response timing.

    True only when the current attempt is wrong, faster than 3 seconds
    and made without hints, and the attempt immediately before it (the
    last entry of ``recent_history``) was also wrong and unaided. The
    previous attempt is not timed.

    Args:
        current: The attempt just submitted
        recent_history: Earlier attempts, oldest first, not including ``current``
    """
    if not _is_fast_unaided_miss(current) or not recent_history:
        return False
    previous = recent_history[-1]
    return not previous.correct and previous.hints_used == 0


def classify_error(
    user_answer: Sequence[str],
    correct_answer: Sequence[str],
    profile: LearnerProfile | ScoringPolicy | None,
) -> ErrorType:
    """
    Classify a wrong answer by comparing token sequences.

    For Blend Builder the tokens are phoneme tiles. Rules are checked in
    priority order and each is gated by its error_focus flag; the first
    match wins.

    Returns:
        ErrorType.NONE when no profile is supplied or no rule matches
    """
    if profile is None:
        return ErrorType.NONE
    policy = resolve_policy(profile)

    # Shorter answer built only from correct tokens: a sound was left off
    if policy.omission_focus and len(user_answer) < len(correct_answer):
        if all(token in correct_answer for token in user_answer):
            return ErrorType.OMISSION

    # Longer answer containing every correct token: a sound was added
    if policy.addition_focus and len(user_answer) > len(correct_answer):
        if all(token in user_answer for token in correct_answer):
            return ErrorType.ADDITION

    # Same outline (first + last letter) but different word
    if policy.visual_guessing_focus:
        user_str = "".join(user_answer)
        correct_str = "".join(correct_answer)
        if (
            user_str
            and correct_str
            and user_str[0] == correct_str[0]
            and user_str[-1] == correct_str[-1]
            and user_str != correct_str
        ):
            return ErrorType.VISUAL_GUESSING

    return ErrorType.NONE


def get_error_feedback(error_type: ErrorType | None) -> str | None:
    """Supportive remedial message for an error type (None for no error)."""
    if error_type is None:
        return None
    return ERROR_FEEDBACK.get(error_type)


def detect_errors(
    current: ItemAttempt,
    recent_history: Sequence[ItemAttempt],
    user_answer: Sequence[str],
    correct_answer: Sequence[str],
    profile: LearnerProfile | ScoringPolicy | None,
) -> ErrorDetectionResult:
    """
    Full error detection pipeline for an attempt.

    Guessing and classification are both evaluated. When guessing is
    detected the classifier label is still reported, but the feedback is
    the slow-down message and both the scaffold and difficulty-reduction
    signals are raised. Correct attempts are never classified.
    """
    is_guessing = detect_guessing(current, recent_history)

    if current.correct:
        error_type = ErrorType.NONE
    else:
        error_type = classify_error(user_answer, correct_answer, profile)

    if is_guessing:
        feedback = GUESSING_FEEDBACK
        logger.debug(f"Guessing detected on {current.item_id} ({current.time_ms}ms, no hints)")
    else:
        feedback = get_error_feedback(error_type)
        if error_type is not ErrorType.NONE:
            logger.debug(f"Classified error on {current.item_id}: {error_type.value}")

    return ErrorDetectionResult(
        is_guessing=is_guessing,
        error_type=error_type,
        should_force_scaffold=is_guessing,
        feedback_message=feedback,
        should_reduce_difficulty=is_guessing,
    )
