"""
Progress aggregate operations.

Pure helpers over the caller-owned ProgressData: the attempt submission
pipeline (score -> mastery -> game progress -> XP), mastery lookup and
upsert, session summaries with day streaks, badges, default factories,
and the history trimming applied at the persistence hand-off.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from loguru import logger

from decodequest.config import get_settings
from decodequest.core.models import (
    AppSettings,
    Badge,
    GameProgress,
    ItemAttempt,
    ProgressData,
    SessionSummary,
    SkillMastery,
    utc_now,
)
from decodequest.core.profile import LearnerProfile, ScoringPolicy, resolve_policy
from decodequest.learning.mastery import (
    calculate_xp,
    score_attempt,
    update_game_progress,
    update_skill_mastery,
)


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of recording one attempt."""

    progress: ProgressData
    attempt_score: int
    xp_earned: int
    mastery: SkillMastery
    game_progress: GameProgress


def find_mastery(
    masteries: tuple[SkillMastery, ...] | list[SkillMastery], skill: str, pattern: str
) -> SkillMastery | None:
    for mastery in masteries:
        if mastery.skill == skill and mastery.pattern == pattern:
            return mastery
    return None


def upsert_skill_mastery(
    progress: ProgressData, skill: str, pattern: str, updated: SkillMastery
) -> ProgressData:
    """Replace (or append) the mastery record for skill+pattern, stamping its keys."""
    keyed = replace(updated, skill=skill, pattern=pattern)
    masteries = list(progress.skill_masteries)

    for i, mastery in enumerate(masteries):
        if mastery.skill == skill and mastery.pattern == pattern:
            masteries[i] = keyed
            break
    else:
        masteries.append(keyed)

    return replace(progress, skill_masteries=tuple(masteries))


def add_attempt(progress: ProgressData, attempt: ItemAttempt) -> ProgressData:
    return replace(progress, recent_attempts=(*progress.recent_attempts, attempt))


def record_attempt(
    progress: ProgressData,
    attempt: ItemAttempt,
    skill: str,
    pattern: str,
    profile: LearnerProfile | ScoringPolicy | None,
) -> AttemptOutcome:
    """
    Apply a submitted attempt to a learner's progress.

    Order is fixed: score -> mastery update -> game progress update ->
    XP accrual. XP is computed at the difficulty the item was played at,
    i.e. before this attempt adapts it. Game progress and XP use the
    same policy score as the mastery update.

    Args:
        progress: Current progress (not modified)
        attempt: The submitted answer
        skill: Skill of the attempted item
        pattern: Pattern of the attempted item
        profile: Learner profile, resolved policy, or None

    Returns:
        AttemptOutcome with the new ProgressData and per-attempt figures
    """
    policy = resolve_policy(profile)
    attempt_score = score_attempt(attempt, policy)

    game = progress.game_progress.get(attempt.game_type) or GameProgress(game_type=attempt.game_type)
    xp = calculate_xp(attempt, game.current_difficulty, attempt_score)

    existing = find_mastery(progress.skill_masteries, skill, pattern)
    new_mastery = replace(
        update_skill_mastery(existing, attempt, attempt_score), skill=skill, pattern=pattern
    )

    history = (*progress.recent_attempts, attempt)
    new_game = update_game_progress(game, attempt, history, attempt_score)

    updated = add_attempt(progress, attempt)
    updated = upsert_skill_mastery(updated, skill, pattern, new_mastery)
    updated = replace(
        updated,
        total_xp=updated.total_xp + xp,
        game_progress={**updated.game_progress, attempt.game_type: new_game},
    )

    logger.debug(
        f"Recorded {attempt.item_id} ({skill}/{pattern}): correct={attempt.correct} "
        f"score={attempt_score} xp={xp} mastery={new_mastery.mastery}"
    )

    return AttemptOutcome(
        progress=updated,
        attempt_score=attempt_score,
        xp_earned=xp,
        mastery=new_mastery,
        game_progress=new_game,
    )


def add_session_summary(
    progress: ProgressData,
    summary: SessionSummary,
    now: datetime | None = None,
) -> ProgressData:
    """
    Close a mission: add its XP, update the day streak, bump sessions.

    Streak rules: a second session on the same day leaves the streak
    unchanged, a session the day after the previous one extends it, any
    longer gap restarts it at 1.
    """
    now = now or utc_now()
    today = now.date()
    last_day = progress.last_session.date() if progress.last_session else None

    streak = progress.current_streak
    if last_day == today:
        pass
    elif last_day == today - timedelta(days=1):
        streak += 1
    else:
        streak = 1

    game_progress = dict(progress.game_progress)
    for game in dict.fromkeys(summary.games_played):
        current = game_progress.get(game) or GameProgress(game_type=game)
        game_progress[game] = replace(current, sessions_completed=current.sessions_completed + 1)

    return replace(
        progress,
        last_session=now,
        total_xp=progress.total_xp + summary.xp_earned,
        current_streak=streak,
        longest_streak=max(progress.longest_streak, streak),
        session_history=(*progress.session_history, summary),
        game_progress=game_progress,
    )


def add_badge(progress: ProgressData, badge: Badge) -> ProgressData:
    """Award a badge once; re-awarding the same id is a no-op."""
    if any(b.id == badge.id for b in progress.badges):
        return progress
    logger.info(f"Badge earned: {badge.name}")
    return replace(progress, badges=(*progress.badges, badge))


def create_default_progress(now: datetime | None = None) -> ProgressData:
    return ProgressData(first_load=now or utc_now())


def create_default_settings(
    profile: LearnerProfile | None = None, session_minutes: int | None = None
) -> AppSettings:
    """App settings, with the profile's recommended defaults applied when present."""
    if profile is None:
        return AppSettings(
            session_minutes=session_minutes or get_settings().default_session_minutes
        )

    rec = profile.recommended_settings
    return AppSettings(
        reduced_motion=rec.reduced_motion_default,
        audio_instructions=rec.audio_instructions_default,
        show_timers=rec.timers_default,
        session_minutes=rec.session_minutes,
        extended_hint_ladder=rec.extended_hint_ladder,
        profile_loaded=True,
    )


def trim_for_storage(
    progress: ProgressData,
    max_attempts: int | None = None,
    max_sessions: int | None = None,
) -> ProgressData:
    """
    Cap attempt and session history before handing progress to storage.

    Limits default to the configured max_recent_attempts / max_session_history.
    """
    settings = get_settings()
    if max_attempts is None:
        max_attempts = settings.max_recent_attempts
    if max_sessions is None:
        max_sessions = settings.max_session_history

    return replace(
        progress,
        recent_attempts=progress.recent_attempts[-max_attempts:] if max_attempts > 0 else (),
        session_history=progress.session_history[-max_sessions:] if max_sessions > 0 else (),
    )
