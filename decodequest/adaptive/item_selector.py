"""
Adaptive Item Selection.

Scores candidate items and assembles a bounded round that mixes
recently missed, new, and high-priority review material.

Priority is an additive score (higher = more urgent):
- Difficulty fit: exact match with the target difficulty scores highest
- Mastery gap: weak or review-flagged skill patterns score higher
- Spaced repetition: recent misses surge, correct items slowly regain priority
- Profile targeting: skills named in the profile's top_targets get a bonus

Selection order is priority-driven; presentation order is shuffled so
the learner never sees the ranking.
"""
from __future__ import annotations

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from decodequest.core.models import (
    ContentItem,
    GameType,
    ItemAttempt,
    SkillMastery,
    hours_between,
    utc_now,
    validate_difficulty,
)
from decodequest.core.profile import LearnerProfile, ScoringPolicy, resolve_policy

ITEMS_PER_GAME_ROUND = 5

# Priority constants
DIFFICULTY_FIT_SPAN = 3  # (3 - |delta|) * 10 -> 30 for an exact match
DIFFICULTY_FIT_SCALE = 10
MASTERY_GAP_SCALE = 0.5  # (100 - mastery) * 0.5 -> up to 50
NEEDS_REVIEW_BONUS = 20
UNSEEN_SKILL_BONUS = 30  # moderate, not maximal
MISSED_RECENCY_MAX = 40
MISSED_DECAY_PER_HOUR = 2  # crosses 0 at 20 hours
CORRECT_RECENCY_MAX = 10
CORRECT_GAIN_PER_HOUR = 0.5  # back to full review priority after 20 hours
TOP_TARGET_BONUS = 15

# Round composition (cumulative fractions of the requested count)
MISSED_SHARE = 0.4
NEW_SHARE = 0.8
NEW_DIFFICULTY_TOLERANCE = 1


@dataclass(frozen=True)
class ScoredItem:
    """A candidate item with its selection priority."""

    item: ContentItem
    priority: float


def _find_mastery(
    masteries: Sequence[SkillMastery], skill: str, pattern: str
) -> SkillMastery | None:
    for mastery in masteries:
        if mastery.skill == skill and mastery.pattern == pattern:
            return mastery
    return None


def _last_attempts_by_item(attempts: Sequence[ItemAttempt]) -> dict[str, ItemAttempt]:
    """Most recent attempt per item id (later list position wins timestamp ties)."""
    latest: dict[str, ItemAttempt] = {}
    for attempt in attempts:
        current = latest.get(attempt.item_id)
        if current is None or attempt.timestamp >= current.timestamp:
            latest[attempt.item_id] = attempt
    return latest


def matches_top_target(skill: str, top_targets: Sequence[str]) -> bool:
    """
    Fuzzy skill-to-target match.

    Tolerates "-" vs "_" separators in either direction, e.g. skill
    "vowel_teams" matches target "vowel-teams practice" and skill
    "digraphs" matches "blending digraphs and vowel teams".
    """
    return any(
        target.replace("-", "_") in skill or skill.replace("_", "-") in target
        for target in top_targets
    )


def _recency_bonus(last_attempt: ItemAttempt | None, now: datetime) -> float:
    if last_attempt is None:
        return 0.0

    hours_since = hours_between(last_attempt.timestamp, now)
    if not last_attempt.correct:
        # Missed: high priority right away, turning negative after 20 hours
        return min(MISSED_RECENCY_MAX, MISSED_RECENCY_MAX - hours_since * MISSED_DECAY_PER_HOUR)
    # Correct: low priority now, slowly due for review again
    return min(CORRECT_RECENCY_MAX, hours_since * CORRECT_GAIN_PER_HOUR)


def calculate_item_priority(
    item: ContentItem,
    target_difficulty: int,
    masteries: Sequence[SkillMastery],
    recent_attempts: Sequence[ItemAttempt],
    profile: LearnerProfile | ScoringPolicy | None,
    now: datetime | None = None,
    _last_attempts: dict[str, ItemAttempt] | None = None,
) -> float:
    """
    Calculate the selection priority for one item.

    Args:
        item: Candidate item
        target_difficulty: Current difficulty (1-5) for the item's game
        masteries: All known SkillMastery records
        recent_attempts: Attempt history, oldest first
        profile: Learner profile, resolved policy, or None
        now: Reference time for recency (defaults to UTC now)

    Returns:
        Unbounded priority score; higher means select sooner
    """
    now = now or utc_now()
    priority = 0.0

    # 1. Difficulty fit (can go negative for far mismatches)
    delta = abs(item.difficulty - target_difficulty)
    priority += (DIFFICULTY_FIT_SPAN - delta) * DIFFICULTY_FIT_SCALE

    # 2. Mastery gap
    mastery = _find_mastery(masteries, item.skill, item.pattern)
    if mastery is not None:
        priority += (100 - mastery.mastery) * MASTERY_GAP_SCALE
        if mastery.needs_review:
            priority += NEEDS_REVIEW_BONUS
    else:
        priority += UNSEEN_SKILL_BONUS

    # 3. Spaced repetition on this exact item
    last_attempts = _last_attempts if _last_attempts is not None else _last_attempts_by_item(recent_attempts)
    priority += _recency_bonus(last_attempts.get(item.id), now)

    # 4. Profile topic targeting
    policy = resolve_policy(profile)
    if policy.top_targets and matches_top_target(item.skill, policy.top_targets):
        priority += TOP_TARGET_BONUS

    return priority


def rank_items(
    all_items: Sequence[ContentItem],
    game_type: GameType,
    difficulty: int,
    masteries: Sequence[SkillMastery],
    recent_attempts: Sequence[ItemAttempt],
    profile: LearnerProfile | ScoringPolicy | None,
    now: datetime | None = None,
) -> list[ScoredItem]:
    """Score every item of ``game_type`` and sort by descending priority."""
    validate_difficulty(difficulty)
    game_type = GameType.parse(game_type)
    now = now or utc_now()
    policy = resolve_policy(profile)
    last_attempts = _last_attempts_by_item(recent_attempts)

    scored = [
        ScoredItem(
            item=item,
            priority=calculate_item_priority(
                item, difficulty, masteries, recent_attempts, policy, now, last_attempts
            ),
        )
        for item in all_items
        if item.game_type == game_type
    ]
    scored.sort(key=lambda s: s.priority, reverse=True)
    return scored


def select_items(
    all_items: Sequence[ContentItem],
    game_type: GameType,
    difficulty: int,
    masteries: Sequence[SkillMastery],
    recent_attempts: Sequence[ItemAttempt],
    profile: LearnerProfile | ScoringPolicy | None,
    count: int = ITEMS_PER_GAME_ROUND,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[ContentItem]:
    """
    Select up to ``count`` items of one game type for a round.

    Fill order, deduplicated by item id:
    1. Recently missed items, up to ceil(count * 0.4) slots
    2. Not-yet-seen items within 1 of the target difficulty, up to
       ceil(count * 0.8) cumulative slots
    3. Remaining slots from the full priority ranking

    Returns fewer than ``count`` items when the pool is too small and an
    empty list when there are no items for ``game_type``. The result is
    shuffled with ``rng`` (or the module-level random source).
    """
    if count <= 0:
        return []

    scored = rank_items(all_items, game_type, difficulty, masteries, recent_attempts, profile, now)
    if not scored:
        logger.warning(f"No content items for game type {GameType.parse(game_type).value}")
        return []

    last_attempts = _last_attempts_by_item(recent_attempts)
    missed_recently = [
        s for s in scored
        if s.item.id in last_attempts and not last_attempts[s.item.id].correct
    ]
    not_seen = [s for s in scored if s.item.id not in last_attempts]

    selected: list[ContentItem] = []
    used: set[str] = set()

    def take(candidates: list[ScoredItem], limit: int, difficulty_window: bool = False) -> int:
        taken = 0
        for s in candidates:
            if len(selected) >= limit:
                break
            if s.item.id in used:
                continue
            if difficulty_window and abs(s.item.difficulty - difficulty) > NEW_DIFFICULTY_TOLERANCE:
                continue
            selected.append(s.item)
            used.add(s.item.id)
            taken += 1
        return taken

    n_missed = take(missed_recently, math.ceil(count * MISSED_SHARE))
    n_new = take(not_seen, math.ceil(count * NEW_SHARE), difficulty_window=True)
    n_fill = take(scored, count)

    logger.debug(
        f"Selected {len(selected)}/{count} {scored[0].item.game_type.value} items "
        f"(missed={n_missed}, new={n_new}, fill={n_fill})"
    )

    result = selected[:count]
    (rng or random).shuffle(result)
    return result
