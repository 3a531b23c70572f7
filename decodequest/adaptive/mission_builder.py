"""
Mission Builder.

Turns a session length into "Today's Mission": an ordered list of game
rounds weighted by the profile's per-game skill weighting.

Rounds are allocated in fixed GameType order and excess rounds are
trimmed from the end of that allocation, so the last game types lose
rounds first when every game's one-round minimum overflows the total.
"""
from __future__ import annotations

import math
import random

from loguru import logger

from decodequest.adaptive.item_selector import ITEMS_PER_GAME_ROUND
from decodequest.core.errors import InvalidInputError
from decodequest.core.models import GameType, ProgressData, round_half_up
from decodequest.core.profile import LearnerProfile, ScoringPolicy, resolve_policy

SECONDS_PER_ITEM = 45
MIN_ROUNDS = 2

# error_focus boosts for omission/addition learners
BLEND_BUILDER_BOOST = 0.05
BLEND_BUILDER_CAP = 0.5
SOUND_SNAP_BOOST = 0.05
SOUND_SNAP_CAP = 0.4


def estimate_total_rounds(session_minutes: float) -> int:
    """Rounds that fit the session at ~45s per item and 5 items per round."""
    if session_minutes < 0:
        raise InvalidInputError(f"session_minutes must be >= 0, got {session_minutes}")
    total_items = math.floor(session_minutes * 60 / SECONDS_PER_ITEM)
    return max(MIN_ROUNDS, total_items // ITEMS_PER_GAME_ROUND)


def mission_weights(profile: LearnerProfile | ScoringPolicy | None) -> dict[GameType, float]:
    """
    Per-game weights for a mission.

    Omission or addition focus boosts Blend Builder and Sound Snap and
    renormalises all four weights to sum to 1.
    """
    policy = resolve_policy(profile)
    weights = {game: policy.skill_weighting.get(game, 0.0) for game in GameType}

    if policy.boosts_phoneme_games:
        weights[GameType.BLEND_BUILDER] = min(
            BLEND_BUILDER_CAP, weights[GameType.BLEND_BUILDER] + BLEND_BUILDER_BOOST
        )
        weights[GameType.SOUND_SNAP] = min(
            SOUND_SNAP_CAP, weights[GameType.SOUND_SNAP] + SOUND_SNAP_BOOST
        )
        total = sum(weights.values())
        if total > 0:
            weights = {game: w / total for game, w in weights.items()}

    return weights


def allocate_rounds(
    profile: LearnerProfile | ScoringPolicy | None,
    session_minutes: float,
) -> list[GameType]:
    """
    Allocate rounds per game type, before shuffling.

    Every game gets at least one round. When the allocation exceeds the
    session's round count, rounds are dropped from the end.
    """
    total_rounds = estimate_total_rounds(session_minutes)
    weights = mission_weights(profile)

    allocation: list[GameType] = []
    for game in GameType:
        rounds = max(1, round_half_up(weights[game] * total_rounds))
        allocation.extend([game] * rounds)

    if len(allocation) > total_rounds:
        logger.debug(
            f"Trimming mission from {len(allocation)} to {total_rounds} rounds "
            f"(dropping {[g.value for g in allocation[total_rounds:]]})"
        )
        del allocation[total_rounds:]

    return allocation


def build_mission(
    profile: LearnerProfile | ScoringPolicy | None,
    progress: ProgressData | None,
    session_minutes: float,
    rng: random.Random | None = None,
) -> list[GameType]:
    """
    Build today's mission as a shuffled list of game rounds.

    Args:
        profile: Learner profile, resolved policy, or None for equal weights
        progress: Learner progress (accepted for the call contract; the
            allocation depends only on weights and session length)
        session_minutes: Available session time
        rng: Random source for the final shuffle

    Returns:
        One GameType per round, in play order
    """
    rounds = allocate_rounds(profile, session_minutes)
    (rng or random).shuffle(rounds)
    logger.debug(f"Mission for {session_minutes} min: {[g.value for g in rounds]}")
    return rounds
