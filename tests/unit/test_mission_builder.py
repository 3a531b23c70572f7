"""
Unit tests for the mission builder.

Tests:
- Round estimation from session length
- Profile weighting and error-focus boosts
- Allocation minimums and trimming order
- Shuffled missions
"""

import random
from collections import Counter

import pytest
from conftest import make_profile

from decodequest.adaptive.mission_builder import (
    allocate_rounds,
    build_mission,
    estimate_total_rounds,
    mission_weights,
)
from decodequest.core.errors import InvalidInputError
from decodequest.core.models import GameType
from decodequest.learning.progress import create_default_progress


class TestEstimateTotalRounds:
    @pytest.mark.parametrize(
        "minutes,expected",
        [
            (0, 2),  # minimum
            (6, 2),  # 8 items -> 1 round, raised to the minimum
            (10, 2),  # 13 items
            (20, 5),  # 26 items
            (30, 8),  # 40 items
        ],
    )
    def test_rounds(self, minutes, expected):
        assert estimate_total_rounds(minutes) == expected

    def test_negative_minutes_rejected(self):
        with pytest.raises(InvalidInputError):
            estimate_total_rounds(-1)


class TestMissionWeights:
    def test_no_profile_is_equal(self):
        assert mission_weights(None) == {game: 0.25 for game in GameType}

    def test_no_focus_keeps_profile_weights(self, neutral_profile):
        assert mission_weights(neutral_profile) == neutral_profile.skill_weighting.as_dict()

    def test_focus_boosts_and_renormalises(self, profile):
        weights = mission_weights(profile)

        assert sum(weights.values()) == pytest.approx(1.0)
        # 0.35 + 0.05 and 0.30 + 0.05 over a total of 1.10
        assert weights[GameType.BLEND_BUILDER] == pytest.approx(0.40 / 1.10)
        assert weights[GameType.SOUND_SNAP] == pytest.approx(0.35 / 1.10)
        assert weights[GameType.MORPHEME_MATCH] < profile.skill_weighting.morpheme_match

    def test_boosts_are_capped(self):
        heavy = make_profile(
            skill_weighting={
                "sound_snap": 0.38,
                "blend_builder": 0.48,
                "syllable_sprint": 0.07,
                "morpheme_match": 0.07,
            }
        )
        weights = mission_weights(heavy)
        # Capped at 0.5 and 0.4 before renormalising over 1.04
        assert weights[GameType.BLEND_BUILDER] == pytest.approx(0.5 / 1.04)
        assert weights[GameType.SOUND_SNAP] == pytest.approx(0.4 / 1.04)

    def test_addition_focus_alone_boosts(self):
        addition_only = make_profile(
            error_focus={"omission_errors": False, "addition_errors": True, "visual_guessing": False}
        )
        assert mission_weights(addition_only)[GameType.BLEND_BUILDER] == pytest.approx(0.40 / 1.10)


class TestAllocateRounds:
    def test_every_game_gets_a_round_when_room(self, profile):
        allocation = allocate_rounds(profile, 30)

        assert len(allocation) == 8
        assert set(allocation) == set(GameType)
        counts = Counter(allocation)
        assert counts[GameType.BLEND_BUILDER] == 3
        assert counts[GameType.SOUND_SNAP] == 3
        assert counts[GameType.MORPHEME_MATCH] == 1

    def test_allocation_follows_game_order(self, profile):
        allocation = allocate_rounds(profile, 30)
        order = list(GameType)
        assert allocation == sorted(allocation, key=order.index)

    def test_short_session_trims_from_the_end(self, profile):
        # Four one-round minimums overflow the two-round session
        assert allocate_rounds(profile, 6) == [GameType.SOUND_SNAP, GameType.BLEND_BUILDER]

    def test_equal_weights_without_profile(self):
        counts = Counter(allocate_rounds(None, 30))
        assert all(counts[game] == 2 for game in GameType)

    def test_never_more_than_total_rounds(self, profile):
        for minutes in range(0, 61, 3):
            assert len(allocate_rounds(profile, minutes)) <= max(2, estimate_total_rounds(minutes))


class TestBuildMission:
    def test_mission_is_shuffled_allocation(self, profile):
        mission = build_mission(profile, create_default_progress(), 30, rng=random.Random(3))
        assert Counter(mission) == Counter(allocate_rounds(profile, 30))

    def test_minimum_two_rounds(self, profile):
        assert len(build_mission(profile, None, 1)) >= 2

    def test_only_valid_game_types(self, profile):
        for seed in range(20):
            mission = build_mission(profile, None, 15, rng=random.Random(seed))
            assert all(isinstance(game, GameType) for game in mission)

    def test_weighting_shows_up_across_runs(self, profile):
        counts = Counter()
        for seed in range(50):
            counts.update(build_mission(profile, None, 10, rng=random.Random(seed)))
        assert counts[GameType.BLEND_BUILDER] > counts[GameType.MORPHEME_MATCH]

    def test_seeded_rng_is_reproducible(self, profile):
        first = build_mission(profile, None, 30, rng=random.Random(11))
        second = build_mission(profile, None, 30, rng=random.Random(11))
        assert first == second
