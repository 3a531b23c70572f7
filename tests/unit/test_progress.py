"""
Unit tests for progress aggregate operations.

Tests:
- Attempt submission pipeline ordering and XP accrual
- Mastery upsert keyed by skill+pattern
- Session summaries and the day streak
- Badges, defaults and storage trimming
"""

from datetime import timedelta

import pytest
from conftest import NOW, make_attempt

from decodequest.core.models import (
    Badge,
    GameProgress,
    GameType,
    ProgressData,
    SessionSummary,
    SkillMastery,
)
from decodequest.learning.progress import (
    add_attempt,
    add_badge,
    add_session_summary,
    create_default_progress,
    create_default_settings,
    find_mastery,
    record_attempt,
    trim_for_storage,
    upsert_skill_mastery,
)


@pytest.fixture
def progress():
    return create_default_progress(now=NOW)


class TestRecordAttempt:
    def test_first_attempt_creates_mastery(self, progress):
        outcome = record_attempt(progress, make_attempt(), "digraphs", "sh", None)

        assert outcome.attempt_score == 100
        assert outcome.mastery.skill == "digraphs"
        assert outcome.mastery.pattern == "sh"
        assert outcome.mastery.mastery == 100
        assert len(outcome.progress.skill_masteries) == 1
        assert len(outcome.progress.recent_attempts) == 1

    def test_xp_uses_difficulty_before_adaptation(self, progress):
        # Pre-load nine correct answers so this one pushes accuracy over 85%
        history = tuple(make_attempt(item_id=f"ss-{i}") for i in range(9))
        progress = ProgressData(first_load=NOW, recent_attempts=history)

        outcome = record_attempt(progress, make_attempt(), "digraphs", "sh", None)

        # Played at difficulty 1: 10 + 3 + 5 + 5
        assert outcome.xp_earned == 23
        assert outcome.game_progress.current_difficulty == 2
        assert outcome.progress.total_xp == 23
        assert outcome.progress.game_progress[GameType.SOUND_SNAP].total_xp == 23

    def test_incorrect_attempt_earns_participation_xp(self, progress):
        outcome = record_attempt(progress, make_attempt(correct=False), "digraphs", "sh", None)
        assert outcome.xp_earned == 2
        assert outcome.mastery.needs_review is True

    def test_updates_existing_mastery(self, progress):
        first = record_attempt(progress, make_attempt(correct=False), "digraphs", "sh", None)
        second = record_attempt(first.progress, make_attempt(), "digraphs", "sh", None)

        assert len(second.progress.skill_masteries) == 1
        # round(40 * 0.7 + 100 * 0.3)
        assert second.mastery.mastery == 58
        assert second.mastery.total_attempts == 2

    def test_profile_changes_score(self, progress, profile):
        attempt = make_attempt(correct=False)
        neutral = record_attempt(progress, attempt, "digraphs", "sh", None)
        attention = record_attempt(progress, attempt, "digraphs", "sh", profile)
        assert neutral.attempt_score == 40
        assert attention.attempt_score == 25

    def test_game_progress_uses_policy_score(self, progress, profile):
        # 60s correct answer: 97 under attention weights, 88 under neutral ones
        attempt = make_attempt(time_ms=60_000)
        outcome = record_attempt(progress, attempt, "digraphs", "sh", profile)

        assert outcome.attempt_score == 97
        # 10 + 3 + round(97 / 20) + 5; a neutral score would give 22
        assert outcome.xp_earned == 23
        assert outcome.game_progress.total_xp == 23

    def test_input_progress_unchanged(self, progress):
        record_attempt(progress, make_attempt(), "digraphs", "sh", None)
        assert progress.recent_attempts == ()
        assert progress.skill_masteries == ()
        assert progress.total_xp == 0

    def test_other_games_untouched(self, progress):
        outcome = record_attempt(
            progress, make_attempt(game_type=GameType.MORPHEME_MATCH), "prefixes", "re", None
        )
        game_progress = outcome.progress.game_progress
        assert game_progress[GameType.MORPHEME_MATCH].total_xp > 0
        assert game_progress[GameType.SOUND_SNAP] == progress.game_progress[GameType.SOUND_SNAP]


class TestMasteryLookup:
    def test_find_mastery(self):
        masteries = (
            SkillMastery(skill="digraphs", pattern="sh", mastery=40),
            SkillMastery(skill="digraphs", pattern="ch", mastery=80),
        )
        assert find_mastery(masteries, "digraphs", "ch").mastery == 80
        assert find_mastery(masteries, "digraphs", "th") is None

    def test_upsert_replaces_in_place(self, progress):
        progress = upsert_skill_mastery(progress, "digraphs", "sh", SkillMastery(mastery=40))
        progress = upsert_skill_mastery(progress, "blends", "st", SkillMastery(mastery=55))
        progress = upsert_skill_mastery(progress, "digraphs", "sh", SkillMastery(mastery=90))

        assert [m.key for m in progress.skill_masteries] == [("digraphs", "sh"), ("blends", "st")]
        assert progress.skill_masteries[0].mastery == 90

    def test_add_attempt_appends(self, progress):
        first = make_attempt(item_id="a")
        second = make_attempt(item_id="b")
        updated = add_attempt(add_attempt(progress, first), second)
        assert [a.item_id for a in updated.recent_attempts] == ["a", "b"]


def _summary(xp: int = 30, games=(GameType.SOUND_SNAP,)) -> SessionSummary:
    return SessionSummary(date=NOW, duration_ms=360_000, games_played=games, xp_earned=xp)


class TestSessionSummary:
    def test_first_session_starts_streak(self, progress):
        updated = add_session_summary(progress, _summary(), now=NOW)

        assert updated.current_streak == 1
        assert updated.longest_streak == 1
        assert updated.total_xp == 30
        assert updated.last_session == NOW
        assert len(updated.session_history) == 1

    def test_same_day_keeps_streak(self, progress):
        first = add_session_summary(progress, _summary(), now=NOW)
        second = add_session_summary(first, _summary(), now=NOW + timedelta(hours=3))
        assert second.current_streak == 1

    def test_next_day_extends_streak(self, progress):
        first = add_session_summary(progress, _summary(), now=NOW)
        second = add_session_summary(first, _summary(), now=NOW + timedelta(days=1))
        assert second.current_streak == 2
        assert second.longest_streak == 2

    def test_gap_resets_streak_but_keeps_longest(self, progress):
        updated = progress
        for day in range(3):
            updated = add_session_summary(updated, _summary(), now=NOW + timedelta(days=day))
        updated = add_session_summary(updated, _summary(), now=NOW + timedelta(days=6))

        assert updated.current_streak == 1
        assert updated.longest_streak == 3

    def test_sessions_completed_counts_each_game_once(self, progress):
        games = (GameType.SOUND_SNAP, GameType.BLEND_BUILDER, GameType.SOUND_SNAP)
        updated = add_session_summary(progress, _summary(games=games), now=NOW)

        assert updated.game_progress[GameType.SOUND_SNAP].sessions_completed == 1
        assert updated.game_progress[GameType.BLEND_BUILDER].sessions_completed == 1
        assert updated.game_progress[GameType.MORPHEME_MATCH].sessions_completed == 0


class TestBadges:
    def test_badge_awarded_once(self, progress):
        badge = Badge(id="first-mission", name="First Mission", description="", earned_at=NOW)
        once = add_badge(progress, badge)
        twice = add_badge(once, badge)

        assert len(once.badges) == 1
        assert twice is once


class TestDefaults:
    def test_default_progress_covers_every_game(self):
        progress = create_default_progress(now=NOW)
        assert set(progress.game_progress) == set(GameType)
        assert all(isinstance(g, GameProgress) for g in progress.game_progress.values())
        assert all(g.current_difficulty == 1 for g in progress.game_progress.values())
        assert progress.first_load == NOW
        assert progress.total_xp == 0

    def test_default_settings_without_profile(self):
        settings = create_default_settings()
        assert settings.profile_loaded is False
        assert settings.session_minutes == 6

    def test_default_settings_override_minutes(self):
        assert create_default_settings(session_minutes=12).session_minutes == 12

    def test_default_settings_from_profile(self, profile):
        settings = create_default_settings(profile)
        assert settings.profile_loaded is True
        assert settings.session_minutes == 6
        assert settings.reduced_motion is True
        assert settings.show_timers is False
        assert settings.extended_hint_ladder is True


class TestTrimForStorage:
    def test_keeps_most_recent(self, progress):
        attempts = tuple(make_attempt(item_id=f"i{i}") for i in range(10))
        sessions = tuple(_summary(xp=i) for i in range(5))
        progress = ProgressData(first_load=NOW, recent_attempts=attempts, session_history=sessions)

        trimmed = trim_for_storage(progress, max_attempts=3, max_sessions=2)

        assert [a.item_id for a in trimmed.recent_attempts] == ["i7", "i8", "i9"]
        assert [s.xp_earned for s in trimmed.session_history] == [3, 4]

    def test_zero_limits_clear_history(self, progress):
        progress = add_attempt(progress, make_attempt())
        trimmed = trim_for_storage(progress, max_attempts=0, max_sessions=0)
        assert trimmed.recent_attempts == ()
        assert trimmed.session_history == ()

    def test_defaults_come_from_settings(self, progress):
        attempts = tuple(make_attempt(item_id=f"i{i}") for i in range(250))
        progress = ProgressData(first_load=NOW, recent_attempts=attempts)

        trimmed = trim_for_storage(progress)

        assert len(trimmed.recent_attempts) == 200
        assert trimmed.recent_attempts[-1].item_id == "i249"
