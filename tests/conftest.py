"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import copy
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from decodequest.core.models import (  # noqa: E402
    BlendBuilderItem,
    ContentItem,
    GameType,
    ItemAttempt,
    MorphemeMatchItem,
    SoundSnapItem,
    SyllableSprintItem,
)
from decodequest.core.profile import LearnerProfile, parse_profile  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"

NOW = datetime(2024, 3, 4, 15, 0, tzinfo=UTC)

PROFILE_DATA = {
    "learner": {"age": 13, "diagnoses": ["Dyslexia", "ADHD_Inattentive"], "notes": []},
    "assessment_summary": {
        "basic_reading_skills": "Low Average",
        "reading_fluency": "Low Average",
        "spelling": "Low",
        "oral_language": "High",
        "working_memory": "Strong",
        "processing_speed": "Variable",
    },
    "instructional_priorities": {
        "top_targets": ["phoneme-grapheme accuracy", "blending digraphs and vowel teams"],
        "reduce": ["timed pressure"],
    },
    "recommended_settings": {
        "session_minutes": 6,
        "audio_instructions_default": True,
        "timers_default": False,
        "reduced_motion_default": True,
        "extended_hint_ladder": True,
    },
    "skill_weighting": {
        "sound_snap": 0.30,
        "blend_builder": 0.35,
        "syllable_sprint": 0.20,
        "morpheme_match": 0.15,
    },
    "error_focus": {
        "omission_errors": True,
        "addition_errors": True,
        "visual_guessing": True,
    },
}


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_profile_data(**sections) -> dict:
    """Raw profile dict with selected sections merged over the defaults."""
    data = copy.deepcopy(PROFILE_DATA)
    for name, overrides in sections.items():
        data[name].update(overrides)
    return data


def make_profile(**sections) -> LearnerProfile:
    return parse_profile(make_profile_data(**sections))


def make_attempt(**overrides) -> ItemAttempt:
    fields = {
        "item_id": "test-01",
        "game_type": GameType.SOUND_SNAP,
        "timestamp": NOW,
        "correct": True,
        "hints_used": 0,
        "time_ms": 5000,
    }
    fields.update(overrides)
    return ItemAttempt(**fields)


def make_item(
    item_id: str,
    game_type: GameType = GameType.SOUND_SNAP,
    difficulty: int = 1,
    skill: str = "digraphs",
    pattern: str = "sh",
) -> ContentItem:
    """Minimal item of the right variant for ``game_type``."""
    common = {"id": item_id, "difficulty": difficulty, "skill": skill, "pattern": pattern}
    if game_type is GameType.SOUND_SNAP:
        return SoundSnapItem(
            mode="grapheme_to_sound", target=pattern, target_pronunciation=pattern,
            word="ship", **common,
        )
    if game_type is GameType.BLEND_BUILDER:
        return BlendBuilderItem(phonemes=("sh", "i", "p"), target_word="ship", **common)
    if game_type is GameType.SYLLABLE_SPRINT:
        return SyllableSprintItem(word="rabbit", syllables=("rab", "bit"), **common)
    return MorphemeMatchItem(
        morphemes=("re", "play"), target_word="replay", meaning="play again", **common
    )


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def profile():
    """Profile with ADHD diagnosis, variable processing speed and all error flags on."""
    return make_profile()


@pytest.fixture
def neutral_profile():
    """Profile with no attention concerns and no error focus."""
    return make_profile(
        learner={"diagnoses": ["Dyslexia"]},
        assessment_summary={"processing_speed": "Average"},
        error_focus={"omission_errors": False, "addition_errors": False, "visual_guessing": False},
    )


@pytest.fixture
def sample_items():
    """Ten Sound Snap items spread over difficulties plus a few other games."""
    items = [
        make_item(f"ss-{i:02d}", GameType.SOUND_SNAP, difficulty=(i % 5) + 1, pattern=f"p{i}")
        for i in range(10)
    ]
    items += [
        make_item("bb-01", GameType.BLEND_BUILDER, skill="blends"),
        make_item("sy-01", GameType.SYLLABLE_SPRINT, skill="closed_syllables"),
        make_item("mm-01", GameType.MORPHEME_MATCH, skill="prefixes"),
    ]
    return items


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR
