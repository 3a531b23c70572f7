"""
Supportive message catalogue.

Confidence messages are never blaming; mastery messages only appear
once the learner's mastery reaches their ``min_mastery``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

from decodequest.core.models import GameType


class MessageKind(str, Enum):
    ENCOURAGEMENT = "encouragement"  # during play
    PROGRESS = "progress"  # progress page / recap
    MASTERY = "mastery"  # high skill mastery
    STREAK = "streak"


@dataclass(frozen=True)
class ConfidenceMessage:
    kind: MessageKind
    message: str
    min_mastery: int | None = None


FALLBACK_MESSAGE = "Keep going. You're doing great."

CONFIDENCE_MESSAGES: tuple[ConfidenceMessage, ...] = (
    ConfidenceMessage(MessageKind.ENCOURAGEMENT, "You're working through this. Keep going."),
    ConfidenceMessage(MessageKind.ENCOURAGEMENT, "Take your time. Accuracy beats speed."),
    ConfidenceMessage(MessageKind.ENCOURAGEMENT, "Every attempt builds your skills."),
    ConfidenceMessage(MessageKind.ENCOURAGEMENT, "Mistakes are part of learning. You've got this."),
    ConfidenceMessage(MessageKind.ENCOURAGEMENT, "Nice effort. You're building new connections."),
    ConfidenceMessage(MessageKind.ENCOURAGEMENT, "Slow and steady is a smart strategy."),
    ConfidenceMessage(MessageKind.PROGRESS, "You're moving forward, and that's what counts."),
    ConfidenceMessage(MessageKind.PROGRESS, "Consistent practice makes a real difference."),
    ConfidenceMessage(MessageKind.PROGRESS, "You've been showing up, and it's paying off."),
    ConfidenceMessage(MessageKind.PROGRESS, "Look how far you've come since you started."),
    ConfidenceMessage(MessageKind.PROGRESS, "Your accuracy is improving. Keep it up."),
    ConfidenceMessage(MessageKind.MASTERY, "You've locked this in. Solid work.", min_mastery=80),
    ConfidenceMessage(MessageKind.MASTERY, "This pattern is really clicking for you.", min_mastery=75),
    ConfidenceMessage(MessageKind.MASTERY, "Expert level on this one. Well earned.", min_mastery=90),
    ConfidenceMessage(
        MessageKind.MASTERY, "You own this skill now. Time for the next challenge.", min_mastery=85
    ),
    ConfidenceMessage(MessageKind.STREAK, "Streak going strong. Consistency is key."),
    ConfidenceMessage(MessageKind.STREAK, "Another day, another step forward."),
    ConfidenceMessage(MessageKind.STREAK, "You're building a real habit here."),
)

GAME_DISPLAY_NAMES: dict[GameType, str] = {
    GameType.SOUND_SNAP: "Sound Snap",
    GameType.BLEND_BUILDER: "Blend Builder",
    GameType.SYLLABLE_SPRINT: "Syllable Sprint",
    GameType.MORPHEME_MATCH: "Morpheme Match",
}

GAME_DESCRIPTIONS: dict[GameType, str] = {
    GameType.SOUND_SNAP: "Match sounds to their letter patterns",
    GameType.BLEND_BUILDER: "Build words by blending sounds together",
    GameType.SYLLABLE_SPRINT: "Break words into syllables and find the stress",
    GameType.MORPHEME_MATCH: "Combine word parts to build meaning",
}


def get_random_message(
    kind: MessageKind | str,
    mastery: int | None = None,
    rng: random.Random | None = None,
) -> str:
    """
    Pick a random message of ``kind``.

    When ``mastery`` is given, messages whose ``min_mastery`` exceeds it
    are excluded.
    """
    kind = MessageKind(kind)
    candidates = [
        m for m in CONFIDENCE_MESSAGES
        if m.kind is kind
        and not (m.min_mastery is not None and mastery is not None and mastery < m.min_mastery)
    ]
    if not candidates:
        return FALLBACK_MESSAGE
    return (rng or random).choice(candidates).message
