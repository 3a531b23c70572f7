"""
DecodeQuest - adaptive content engine for reading-decoding practice.

Packages:
- core: value types, learner profile, resolved scoring policy, errors
- learning: attempt scoring, mastery tracking, difficulty, XP, progress
- adaptive: error detection, item selection, mission building
- content: content bank loading and supportive messages
"""

__version__ = "1.0.0"
