"""
Study Module for adaptive practice rounds.

Provides:
- Round generation (bootstrap and adaptive) and the round state machine
- Answer recording, the single write path for judged answers
- PracticeEngine, the facade used by the app shell
"""

from src.study.answer_recorder import AnswerOutcome, AnswerRecorder
from src.study.practice_engine import PracticeEngine, create_practice_engine
from src.study.rounds import (
    PracticeRound,
    RoundGenerator,
    RoundMode,
    RoundState,
    RoundSummary,
)

__all__ = [
    "AnswerOutcome",
    "AnswerRecorder",
    "PracticeEngine",
    "create_practice_engine",
    "PracticeRound",
    "RoundGenerator",
    "RoundMode",
    "RoundState",
    "RoundSummary",
]
