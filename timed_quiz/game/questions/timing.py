"""Time budget for a single question.

Every question gets the game's base duration plus an estimate of how long it
takes to read the prompt and all answer texts. The reading estimate never
drops below ``READING_TIME_FLOOR_SECONDS`` and has no upper bound.
"""

from __future__ import annotations

import math

from timed_quiz.game.questions.text import count_words
from timed_quiz.game.questions.types import BankQuestion

READING_TIME_FLOOR_SECONDS = 5


def count_words_in_question(question: BankQuestion) -> int:
    return count_words(question.text) + sum(count_words(answer.text) for answer in question.answers)


def reading_time_seconds(*, words_per_minute: int, word_count: int) -> int:
    if words_per_minute <= 0:
        raise ValueError("words_per_minute must be positive")
    estimate = (60 / words_per_minute) * word_count
    # half-up rounding; estimate is never negative
    return max(READING_TIME_FLOOR_SECONDS, math.floor(estimate + 0.5))


def available_time_seconds(
    *,
    question_duration: int,
    words_per_minute: int,
    question: BankQuestion,
) -> int:
    return question_duration + reading_time_seconds(
        words_per_minute=words_per_minute,
        word_count=count_words_in_question(question),
    )


def remaining_time_seconds(*, time_available: int, time_taken: int) -> int:
    return max(0, time_available - time_taken)


def score_for_answer(*, correct: bool, time_remaining: int, question_duration: int) -> int:
    if not correct:
        return 0
    return min(time_remaining, question_duration)
