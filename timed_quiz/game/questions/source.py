from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol

from timed_quiz.game.errors import UnsupportedQuestionError
from timed_quiz.game.questions.types import BankAnswer, BankQuestion, CategoryFilter


class QuestionSource(Protocol):
    """Read-only view of the host's question bank."""

    async def fetch_random_question(
        self,
        categories: Sequence[CategoryFilter],
        *,
        rng: random.Random,
    ) -> BankQuestion | None: ...

    async def get_question(self, question_ref: str) -> BankQuestion | None: ...


def resolve_single_correct_answer(question: BankQuestion) -> BankAnswer:
    correct_answers = [answer for answer in question.answers if answer.is_fully_correct]
    if len(correct_answers) != 1:
        raise UnsupportedQuestionError(
            f"bank question {question.question_ref} has {len(correct_answers)} fully correct "
            "answers, exactly one is required"
        )
    return correct_answers[0]
