from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from timed_quiz.game.questions.types import BankAnswer, BankQuestion, CategoryFilter


class StaticQuestionSource:
    """In-memory question bank.

    ``category_parents`` maps a category ref to its parent ref so that
    ``include_subcategories`` filters can walk the tree downwards.
    """

    def __init__(
        self,
        questions: Iterable[BankQuestion],
        *,
        category_parents: Mapping[str, str | None] | None = None,
    ) -> None:
        self._questions: dict[str, BankQuestion] = {}
        for question in questions:
            self._questions[question.question_ref] = question
        self._category_parents = dict(category_parents or {})

    def _descendants(self, category_ref: str) -> set[str]:
        found = {category_ref}
        changed = True
        while changed:
            changed = False
            for child, parent in self._category_parents.items():
                if parent in found and child not in found:
                    found.add(child)
                    changed = True
        return found

    def _allowed_categories(self, categories: Sequence[CategoryFilter]) -> set[str]:
        allowed: set[str] = set()
        for category in categories:
            if category.include_subcategories:
                allowed |= self._descendants(category.category_ref)
            else:
                allowed.add(category.category_ref)
        return allowed

    def candidates(self, categories: Sequence[CategoryFilter]) -> list[BankQuestion]:
        allowed = self._allowed_categories(categories)
        return sorted(
            (question for question in self._questions.values() if question.category_ref in allowed),
            key=lambda question: question.question_ref,
        )

    async def fetch_random_question(
        self,
        categories: Sequence[CategoryFilter],
        *,
        rng: random.Random,
    ) -> BankQuestion | None:
        pool = self.candidates(categories)
        if not pool:
            return None
        return rng.choice(pool)

    async def get_question(self, question_ref: str) -> BankQuestion | None:
        return self._questions.get(question_ref)


def build_question(
    question_ref: str,
    *,
    text: str,
    answers: Sequence[str],
    correct_index: int,
    category_ref: str,
) -> BankQuestion:
    return BankQuestion(
        question_ref=question_ref,
        text=text,
        answers=tuple(
            BankAnswer(
                answer_ref=f"{question_ref}:{index}",
                text=answer_text,
                fraction=Decimal("1") if index == correct_index else Decimal("0"),
            )
            for index, answer_text in enumerate(answers)
        ),
        category_ref=category_ref,
    )


SAMPLE_QUESTIONS: tuple[BankQuestion, ...] = (
    build_question(
        "phil_001",
        text="Wer schrieb die <em>Kritik der reinen Vernunft</em>?",
        answers=("Immanuel Kant", "Georg Wilhelm Friedrich Hegel", "Arthur Schopenhauer", "David Hume"),
        correct_index=0,
        category_ref="philosophy.modern",
    ),
    build_question(
        "phil_002",
        text="Welcher Philosoph prägte den Satz „Ich denke, also bin ich“?",
        answers=("Baruch de Spinoza", "René Descartes", "John Locke", "Gottfried Wilhelm Leibniz"),
        correct_index=1,
        category_ref="philosophy.modern",
    ),
    build_question(
        "phil_003",
        text="Wer war der Lehrer von Aristoteles?",
        answers=("Sokrates", "Platon", "Thales", "Heraklit"),
        correct_index=1,
        category_ref="philosophy.ancient",
    ),
    build_question(
        "phil_004",
        text="Welche Schule gründete Zenon von Kition?",
        answers=("Die Stoa", "Den Epikureismus", "Die Akademie", "Den Peripatos"),
        correct_index=0,
        category_ref="philosophy.ancient",
    ),
)

SAMPLE_CATEGORY_PARENTS: dict[str, str | None] = {
    "philosophy": None,
    "philosophy.ancient": "philosophy",
    "philosophy.modern": "philosophy",
}


def sample_question_source() -> StaticQuestionSource:
    return StaticQuestionSource(SAMPLE_QUESTIONS, category_parents=SAMPLE_CATEGORY_PARENTS)
