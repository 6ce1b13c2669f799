from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class BankAnswer:
    answer_ref: str
    text: str
    fraction: Decimal = Decimal("0")

    @property
    def is_fully_correct(self) -> bool:
        return self.fraction == Decimal("1")


@dataclass(frozen=True, slots=True)
class BankQuestion:
    question_ref: str
    text: str
    answers: tuple[BankAnswer, ...]
    question_type: str = "multichoice"
    category_ref: str | None = None

    @property
    def answer_refs(self) -> list[str]:
        return [answer.answer_ref for answer in self.answers]

    def answer_by_ref(self, answer_ref: str) -> BankAnswer | None:
        for answer in self.answers:
            if answer.answer_ref == answer_ref:
                return answer
        return None


@dataclass(frozen=True, slots=True)
class CategoryFilter:
    category_ref: str
    include_subcategories: bool = False
