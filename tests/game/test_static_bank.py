from __future__ import annotations

import random

import pytest

from timed_quiz.game.errors import UnsupportedQuestionError
from timed_quiz.game.questions.source import resolve_single_correct_answer
from timed_quiz.game.questions.static_bank import (
    SAMPLE_QUESTIONS,
    build_question,
    sample_question_source,
)
from timed_quiz.game.questions.types import CategoryFilter

from tests.game.game_fixtures import ambiguous_source


@pytest.mark.asyncio
async def test_fetch_random_question_respects_exact_category() -> None:
    source = sample_question_source()
    question = await source.fetch_random_question(
        [CategoryFilter(category_ref="philosophy.ancient")],
        rng=random.Random(7),
    )
    assert question is not None
    assert question.category_ref == "philosophy.ancient"


@pytest.mark.asyncio
async def test_parent_category_without_subcategories_matches_nothing() -> None:
    source = sample_question_source()
    question = await source.fetch_random_question(
        [CategoryFilter(category_ref="philosophy", include_subcategories=False)],
        rng=random.Random(7),
    )
    assert question is None


def test_subcategories_expand_to_whole_tree() -> None:
    source = sample_question_source()
    pool = source.candidates([CategoryFilter(category_ref="philosophy", include_subcategories=True)])
    assert {question.question_ref for question in pool} == {
        question.question_ref for question in SAMPLE_QUESTIONS
    }


@pytest.mark.asyncio
async def test_fetch_is_deterministic_for_seeded_rng() -> None:
    source = sample_question_source()
    filters = [CategoryFilter(category_ref="philosophy", include_subcategories=True)]
    first = await source.fetch_random_question(filters, rng=random.Random(42))
    second = await source.fetch_random_question(filters, rng=random.Random(42))
    assert first == second


@pytest.mark.asyncio
async def test_get_question_returns_none_for_unknown_ref() -> None:
    assert await sample_question_source().get_question("missing") is None


def test_resolve_single_correct_answer() -> None:
    question = build_question(
        "q",
        text="Wer?",
        answers=("Kant", "Hegel"),
        correct_index=1,
        category_ref="c",
    )
    assert resolve_single_correct_answer(question).text == "Hegel"


@pytest.mark.asyncio
async def test_resolve_single_correct_answer_rejects_ambiguous_items() -> None:
    question = await ambiguous_source().get_question("ambiguous")
    assert question is not None
    with pytest.raises(UnsupportedQuestionError):
        resolve_single_correct_answer(question)
