from __future__ import annotations

from timed_quiz.db.models.games import Game
from timed_quiz.db.models.session_questions import SessionQuestion
from timed_quiz.game.errors import DataIntegrityError
from timed_quiz.game.questions.source import QuestionSource
from timed_quiz.game.questions.timing import available_time_seconds
from timed_quiz.game.questions.types import BankQuestion
from timed_quiz.game.sessions.types import AnswerOptionView, SessionQuestionView


async def load_bank_question(
    question_source: QuestionSource,
    *,
    question: SessionQuestion,
) -> BankQuestion:
    bank_question = await question_source.get_question(question.bank_question_ref)
    if bank_question is None:
        raise DataIntegrityError(
            f"bank question {question.bank_question_ref} of question {question.id} is gone"
        )
    return bank_question


def time_available_for(game: Game, bank_question: BankQuestion) -> int:
    return available_time_seconds(
        question_duration=game.question_duration,
        words_per_minute=game.expected_words_per_minute,
        question=bank_question,
    )


def build_question_view(
    *,
    game: Game,
    question: SessionQuestion,
    bank_question: BankQuestion,
) -> SessionQuestionView:
    answers: list[AnswerOptionView] = []
    for answer_ref in question.answer_refs:
        bank_answer = bank_question.answer_by_ref(answer_ref)
        if bank_answer is not None:
            answers.append(AnswerOptionView(answer_ref=answer_ref, text=bank_answer.text))
    return SessionQuestionView(
        question_id=question.id,
        session_id=question.session_id,
        level_id=question.level_id,
        bank_question_ref=question.bank_question_ref,
        question_type=bank_question.question_type,
        text=bank_question.text,
        answers=tuple(answers),
        given_answer_ref=question.given_answer_ref,
        finished=question.finished,
        correct=question.correct,
        score=question.score,
        time_remaining=question.time_remaining,
        score_max=game.question_duration,
        time_max=time_available_for(game, bank_question),
        created_at=question.created_at,
        updated_at=question.updated_at,
    )
