from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from timed_quiz.core.clock import ensure_utc
from timed_quiz.db.models.game_sessions import SESSION_STATE_FINISHED, SESSION_STATE_PROGRESS
from timed_quiz.db.repo.session_questions_repo import SessionQuestionsRepo
from timed_quiz.game.collaborators import allow_all
from timed_quiz.game.errors import (
    AlreadyAnsweredError,
    DataIntegrityError,
    InvalidReferenceError,
    NoQuestionAvailableError,
    SessionClosedError,
    UnsupportedQuestionError,
    ValidationFailedError,
)
from timed_quiz.game.levels.service import LevelAdminService
from timed_quiz.game.questions.source import resolve_single_correct_answer
from timed_quiz.game.questions.static_bank import StaticQuestionSource
from timed_quiz.game.questions.types import BankAnswer, BankQuestion
from timed_quiz.game.sessions.service import GameSessionService

from tests.game.game_fixtures import (
    NOW,
    OTHER_USER_ID,
    PROMPT_TEXT,
    QUESTION_WORDS,
    USER_ID,
    RecordingNotifier,
    ambiguous_source,
    bank_questions,
    create_game,
    create_levels,
    load_question,
    question_source,
)

# 60 wpm: one second per word on top of the 30 second base duration
TIME_AVAILABLE = 30 + QUESTION_WORDS


async def _start(db_session, *, level_count: int = 2, user_id: int = USER_ID, **game_kwargs):  # noqa: ANN001, ANN202
    game = await create_game(db_session, **game_kwargs)
    levels = await create_levels(db_session, game_id=game.id, count=level_count)
    session_view = await GameSessionService.create_session(
        db_session, game_id=game.id, user_id=user_id, now_utc=NOW
    )
    return game, levels, session_view


async def _fetch(db_session, *, game, session_view, level, source, now_utc=NOW, user_id=USER_ID):  # noqa: ANN001, ANN202
    return await GameSessionService.get_or_create_question(
        db_session,
        game_id=game.id,
        user_id=user_id,
        session_id=session_view.session_id,
        level_id=level.id,
        question_source=source,
        now_utc=now_utc,
    )


async def _correct_ref(source, question_view) -> str:  # noqa: ANN001
    bank_question = await source.get_question(question_view.bank_question_ref)
    assert bank_question is not None
    return resolve_single_correct_answer(bank_question).answer_ref


async def _wrong_ref(source, question_view) -> str:  # noqa: ANN001
    correct = await _correct_ref(source, question_view)
    return next(answer.answer_ref for answer in question_view.answers if answer.answer_ref != correct)


async def _submit(db_session, *, game, session_view, question_view, answer_ref, source, now_utc=NOW, **kwargs):  # noqa: ANN001, ANN202
    return await GameSessionService.submit_answer(
        db_session,
        game_id=game.id,
        user_id=USER_ID,
        session_id=session_view.session_id,
        question_id=question_view.question_id,
        answer_ref=answer_ref,
        question_source=source,
        now_utc=now_utc,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_fetch_question_builds_timed_view(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()

    view = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    assert view.level_id == levels[0].id
    assert view.finished is False
    assert view.given_answer_ref is None
    assert view.score_max == 30
    assert view.time_max == TIME_AVAILABLE
    ref = view.bank_question_ref
    assert [answer.answer_ref for answer in view.answers] == [f"{ref}:{index}" for index in range(4)]


@pytest.mark.asyncio
async def test_fetch_question_is_idempotent(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source(bank_questions(8))

    first = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)
    again = await GameSessionService.get_or_create_question(
        db_session,
        game_id=game.id,
        user_id=USER_ID,
        session_id=session_view.session_id,
        level_id=levels[0].id,
        question_source=source,
        now_utc=NOW + timedelta(seconds=30),
        rng=random.Random(99),
    )

    assert again.question_id == first.question_id
    assert again.bank_question_ref == first.bank_question_ref
    assert ensure_utc(again.created_at) == NOW
    questions = await SessionQuestionsRepo.list_for_session(db_session, session_id=session_view.session_id)
    assert len(questions) == 1


@pytest.mark.asyncio
async def test_shuffled_answers_keep_the_same_options(db_session) -> None:
    game, levels, session_view = await _start(db_session, shuffle_answers=True)
    source = question_source()

    view = await GameSessionService.get_or_create_question(
        db_session,
        game_id=game.id,
        user_id=USER_ID,
        session_id=session_view.session_id,
        level_id=levels[0].id,
        question_source=source,
        now_utc=NOW,
        rng=random.Random(5),
    )

    ref = view.bank_question_ref
    assert sorted(answer.answer_ref for answer in view.answers) == [f"{ref}:{index}" for index in range(4)]
    stored = await load_question(db_session, view.question_id)
    assert stored is not None
    assert stored.answer_refs == [answer.answer_ref for answer in view.answers]


@pytest.mark.asyncio
async def test_instant_correct_answer_scores_full_duration(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    answered = await _submit(
        db_session,
        game=game,
        session_view=session_view,
        question_view=question,
        answer_ref=await _correct_ref(source, question),
        source=source,
    )

    assert answered.finished is True
    assert answered.correct is True
    assert answered.time_remaining == TIME_AVAILABLE
    assert answered.score == 30
    summary = await GameSessionService.get_session(
        db_session, game_id=game.id, user_id=USER_ID, session_id=session_view.session_id
    )
    assert (summary.score, summary.answers_total, summary.answers_correct) == (30, 1, 1)
    assert summary.state == SESSION_STATE_PROGRESS


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("seconds", "time_remaining", "score"),
    [
        (20, TIME_AVAILABLE - 20, TIME_AVAILABLE - 20),
        (TIME_AVAILABLE, 0, 0),
        (TIME_AVAILABLE + 100, 0, 0),
    ],
)
async def test_correct_answer_score_decays_with_time(
    db_session,
    seconds: int,
    time_remaining: int,
    score: int,
) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    answered = await _submit(
        db_session,
        game=game,
        session_view=session_view,
        question_view=question,
        answer_ref=await _correct_ref(source, question),
        source=source,
        now_utc=NOW + timedelta(seconds=seconds),
    )

    assert answered.correct is True
    assert answered.time_remaining == time_remaining
    assert answered.score == score


@pytest.mark.asyncio
async def test_wrong_answer_scores_zero(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)
    wrong = await _wrong_ref(source, question)

    answered = await _submit(
        db_session,
        game=game,
        session_view=session_view,
        question_view=question,
        answer_ref=wrong,
        source=source,
        now_utc=NOW + timedelta(seconds=5),
    )

    assert answered.correct is False
    assert answered.score == 0
    assert answered.given_answer_ref == wrong
    assert answered.time_remaining == TIME_AVAILABLE - 5
    summary = await GameSessionService.get_session(
        db_session, game_id=game.id, user_id=USER_ID, session_id=session_view.session_id
    )
    assert (summary.score, summary.answers_total, summary.answers_correct) == (0, 1, 0)


@pytest.mark.asyncio
async def test_cancel_answer_closes_question_without_points(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    expired = await GameSessionService.cancel_answer(
        db_session,
        game_id=game.id,
        user_id=USER_ID,
        session_id=session_view.session_id,
        question_id=question.question_id,
        question_source=source,
        now_utc=NOW + timedelta(seconds=60),
    )

    assert expired.finished is True
    assert expired.correct is False
    assert expired.given_answer_ref is None
    assert expired.score == 0
    summary = await GameSessionService.get_session(
        db_session, game_id=game.id, user_id=USER_ID, session_id=session_view.session_id
    )
    assert (summary.answers_total, summary.answers_correct) == (1, 0)


@pytest.mark.asyncio
async def test_question_can_be_answered_only_once(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)
    correct = await _correct_ref(source, question)
    await _submit(
        db_session,
        game=game,
        session_view=session_view,
        question_view=question,
        answer_ref=correct,
        source=source,
    )

    with pytest.raises(AlreadyAnsweredError):
        await _submit(
            db_session,
            game=game,
            session_view=session_view,
            question_view=question,
            answer_ref=correct,
            source=source,
        )
    with pytest.raises(AlreadyAnsweredError):
        await GameSessionService.cancel_answer(
            db_session,
            game_id=game.id,
            user_id=USER_ID,
            session_id=session_view.session_id,
            question_id=question.question_id,
            question_source=source,
            now_utc=NOW,
        )
    summary = await GameSessionService.get_session(
        db_session, game_id=game.id, user_id=USER_ID, session_id=session_view.session_id
    )
    assert summary.answers_total == 1


@pytest.mark.asyncio
async def test_answering_every_level_finishes_session_and_notifies(db_session) -> None:
    game, levels, session_view = await _start(db_session, level_count=2)
    source = question_source()
    notifier = RecordingNotifier()

    first = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)
    await _submit(
        db_session,
        game=game,
        session_view=session_view,
        question_view=first,
        answer_ref=await _correct_ref(source, first),
        source=source,
        completion_notifier=notifier,
    )
    assert notifier.calls == []

    second = await _fetch(db_session, game=game, session_view=session_view, level=levels[1], source=source)
    await _submit(
        db_session,
        game=game,
        session_view=session_view,
        question_view=second,
        answer_ref=await _wrong_ref(source, second),
        source=source,
        now_utc=NOW + timedelta(seconds=3),
        completion_notifier=notifier,
    )

    assert notifier.calls == [(USER_ID, game.id)]
    summary = await GameSessionService.get_session(
        db_session, game_id=game.id, user_id=USER_ID, session_id=session_view.session_id
    )
    assert summary.state == SESSION_STATE_FINISHED
    assert (summary.score, summary.answers_total, summary.answers_correct) == (30, 2, 1)

    # finished questions stay readable
    replay = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)
    assert replay.question_id == first.question_id
    assert replay.finished is True


@pytest.mark.asyncio
async def test_expiring_last_question_also_finishes_session(db_session) -> None:
    game, levels, session_view = await _start(db_session, level_count=1)
    source = question_source()
    notifier = RecordingNotifier()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    await GameSessionService.cancel_answer(
        db_session,
        game_id=game.id,
        user_id=USER_ID,
        session_id=session_view.session_id,
        question_id=question.question_id,
        question_source=source,
        now_utc=NOW,
        completion_notifier=notifier,
    )

    summary = await GameSessionService.get_session(
        db_session, game_id=game.id, user_id=USER_ID, session_id=session_view.session_id
    )
    assert summary.state == SESSION_STATE_FINISHED
    assert notifier.calls == [(USER_ID, game.id)]


@pytest.mark.asyncio
async def test_closed_session_rejects_new_questions_and_answers(db_session) -> None:
    game, levels, session_view = await _start(db_session, level_count=2)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)
    await GameSessionService.cancel_session(
        db_session,
        game_id=game.id,
        user_id=USER_ID,
        session_id=session_view.session_id,
        now_utc=NOW,
    )

    with pytest.raises(SessionClosedError):
        await _fetch(db_session, game=game, session_view=session_view, level=levels[1], source=source)
    with pytest.raises(SessionClosedError):
        await _submit(
            db_session,
            game=game,
            session_view=session_view,
            question_view=question,
            answer_ref=await _correct_ref(source, question),
            source=source,
        )


@pytest.mark.asyncio
async def test_fetch_rejects_levels_outside_the_session(db_session) -> None:
    game, levels, session_view = await _start(db_session, level_count=2)
    other_game = await create_game(db_session)
    foreign_levels = await create_levels(db_session, game_id=other_game.id, count=1)
    source = question_source()

    with pytest.raises(InvalidReferenceError):
        await _fetch(db_session, game=game, session_view=session_view, level=foreign_levels[0], source=source)

    await LevelAdminService.delete_level(
        db_session,
        game_id=game.id,
        user_id=USER_ID,
        level_id=levels[1].id,
        authorizer=allow_all,
        now_utc=NOW,
    )
    with pytest.raises(InvalidReferenceError):
        await _fetch(db_session, game=game, session_view=session_view, level=levels[1], source=source)

    added = await create_levels(db_session, game_id=game.id, count=1)
    with pytest.raises(InvalidReferenceError):
        await _fetch(db_session, game=game, session_view=session_view, level=added[0], source=source)


@pytest.mark.asyncio
async def test_submit_rejects_questions_of_other_sessions(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    other_session = await GameSessionService.create_session(
        db_session, game_id=game.id, user_id=OTHER_USER_ID, now_utc=NOW
    )
    foreign = await _fetch(
        db_session,
        game=game,
        session_view=other_session,
        level=levels[0],
        source=source,
        user_id=OTHER_USER_ID,
    )

    with pytest.raises(InvalidReferenceError):
        await _submit(
            db_session,
            game=game,
            session_view=session_view,
            question_view=foreign,
            answer_ref=await _correct_ref(source, foreign),
            source=source,
        )
    with pytest.raises(InvalidReferenceError):
        await GameSessionService.cancel_answer(
            db_session,
            game_id=game.id,
            user_id=USER_ID,
            session_id=session_view.session_id,
            question_id=uuid4(),
            question_source=source,
            now_utc=NOW,
        )


@pytest.mark.asyncio
async def test_submit_rejects_unknown_answer_option(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    with pytest.raises(ValidationFailedError):
        await _submit(
            db_session,
            game=game,
            session_view=session_view,
            question_view=question,
            answer_ref="not-an-option",
            source=source,
        )
    stored = await load_question(db_session, question.question_id)
    assert stored is not None
    assert stored.finished is False


@pytest.mark.asyncio
async def test_submit_rejects_ambiguous_bank_question(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = ambiguous_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    with pytest.raises(UnsupportedQuestionError):
        await _submit(
            db_session,
            game=game,
            session_view=session_view,
            question_view=question,
            answer_ref="a",
            source=source,
        )


@pytest.mark.asyncio
async def test_fetch_without_matching_bank_question(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source(bank_questions(2, category_ref="elsewhere"))

    with pytest.raises(NoQuestionAvailableError):
        await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)


@pytest.mark.asyncio
async def test_submit_when_bank_question_disappeared(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    with pytest.raises(DataIntegrityError):
        await _submit(
            db_session,
            game=game,
            session_view=session_view,
            question_view=question,
            answer_ref=question.answers[0].answer_ref,
            source=StaticQuestionSource([]),
        )


@pytest.mark.asyncio
async def test_concurrent_fetch_returns_the_winning_question(db_session, monkeypatch) -> None:
    game, levels, session_view = await _start(db_session)
    source = question_source(bank_questions(8))
    winner = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    original = SessionQuestionsRepo.get_by_session_level
    calls = {"n": 0}

    async def _missed_lookup(session, *, session_id, level_id):  # noqa: ANN001, ANN202
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await original(session, session_id=session_id, level_id=level_id)

    monkeypatch.setattr(SessionQuestionsRepo, "get_by_session_level", _missed_lookup)

    loser = await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    assert calls["n"] == 2
    assert loser.question_id == winner.question_id
    assert loser.bank_question_ref == winner.bank_question_ref
    questions = await SessionQuestionsRepo.list_for_session(db_session, session_id=session_view.session_id)
    assert [question.id for question in questions] == [winner.question_id]


@pytest.mark.asyncio
async def test_list_levels_reports_session_progress(db_session) -> None:
    game, levels, session_view = await _start(db_session, level_count=3)
    source = question_source()
    question = await _fetch(db_session, game=game, session_view=session_view, level=levels[1], source=source)
    await _submit(
        db_session,
        game=game,
        session_view=session_view,
        question_view=question,
        answer_ref=await _correct_ref(source, question),
        source=source,
    )

    listed = await GameSessionService.list_levels(
        db_session, game_id=game.id, user_id=USER_ID, session_id=session_view.session_id
    )
    assert [level.level_id for level in listed] == [level.id for level in levels]
    assert listed[0].question is None
    assert listed[2].question is None
    summary = listed[1].question
    assert summary is not None
    assert summary.question_id == question.question_id
    assert (summary.finished, summary.correct, summary.score) == (True, True, 30)

    plain = await GameSessionService.list_levels(db_session, game_id=game.id, user_id=USER_ID)
    assert [level.position for level in plain] == [0, 1, 2]
    assert all(level.question is None for level in plain)


@pytest.mark.asyncio
async def test_fetch_rejects_answer_refs_containing_separator(db_session) -> None:
    game, levels, session_view = await _start(db_session)
    source = StaticQuestionSource(
        [
            BankQuestion(
                question_ref="commas",
                text=PROMPT_TEXT,
                answers=(
                    BankAnswer(answer_ref="opt,1", text="alpha", fraction=Decimal("1")),
                    BankAnswer(answer_ref="opt,2", text="beta"),
                ),
                category_ref="general",
            )
        ]
    )

    with pytest.raises(UnsupportedQuestionError):
        await _fetch(db_session, game=game, session_view=session_view, level=levels[0], source=source)

    questions = await SessionQuestionsRepo.list_for_session(db_session, session_id=session_view.session_id)
    assert questions == []
