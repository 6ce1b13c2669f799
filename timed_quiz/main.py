from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from timed_quiz.core.config import get_settings
from timed_quiz.core.logging import configure_logging
from timed_quiz.db.session import SessionLocal
from timed_quiz.game.collaborators import (
    CompletionNotifier,
    ImageStore,
    LoggingCompletionNotifier,
    ManageAuthorizer,
    NullImageStore,
    deny_all,
)
from timed_quiz.game.questions.source import QuestionSource
from timed_quiz.game.questions.static_bank import sample_question_source


@dataclass(slots=True)
class QuizRuntime:
    session_factory: async_sessionmaker[AsyncSession]
    question_source: QuestionSource
    completion_notifier: CompletionNotifier
    image_store: ImageStore
    authorizer: ManageAuthorizer


def create_runtime(
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    question_source: QuestionSource | None = None,
    completion_notifier: CompletionNotifier | None = None,
    image_store: ImageStore | None = None,
    authorizer: ManageAuthorizer | None = None,
) -> QuizRuntime:
    """Configures logging from settings and wires the collaborators.

    Level management stays closed unless an authorizer is passed in.
    """
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    return QuizRuntime(
        session_factory=session_factory if session_factory is not None else SessionLocal,
        question_source=question_source if question_source is not None else sample_question_source(),
        completion_notifier=(
            completion_notifier if completion_notifier is not None else LoggingCompletionNotifier()
        ),
        image_store=image_store if image_store is not None else NullImageStore(),
        authorizer=authorizer if authorizer is not None else deny_all,
    )
