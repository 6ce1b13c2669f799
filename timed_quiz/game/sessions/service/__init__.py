from __future__ import annotations

from .answers import cancel_answer, submit_answer
from .common import validate_session_ownership
from .levels_listing import list_levels
from .questions_fetch import get_or_create_question
from .sessions_manage import cancel_session, get_session
from .sessions_start import create_session, get_or_create_session


class GameSessionService:
    create_session = staticmethod(create_session)
    get_or_create_session = staticmethod(get_or_create_session)
    cancel_session = staticmethod(cancel_session)
    get_session = staticmethod(get_session)
    list_levels = staticmethod(list_levels)
    get_or_create_question = staticmethod(get_or_create_question)
    submit_answer = staticmethod(submit_answer)
    cancel_answer = staticmethod(cancel_answer)
    validate_session_ownership = staticmethod(validate_session_ownership)


__all__ = [
    "GameSessionService",
    "cancel_answer",
    "cancel_session",
    "create_session",
    "get_or_create_question",
    "get_or_create_session",
    "get_session",
    "list_levels",
    "submit_answer",
]
