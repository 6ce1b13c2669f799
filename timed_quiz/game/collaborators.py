from __future__ import annotations

from typing import Protocol

import structlog

from timed_quiz.game.errors import AccessDeniedError

logger = structlog.get_logger(__name__)


class CompletionNotifier(Protocol):
    async def notify_complete(self, *, user_id: int, game_id: int) -> None: ...


class ImageStore(Protocol):
    async def store(self, *, level_id: int, filename: str, mimetype: str, content: str) -> str: ...

    async def delete(self, *, level_id: int, filename: str) -> None: ...


class ManageAuthorizer(Protocol):
    async def can_manage(self, *, user_id: int, game_id: int) -> bool: ...


class LoggingCompletionNotifier:
    async def notify_complete(self, *, user_id: int, game_id: int) -> None:
        logger.info("game_completion_reported", user_id=user_id, game_id=game_id)


class NullImageStore:
    async def store(self, *, level_id: int, filename: str, mimetype: str, content: str) -> str:
        del level_id, mimetype, content
        return filename

    async def delete(self, *, level_id: int, filename: str) -> None:
        del level_id, filename


class StaticAuthorizer:
    def __init__(self, *, allowed: bool) -> None:
        self._allowed = allowed

    async def can_manage(self, *, user_id: int, game_id: int) -> bool:
        del user_id, game_id
        return self._allowed


allow_all = StaticAuthorizer(allowed=True)
deny_all = StaticAuthorizer(allowed=False)


async def require_manage_capability(
    authorizer: ManageAuthorizer,
    *,
    user_id: int,
    game_id: int,
) -> None:
    if not await authorizer.can_manage(user_id=user_id, game_id=game_id):
        logger.warning("level_management_denied", user_id=user_id, game_id=game_id)
        raise AccessDeniedError(f"user {user_id} may not manage levels of game {game_id}")
