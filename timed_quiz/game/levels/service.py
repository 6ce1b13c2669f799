from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from timed_quiz.db.models.level_categories import LevelCategory
from timed_quiz.db.models.levels import LEVEL_STATE_ACTIVE, LEVEL_STATE_DELETED, Level
from timed_quiz.db.repo.level_categories_repo import LevelCategoriesRepo
from timed_quiz.db.repo.levels_repo import LevelsRepo
from timed_quiz.db.repo.versioning import flush_versioned
from timed_quiz.game.collaborators import ImageStore, ManageAuthorizer, require_manage_capability
from timed_quiz.game.errors import InvalidReferenceError, ValidationFailedError
from timed_quiz.game.levels.payloads import (
    LevelCategoryPayload,
    SaveLevelPayload,
    parse_save_level_payload,
)
from timed_quiz.game.levels.types import LevelCategoryView, SaveLevelResult
from timed_quiz.game.sessions.service.common import load_game, validate_level_in_game

logger = structlog.get_logger(__name__)

ALLOWED_POSITION_DELTAS = (1, -1)


async def _load_level_for_update(session: AsyncSession, *, game_id: int, level_id: int) -> Level:
    level = await LevelsRepo.get_by_id_for_update(session, level_id)
    if level is None:
        raise InvalidReferenceError(f"level {level_id} does not exist")
    validate_level_in_game(level, game_id=game_id)
    return level


async def swap_level_position(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    level_id: int,
    delta: int,
    authorizer: ManageAuthorizer,
    now_utc: datetime,
) -> bool:
    """Swaps the level with its neighbour at ``position + delta``.

    Returns False without touching anything when there is no neighbour.
    """
    await require_manage_capability(authorizer, user_id=user_id, game_id=game_id)
    if delta not in ALLOWED_POSITION_DELTAS:
        raise ValidationFailedError(f"delta value is invalid (is {delta} but must be out of [1, -1])")

    level = await _load_level_for_update(session, game_id=game_id, level_id=level_id)
    if not level.is_active:
        raise InvalidReferenceError(f"level {level.id} is deleted")
    other = await LevelsRepo.get_active_by_position_for_update(
        session,
        game_id=game_id,
        position=level.position + delta,
    )
    if other is None:
        return False

    level.position, other.position = other.position, level.position
    level.updated_at = now_utc
    other.updated_at = now_utc
    await flush_versioned(session)
    logger.info(
        "level_position_swapped",
        game_id=game_id,
        level_id=level.id,
        other_level_id=other.id,
        position=level.position,
    )
    return True


async def _renumber_active_levels(session: AsyncSession, *, game_id: int, now_utc: datetime) -> None:
    levels = await LevelsRepo.list_active_for_game(session, game_id=game_id, for_update=True)
    for position, level in enumerate(levels):
        if level.position != position:
            level.position = position
            level.updated_at = now_utc
    await flush_versioned(session)


async def delete_level(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    level_id: int,
    authorizer: ManageAuthorizer,
    now_utc: datetime,
) -> bool:
    await require_manage_capability(authorizer, user_id=user_id, game_id=game_id)
    level = await _load_level_for_update(session, game_id=game_id, level_id=level_id)

    level.state = LEVEL_STATE_DELETED
    level.updated_at = now_utc
    await flush_versioned(session)

    await _renumber_active_levels(session, game_id=game_id, now_utc=now_utc)
    logger.info("level_deleted", game_id=game_id, level_id=level.id)
    return True


async def _reconcile_categories(
    session: AsyncSession,
    *,
    level: Level,
    desired: list[LevelCategoryPayload],
) -> None:
    existing = await LevelCategoriesRepo.list_for_level(session, level_id=level.id)
    existing_by_id = {category.id: category for category in existing}
    desired_ids = {item.category_id for item in desired if item.category_id}

    unknown_ids = desired_ids - set(existing_by_id)
    if unknown_ids:
        raise InvalidReferenceError(
            f"categories {sorted(unknown_ids)} don't belong to level {level.id}"
        )

    removed = [category for category in existing if category.id not in desired_ids]
    for category in removed:
        await LevelCategoriesRepo.delete(session, category=category)

    for item in desired:
        if item.category_id:
            category = existing_by_id[item.category_id]
            category.bank_category_ref = item.bank_category_ref
            category.include_subcategories = item.include_subcategories
        else:
            await LevelCategoriesRepo.create(
                session,
                category=LevelCategory(
                    level_id=level.id,
                    bank_category_ref=item.bank_category_ref,
                    include_subcategories=item.include_subcategories,
                ),
            )
    await session.flush()
    logger.info(
        "level_categories_saved",
        level_id=level.id,
        removed=len(removed),
        kept=len(desired_ids),
        added=sum(1 for item in desired if not item.category_id),
    )


async def _apply_image(
    *,
    level: Level,
    payload: SaveLevelPayload,
    image_store: ImageStore,
) -> None:
    if level.image and not payload.image:
        await image_store.delete(level_id=level.id, filename=level.image)
        level.image = None
    if payload.image_content:
        level.image = await image_store.store(
            level_id=level.id,
            filename=payload.image,
            mimetype=payload.image_mimetype or "application/octet-stream",
            content=payload.image_content,
        )


async def save_level(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    payload: SaveLevelPayload | dict[str, Any],
    authorizer: ManageAuthorizer,
    image_store: ImageStore,
    now_utc: datetime,
) -> SaveLevelResult:
    await require_manage_capability(authorizer, user_id=user_id, game_id=game_id)
    data = parse_save_level_payload(payload)
    await load_game(session, game_id=game_id)

    created = not data.level_id
    if created:
        position = await LevelsRepo.count_active_for_game(session, game_id=game_id)
        level = await LevelsRepo.create(
            session,
            level=Level(
                game_id=game_id,
                position=position,
                name=data.name,
                bgcolor=data.bgcolor,
                image=None,
                state=LEVEL_STATE_ACTIVE,
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )
    else:
        level = await _load_level_for_update(session, game_id=game_id, level_id=data.level_id)
        level.name = data.name
        level.bgcolor = data.bgcolor
        level.updated_at = now_utc

    # image storage needs the level id, so it runs after the insert
    await _apply_image(level=level, payload=data, image_store=image_store)
    await flush_versioned(session)

    await _reconcile_categories(session, level=level, desired=data.categories)
    logger.info("level_saved", game_id=game_id, level_id=level.id, created=created)
    return SaveLevelResult(level_id=level.id, created=created)


async def list_level_categories(
    session: AsyncSession,
    *,
    game_id: int,
    user_id: int,
    level_id: int,
    authorizer: ManageAuthorizer,
) -> list[LevelCategoryView]:
    await require_manage_capability(authorizer, user_id=user_id, game_id=game_id)
    level = await LevelsRepo.get_by_id(session, level_id)
    if level is None:
        raise InvalidReferenceError(f"level {level_id} does not exist")
    validate_level_in_game(level, game_id=game_id)
    categories = await LevelCategoriesRepo.list_for_level(session, level_id=level.id)
    return [LevelCategoryView.from_model(category) for category in categories]


class LevelAdminService:
    swap_level_position = staticmethod(swap_level_position)
    delete_level = staticmethod(delete_level)
    save_level = staticmethod(save_level)
    list_level_categories = staticmethod(list_level_categories)
