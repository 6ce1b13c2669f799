from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from timed_quiz.game.errors import ValidationFailedError


class LevelCategoryPayload(BaseModel):
    category_id: int = Field(default=0, ge=0)
    bank_category_ref: str = Field(min_length=1, max_length=64)
    include_subcategories: bool = False


class SaveLevelPayload(BaseModel):
    level_id: int = Field(default=0, ge=0)
    name: str = Field(min_length=1, max_length=255)
    bgcolor: str = Field(min_length=1, max_length=32)
    categories: list[LevelCategoryPayload] = Field(default_factory=list)
    image: str = Field(default="", max_length=255)
    image_mimetype: str | None = Field(default=None, max_length=64)
    image_content: str | None = None

    @model_validator(mode="after")
    def _require_image_filename(self) -> SaveLevelPayload:
        if self.image_content and not self.image:
            raise ValueError("image must name the file when image_content is given")
        return self


def parse_save_level_payload(data: SaveLevelPayload | dict[str, Any]) -> SaveLevelPayload:
    if isinstance(data, SaveLevelPayload):
        return data
    try:
        return SaveLevelPayload.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailedError(str(exc)) from exc
