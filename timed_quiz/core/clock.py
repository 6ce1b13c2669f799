from __future__ import annotations

import random
from datetime import datetime, timezone

UTC = timezone.utc

_DEFAULT_RNG = random.SystemRandom()


def ensure_utc(value: datetime) -> datetime:
    """Attaches UTC to naive timestamps loaded from stores without tz support."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def elapsed_whole_seconds(*, started_at: datetime, now_utc: datetime) -> int:
    return max(0, int((ensure_utc(now_utc) - ensure_utc(started_at)).total_seconds()))


def resolve_rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else _DEFAULT_RNG
