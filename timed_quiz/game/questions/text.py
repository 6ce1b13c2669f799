from __future__ import annotations

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
# Unicode letters (umlauts, ß) joined by apostrophes or hyphens; digits never form words.
_WORD_RE = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*")


def strip_markup(value: str) -> str:
    return html.unescape(_TAG_RE.sub(" ", value))


def count_words(value: str | None) -> int:
    if not value:
        return 0
    return len(_WORD_RE.findall(strip_markup(value)))
