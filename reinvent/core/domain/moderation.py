# reinvent/core/domain/moderation.py
from typing import Iterable, Optional

MODERATION_KEYWORDS = (
    "weapon",
    "bomb",
    "explosive",
    "poison",
    "drug",
    "illegal",
    "harmful",
    "dangerous",
)


def find_disallowed_keyword(text: str, keywords: Iterable[str] = MODERATION_KEYWORDS) -> Optional[str]:
    """Returns the first disallowed keyword contained in `text` (case-insensitive), if any."""
    lowered = (text or "").lower()
    for keyword in keywords:
        if keyword in lowered:
            return keyword
    return None
