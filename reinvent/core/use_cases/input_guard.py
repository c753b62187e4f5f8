# reinvent/core/use_cases/input_guard.py
from typing import Any, Optional

import structlog

from reinvent.core.domain.exceptions import (
    ModerationRejected,
    ModerationUnavailableError,
    ProviderError,
    ValidationError,
)
from reinvent.core.domain.moderation import MODERATION_KEYWORDS, find_disallowed_keyword
from reinvent.core.ports.ai_providers import IModerator

logger = structlog.get_logger()


class InputGuard:
    """
    Boundary checks shared by every operation: presence, length bounds and moderation.

    Runs before any cache or provider interaction, so a rejected request has
    no side effects.

    Moderation has two layers. The keyword list always applies. The external
    moderator is consulted only when one is injected and configured; if it
    fails, `fail_open=True` logs the outage and lets the request through,
    `fail_open=False` raises ModerationUnavailableError.
    """

    def __init__(
        self,
        moderator: Optional[IModerator] = None,
        fail_open: bool = True,
        keywords=MODERATION_KEYWORDS,
    ):
        self.moderator = moderator
        self.fail_open = fail_open
        self.keywords = tuple(keywords)

    def require_text(self, value: Any, field: str, max_length: int) -> str:
        """Returns the trimmed value or raises ValidationError."""
        if value is None or not isinstance(value, str) or not value.strip():
            raise ValidationError(f"'{field}' is required and must be a non-empty string.", field=field)
        text = value.strip()
        if len(text) > max_length:
            raise ValidationError(f"'{field}' must be at most {max_length} characters.", field=field)
        return text

    def optional_text(self, value: Any, field: str, max_length: int, default: str) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        return self.require_text(value, field, max_length)

    async def moderate(self, text: str) -> None:
        keyword = find_disallowed_keyword(text, self.keywords)
        if keyword:
            logger.warning("moderation_keyword_rejected", keyword=keyword)
            raise ModerationRejected("Content contains inappropriate material")

        if self.moderator is None or not self.moderator.configured:
            return

        try:
            flagged = await self.moderator.is_flagged(text)
        except ProviderError as e:
            if self.fail_open:
                logger.warning("moderation_failed_open", provider=self.moderator.name, error=str(e))
                return
            logger.error("moderation_unavailable", provider=self.moderator.name, error=str(e))
            raise ModerationUnavailableError(e.summary)

        if flagged:
            logger.warning("moderation_flagged", provider=self.moderator.name)
            raise ModerationRejected()
