# reinvent/core/fallback.py
import asyncio
from typing import Any, List, Optional, Sequence

import structlog

from reinvent.core.domain.exceptions import AllProvidersFailedError, ProviderError, TransportError

logger = structlog.get_logger()


class FallbackOrchestrator:
    """
    Tries provider adapters strictly in the given order.

    The first success is returned and later providers are never invoked. Any
    ProviderError (configuration, upstream, transport) moves on to the next
    provider. When the list is exhausted, AllProvidersFailedError wraps the
    error of the last provider tried.

    `timeout` bounds each attempt in seconds; the cancelled attempt counts as a
    TransportError. None or 0 disables it.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or None

    async def run(self, providers: Sequence[Any], *args: Any, operation: str = "generate", **kwargs: Any) -> Any:
        last_error: Optional[ProviderError] = None
        attempts: List[str] = []

        for provider in providers:
            name = getattr(provider, "name", type(provider).__name__)
            attempts.append(name)
            logger.info("provider_attempt", operation=operation, provider=name, position=len(attempts))

            try:
                result = await self._invoke(provider, name, *args, **kwargs)
            except ProviderError as e:
                last_error = e
                logger.warning(
                    "provider_failed",
                    operation=operation,
                    provider=name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue

            logger.info("provider_succeeded", operation=operation, provider=name, attempts=len(attempts))
            return result

        logger.error(
            "all_providers_failed",
            operation=operation,
            attempts=attempts,
            last_error=str(last_error) if last_error else None,
        )
        raise AllProvidersFailedError(operation, last_error, attempts)

    async def _invoke(self, provider: Any, name: str, *args: Any, **kwargs: Any) -> Any:
        call = provider.invoke(*args, **kwargs)
        if self.timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise TransportError(name, f"timed out after {self.timeout:g}s")
