# reinvent/adapters/api/routers/health.py
from datetime import datetime, timezone
from typing import Any, Dict, List

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from reinvent.adapters.cache.memory_cache import ResultCache
from reinvent.shared.config import Settings
from reinvent.shared.container import Container

logger = structlog.get_logger()

router = APIRouter(tags=["System"])


def _describe(providers: List[Any]) -> List[Dict[str, Any]]:
    return [{"name": p.name, "configured": bool(p.configured)} for p in providers]


@router.get("/health")
@inject
async def health(
    config: Settings = Depends(Provide[Container.settings]),
    text_providers: List[Any] = Depends(Provide[Container.text_providers]),
    image_providers: List[Any] = Depends(Provide[Container.image_providers]),
    transcription_providers: List[Any] = Depends(Provide[Container.transcription_providers]),
) -> Dict[str, Any]:
    """
    Liveness plus a view of the provider chains.
    A provider listed with `configured: false` will be skipped at call time.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.APP_VERSION,
        "providers": {
            "text": _describe(text_providers),
            "image": _describe(image_providers),
            "transcription": _describe(transcription_providers),
        },
    }


@router.get("/cache-stats")
@inject
async def cache_stats(cache: ResultCache = Depends(Provide[Container.result_cache])) -> Dict[str, Any]:
    return cache.stats()


@router.delete("/cache")
@inject
async def clear_cache(cache: ResultCache = Depends(Provide[Container.result_cache])) -> Dict[str, Any]:
    cache.clear()
    logger.info("cache_cleared_via_api")
    return {"status": "cleared"}
