# reinvent/adapters/http.py
from typing import Any

import httpx

from reinvent.core.domain.exceptions import TransportError, UpstreamError

_BODY_PREVIEW = 200


async def send(client: httpx.AsyncClient, provider: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """
    Performs one HTTP call and maps failures onto the provider error taxonomy.

    Network problems (timeouts, DNS, refused or reset connections) become
    TransportError; any non-2xx answer becomes UpstreamError with its status.
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as e:
        raise TransportError(provider, f"{type(e).__name__}: {e}") from e

    if response.is_error:
        preview = response.text[:_BODY_PREVIEW] if response.content else ""
        raise UpstreamError(
            provider,
            f"HTTP {response.status_code} from {response.request.url.host}: {preview}",
            status_code=response.status_code,
        )
    return response
