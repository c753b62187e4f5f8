# reinvent/adapters/api/dependencies.py
from fastapi import Request

from reinvent.shared.resilience import SlidingWindowRateLimiter


def client_address(request: Request) -> str:
    """The rate-limit identity of a caller: the first X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


class RateLimit:
    """
    Route dependency enforcing one rate-limit bucket.

    Usage:
        @router.post("/simulate", dependencies=[Depends(RateLimit("simulate"))])

    The limiter is the container's Singleton, reached through app.state so
    each application instance counts independently.
    """

    def __init__(self, bucket: str):
        self.bucket = bucket

    def __call__(self, request: Request) -> None:
        limiter: SlidingWindowRateLimiter = request.app.state.container.rate_limiter()
        limiter.check(self.bucket, client_address(request))
