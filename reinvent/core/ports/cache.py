# reinvent/core/ports/cache.py
from typing import Any, Dict, Optional, Protocol


class ICacheNamespace(Protocol):
    """
    Port for one namespace of the result cache.
    Entries expire after the namespace TTL; an expired entry reads as a miss.
    """

    name: str
    ttl: float

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ...

    def stats(self) -> Dict[str, float]:
        ...

    def clear(self) -> None:
        ...
