# reinvent/core/ports/exporter.py
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from reinvent.core.domain.models import DeckSection


class IDeckRenderer(ABC):
    """
    Interface (Port) for writing a slide deck.
    """

    @abstractmethod
    def render(
        self,
        title: str,
        sections: List[DeckSection],
        images: Dict[str, bytes],
    ) -> bytes:
        """Returns the serialized deck. `images` maps DeckSection.image_key to image bytes."""
        pass


class IImageFetcher(ABC):
    """
    Interface (Port) for resolving an image reference (URL or data: URI) to bytes.
    """

    @abstractmethod
    async def fetch(self, reference: str) -> Optional[bytes]:
        """Returns the image bytes, or None when the image cannot be retrieved."""
        pass
