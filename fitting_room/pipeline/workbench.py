"""The page's working set: two upload slots feeding one orchestrator."""

import logging

from ..config import AppConfig
from ..imaging import ImageNormalizer, PreviewStore
from ..imaging.normalizer import DEFAULT_JPEG_QUALITY
from ..services import GeminiTryOnClient
from .orchestrator import TryOnGenerator, TryOnOrchestrator

logger = logging.getLogger(__name__)

SLOT_NAMES = ("person", "outfit")


class TryOnWorkbench:
    """Wires the person and outfit slots to the orchestrator's setters."""
    
    def __init__(
        self,
        client: TryOnGenerator,
        *,
        previews: PreviewStore | None = None,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ):
        self.previews = previews if previews is not None else PreviewStore()
        self.orchestrator = TryOnOrchestrator(client)
        self.slots = {
            "person": ImageNormalizer(
                self.orchestrator.set_person,
                previews=self.previews,
                jpeg_quality=jpeg_quality,
                name="person",
            ),
            "outfit": ImageNormalizer(
                self.orchestrator.set_outfit,
                previews=self.previews,
                jpeg_quality=jpeg_quality,
                name="outfit",
            ),
        }
    
    @classmethod
    def from_config(cls, config: AppConfig) -> "TryOnWorkbench":
        """Build the workbench with a live Gemini client.
        
        Raises:
            MissingCredential: if the config has no API key
        """
        return cls(GeminiTryOnClient.from_config(config), jpeg_quality=config.jpeg_quality)
    
    def slot(self, name: str) -> ImageNormalizer:
        """Look up a slot by name. Raises KeyError for unknown names."""
        return self.slots[name]
    
    def close(self) -> None:
        for slot in self.slots.values():
            slot.close()
        logger.info("Workbench closed (%d previews still registered)", len(self.previews))
