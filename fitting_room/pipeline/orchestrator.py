"""Try-On Orchestrator - holds both prepared images and runs one generation at a time."""

import logging
from typing import Protocol

from ..errors import GenerationFailed
from ..models import OrchestratorSnapshot, PreparedImage, TryOnResult, TryOnState

logger = logging.getLogger(__name__)


class TryOnGenerator(Protocol):
    async def generate(self, person: PreparedImage, outfit: PreparedImage) -> TryOnResult: ...


class TryOnOrchestrator:
    """State holder behind the page's "generate" button.
    
    Flow:
    1. Normalizer slots publish into ``set_person`` / ``set_outfit``
    2. ``generate()`` runs once both are present and nothing is in flight
    3. The result (or the error message) replaces whatever was there
    
    ``busy`` is true exactly while a generation call is awaited.
    """
    
    def __init__(self, client: TryOnGenerator):
        self.client = client
        self.person: PreparedImage | None = None
        self.outfit: PreparedImage | None = None
        self.result: TryOnResult | None = None
        self.error: str | None = None
        self.busy = False
        self.state = TryOnState.IDLE
    
    @property
    def ready(self) -> bool:
        return self.person is not None and self.outfit is not None
    
    def set_person(self, image: PreparedImage | None) -> None:
        self.person = image
        self._on_slot_change(image)
    
    def set_outfit(self, image: PreparedImage | None) -> None:
        self.outfit = image
        self._on_slot_change(image)
    
    async def generate(self) -> TryOnResult | None:
        """Run one generation if both images are set and none is in flight.
        
        Returns:
            The new result, or None if nothing ran or the call failed
        """
        if not self.ready or self.busy:
            return None
        
        self.busy = True
        self.error = None
        self.state = TryOnState.GENERATING
        try:
            result = await self.client.generate(self.person, self.outfit)
        except GenerationFailed as e:
            logger.error("Generation failed: %s", e)
            self.error = str(e)
            self.state = TryOnState.HAS_ERROR
            return None
        finally:
            self.busy = False
        
        self.result = result
        self.state = TryOnState.HAS_RESULT
        return result
    
    def snapshot(self) -> OrchestratorSnapshot:
        return OrchestratorSnapshot(
            state=self.state,
            busy=self.busy,
            error=self.error,
            result=self.result,
            has_person=self.person is not None,
            has_outfit=self.outfit is not None,
        )
    
    def _on_slot_change(self, image: PreparedImage | None) -> None:
        # Slot updates during a generation do not leave GENERATING
        if self.busy:
            return
        if image is None:
            self.state = TryOnState.IDLE
        elif self.ready and self.state is TryOnState.IDLE:
            self.state = TryOnState.READY
