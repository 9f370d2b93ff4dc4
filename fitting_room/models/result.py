"""Try-on result and state snapshot models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TryOnResult(BaseModel):
    """Output of one generation: image as a data URL and optional commentary."""
    
    model_config = ConfigDict(frozen=True)
    
    image: str | None = None
    text: str | None = None


class TryOnState(str, Enum):
    IDLE = "idle"
    READY = "ready"
    GENERATING = "generating"
    HAS_RESULT = "has_result"
    HAS_ERROR = "has_error"


class OrchestratorSnapshot(BaseModel):
    """Read-only view of the orchestrator for the page."""
    
    state: TryOnState
    busy: bool
    error: str | None = None
    result: TryOnResult | None = None
    has_person: bool = False
    has_outfit: bool = False
