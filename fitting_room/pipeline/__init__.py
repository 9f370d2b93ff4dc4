"""Try-on orchestration."""

from .orchestrator import TryOnOrchestrator
from .workbench import TryOnWorkbench, SLOT_NAMES

__all__ = ["TryOnOrchestrator", "TryOnWorkbench", "SLOT_NAMES"]
