"""Try-on session core: outfit stack, pose cache and pose state machine."""

from .pose_resolver import PoseImageResolver
from .outfit_manager import LayerSummary, OutfitStackManager, SessionSnapshot

__all__ = [
    "PoseImageResolver",
    "LayerSummary",
    "OutfitStackManager",
    "SessionSnapshot",
]
