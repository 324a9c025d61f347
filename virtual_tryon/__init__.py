"""Layered virtual try-on with pose variations."""

from .config import POSE_INSTRUCTIONS, TryOnConfig, load_config
from .studio import TryOnStudio

__version__ = "0.1.0"

__all__ = [
    "POSE_INSTRUCTIONS",
    "TryOnConfig",
    "load_config",
    "TryOnStudio",
]
