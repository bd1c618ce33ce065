"""SnapCanvas - prompt-to-image generation with a local gallery."""

__version__ = "0.1.0"

from snapcanvas.core.config import SnapcanvasConfig, config
from snapcanvas.core.models import GeneratedImage, ImageMetadata

__all__ = [
    "GeneratedImage",
    "ImageMetadata",
    "SnapcanvasConfig",
    "config",
]
