"""Core components shared by the API server and the client.

- **config**: environment-driven settings (Pydantic Settings)
- **errors**: exception taxonomy and provider error classification
- **models**: the persisted :class:`GeneratedImage` record
- **provider**: async client for the Replicate predictions API
"""

from snapcanvas.core.config import SnapcanvasConfig, config
from snapcanvas.core.errors import (
    ConfigurationError,
    EmptyResultError,
    LocalStorageError,
    ProviderError,
    SnapcanvasError,
    ValidationError,
    classify_provider_error,
)
from snapcanvas.core.models import GeneratedImage, ImageMetadata

__all__ = [
    "ConfigurationError",
    "EmptyResultError",
    "GeneratedImage",
    "ImageMetadata",
    "LocalStorageError",
    "ProviderError",
    "SnapcanvasConfig",
    "SnapcanvasError",
    "ValidationError",
    "classify_provider_error",
    "config",
]
