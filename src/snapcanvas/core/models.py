"""Domain models for generated images.

:class:`GeneratedImage` is the one record the application persists.  It is
serialised with camelCase keys (``negativePrompt``, ``createdAt``,
``guidanceScale``...) so that the stored gallery keeps the same JSON shape as
the browser version of the app; Python code uses the snake_case attribute
names.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Identifier recorded on every image produced by the Replicate backend.
MODEL_NAME = "stable-diffusion"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ImageMetadata(_CamelModel):
    """Sampling parameters an image was generated with.

    Attributes:
        guidance_scale: Classifier-free guidance scale.
        num_inference_steps: Number of diffusion steps.
        scheduler: Scheduler name passed to the provider.
    """

    guidance_scale: float = Field(..., gt=0)
    num_inference_steps: int = Field(..., gt=0)
    scheduler: str = Field(..., min_length=1)


class GeneratedImage(_CamelModel):
    """A successfully generated image and the parameters behind it.

    Records are immutable; the only lifecycle event after creation is removal
    from the gallery.

    Attributes:
        id: Unique identifier (millisecond timestamp string).
        url: Provider-hosted location of the image.
        prompt: Non-empty prompt text.
        negative_prompt: Optional negative prompt text.
        width: Image width in pixels.
        height: Image height in pixels.
        model: Backend identifier, ``"stable-diffusion"``.
        created_at: Generation completion time.
        metadata: Sampling parameters.
    """

    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    prompt: str
    negative_prompt: str | None = None
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    model: str = MODEL_NAME
    created_at: datetime
    metadata: ImageMetadata

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be empty")
        return value

    @property
    def download_filename(self) -> str:
        """File name used when saving the image locally."""
        return f"ai-generated-{self.id}.png"

    def to_storage(self) -> dict:
        """Return the JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)
