"""Pydantic request and response models for the SnapCanvas API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Models
------
GenerateImageRequest
    Payload for ``POST /api/generate-image``.
GenerateImageResponse
    Success body: the provider's output URLs.
ErrorResponse
    Failure body used by every handled error (``{"error": "..."}``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
DEFAULT_GUIDANCE_SCALE = 7.5
DEFAULT_INFERENCE_STEPS = 50
DEFAULT_SCHEDULER = "DPMSolverMultistep"


class GenerateImageRequest(BaseModel):
    """Request body for the ``POST /api/generate-image`` endpoint.

    ``prompt`` is optional at the schema level so that a missing or blank
    prompt produces the endpoint's own ``400 {"error": "Prompt is required"}``
    rather than FastAPI's generic 422 validation body.

    Attributes:
        prompt: Text describing the desired image.  Required in practice.
        negative_prompt: Text describing what to avoid.  Sent to the provider
            as an empty string when absent.
        width: Image width in pixels.
        height: Image height in pixels.
        guidance_scale: Classifier-free guidance scale.
        num_inference_steps: Number of diffusion steps.
        scheduler: Scheduler name understood by the provider.
    """

    prompt: str | None = Field(
        default=None,
        description="Text describing the desired image.",
    )
    negative_prompt: str | None = Field(
        default=None,
        description="Optional text describing what to avoid.",
    )
    width: int = Field(
        default=DEFAULT_WIDTH,
        description="Image width in pixels.",
    )
    height: int = Field(
        default=DEFAULT_HEIGHT,
        description="Image height in pixels.",
    )
    guidance_scale: float = Field(
        default=DEFAULT_GUIDANCE_SCALE,
        description="Classifier-free guidance scale.",
    )
    num_inference_steps: int = Field(
        default=DEFAULT_INFERENCE_STEPS,
        description="Number of diffusion inference steps.",
    )
    scheduler: str = Field(
        default=DEFAULT_SCHEDULER,
        description="Scheduler name (e.g. 'DPMSolverMultistep', 'Euler').",
    )

    def has_prompt(self) -> bool:
        """Return ``True`` when the prompt contains non-whitespace text."""
        return bool(self.prompt and self.prompt.strip())

    def to_provider_input(self, num_outputs: int = 1) -> dict[str, Any]:
        """Build the provider input dictionary for this request.

        Args:
            num_outputs: Number of images to request.

        Returns:
            Dictionary matching the Stable Diffusion input schema.
        """
        return {
            "prompt": self.prompt,
            "negative_prompt": self.negative_prompt or "",
            "width": self.width,
            "height": self.height,
            "num_outputs": num_outputs,
            "num_inference_steps": self.num_inference_steps,
            "guidance_scale": self.guidance_scale,
            "scheduler": self.scheduler,
        }


class GenerateImageResponse(BaseModel):
    """Success body of ``POST /api/generate-image``."""

    output: list[str] = Field(
        default_factory=list,
        description="URLs of the generated images.",
    )


class ErrorResponse(BaseModel):
    """Body returned for validation and provider failures."""

    error: str = Field(
        ...,
        description="Human-readable error message.",
    )
