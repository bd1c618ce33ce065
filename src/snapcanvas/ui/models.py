"""Data models for the generation form and its option lists."""

from dataclasses import dataclass
from typing import Any

from snapcanvas.api.models import (
    DEFAULT_GUIDANCE_SCALE,
    DEFAULT_HEIGHT,
    DEFAULT_INFERENCE_STEPS,
    DEFAULT_SCHEDULER,
    DEFAULT_WIDTH,
)
from snapcanvas.core.errors import ValidationError


@dataclass
class GenerationFormData:
    """In-progress user input for one generation request.

    This is transient: it is never persisted, and it is replaced wholesale
    when the form is reset.
    """

    prompt: str = ""
    negative_prompt: str = ""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    guidance_scale: float = DEFAULT_GUIDANCE_SCALE
    num_inference_steps: int = DEFAULT_INFERENCE_STEPS
    scheduler: str = DEFAULT_SCHEDULER

    def validate(self) -> None:
        """Validate form values.

        Raises:
            ValidationError: If any value is invalid, with a message meant for
                the user.
        """
        if not self.prompt.strip():
            raise ValidationError("Please enter a prompt")

        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"Resolution must be positive, got {self.width}x{self.height}"
            )

        if self.num_inference_steps <= 0:
            raise ValidationError(
                f"Inference steps must be positive, got {self.num_inference_steps}"
            )

        if self.guidance_scale <= 0:
            raise ValidationError(
                f"Guidance scale must be positive, got {self.guidance_scale}"
            )

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body for ``POST /api/generate-image``."""
        return {
            "prompt": self.prompt,
            "negative_prompt": self.negative_prompt,
            "width": self.width,
            "height": self.height,
            "guidance_scale": self.guidance_scale,
            "num_inference_steps": self.num_inference_steps,
            "scheduler": self.scheduler,
        }


@dataclass(frozen=True)
class ResolutionOption:
    """A selectable output resolution."""

    width: int
    height: int
    label: str


@dataclass
class UIState:
    """Session state for the Gradio UI.

    Each browser session gets its own UIState, so form values, the gallery
    view and the open image are never shared between users.  The components
    are created lazily by :func:`snapcanvas.ui.state.initialize_ui_state`.

    Attributes
    ----------
    store : Any | None
        GalleryStore backing both tabs
    client : Any | None
        GenerationClient talking to the SnapCanvas API
    form : Any | None
        FormController for the Generate tab
    gallery : Any | None
        GalleryController for the Gallery tab
    detail : Any | None
        DetailView for the open image
    clipboard_text : str
        Last text handed to the clipboard; the browser copies it
    """

    store: Any | None = None  # GalleryStore instance
    client: Any | None = None  # GenerationClient instance
    form: Any | None = None  # FormController instance
    gallery: Any | None = None  # GalleryController instance
    detail: Any | None = None  # DetailView instance
    clipboard_text: str = ""

    def is_initialized(self) -> bool:
        """Check if every session component has been created."""
        return (
            self.store is not None
            and self.client is not None
            and self.form is not None
            and self.gallery is not None
            and self.detail is not None
        )

    def set_clipboard(self, text: str) -> None:
        """Clipboard callable for :class:`~snapcanvas.ui.display.DetailView`."""
        self.clipboard_text = text

    def __repr__(self) -> str:
        """String representation for debugging."""
        images = len(self.store) if self.store is not None else 0
        return f"UIState(initialized={self.is_initialized()}, images={images})"


# Constants for the generation form
SCHEDULER_OPTIONS = {
    "DPMSolverMultistep": "DPM++ 2M",
    "Euler": "Euler",
    "EulerA": "Euler Ancestral",
    "Heun": "Heun",
    "DPM2": "DPM2",
    "DPM2A": "DPM2 Ancestral",
    "LMS": "LMS",
}

RESOLUTION_OPTIONS = (
    ResolutionOption(512, 512, "512x512"),
    ResolutionOption(768, 768, "768x768"),
    ResolutionOption(1024, 1024, "1024x1024"),
    ResolutionOption(512, 768, "512x768 (Portrait)"),
    ResolutionOption(768, 512, "768x512 (Landscape)"),
)

# Slider ranges as (min, max, step)
GUIDANCE_SCALE_RANGE = (1.0, 20.0, 0.5)
INFERENCE_STEPS_RANGE = (10, 100, 5)

PROMPT_SUGGESTIONS = (
    "A majestic dragon flying over a medieval castle at sunset",
    "A futuristic city with flying cars and neon lights",
    "A serene forest with magical creatures and glowing mushrooms",
    "A steampunk airship soaring through clouds",
    "A cyberpunk street scene with holographic advertisements",
)

SUGGESTION_LABEL_LENGTH = 30


def suggestion_label(suggestion: str) -> str:
    """Shorten a prompt suggestion for display on a button."""
    if len(suggestion) > SUGGESTION_LABEL_LENGTH:
        return suggestion[:SUGGESTION_LABEL_LENGTH] + "..."
    return suggestion
