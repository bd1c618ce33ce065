"""Generation form controller.

:class:`FormController` owns the in-progress :class:`GenerationFormData`, the
"generating" flag that disables the submit action, and the outcome of the
last submission (an image or an error message).  It is the Python counterpart
of the browser form component: event handlers become method calls.
"""

import logging
from dataclasses import fields, replace
from enum import Enum
from typing import Any

from snapcanvas.client.generation import UNEXPECTED_ERROR_MESSAGE, GenerationClient
from snapcanvas.core.errors import ProviderError, ValidationError
from snapcanvas.core.models import GeneratedImage

from .models import GenerationFormData, ResolutionOption

logger = logging.getLogger(__name__)

_FORM_FIELDS = {f.name for f in fields(GenerationFormData)}
_INT_FIELDS = {"width": "Width", "height": "Height", "num_inference_steps": "Inference steps"}
_FLOAT_FIELDS = {"guidance_scale": "Guidance scale"}


def _coerce(field_name: str, value: Any) -> Any:
    """Convert a raw widget value to the type of *field_name*.

    Raises:
        ValidationError: If a numeric field gets a value that is not a number.
    """
    if field_name in _INT_FIELDS:
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{_INT_FIELDS[field_name]} must be a number") from None
        if not number.is_integer():
            raise ValidationError(f"{_INT_FIELDS[field_name]} must be a whole number")
        return int(number)

    if field_name in _FLOAT_FIELDS:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{_FLOAT_FIELDS[field_name]} must be a number") from None

    return "" if value is None else str(value)


class GenerationStatus(str, Enum):
    """Lifecycle of the current submission."""

    IDLE = "idle"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class FormController:
    """State and actions of the generation form.

    Attributes:
        form: Current field values.
        is_generating: ``True`` while a request is in flight.
        error: User-facing message of the last failure, if any.
        image: Image produced by the last successful submission.
        status: Lifecycle of the current submission.
    """

    def __init__(self, client: GenerationClient, form: GenerationFormData | None = None) -> None:
        self.client = client
        self.form = form or GenerationFormData()
        self.is_generating = False
        self.error: str | None = None
        self.image: GeneratedImage | None = None
        self.status = GenerationStatus.IDLE

    @property
    def can_submit(self) -> bool:
        """Submit is enabled only when idle and a prompt has been typed."""
        return not self.is_generating and bool(self.form.prompt.strip())

    def update(self, field_name: str, value: Any) -> GenerationFormData:
        """Set one form field.

        Widget values arrive as strings or floats, so numeric fields are
        converted first ("768" becomes ``768``).

        Raises:
            KeyError: If *field_name* is not a form field.
            ValidationError: If a numeric field gets a non-numeric value.
        """
        if field_name not in _FORM_FIELDS:
            raise KeyError(f"Unknown form field: {field_name}")
        if self.is_generating:
            logger.debug(f"Ignoring update of {field_name} while generating")
            return self.form
        self.form = replace(self.form, **{field_name: _coerce(field_name, value)})
        return self.form

    def apply_resolution(self, option: ResolutionOption) -> GenerationFormData:
        """Copy a resolution preset into the form."""
        if not self.is_generating:
            self.form = replace(self.form, width=option.width, height=option.height)
        return self.form

    def insert_suggestion(self, suggestion: str) -> GenerationFormData:
        """Replace the prompt with a canned suggestion."""
        return self.update("prompt", suggestion)

    def reset(self) -> GenerationFormData:
        """Restore default form values."""
        self.form = GenerationFormData()
        return self.form

    def clear_error(self) -> None:
        self.error = None
        if self.status is GenerationStatus.ERROR:
            self.status = GenerationStatus.IDLE

    def submit(self) -> GeneratedImage | None:
        """Send the form to the generation client.

        A call made while a previous submission is still running is ignored.
        Failures never propagate: their message is stored in :attr:`error`.

        Returns:
            The generated image, or ``None`` on failure or when ignored.
        """
        if self.is_generating:
            logger.warning("Submit ignored: a generation request is already in flight")
            return None

        self.is_generating = True
        self.status = GenerationStatus.GENERATING
        self.error = None

        try:
            image = self.client.generate(self.form)

        except ValidationError as e:
            logger.warning(f"Validation error: {e}")
            return self._fail(str(e))

        except ProviderError as e:
            logger.warning(f"Generation failed: {e}")
            return self._fail(str(e))

        except Exception as e:
            logger.error(f"Error generating image: {e}", exc_info=True)
            return self._fail(str(e) or UNEXPECTED_ERROR_MESSAGE)

        finally:
            self.is_generating = False

        self.image = image
        self.status = GenerationStatus.COMPLETED
        return image

    def _fail(self, message: str) -> None:
        self.error = message
        self.status = GenerationStatus.ERROR
        return None
