"""Generation form handlers."""

import logging

import gradio as gr

from snapcanvas.core.errors import ValidationError

from ..display import format_metadata
from ..form import GenerationStatus
from ..models import RESOLUTION_OPTIONS, GenerationFormData, UIState
from ..state import initialize_ui_state

logger = logging.getLogger(__name__)

READY_MESSAGE = "*Ready to generate images*"
GENERATING_MESSAGE = "⏳ **Generating image...**\n\nThis can take up to a minute."
GENERATE_LABEL = "Generate"
GENERATING_LABEL = "Generating..."


def _button(state: UIState) -> dict:
    return gr.update(value=GENERATE_LABEL, interactive=state.form.can_submit)


def update_form_field(field_name: str, value, state: UIState) -> tuple[dict, dict, UIState]:
    """Copy one widget value into the form.

    Args:
        field_name: Form field bound to the widget
        value: New widget value
        state: UI state

    Returns:
        Tuple of (generate_button_update, info_update, updated_state)
    """
    state = initialize_ui_state(state)
    try:
        state.form.update(field_name, value)
    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        return _button(state), gr.update(value=f"❌ **Validation Error**\n\n{e}"), state

    return _button(state), gr.update(), state


def apply_resolution_preset(label: str, state: UIState) -> UIState:
    """Copy the width and height of the preset named *label* into the form."""
    state = initialize_ui_state(state)
    option = next((r for r in RESOLUTION_OPTIONS if r.label == label), None)
    if option is None:
        logger.warning(f"Unknown resolution preset: {label!r}")
        return state

    state.form.apply_resolution(option)
    return state


def insert_suggestion(suggestion: str, state: UIState) -> tuple[str, dict, UIState]:
    """Replace the prompt with a canned suggestion.

    Returns:
        Tuple of (prompt_text, generate_button_update, updated_state)
    """
    state = initialize_ui_state(state)
    form = state.form.insert_suggestion(suggestion)
    return form.prompt, _button(state), state


def begin_generation(state: UIState) -> tuple[dict, str, UIState]:
    """Disable the generate button before the request is sent.

    Returns:
        Tuple of (generate_button_update, info_message, updated_state)
    """
    state = initialize_ui_state(state)
    return gr.update(value=GENERATING_LABEL, interactive=False), GENERATING_MESSAGE, state


def submit_generation(state: UIState) -> tuple[str | dict, str, dict, UIState]:
    """Generate one image from the current form values.

    Args:
        state: UI state

    Returns:
        Tuple of (image_url, info_message, generate_button_update, updated_state)
    """
    try:
        state = initialize_ui_state(state)
        image = state.form.submit()

        if state.form.status is GenerationStatus.ERROR:
            error_msg = f"❌ **Error**\n\n{state.form.error}"
            return gr.update(), error_msg, _button(state), state

        if image is None:
            # Submit was ignored because another request is in flight.
            return gr.update(), gr.update(), _button(state), state

        info = f"✅ **Generation Complete!**\n\n{format_metadata(image)}"
        return image.url, info, _button(state), state

    except Exception as e:
        logger.error(f"Error in generation handler: {e}", exc_info=True)
        error_msg = f"❌ **Error**\n\nAn unexpected error occurred. Check logs for details.\n\n`{e}`"
        return gr.update(), error_msg, gr.update(value=GENERATE_LABEL, interactive=True), state


def reset_form(state: UIState) -> tuple:
    """Restore default form values and clear the last error.

    Returns:
        Tuple of (prompt, negative_prompt, resolution_label, guidance_scale,
        num_inference_steps, scheduler, info_message, generate_button_update,
        updated_state)
    """
    state = initialize_ui_state(state)
    state.form.clear_error()
    form: GenerationFormData = state.form.reset()
    return (
        form.prompt,
        form.negative_prompt,
        resolution_label(form.width, form.height),
        form.guidance_scale,
        form.num_inference_steps,
        form.scheduler,
        READY_MESSAGE,
        _button(state),
        state,
    )


def resolution_label(width: int, height: int) -> str | None:
    """Label of the preset matching *width* x *height*, if there is one."""
    return next(
        (r.label for r in RESOLUTION_OPTIONS if (r.width, r.height) == (width, height)),
        None,
    )
