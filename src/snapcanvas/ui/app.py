"""Gradio UI for SnapCanvas.

The UI runs as its own process and talks to the SnapCanvas API at
``config.api_url``.  It has two tabs:

- **Generate** - the generation form.  The button is disabled while a
  request is in flight; the result is shown with its metadata.
- **Gallery** - the locally stored images with search, sort and paging, and
  a detail view to download, copy or delete the selected image.

Usage
-----
CLI (installed entry point)::

    snapcanvas-ui

Direct invocation::

    python -m snapcanvas.ui.app
"""

import logging

import gradio as gr

from snapcanvas.api.models import (
    DEFAULT_GUIDANCE_SCALE,
    DEFAULT_HEIGHT,
    DEFAULT_INFERENCE_STEPS,
    DEFAULT_SCHEDULER,
    DEFAULT_WIDTH,
)
from snapcanvas.core.config import config
from snapcanvas.gallery.view import SORT_OPTIONS

from .handlers import (
    apply_resolution_preset,
    begin_generation,
    close_detail,
    copy_selected_prompt,
    delete_selected_image,
    download_selected_image,
    go_to_page,
    insert_suggestion,
    next_page,
    previous_page,
    refresh_gallery,
    reset_form,
    resolution_label,
    search_gallery,
    select_gallery_image,
    sort_gallery,
    submit_generation,
    update_form_field,
)
from .handlers.gallery import NO_SELECTION_MESSAGE
from .handlers.generation import GENERATE_LABEL, READY_MESSAGE
from .models import (
    GUIDANCE_SCALE_RANGE,
    INFERENCE_STEPS_RANGE,
    PROMPT_SUGGESTIONS,
    RESOLUTION_OPTIONS,
    SCHEDULER_OPTIONS,
    UIState,
    suggestion_label,
)

logger = logging.getLogger(__name__)

# Runs in the browser after copy_selected_prompt has filled the hidden textbox.
COPY_TO_CLIPBOARD_JS = "(text) => { if (text) { navigator.clipboard.writeText(text); } return text; }"


def _field_updater(field_name: str):
    def handler(value, state):
        return update_form_field(field_name, value, state)

    return handler


def _suggestion_inserter(suggestion: str):
    def handler(state):
        return insert_suggestion(suggestion, state)

    return handler


def create_ui() -> gr.Blocks:
    """Create the Gradio UI.

    Returns:
        Gradio Blocks app
    """
    app = gr.Blocks(title="SnapCanvas")

    with app:
        # Session state - one instance per user
        ui_state = gr.State(UIState())

        gr.Markdown(
            """
            # SnapCanvas
            ### Prompt-to-image generation with Stable Diffusion
            """
        )

        with gr.Tabs():
            with gr.Tab("Generate", id="generate_tab"):
                create_generation_tab(ui_state)

            with gr.Tab("Gallery", id="gallery_tab") as gallery_tab:
                gallery_outputs = create_gallery_tab(ui_state)

                # Reload from storage so images generated since the last visit show up
                gallery_tab.select(
                    fn=refresh_gallery,
                    inputs=[ui_state],
                    outputs=gallery_outputs,
                )

    return app


def create_generation_tab(ui_state):
    """Create the generation tab UI.

    Args:
        ui_state: UI state component
    """
    with gr.Row():
        with gr.Column(scale=1):
            gr.Markdown("### Generation Settings")

            prompt_input = gr.Textbox(
                label="Prompt",
                placeholder="Describe the image you want to generate...",
                lines=3,
            )

            gr.Markdown("*Need inspiration? Try one of these:*")
            with gr.Row():
                suggestion_buttons = [
                    (gr.Button(suggestion_label(s), size="sm"), s) for s in PROMPT_SUGGESTIONS
                ]

            negative_prompt_input = gr.Textbox(
                label="Negative Prompt",
                placeholder="What to avoid in the image (optional)",
                lines=2,
            )

            resolution_dropdown = gr.Dropdown(
                label="Resolution",
                choices=[r.label for r in RESOLUTION_OPTIONS],
                value=resolution_label(DEFAULT_WIDTH, DEFAULT_HEIGHT),
            )

            guidance_min, guidance_max, guidance_step = GUIDANCE_SCALE_RANGE
            guidance_slider = gr.Slider(
                label="Guidance Scale",
                minimum=guidance_min,
                maximum=guidance_max,
                step=guidance_step,
                value=DEFAULT_GUIDANCE_SCALE,
                info="How closely the image follows the prompt",
            )

            steps_min, steps_max, steps_step = INFERENCE_STEPS_RANGE
            steps_slider = gr.Slider(
                label="Inference Steps",
                minimum=steps_min,
                maximum=steps_max,
                step=steps_step,
                value=DEFAULT_INFERENCE_STEPS,
                info="More steps are slower but more detailed",
            )

            scheduler_dropdown = gr.Dropdown(
                label="Scheduler",
                choices=[(label, value) for value, label in SCHEDULER_OPTIONS.items()],
                value=DEFAULT_SCHEDULER,
            )

            with gr.Row():
                generate_btn = gr.Button(GENERATE_LABEL, variant="primary", interactive=False)
                reset_btn = gr.Button("Reset", variant="secondary")

        with gr.Column(scale=1):
            gr.Markdown("### Generated Image")
            image_output = gr.Image(label="Output", interactive=False, height=512)
            info_output = gr.Markdown(value=READY_MESSAGE)

    # Form fields
    for component, field_name in (
        (prompt_input, "prompt"),
        (negative_prompt_input, "negative_prompt"),
        (guidance_slider, "guidance_scale"),
        (steps_slider, "num_inference_steps"),
        (scheduler_dropdown, "scheduler"),
    ):
        component.change(
            fn=_field_updater(field_name),
            inputs=[component, ui_state],
            outputs=[generate_btn, info_output, ui_state],
        )

    resolution_dropdown.change(
        fn=apply_resolution_preset,
        inputs=[resolution_dropdown, ui_state],
        outputs=[ui_state],
    )

    for button, suggestion in suggestion_buttons:
        button.click(
            fn=_suggestion_inserter(suggestion),
            inputs=[ui_state],
            outputs=[prompt_input, generate_btn, ui_state],
        )

    # Disable the button first, then run the request
    generate_btn.click(
        fn=begin_generation,
        inputs=[ui_state],
        outputs=[generate_btn, info_output, ui_state],
    ).then(
        fn=submit_generation,
        inputs=[ui_state],
        outputs=[image_output, info_output, generate_btn, ui_state],
    )

    reset_btn.click(
        fn=reset_form,
        inputs=[ui_state],
        outputs=[
            prompt_input,
            negative_prompt_input,
            resolution_dropdown,
            guidance_slider,
            steps_slider,
            scheduler_dropdown,
            info_output,
            generate_btn,
            ui_state,
        ],
    )


def create_gallery_tab(ui_state):
    """Create the gallery tab UI.

    Args:
        ui_state: UI state component

    Returns:
        Output components shared by every gallery handler, in the order
        returned by :func:`~snapcanvas.ui.handlers.gallery.render_gallery`
    """
    gr.Markdown("### Your Gallery")

    with gr.Row():
        search_input = gr.Textbox(
            label="Search",
            placeholder="Search prompts...",
            scale=3,
        )
        sort_dropdown = gr.Dropdown(
            label="Sort",
            choices=[(label, value) for value, label in SORT_OPTIONS.items()],
            value="date-desc",
            scale=1,
        )
        refresh_btn = gr.Button("Refresh", size="sm", scale=1)

    summary_display = gr.Markdown(value="")

    gallery = gr.Gallery(
        label="Images",
        columns=4,
        height=600,
        object_fit="cover",
        allow_preview=False,
        show_label=True,
    )

    with gr.Row():
        prev_btn = gr.Button("Previous", size="sm", interactive=False)
        page_selector = gr.Radio(label="Page", choices=["1"], value="1", visible=False)
        next_btn = gr.Button("Next", size="sm", interactive=False)

    with gr.Group(visible=False) as detail_group:
        with gr.Row():
            with gr.Column(scale=2):
                detail_image = gr.Image(label="Selected Image", interactive=False, height=400)
            with gr.Column(scale=1):
                detail_display = gr.Markdown(value=NO_SELECTION_MESSAGE)
                with gr.Row():
                    download_btn = gr.Button("Download", size="sm")
                    copy_btn = gr.Button("Copy Prompt", size="sm")
                    delete_btn = gr.Button("Delete", size="sm", variant="stop")
                    close_btn = gr.Button("Close", size="sm")
                detail_status = gr.Markdown(value="")
                download_file = gr.File(label="Download", interactive=False)
                clipboard_text = gr.Textbox(visible=False)

    gallery_outputs = [
        gallery,
        summary_display,
        page_selector,
        prev_btn,
        next_btn,
        detail_group,
        detail_image,
        detail_display,
        ui_state,
    ]

    # Search, sort and paging
    search_input.change(
        fn=search_gallery,
        inputs=[search_input, ui_state],
        outputs=gallery_outputs,
    )
    sort_dropdown.change(
        fn=sort_gallery,
        inputs=[sort_dropdown, ui_state],
        outputs=gallery_outputs,
    )
    refresh_btn.click(
        fn=refresh_gallery,
        inputs=[ui_state],
        outputs=gallery_outputs,
    )
    # .input only fires on user clicks, not when render_gallery updates the choices
    page_selector.input(
        fn=go_to_page,
        inputs=[page_selector, ui_state],
        outputs=gallery_outputs,
    )
    prev_btn.click(fn=previous_page, inputs=[ui_state], outputs=gallery_outputs)
    next_btn.click(fn=next_page, inputs=[ui_state], outputs=gallery_outputs)

    # Image selection - uses gr.SelectData for event
    gallery.select(
        fn=select_gallery_image,
        inputs=[ui_state],
        outputs=gallery_outputs,
    )

    # Detail view actions
    close_btn.click(fn=close_detail, inputs=[ui_state], outputs=gallery_outputs)
    delete_btn.click(fn=delete_selected_image, inputs=[ui_state], outputs=gallery_outputs)
    download_btn.click(
        fn=download_selected_image,
        inputs=[ui_state],
        outputs=[download_file, detail_status, ui_state],
    )
    copy_btn.click(
        fn=copy_selected_prompt,
        inputs=[ui_state],
        outputs=[clipboard_text, detail_status, ui_state],
    ).then(
        fn=None,
        inputs=[clipboard_text],
        outputs=None,
        js=COPY_TO_CLIPBOARD_JS,
    )

    return gallery_outputs


def main():
    """Main entry point for the UI."""
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting SnapCanvas UI...")
    logger.info(f"Using SnapCanvas API at {config.api_url}")

    app = create_ui()

    logger.info(f"Launching Gradio UI on {config.gradio_server_name}:{config.gradio_server_port}")

    app.launch(
        server_name=config.gradio_server_name,
        server_port=config.gradio_server_port,
        share=config.gradio_share,
        show_error=True,
        inbrowser=False,
        allowed_paths=[str(config.downloads_path)],
    )


if __name__ == "__main__":
    main()
