"""Gallery tab handlers: search, sort, paging and the image detail view.

Every handler that changes what the gallery shows returns the same tuple,
built by :func:`render_gallery`, so they can all share one output list in
the UI.
"""

import logging

import gradio as gr

from snapcanvas.core.config import config
from snapcanvas.gallery.view import (
    CloseDetail,
    DeleteImage,
    GalleryCommand,
    GoToPage,
    NextPage,
    OpenDetail,
    PreviousPage,
    SetSearchTerm,
    SetSortOption,
)

from ..models import UIState
from ..state import initialize_ui_state

logger = logging.getLogger(__name__)

EMPTY_GALLERY_MESSAGE = "*No images yet. Generate one in the Generate tab.*"
NO_SELECTION_MESSAGE = "*No image selected*"


def _summary(state: UIState) -> str:
    view = state.gallery.state
    page = view.current_page()
    if view.is_empty:
        return EMPTY_GALLERY_MESSAGE
    if page.filtered_count == 0:
        return f'*No images match "{view.search_term}"* ({page.count_label})'
    return f"**{page.count_label}** | {page.summary}"


def render_gallery(state: UIState) -> tuple:
    """Build every gallery output from the current view state.

    Returns:
        Tuple of (gallery_items, summary, page_selector_update,
        previous_button_update, next_button_update, detail_group_update,
        detail_image, detail_markdown, updated_state)
    """
    view = state.gallery.state
    page = view.current_page()
    page_choices = [str(n) for n in page.page_numbers]
    current = str(page.page)

    selected = view.selected
    detail_image = selected.url if selected is not None else None
    detail_md = state.detail.render(selected) if selected is not None else NO_SELECTION_MESSAGE

    return (
        [(img.url, img.prompt) for img in page.images],
        _summary(state),
        gr.update(
            choices=page_choices,
            value=current if current in page_choices else None,
            visible=page.total_pages > 1,
        ),
        gr.update(interactive=page.has_previous),
        gr.update(interactive=page.has_next),
        gr.update(visible=view.show_detail),
        detail_image,
        detail_md,
        state,
    )


def _dispatch(state: UIState, command: GalleryCommand) -> tuple:
    state = initialize_ui_state(state)
    try:
        state.gallery.dispatch(command)
    except ValueError as e:
        logger.error(f"Error applying gallery command {command!r}: {e}")
    return render_gallery(state)


def refresh_gallery(state: UIState) -> tuple:
    """Reload the gallery from storage, e.g. when the tab is opened."""
    state = initialize_ui_state(state)
    state.gallery.refresh()
    logger.info(f"Gallery refreshed: {len(state.gallery.state.images)} images")
    return render_gallery(state)


def search_gallery(term: str, state: UIState) -> tuple:
    return _dispatch(state, SetSearchTerm(term or ""))


def sort_gallery(option: str, state: UIState) -> tuple:
    return _dispatch(state, SetSortOption(option))


def go_to_page(page: str, state: UIState) -> tuple:
    """Jump to the page picked in the page selector."""
    if not page:
        return render_gallery(initialize_ui_state(state))
    return _dispatch(state, GoToPage(int(page)))


def next_page(state: UIState) -> tuple:
    return _dispatch(state, NextPage())


def previous_page(state: UIState) -> tuple:
    return _dispatch(state, PreviousPage())


def select_gallery_image(evt: gr.SelectData, state: UIState) -> tuple:
    """Open the detail view for the clicked thumbnail.

    Args:
        evt: Gradio SelectData event containing the index on the current page
        state: UI state
    """
    state = initialize_ui_state(state)
    images = state.gallery.current_page().images

    index = evt.index
    if not isinstance(index, int) or not 0 <= index < len(images):
        logger.warning(f"Gallery selection out of range: {index!r}")
        return render_gallery(state)

    return _dispatch(state, OpenDetail(images[index].id))


def close_detail(state: UIState) -> tuple:
    return _dispatch(state, CloseDetail())


def delete_selected_image(state: UIState) -> tuple:
    """Delete the open image from storage and close the detail view."""
    state = initialize_ui_state(state)
    selected = state.gallery.state.selected
    if selected is None:
        return render_gallery(state)
    return _dispatch(state, DeleteImage(selected.id))


def download_selected_image(state: UIState) -> tuple[str | None, str, UIState]:
    """Save the open image under ``config.downloads_path``.

    Returns:
        Tuple of (file_path, status_message, updated_state)
    """
    state = initialize_ui_state(state)
    selected = state.gallery.state.selected
    if selected is None:
        return None, NO_SELECTION_MESSAGE, state

    path = state.detail.download(selected, config.downloads_path)
    if path is None:
        return None, "❌ **Error**\n\nDownload failed. Check logs for details.", state
    return str(path), f"✅ Saved as `{path.name}`", state


def copy_selected_prompt(state: UIState) -> tuple[str, str, UIState]:
    """Hand the open image's prompt to the browser clipboard.

    Returns:
        Tuple of (clipboard_text, status_message, updated_state)
    """
    state = initialize_ui_state(state)
    selected = state.gallery.state.selected
    if selected is None:
        return "", NO_SELECTION_MESSAGE, state

    if not state.detail.copy_prompt(selected):
        return "", "❌ **Error**\n\nCould not copy the prompt.", state
    return state.clipboard_text, "✅ Copied!", state
