"""UI event handlers organized by tab.

- generation: The generation form on the Generate tab
- gallery: Search, sort, paging and the detail view on the Gallery tab
"""

from .gallery import (
    close_detail,
    copy_selected_prompt,
    delete_selected_image,
    download_selected_image,
    go_to_page,
    next_page,
    previous_page,
    refresh_gallery,
    render_gallery,
    search_gallery,
    select_gallery_image,
    sort_gallery,
)
from .generation import (
    apply_resolution_preset,
    begin_generation,
    insert_suggestion,
    reset_form,
    resolution_label,
    submit_generation,
    update_form_field,
)

__all__ = [
    # Generation handlers
    "apply_resolution_preset",
    "begin_generation",
    "insert_suggestion",
    "reset_form",
    "resolution_label",
    "submit_generation",
    "update_form_field",
    # Gallery handlers
    "close_detail",
    "copy_selected_prompt",
    "delete_selected_image",
    "download_selected_image",
    "go_to_page",
    "next_page",
    "previous_page",
    "refresh_gallery",
    "render_gallery",
    "search_gallery",
    "select_gallery_image",
    "sort_gallery",
]
