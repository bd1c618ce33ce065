"""Gallery filtering, sorting, pagination, and view state.

Everything in the first half of this module is a pure function of its
arguments: :func:`visible_page` turns ``(images, search_term, sort_by,
sort_order, page)`` into the :class:`GalleryPage` that should be shown.

The second half models the gallery screen as a state machine.  User actions
are explicit command objects, and :func:`reduce` maps ``(state, command)`` to
a new :class:`GalleryViewState` without touching storage.
:class:`GalleryController` is the thin layer that applies commands and
persists deletions through a :class:`~snapcanvas.gallery.store.GalleryStore`.

Page Reset Rule
---------------
The current page goes back to 1 whenever the filtered/sorted set can change:
loading images, editing the search term, changing the sort, deleting an
image.  Page navigation commands are clamped to the valid page range.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Literal, Union

from snapcanvas.core.models import GeneratedImage
from snapcanvas.gallery.store import GalleryStore

logger = logging.getLogger(__name__)

SortBy = Literal["date", "prompt"]
SortOrder = Literal["asc", "desc"]

PAGE_SIZE = 12
MAX_PAGE_BUTTONS = 5

SORT_OPTIONS: dict[str, str] = {
    "date-desc": "Newest First",
    "date-asc": "Oldest First",
    "prompt-asc": "A-Z",
    "prompt-desc": "Z-A",
}


# ---------------------------------------------------------------------------
# Pure helpers.
# ---------------------------------------------------------------------------


def filter_images(images: list[GeneratedImage], search_term: str) -> list[GeneratedImage]:
    """Keep images whose prompt or negative prompt contains *search_term*.

    Matching is a substring test on lower-cased text, so "ss" does not
    match "straße".  An empty search term keeps everything.

    Args:
        images: Source images.
        search_term: Text typed in the search box.

    Returns:
        Matching images in their original order.
    """
    term = search_term.lower()
    if not term:
        return list(images)

    return [
        img
        for img in images
        if term in img.prompt.lower()
        or (img.negative_prompt and term in img.negative_prompt.lower())
    ]


def _check_sort(sort_by: str, sort_order: str) -> None:
    if sort_by not in ("date", "prompt"):
        raise ValueError(f"Unknown sort field: {sort_by}")
    if sort_order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order: {sort_order}")


def _date_key(image: GeneratedImage) -> float:
    return image.created_at.timestamp()


def _prompt_key(image: GeneratedImage) -> tuple[str, str]:
    # Case-insensitive first, then case as a tiebreaker, so "apple" sorts
    # next to "Apple" instead of after "Zebra".
    return (image.prompt.casefold(), image.prompt)


def sort_images(
    images: list[GeneratedImage],
    sort_by: SortBy = "date",
    sort_order: SortOrder = "desc",
) -> list[GeneratedImage]:
    """Sort images by creation time or prompt text.

    The sort is stable in both directions, so images that compare equal keep
    their relative order.

    Args:
        images: Images to sort.
        sort_by: ``"date"`` or ``"prompt"``.
        sort_order: ``"asc"`` or ``"desc"``.

    Returns:
        A new sorted list.

    Raises:
        ValueError: If *sort_by* or *sort_order* is unknown.
    """
    _check_sort(sort_by, sort_order)

    if sort_by == "date":
        key = _date_key
    else:
        key = _prompt_key

    return sorted(images, key=key, reverse=sort_order == "desc")


def parse_sort_option(option: str) -> tuple[SortBy, SortOrder]:
    """Split a combined option such as ``"date-desc"`` into its two parts.

    Raises:
        ValueError: If *option* is not one of :data:`SORT_OPTIONS`.
    """
    if option not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {option}")
    sort_by, sort_order = option.split("-")
    return sort_by, sort_order  # type: ignore[return-value]


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    """Number of pages needed for *count* items (0 when there are none)."""
    return math.ceil(count / page_size)


@dataclass(frozen=True)
class GalleryPage:
    """One page of the filtered and sorted gallery.

    Attributes:
        images: Images on this page.
        page: Resolved one-based page number.
        total_pages: Number of pages for the filtered set.
        filtered_count: Number of images matching the search.
        total_count: Number of images in the gallery.
        page_size: Images per page.
    """

    images: list[GeneratedImage]
    page: int
    total_pages: int
    filtered_count: int
    total_count: int
    page_size: int = PAGE_SIZE

    @property
    def start(self) -> int:
        """One-based index of the first image on the page."""
        return (self.page - 1) * self.page_size + 1 if self.images else 0

    @property
    def end(self) -> int:
        """One-based index of the last image on the page."""
        return min(self.page * self.page_size, self.filtered_count) if self.images else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def page_numbers(self) -> list[int]:
        """Page buttons to show: the first five pages at most."""
        return list(range(1, min(MAX_PAGE_BUTTONS, self.total_pages) + 1))

    @property
    def count_label(self) -> str:
        return f"{self.filtered_count} of {self.total_count} images"

    @property
    def summary(self) -> str:
        return f"Showing {self.start}-{self.end} of {self.filtered_count} images"


def paginate_images(
    images: list[GeneratedImage],
    page: int,
    page_size: int = PAGE_SIZE,
    *,
    total_count: int | None = None,
) -> GalleryPage:
    """Slice one page out of *images*, clamping *page* to the valid range.

    Args:
        images: Filtered and sorted images.
        page: Requested one-based page number.
        page_size: Images per page.
        total_count: Size of the unfiltered gallery, for the count label.
            Defaults to ``len(images)``.

    Returns:
        The resolved :class:`GalleryPage`.
    """
    pages = total_pages(len(images), page_size)
    resolved_page = min(max(page, 1), max(pages, 1))

    start = (resolved_page - 1) * page_size
    end = start + page_size

    return GalleryPage(
        images=images[start:end],
        page=resolved_page,
        total_pages=pages,
        filtered_count=len(images),
        total_count=len(images) if total_count is None else total_count,
        page_size=page_size,
    )


def visible_page(
    images: list[GeneratedImage],
    search_term: str = "",
    sort_by: SortBy = "date",
    sort_order: SortOrder = "desc",
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> GalleryPage:
    """Filter, sort and paginate *images* in one step."""
    filtered = sort_images(filter_images(images, search_term), sort_by, sort_order)
    return paginate_images(filtered, page, page_size, total_count=len(images))


# ---------------------------------------------------------------------------
# Commands.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadImages:
    images: list[GeneratedImage]


@dataclass(frozen=True)
class SetSearchTerm:
    term: str


@dataclass(frozen=True)
class SetSort:
    sort_by: SortBy
    sort_order: SortOrder


@dataclass(frozen=True)
class SetSortOption:
    """Combined sort selection, e.g. ``"prompt-asc"``."""

    option: str


@dataclass(frozen=True)
class GoToPage:
    page: int


@dataclass(frozen=True)
class NextPage:
    pass


@dataclass(frozen=True)
class PreviousPage:
    pass


@dataclass(frozen=True)
class OpenDetail:
    image_id: str


@dataclass(frozen=True)
class CloseDetail:
    pass


@dataclass(frozen=True)
class DeleteImage:
    image_id: str


GalleryCommand = Union[
    LoadImages,
    SetSearchTerm,
    SetSort,
    SetSortOption,
    GoToPage,
    NextPage,
    PreviousPage,
    OpenDetail,
    CloseDetail,
    DeleteImage,
]


# ---------------------------------------------------------------------------
# State and reducer.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GalleryViewState:
    """Everything the gallery screen shows, minus rendering.

    Attributes:
        images: All gallery images, newest first.
        search_term: Current search box text.
        sort_by: ``"date"`` or ``"prompt"``.
        sort_order: ``"asc"`` or ``"desc"``.
        page: Current one-based page.
        page_size: Images per page.
        selected: Image shown in the detail view, if any.
    """

    images: list[GeneratedImage] = field(default_factory=list)
    search_term: str = ""
    sort_by: SortBy = "date"
    sort_order: SortOrder = "desc"
    page: int = 1
    page_size: int = PAGE_SIZE
    selected: GeneratedImage | None = None

    @property
    def show_detail(self) -> bool:
        return self.selected is not None

    @property
    def sort_option(self) -> str:
        return f"{self.sort_by}-{self.sort_order}"

    @property
    def is_empty(self) -> bool:
        """``True`` when the gallery itself (not just the search) is empty."""
        return not self.images

    def current_page(self) -> GalleryPage:
        """The page of images currently visible."""
        return visible_page(
            self.images,
            self.search_term,
            self.sort_by,
            self.sort_order,
            self.page,
            self.page_size,
        )


def _page_count(state: GalleryViewState) -> int:
    matching = filter_images(state.images, state.search_term)
    return max(total_pages(len(matching), state.page_size), 1)


def reduce(state: GalleryViewState, command: GalleryCommand) -> GalleryViewState:
    """Apply *command* to *state* and return the new state.

    The reducer is pure: it never reads or writes storage.

    Raises:
        ValueError: For an unknown sort option or an unknown command.
    """
    if isinstance(command, LoadImages):
        selected = state.selected
        if selected is not None and all(img.id != selected.id for img in command.images):
            selected = None
        return replace(state, images=list(command.images), page=1, selected=selected)

    if isinstance(command, SetSearchTerm):
        return replace(state, search_term=command.term, page=1)

    if isinstance(command, SetSort):
        _check_sort(command.sort_by, command.sort_order)
        return replace(state, sort_by=command.sort_by, sort_order=command.sort_order, page=1)

    if isinstance(command, SetSortOption):
        sort_by, sort_order = parse_sort_option(command.option)
        return replace(state, sort_by=sort_by, sort_order=sort_order, page=1)

    if isinstance(command, GoToPage):
        return replace(state, page=min(max(command.page, 1), _page_count(state)))

    if isinstance(command, NextPage):
        return replace(state, page=min(state.page + 1, _page_count(state)))

    if isinstance(command, PreviousPage):
        return replace(state, page=max(state.page - 1, 1))

    if isinstance(command, OpenDetail):
        image = next((img for img in state.images if img.id == command.image_id), None)
        if image is None:
            logger.debug(f"OpenDetail ignored, unknown image {command.image_id}")
            return state
        return replace(state, selected=image)

    if isinstance(command, CloseDetail):
        return replace(state, selected=None)

    if isinstance(command, DeleteImage):
        if all(img.id != command.image_id for img in state.images):
            return state
        images = [img for img in state.images if img.id != command.image_id]
        selected = state.selected
        if selected is not None and selected.id == command.image_id:
            selected = None
        return replace(state, images=images, page=1, selected=selected)

    raise ValueError(f"Unknown gallery command: {command!r}")


class GalleryController:
    """Drive a :class:`GalleryViewState` and keep the store in sync.

    Args:
        store: Persistent gallery.
        page_size: Images per page.
    """

    def __init__(self, store: GalleryStore, page_size: int = PAGE_SIZE) -> None:
        self.store = store
        self.state = GalleryViewState(page_size=page_size)

    def refresh(self) -> GalleryViewState:
        """Reload images from the store."""
        return self.dispatch(LoadImages(self.store.load_all()))

    def dispatch(self, command: GalleryCommand) -> GalleryViewState:
        """Apply *command*; deletions are also written to the store."""
        if isinstance(command, DeleteImage):
            self.store.remove(command.image_id)
            logger.info(f"Deleted image {command.image_id}")

        self.state = reduce(self.state, command)
        return self.state

    def current_page(self) -> GalleryPage:
        return self.state.current_page()
