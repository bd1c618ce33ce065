"""Tests for snapcanvas.gallery.view - filtering, sorting, paging and state.

Tests cover:
- Case-insensitive search over prompt and negative prompt.
- Date and prompt sorting in both directions.
- Pagination maths and page clamping.
- The command reducer, including the page reset rule.
- GalleryController persistence of deletions.
"""

from __future__ import annotations

import pytest

from snapcanvas.gallery.view import (
    CloseDetail,
    DeleteImage,
    GalleryController,
    GalleryViewState,
    GoToPage,
    LoadImages,
    NextPage,
    OpenDetail,
    PreviousPage,
    SetSearchTerm,
    SetSort,
    SetSortOption,
    filter_images,
    paginate_images,
    parse_sort_option,
    reduce,
    sort_images,
    total_pages,
    visible_page,
)


@pytest.fixture
def images(make_image):
    """Three images, newest first, with distinct prompts."""
    return [
        make_image(3, prompt="a Red fox in snow"),
        make_image(2, prompt="Blue whale", negative_prompt="red tint"),
        make_image(1, prompt="castle at dusk"),
    ]


@pytest.fixture
def many_images(make_image):
    """25 images, newest first."""
    return [make_image(i) for i in range(24, -1, -1)]


# ---------------------------------------------------------------------------
# Pure helpers.
# ---------------------------------------------------------------------------


class TestFilterImages:
    """Test filter_images."""

    def test_empty_term_keeps_all(self, images):
        assert filter_images(images, "") == images

    def test_case_insensitive_prompt_match(self, images):
        assert [img.id for img in filter_images(images, "RED FOX")] == ["3"]

    def test_matches_negative_prompt(self, images):
        assert [img.id for img in filter_images(images, "red")] == ["3", "2"]

    def test_no_match(self, images):
        assert filter_images(images, "zebra") == []

    def test_sharp_s_not_folded(self, make_image):
        street = [make_image(1, prompt="Straße at night")]
        assert filter_images(street, "ss") == []
        assert filter_images(street, "STRAßE") == street

    def test_does_not_mutate_input(self, images):
        before = list(images)
        filter_images(images, "red")
        assert images == before


class TestSortImages:
    """Test sort_images."""

    def test_date_desc(self, images):
        assert [img.id for img in sort_images(images, "date", "desc")] == ["3", "2", "1"]

    def test_date_asc(self, images):
        assert [img.id for img in sort_images(images, "date", "asc")] == ["1", "2", "3"]

    def test_prompt_asc_ignores_case(self, images):
        prompts = [img.prompt for img in sort_images(images, "prompt", "asc")]
        assert prompts == ["a Red fox in snow", "Blue whale", "castle at dusk"]

    def test_prompt_desc(self, images):
        prompts = [img.prompt for img in sort_images(images, "prompt", "desc")]
        assert prompts == ["castle at dusk", "Blue whale", "a Red fox in snow"]

    def test_unknown_field(self, images):
        with pytest.raises(ValueError):
            sort_images(images, "size", "asc")

    def test_unknown_order(self, images):
        with pytest.raises(ValueError):
            sort_images(images, "date", "sideways")

    def test_filter_and_sort_commute(self, images):
        """Filtering then sorting gives the same result as sorting then filtering."""
        a = sort_images(filter_images(images, "red"), "prompt", "asc")
        b = filter_images(sort_images(images, "prompt", "asc"), "red")
        assert a == b


class TestParseSortOption:
    """Test parse_sort_option."""

    @pytest.mark.parametrize(
        "option, expected",
        [
            ("date-desc", ("date", "desc")),
            ("date-asc", ("date", "asc")),
            ("prompt-asc", ("prompt", "asc")),
            ("prompt-desc", ("prompt", "desc")),
        ],
    )
    def test_valid(self, option, expected):
        assert parse_sort_option(option) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_sort_option("size-asc")


class TestPagination:
    """Test total_pages and paginate_images."""

    @pytest.mark.parametrize("count, pages", [(0, 0), (1, 1), (12, 1), (13, 2), (25, 3)])
    def test_total_pages(self, count, pages):
        assert total_pages(count) == pages

    def test_25_images_split_12_12_1(self, many_images):
        sizes = [len(paginate_images(many_images, p).images) for p in (1, 2, 3)]
        assert sizes == [12, 12, 1]

    def test_page_contents(self, many_images):
        page = paginate_images(many_images, 2)
        assert page.images == many_images[12:24]
        assert page.start == 13
        assert page.end == 24
        assert page.summary == "Showing 13-24 of 25 images"
        assert page.has_previous is True
        assert page.has_next is True

    def test_last_page(self, many_images):
        page = paginate_images(many_images, 3)
        assert page.start == page.end == 25
        assert page.has_next is False

    @pytest.mark.parametrize("requested, resolved", [(0, 1), (-4, 1), (99, 3)])
    def test_page_clamped(self, many_images, requested, resolved):
        assert paginate_images(many_images, requested).page == resolved

    def test_empty(self):
        page = paginate_images([], 1)
        assert page.images == []
        assert page.page == 1
        assert page.total_pages == 0
        assert page.start == page.end == 0
        assert page.page_numbers == []
        assert page.has_next is False

    def test_page_numbers_capped_at_five(self, make_image):
        imgs = [make_image(i) for i in range(100)]
        assert paginate_images(imgs, 1).page_numbers == [1, 2, 3, 4, 5]

    def test_visible_page_counts(self, images):
        page = visible_page(images, search_term="red")
        assert page.count_label == "2 of 3 images"
        assert [img.id for img in page.images] == ["3", "2"]


# ---------------------------------------------------------------------------
# Reducer.
# ---------------------------------------------------------------------------


class TestReducer:
    """Test reduce() transitions."""

    def test_initial_state(self):
        state = GalleryViewState()
        assert state.page == 1
        assert state.sort_option == "date-desc"
        assert state.is_empty
        assert not state.show_detail

    def test_load_images(self, images):
        state = reduce(GalleryViewState(page=3), LoadImages(images))
        assert state.images == images
        assert state.page == 1
        assert not state.is_empty

    @pytest.mark.parametrize(
        "command",
        [SetSearchTerm("fox"), SetSort("prompt", "asc"), SetSortOption("date-asc")],
    )
    def test_page_resets(self, many_images, command):
        state = GalleryViewState(images=many_images, page=3)
        assert reduce(state, command).page == 1

    def test_set_sort_option(self):
        state = reduce(GalleryViewState(), SetSortOption("prompt-desc"))
        assert (state.sort_by, state.sort_order) == ("prompt", "desc")

    def test_invalid_sort_rejected(self):
        with pytest.raises(ValueError):
            reduce(GalleryViewState(), SetSort("size", "asc"))
        with pytest.raises(ValueError):
            reduce(GalleryViewState(), SetSortOption("bogus"))

    def test_page_navigation_clamped(self, many_images):
        state = GalleryViewState(images=many_images)
        state = reduce(state, NextPage())
        assert state.page == 2
        state = reduce(state, GoToPage(10))
        assert state.page == 3
        state = reduce(state, NextPage())
        assert state.page == 3
        state = reduce(state, GoToPage(-1))
        assert state.page == 1
        state = reduce(state, PreviousPage())
        assert state.page == 1

    def test_page_navigation_respects_search(self, many_images):
        state = GalleryViewState(images=many_images, search_term="prompt 1")
        # "prompt 1" plus "prompt 10".."prompt 19" = 11 matches, one page.
        assert reduce(state, NextPage()).page == 1

    def test_open_and_close_detail(self, images):
        state = GalleryViewState(images=images)
        state = reduce(state, OpenDetail("2"))
        assert state.show_detail
        assert state.selected.id == "2"
        state = reduce(state, CloseDetail())
        assert state.selected is None

    def test_open_unknown_image_ignored(self, images):
        state = GalleryViewState(images=images)
        assert reduce(state, OpenDetail("missing")) is state

    def test_delete_selected_closes_detail(self, images):
        state = reduce(GalleryViewState(images=images), OpenDetail("2"))
        state = reduce(state, DeleteImage("2"))
        assert state.selected is None
        assert [img.id for img in state.images] == ["3", "1"]

    def test_delete_other_keeps_detail(self, images):
        state = reduce(GalleryViewState(images=images), OpenDetail("2"))
        state = reduce(state, DeleteImage("3"))
        assert state.selected.id == "2"

    def test_delete_resets_page(self, many_images):
        state = GalleryViewState(images=many_images, page=2)
        assert reduce(state, DeleteImage("0")).page == 1

    def test_delete_unknown_is_noop(self, images):
        state = GalleryViewState(images=images, page=1)
        assert reduce(state, DeleteImage("missing")) is state

    def test_reload_drops_vanished_selection(self, images):
        state = reduce(GalleryViewState(images=images), OpenDetail("2"))
        state = reduce(state, LoadImages([images[0]]))
        assert state.selected is None

    def test_unknown_command(self):
        with pytest.raises(ValueError):
            reduce(GalleryViewState(), object())

    def test_current_page(self, images):
        state = GalleryViewState(images=images, search_term="whale")
        assert [img.id for img in state.current_page().images] == ["2"]


class TestGalleryController:
    """Test GalleryController against a real store."""

    def test_refresh_loads_store(self, gallery_store, make_image):
        for i in range(3):
            gallery_store.append(make_image(i))
        controller = GalleryController(gallery_store)
        controller.refresh()
        assert [img.id for img in controller.current_page().images] == ["2", "1", "0"]

    def test_delete_persists(self, gallery_store, make_image):
        for i in range(3):
            gallery_store.append(make_image(i))
        controller = GalleryController(gallery_store)
        controller.refresh()

        controller.dispatch(DeleteImage("1"))

        assert [img.id for img in controller.state.images] == ["2", "0"]
        assert [img.id for img in gallery_store.load_all()] == ["2", "0"]

    def test_page_size(self, gallery_store, make_image):
        for i in range(5):
            gallery_store.append(make_image(i))
        controller = GalleryController(gallery_store, page_size=2)
        controller.refresh()
        assert controller.current_page().total_pages == 3
