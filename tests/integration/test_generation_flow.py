"""End-to-end flow: form -> client -> API -> gallery -> gallery view.

The GenerationClient talks to the real FastAPI app through TestClient (which
is an ``httpx.Client``); only the Replicate provider is faked.
"""

from __future__ import annotations

import pytest

from snapcanvas.client.generation import GenerationClient
from snapcanvas.core.errors import RATE_LIMIT_MESSAGE
from snapcanvas.gallery.storage import JsonFileStorage
from snapcanvas.gallery.store import GalleryStore
from snapcanvas.gallery.view import DeleteImage, GalleryController, OpenDetail, SetSearchTerm
from snapcanvas.ui.form import FormController, GenerationStatus


@pytest.fixture
def file_store(temp_dir):
    return GalleryStore(JsonFileStorage(temp_dir / "storage.json"))


@pytest.fixture
def form(test_client, file_store):
    return FormController(GenerationClient(file_store, http_client=test_client))


class TestGenerationFlow:
    """Submitting the form through the real API."""

    def test_red_fox_scenario(self, form, file_store, fake_provider):
        """Default settings and one provider URL produce one gallery record."""
        fake_provider.output = ["https://replicate.delivery/pbxt/fox.png"]
        form.update("prompt", "a red fox in snow")

        image = form.submit()

        assert image is not None
        assert form.status is GenerationStatus.COMPLETED
        gallery = file_store.load_all()
        assert len(gallery) == 1
        assert gallery[0].prompt == "a red fox in snow"
        assert gallery[0].url == "https://replicate.delivery/pbxt/fox.png"
        assert gallery[0].width == 512
        assert gallery[0].metadata.scheduler == "DPMSolverMultistep"

    def test_blank_prompt_never_reaches_api(self, form, file_store, fake_provider):
        form.update("prompt", "   ")

        assert form.submit() is None
        assert form.error == "Please enter a prompt"
        assert fake_provider.calls == []
        assert file_store.load_all() == []

    def test_provider_error_surfaces_classified_message(self, form, file_store, fake_provider):
        fake_provider.error = "Replicate rate limit reached: slow down"
        form.update("prompt", "a red fox in snow")

        assert form.submit() is None
        assert form.error == RATE_LIMIT_MESSAGE
        assert form.status is GenerationStatus.ERROR
        assert file_store.load_all() == []

    def test_empty_output_reports_no_image(self, form, file_store, fake_provider):
        fake_provider.output = []
        form.update("prompt", "a red fox in snow")

        assert form.submit() is None
        assert form.error == "No image was generated"
        assert file_store.load_all() == []

    def test_generated_images_appear_in_gallery_view(self, form, file_store, fake_provider):
        for prompt in ("a red fox in snow", "a blue whale", "a red panda"):
            form.update("prompt", prompt)
            assert form.submit() is not None

        controller = GalleryController(file_store)
        controller.refresh()
        controller.dispatch(SetSearchTerm("RED"))
        page = controller.current_page()
        assert [img.prompt for img in page.images] == ["a red panda", "a red fox in snow"]

        target = page.images[0]
        controller.dispatch(OpenDetail(target.id))
        controller.dispatch(DeleteImage(target.id))

        assert controller.state.selected is None
        assert [img.prompt for img in file_store.load_all()] == [
            "a blue whale",
            "a red fox in snow",
        ]
