"""Shared pytest fixtures for SnapCanvas tests."""

import shutil
import tempfile
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from snapcanvas.api.main import app, get_provider
from snapcanvas.core.config import SnapcanvasConfig
from snapcanvas.core.errors import ProviderError
from snapcanvas.core.models import GeneratedImage, ImageMetadata
from snapcanvas.gallery.storage import MemoryStorage
from snapcanvas.gallery.store import GalleryStore
from snapcanvas.ui.models import UIState
from snapcanvas.ui.state import initialize_ui_state

BASE_TIME = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


class FakeProvider:
    """Stand-in for ReplicateProvider that records every call.

    Attributes:
        output: URLs returned by ``run``.
        error: If set, ``run`` raises ``ProviderError(error)`` instead.
        calls: ``(model, input)`` pairs received.
    """

    def __init__(self, output: list[str] | None = None, error: str | None = None) -> None:
        self.output = ["https://replicate.delivery/pbxt/out-0.png"] if output is None else output
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def run(self, model: str, input: dict[str, Any]) -> list[str]:
        self.calls.append((model, input))
        if self.error is not None:
            raise ProviderError(self.error)
        return self.output


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> SnapcanvasConfig:
    """Create a test configuration with temporary directories."""
    return SnapcanvasConfig(
        replicate_api_token="r8_test_token",
        data_dir=str(temp_dir / "data"),
        _env_file=None,
    )


@pytest.fixture
def make_image() -> Callable[..., GeneratedImage]:
    """Factory for GeneratedImage records.

    ``make_image(3)`` builds an image with id ``"3"`` created three minutes
    after a fixed base time; keyword arguments override any field.
    """

    def _make(index: int = 0, **overrides) -> GeneratedImage:
        fields: dict[str, Any] = {
            "id": str(index),
            "url": f"https://replicate.delivery/pbxt/{index}.png",
            "prompt": f"prompt {index}",
            "negative_prompt": None,
            "width": 512,
            "height": 512,
            "created_at": BASE_TIME + timedelta(minutes=index),
            "metadata": ImageMetadata(
                guidance_scale=7.5,
                num_inference_steps=50,
                scheduler="DPMSolverMultistep",
            ),
        }
        fields.update(overrides)
        return GeneratedImage(**fields)

    return _make


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def gallery_store(memory_storage: MemoryStorage) -> GalleryStore:
    """Empty gallery backed by in-memory storage."""
    return GalleryStore(memory_storage)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def test_client(fake_provider: FakeProvider) -> Generator[TestClient, None, None]:
    """TestClient for the API with the provider replaced by a fake."""
    app.dependency_overrides[get_provider] = lambda: fake_provider
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def ui_state(
    memory_storage: MemoryStorage,
    test_client: TestClient,
    test_config: SnapcanvasConfig,
    monkeypatch,
) -> UIState:
    """Initialized UIState backed by in-memory storage and the test API."""
    monkeypatch.setattr("snapcanvas.ui.state.config", test_config)
    return initialize_ui_state(UIState(), storage=memory_storage, http_client=test_client)
