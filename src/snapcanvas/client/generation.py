"""Client side of image generation.

:class:`GenerationClient` sends the form values to the SnapCanvas proxy
(``POST /api/generate-image``), turns a successful answer into a
:class:`~snapcanvas.core.models.GeneratedImage`, and records it in the local
gallery.  The gallery is written only after a usable image URL came back, so
a failed request never leaves a partial record behind.

Failures are raised as exceptions whose message is meant for the user:

- :class:`~snapcanvas.core.errors.ValidationError` - blank prompt; no request
  is sent.
- :class:`~snapcanvas.core.errors.EmptyResultError` - the server answered with
  an empty ``output`` list.
- :class:`~snapcanvas.core.errors.ProviderError` - non-2xx answer (carrying the
  server's ``error`` text) or a transport failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

import httpx
from pydantic import ValidationError as SchemaError

from snapcanvas.api.models import GenerateImageResponse
from snapcanvas.core.errors import (
    GENERIC_FAILURE_MESSAGE,
    EmptyResultError,
    ProviderError,
)
from snapcanvas.core.models import MODEL_NAME, GeneratedImage, ImageMetadata
from snapcanvas.gallery.store import GalleryStore
from snapcanvas.ui.models import GenerationFormData

logger = logging.getLogger(__name__)

GENERATE_ENDPOINT = "/api/generate-image"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class GenerationClient:
    """Submit generation requests to the proxy and store the results.

    Args:
        store: Gallery that receives every successfully generated image.
        base_url: Root URL of the SnapCanvas server.
        http_client: Preconfigured ``httpx.Client``.  When given, *base_url*
            is ignored and the caller owns the client's lifetime.
        timeout: Request timeout in seconds for a client created here.
        clock: Returns the current time; replaced in tests.

    Example::

        with GenerationClient(GalleryStore(JsonFileStorage("data/storage.json"))) as client:
            image = client.generate(GenerationFormData(prompt="a red fox in snow"))
            print(image.url)
    """

    def __init__(
        self,
        store: GalleryStore,
        *,
        base_url: str = "http://127.0.0.1:7860",
        http_client: httpx.Client | None = None,
        timeout: float = 300.0,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.store = store
        self.clock = clock
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._last_id_ms = 0

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> GenerationClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _next_id(self, created_at: datetime) -> str:
        """Millisecond timestamp id, bumped past ids already used or stored.

        The gallery may be shared with other clients, so the stored ids are
        checked as well as the last id handed out here.
        """
        ms = int(created_at.timestamp() * 1000)
        candidate = max(ms, self._last_id_ms + 1)
        taken = {img.id for img in self.store.load_all()}
        while str(candidate) in taken:
            candidate += 1
        self._last_id_ms = candidate
        return str(candidate)

    def generate(self, form: GenerationFormData) -> GeneratedImage:
        """Generate one image from *form* and prepend it to the gallery.

        Args:
            form: Current form values.

        Returns:
            The newly created gallery record.

        Raises:
            ValidationError: If the form is invalid (nothing is sent).
            EmptyResultError: If the server produced no image.
            ProviderError: If the request failed.
        """
        form.validate()

        logger.info(f"Requesting image for prompt: {form.prompt[:60]!r}")
        try:
            response = self._http.post(GENERATE_ENDPOINT, json=form.to_payload())
        except httpx.HTTPError as e:
            logger.error(f"Generation request failed: {e}")
            raise ProviderError(str(e) or UNEXPECTED_ERROR_MESSAGE) from e

        if response.is_error:
            message = _server_error(response)
            logger.warning(f"Generation failed with status {response.status_code}: {message}")
            raise ProviderError(message)

        try:
            body = GenerateImageResponse.model_validate(response.json())
        except (ValueError, SchemaError) as e:
            raise ProviderError(UNEXPECTED_ERROR_MESSAGE) from e

        if not body.output:
            raise EmptyResultError()

        created_at = self.clock()
        image = GeneratedImage(
            id=self._next_id(created_at),
            url=body.output[0],
            prompt=form.prompt,
            negative_prompt=form.negative_prompt or None,
            width=form.width,
            height=form.height,
            model=MODEL_NAME,
            created_at=created_at,
            metadata=ImageMetadata(
                guidance_scale=form.guidance_scale,
                num_inference_steps=form.num_inference_steps,
                scheduler=form.scheduler,
            ),
        )

        self.store.append(image)
        logger.info(f"Stored image {image.id}")
        return image


def _server_error(response: httpx.Response) -> str:
    """Return the ``error`` field of an error body, or the generic message."""
    try:
        body = response.json()
    except ValueError:
        return GENERIC_FAILURE_MESSAGE
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return GENERIC_FAILURE_MESSAGE
