"""Local gallery storage for generated images.

This module keeps the list of previously generated images in a key-value
storage (see :mod:`snapcanvas.gallery.storage`) so that the gallery survives
restarts without any server-side database.

The gallery is intentionally simple:

- the whole gallery lives under a single key (``generatedImages``) as a
  JSON-encoded array
- list order is reverse-chronological (newest first)
- the list never holds more than ``limit`` entries (50 by default); the
  oldest entries are dropped first

Reading never fails.  If the stored value is missing, is not valid JSON, or
is not a list, the gallery is treated as empty.  Individual records that do
not validate are skipped.  Write failures are logged and swallowed: losing a
gallery update must never break image generation.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError as SchemaError

from snapcanvas.core.errors import LocalStorageError
from snapcanvas.core.models import GeneratedImage
from snapcanvas.gallery.storage import StoragePort

logger = logging.getLogger(__name__)

GALLERY_KEY = "generatedImages"
MAX_GALLERY_SIZE = 50


class GalleryStore:
    """Size-bounded, newest-first sequence of :class:`GeneratedImage`.

    Args:
        storage: Key-value backend.
        key: Storage key holding the gallery.
        limit: Maximum number of images kept.
    """

    def __init__(
        self,
        storage: StoragePort,
        *,
        key: str = GALLERY_KEY,
        limit: int = MAX_GALLERY_SIZE,
    ) -> None:
        self.storage = storage
        self.key = key
        self.limit = limit

    def load_all(self) -> list[GeneratedImage]:
        """Load every stored image, newest first.

        Returns:
            The stored images with ``created_at`` parsed back to datetimes.
            An empty list if nothing usable is stored.
        """
        try:
            raw = self.storage.get_item(self.key)
        except LocalStorageError as e:
            logger.warning(f"Error loading images: {e}")
            return []

        if not raw:
            return []

        try:
            entries = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Error loading images: {e}")
            return []

        if not isinstance(entries, list):
            logger.warning(f"Error loading images: expected a list, got {type(entries).__name__}")
            return []

        images: list[GeneratedImage] = []
        seen: set[str] = set()
        for entry in entries:
            try:
                image = GeneratedImage.model_validate(entry)
            except SchemaError as e:
                logger.warning(f"Skipping invalid gallery entry: {e.error_count()} error(s)")
                continue

            # Keep the first (newest) record for any duplicated id.
            if image.id in seen:
                continue
            seen.add(image.id)
            images.append(image)

        return images

    def append(self, image: GeneratedImage) -> list[GeneratedImage]:
        """Insert *image* at the front and truncate to ``limit`` entries.

        An existing entry with the same id is replaced.

        Args:
            image: Newly generated image.

        Returns:
            The gallery after the insert.
        """
        images = [img for img in self.load_all() if img.id != image.id]
        images.insert(0, image)
        images = images[: self.limit]
        self._save(images)
        return images

    def remove(self, image_id: str) -> list[GeneratedImage]:
        """Delete the image with *image_id*; a no-op when it is absent.

        Returns:
            The gallery after the removal.
        """
        images = self.load_all()
        remaining = [img for img in images if img.id != image_id]
        if len(remaining) != len(images):
            self._save(remaining)
        return remaining

    def get(self, image_id: str) -> GeneratedImage | None:
        """Return the image with *image_id*, or ``None``."""
        return next((img for img in self.load_all() if img.id == image_id), None)

    def clear(self) -> None:
        """Remove the whole gallery from storage."""
        try:
            self.storage.remove_item(self.key)
        except LocalStorageError as e:
            logger.error(f"Error clearing images: {e}")

    def __len__(self) -> int:
        return len(self.load_all())

    def _save(self, images: list[GeneratedImage]) -> None:
        payload = json.dumps([img.to_storage() for img in images])
        try:
            self.storage.set_item(self.key, payload)
        except LocalStorageError as e:
            logger.error(f"Error saving images: {e}")
