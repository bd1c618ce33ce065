"""Local gallery: persistence and the gallery view state.

Modules
-------
storage
    ``localStorage``-style key-value backends (JSON file, in-memory).
store
    Newest-first, size-bounded list of generated images.
view
    Filtering, sorting, pagination, and the command-driven view reducer.
"""

from snapcanvas.gallery.storage import JsonFileStorage, MemoryStorage, StoragePort
from snapcanvas.gallery.store import GALLERY_KEY, MAX_GALLERY_SIZE, GalleryStore

__all__ = [
    "GALLERY_KEY",
    "MAX_GALLERY_SIZE",
    "GalleryStore",
    "JsonFileStorage",
    "MemoryStorage",
    "StoragePort",
]
