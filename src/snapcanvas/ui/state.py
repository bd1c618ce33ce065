"""State management utilities for the SnapCanvas UI.

This module handles the lazy initialization of per-session UI state:
the gallery store, the API client, and the form, gallery and detail
controllers that the Gradio handlers drive.
"""

import logging

import httpx

from snapcanvas.client.generation import GenerationClient
from snapcanvas.core.config import config
from snapcanvas.gallery.storage import JsonFileStorage, StoragePort
from snapcanvas.gallery.store import GalleryStore
from snapcanvas.gallery.view import GalleryController

from .display import DetailView
from .form import FormController
from .models import UIState

logger = logging.getLogger(__name__)


def initialize_ui_state(
    state: UIState | None = None,
    storage: StoragePort | None = None,
    http_client: httpx.Client | None = None,
) -> UIState:
    """Initialize or ensure UI state is ready.

    Missing components are created; components that already exist are kept,
    so calling this at the top of every handler is cheap.

    Args:
        state: Existing UIState or None
        storage: Key-value backend for the gallery (default: JSON file at
            ``config.gallery_path``)
        http_client: Client for the SnapCanvas API (default: a new client
            for ``config.api_url``)

    Returns:
        Initialized UIState instance
    """
    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.is_initialized():
        logger.debug("UIState already initialized")
        return state

    logger.info("Initializing UIState components...")

    try:
        if state.store is None:
            backend = storage if storage is not None else JsonFileStorage(config.gallery_path)
            state.store = GalleryStore(backend, limit=config.gallery_limit)

        if state.client is None:
            logger.info(f"Connecting to SnapCanvas API at {config.api_url}")
            state.client = GenerationClient(
                state.store,
                base_url=config.api_url,
                http_client=http_client,
                timeout=config.request_timeout,
            )

        if state.form is None:
            state.form = FormController(state.client)

        if state.gallery is None:
            state.gallery = GalleryController(state.store, page_size=config.gallery_page_size)
            state.gallery.refresh()

        if state.detail is None:
            state.detail = DetailView(clipboard=state.set_clipboard)

        logger.info(f"UIState initialization complete: {state}")
        return state

    except Exception as e:
        logger.error(f"Error initializing UIState: {e}", exc_info=True)
        raise
