"""SnapCanvas - FastAPI Application.

This module is the server side of the application.  It defines the FastAPI
``app`` instance, the proxy route that forwards generation requests to
Replicate, and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
The server is a stateless proxy:

- **Configuration** comes from :data:`~snapcanvas.core.config.config`
  (environment variables / ``.env``).
- **Image generation** is delegated to Replicate through
  :class:`~snapcanvas.core.provider.ReplicateProvider`, created once in the
  application lifespan and shared by all requests.
- **Gallery persistence** is not a server concern: generated images live in
  the client's local storage (see :mod:`snapcanvas.gallery`).

Endpoints
---------
========  ==================================  ==============================
Method    Path                                Purpose
========  ==================================  ==============================
GET       ``/api/config``                     Form options and defaults
POST      ``/api/generate-image``             Generate one image via Replicate
POST      ``/api/replicate/generate-image``   Alias of the route above
========  ==================================  ==============================

Error Bodies
------------
Handled failures use ``{"error": "<message>"}``:

- ``400`` when the prompt is missing or blank.
- ``500`` when the provider fails; the message is classified by
  :func:`~snapcanvas.core.errors.classify_provider_error`.

A missing ``REPLICATE_API_TOKEN`` raises
:class:`~snapcanvas.core.errors.ConfigurationError`, which is not handled and
surfaces as a server error.  ``main()`` checks for the token before starting
uvicorn so that this normally fails at startup instead.

Usage
-----
CLI (installed entry point)::

    snapcanvas

Direct invocation::

    python -m snapcanvas.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from snapcanvas import __version__
from snapcanvas.api.models import (
    DEFAULT_GUIDANCE_SCALE,
    DEFAULT_HEIGHT,
    DEFAULT_INFERENCE_STEPS,
    DEFAULT_SCHEDULER,
    DEFAULT_WIDTH,
    ErrorResponse,
    GenerateImageRequest,
    GenerateImageResponse,
)
from snapcanvas.core.config import config
from snapcanvas.core.errors import ConfigurationError, ProviderError, classify_provider_error
from snapcanvas.core.models import MODEL_NAME
from snapcanvas.core.provider import ReplicateProvider
from snapcanvas.ui.models import (
    GUIDANCE_SCALE_RANGE,
    INFERENCE_STEPS_RANGE,
    PROMPT_SUGGESTIONS,
    RESOLUTION_OPTIONS,
    SCHEDULER_OPTIONS,
    suggestion_label,
)

logger = logging.getLogger(__name__)


def _build_provider(api_token: str) -> ReplicateProvider:
    """Create a provider client from the global configuration."""
    return ReplicateProvider(
        api_token,
        base_url=config.replicate_api_base_url,
        poll_interval=config.poll_interval,
        timeout=config.request_timeout,
    )


# ---------------------------------------------------------------------------
# Application lifecycle - provider client setup and teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Creates the shared :class:`ReplicateProvider` when a non-empty token
        is configured.  Otherwise the server still starts (so
        ``/api/config`` works) and generation requests fail with
        :class:`ConfigurationError`.

    On shutdown:
        Closes the provider's HTTP connection pool.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    app.state.provider = None
    try:
        app.state.provider = _build_provider(config.require_api_token())
        logger.info(f"Replicate provider initialised for {config.model_version}.")
    except ConfigurationError:
        logger.warning("REPLICATE_API_TOKEN is not set; image generation is unavailable.")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    if app.state.provider is not None:
        await app.state.provider.aclose()
        logger.info("Replicate provider closed on shutdown.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="SnapCanvas",
    description="Prompt-to-image proxy for hosted Stable Diffusion.",
    version=__version__,
    lifespan=lifespan,
)

# Allow cross-origin requests so a frontend served from another port can call
# the API during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_provider(request: Request) -> ReplicateProvider:
    """Return the shared provider, creating it on first use.

    Raises:
        ConfigurationError: If ``REPLICATE_API_TOKEN`` is not configured.
    """
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        provider = _build_provider(config.require_api_token())
        request.app.state.provider = provider
    return provider


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/api/config")
async def get_config() -> dict:
    """Return form options and defaults for the client.

    Returns:
        Dictionary with keys ``version``, ``model``, ``defaults``,
        ``schedulers``, ``resolutions``, ``ranges``, ``suggestions`` and
        ``gallery``.
    """
    return {
        "version": __version__,
        "model": MODEL_NAME,
        "defaults": {
            "width": DEFAULT_WIDTH,
            "height": DEFAULT_HEIGHT,
            "guidance_scale": DEFAULT_GUIDANCE_SCALE,
            "num_inference_steps": DEFAULT_INFERENCE_STEPS,
            "scheduler": DEFAULT_SCHEDULER,
        },
        "schedulers": [
            {"value": value, "label": label} for value, label in SCHEDULER_OPTIONS.items()
        ],
        "resolutions": [
            {"width": r.width, "height": r.height, "label": r.label} for r in RESOLUTION_OPTIONS
        ],
        "ranges": {
            "guidance_scale": dict(zip(("min", "max", "step"), GUIDANCE_SCALE_RANGE)),
            "num_inference_steps": dict(zip(("min", "max", "step"), INFERENCE_STEPS_RANGE)),
        },
        "suggestions": [
            {"value": s, "label": suggestion_label(s)} for s in PROMPT_SUGGESTIONS
        ],
        "gallery": {
            "limit": config.gallery_limit,
            "page_size": config.gallery_page_size,
        },
    }


@app.post(
    "/api/generate-image",
    response_model=GenerateImageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@app.post("/api/replicate/generate-image", include_in_schema=False)
async def generate_image(
    req: GenerateImageRequest,
    provider: ReplicateProvider = Depends(get_provider),
):
    """Generate one image with the configured Replicate model.

    This endpoint:

    1. Resolves the provider (fails with ``ConfigurationError`` without a token).
    2. Rejects a missing or blank prompt with 400.
    3. Runs the model with ``num_outputs=1``.
    4. Returns the provider's output list unchanged.

    Args:
        req: Validated :class:`GenerateImageRequest` payload.
        provider: Shared provider client.

    Returns:
        :class:`GenerateImageResponse` on success, or a ``JSONResponse`` with
        an ``error`` key on failure.
    """
    if not req.has_prompt():
        return _error_response(400, "Prompt is required")

    try:
        output = await provider.run(config.model_version, input=req.to_provider_input())
    except ProviderError as e:
        logger.error(f"Error from Replicate API: {e}")
        return _error_response(500, classify_provider_error(str(e)))

    return GenerateImageResponse(output=output)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Configures logging from ``SNAPCANVAS_LOG_LEVEL``, verifies that the
    provider token is present, and serves the app on
    ``SNAPCANVAS_SERVER_HOST:SNAPCANVAS_SERVER_PORT`` (default
    ``0.0.0.0:7860``).

    Raises:
        ConfigurationError: If ``REPLICATE_API_TOKEN`` is not set.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config.require_api_token()

    uvicorn.run(
        "snapcanvas.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
