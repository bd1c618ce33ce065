"""HTTP client for the Replicate predictions API.

The provider is the only component that talks to the outside image service.
It creates a prediction, waits for it to reach a terminal status, and returns
the list of output URLs.  Every failure is raised as
:class:`~snapcanvas.core.errors.ProviderError`; callers never see ``httpx``
exceptions or raw JSON.

Protocol
--------
1. ``POST {base_url}/predictions`` with ``{"version": ..., "input": {...}}``
   and the ``Prefer: wait`` header, which asks Replicate to hold the
   connection open until the prediction finishes (or its own wait window
   elapses).
2. If the returned status is still ``starting`` or ``processing``, poll
   ``urls.get`` every ``poll_interval`` seconds.
3. ``succeeded`` returns the output; ``failed`` and ``canceled`` raise.

There is no overall deadline; request timeouts are those of the
underlying ``httpx`` client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaError

from snapcanvas.core.errors import ProviderError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"succeeded", "failed", "canceled"})


class PredictionUrls(BaseModel):
    """Links returned with a prediction."""

    model_config = ConfigDict(extra="ignore")

    get: str | None = None


class PredictionResponse(BaseModel):
    """Subset of the Replicate prediction object the app relies on."""

    model_config = ConfigDict(extra="ignore")

    id: str
    status: str
    output: Any = None
    error: str | None = None
    urls: PredictionUrls | None = None

    def output_urls(self) -> list[str]:
        """Normalise ``output`` to a list of URL strings.

        Raises:
            ProviderError: If the output is neither a string nor a list of
                strings.
        """
        if self.output is None:
            return []
        if isinstance(self.output, str):
            return [self.output]
        if isinstance(self.output, list) and all(isinstance(u, str) for u in self.output):
            return list(self.output)
        raise ProviderError("Malformed response from image provider")


class ReplicateProvider:
    """Async client for running a model on Replicate.

    Args:
        api_token: Replicate API token.
        base_url: API base URL (``https://api.replicate.com/v1``).
        poll_interval: Seconds to sleep between status polls.
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport, used by tests to replace the
            network with :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        api_token: str,
        *,
        base_url: str = "https://api.replicate.com/v1",
        poll_interval: float = 1.0,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.poll_interval = poll_interval
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def run(self, model: str, input: dict[str, Any]) -> list[str]:
        """Run *model* with *input* and return its output URLs.

        Args:
            model: ``owner/name:version`` or a bare version hash.
            input: Model input dictionary.

        Returns:
            Output URLs in provider order.

        Raises:
            ProviderError: On any HTTP, transport, schema or prediction failure.
        """
        version = model.split(":", 1)[1] if ":" in model else model

        logger.info(f"Creating prediction for {model}")
        prediction = await self._request(
            "POST",
            "/predictions",
            json={"version": version, "input": input},
            headers={"Prefer": "wait"},
        )

        while prediction.status not in TERMINAL_STATUSES:
            if prediction.urls is None or not prediction.urls.get:
                raise ProviderError("Malformed response from image provider")
            logger.debug(f"Prediction {prediction.id} is {prediction.status}, polling")
            await asyncio.sleep(self.poll_interval)
            prediction = await self._request("GET", prediction.urls.get)

        if prediction.status != "succeeded":
            message = prediction.error or f"Prediction {prediction.status}"
            logger.warning(f"Prediction {prediction.id} {prediction.status}: {message}")
            raise ProviderError(message)

        urls = prediction.output_urls()
        logger.info(f"Prediction {prediction.id} succeeded with {len(urls)} output(s)")
        return urls

    async def _request(self, method: str, url: str, **kwargs) -> PredictionResponse:
        """Send one API request and validate the prediction payload."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderError(f"Replicate request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderError(str(e) or "Failed to reach image provider") from e

        if response.status_code == 429:
            raise ProviderError(f"Replicate rate limit reached: {_error_detail(response)}")
        if response.is_error:
            raise ProviderError(
                f"Request to {response.request.url} failed with status "
                f"{response.status_code}: {_error_detail(response)}"
            )

        try:
            return PredictionResponse.model_validate(response.json())
        except (ValueError, SchemaError) as e:
            raise ProviderError("Malformed response from image provider") from e


def _error_detail(response: httpx.Response) -> str:
    """Extract the ``detail`` field of an API error body, or its raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.text
