"""Detail view for a single generated image.

The detail view is read-only: it formats an image's metadata for display and
offers two side actions, downloading the image file and copying the prompt.
Both actions are fire-and-forget.  Failures are logged here and reported as a
``None``/``False`` return value; they never raise into the caller.
"""

import logging
from collections.abc import Callable
from datetime import datetime, tzinfo
from pathlib import Path

import httpx

from snapcanvas.core.models import GeneratedImage

logger = logging.getLogger(__name__)


def format_date(value: datetime, tz: tzinfo | None = None) -> str:
    """Format a timestamp like ``Oct 19, 2026, 08:22 AM``.

    Args:
        value: Timestamp to format.
        tz: Target timezone.  Defaults to the local timezone.
    """
    local = value.astimezone(tz)
    return f"{local:%b} {local.day}, {local:%Y}, {local:%I:%M %p}"


def format_metadata(image: GeneratedImage, tz: tzinfo | None = None) -> str:
    """Render an image's metadata as a markdown block.

    Args:
        image: Image to describe.
        tz: Timezone for the generation date.  Defaults to local time.

    Returns:
        Markdown text.  The negative prompt section is omitted when empty.
    """
    lines = [
        "### Image Details",
        "",
        "**Prompt:**",
        image.prompt,
        "",
    ]

    if image.negative_prompt:
        lines.extend(["**Negative Prompt:**", image.negative_prompt, ""])

    lines.extend(
        [
            f"**Resolution:** {image.width} × {image.height}",
            f"**Model:** {image.model}",
            f"**Guidance Scale:** {image.metadata.guidance_scale}",
            f"**Inference Steps:** {image.metadata.num_inference_steps}",
            f"**Scheduler:** {image.metadata.scheduler}",
            f"**Generated:** {format_date(image.created_at, tz)}",
        ]
    )
    return "\n".join(lines)


class DetailView:
    """Actions available on an open image.

    Args:
        http_client: Client used to fetch image bytes.  A default client is
            created when omitted.
        clipboard: Callable that places text on the system clipboard.
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        clipboard: Callable[[str], None] | None = None,
    ) -> None:
        self.http_client = http_client or httpx.Client(follow_redirects=True, timeout=60.0)
        self.clipboard = clipboard
        self.copied = False

    def render(self, image: GeneratedImage, tz: tzinfo | None = None) -> str:
        return format_metadata(image, tz)

    def download(self, image: GeneratedImage, dest_dir: Path | str) -> Path | None:
        """Save the image as ``ai-generated-<id>.png`` in *dest_dir*.

        Returns:
            The written file path, or ``None`` if the download failed.
        """
        target = Path(dest_dir) / image.download_filename
        try:
            response = self.http_client.get(image.url)
            response.raise_for_status()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(response.content)
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Error downloading image: {e}")
            return None

        logger.info(f"Downloaded {image.url} to {target}")
        return target

    def copy_prompt(self, image: GeneratedImage) -> bool:
        """Copy the image prompt to the clipboard.

        Returns:
            ``True`` on success.  :attr:`copied` mirrors the result.
        """
        self.copied = False
        if self.clipboard is None:
            logger.error("Error copying prompt: no clipboard available")
            return False

        try:
            self.clipboard(image.prompt)
        except Exception as e:
            logger.error(f"Error copying prompt: {e}")
            return False

        self.copied = True
        return True
