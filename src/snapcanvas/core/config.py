"""Configuration management for SnapCanvas.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the SNAPCANVAS_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (SNAPCANVAS_* prefix)
2. .env file in the project root
3. Default values defined in SnapcanvasConfig

The provider credential is the one exception to the prefix rule: it is also
read from the plain ``REPLICATE_API_TOKEN`` variable, the name Replicate's own
tooling uses.

Example .env file:
    REPLICATE_API_TOKEN=r8_xxxxxxxxxxxxxxxxxxxx
    SNAPCANVAS_SERVER_PORT=7860
    SNAPCANVAS_GRADIO_SERVER_PORT=7861
    SNAPCANVAS_DATA_DIR=data
    SNAPCANVAS_LOG_LEVEL=DEBUG

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from snapcanvas.core.config import config

    print(config.model_version)
    print(config.gallery_path)

Missing Credentials
-------------------
A missing ``REPLICATE_API_TOKEN`` does not fail at import time, so the
gallery and form modules stay usable offline.  Anything that needs to talk to
the provider calls :meth:`SnapcanvasConfig.require_api_token`, which raises
:class:`~snapcanvas.core.errors.ConfigurationError`.
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from snapcanvas.core.errors import ConfigurationError

# Stable Diffusion as published on Replicate.  The version hash pins the exact
# model weights and input schema.
DEFAULT_MODEL_VERSION = (
    "stability-ai/stable-diffusion:"
    "db21e45d3f7023abc2a46ee38a23973f6dce16bb082a930b0c49861f96d1e5bf"
)


class SnapcanvasConfig(BaseSettings):
    """Main configuration for SnapCanvas.

    Attributes
    ----------
    Provider Settings:
        replicate_api_token : SecretStr | None
            Replicate API token (also read from ``REPLICATE_API_TOKEN``)
        replicate_api_base_url : str
            Base URL of the Replicate HTTP API
        model_version : str
            ``owner/name:version`` identifier of the generation model
        poll_interval : float
            Seconds between prediction status polls
        request_timeout : float
            Per-request HTTP timeout in seconds

    Server Settings:
        server_host : str
            Server bind address (0.0.0.0 for local network)
        server_port : int
            Server port (1024-65535)
        log_level : str
            Root logging level used by the CLI entry point

    UI Settings:
        api_url : str
            Base URL of the SnapCanvas API used by the Gradio UI
        gradio_server_name : str
            Gradio bind address (0.0.0.0 for local network)
        gradio_server_port : int
            Gradio port (1024-65535)
        gradio_share : bool
            Create public gradio.live link (keep False for local-only)

    Gallery Settings:
        data_dir : Path
            Directory holding the local key-value storage file
        gallery_file : str
            File name of the local key-value storage inside ``data_dir``
        gallery_limit : int
            Maximum number of images kept in the gallery
        gallery_page_size : int
            Images per gallery page

    Examples
    --------
        >>> custom_config = SnapcanvasConfig(
        ...     replicate_api_token="r8_test",
        ...     data_dir="/tmp/snapcanvas",
        ... )
        >>> custom_config.gallery_path.name
        'storage.json'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SNAPCANVAS_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )

    # Provider settings
    replicate_api_token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "replicate_api_token",
            "SNAPCANVAS_REPLICATE_API_TOKEN",
            "REPLICATE_API_TOKEN",
        ),
        description="Replicate API token",
    )
    replicate_api_base_url: str = Field(
        default="https://api.replicate.com/v1",
        description="Base URL of the Replicate HTTP API",
    )
    model_version: str = Field(
        default=DEFAULT_MODEL_VERSION,
        description="Replicate model identifier (owner/name:version)",
    )
    poll_interval: float = Field(
        default=1.0,
        description="Seconds between prediction status polls",
        gt=0,
    )
    request_timeout: float = Field(
        default=120.0,
        description="Per-request HTTP timeout in seconds",
        gt=0,
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level",
    )

    # UI settings
    api_url: str = Field(
        default="http://127.0.0.1:7860",
        description="Base URL of the SnapCanvas API used by the Gradio UI",
    )
    gradio_server_name: str = Field(
        default="0.0.0.0",
        description="Gradio bind address (0.0.0.0 for local network)",
    )
    gradio_server_port: int = Field(
        default=7861,
        description="Gradio port",
        ge=1024,
        le=65535,
    )
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    # Gallery settings
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for the local gallery storage file",
    )
    gallery_file: str = Field(
        default="storage.json",
        description="Local key-value storage file name",
    )
    gallery_limit: int = Field(
        default=50,
        description="Maximum number of images kept in the gallery",
        ge=1,
    )
    gallery_page_size: int = Field(
        default=12,
        description="Images per gallery page",
        ge=1,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def gallery_path(self) -> Path:
        """Path of the JSON file backing the local gallery storage."""
        return self.data_dir / self.gallery_file

    @property
    def downloads_path(self) -> Path:
        """Directory where the UI saves downloaded images."""
        return self.data_dir / "downloads"

    def require_api_token(self) -> str:
        """Return the provider token or fail if it is not configured.

        Raises:
            ConfigurationError: If no token is set.
        """
        if self.replicate_api_token is None or not self.replicate_api_token.get_secret_value():
            raise ConfigurationError(
                "The REPLICATE_API_TOKEN environment variable is not set. "
                "Set it (or SNAPCANVAS_REPLICATE_API_TOKEN) before starting the server."
            )
        return self.replicate_api_token.get_secret_value()


# Global configuration instance
config = SnapcanvasConfig()
