"""Tests for snapcanvas.core.config - configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the SNAPCANVAS_ prefix and the plain
  REPLICATE_API_TOKEN variable.
- Automatic data directory creation on initialisation.
- Pydantic validation constraints (port range, log level literals, etc.).
- Credential checks.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from snapcanvas.core.config import DEFAULT_MODEL_VERSION, SnapcanvasConfig
from snapcanvas.core.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable that could leak into the config under test."""
    for name in (
        "REPLICATE_API_TOKEN",
        "SNAPCANVAS_REPLICATE_API_TOKEN",
        "SNAPCANVAS_SERVER_PORT",
        "SNAPCANVAS_GALLERY_LIMIT",
        "SNAPCANVAS_LOG_LEVEL",
        "SNAPCANVAS_API_URL",
        "SNAPCANVAS_GRADIO_SERVER_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Verify that SnapcanvasConfig provides sensible defaults."""

    def test_default_server_port(self, clean_env, temp_dir: Path):
        """Default server port should be 7860."""
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        assert cfg.server_port == 7860
        assert cfg.server_host == "0.0.0.0"

    def test_default_model_version(self, test_config: SnapcanvasConfig):
        """The default model should be the pinned Stable Diffusion version."""
        assert test_config.model_version == DEFAULT_MODEL_VERSION
        assert test_config.model_version.startswith("stability-ai/stable-diffusion:")

    def test_default_gallery_settings(self, test_config: SnapcanvasConfig):
        """Gallery limit should be 50 and page size 12."""
        assert test_config.gallery_limit == 50
        assert test_config.gallery_page_size == 12

    def test_default_token_is_none(self, clean_env, temp_dir: Path):
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        assert cfg.replicate_api_token is None

    def test_default_api_base_url(self, test_config: SnapcanvasConfig):
        assert test_config.replicate_api_base_url == "https://api.replicate.com/v1"

    def test_default_ui_settings(self, clean_env, temp_dir: Path):
        """The UI listens beside the API and talks to it over localhost."""
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        assert cfg.api_url == "http://127.0.0.1:7860"
        assert cfg.gradio_server_name == "0.0.0.0"
        assert cfg.gradio_server_port == 7861
        assert cfg.gradio_share is False


class TestConfigEnvironment:
    """Verify environment variable loading."""

    def test_plain_replicate_token_variable(self, clean_env, temp_dir: Path):
        """REPLICATE_API_TOKEN should be honoured without the prefix."""
        clean_env.setenv("REPLICATE_API_TOKEN", "r8_plain")
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        assert cfg.require_api_token() == "r8_plain"

    def test_prefixed_token_variable(self, clean_env, temp_dir: Path):
        clean_env.setenv("SNAPCANVAS_REPLICATE_API_TOKEN", "r8_prefixed")
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        assert cfg.require_api_token() == "r8_prefixed"

    def test_prefixed_override(self, clean_env, temp_dir: Path):
        clean_env.setenv("SNAPCANVAS_GALLERY_LIMIT", "10")
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        assert cfg.gallery_limit == 10

    def test_ui_api_url_override(self, clean_env, temp_dir: Path):
        clean_env.setenv("SNAPCANVAS_API_URL", "http://api.internal:9000")
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        assert cfg.api_url == "http://api.internal:9000"

    def test_token_is_not_exposed_in_repr(self, test_config: SnapcanvasConfig):
        assert "r8_test_token" not in repr(test_config)


class TestConfigDirectoryCreation:
    """Verify that SnapcanvasConfig creates the data directory."""

    def test_data_dir_created(self, test_config: SnapcanvasConfig):
        """data_dir should exist after config initialisation."""
        assert test_config.data_dir.exists()
        assert test_config.data_dir.is_dir()

    def test_creates_nested_directories(self, temp_dir: Path):
        """Config should create deeply nested directories via parents=True."""
        deep = temp_dir / "a" / "b" / "c" / "data"
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(deep))
        assert cfg.data_dir.exists()

    def test_gallery_path(self, test_config: SnapcanvasConfig):
        assert test_config.gallery_path == test_config.data_dir / "storage.json"

    def test_downloads_path(self, test_config: SnapcanvasConfig):
        assert test_config.downloads_path == test_config.data_dir / "downloads"


class TestConfigValidation:
    """Verify Pydantic validation constraints on config fields."""

    def test_invalid_port_too_low(self, temp_dir: Path):
        """Server port below 1024 should raise a validation error."""
        with pytest.raises(Exception):
            SnapcanvasConfig(_env_file=None, server_port=80, data_dir=str(temp_dir))

    def test_invalid_port_too_high(self, temp_dir: Path):
        """Server port above 65535 should raise a validation error."""
        with pytest.raises(Exception):
            SnapcanvasConfig(_env_file=None, server_port=70000, data_dir=str(temp_dir))

    def test_invalid_log_level(self, temp_dir: Path):
        with pytest.raises(Exception):
            SnapcanvasConfig(_env_file=None, log_level="CHATTY", data_dir=str(temp_dir))

    def test_invalid_gradio_port(self, temp_dir: Path):
        with pytest.raises(Exception):
            SnapcanvasConfig(_env_file=None, gradio_server_port=80, data_dir=str(temp_dir))

    def test_gallery_limit_must_be_positive(self, temp_dir: Path):
        with pytest.raises(Exception):
            SnapcanvasConfig(_env_file=None, gallery_limit=0, data_dir=str(temp_dir))


class TestRequireApiToken:
    """Verify the credential check."""

    def test_returns_token(self, test_config: SnapcanvasConfig):
        assert test_config.require_api_token() == "r8_test_token"

    def test_missing_token_raises(self, clean_env, temp_dir: Path):
        cfg = SnapcanvasConfig(_env_file=None, data_dir=str(temp_dir / "data"))
        with pytest.raises(ConfigurationError, match="REPLICATE_API_TOKEN"):
            cfg.require_api_token()

    def test_empty_token_raises(self, clean_env, temp_dir: Path):
        cfg = SnapcanvasConfig(
            _env_file=None, replicate_api_token="", data_dir=str(temp_dir / "data")
        )
        with pytest.raises(ConfigurationError):
            cfg.require_api_token()
