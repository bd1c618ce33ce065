"""Exception taxonomy and provider error classification.

Every failure the application knows how to describe is one of the classes
below.  Messages on :class:`ValidationError` and :class:`ProviderError` are
written for end users and are displayed verbatim by the form controller.

Hierarchy
---------
::

    SnapcanvasError
    ├── ConfigurationError   missing credential, fatal
    ├── ValidationError      blank prompt or bad form values
    ├── ProviderError        provider or transport failure
    │   └── EmptyResultError provider returned no image
    └── LocalStorageError    unreadable or unwritable gallery storage
"""

from __future__ import annotations

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again in a few minutes."
INVALID_PARAMETERS_MESSAGE = "Invalid parameters. Please check your prompt and settings."
TIMEOUT_MESSAGE = "Request timed out. Please try again."
GENERIC_FAILURE_MESSAGE = "Failed to generate image"

# Checked in order; the first marker found in the provider message wins.
_CLASSIFICATION_RULES: tuple[tuple[str, str], ...] = (
    ("rate limit", RATE_LIMIT_MESSAGE),
    ("invalid", INVALID_PARAMETERS_MESSAGE),
    ("timeout", TIMEOUT_MESSAGE),
)


class SnapcanvasError(Exception):
    """Base class for all application errors."""


class ConfigurationError(SnapcanvasError):
    """Required configuration (the provider credential) is missing."""


class ValidationError(SnapcanvasError):
    """User-friendly validation error.

    The message is intended to be displayed directly to the user.
    """


class ProviderError(SnapcanvasError):
    """The image provider, or the transport to it, failed."""


class EmptyResultError(ProviderError):
    """The provider answered successfully but produced no image."""

    def __init__(self, message: str = "No image was generated") -> None:
        super().__init__(message)


class LocalStorageError(SnapcanvasError):
    """The local gallery storage could not be read or written."""


def classify_provider_error(message: str | None) -> str:
    """Map a raw provider error message to a user-facing message.

    Matching is a plain, case-sensitive substring test against English
    markers.  Messages that match nothing (including localized ones) are
    passed through unchanged.

    Args:
        message: Raw error text from the provider or transport.

    Returns:
        The classified message, the original message, or
        ``"Failed to generate image"`` when *message* is empty.

    Examples:
        >>> classify_provider_error("429: rate limit reached")
        'Rate limit exceeded. Please try again in a few minutes.'
        >>> classify_provider_error("model is booting")
        'model is booting'
    """
    if not message:
        return GENERIC_FAILURE_MESSAGE

    for marker, classified in _CLASSIFICATION_RULES:
        if marker in message:
            return classified

    return message
