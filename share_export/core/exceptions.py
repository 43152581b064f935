"""Custom exceptions for extraction and export operations."""

from __future__ import annotations

USER_FACING_FAILURE = (
    "Could not extract conversation; the page may be private "
    "or its structure has changed."
)


class InvalidUrlError(ValueError):
    """Raised when the input is not a well-formed absolute HTTPS URL."""

    def __init__(self, message: str, suggestions: list[str] | None = None):
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(self.message)


class UnsupportedPlatformError(ValueError):
    """Raised when a URL does not match any known share-link pattern."""

    def __init__(self, url: str, supported: list[str]):
        self.url = url
        self.supported = supported
        self.message = (
            f"Unsupported platform for URL: {url}. "
            f"Supported platforms: {', '.join(supported)}"
        )
        super().__init__(self.message)


class ExtractionFailedException(Exception):
    """A single strategy could not produce a conversation.

    Only used to drive strategy advancement inside the orchestrator;
    callers never see it directly.
    """

    def __init__(self, message: str | None = None):
        self.reason = message or "unknown"
        self.message = (
            f"Extraction failed: {message}" if message else "Extraction failed"
        )
        super().__init__(self.message)


class InvalidResultError(ExtractionFailedException):
    """A strategy returned a conversation that fails validation."""

    def __init__(self, message: str):
        super().__init__(f"invalid result: {message}")


class AllStrategiesFailedError(Exception):
    """Every strategy for the platform was attempted and none succeeded.

    ``failures`` holds ``(strategy_name, reason)`` pairs in attempt order
    for operators; :attr:`user_message` is what end users should see.
    """

    user_message = USER_FACING_FAILURE

    def __init__(self, platform: str, failures: list[tuple[str, str]]):
        self.platform = platform
        self.failures = failures
        summary = "; ".join(f"{name}: {reason}" for name, reason in failures)
        self.message = f"All strategies failed for {platform}: {summary}"
        super().__init__(self.message)


class ExportFailedException(Exception):
    def __init__(self, message: str | None = None):
        self.message = f"Export failed: {message}" if message else "Export failed"
        super().__init__(self.message)
