"""Errors raised by the card price providers.

A missing price is not an error: timeouts and 404s on price lookups, and
payloads without a usable trend, come back as ``None``. These cover the
remaining upstream failures, which the resolver treats as misses and the
details endpoint maps to 502.
"""


class ProviderError(Exception):
    """Base class; ``provider_name`` names the upstream that failed."""

    def __init__(self, message: str, provider_name: str = ""):
        self.provider_name = provider_name
        super().__init__(message)


class ProviderConnectionError(ProviderError):
    """The card details request never got a response."""


class ProviderAPIError(ProviderError):
    """Non-2xx status other than 404."""

    def __init__(self, message: str, provider_name: str = "", status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, provider_name)


class ProviderDataError(ProviderError):
    """Response body is not valid JSON."""
