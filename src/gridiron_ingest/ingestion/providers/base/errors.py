from __future__ import annotations


class ProviderError(RuntimeError):
    """Base exception for provider-related failures."""


class FetchError(ProviderError):
    """HTTP/network/payload failure while fetching from a provider.

    `transient` marks failures that may succeed on retry (timeouts, connection
    resets, 5xx, throttling). Structural failures (4xx, malformed payloads) are
    not transient.
    """

    def __init__(
        self,
        message: str,
        *,
        transient: bool,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.transient = transient
        self.cause = cause
        self.status_code = status_code

    @property
    def responded(self) -> bool:
        """Whether the provider answered; transport failures never reach it."""
        return self.status_code is not None

    def __str__(self) -> str:
        kind = "transient" if self.transient else "permanent"
        return f"{super().__str__()} ({kind})"


class ProviderRateLimited(FetchError):
    """Provider throttled the request (HTTP 429)."""

    def __init__(self, message: str = "Provider rate limited the request (HTTP 429).") -> None:
        super().__init__(message, transient=True, status_code=429)


class MalformedPayloadError(FetchError):
    """The provider answered, but not with the document the endpoint returns."""

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, transient=False, cause=cause, status_code=status_code)

    @property
    def responded(self) -> bool:
        return True


class ProviderCapabilityError(ProviderError):
    """Provider does not support a requested operation."""


class UnsupportedProviderError(ProviderCapabilityError):
    """Configured provider name has no registered implementation."""

    def __init__(self, name: str, supported: list[str]) -> None:
        super().__init__(
            f"Unsupported data provider: '{name}'. Supported: {', '.join(sorted(supported))}"
        )
        self.name = name
        self.supported = supported


class ProviderMappingError(ProviderError):
    """Mapping/extraction failed due to unexpected schema or values."""

    def __init__(self, message: str, context: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:  # pragma: no cover
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"
