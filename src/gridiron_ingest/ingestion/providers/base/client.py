from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx
import structlog

from gridiron_ingest.db.enums import AuthTypeEnum

from .errors import FetchError, MalformedPayloadError, ProviderRateLimited
from .rate_limiter import RateLimiter

logger = structlog.get_logger(__name__)

Json = dict[str, Any]

# Statuses worth retrying; every other non-2xx is a structural failure.
TRANSIENT_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


def auth_headers(
    auth_type: AuthTypeEnum | str,
    *,
    api_key: str | None,
    auth_header_name: str | None = None,
) -> dict[str, str]:
    """Build the authentication headers for a provider's AuthType."""

    kind = AuthTypeEnum.parse(auth_type)
    if kind is AuthTypeEnum.NONE or not api_key:
        if kind is not AuthTypeEnum.NONE:
            logger.warning("provider auth configured without api key", auth_type=kind.value)
        return {}
    if kind is AuthTypeEnum.BEARER:
        return {"Authorization": f"Bearer {api_key}"}
    if kind is AuthTypeEnum.BASIC:
        # Sent through http_auth() instead.
        return {}
    if not auth_header_name:
        raise ValueError("auth_header_name is required for AuthType api_key_header")
    return {auth_header_name: api_key}


def http_auth(
    auth_type: AuthTypeEnum | str,
    *,
    api_key: str | None,
    password: str = "",
) -> httpx.Auth | None:
    """httpx auth flow for AuthTypes that are not plain headers."""

    if AuthTypeEnum.parse(auth_type) is AuthTypeEnum.BASIC and api_key:
        return httpx.BasicAuth(api_key, password)
    return None


@dataclass
class BaseHttpClient:
    """
    Provider-agnostic HTTP client wrapper.

    - Uses a single underlying httpx.Client for connection pooling.
    - Waits on the shared RateLimiter for `provider_key` before every request.
    - Classifies failures into FetchError(transient=...) so callers can decide
      whether to retry.
    """

    base_url: str
    provider_key: str
    rate_limiter: RateLimiter
    timeout_s: float = 30.0
    connect_timeout_s: float = 10.0
    user_agent: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    auth: httpx.Auth | None = None

    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        default_headers = dict(self.headers)
        if self.user_agent:
            default_headers.setdefault("User-Agent", self.user_agent)
        self._client = httpx.Client(
            base_url=self.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(
                self.timeout_s, connect=min(self.connect_timeout_s, self.timeout_s)
            ),
            headers=default_headers,
            auth=self.auth,
            transport=self.transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BaseHttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request_json_value(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        Perform an HTTP request and return the parsed JSON document (any shape).
        Raises FetchError (including ProviderRateLimited) on transport issues / non-2xx / bad JSON.
        """
        self.rate_limiter.wait(self.provider_key)

        logger.debug(
            "fetching", provider=self.provider_key, method=method, path=path, params=params
        )
        try:
            resp = self._client.request(
                method=method,
                url=path.lstrip("/"),
                params=params,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out: {method} {path}", transient=True, cause=e) from e
        except (httpx.NetworkError, httpx.RemoteProtocolError) as e:
            raise FetchError(f"Network error: {method} {path}: {e}", transient=True, cause=e) from e
        except httpx.HTTPError as e:
            raise FetchError(f"HTTP error: {method} {path}: {e}", transient=False, cause=e) from e

        if resp.status_code == 429:
            raise ProviderRateLimited()

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {resp.status_code} for {method} {resp.request.url}",
                transient=resp.status_code in TRANSIENT_STATUS_CODES,
                cause=e,
                status_code=resp.status_code,
            ) from e

        try:
            return resp.json()
        except ValueError as e:
            raise MalformedPayloadError(
                f"Response to {method} {path} was not valid JSON.",
                cause=e,
                status_code=resp.status_code,
            ) from e

    def get_json_value(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        return self.request_json_value("GET", path, params=params, headers=headers)

    def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Json:
        data = self.get_json_value(path, params=params, headers=headers)
        if not isinstance(data, dict):
            kind = type(data).__name__
            raise MalformedPayloadError(f"Expected JSON object from {path}, got {kind}")
        return data

    def get_json_list(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> list[Json]:
        data = self.get_json_value(path, params=params, headers=headers)
        if not isinstance(data, list):
            kind = type(data).__name__
            raise MalformedPayloadError(f"Expected JSON array from {path}, got {kind}")
        return [item for item in data if isinstance(item, dict)]
