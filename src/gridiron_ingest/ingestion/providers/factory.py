from __future__ import annotations

import httpx

from gridiron_ingest.core.config import Settings
from gridiron_ingest.db.enums import AuthTypeEnum, ProviderEnum
from gridiron_ingest.ingestion.providers.base.client import (
    BaseHttpClient,
    auth_headers,
    http_auth,
)
from gridiron_ingest.ingestion.providers.base.rate_limiter import RateLimiter
from gridiron_ingest.ingestion.providers.base.registry import ProviderRegistry
from gridiron_ingest.ingestion.providers.espn.provider import EspnProvider
from gridiron_ingest.ingestion.providers.mysportsfeeds.provider import MySportsFeedsProvider
from gridiron_ingest.ingestion.providers.sportsdataio.provider import SportsDataIoProvider


def build_rate_limiter(settings: Settings) -> RateLimiter:
    """One limiter per process, with each configured provider's own spacing."""

    delays = {name.lower(): settings.request_delay_ms_for(name) for name in settings.providers}
    return RateLimiter(default_delay_ms=settings.scraper.request_delay_ms, delays_ms=delays)


def build_http_client(
    name: str,
    settings: Settings,
    rate_limiter: RateLimiter,
    *,
    transport: httpx.BaseTransport | None = None,
) -> BaseHttpClient:
    cfg = settings.provider_settings(name)
    if cfg.auth_type is not AuthTypeEnum.NONE:
        settings.require_api_key(name)

    headers = dict(cfg.custom_headers)
    headers.update(
        auth_headers(cfg.auth_type, api_key=cfg.api_key, auth_header_name=cfg.auth_header_name)
    )
    return BaseHttpClient(
        base_url=cfg.base_url,
        provider_key=name.lower(),
        rate_limiter=rate_limiter,
        timeout_s=settings.scraper.timeout_seconds,
        user_agent=settings.scraper.user_agent,
        headers=headers,
        auth=http_auth(cfg.auth_type, api_key=cfg.api_key, password=cfg.auth_password),
        transport=transport,
    )


def register_default_providers(
    registry: ProviderRegistry,
    settings: Settings,
    rate_limiter: RateLimiter,
    *,
    transport: httpx.BaseTransport | None = None,
) -> ProviderRegistry:
    espn = ProviderEnum.ESPN.value
    sdio = ProviderEnum.SPORTSDATAIO.value
    msf = ProviderEnum.MYSPORTSFEEDS.value

    registry.register(
        espn,
        lambda: EspnProvider(
            http=build_http_client(espn, settings, rate_limiter, transport=transport)
        ),
    )
    registry.register(
        sdio,
        lambda: SportsDataIoProvider(
            http=build_http_client(sdio, settings, rate_limiter, transport=transport)
        ),
    )
    registry.register(
        msf,
        lambda: MySportsFeedsProvider(
            http=build_http_client(msf, settings, rate_limiter, transport=transport)
        ),
    )
    return registry


def default_registry(
    settings: Settings,
    rate_limiter: RateLimiter,
    *,
    transport: httpx.BaseTransport | None = None,
) -> ProviderRegistry:
    return register_default_providers(
        ProviderRegistry(), settings, rate_limiter, transport=transport
    )
