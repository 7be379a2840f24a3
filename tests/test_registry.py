from __future__ import annotations

import pytest

from gridiron_ingest.core.config import Settings
from gridiron_ingest.db.enums import AuthTypeEnum
from gridiron_ingest.ingestion.providers.base.errors import UnsupportedProviderError
from gridiron_ingest.ingestion.providers.base.rate_limiter import RateLimiter
from gridiron_ingest.ingestion.providers.base.registry import ProviderRegistry
from gridiron_ingest.ingestion.providers.espn.provider import EspnProvider
from gridiron_ingest.ingestion.providers.factory import build_rate_limiter, default_registry


@pytest.fixture(autouse=True)
def _clean_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PROVIDERS__SPORTSDATAIO__API_KEY",
        "PROVIDERS__MYSPORTSFEEDS__API_KEY",
        "PROVIDERS__ESPN__REQUEST_DELAY_MS",
        "SCRAPER__MAX_RETRIES",
        "DATA_PROVIDER",
    ):
        monkeypatch.delenv(name, raising=False)


def _registry(settings: Settings | None = None) -> ProviderRegistry:
    settings = settings or Settings(_env_file=None)
    return default_registry(settings, RateLimiter(default_delay_ms=0))


def test_default_registry_lists_providers() -> None:
    registry = _registry()

    assert registry.names() == ["espn", "mysportsfeeds", "sportsdataio"]
    assert registry.supports("ESPN")
    assert registry.supports("MySportsFeeds")
    assert not registry.supports("nfl.com")


def test_get_is_case_insensitive() -> None:
    provider = _registry().get("  Espn ")
    try:
        assert isinstance(provider, EspnProvider)
        assert provider.provider_key == "espn"
    finally:
        provider.close()


def test_unknown_provider_names_the_supported_ones() -> None:
    with pytest.raises(UnsupportedProviderError) as excinfo:
        _registry().get("nope")

    assert "Unsupported data provider: 'nope'" in str(excinfo.value)
    assert "Supported: espn, mysportsfeeds, sportsdataio" in str(excinfo.value)


def test_keyed_provider_without_key_fails_at_construction() -> None:
    registry = _registry()

    with pytest.raises(RuntimeError, match="PROVIDERS__SPORTSDATAIO__API_KEY"):
        registry.get("sportsdataio")
    with pytest.raises(RuntimeError, match="PROVIDERS__MYSPORTSFEEDS__API_KEY"):
        registry.get("mysportsfeeds")


def test_duplicate_registration_is_rejected() -> None:
    registry = _registry()

    with pytest.raises(ValueError, match="Duplicate provider"):
        registry.register("ESPN", lambda: None)  # type: ignore[arg-type, return-value]


def test_env_overrides_merge_with_provider_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCRAPER__MAX_RETRIES", "5")
    monkeypatch.setenv("PROVIDERS__ESPN__REQUEST_DELAY_MS", "250")
    monkeypatch.setenv("PROVIDERS__SPORTSDATAIO__API_KEY", "secret")

    settings = Settings(_env_file=None)

    assert settings.scraper.max_retries == 5
    espn = settings.provider_settings("espn")
    assert espn.request_delay_ms == 250
    assert espn.base_url.startswith("https://site.api.espn.com/")
    sdio = settings.provider_settings("SportsDataIO")
    assert sdio.api_key == "secret"
    assert sdio.auth_header_name == "Ocp-Apim-Subscription-Key"

    limiter = build_rate_limiter(settings)
    assert limiter.delay_s("espn") == 0.25
    assert limiter.delay_s("unknown") == settings.scraper.request_delay_ms / 1000.0


def test_auth_type_accepts_config_spellings() -> None:
    settings = Settings(
        _env_file=None,
        providers={"custom": {"base_url": "https://x.test", "auth_type": "ApiKeyHeader"}},
    )

    assert settings.provider_settings("custom").auth_type is AuthTypeEnum.API_KEY_HEADER
    assert settings.provider_settings("espn").auth_type is AuthTypeEnum.NONE
    assert AuthTypeEnum.parse("Bearer") is AuthTypeEnum.BEARER
    with pytest.raises(ValueError):
        AuthTypeEnum.parse("oauth")


def test_request_delay_falls_back_to_scraper_default() -> None:
    settings = Settings(_env_file=None, scraper={"request_delay_ms": 700})

    assert settings.request_delay_ms_for("espn") == 1000
    assert settings.request_delay_ms_for("other") == 700
