from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gridiron_ingest.db.enums import AuthTypeEnum, ProviderEnum


class ScraperSettings(BaseModel):
    request_delay_ms: int = Field(default=1500, ge=0)
    max_retries: int = Field(default=3, ge=1)
    user_agent: str = "gridiron-ingest/1.0 (educational project)"
    timeout_seconds: float = Field(default=30.0, gt=0)


class ApiProviderSettings(BaseModel):
    base_url: str = ""
    api_key: str | None = Field(default=None, repr=False)
    auth_type: AuthTypeEnum = AuthTypeEnum.NONE
    auth_header_name: str | None = None
    # Basic auth password; MySportsFeeds takes a fixed one alongside the key.
    auth_password: str = Field(default="", repr=False)
    request_delay_ms: int | None = Field(default=None, ge=0)
    custom_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("auth_type", mode="before")
    @classmethod
    def _parse_auth_type(cls, value: object) -> AuthTypeEnum:
        return AuthTypeEnum.parse(str(value))


def _default_providers() -> dict[str, ApiProviderSettings]:
    return {
        ProviderEnum.ESPN.value: ApiProviderSettings(
            base_url="https://site.api.espn.com/apis/site/v2/sports/football/nfl",
            request_delay_ms=1000,
        ),
        ProviderEnum.SPORTSDATAIO.value: ApiProviderSettings(
            base_url="https://api.sportsdata.io/v3/nfl",
            auth_type=AuthTypeEnum.API_KEY_HEADER,
            auth_header_name="Ocp-Apim-Subscription-Key",
            request_delay_ms=1000,
        ),
        ProviderEnum.MYSPORTSFEEDS.value: ApiProviderSettings(
            base_url="https://api.mysportsfeeds.com/v2.1/pull/nfl",
            auth_type=AuthTypeEnum.BASIC,
            auth_password="MYSPORTSFEEDS",
            request_delay_ms=1500,
        ),
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./gridiron.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Providers
    data_provider: str = ProviderEnum.ESPN.value
    scraper: ScraperSettings = Field(default_factory=ScraperSettings)
    providers: dict[str, ApiProviderSettings] = Field(default_factory=_default_providers)

    @field_validator("providers", mode="before")
    @classmethod
    def _merge_provider_defaults(cls, value: object) -> dict[str, dict[str, object]]:
        # PROVIDERS__ESPN__REQUEST_DELAY_MS=250 must not drop the shipped base_url.
        merged: dict[str, dict[str, object]] = {
            name: cfg.model_dump() for name, cfg in _default_providers().items()
        }
        if not isinstance(value, dict):
            return merged
        for name, cfg in value.items():
            key = str(name).strip().lower()
            if isinstance(cfg, ApiProviderSettings):
                cfg = cfg.model_dump(exclude_unset=True)
            if not isinstance(cfg, dict):
                raise ValueError(f"Invalid settings for provider {name!r}")
            merged[key] = {**merged.get(key, {}), **cfg}
        return merged

    # -----------------------------
    # Provider helpers
    # -----------------------------

    def provider_settings(self, name: str) -> ApiProviderSettings:
        """Settings for a provider; unknown names fall back to an empty config."""
        key = name.strip().lower()
        for provider_name, cfg in self.providers.items():
            if provider_name.lower() == key:
                return cfg
        return _default_providers().get(key, ApiProviderSettings())

    def request_delay_ms_for(self, name: str) -> int:
        cfg = self.provider_settings(name)
        if cfg.request_delay_ms is not None:
            return cfg.request_delay_ms
        return self.scraper.request_delay_ms

    def require_api_key(self, name: str) -> str:
        cfg = self.provider_settings(name)
        if not cfg.api_key:
            env_name = f"PROVIDERS__{name.upper()}__API_KEY"
            raise RuntimeError(f"{env_name} is not set. Set it in the environment or .env file.")
        return cfg.api_key


settings = Settings()
