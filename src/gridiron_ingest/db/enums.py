from __future__ import annotations

from enum import StrEnum


class ProviderEnum(StrEnum):
    ESPN = "espn"
    SPORTSDATAIO = "sportsdataio"
    MYSPORTSFEEDS = "mysportsfeeds"


class AuthTypeEnum(StrEnum):
    NONE = "none"
    BEARER = "bearer"
    API_KEY_HEADER = "api_key_header"
    # HTTP Basic with the key as username (MySportsFeeds).
    BASIC = "basic"

    @classmethod
    def parse(cls, value: str | AuthTypeEnum) -> AuthTypeEnum:
        """Accept config spellings such as "ApiKeyHeader", "api-key-header" or "None"."""
        if isinstance(value, cls):
            return value
        squashed = str(value).strip().lower().replace("_", "").replace("-", "")
        for member in cls:
            if member.value.replace("_", "") == squashed:
                return member
        raise ValueError(f"Unknown auth type: {value!r}")
