from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def parse_game_datetime(value: Any, *, provider_game_id: str) -> datetime | None:
    """
    Parse a provider kickoff value into a tz-aware UTC datetime.

    Supports:
      - ISO string: "2024-09-08T17:00Z" / "2024-09-08T17:00:00Z" / "+00:00"
      - naive ISO string (treated as UTC)
      - epoch seconds (int)
    Blank / missing values mean the kickoff is not known yet.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    if isinstance(value, bool):
        raise ValueError(f"Invalid game date for provider_game_id={provider_game_id}: {value!r}")

    if isinstance(value, int):
        return datetime.fromtimestamp(value, tz=UTC)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(
                f"Invalid game date for provider_game_id={provider_game_id}: {value!r}"
            ) from e
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt.astimezone(UTC)

    raise ValueError(f"Invalid game date for provider_game_id={provider_game_id}: {value!r}")
