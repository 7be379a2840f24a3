from __future__ import annotations

import re

_whitespace_re = re.compile(r"\s+")
_non_alnum_re = re.compile(r"[^A-Z0-9]")


def normalize_abbreviation(value: str) -> str:
    """Uppercase a team abbreviation and strip anything that is not a letter or digit."""

    return _non_alnum_re.sub("", value.strip().upper())


def normalize_player_name(value: str) -> str:
    """Collapse whitespace in a display name; case is preserved."""

    return _whitespace_re.sub(" ", value).strip()
