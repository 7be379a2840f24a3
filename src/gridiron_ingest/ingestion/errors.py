from __future__ import annotations


class IngestionError(RuntimeError):
    """Per-record failure raised while mapping or reconciling provider data."""


class UnknownTeamError(IngestionError):
    """A record references a team abbreviation missing from the reference table."""

    def __init__(self, abbreviation: str | None, *, context: str | None = None) -> None:
        where = f" ({context})" if context else ""
        super().__init__(f"Unknown team abbreviation {abbreviation!r}{where}")
        self.abbreviation = abbreviation


class InvalidGameError(IngestionError):
    """A game would violate a structural invariant (e.g. a team playing itself)."""
