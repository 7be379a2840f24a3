from __future__ import annotations


class StorageError(RuntimeError):
    """Repository/storage failure (connection, constraint, transaction)."""


class TeamInUseError(StorageError):
    """A team cannot be deleted while games still reference it."""

    def __init__(self, abbreviation: str, game_count: int) -> None:
        super().__init__(
            f"Team {abbreviation} is referenced by {game_count} game(s); delete restricted."
        )
        self.abbreviation = abbreviation
        self.game_count = game_count
