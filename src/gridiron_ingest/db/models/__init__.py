from gridiron_ingest.db.models.core.game import Game
from gridiron_ingest.db.models.core.player import Player
from gridiron_ingest.db.models.core.team import Team
from gridiron_ingest.db.models.stats.player_game_stats import PlayerGameStats

__all__ = [
    "Game",
    "Player",
    "PlayerGameStats",
    "Team",
]
