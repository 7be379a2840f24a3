"""Canonical reference table of the 32 NFL teams.

Provider-specific id mappings (ESPN team ids, etc.) resolve to the
abbreviations here rather than carrying their own conference/division data.
The table is built at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from gridiron_ingest.core.text import normalize_abbreviation

REFERENCE_VERSION = "2024.1"


@dataclass(frozen=True)
class TeamInfo:
    abbreviation: str
    conference: str
    division: str
    name: str
    city: str

    @property
    def division_key(self) -> str:
        return f"{self.conference} {self.division}"


# Division order is the standard display order.
ALL_TEAMS: tuple[TeamInfo, ...] = (
    # AFC East
    TeamInfo("BUF", "AFC", "East", "Buffalo Bills", "Buffalo"),
    TeamInfo("MIA", "AFC", "East", "Miami Dolphins", "Miami"),
    TeamInfo("NE", "AFC", "East", "New England Patriots", "New England"),
    TeamInfo("NYJ", "AFC", "East", "New York Jets", "New York"),
    # AFC North
    TeamInfo("BAL", "AFC", "North", "Baltimore Ravens", "Baltimore"),
    TeamInfo("CIN", "AFC", "North", "Cincinnati Bengals", "Cincinnati"),
    TeamInfo("CLE", "AFC", "North", "Cleveland Browns", "Cleveland"),
    TeamInfo("PIT", "AFC", "North", "Pittsburgh Steelers", "Pittsburgh"),
    # AFC South
    TeamInfo("HOU", "AFC", "South", "Houston Texans", "Houston"),
    TeamInfo("IND", "AFC", "South", "Indianapolis Colts", "Indianapolis"),
    TeamInfo("JAX", "AFC", "South", "Jacksonville Jaguars", "Jacksonville"),
    TeamInfo("TEN", "AFC", "South", "Tennessee Titans", "Tennessee"),
    # AFC West
    TeamInfo("DEN", "AFC", "West", "Denver Broncos", "Denver"),
    TeamInfo("KC", "AFC", "West", "Kansas City Chiefs", "Kansas City"),
    TeamInfo("LV", "AFC", "West", "Las Vegas Raiders", "Las Vegas"),
    TeamInfo("LAC", "AFC", "West", "Los Angeles Chargers", "Los Angeles"),
    # NFC East
    TeamInfo("DAL", "NFC", "East", "Dallas Cowboys", "Dallas"),
    TeamInfo("NYG", "NFC", "East", "New York Giants", "New York"),
    TeamInfo("PHI", "NFC", "East", "Philadelphia Eagles", "Philadelphia"),
    TeamInfo("WAS", "NFC", "East", "Washington Commanders", "Washington"),
    # NFC North
    TeamInfo("CHI", "NFC", "North", "Chicago Bears", "Chicago"),
    TeamInfo("DET", "NFC", "North", "Detroit Lions", "Detroit"),
    TeamInfo("GB", "NFC", "North", "Green Bay Packers", "Green Bay"),
    TeamInfo("MIN", "NFC", "North", "Minnesota Vikings", "Minnesota"),
    # NFC South
    TeamInfo("ATL", "NFC", "South", "Atlanta Falcons", "Atlanta"),
    TeamInfo("CAR", "NFC", "South", "Carolina Panthers", "Carolina"),
    TeamInfo("NO", "NFC", "South", "New Orleans Saints", "New Orleans"),
    TeamInfo("TB", "NFC", "South", "Tampa Bay Buccaneers", "Tampa Bay"),
    # NFC West
    TeamInfo("ARI", "NFC", "West", "Arizona Cardinals", "Arizona"),
    TeamInfo("LAR", "NFC", "West", "Los Angeles Rams", "Los Angeles"),
    TeamInfo("SF", "NFC", "West", "San Francisco 49ers", "San Francisco"),
    TeamInfo("SEA", "NFC", "West", "Seattle Seahawks", "Seattle"),
)

_BY_ABBREVIATION: MappingProxyType[str, TeamInfo] = MappingProxyType(
    {t.abbreviation: t for t in ALL_TEAMS}
)

# Abbreviations providers still emit for relocated/renamed franchises or their
# own house style.
_ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        "WSH": "WAS",
        "JAC": "JAX",
        "OAK": "LV",
        "LVR": "LV",
        "SD": "LAC",
        "STL": "LAR",
        "LA": "LAR",
        "GNB": "GB",
        "KAN": "KC",
        "NWE": "NE",
        "NOR": "NO",
        "SFO": "SF",
        "TAM": "TB",
    }
)

ABBREVIATIONS: frozenset[str] = frozenset(_BY_ABBREVIATION)


def lookup(abbreviation: str) -> TeamInfo | None:
    """Exact, case-insensitive match against the canonical abbreviations."""
    return _BY_ABBREVIATION.get(abbreviation.strip().upper())


def is_valid(abbreviation: str) -> bool:
    return lookup(abbreviation) is not None


def get_division(abbreviation: str) -> tuple[str, str]:
    """(conference, division) for a team, or ("", "") if the abbreviation is unknown."""
    info = lookup(abbreviation)
    if info is None:
        return ("", "")
    return (info.conference, info.division)


def resolve_abbreviation(value: str | None) -> str | None:
    """Map a provider-supplied abbreviation (including known aliases) to the canonical one."""
    if not value:
        return None
    norm = normalize_abbreviation(value)
    if norm in _BY_ABBREVIATION:
        return norm
    return _ALIASES.get(norm)


def by_division() -> dict[str, list[TeamInfo]]:
    """Teams grouped by "Conference Division" (e.g. "AFC East") in display order."""
    grouped: dict[str, list[TeamInfo]] = {}
    for team in ALL_TEAMS:
        grouped.setdefault(team.division_key, []).append(team)
    return grouped
