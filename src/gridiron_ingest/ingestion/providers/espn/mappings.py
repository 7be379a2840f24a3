"""ESPN team ids <-> canonical NFL abbreviations.

ESPN addresses teams by its own numeric ids (no 31/32). Conference and
division data always comes from the reference table, never from here.
"""

from __future__ import annotations

from types import MappingProxyType

ESPN_ID_TO_ABBREVIATION: MappingProxyType[str, str] = MappingProxyType(
    {
        "1": "ATL",
        "2": "BUF",
        "3": "CHI",
        "4": "CIN",
        "5": "CLE",
        "6": "DAL",
        "7": "DEN",
        "8": "DET",
        "9": "GB",
        "10": "TEN",
        "11": "IND",
        "12": "KC",
        "13": "LV",
        "14": "LAR",
        "15": "MIA",
        "16": "MIN",
        "17": "NE",
        "18": "NO",
        "19": "NYG",
        "20": "NYJ",
        "21": "PHI",
        "22": "ARI",
        "23": "PIT",
        "24": "LAC",
        "25": "SF",
        "26": "SEA",
        "27": "TB",
        "28": "WAS",
        "29": "CAR",
        "30": "JAX",
        "33": "BAL",
        "34": "HOU",
    }
)

ABBREVIATION_TO_ESPN_ID: MappingProxyType[str, str] = MappingProxyType(
    {abbr: espn_id for espn_id, abbr in ESPN_ID_TO_ABBREVIATION.items()}
)


def to_nfl_abbreviation(espn_id: str | int | None, fallback: str | None = None) -> str:
    """ESPN team id -> NFL abbreviation.

    Unmapped ids fall back to the abbreviation ESPN sent alongside (if any), then
    to the id itself; the canonical mapper decides whether the result is valid.
    """
    key = "" if espn_id is None else str(espn_id).strip()
    mapped = ESPN_ID_TO_ABBREVIATION.get(key)
    if mapped is not None:
        return mapped
    if fallback:
        return fallback.strip().upper()
    return key


def to_espn_id(abbreviation: str) -> str | None:
    return ABBREVIATION_TO_ESPN_ID.get(abbreviation.strip().upper())
