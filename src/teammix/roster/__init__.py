from .entities import TEAM_INDICES, UNASSIGNED, Player, Team
from .loader import check_formation, load_roster, parse_players, roster_from_payload
from .roster import Roster
from .validation import RosterValidator

__all__ = [
    "Player",
    "Roster",
    "RosterValidator",
    "TEAM_INDICES",
    "Team",
    "UNASSIGNED",
    "check_formation",
    "load_roster",
    "parse_players",
    "roster_from_payload",
]
