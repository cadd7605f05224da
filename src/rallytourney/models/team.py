"""Team data class."""

# Rally Tourney
# Copyright (C) 2025  Rally Tourney developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(slots=True)
class Team:
    """A team taking part in the tournament.

    The id and name are fixed at setup. The counters describe the team's
    standing in the current stage only: the round-based format resets them
    for every qualifier before the next stage starts.

    Attributes
    ----------
    id : int
        Stable identifier, assigned in roster order starting at 1.
    name : str
        Unique, non-empty team name.
    matches_played : int
        Completed matches counted since the last reset.
    wins : int
        Matches won since the last reset.
    losses : int
        Matches lost since the last reset.
    total_points : int
        Points gained (TPG) since the last reset. May be negative under the
        point differential policy.
    """

    id: int
    name: str
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    total_points: int = 0

    def apply_result(self, delta: int, won: bool) -> None:
        """Count one completed match for this team."""
        self.matches_played += 1
        if won:
            self.wins += 1
        else:
            self.losses += 1
        self.total_points += delta

    def reset_counters(self) -> None:
        """Zero the per-stage counters before the team plays a new stage."""
        self.matches_played = 0
        self.wins = 0
        self.losses = 0
        self.total_points = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize team to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "matches_played": self.matches_played,
            "wins": self.wins,
            "losses": self.losses,
            "total_points": self.total_points,
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.total_points} pts)"
