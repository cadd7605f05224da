"""Match data class and team slots."""

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

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from rallytourney.constants import (
    SIDE_A,
    SIDE_B,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    TBD_NAME,
)
from rallytourney.models.team import Team


@dataclass(frozen=True)
class TeamSlot:
    """One side of a match: either a bound team or a TBD placeholder."""

    team_id: Optional[int] = None
    name: str = TBD_NAME

    @classmethod
    def for_team(cls, team: Team) -> "TeamSlot":
        return cls(team_id=team.id, name=team.name)

    @classmethod
    def tbd(cls) -> "TeamSlot":
        return cls()

    @property
    def is_bound(self) -> bool:
        return self.team_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {"team_id": self.team_id, "name": self.name}


@dataclass
class Match:
    """A single fixture between two team slots.

    Attributes
    ----------
    id : int
        Unique match id, assigned monotonically across the tournament.
    stage_label : str
        Stage the match belongs to ("round-1", "group", "semi", "final", ...).
    round : int
        Round number (1-indexed).
    group : str or None
        Group tag ("A" or "B") for split stages, None otherwise.
    team_a, team_b : TeamSlot
        The two sides. Knockout slots start unbound and are filled when
        their feeder match completes.
    score_a, score_b : int
        Raw rally scores, kept within the playable range.
    winner_id : int or None
        Id of the winning team once the match is completed.
    completed : bool
        One-shot completion flag; never reset.
    """

    id: int
    stage_label: str
    round: int
    team_a: TeamSlot = field(default_factory=TeamSlot.tbd)
    team_b: TeamSlot = field(default_factory=TeamSlot.tbd)
    group: Optional[str] = None
    score_a: int = 0
    score_b: int = 0
    winner_id: Optional[int] = None
    completed: bool = False

    @property
    def is_ready(self) -> bool:
        """Are both slots bound to real teams?"""
        return self.team_a.is_bound and self.team_b.is_bound

    @property
    def team_ids(self) -> tuple:
        return (self.team_a.team_id, self.team_b.team_id)

    @property
    def loser_id(self) -> Optional[int]:
        if self.winner_id is None:
            return None
        if self.winner_id == self.team_a.team_id:
            return self.team_b.team_id
        return self.team_a.team_id

    @property
    def status(self) -> str:
        if self.completed:
            return STATUS_COMPLETED
        if self.score_a or self.score_b:
            return STATUS_IN_PROGRESS
        return STATUS_PENDING

    def slot(self, side: str) -> TeamSlot:
        return self.team_a if side == SIDE_A else self.team_b

    def score(self, side: str) -> int:
        return self.score_a if side == SIDE_A else self.score_b

    def set_score(self, side: str, value: int) -> None:
        if side == SIDE_A:
            self.score_a = value
        else:
            self.score_b = value

    def bind(self, side: str, team: Team) -> None:
        """Fill a TBD slot with the team that earned it."""
        if side == SIDE_A:
            self.team_a = TeamSlot.for_team(team)
        elif side == SIDE_B:
            self.team_b = TeamSlot.for_team(team)
        else:
            raise ValueError(f"Unknown side: {side!r}")

    def winner_name(self) -> Optional[str]:
        if self.winner_id is None:
            return None
        if self.winner_id == self.team_a.team_id:
            return self.team_a.name
        return self.team_b.name

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "id": self.id,
            "stage_label": self.stage_label,
            "round": self.round,
            "group": self.group,
            "team_a": self.team_a.to_dict(),
            "team_b": self.team_b.to_dict(),
            "score_a": self.score_a,
            "score_b": self.score_b,
            "winner_id": self.winner_id,
            "completed": self.completed,
        }

    def __str__(self) -> str:
        return (
            f"#{self.id} [{self.stage_label}] {self.team_a.name} {self.score_a}"
            f" - {self.score_b} {self.team_b.name}"
        )
