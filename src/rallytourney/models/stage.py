"""Data model for tournament stages."""

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
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from rallytourney.type_hints import GroupMembers, GroupSizes


class TournamentPhase(Enum):
    """Phases of the tournament state machine."""

    SETUP = "setup"
    AWAITING_CONFIG = "awaiting_config"
    STAGE = "stage"
    KNOCKOUT = "knockout"
    FINAL = "final"
    COMPLETE = "complete"


@dataclass(frozen=True)
class GroupConfigOption:
    """One way of splitting the remaining teams into groups.

    Attributes
    ----------
    id : str
        Option id passed back to ``advance_stage``.
    group_count : int
        Number of groups (1 or 2).
    group_sizes : tuple of int
        Size of each group, Group A first.
    """

    id: str
    group_count: int
    group_sizes: GroupSizes

    @property
    def label(self) -> str:
        if self.group_count == 1:
            return f"Single group of {self.group_sizes[0]}"
        return "Two groups of " + " + ".join(str(s) for s in self.group_sizes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "group_count": self.group_count,
            "group_sizes": list(self.group_sizes),
        }


@dataclass
class StageRecord:
    """Container for all data related to a single stage.

    Attributes
    ----------
    round : int
        Round number (1-indexed).
    stage_label : str
        Label shared by every match of the stage.
    option_id : str or None
        Group configuration chosen for the stage, None for generated stages
        that do not ask for one (bracket group stage, final).
    groups : dict
        Team ids per group tag, in seeding order. A single group uses the
        ``None`` key.
    match_ids : list of int
        Matches generated for the stage.
    qualified_ids : list of int
        Teams that advanced, filled when the stage is closed.
    eliminated_ids : list of int
        Teams knocked out when the stage was closed.
    standings : dict
        Snapshot of each group's standings when the stage was closed, taken
        before the qualifiers' counters are reset.
    closed : bool
        Whether the qualification decision has been made.
    """

    round: int
    stage_label: str
    option_id: Optional[str] = None
    groups: GroupMembers = field(default_factory=dict)
    match_ids: List[int] = field(default_factory=list)
    qualified_ids: List[int] = field(default_factory=list)
    eliminated_ids: List[int] = field(default_factory=list)
    standings: Dict[Optional[str], List[Dict[str, Any]]] = field(default_factory=dict)
    closed: bool = False

    @property
    def team_ids(self) -> List[int]:
        ids: List[int] = []
        for members in self.groups.values():
            ids.extend(members)
        return ids

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage record to dictionary."""
        return {
            "round": self.round,
            "stage_label": self.stage_label,
            "option_id": self.option_id,
            "groups": {k or "": v for k, v in self.groups.items()},
            "match_ids": self.match_ids,
            "qualified_ids": self.qualified_ids,
            "eliminated_ids": self.eliminated_ids,
            "standings": {k or "": v for k, v in self.standings.items()},
            "closed": self.closed,
        }


@dataclass(frozen=True)
class StageTransition:
    """Outcome of an ``advance_stage`` call."""

    previous_phase: TournamentPhase
    phase: TournamentPhase
    round: Optional[int] = None
    qualified_ids: Tuple[int, ...] = ()
    eliminated_ids: Tuple[int, ...] = ()
    match_ids: Tuple[int, ...] = ()
    options: Tuple[GroupConfigOption, ...] = ()

    @property
    def awaiting_config(self) -> bool:
        return self.phase is TournamentPhase.AWAITING_CONFIG
