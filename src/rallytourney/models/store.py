"""In-memory tournament store keyed by id."""

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
from typing import Dict, Iterable, List, Optional

from rallytourney.exceptions import MatchNotFoundException, TeamNotFoundException
from rallytourney.models.events import EventLog, TeamsEliminated
from rallytourney.models.match import Match
from rallytourney.models.stage import StageRecord
from rallytourney.models.team import Team
from rallytourney.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class TournamentStore:
    """All mutable state of one tournament instance.

    Teams and matches are kept in dictionaries keyed by id. Insertion order of
    ``teams`` is the roster order and is relied upon for stable standings.
    """

    teams: Dict[int, Team] = field(default_factory=dict)
    matches: Dict[int, Match] = field(default_factory=dict)
    eliminated: Dict[int, None] = field(default_factory=dict)  # ordered set
    stages: List[StageRecord] = field(default_factory=list)
    events: EventLog = field(default_factory=EventLog)
    last_match_id: int = 0

    # ========== Ids ==========

    def next_match_id(self) -> int:
        """Hand out the next unused match id."""
        self.last_match_id += 1
        return self.last_match_id

    # ========== Lookup ==========

    def get_team(self, team_id: int) -> Team:
        team = self.teams.get(team_id)
        if team is None:
            logger.warning(f"Lookup of unknown team id {team_id}")
            raise TeamNotFoundException(f"Unknown team id: {team_id}")
        return team

    def get_match(self, match_id: int) -> Match:
        match = self.matches.get(match_id)
        if match is None:
            logger.warning(f"Lookup of unknown match id {match_id}")
            raise MatchNotFoundException(f"Unknown match id: {match_id}")
        return match

    def roster(self) -> List[Team]:
        return list(self.teams.values())

    def teams_by_ids(self, team_ids: Iterable[int]) -> List[Team]:
        return [self.get_team(team_id) for team_id in team_ids]

    @property
    def current_stage(self) -> Optional[StageRecord]:
        return self.stages[-1] if self.stages else None

    def stage_matches(self, stage: StageRecord) -> List[Match]:
        return [self.matches[match_id] for match_id in stage.match_ids]

    # ========== Mutation ==========

    def add_teams(self, teams: Iterable[Team]) -> None:
        for team in teams:
            self.teams[team.id] = team

    def add_matches(self, matches: Iterable[Match]) -> None:
        for match in matches:
            self.matches[match.id] = match
            self.last_match_id = max(self.last_match_id, match.id)

    def is_eliminated(self, team_id: int) -> bool:
        return team_id in self.eliminated

    def eliminate(self, team_ids: Iterable[int], match_id: Optional[int] = None) -> None:
        """Add teams to the eliminated set. Elimination is permanent."""
        new_ids = tuple(tid for tid in team_ids if tid not in self.eliminated)
        if not new_ids:
            return
        for team_id in new_ids:
            self.eliminated[team_id] = None
        self.events.append(TeamsEliminated(team_ids=new_ids, match_id=match_id))

    def active_teams(self) -> List[Team]:
        """Non-eliminated teams in roster order."""
        return [t for t in self.teams.values() if t.id not in self.eliminated]
