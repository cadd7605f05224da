"""Append-only event log of everything that changes a tournament.

Every mutation of the tournament store is recorded here as it is applied, so
the point totals of any team can be recomputed from the log alone and the
full history can be replayed for display or audit.
"""

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

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Type, TypeVar


@dataclass(frozen=True)
class TournamentEvent:
    """Base class for logged events."""

    kind: ClassVar[str] = "event"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind
        return data


@dataclass(frozen=True)
class TeamsRegistered(TournamentEvent):
    kind: ClassVar[str] = "teams_registered"

    team_ids: Tuple[int, ...]


@dataclass(frozen=True)
class StageStarted(TournamentEvent):
    kind: ClassVar[str] = "stage_started"

    round: int
    stage_label: str
    option_id: Optional[str]
    match_ids: Tuple[int, ...]


@dataclass(frozen=True)
class ScoreRecorded(TournamentEvent):
    kind: ClassVar[str] = "score_recorded"

    match_id: int
    side: str
    value: int


@dataclass(frozen=True)
class MatchFinished(TournamentEvent):
    kind: ClassVar[str] = "match_finished"

    match_id: int
    winner_id: int
    score_a: int
    score_b: int
    # (team_id, delta) for side A then side B
    deltas: Tuple[Tuple[int, int], ...]


@dataclass(frozen=True)
class SlotBackfilled(TournamentEvent):
    kind: ClassVar[str] = "slot_backfilled"

    match_id: int
    side: str
    team_id: int
    source_match_id: int


@dataclass(frozen=True)
class StageClosed(TournamentEvent):
    kind: ClassVar[str] = "stage_closed"

    round: int
    qualified_ids: Tuple[int, ...]
    eliminated_ids: Tuple[int, ...]


@dataclass(frozen=True)
class TeamsEliminated(TournamentEvent):
    kind: ClassVar[str] = "teams_eliminated"

    team_ids: Tuple[int, ...]
    match_id: Optional[int] = None


@dataclass(frozen=True)
class CountersReset(TournamentEvent):
    kind: ClassVar[str] = "counters_reset"

    team_ids: Tuple[int, ...]


@dataclass(frozen=True)
class ChampionDeclared(TournamentEvent):
    kind: ClassVar[str] = "champion_declared"

    team_id: int
    runner_up_id: Optional[int] = None


E = TypeVar("E", bound=TournamentEvent)


@dataclass
class EventLog:
    """Ordered list of tournament events."""

    events: List[TournamentEvent] = field(default_factory=list)

    def append(self, event: TournamentEvent) -> TournamentEvent:
        self.events.append(event)
        return event

    def __iter__(self) -> Iterator[TournamentEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self.events if isinstance(e, event_type)]

    def point_deltas(self, team_id: int) -> List[int]:
        """Deltas credited to a team since its counters were last reset."""
        deltas: List[int] = []
        for event in self.events:
            if isinstance(event, CountersReset) and team_id in event.team_ids:
                deltas = []
            elif isinstance(event, MatchFinished):
                deltas.extend(d for tid, d in event.deltas if tid == team_id)
        return deltas

    def total_points(self, team_id: int) -> int:
        return sum(self.point_deltas(team_id))

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.events]
