"""Flat export of a tournament for delimited text formats."""

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

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, TextIO, Union

from rallytourney.constants import (
    MATCH_EXPORT_COLUMNS,
    STANDINGS_EXPORT_COLUMNS,
    STATUS_ACTIVE,
    STATUS_CHAMPION,
    STATUS_ELIMINATED,
    STATUS_RUNNER_UP,
)
from rallytourney.models.match import Match
from rallytourney.models.team import Team
from rallytourney.utils import setup_logger

if TYPE_CHECKING:
    from rallytourney.models.tournament import Tournament

logger = setup_logger(__name__)


@dataclass
class ExportLog:
    """Tabular dump of a tournament.

    Attributes
    ----------
    matches : list of dict
        One row per match, keyed by ``MATCH_EXPORT_COLUMNS``.
    standings : list of dict
        One row per team, keyed by ``STANDINGS_EXPORT_COLUMNS``.
    """

    matches: List[Dict[str, Any]] = field(default_factory=list)
    standings: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"matches": self.matches, "standings": self.standings}


def match_row(match: Match) -> Dict[str, Any]:
    return {
        "round": match.round,
        "stage_label": match.stage_label,
        "group": match.group or "",
        "team_a_name": match.team_a.name,
        "score_a": match.score_a,
        "team_b_name": match.team_b.name,
        "score_b": match.score_b,
        "winner_name": match.winner_name() or "",
        "status": match.status,
    }


def final_ranking(tournament: "Tournament") -> List[Team]:
    """All teams, best first.

    Champion and runner-up lead once known, followed by the remaining
    active teams by points, then eliminated teams with the latest
    eliminated first.
    """
    ordered: List[Team] = []
    for team in (tournament.champion, tournament.runner_up):
        if team is not None:
            ordered.append(team)

    store = tournament.store
    active = tournament.standings_calculator.standings(
        store.roster(), store.eliminated
    )
    ordered.extend(t for t in active if t not in ordered)
    ordered.extend(
        t for t in reversed(tournament.eliminated) if t not in ordered
    )
    return ordered


def team_status(tournament: "Tournament", team: Team) -> str:
    if tournament.champion is not None and team.id == tournament.champion.id:
        return STATUS_CHAMPION
    if tournament.runner_up is not None and team.id == tournament.runner_up.id:
        return STATUS_RUNNER_UP
    if tournament.store.is_eliminated(team.id):
        return STATUS_ELIMINATED
    return STATUS_ACTIVE


def build_export_log(tournament: "Tournament") -> ExportLog:
    """Collect every match and the final standings of a tournament."""
    matches = [match_row(m) for m in tournament.store.matches.values()]
    standings = [
        {
            "rank": rank,
            "team_name": team.name,
            "matches_played": team.matches_played,
            "wins": team.wins,
            "losses": team.losses,
            "total_points": team.total_points,
            "status": team_status(tournament, team),
        }
        for rank, team in enumerate(final_ranking(tournament), start=1)
    ]
    return ExportLog(matches=matches, standings=standings)


def write_csv(export_log: ExportLog, target: Union[str, Path, TextIO]) -> None:
    """Write the match rows, a blank line, then the standings rows.

    Args:
        export_log: Export to write
        target: File path or an open text stream
    """
    if isinstance(target, (str, Path)):
        with open(target, "w", encoding="utf-8", newline="") as f:
            _write_sections(export_log, f)
        logger.info(f"Exported {len(export_log.matches)} matches to {target}")
        return
    _write_sections(export_log, target)


def _write_sections(export_log: ExportLog, stream: TextIO) -> None:
    match_writer = csv.DictWriter(stream, fieldnames=MATCH_EXPORT_COLUMNS)
    match_writer.writeheader()
    match_writer.writerows(export_log.matches)

    stream.write("\r\n")

    standings_writer = csv.DictWriter(stream, fieldnames=STANDINGS_EXPORT_COLUMNS)
    standings_writer.writeheader()
    standings_writer.writerows(export_log.standings)
