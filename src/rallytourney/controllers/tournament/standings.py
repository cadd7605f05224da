"""Standings and qualification counts."""

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

import math
from typing import Any, Collection, Dict, Iterable, List, Optional

from rallytourney.constants import CONVERGENCE_TEAM_COUNT
from rallytourney.models.team import Team


class StandingsCalculator:
    """Ranks the teams of a group by points gained.

    Ties are not broken further: the sort is stable, so teams with equal
    ``total_points`` keep their roster order (ascending team id). This
    ordering decides qualification boundaries when points are level.
    """

    def standings(
        self,
        teams: Iterable[Team],
        eliminated: Collection[int] = (),
        members: Optional[Collection[int]] = None,
    ) -> List[Team]:
        """Rank non-eliminated teams, optionally restricted to a group.

        Args:
            teams: Teams in roster order
            eliminated: Ids of eliminated teams to leave out
            members: Ids of the group's teams, or None for all teams

        Returns:
            Teams sorted by total points, best first
        """
        pool = [
            team
            for team in teams
            if team.id not in eliminated and (members is None or team.id in members)
        ]
        return sorted(pool, key=lambda team: team.total_points, reverse=True)

    def qualifier_count(
        self, group_size: int, remaining: int, group_count: int
    ) -> int:
        """Number of teams a group sends to the next stage.

        Normally the top half (rounded up) qualifies. Once at most four teams
        remain, a split stage sends each group winner and a single group
        sends its top two, so the next step is always a two-team final.
        """
        if remaining <= CONVERGENCE_TEAM_COUNT:
            wanted = 1 if group_count > 1 else 2
        else:
            wanted = math.ceil(group_size / 2)
        return min(wanted, group_size)

    def snapshot(self, ranked: List[Team]) -> List[Dict[str, Any]]:
        """Plain copy of a ranking, kept after counters are reset."""
        return [
            dict(team.to_dict(), rank=position)
            for position, team in enumerate(ranked, start=1)
        ]
