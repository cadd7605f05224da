"""Rally Tourney - progression engine for small rally-scored tournaments.

Typical use::

    from rallytourney import Tournament

    tournament = Tournament(scoring_policy="accumulator")
    tournament.initialize(["Aces", "Blocks", "Digs", "Spikes"], 4)
    tournament.advance_stage("two-equal")
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

from rallytourney.export import ExportLog, write_csv
from rallytourney.models import (
    GroupConfigOption,
    Match,
    StageTransition,
    Team,
    TeamSlot,
    TournamentConfig,
    TournamentPhase,
)
from rallytourney.models.tournament import Tournament

__version__ = "0.1.0"

__all__ = [
    "Tournament",
    "TournamentConfig",
    "TournamentPhase",
    "Team",
    "Match",
    "TeamSlot",
    "GroupConfigOption",
    "StageTransition",
    "ExportLog",
    "write_csv",
]
