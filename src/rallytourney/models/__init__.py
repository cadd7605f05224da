"""Data models for Rally Tourney."""

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

from rallytourney.models.events import EventLog, TournamentEvent
from rallytourney.models.match import Match, TeamSlot
from rallytourney.models.stage import (
    GroupConfigOption,
    StageRecord,
    StageTransition,
    TournamentPhase,
)
from rallytourney.models.store import TournamentStore
from rallytourney.models.team import Team
from rallytourney.models.tournament_config import TournamentConfig

__all__ = [
    "EventLog",
    "TournamentEvent",
    "Match",
    "TeamSlot",
    "GroupConfigOption",
    "StageRecord",
    "StageTransition",
    "TournamentPhase",
    "TournamentStore",
    "Team",
    "TournamentConfig",
]
