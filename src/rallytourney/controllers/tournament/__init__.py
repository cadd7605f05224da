"""Tournament controllers: scoring, stage generation, standings and advancement."""

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

from rallytourney.controllers.tournament.advancement import AdvancementEngine
from rallytourney.controllers.tournament.bracket import (
    Bracket,
    BracketBuilder,
    BracketGraph,
    SlotFeed,
)
from rallytourney.controllers.tournament.result_recorder import ResultRecorder
from rallytourney.controllers.tournament.scoring import (
    AccumulatorPolicy,
    PointDifferentialPolicy,
    ScoreOutcome,
    ScoringPolicy,
    get_scoring_policy,
)
from rallytourney.controllers.tournament.stage_generator import (
    StageGenerator,
    list_group_config_options,
)
from rallytourney.controllers.tournament.standings import StandingsCalculator

__all__ = [
    "AdvancementEngine",
    "Bracket",
    "BracketBuilder",
    "BracketGraph",
    "SlotFeed",
    "ResultRecorder",
    "ScoringPolicy",
    "AccumulatorPolicy",
    "PointDifferentialPolicy",
    "ScoreOutcome",
    "get_scoring_policy",
    "StageGenerator",
    "list_group_config_options",
    "StandingsCalculator",
]
