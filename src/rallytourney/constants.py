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

# --- Constants ---

# Rally scoring
WIN_THRESHOLD = 21
WIN_BONUS = 5
ACCUMULATOR_WIN_POINTS = WIN_THRESHOLD + WIN_BONUS  # 26 for every win
MIN_SCORE = 0
MAX_SCORE = 30

# Supported field sizes
MIN_TEAMS = 3
MAX_TEAMS = 6
DEFAULT_TEAM_COUNT = 4

# Placeholder for knockout slots whose team is not known yet
TBD_NAME = "TBD"

# Sides of a match
SIDE_A = "A"
SIDE_B = "B"

# Group tags
GROUP_A = "A"
GROUP_B = "B"

# Scoring policies
POLICY_ACCUMULATOR = "accumulator"
POLICY_DIFFERENTIAL = "differential"
DEFAULT_POLICY = POLICY_ACCUMULATOR

POLICY_NAMES = {
    POLICY_ACCUMULATOR: "The Accumulator",
    POLICY_DIFFERENTIAL: "Point Differential",
}

# Tournament formats
FORMAT_ROUNDS = "rounds"  # Qualify/eliminate round stages, then a final
FORMAT_BRACKET = "bracket"  # One group stage, then a fixed knockout bracket
DEFAULT_FORMAT = FORMAT_ROUNDS

# Stage generator modes
MODE_SINGLE_GROUP = "single-group"
MODE_TWO_GROUP_SPLIT = "two-group-split"

# Group configuration option ids
CONFIG_SINGLE = "single"
CONFIG_TWO_EQUAL = "two-equal"
CONFIG_UNEVEN_SPLIT = "uneven-split"

CONFIG_MODES = {
    CONFIG_SINGLE: MODE_SINGLE_GROUP,
    CONFIG_TWO_EQUAL: MODE_TWO_GROUP_SPLIT,
    CONFIG_UNEVEN_SPLIT: MODE_TWO_GROUP_SPLIT,
}

# Smallest group a configuration may create
MIN_GROUP_SIZE = 2

# Once this many teams remain, each group sends only its winner on
# (a single group sends its top two), so the next step is the final
CONVERGENCE_TEAM_COUNT = 4

# Stage labels
STAGE_ROUND_PREFIX = "round"
STAGE_GROUP = "group"
STAGE_QUALIFIER = "qualifier"
STAGE_SEMI = "semi"
STAGE_FINAL = "final"

# Match status (for display and export)
STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in progress"
STATUS_COMPLETED = "completed"

# Team status (for display and export)
STATUS_CHAMPION = "champion"
STATUS_RUNNER_UP = "runner-up"
STATUS_ACTIVE = "active"
STATUS_ELIMINATED = "eliminated"

# Export column order
MATCH_EXPORT_COLUMNS = [
    "round",
    "stage_label",
    "group",
    "team_a_name",
    "score_a",
    "team_b_name",
    "score_b",
    "winner_name",
    "status",
]

STANDINGS_EXPORT_COLUMNS = [
    "rank",
    "team_name",
    "matches_played",
    "wins",
    "losses",
    "total_points",
    "status",
]
