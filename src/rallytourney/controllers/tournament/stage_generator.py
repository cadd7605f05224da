"""Stage generation for tournaments.

This module produces the round-robin fixtures of a stage and the group
configurations a stage may be played in.
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

import math
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from rallytourney.constants import (
    CONFIG_MODES,
    CONFIG_SINGLE,
    CONFIG_TWO_EQUAL,
    CONFIG_UNEVEN_SPLIT,
    GROUP_A,
    GROUP_B,
    MAX_TEAMS,
    MIN_GROUP_SIZE,
    MIN_TEAMS,
    MODE_SINGLE_GROUP,
    MODE_TWO_GROUP_SPLIT,
)
from rallytourney.exceptions import InvalidConfigurationException
from rallytourney.models.match import Match, TeamSlot
from rallytourney.models.stage import GroupConfigOption
from rallytourney.models.team import Team
from rallytourney.type_hints import GroupMode, MatchIdFactory
from rallytourney.utils import setup_logger

logger = setup_logger(__name__)


def round_robin_pairs(count: int) -> List[Tuple[int, int]]:
    """Index pairs (i, j), i < j, in input order."""
    return list(combinations(range(count), 2))


def split_groups(teams: Sequence[Team]) -> Dict[Optional[str], List[Team]]:
    """Group A takes the first ceil(n/2) teams, Group B the rest."""
    cut = math.ceil(len(teams) / 2)
    return {GROUP_A: list(teams[:cut]), GROUP_B: list(teams[cut:])}


def list_group_config_options(team_count: int) -> List[GroupConfigOption]:
    """Group configurations available for a number of teams.

    Even counts offer two equal groups, counts up to six offer a single
    group and odd counts offer an uneven split, Group A taking the extra
    team. Three teams split 2 + 1: the lone Group B team plays no match and
    goes straight through.

    Args:
        team_count: Number of teams that will play the stage

    Returns:
        Options in display order, empty when fewer than three teams remain
    """
    if team_count < MIN_TEAMS:
        return []

    options: List[GroupConfigOption] = []
    half = team_count // 2
    if team_count % 2 == 0 and half >= MIN_GROUP_SIZE:
        options.append(
            GroupConfigOption(
                id=CONFIG_TWO_EQUAL, group_count=2, group_sizes=(half, half)
            )
        )
    if team_count <= MAX_TEAMS:
        options.append(
            GroupConfigOption(
                id=CONFIG_SINGLE, group_count=1, group_sizes=(team_count,)
            )
        )
    if team_count % 2 == 1:
        options.append(
            GroupConfigOption(
                id=CONFIG_UNEVEN_SPLIT,
                group_count=2,
                group_sizes=(team_count - half, half),
            )
        )
    return options


def find_group_config_option(config_id: str, team_count: int) -> GroupConfigOption:
    """Look up an option id among those valid for ``team_count`` teams.

    Raises:
        InvalidConfigurationException: If the option is not offered
    """
    for option in list_group_config_options(team_count):
        if option.id == config_id:
            return option
    logger.warning(
        f"Rejected group configuration {config_id!r} for {team_count} teams"
    )
    raise InvalidConfigurationException(
        f"Group configuration {config_id!r} is not available for {team_count} teams"
    )


class StageGenerator:
    """Generates the fixtures of a stage.

    Match ids are drawn from the tournament's id factory so that they keep
    increasing across stages and are never reused.
    """

    def __init__(self, next_match_id: MatchIdFactory):
        self.next_match_id = next_match_id

    def generate(
        self,
        teams: Sequence[Team],
        round_number: int,
        mode: GroupMode,
        stage_label: str,
    ) -> Tuple[Dict[Optional[str], List[Team]], List[Match]]:
        """Generate the matches of a stage.

        Args:
            teams: Participating teams, in seeding order
            round_number: Round number of the stage (1-indexed)
            mode: "single-group" or "two-group-split"
            stage_label: Label given to every generated match

        Returns:
            Tuple of (teams per group tag, matches). A single group is keyed
            by ``None`` and its matches carry no group tag.

        Raises:
            InvalidConfigurationException: If the mode is unknown
        """
        if mode == MODE_SINGLE_GROUP:
            groups: Dict[Optional[str], List[Team]] = {None: list(teams)}
        elif mode == MODE_TWO_GROUP_SPLIT:
            groups = split_groups(teams)
        else:
            logger.warning(f"Unknown group mode requested: {mode!r}")
            raise InvalidConfigurationException(f"Unknown group mode: {mode!r}")

        matches: List[Match] = []
        for tag, members in groups.items():
            matches.extend(
                self.round_robin(members, round_number, stage_label, group=tag)
            )

        logger.info(
            f"Generated {len(matches)} matches for {stage_label} "
            f"({mode}, {len(teams)} teams)"
        )
        return groups, matches

    def generate_for_option(
        self,
        teams: Sequence[Team],
        round_number: int,
        config_id: str,
        stage_label: str,
    ) -> Tuple[Dict[Optional[str], List[Team]], List[Match]]:
        """Generate a stage from a group configuration option id."""
        find_group_config_option(config_id, len(teams))
        return self.generate(teams, round_number, CONFIG_MODES[config_id], stage_label)

    def round_robin(
        self,
        teams: Sequence[Team],
        round_number: int,
        stage_label: str,
        group: Optional[str] = None,
    ) -> List[Match]:
        """One match per unordered pair of ``teams``."""
        return [
            self.single_match(teams[i], teams[j], round_number, stage_label, group)
            for i, j in round_robin_pairs(len(teams))
        ]

    def single_match(
        self,
        team_a: Optional[Team],
        team_b: Optional[Team],
        round_number: int,
        stage_label: str,
        group: Optional[str] = None,
    ) -> Match:
        """Create one match; a missing team leaves a TBD slot."""
        return Match(
            id=self.next_match_id(),
            stage_label=stage_label,
            round=round_number,
            group=group,
            team_a=TeamSlot.for_team(team_a) if team_a else TeamSlot.tbd(),
            team_b=TeamSlot.for_team(team_b) if team_b else TeamSlot.tbd(),
        )
