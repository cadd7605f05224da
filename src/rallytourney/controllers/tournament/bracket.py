"""Fixed knockout brackets with explicit slot dependencies.

Every TBD slot of a bracket declares the match that feeds it. When that
feeder completes, only the dependent slots are filled in; nothing else in the
tournament is scanned. Feeders may complete in any order.
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

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from rallytourney.constants import (
    MAX_TEAMS,
    MIN_TEAMS,
    SIDE_A,
    SIDE_B,
    STAGE_FINAL,
    STAGE_QUALIFIER,
    STAGE_SEMI,
)
from rallytourney.exceptions import InvalidConfigurationException
from rallytourney.models.events import SlotBackfilled
from rallytourney.models.match import Match
from rallytourney.models.store import TournamentStore
from rallytourney.models.team import Team
from rallytourney.controllers.tournament.stage_generator import StageGenerator
from rallytourney.utils import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class SlotFeed:
    """The winner of ``source_match_id`` takes ``side`` of ``target_match_id``."""

    source_match_id: int
    target_match_id: int
    side: str


@dataclass
class BracketGraph:
    """Dependency graph between knockout matches, keyed by feeder match."""

    feeds: Dict[int, List[SlotFeed]] = field(default_factory=dict)

    def add(self, source: Match, target: Match, side: str) -> None:
        self.feeds.setdefault(source.id, []).append(
            SlotFeed(source_match_id=source.id, target_match_id=target.id, side=side)
        )

    def feeds_from(self, source_match_id: int) -> List[SlotFeed]:
        return list(self.feeds.get(source_match_id, []))

    def feeders_of(self, target_match_id: int) -> List[SlotFeed]:
        return [
            feed
            for feeds in self.feeds.values()
            for feed in feeds
            if feed.target_match_id == target_match_id
        ]

    def backfill(self, store: TournamentStore, source: Match) -> List[SlotFeed]:
        """Bind the winner of a completed feeder into its waiting slots.

        Args:
            store: Tournament store holding the target matches
            source: The match that just completed

        Returns:
            The feeds that were applied
        """
        if not source.completed or source.winner_id is None:
            return []

        winner = store.get_team(source.winner_id)
        applied: List[SlotFeed] = []
        for feed in self.feeds_from(source.id):
            target = store.get_match(feed.target_match_id)
            if target.completed or target.slot(feed.side).is_bound:
                continue
            target.bind(feed.side, winner)
            store.events.append(
                SlotBackfilled(
                    match_id=target.id,
                    side=feed.side,
                    team_id=winner.id,
                    source_match_id=source.id,
                )
            )
            logger.info(
                f"{winner.name} advances from match {source.id} to "
                f"{target.stage_label} match {target.id} (side {feed.side})"
            )
            applied.append(feed)
        return applied


@dataclass
class Bracket:
    """A generated knockout bracket."""

    matches: List[Match]
    graph: BracketGraph
    eliminated_ids: List[int] = field(default_factory=list)

    @property
    def final(self) -> Match:
        return self.matches[-1]


class BracketBuilder:
    """Builds the fixed bracket for 3 to 6 seeded teams.

    Seeds are 1-indexed group stage ranks:

    - 3 teams: final 1 v 2, seed 3 is eliminated
    - 4 teams: semis 1 v 4 and 2 v 3
    - 5 teams: qualifier 4 v 5, semis 1 v W(qualifier) and 2 v 3
    - 6 teams: qualifiers 3 v 6 and 4 v 5, semis 1 v W(4 v 5) and
      2 v W(3 v 6)
    """

    def __init__(self, generator: StageGenerator):
        self.generator = generator

    def build(self, seeds: Sequence[Team], first_round: int) -> Bracket:
        """Create all knockout matches for the seeded teams.

        Args:
            seeds: Teams ordered by group stage rank, best first
            first_round: Round number of the first knockout level

        Returns:
            Bracket with its matches (final last) and dependency graph

        Raises:
            InvalidConfigurationException: If the seed count is unsupported
        """
        count = len(seeds)
        if not MIN_TEAMS <= count <= MAX_TEAMS:
            logger.warning(f"Rejected bracket for {count} seeds")
            raise InvalidConfigurationException(
                f"Fixed brackets support {MIN_TEAMS}-{MAX_TEAMS} teams, got {count}"
            )

        graph = BracketGraph()
        matches: List[Match] = []
        make = self.generator.single_match

        if count == 3:
            final = make(seeds[0], seeds[1], first_round, STAGE_FINAL)
            bracket = Bracket(
                matches=[final], graph=graph, eliminated_ids=[seeds[2].id]
            )
            logger.info(f"Built 3-team bracket: final only, {seeds[2].name} out")
            return bracket

        if count == 4:
            semi_round = first_round
            semi_1 = make(seeds[0], seeds[3], semi_round, STAGE_SEMI)
            semi_2 = make(seeds[1], seeds[2], semi_round, STAGE_SEMI)
            matches.extend([semi_1, semi_2])
        elif count == 5:
            semi_round = first_round + 1
            qualifier = make(seeds[3], seeds[4], first_round, STAGE_QUALIFIER)
            semi_1 = make(seeds[0], None, semi_round, STAGE_SEMI)
            semi_2 = make(seeds[1], seeds[2], semi_round, STAGE_SEMI)
            graph.add(qualifier, semi_1, SIDE_B)
            matches.extend([qualifier, semi_1, semi_2])
        else:
            semi_round = first_round + 1
            qualifier_1 = make(seeds[2], seeds[5], first_round, STAGE_QUALIFIER)
            qualifier_2 = make(seeds[3], seeds[4], first_round, STAGE_QUALIFIER)
            semi_1 = make(seeds[0], None, semi_round, STAGE_SEMI)
            semi_2 = make(seeds[1], None, semi_round, STAGE_SEMI)
            graph.add(qualifier_2, semi_1, SIDE_B)
            graph.add(qualifier_1, semi_2, SIDE_B)
            matches.extend([qualifier_1, qualifier_2, semi_1, semi_2])

        final = make(None, None, semi_round + 1, STAGE_FINAL)
        graph.add(semi_1, final, SIDE_A)
        graph.add(semi_2, final, SIDE_B)
        matches.append(final)

        logger.info(f"Built {count}-team bracket with {len(matches)} matches")
        return Bracket(matches=matches, graph=graph)
