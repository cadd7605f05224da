"""Advancement engine - the tournament state machine.

Two progressions are supported:

Round-based ("rounds")
    SETUP -> AWAITING_CONFIG -> STAGE(1) -> [AWAITING_CONFIG -> STAGE(n)] ...
    -> FINAL -> COMPLETE. Every closed stage eliminates the lower half of each
    group and resets the qualifiers' counters, until exactly two teams are
    left to play the final.

Fixed bracket ("bracket")
    SETUP -> STAGE(group) -> KNOCKOUT -> COMPLETE. A single round-robin group
    seeds a fixed bracket whose TBD slots are filled as feeder matches
    complete.
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

from typing import List, Optional, Tuple

from rallytourney.constants import (
    FORMAT_BRACKET,
    MODE_SINGLE_GROUP,
    STAGE_FINAL,
    STAGE_GROUP,
    STAGE_ROUND_PREFIX,
)
from rallytourney.exceptions import (
    StageIncompleteException,
    TournamentStateException,
)
from rallytourney.models.events import (
    ChampionDeclared,
    CountersReset,
    StageClosed,
    StageStarted,
    TeamsRegistered,
)
from rallytourney.models.match import Match
from rallytourney.models.stage import (
    StageRecord,
    StageTransition,
    TournamentPhase,
)
from rallytourney.models.store import TournamentStore
from rallytourney.models.team import Team
from rallytourney.models.tournament_config import TournamentConfig
from rallytourney.controllers.tournament.bracket import BracketBuilder, BracketGraph
from rallytourney.controllers.tournament.stage_generator import (
    StageGenerator,
    find_group_config_option,
    list_group_config_options,
)
from rallytourney.controllers.tournament.standings import StandingsCalculator
from rallytourney.utils import setup_logger

logger = setup_logger(__name__)

KNOCKOUT_STAGE_LABEL = "knockout"


def interleave_by_rank(ranked_groups: List[List[int]]) -> List[int]:
    """Seed qualifiers A1, B1, A2, B2, ... so a later split mixes groups."""
    seeded: List[int] = []
    depth = max((len(g) for g in ranked_groups), default=0)
    for position in range(depth):
        for group in ranked_groups:
            if position < len(group):
                seeded.append(group[position])
    return seeded


class AdvancementEngine:
    """Drives stage transitions for one tournament store.

    This class is responsible for:
    - Registering the roster and opening the first stage
    - Deciding qualification when a stage is closed
    - Generating the next stage, the final or the knockout bracket
    - Reacting to finished matches (bracket backfill, champion)
    """

    def __init__(
        self,
        store: TournamentStore,
        config: TournamentConfig,
        standings_calculator: Optional[StandingsCalculator] = None,
    ):
        self.store = store
        self.config = config
        self.generator = StageGenerator(store.next_match_id)
        self.bracket_builder = BracketBuilder(self.generator)
        self.standings_calculator = standings_calculator or StandingsCalculator()
        self.phase = TournamentPhase.SETUP
        self.graph: Optional[BracketGraph] = None
        self.champion_id: Optional[int] = None
        self.runner_up_id: Optional[int] = None

    @property
    def is_bracket(self) -> bool:
        return self.config.tournament_format == FORMAT_BRACKET

    # ========== Setup ==========

    def register_teams(self, names: List[str]) -> List[Team]:
        """Create the roster from validated names and open the tournament.

        Raises:
            TournamentStateException: If the tournament is past setup
        """
        if self.phase is not TournamentPhase.SETUP:
            logger.warning(f"Rejected team registration in phase {self.phase.value}")
            raise TournamentStateException(
                f"Teams can only be registered during setup (phase: {self.phase.value})"
            )

        teams = [Team(id=index, name=name) for index, name in enumerate(names, start=1)]
        self.store.add_teams(teams)
        self.store.events.append(TeamsRegistered(team_ids=tuple(t.id for t in teams)))
        logger.info(f"Registered {len(teams)} teams: {', '.join(names)}")

        if self.is_bracket:
            self._open_stage(
                teams,
                round_number=1,
                mode=MODE_SINGLE_GROUP,
                stage_label=STAGE_GROUP,
                option_id=None,
            )
        else:
            self.phase = TournamentPhase.AWAITING_CONFIG
        return teams

    # ========== Queries ==========

    @property
    def current_stage(self) -> Optional[StageRecord]:
        return self.store.current_stage

    def is_stage_complete(self, stage: Optional[StageRecord] = None) -> bool:
        """Is every match of the stage completed?"""
        stage = stage or self.current_stage
        if stage is None or not stage.match_ids:
            return False
        return all(m.completed for m in self.store.stage_matches(stage))

    def pending_team_count(self) -> int:
        """Number of teams waiting for the next stage configuration."""
        return len(self.store.active_teams())

    def standings(self, group: Optional[str] = None) -> List[Team]:
        """Ranked non-eliminated teams of the current stage or group."""
        roster = self.store.roster()
        eliminated = self.store.eliminated
        stage = self.current_stage

        if self.phase is TournamentPhase.SETUP:
            return []
        if stage is None or self.phase is TournamentPhase.AWAITING_CONFIG:
            if group is not None:
                return []
            return self.standings_calculator.standings(roster, eliminated)

        if group is None:
            members = stage.team_ids
        elif group in stage.groups:
            members = stage.groups[group]
        else:
            logger.debug(f"No group {group!r} in {stage.stage_label}")
            return []
        return self.standings_calculator.standings(roster, eliminated, members)

    # ========== Transitions ==========

    def advance(self, config_id: Optional[str] = None) -> StageTransition:
        """Move the tournament to its next stage.

        Args:
            config_id: Group configuration for the stage being opened. Needed
                when awaiting a configuration; optional when closing a stage
                (the next stage is opened right away if given).

        Returns:
            StageTransition describing what happened

        Raises:
            TournamentStateException: If no transition is possible now
            StageIncompleteException: If the current stage has open matches
            InvalidConfigurationException: If the configuration is not offered
        """
        previous = self.phase

        if previous is TournamentPhase.AWAITING_CONFIG:
            if config_id is None:
                logger.warning("Rejected advance: no group configuration chosen")
                raise TournamentStateException(
                    "A group configuration must be chosen to start the next stage"
                )
            stage = self._open_configured_stage(config_id)
            return StageTransition(
                previous_phase=previous,
                phase=self.phase,
                round=stage.round,
                match_ids=tuple(stage.match_ids),
            )

        if previous is not TournamentPhase.STAGE:
            logger.warning(f"Rejected advance in phase {previous.value}")
            raise TournamentStateException(
                f"Cannot advance the tournament in phase {previous.value}"
            )

        stage = self.current_stage
        if not self.is_stage_complete(stage):
            open_count = sum(1 for m in self.store.stage_matches(stage) if not m.completed)
            logger.warning(
                f"Rejected advance: {open_count} match(es) of {stage.stage_label} open"
            )
            raise StageIncompleteException(
                f"{open_count} match(es) of {stage.stage_label} are not completed"
            )

        if self.is_bracket:
            return self._start_knockout(stage)
        return self._close_round_stage(stage, config_id)

    def _close_round_stage(
        self, stage: StageRecord, config_id: Optional[str]
    ) -> StageTransition:
        previous = self.phase
        qualified, eliminated, snapshots = self._decide_qualification(stage)

        # Validate the follow-up configuration before anything changes
        if config_id is not None and len(qualified) > 2:
            find_group_config_option(config_id, len(qualified))

        stage.standings = snapshots
        stage.qualified_ids = list(qualified)
        stage.eliminated_ids = list(eliminated)
        stage.closed = True
        self.store.eliminate(eliminated)
        self.store.events.append(
            StageClosed(
                round=stage.round,
                qualified_ids=tuple(qualified),
                eliminated_ids=tuple(eliminated),
            )
        )

        for team in self.store.teams_by_ids(qualified):
            team.reset_counters()
        self.store.events.append(CountersReset(team_ids=tuple(qualified)))

        logger.info(
            f"Closed {stage.stage_label}: {len(qualified)} qualified, "
            f"{len(eliminated)} eliminated"
        )

        if len(qualified) == 2:
            final = self._open_final(qualified, stage.round + 1)
            return StageTransition(
                previous_phase=previous,
                phase=self.phase,
                round=final.round,
                qualified_ids=tuple(qualified),
                eliminated_ids=tuple(eliminated),
                match_ids=(final.id,),
            )

        self.phase = TournamentPhase.AWAITING_CONFIG
        if config_id is None:
            return StageTransition(
                previous_phase=previous,
                phase=self.phase,
                round=stage.round + 1,
                qualified_ids=tuple(qualified),
                eliminated_ids=tuple(eliminated),
                options=tuple(list_group_config_options(len(qualified))),
            )

        next_stage = self._open_configured_stage(config_id)
        return StageTransition(
            previous_phase=previous,
            phase=self.phase,
            round=next_stage.round,
            qualified_ids=tuple(qualified),
            eliminated_ids=tuple(eliminated),
            match_ids=tuple(next_stage.match_ids),
        )

    def _decide_qualification(
        self, stage: StageRecord
    ) -> Tuple[List[int], List[int], dict]:
        """Rank each group and split its teams into qualifiers and the rest.

        Pure: nothing in the store is modified.
        """
        roster = self.store.roster()
        eliminated_set = self.store.eliminated
        remaining = len([tid for tid in stage.team_ids if tid not in eliminated_set])
        group_count = len(stage.groups)

        ranked_groups: List[List[int]] = []
        eliminated: List[int] = []
        snapshots = {}
        for tag, members in stage.groups.items():
            ranked = self.standings_calculator.standings(roster, eliminated_set, members)
            count = self.standings_calculator.qualifier_count(
                len(ranked), remaining, group_count
            )
            snapshots[tag] = self.standings_calculator.snapshot(ranked)
            ranked_groups.append([t.id for t in ranked[:count]])
            eliminated.extend(t.id for t in ranked[count:])

        return interleave_by_rank(ranked_groups), eliminated, snapshots

    def _open_configured_stage(self, config_id: str) -> StageRecord:
        teams = self.store.active_teams()
        option = find_group_config_option(config_id, len(teams))

        closed = self.current_stage
        if closed is not None and closed.qualified_ids:
            teams = self.store.teams_by_ids(closed.qualified_ids)

        round_number = closed.round + 1 if closed else 1
        return self._open_stage(
            teams,
            round_number=round_number,
            mode=None,
            stage_label=f"{STAGE_ROUND_PREFIX}-{round_number}",
            option_id=option.id,
        )

    def _open_stage(
        self,
        teams: List[Team],
        round_number: int,
        mode: Optional[str],
        stage_label: str,
        option_id: Optional[str],
    ) -> StageRecord:
        if option_id is not None:
            groups, matches = self.generator.generate_for_option(
                teams, round_number, option_id, stage_label
            )
        else:
            groups, matches = self.generator.generate(
                teams, round_number, mode, stage_label
            )

        stage = StageRecord(
            round=round_number,
            stage_label=stage_label,
            option_id=option_id,
            groups={tag: [t.id for t in members] for tag, members in groups.items()},
            match_ids=[m.id for m in matches],
        )
        self._register_stage(stage, matches)
        self.phase = TournamentPhase.STAGE
        return stage

    def _open_final(self, qualified: List[int], round_number: int) -> Match:
        team_a, team_b = self.store.teams_by_ids(qualified)
        final = self.generator.single_match(team_a, team_b, round_number, STAGE_FINAL)
        stage = StageRecord(
            round=round_number,
            stage_label=STAGE_FINAL,
            groups={None: list(qualified)},
            match_ids=[final.id],
        )
        self._register_stage(stage, [final])
        self.phase = TournamentPhase.FINAL
        logger.info(f"Final: {team_a.name} vs {team_b.name}")
        return final

    def _start_knockout(self, stage: StageRecord) -> StageTransition:
        previous = self.phase
        seeds = self.standings(None)
        bracket = self.bracket_builder.build(seeds, first_round=stage.round + 1)

        stage.standings = {None: self.standings_calculator.snapshot(seeds)}
        stage.qualified_ids = [
            t.id for t in seeds if t.id not in bracket.eliminated_ids
        ]
        stage.eliminated_ids = list(bracket.eliminated_ids)
        stage.closed = True
        self.store.eliminate(bracket.eliminated_ids)
        self.store.events.append(
            StageClosed(
                round=stage.round,
                qualified_ids=tuple(stage.qualified_ids),
                eliminated_ids=tuple(stage.eliminated_ids),
            )
        )

        knockout = StageRecord(
            round=stage.round + 1,
            stage_label=KNOCKOUT_STAGE_LABEL,
            groups={None: list(stage.qualified_ids)},
            match_ids=[m.id for m in bracket.matches],
        )
        self.graph = bracket.graph
        self._register_stage(knockout, bracket.matches)
        self.phase = TournamentPhase.KNOCKOUT

        return StageTransition(
            previous_phase=previous,
            phase=self.phase,
            round=knockout.round,
            qualified_ids=tuple(stage.qualified_ids),
            eliminated_ids=tuple(stage.eliminated_ids),
            match_ids=tuple(knockout.match_ids),
        )

    def _register_stage(self, stage: StageRecord, matches: List[Match]) -> None:
        self.store.add_matches(matches)
        self.store.stages.append(stage)
        self.store.events.append(
            StageStarted(
                round=stage.round,
                stage_label=stage.stage_label,
                option_id=stage.option_id,
                match_ids=tuple(stage.match_ids),
            )
        )

    # ========== Match events ==========

    def on_match_finished(self, match: Match) -> None:
        """React to a newly completed match."""
        if self.graph is not None:
            self.graph.backfill(self.store, match)
            if match.stage_label != STAGE_FINAL and self.phase is TournamentPhase.KNOCKOUT:
                self.store.eliminate([match.loser_id], match_id=match.id)

        if match.stage_label == STAGE_FINAL:
            self._declare_champion(match)

    def _declare_champion(self, final: Match) -> None:
        self.champion_id = final.winner_id
        self.runner_up_id = final.loser_id
        self.phase = TournamentPhase.COMPLETE
        self.store.events.append(
            ChampionDeclared(team_id=final.winner_id, runner_up_id=final.loser_id)
        )
        logger.info(f"Champion: {final.winner_name()}")
