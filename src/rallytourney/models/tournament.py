"""Main Tournament class - orchestrates all tournament operations.

This is the primary interface for a presentation layer, coordinating the
specialized controllers to provide a clean API. Each instance owns its whole
state; several tournaments can run side by side.
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

import functools
import threading
from typing import Any, Dict, List, Optional, Sequence

from rallytourney.constants import (
    FORMAT_ROUNDS,
    MAX_SCORE,
    POLICY_ACCUMULATOR,
    WIN_THRESHOLD,
)
from rallytourney.controllers.tournament import (
    AdvancementEngine,
    ResultRecorder,
    StandingsCalculator,
    get_scoring_policy,
    list_group_config_options,
)
from rallytourney.exceptions import TournamentStateException, ValidationException
from rallytourney.export import ExportLog, build_export_log
from rallytourney.models.events import EventLog
from rallytourney.models.match import Match
from rallytourney.models.stage import (
    GroupConfigOption,
    StageRecord,
    StageTransition,
    TournamentPhase,
)
from rallytourney.models.store import TournamentStore
from rallytourney.models.team import Team
from rallytourney.models.tournament_config import TournamentConfig
from rallytourney.type_hints import ConfigId, FormatName, GroupTag, PolicyName, Side
from rallytourney.utils import setup_logger
from rallytourney.utils.validation import validate_setup_strict

logger = setup_logger(__name__)

# Phases in which open matches accept scores
PLAYING_PHASES = (
    TournamentPhase.STAGE,
    TournamentPhase.KNOCKOUT,
    TournamentPhase.FINAL,
)


def synchronized(method):
    """Run a method while holding the tournament's lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class Tournament:
    """Main tournament management class.

    This class coordinates all tournament operations through specialized
    controllers:
    - ResultRecorder: score entry and the one-shot match finish
    - AdvancementEngine: stage generation, qualification and the bracket
    - StandingsCalculator: ranking of teams within a stage or group

    All state lives in a single TournamentStore. Mutations and reads are
    serialized by a per-instance lock, so nothing is read halfway through a
    finish.
    """

    def __init__(
        self,
        name: str = "Untitled Tournament",
        scoring_policy: PolicyName = POLICY_ACCUMULATOR,
        tournament_format: FormatName = FORMAT_ROUNDS,
        win_threshold: int = WIN_THRESHOLD,
        max_score: int = MAX_SCORE,
    ) -> None:
        """Initialize a new tournament in the setup phase.

        Args
        ----
        name: Tournament name
        scoring_policy: "accumulator" or "differential"
        tournament_format: "rounds" or "bracket"
        win_threshold: Score needed to win a match
        max_score: Upper clamp for score entry

        Raises
        ------
        InvalidConfigurationException: If the policy or format is unknown
        """
        self.config = TournamentConfig(
            name=name,
            scoring_policy=scoring_policy,
            tournament_format=tournament_format,
            win_threshold=win_threshold,
            max_score=max_score,
        )
        self.policy = get_scoring_policy(scoring_policy, threshold=win_threshold)
        self.standings_calculator = StandingsCalculator()
        self._lock = threading.RLock()
        self._new_state()

    def _new_state(self) -> None:
        self.store = TournamentStore()
        self.result_recorder = ResultRecorder(self.policy, self.config.max_score)
        self.engine = AdvancementEngine(
            self.store, self.config, self.standings_calculator
        )

    # ========== Properties ==========

    @property
    def name(self) -> str:
        """Get tournament name."""
        return self.config.name

    @property
    def phase(self) -> TournamentPhase:
        return self.engine.phase

    @property
    def tournament_over(self) -> bool:
        """Is the tournament over?"""
        return self.engine.phase is TournamentPhase.COMPLETE

    @property
    def champion(self) -> Optional[Team]:
        if self.engine.champion_id is None:
            return None
        return self.store.get_team(self.engine.champion_id)

    @property
    def runner_up(self) -> Optional[Team]:
        if self.engine.runner_up_id is None:
            return None
        return self.store.get_team(self.engine.runner_up_id)

    @property
    def eliminated(self) -> List[Team]:
        """Eliminated teams, in elimination order."""
        return self.store.teams_by_ids(self.store.eliminated)

    @property
    def current_stage(self) -> Optional[StageRecord]:
        return self.store.current_stage

    @property
    def stages(self) -> List[StageRecord]:
        return list(self.store.stages)

    @property
    def events(self) -> EventLog:
        return self.store.events

    # ========== Setup ==========

    @synchronized
    def initialize(
        self, team_names: Sequence[Optional[str]], team_count: int
    ) -> List[Team]:
        """Validate the entered names and create the roster.

        Args:
            team_names: Names as entered; only the first ``team_count`` count
            team_count: Number of teams (3-6)

        Returns:
            The roster, in id order

        Raises:
            TeamCountValidationException: If the team count is unsupported
            TeamNameValidationException: If a name is missing or duplicated
            TournamentStateException: If the tournament is past setup
        """
        if self.phase is not TournamentPhase.SETUP:
            logger.warning(f"Rejected initialize in phase {self.phase.value}")
            raise TournamentStateException(
                "Tournament already initialized; call reset() to start over"
            )
        try:
            names = validate_setup_strict(team_names, team_count)
        except ValidationException as e:
            logger.warning(f"Setup rejected: {e}")
            raise
        return self.engine.register_teams(names)

    @synchronized
    def reset(self) -> None:
        """Discard all teams and matches and return to setup."""
        self._new_state()
        logger.info(f"Tournament {self.name!r} reset")

    # ========== Team / Match lookup ==========

    @synchronized
    def get_team(self, team_id: int) -> Team:
        return self.store.get_team(team_id)

    @synchronized
    def get_team_list(self, active_only: bool = False) -> List[Team]:
        """Get list of tournament teams.

        Args:
            active_only: If True, only return non-eliminated teams

        Returns:
            List of Team objects in roster order
        """
        if active_only:
            return self.store.active_teams()
        return self.store.roster()

    @synchronized
    def get_match(self, match_id: int) -> Match:
        return self.store.get_match(match_id)

    @synchronized
    def get_matches(
        self, round_number: Optional[int] = None, stage_label: Optional[str] = None
    ) -> List[Match]:
        """Matches in id order, optionally filtered by round and stage label."""
        return [
            m
            for m in self.store.matches.values()
            if (round_number is None or m.round == round_number)
            and (stage_label is None or m.stage_label == stage_label)
        ]

    @synchronized
    def get_current_matches(self) -> List[Match]:
        stage = self.current_stage
        if stage is None:
            return []
        return self.store.stage_matches(stage)

    # ========== Result Management ==========

    @synchronized
    def record_score(self, match_id: int, side: Side, value: int) -> Match:
        """Set a side's score, clamped to [0, max_score].

        Raises:
            MatchNotFoundException: If the match does not exist
            MatchCompletedException: If the match is completed
            UnboundSlotException: If a slot is still TBD
            TournamentStateException: If the tournament is over
        """
        self._check_playing(match_id)
        return self.result_recorder.record_score(self.store, match_id, side, value)

    @synchronized
    def adjust_score(self, match_id: int, side: Side, increment: int) -> Match:
        """Add ``increment`` (possibly negative) to a side's score."""
        match = self.store.get_match(match_id)
        return self.record_score(match_id, side, match.score(side) + increment)

    @synchronized
    def finish_match(self, match_id: int) -> Match:
        """Complete a match and apply the scoring policy once.

        Finishing an already completed match is a no-op.

        Raises:
            MatchNotFoundException: If the match does not exist
            ThresholdNotReachedException: If no side has won yet
            UnboundSlotException: If a slot is still TBD
            TournamentStateException: If the tournament is over
        """
        match = self.store.get_match(match_id)
        if match.completed:
            logger.warning(f"Match {match_id} is already completed, ignoring finish")
            return match
        self._check_playing(match_id)

        match, outcome = self.result_recorder.finish_match(self.store, match_id)
        if outcome is not None:
            self.engine.on_match_finished(match)
        return match

    def _check_playing(self, match_id: int) -> None:
        match = self.store.get_match(match_id)
        if self.phase not in PLAYING_PHASES and not match.completed:
            logger.warning(
                f"Rejected change to match {match_id} in phase {self.phase.value}"
            )
            raise TournamentStateException(
                f"No matches are accepted in phase {self.phase.value}"
            )

    # ========== Standings and Stages ==========

    def get_standings(self, group: Optional[GroupTag] = None) -> List[Team]:
        """Get current standings.

        Args:
            group: Group tag ("A"/"B") to restrict to, or None for the stage

        Returns:
            Teams sorted by total points, best first; ties keep roster order
        """
        with self._lock:
            return self.engine.standings(group)

    @synchronized
    def list_group_config_options(
        self, qualified_count: Optional[int] = None
    ) -> List[GroupConfigOption]:
        """Group configurations for ``qualified_count`` teams.

        Defaults to the number of teams waiting for their next stage.
        """
        if qualified_count is None:
            qualified_count = self.engine.pending_team_count()
        return list_group_config_options(qualified_count)

    @synchronized
    def is_stage_complete(self) -> bool:
        return self.engine.is_stage_complete()

    @synchronized
    def advance_stage(self, config_id: Optional[ConfigId] = None) -> StageTransition:
        """Move to the next stage.

        Args:
            config_id: Group configuration id for the stage being opened

        Returns:
            StageTransition describing the qualification decision and the
            matches generated

        Raises:
            StageIncompleteException: If the current stage has open matches
            TournamentStateException: If no transition is possible now
            InvalidConfigurationException: If the configuration is not offered
        """
        transition = self.engine.advance(config_id)
        logger.info(
            f"Advanced {transition.previous_phase.value} -> {transition.phase.value}"
        )
        return transition

    # ========== Audit ==========

    @synchronized
    def recompute_total_points(self, team_id: int) -> int:
        """Recompute a team's current points from the event log alone."""
        self.store.get_team(team_id)
        return self.store.events.total_points(team_id)

    def export_log(self) -> ExportLog:
        """Flat dump of all matches plus the final standings."""
        with self._lock:
            return build_export_log(self)

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize tournament to dictionary.

        Returns:
            Dictionary containing all tournament data
        """
        with self._lock:
            return {
                "config": self.config.to_dict(),
                "phase": self.phase.value,
                "teams": [t.to_dict() for t in self.store.roster()],
                "matches": [m.to_dict() for m in self.store.matches.values()],
                "stages": [s.to_dict() for s in self.store.stages],
                "eliminated": list(self.store.eliminated),
                "champion_id": self.engine.champion_id,
                "runner_up_id": self.engine.runner_up_id,
                "events": self.store.events.to_list(),
            }
