"""Result recording and validation for tournaments.

This module handles score entry and the one-shot completion of matches with
proper validation and error checking.
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

from typing import Optional, Tuple

from rallytourney.constants import MAX_SCORE, SIDE_A, SIDE_B
from rallytourney.exceptions import MatchCompletedException, UnboundSlotException
from rallytourney.models.events import MatchFinished, ScoreRecorded
from rallytourney.models.match import Match
from rallytourney.models.store import TournamentStore
from rallytourney.type_hints import Side
from rallytourney.controllers.tournament.scoring import ScoreOutcome, ScoringPolicy
from rallytourney.utils import setup_logger
from rallytourney.utils.validation import clamp_score

logger = setup_logger(__name__)


class ResultRecorder:
    """Handles recording and validating match results.

    This class is responsible for:
    - Clamping score entries to the playable range
    - Rejecting edits to completed or unbound matches
    - Applying the scoring policy exactly once per match
    - Logging every change to the store's event log
    """

    def __init__(self, policy: ScoringPolicy, max_score: int = MAX_SCORE):
        self.policy = policy
        self.max_score = max_score

    def record_score(
        self, store: TournamentStore, match_id: int, side: Side, value: int
    ) -> Match:
        """Set one side's score.

        Args:
            store: Tournament store
            match_id: Match to update
            side: "A" or "B"
            value: New raw score, clamped to [0, max_score]

        Returns:
            The updated match

        Raises:
            MatchNotFoundException: If the match does not exist
            MatchCompletedException: If the match is already completed
            UnboundSlotException: If a slot is still TBD
            ValueError: If the side is unknown
        """
        if side not in (SIDE_A, SIDE_B):
            raise ValueError(f"Unknown side: {side!r} (expected 'A' or 'B')")

        match = store.get_match(match_id)
        if match.completed:
            logger.warning(f"Rejected score edit on completed match {match_id}")
            raise MatchCompletedException(f"Match {match_id} is already completed")
        if not match.is_ready:
            logger.warning(f"Rejected score edit on unbound match {match_id}")
            raise UnboundSlotException(
                f"Match {match_id} is still waiting for its teams"
            )

        clamped = clamp_score(value, self.max_score)
        if clamped == match.score(side):
            return match

        match.set_score(side, clamped)
        store.events.append(ScoreRecorded(match_id=match_id, side=side, value=clamped))
        logger.debug(f"Match {match_id}: side {side} score set to {clamped}")
        return match

    def finish_match(
        self, store: TournamentStore, match_id: int
    ) -> Tuple[Match, Optional[ScoreOutcome]]:
        """Complete a match and credit both teams.

        Finishing an already completed match is a no-op and returns no
        outcome, so deltas are never applied twice.

        Returns:
            Tuple of (match, outcome); outcome is None for a no-op

        Raises:
            MatchNotFoundException: If the match does not exist
            ThresholdNotReachedException: If neither side has won yet
            UnboundSlotException: If a slot is still TBD
        """
        match = store.get_match(match_id)
        if match.completed:
            logger.warning(f"Match {match_id} is already completed, ignoring finish")
            return match, None

        # Raises before anything is mutated
        outcome = self.policy.apply(match)

        team_a = store.get_team(match.team_a.team_id)
        team_b = store.get_team(match.team_b.team_id)
        team_a.apply_result(outcome.team_a_delta, won=outcome.winner_id == team_a.id)
        team_b.apply_result(outcome.team_b_delta, won=outcome.winner_id == team_b.id)

        match.winner_id = outcome.winner_id
        match.completed = True

        store.events.append(
            MatchFinished(
                match_id=match.id,
                winner_id=outcome.winner_id,
                score_a=match.score_a,
                score_b=match.score_b,
                deltas=(
                    (team_a.id, outcome.team_a_delta),
                    (team_b.id, outcome.team_b_delta),
                ),
            )
        )
        logger.info(
            f"Finished match {match.id}: {match.team_a.name} {match.score_a} - "
            f"{match.score_b} {match.team_b.name}, winner {match.winner_name()}"
        )
        return match, outcome
