"""Scoring policies turning a finished match into point deltas.

Two interchangeable rules are provided:

- The Accumulator: the winner always gains 26 points (the 21 point target plus
  a 5 point bonus) and the loser keeps its raw score as points.
- Point Differential: the winner gains the score margin and the loser loses it,
  so cumulative totals can go negative.
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

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type

from rallytourney.constants import (
    ACCUMULATOR_WIN_POINTS,
    POLICY_ACCUMULATOR,
    POLICY_DIFFERENTIAL,
    POLICY_NAMES,
    SIDE_A,
    SIDE_B,
    WIN_THRESHOLD,
)
from rallytourney.exceptions import (
    InvalidConfigurationException,
    ThresholdNotReachedException,
    UnboundSlotException,
)
from rallytourney.models.match import Match
from rallytourney.utils import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ScoreOutcome:
    """Point deltas for both sides of a match and the winning team."""

    team_a_delta: int
    team_b_delta: int
    winner_id: int


def determine_winner_side(
    score_a: int, score_b: int, threshold: int = WIN_THRESHOLD
) -> Optional[str]:
    """Return "A" or "B" for the side that has won, or None.

    A side that alone reached the threshold wins regardless of the margin.
    When both sides are past the threshold the higher score wins; equal
    scores past the threshold have no winner.
    """
    a_reached = score_a >= threshold
    b_reached = score_b >= threshold
    if a_reached and b_reached:
        if score_a == score_b:
            return None
        return SIDE_A if score_a > score_b else SIDE_B
    if a_reached:
        return SIDE_A
    if b_reached:
        return SIDE_B
    return None


class ScoringPolicy(ABC):
    """Abstract scoring rule.

    Subclasses only decide the deltas for winner and loser; winner
    determination and precondition checks are shared.
    """

    name: str = ""

    def __init__(self, threshold: int = WIN_THRESHOLD):
        self.threshold = threshold

    @property
    def display_name(self) -> str:
        return POLICY_NAMES.get(self.name, self.name)

    def apply(self, match: Match) -> ScoreOutcome:
        """Compute the outcome of a match that has reached the threshold.

        Args:
            match: Match with both slots bound

        Returns:
            ScoreOutcome with deltas for side A and side B

        Raises:
            UnboundSlotException: If a slot still waits for its team
            ThresholdNotReachedException: If no side has won yet
        """
        if not match.is_ready:
            logger.warning(f"Rejected finish of unbound match {match.id}")
            raise UnboundSlotException(
                f"Match {match.id} is still waiting for its teams"
            )

        side = determine_winner_side(match.score_a, match.score_b, self.threshold)
        if side is None:
            logger.warning(
                f"Rejected finish of match {match.id} at "
                f"{match.score_a}-{match.score_b}: threshold not reached"
            )
            raise ThresholdNotReachedException(
                f"Match {match.id} has no winner at "
                f"{match.score_a}-{match.score_b} (first to {self.threshold})"
            )

        if side == SIDE_A:
            winner_delta, loser_delta = self.deltas(match.score_a, match.score_b)
            outcome = ScoreOutcome(
                team_a_delta=winner_delta,
                team_b_delta=loser_delta,
                winner_id=match.team_a.team_id,
            )
        else:
            winner_delta, loser_delta = self.deltas(match.score_b, match.score_a)
            outcome = ScoreOutcome(
                team_a_delta=loser_delta,
                team_b_delta=winner_delta,
                winner_id=match.team_b.team_id,
            )

        logger.debug(
            f"{self.display_name}: match {match.id} "
            f"{match.score_a}-{match.score_b} -> "
            f"A {outcome.team_a_delta:+d}, B {outcome.team_b_delta:+d}"
        )
        return outcome

    @abstractmethod
    def deltas(self, winner_score: int, loser_score: int) -> Tuple[int, int]:
        """Return (winner_delta, loser_delta)."""
        pass


class AccumulatorPolicy(ScoringPolicy):
    """Winner gains a fixed 26 points, loser gains its raw score."""

    name = POLICY_ACCUMULATOR

    def deltas(self, winner_score: int, loser_score: int) -> Tuple[int, int]:
        return ACCUMULATOR_WIN_POINTS, loser_score


class PointDifferentialPolicy(ScoringPolicy):
    """Winner gains the margin, loser loses it."""

    name = POLICY_DIFFERENTIAL

    def deltas(self, winner_score: int, loser_score: int) -> Tuple[int, int]:
        diff = abs(winner_score - loser_score)
        return diff, -diff


SCORING_POLICIES: Dict[str, Type[ScoringPolicy]] = {
    POLICY_ACCUMULATOR: AccumulatorPolicy,
    POLICY_DIFFERENTIAL: PointDifferentialPolicy,
}


def get_scoring_policy(name: str, threshold: int = WIN_THRESHOLD) -> ScoringPolicy:
    """Instantiate a scoring policy by name.

    Raises:
        InvalidConfigurationException: If the name is not registered
    """
    policy_cls = SCORING_POLICIES.get(name)
    if policy_cls is None:
        logger.warning(f"Unknown scoring policy requested: {name!r}")
        raise InvalidConfigurationException(
            f"Unknown scoring policy {name!r}; "
            f"expected one of {', '.join(sorted(SCORING_POLICIES))}"
        )
    return policy_cls(threshold=threshold)
