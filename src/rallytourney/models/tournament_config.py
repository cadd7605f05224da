"""TournamentConfig data class."""

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

from dataclasses import dataclass
from typing import Any, Dict

from rallytourney.constants import (
    DEFAULT_FORMAT,
    DEFAULT_POLICY,
    FORMAT_BRACKET,
    FORMAT_ROUNDS,
    MAX_SCORE,
    WIN_THRESHOLD,
)
from rallytourney.exceptions import InvalidConfigurationException
from rallytourney.utils import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class TournamentConfig:
    """Tournament configuration settings.

    The configuration is frozen: the scoring policy chosen for a tournament
    never changes while it runs.

    Attributes
    ----------
    name : str
        Tournament name.
    scoring_policy : str
        Scoring policy name, "accumulator" or "differential".
    tournament_format : str
        "rounds" for qualify/eliminate stages ending in a final, or
        "bracket" for one group stage followed by a fixed knockout bracket.
    win_threshold : int
        Score a side must reach before a match can be finished.
    max_score : int
        Upper clamp for score entry.
    """

    name: str = "Untitled Tournament"
    scoring_policy: str = DEFAULT_POLICY
    tournament_format: str = DEFAULT_FORMAT
    win_threshold: int = WIN_THRESHOLD
    max_score: int = MAX_SCORE

    def __post_init__(self) -> None:
        if self.tournament_format not in (FORMAT_ROUNDS, FORMAT_BRACKET):
            logger.warning(f"Unknown tournament format: {self.tournament_format!r}")
            raise InvalidConfigurationException(
                f"Unknown tournament format: {self.tournament_format!r}"
            )
        if not 0 < self.win_threshold <= self.max_score:
            logger.warning(
                f"Rejected win threshold {self.win_threshold} "
                f"(maximum score {self.max_score})"
            )
            raise InvalidConfigurationException(
                f"Win threshold {self.win_threshold} must be between 1 and "
                f"the maximum score {self.max_score}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "name": self.name,
            "scoring_policy": self.scoring_policy,
            "tournament_format": self.tournament_format,
            "win_threshold": self.win_threshold,
            "max_score": self.max_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            name=data.get("name", "Untitled Tournament"),
            scoring_policy=data.get("scoring_policy", DEFAULT_POLICY),
            tournament_format=data.get("tournament_format", DEFAULT_FORMAT),
            win_threshold=data.get("win_threshold", WIN_THRESHOLD),
            max_score=data.get("max_score", MAX_SCORE),
        )
