"""Validation utilities for Rally Tourney.

This module provides reusable validation functions with consistent error handling.
"""

from typing import List, Optional, Sequence

from rallytourney.constants import MAX_SCORE, MAX_TEAMS, MIN_SCORE, MIN_TEAMS
from rallytourney.exceptions import (
    TeamCountValidationException,
    TeamNameValidationException,
)


class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed
        error_message: Human-readable error message if invalid
        sanitized_value: Cleaned/normalized value if valid
    """

    def __init__(
        self,
        is_valid: bool,
        error_message: Optional[str] = None,
        sanitized_value: Optional[List[str]] = None,
    ):
        self.is_valid = is_valid
        self.error_message = error_message
        self.sanitized_value = sanitized_value

    def __bool__(self) -> bool:
        """Allow using result in boolean context: if result: ..."""
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return f"ValidationResult(VALID, {self.sanitized_value!r})"
        return f"ValidationResult(INVALID, {self.error_message!r})"


# ========== Team Count Validation ==========


def validate_team_count(team_count: int) -> ValidationResult:
    """Validate the number of teams taking part.

    Args:
        team_count: Requested number of teams

    Returns:
        ValidationResult with validation status
    """
    if isinstance(team_count, bool) or not isinstance(team_count, int):
        return ValidationResult(
            is_valid=False,
            error_message=f"Team count must be an integer, got {team_count!r}",
        )
    if not MIN_TEAMS <= team_count <= MAX_TEAMS:
        return ValidationResult(
            is_valid=False,
            error_message=(
                f"Team count must be between {MIN_TEAMS} and {MAX_TEAMS}, "
                f"got {team_count}"
            ),
        )
    return ValidationResult(is_valid=True)


# ========== Team Name Validation ==========


def validate_team_names(
    team_names: Sequence[Optional[str]], team_count: int
) -> ValidationResult:
    """Validate the team names entered at setup.

    Only the first ``team_count`` entries are considered, the rest of the
    entry form is ignored. Names are stripped of surrounding whitespace before
    the emptiness and uniqueness checks.

    Args:
        team_names: Names as entered, possibly longer than ``team_count``
        team_count: Number of teams taking part

    Returns:
        ValidationResult whose sanitized value is the stripped name list

    Example:
        >>> result = validate_team_names(["Aces", "Blocks", "Spikers"], 3)
        >>> if result:
        ...     print(result.sanitized_value)
    """
    names = [(name or "").strip() for name in list(team_names)[:team_count]]
    provided = [name for name in names if name]

    if len(provided) != team_count:
        return ValidationResult(
            is_valid=False,
            error_message=f"Please enter names for all {team_count} teams",
        )

    if len(set(provided)) != len(provided):
        seen = set()
        duplicates = []
        for name in provided:
            if name in seen and name not in duplicates:
                duplicates.append(name)
            seen.add(name)
        return ValidationResult(
            is_valid=False,
            error_message=f"Team names must be unique (duplicated: {', '.join(duplicates)})",
        )

    return ValidationResult(is_valid=True, sanitized_value=provided)


def validate_setup_strict(
    team_names: Sequence[Optional[str]], team_count: int
) -> List[str]:
    """Validate team count and names and raise if either is invalid.

    Args:
        team_names: Names as entered
        team_count: Number of teams taking part

    Returns:
        The sanitized team names

    Raises:
        TeamCountValidationException: If the team count is unsupported
        TeamNameValidationException: If names are missing or duplicated
    """
    count_result = validate_team_count(team_count)
    if not count_result:
        raise TeamCountValidationException(count_result.error_message)

    names_result = validate_team_names(team_names, team_count)
    if not names_result:
        raise TeamNameValidationException(names_result.error_message)
    return names_result.sanitized_value


# ========== Score Validation ==========


def clamp_score(value: int, max_score: int = MAX_SCORE) -> int:
    """Clamp a raw score entry to the playable range."""
    return max(MIN_SCORE, min(max_score, int(value)))
