"""Exceptions for use in Rally Tourney"""

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


# ========== Base Application Exception ==========


class RallyTourneyException(Exception):
    """Base exception for all Rally Tourney errors.

    All custom exceptions in the engine inherit from this class, so a
    presentation layer can catch every recoverable engine error with a single
    except clause. No engine exception leaves the tournament in a partially
    mutated state.
    """

    pass


# ========== Validation Exceptions ==========


class ValidationException(RallyTourneyException):
    """Base exception for setup validation errors."""

    pass


class TeamNameValidationException(ValidationException):
    """Raised when team names are missing, blank or duplicated."""

    pass


class TeamCountValidationException(ValidationException):
    """Raised when the team count is outside the supported range."""

    pass


# ========== Precondition Exceptions ==========


class PreconditionException(RallyTourneyException):
    """Base exception for operations whose preconditions are not met."""

    pass


class ThresholdNotReachedException(PreconditionException):
    """Raised when finishing a match that has no winner yet."""

    pass


class MatchCompletedException(PreconditionException):
    """Raised when editing the score of a completed match."""

    pass


class UnboundSlotException(PreconditionException):
    """Raised when a match still waits for a feeder match to resolve."""

    pass


class StageIncompleteException(PreconditionException):
    """Raised when advancing before every match of the stage is completed."""

    pass


class TournamentStateException(PreconditionException):
    """Raised when tournament is in an invalid state for the requested operation."""

    pass


# ========== Lookup Exceptions ==========


class NotFoundException(RallyTourneyException):
    """Base exception for unknown identifiers."""

    pass


class MatchNotFoundException(NotFoundException):
    """Raised when a requested match cannot be found."""

    pass


class TeamNotFoundException(NotFoundException):
    """Raised when a requested team cannot be found."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(RallyTourneyException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
