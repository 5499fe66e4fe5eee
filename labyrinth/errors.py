"""
labyrinth.errors — Operation Errors
====================================

Every precondition failure raises a :class:`LabyrinthError` subclass.  The
dispatcher rolls back the operation's transaction and turns the error into
an ``ErrorResponse`` carrying ``kind`` and ``user_message``.
"""

from __future__ import annotations


class LabyrinthError(Exception):
    """Base exception for rejected operations."""

    kind = "Error"

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class InvalidInput(LabyrinthError):
    """Raised when an operation payload is malformed."""

    kind = "InvalidInput"

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field


class NotAuthenticated(LabyrinthError):
    kind = "NotAuthenticated"

    def __init__(self):
        super().__init__("Not authenticated", "Sign in with a wallet first.")


class NotRegistered(LabyrinthError):
    kind = "NotRegistered"

    def __init__(self, signer: str | None = None):
        super().__init__(
            f"Signer {signer!r} is not bound to a registered player",
            "Player not registered.",
        )


class UsernameTaken(LabyrinthError):
    kind = "UsernameTaken"

    def __init__(self, username: str):
        super().__init__(
            f"Username {username!r} is mapped to another wallet",
            f"Username '{username}' is already taken.",
        )
        self.username = username


class TournamentNotFound(LabyrinthError):
    kind = "TournamentNotFound"

    def __init__(self, tournament_id: int):
        super().__init__(
            f"Tournament {tournament_id} not found",
            "Tournament not found.",
        )
        self.tournament_id = tournament_id


class TournamentNotActive(LabyrinthError):
    """Raised when a tournament is not accepting submissions."""

    kind = "TournamentNotActive"

    def __init__(self, tournament_id: int, reason: str = "is not active"):
        super().__init__(
            f"Tournament {tournament_id} {reason}",
            f"Tournament {reason}.",
        )
        self.tournament_id = tournament_id


class TournamentEnded(TournamentNotActive):
    kind = "TournamentEnded"

    def __init__(self, tournament_id: int):
        super().__init__(tournament_id, "has ended")


class TournamentNotStarted(TournamentNotActive):
    kind = "TournamentNotStarted"

    def __init__(self, tournament_id: int):
        super().__init__(tournament_id, "has not started yet")


class NotYetDue(LabyrinthError):
    kind = "NotYetDue"

    def __init__(self, tournament_id: int, end_time: int):
        super().__init__(
            f"Tournament {tournament_id} cannot end before {end_time}",
            "Tournament is still running.",
        )
        self.end_time = end_time


class AlreadyEnded(LabyrinthError):
    kind = "AlreadyEnded"

    def __init__(self, tournament_id: int):
        super().__init__(
            f"Tournament {tournament_id} already ended",
            "Tournament has already ended.",
        )


class AlreadyJoined(LabyrinthError):
    kind = "AlreadyJoined"

    def __init__(self, tournament_id: int):
        super().__init__(
            f"Already joined tournament {tournament_id}",
            "Already joined this tournament.",
        )


class MaxAttemptsReached(LabyrinthError):
    kind = "MaxAttemptsReached"

    def __init__(self, tournament_id: int, max_attempts: int):
        super().__init__(
            f"Maximum of {max_attempts} attempts reached in tournament {tournament_id}",
            "Maximum attempts reached.",
        )


class NoReward(LabyrinthError):
    kind = "NoReward"

    def __init__(self, tournament_id: int):
        super().__init__(
            f"No reward for tournament {tournament_id}",
            "No reward available.",
        )


class AlreadyClaimed(LabyrinthError):
    kind = "AlreadyClaimed"

    def __init__(self, tournament_id: int):
        super().__init__(
            f"Reward for tournament {tournament_id} already claimed",
            "Reward already claimed.",
        )


class InvalidDuration(LabyrinthError):
    kind = "InvalidDuration"

    def __init__(self):
        super().__init__(
            "duration_days must be greater than zero",
            "Tournament duration must be at least one day.",
        )


class InvalidTimes(LabyrinthError):
    kind = "InvalidTimes"

    def __init__(self, start_time: int, end_time: int):
        super().__init__(
            f"End time {end_time} must be after start time {start_time}",
            "End time must be after start time.",
        )
