"""
Exceptions for the rating and tournament engine.

Every error carries a technical message for logs and a short user_message
the application layer can show as-is.
"""

class RacktError(Exception):
    """Base exception for engine errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class NotFoundError(RacktError):
    """Raised when a referenced player, match or tournament does not exist."""
    def __init__(self, kind: str, record_id: str):
        super().__init__(
            f"{kind} '{record_id}' not found",
            f"❌ {kind.capitalize()} not found."
        )
        self.kind = kind
        self.record_id = record_id

class InvalidInputError(RacktError):
    """Raised when caller input is malformed (rosters, participant lists, match lists)."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid input: {reason}", f"❌ {reason}")
        self.reason = reason

class InvalidWinnerError(InvalidInputError):
    """Raised when a reported winner is not one of the match's players."""
    def __init__(self, match_id: str, winner_id: str):
        super().__init__(f"Player '{winner_id}' is not a participant of match '{match_id}'")
        self.match_id = match_id
        self.winner_id = winner_id

class ConflictError(RacktError):
    """Raised when a transaction lost a race with a concurrent writer."""
    def __init__(self, message: str):
        super().__init__(message, "❌ Someone else updated this at the same time. Please try again.")

class RetryExhaustedError(ConflictError):
    """Raised when a transaction kept conflicting after every retry."""
    def __init__(self, operation: str, attempts: int):
        super().__init__(f"Transaction failed for {operation} after {attempts} attempts")
        self.operation = operation
        self.attempts = attempts

class AlreadyDecidedError(RacktError):
    """Raised when writing a write-once bracket field that is already set."""
    def __init__(self, message: str):
        super().__init__(message, "❌ This result has already been reported.")

class InvariantViolationError(RacktError):
    """Raised when stored state breaks a bracket invariant. Never retried."""
    def __init__(self, message: str):
        super().__init__(message, "❌ Tournament data is inconsistent. Please contact an organiser.")
