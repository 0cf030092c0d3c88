"""
Exceptions raised by the bracket engine.

Everything a caller can fix by retrying with different input derives from
ValidationError. BracketStructureError signals a broken internal contract.
"""


class TournamentError(Exception):
    """Base class for all engine errors."""


class ValidationError(TournamentError):
    """A requested mutation was rejected; nothing was changed."""


class MatchNotReadyError(ValidationError):
    """The match does not have two occupants yet."""

    def __init__(self, match_id):
        super().__init__(f"Match {match_id} is not yet ready to be scored.")
        self.match_id = match_id


class ByeMatchError(ValidationError):
    """Byes are decided at build time and can never be scored."""

    def __init__(self, match_id):
        super().__init__(f"Match {match_id} is a bye and cannot be scored.")
        self.match_id = match_id


class UnknownMatchError(ValidationError):
    def __init__(self, match_id):
        super().__init__(f"No match with id {match_id!r} in the current bracket.")
        self.match_id = match_id


class BracketStructureError(TournamentError):
    """Raised when a builder is handed input it should never receive."""


class SerializationError(TournamentError):
    """Raised when exported tournament data cannot be loaded back."""
