"""
Core value types: participants, matches and the id sequences that name them.
"""
from enum import Enum
from typing import Iterable, List, Optional

DEFAULT_CATEGORY = 'Uncategorized'


class MatchState(Enum):
    UNSET = 'unset'
    DECIDED = 'decided'


class IdSequence:
    """Issues session-scoped ids like 'p1', 'p2', ... that are never reused."""

    def __init__(self, prefix, start=1):
        self.prefix = prefix
        self._next = start

    def next(self) -> str:
        value = f"{self.prefix}{self._next}"
        self._next += 1
        return value

    def advance_past(self, ids: Iterable[str]):
        """Make sure future ids sort after every id in `ids` with our prefix."""
        for existing in ids:
            if not isinstance(existing, str) or not existing.startswith(self.prefix):
                continue
            suffix = existing[len(self.prefix):]
            if suffix.isdigit():
                self._next = max(self._next, int(suffix) + 1)

    @property
    def peek(self) -> int:
        return self._next

    def __repr__(self):
        return f"IdSequence(prefix={self.prefix}, next={self._next})"


class Participant:
    def __init__(self, id, name, score=None, category=DEFAULT_CATEGORY):
        self._id = id
        self.name = name
        self.score = score
        self.category = category

    @property
    def id(self):
        return self._id

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self._id == other._id

    def __hash__(self):
        return hash(self._id)

    def __repr__(self):
        return f"Participant(id={self.id}, name={self.name}, score={self.score}, category={self.category})"


class Match:
    """
    One pairing in a bracket.

    `winner` and `loser` are derived from the scores and are only written by
    the progression module. A bye is flagged when the bracket is built and is
    decided from the start.
    """

    def __init__(self, id, p1=None, p2=None, is_bye=False):
        self.id = id
        self.p1: Optional[Participant] = p1
        self.p2: Optional[Participant] = p2
        self.score1 = None
        self.score2 = None
        self.is_bye = is_bye
        self._winner: Optional[Participant] = None
        self._loser: Optional[Participant] = None

    @property
    def winner(self) -> Optional[Participant]:
        return self._winner

    @property
    def loser(self) -> Optional[Participant]:
        return self._loser

    @property
    def state(self) -> MatchState:
        return MatchState.DECIDED if self._winner is not None else MatchState.UNSET

    @property
    def is_decided(self) -> bool:
        return self.state is MatchState.DECIDED

    @property
    def is_ready(self) -> bool:
        """Both slots are occupied, so scores may be entered."""
        return self.p1 is not None and self.p2 is not None

    def occupants(self) -> List[Participant]:
        return [p for p in (self.p1, self.p2) if p is not None]

    def set_result(self, winner, loser):
        self._winner = winner
        self._loser = loser

    def clear_result(self):
        """Drop scores and decision. Returns the (winner, loser) that were set."""
        previous = (self._winner, self._loser)
        self.score1 = None
        self.score2 = None
        self._winner = None
        self._loser = None
        return previous

    def __repr__(self):
        p1 = self.p1.name if self.p1 else None
        p2 = self.p2.name if self.p2 else None
        return (f"Match(id={self.id}, p1={p1}, p2={p2}, score={self.score1}-{self.score2}, "
                f"state={self.state.value})")
