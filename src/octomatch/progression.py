"""
Match state machine: deciding matches from scores and moving results forward.

A match is UNSET until both occupants have a recorded score, then DECIDED.
The occupant with the greater-or-equal score wins, so ties go to slot p1.
Deciding a match forwards its winner into the next round; whenever that
overwrites a slot, the receiving match loses its scores and decision and the
change keeps flowing down the bracket until it reaches a match that had not
been decided.
"""
import logging
import math
from numbers import Real
from typing import Callable, List, Optional, Tuple

from .errors import ByeMatchError, MatchNotReadyError, ValidationError
from .models import Match, Participant

logger = logging.getLogger(__name__)

# Called with (round_index, match_index, previous_loser) when a match loses its decision
InvalidationHook = Callable[[int, int, Optional[Participant]], None]


def parse_score(value):
    """
    Normalize one score entry.

    None and blank strings mean "no score". Numbers and numeric strings are
    accepted; anything else raises ValidationError.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid score: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if text == '':
            return None
        try:
            value = float(text) if any(c in text for c in '.eE') else int(text)
        except ValueError:
            raise ValidationError(f"Invalid score: {value!r}") from None
    if not isinstance(value, Real):
        raise ValidationError(f"Invalid score: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Invalid score: {value!r}")
    return value


def check_scorable(match: Match):
    if match.is_bye:
        raise ByeMatchError(match.id)
    if not match.is_ready:
        raise MatchNotReadyError(match.id)


def decide_match(match: Match):
    """Recompute winner and loser from the match's slots and scores."""
    if match.is_bye:
        match.set_result(match.occupants()[0], None)
        return

    if not match.is_ready or match.score1 is None or match.score2 is None:
        match.set_result(None, None)
        return

    if match.score1 >= match.score2:
        match.set_result(match.p1, match.p2)
    else:
        match.set_result(match.p2, match.p1)


def apply_score(match: Match, score1, score2) -> Tuple[Optional[Participant], Optional[Participant]]:
    """
    Store already-parsed scores on a match and decide it again.

    Returns the (winner, loser) the match had before, so callers can tell
    what they need to move downstream.
    """
    check_scorable(match)
    previous = (match.winner, match.loser)
    match.score1 = score1
    match.score2 = score2
    decide_match(match)
    return previous


def next_slot(match_index: int) -> Tuple[int, str]:
    """Position and slot in the next round that a match's winner moves to."""
    return match_index // 2, 'p1' if match_index % 2 == 0 else 'p2'


def propagate_winner(rounds: List[List[Match]], round_index: int, match_index: int,
                     on_invalidated: Optional[InvalidationHook] = None):
    """
    Forward the winner of rounds[round_index][match_index] one round on.

    A None winner vacates the slot. Nothing happens when the slot already
    holds the incoming participant. Otherwise the receiving match is cleared
    and, if it had been decided, its own downstream slot is vacated in turn.
    Sibling branches are never touched.
    """
    match = rounds[round_index][match_index]
    target_round = round_index + 1
    if target_round >= len(rounds):
        return

    target_index, slot = next_slot(match_index)
    target = rounds[target_round][target_index]
    incoming = match.winner
    if getattr(target, slot) == incoming:
        return

    setattr(target, slot, incoming)
    previous_winner, previous_loser = target.clear_result()
    if previous_winner is None:
        return

    logger.debug(f"Result of {target.id} invalidated by change in {match.id}")
    if on_invalidated is not None:
        on_invalidated(target_round, target_index, previous_loser)
    propagate_winner(rounds, target_round, target_index, on_invalidated)


def place_loser(target: Match, previous: Optional[Participant], loser: Optional[Participant]) -> bool:
    """
    Drop a winners-bracket loser into a losers-bracket match.

    `previous` is the loser this feeder placed earlier, if any; a new loser
    takes its slot. A fresh loser goes to the first empty slot. A None loser
    withdraws `previous`. Returns True when the target changed, in which case
    its scores and decision are cleared.
    """
    if loser is not None and loser in target.occupants():
        return False

    if previous is not None and target.p1 == previous:
        target.p1 = loser
    elif previous is not None and target.p2 == previous:
        target.p2 = loser
    elif loser is None:
        return False
    elif target.p1 is None:
        target.p1 = loser
    elif target.p2 is None:
        target.p2 = loser
    else:
        logger.warning(f"No free slot for {loser.name} in losers match {target.id}")
        return False

    target.clear_result()
    logger.debug(f"Losers match {target.id} now {target.p1} vs {target.p2}")
    return True
