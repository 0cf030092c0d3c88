"""
Double elimination bracket generation.

In double elimination:
- Winners Bracket: built exactly like a single elimination bracket
- Losers Bracket: one round per winners round (except the final) where that
  round's losers drop in, each followed (after the first) by a consolidation
  round of half its size where drop-ins meet losers-bracket survivors

Only the skeleton of the losers bracket and the drop-in of winners-bracket
losers are modelled. Advancement between losers rounds and the grand final
are left to the operator.
"""
import logging
from typing import List

from .models import IdSequence, Match

logger = logging.getLogger(__name__)


def get_losers_round_name(round_num: int, total_losers_rounds: int) -> str:
    """Get the name for a losers bracket round (0-indexed)."""
    rounds_from_end = total_losers_rounds - round_num - 1
    if rounds_from_end == 0:
        return "Losers Final"
    elif rounds_from_end == 1:
        return "Losers Semifinal"
    else:
        return f"Losers Round {round_num + 1}"


def _half(count: int) -> int:
    return (count + 1) // 2


def losers_round_sizes(winners_round_sizes: List[int]) -> List[int]:
    """Match counts of the losers rounds that go with winners rounds of the given sizes."""
    sizes = []
    for index, count in enumerate(winners_round_sizes[:-1]):
        drop_in = _half(count)
        if drop_in:
            sizes.append(drop_in)
        if index > 0 and _half(drop_in):
            sizes.append(_half(drop_in))
    return sizes


def build_losers_skeleton(winners_rounds: List[List[Match]], match_ids: IdSequence) -> List[List[Match]]:
    """
    Allocate the empty losers bracket for a winners bracket.

    For 8 entrants (winners rounds of 4, 2, 1 matches):
    - L Round 1: 2 matches for the 4 first-round losers
    - L Round 2: 1 match for the 2 winners-semifinal losers
    - L Round 3: 1 consolidation match
    """
    sizes = losers_round_sizes([len(r) for r in winners_rounds])
    losers_rounds = [[Match(match_ids.next()) for _ in range(size)] for size in sizes]
    logger.debug(f"Built losers skeleton: {[len(r) for r in losers_rounds]}")
    return losers_rounds


def losers_feed_rounds(winners_rounds: List[List[Match]]) -> List[int]:
    """
    For each winners round except the final, the index of the losers round
    its losers drop into.
    """
    return [0 if index == 0 else 2 * index - 1 for index in range(len(winners_rounds) - 1)]
