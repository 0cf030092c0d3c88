"""
Single elimination bracket generation.
"""
import logging
from typing import List, Optional, Sequence

from .models import IdSequence, Match, Participant
from .progression import decide_match, propagate_winner
from .seeding import generate_seed_order, next_power_of_two

logger = logging.getLogger(__name__)


def place_seeds(roster: Sequence[Participant]) -> List[Optional[Participant]]:
    """
    Lay the roster out over the first-round slots.

    Roster member i is seed i + 1; slot k receives the member whose seed is
    seed_order[k], or stays empty when that seed is beyond the roster.
    """
    bracket_size = next_power_of_two(len(roster))
    seed_order = generate_seed_order(bracket_size)
    seed_to_participant = {seed: participant for seed, participant in enumerate(roster, start=1)}
    return [seed_to_participant.get(seed) for seed in seed_order]


def build_single_elimination(roster: Sequence[Participant], match_ids: IdSequence) -> List[List[Match]]:
    """
    Build every round of a single elimination bracket.

    The roster must already be in seed order and hold at least two
    participants. Byes are decided and moved into round 1 before returning.
    """
    slots = place_seeds(roster)

    rounds = []
    first_round = []
    for i in range(0, len(slots), 2):
        p1, p2 = slots[i], slots[i + 1]
        match = Match(match_ids.next(), p1, p2, is_bye=(p1 is None) != (p2 is None))
        if match.is_bye:
            decide_match(match)
        first_round.append(match)
    rounds.append(first_round)

    # Subsequent rounds start empty
    previous_count = len(first_round)
    while previous_count > 1:
        previous_count //= 2
        rounds.append([Match(match_ids.next()) for _ in range(previous_count)])

    propagate_bye_winners(rounds)
    logger.debug(f"Built single elimination: {len(roster)} entrants, "
                 f"{len(slots)} slots, {len(rounds)} rounds")
    return rounds


def propagate_bye_winners(rounds: List[List[Match]]):
    """Move the winner of every first-round bye into round 1."""
    if len(rounds) < 2:
        return
    for index, match in enumerate(rounds[0]):
        if match.is_bye:
            propagate_winner(rounds, 0, index)


def count_byes(rounds: List[List[Match]]) -> int:
    return sum(1 for m in rounds[0] if m.is_bye) if rounds else 0


def third_place_match(rounds: List[List[Match]], current: Optional[Match],
                      match_ids: IdSequence) -> Optional[Match]:
    """
    Derive the bronze match between the two semifinal losers.

    Returns None until both semifinals have losers. A current bronze match
    that already pairs the same two losers is kept with its scores; any other
    pairing gets a fresh match.
    """
    if len(rounds) < 2:
        return None
    semifinals = rounds[-2]
    if len(semifinals) != 2:
        return None

    loser1, loser2 = semifinals[0].loser, semifinals[1].loser
    if loser1 is None or loser2 is None:
        return None

    if current is not None and current.p1 == loser1 and current.p2 == loser2:
        return current
    logger.debug(f"Third place match: {loser1.name} vs {loser2.name}")
    return Match(match_ids.next(), loser1, loser2)
