"""
Bracket sizing, seed placement order and roster ordering helpers.
"""
from typing import List, Optional, Sequence, Tuple

from .errors import BracketStructureError
from .models import Participant


def get_round_name(matches_in_round: int) -> str:
    """Get the name of an elimination round from its match count."""
    teams_in_round = matches_in_round * 2
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def next_power_of_two(n: int) -> int:
    """Calculate the bracket size (smallest power of 2 >= n)."""
    size = 1
    while size < n:
        size *= 2
    return size


def calculate_byes(n: int) -> int:
    """Calculate number of byes needed."""
    return next_power_of_two(n) - n


def is_power_of_two(n: int) -> bool:
    return n >= 1 and n & (n - 1) == 0


def generate_seed_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    Slot i of the first round holds seed order[i].

    For 8 slots: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if not is_power_of_two(bracket_size):
        raise BracketStructureError(f"Seed order requested for non power of two size {bracket_size}")
    if bracket_size == 1:
        return [1]

    upper_half = generate_seed_order(bracket_size // 2)

    # Interleave: pair each seed with its complement
    result = []
    for seed in upper_half:
        result.extend([seed, bracket_size + 1 - seed])
    return result


def _score_key(participant: Participant):
    return participant.score if participant.score is not None else 0


def sort_by_score(participants: Sequence[Participant]) -> List[Participant]:
    """Rank participants by score, highest first. Missing scores count as 0; ties keep roster order."""
    return sorted(participants, key=_score_key, reverse=True)


def pair_balanced_teams(participants: Sequence[Participant]) -> List[Tuple[Participant, Optional[Participant]]]:
    """
    Build two-person teams by pairing the highest ranked participant with the
    lowest, then the next highest with the next lowest, and so on.
    With an odd roster the middle participant gets None as a partner.
    """
    ranked = sort_by_score(participants)
    pairs = []
    while ranked:
        first = ranked.pop(0)
        second = ranked.pop() if ranked else None
        pairs.append((first, second))
    return pairs
