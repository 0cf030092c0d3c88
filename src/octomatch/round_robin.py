"""
Round robin scheduling (circle method) and standings.
"""
import logging
from typing import Dict, List, Sequence

from .models import IdSequence, Match, Participant

logger = logging.getLogger(__name__)


def build_round_robin(roster: Sequence[Participant], match_ids: IdSequence) -> List[List[Match]]:
    """
    Generate a full round robin schedule.

    Position 0 stays fixed while everyone else rotates one place per round.
    An odd roster gets a placeholder (None); whoever is paired with it sits
    that round out, so no match is created for them.
    """
    players = list(roster)
    if len(players) % 2 == 1:
        players.append(None)
    size = len(players)

    rounds = []
    for _ in range(size - 1):
        matches = []
        for i in range(size // 2):
            p1 = players[i]
            p2 = players[size - 1 - i]
            if p1 is not None and p2 is not None:
                matches.append(Match(match_ids.next(), p1, p2))
        rounds.append(matches)
        players.insert(1, players.pop())

    logger.debug(f"Built round robin: {len(roster)} entrants, {len(rounds)} rounds")
    return rounds


def round_robin_standings(entrants: Sequence[Participant], rounds: List[List[Match]]) -> List[Dict]:
    """
    Calculate standings from decided round robin matches.

    Returns: [{'participant': p, 'wins': n, 'losses': n, 'matches_played': n,
               'points_for': n, 'points_against': n, 'point_diff': n}, ...]

    Ranking: wins -> point differential -> points for -> roster order
    """
    stats = {}
    for participant in entrants:
        stats[participant.id] = {
            'participant': participant,
            'wins': 0,
            'losses': 0,
            'matches_played': 0,
            'points_for': 0,
            'points_against': 0,
        }

    for round_matches in rounds:
        for match in round_matches:
            if not match.is_decided:
                continue
            for participant, scored, conceded in ((match.p1, match.score1, match.score2),
                                                  (match.p2, match.score2, match.score1)):
                entry = stats.get(participant.id)
                if entry is None:
                    continue
                entry['matches_played'] += 1
                entry['points_for'] += scored
                entry['points_against'] += conceded
                if match.winner == participant:
                    entry['wins'] += 1
                else:
                    entry['losses'] += 1

    order = {participant.id: index for index, participant in enumerate(entrants)}
    standings = list(stats.values())
    for entry in standings:
        entry['point_diff'] = entry['points_for'] - entry['points_against']
    standings.sort(key=lambda e: (-e['wins'], -e['point_diff'], -e['points_for'],
                                  order[e['participant'].id]))
    return standings
