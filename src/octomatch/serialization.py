"""
Export and import of tournament data.

Participants are written as {id, name, score, category}. A bracket is a
tagged dict keyed by 'format'; it carries the roster snapshot it was built
from under 'entrants', and matches refer to participants by id, resolved
against that snapshot on load.
"""
import json
from typing import Dict, List, Optional

import yaml

from .bracket import (
    FORMAT_DOUBLE,
    FORMAT_ROUND_ROBIN,
    FORMAT_SINGLE,
    Bracket,
    DoubleEliminationBracket,
    RoundRobinBracket,
    SingleEliminationBracket,
)
from .double_elimination import losers_round_sizes
from .errors import SerializationError, ValidationError
from .models import DEFAULT_CATEGORY, IdSequence, Match, Participant
from .progression import decide_match, parse_score
from .seeding import is_power_of_two

MATCH_FIELDS = ('id', 'p1', 'p2', 'score1', 'score2', 'winner', 'loser')


def _ref(participant: Optional[Participant]):
    return participant.id if participant is not None else None


def participant_to_dict(participant: Participant) -> Dict:
    return {
        'id': participant.id,
        'name': participant.name,
        'score': participant.score,
        'category': participant.category,
    }


def participant_from_dict(data: Dict) -> Participant:
    if not isinstance(data, dict):
        raise SerializationError(f"Malformed participant entry {data!r}")
    try:
        participant_id = data['id']
        name = data['name']
    except KeyError as e:
        raise SerializationError(f"Participant entry {data!r} is missing {e}") from e
    if not isinstance(participant_id, str) or not participant_id:
        raise SerializationError(f"Participant id must be a non-empty string, got {participant_id!r}")
    if not isinstance(name, str) or not name.strip():
        raise SerializationError(f"Participant {participant_id} has no usable name: {name!r}")
    try:
        score = parse_score(data.get('score'))
    except ValidationError as e:
        raise SerializationError(f"Participant {participant_id}: {e}") from e
    return Participant(
        id=participant_id,
        name=name,
        score=score,
        category=data.get('category') or DEFAULT_CATEGORY,
    )


def roster_to_list(participants) -> List[Dict]:
    return [participant_to_dict(p) for p in participants]


def roster_from_list(data) -> List[Participant]:
    if not isinstance(data, list):
        raise SerializationError("Participants must be a list")
    participants = [participant_from_dict(item) for item in data]
    ids = [p.id for p in participants]
    if len(set(ids)) != len(ids):
        raise SerializationError("Duplicate participant ids")
    return participants


def match_to_dict(match: Match) -> Dict:
    return {
        'id': match.id,
        'p1': _ref(match.p1),
        'p2': _ref(match.p2),
        'score1': match.score1,
        'score2': match.score2,
        'winner': _ref(match.winner),
        'loser': _ref(match.loser),
    }


def _rounds_to_list(rounds) -> List[List[Dict]]:
    return [[match_to_dict(m) for m in round_matches] for round_matches in rounds]


def bracket_to_dict(bracket: Bracket) -> Dict:
    data = {
        'format': bracket.format,
        'entrants': roster_to_list(bracket.entrants),
    }
    if isinstance(bracket, DoubleEliminationBracket):
        data['roundsWinners'] = _rounds_to_list(bracket.winners_rounds)
        data['roundsLosers'] = _rounds_to_list(bracket.losers_rounds)
    else:
        data['rounds'] = _rounds_to_list(bracket.rounds)
    if isinstance(bracket, SingleEliminationBracket) and bracket.third_place is not None:
        data['thirdPlace'] = match_to_dict(bracket.third_place)
    return data


class _MatchLoader:
    """Rebuilds Match objects, resolving participant ids against the entrants."""

    def __init__(self, entrants_by_id):
        self.entrants_by_id = entrants_by_id
        self.seen_ids = set()

    def resolve(self, participant_id):
        if participant_id is None:
            return None
        try:
            return self.entrants_by_id[participant_id]
        except KeyError:
            raise SerializationError(f"Unknown participant id {participant_id!r}") from None

    def match(self, data, first_round=False) -> Match:
        if not isinstance(data, dict) or 'id' not in data:
            raise SerializationError(f"Malformed match entry {data!r}")
        if data['id'] in self.seen_ids:
            raise SerializationError(f"Duplicate match id {data['id']!r}")
        self.seen_ids.add(data['id'])

        p1 = self.resolve(data.get('p1'))
        p2 = self.resolve(data.get('p2'))
        match = Match(data['id'], p1, p2, is_bye=first_round and (p1 is None) != (p2 is None))
        try:
            match.score1 = parse_score(data.get('score1'))
            match.score2 = parse_score(data.get('score2'))
        except ValidationError as e:
            raise SerializationError(f"Match {match.id}: {e}") from e
        decide_match(match)

        if _ref(match.winner) != data.get('winner') or _ref(match.loser) != data.get('loser'):
            raise SerializationError(f"Match {match.id} result does not agree with its scores")
        return match

    def rounds(self, data, elimination=False) -> List[List[Match]]:
        if not isinstance(data, list):
            raise SerializationError("Rounds must be a list of lists")
        rounds = []
        for round_index, round_data in enumerate(data):
            if not isinstance(round_data, list):
                raise SerializationError("Rounds must be a list of lists")
            first_round = elimination and round_index == 0
            rounds.append([self.match(m, first_round) for m in round_data])
        return rounds


def _check_elimination_shape(rounds: List[List[Match]], label: str):
    """Rounds must halve from a power-of-two first round down to a single final."""
    sizes = [len(r) for r in rounds]
    halving = all(later == earlier // 2 for earlier, later in zip(sizes, sizes[1:]))
    if not sizes or not is_power_of_two(sizes[0]) or not halving or sizes[-1] != 1:
        raise SerializationError(f"{label} have match counts {sizes}; "
                                 f"expected rounds halving down to a final")


def _check_losers_shape(winners: List[List[Match]], losers: List[List[Match]]):
    expected = losers_round_sizes([len(r) for r in winners])
    sizes = [len(r) for r in losers]
    if sizes != expected:
        raise SerializationError(f"roundsLosers have match counts {sizes}; expected {expected}")


def bracket_from_dict(data: Dict, match_ids: IdSequence, roster=(), third_place_enabled=True) -> Bracket:
    """
    Rebuild a bracket. Entrants whose id is on `roster` are replaced by the
    roster's Participant objects so both views share one instance.
    """
    if not isinstance(data, dict):
        raise SerializationError("Bracket must be a mapping")
    roster_by_id = {p.id: p for p in roster}
    entrants = [roster_by_id.get(p.id, p) for p in roster_from_list(data.get('entrants', []))]
    loader = _MatchLoader({p.id: p for p in entrants})

    bracket_format = data.get('format')
    try:
        if bracket_format == FORMAT_SINGLE:
            rounds = loader.rounds(data.get('rounds', []), elimination=True)
            _check_elimination_shape(rounds, 'rounds')
            third_place = loader.match(data['thirdPlace']) if data.get('thirdPlace') else None
            bracket = SingleEliminationBracket(entrants, match_ids, rounds, third_place,
                                               third_place_enabled=third_place_enabled)
        elif bracket_format == FORMAT_DOUBLE:
            winners = loader.rounds(data.get('roundsWinners', []), elimination=True)
            losers = loader.rounds(data.get('roundsLosers', []))
            _check_elimination_shape(winners, 'roundsWinners')
            _check_losers_shape(winners, losers)
            bracket = DoubleEliminationBracket(entrants, match_ids, winners, losers)
        elif bracket_format == FORMAT_ROUND_ROBIN:
            bracket = RoundRobinBracket(entrants, match_ids, loader.rounds(data.get('rounds', [])))
        else:
            raise SerializationError(f"Unknown bracket format {bracket_format!r}")
    except (TypeError, AttributeError) as e:
        raise SerializationError(f"Malformed bracket data: {e}") from e

    match_ids.advance_past(loader.seen_ids)
    return bracket


def dump_yaml(data: Dict, path: str):
    """Write exported data to a YAML file."""
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def load_yaml(path: str) -> Dict:
    """Load exported data from a YAML file. An empty file yields {}."""
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SerializationError(f"Failed to parse {path}: {e}") from e
    return data or {}


def dump_json(data: Dict, path: str):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def load_json(path: str) -> Dict:
    with open(path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Failed to parse {path}: {e}") from e
