"""
The three bracket variants and the scoring rules that apply to each.
"""
from typing import Iterator, List, Optional, Sequence, Tuple

from .double_elimination import build_losers_skeleton, losers_feed_rounds
from .elimination import build_single_elimination, count_byes, third_place_match
from .errors import UnknownMatchError
from .models import IdSequence, Match, Participant
from .progression import apply_score, parse_score, place_loser, propagate_winner
from .round_robin import build_round_robin, round_robin_standings

FORMAT_SINGLE = 'single'
FORMAT_DOUBLE = 'double'
FORMAT_ROUND_ROBIN = 'roundrobin'
FORMATS = (FORMAT_SINGLE, FORMAT_DOUBLE, FORMAT_ROUND_ROBIN)


class Bracket:
    """Common behaviour: entrant snapshot, match lookup and score recording."""

    format = None

    def __init__(self, entrants: Sequence[Participant], match_ids: IdSequence):
        self.entrants = list(entrants)
        self.match_ids = match_ids

    def sections(self) -> List[Tuple[str, List[List[Match]]]]:
        raise NotImplementedError

    def iter_matches(self) -> Iterator[Match]:
        for _, rounds in self.sections():
            for round_matches in rounds:
                yield from round_matches

    def locate(self, match_id) -> Tuple[str, int, int, Match]:
        """Find a match. Returns (section, round_index, match_index, match)."""
        for section, rounds in self.sections():
            for round_index, round_matches in enumerate(rounds):
                for match_index, match in enumerate(round_matches):
                    if match.id == match_id:
                        return section, round_index, match_index, match
        raise UnknownMatchError(match_id)

    def find_match(self, match_id) -> Match:
        return self.locate(match_id)[3]

    def record_score(self, match_id, score1, score2) -> Match:
        """Score a match and apply every consequence. Raises before mutating on bad input."""
        score1, score2 = parse_score(score1), parse_score(score2)
        section, round_index, match_index, match = self.locate(match_id)
        previous_winner, previous_loser = apply_score(match, score1, score2)
        self._after_score(section, round_index, match_index, previous_loser)
        return match

    def _after_score(self, section, round_index, match_index, previous_loser):
        pass

    @property
    def champion(self) -> Optional[Participant]:
        return None


class SingleEliminationBracket(Bracket):
    format = FORMAT_SINGLE

    def __init__(self, entrants, match_ids, rounds, third_place=None, third_place_enabled=True):
        super().__init__(entrants, match_ids)
        self.rounds = rounds
        self.third_place = third_place
        self.third_place_enabled = third_place_enabled

    @classmethod
    def build(cls, roster, match_ids, third_place_enabled=True):
        rounds = build_single_elimination(roster, match_ids)
        return cls(roster, match_ids, rounds, third_place_enabled=third_place_enabled)

    def sections(self):
        sections = [('rounds', self.rounds)]
        if self.third_place is not None:
            sections.append(('third_place', [[self.third_place]]))
        return sections

    @property
    def bracket_size(self) -> int:
        return len(self.rounds[0]) * 2 if self.rounds else 0

    @property
    def byes(self) -> int:
        return count_byes(self.rounds)

    def _after_score(self, section, round_index, match_index, previous_loser):
        if section == 'rounds':
            propagate_winner(self.rounds, round_index, match_index)
            self.refresh_third_place()

    def refresh_third_place(self):
        if not self.third_place_enabled:
            self.third_place = None
            return
        self.third_place = third_place_match(self.rounds, self.third_place, self.match_ids)

    @property
    def champion(self):
        return self.rounds[-1][0].winner if self.rounds else None


class DoubleEliminationBracket(Bracket):
    format = FORMAT_DOUBLE

    def __init__(self, entrants, match_ids, winners_rounds, losers_rounds):
        super().__init__(entrants, match_ids)
        self.winners_rounds = winners_rounds
        self.losers_rounds = losers_rounds

    @classmethod
    def build(cls, roster, match_ids):
        winners_rounds = build_single_elimination(roster, match_ids)
        losers_rounds = build_losers_skeleton(winners_rounds, match_ids)
        return cls(roster, match_ids, winners_rounds, losers_rounds)

    def sections(self):
        return [('winners', self.winners_rounds), ('losers', self.losers_rounds)]

    @property
    def bracket_size(self) -> int:
        return len(self.winners_rounds[0]) * 2 if self.winners_rounds else 0

    @property
    def byes(self) -> int:
        return count_byes(self.winners_rounds)

    def _after_score(self, section, round_index, match_index, previous_loser):
        if section != 'winners':
            return
        match = self.winners_rounds[round_index][match_index]
        self._drop_loser(round_index, match_index, previous_loser, match.loser)
        propagate_winner(self.winners_rounds, round_index, match_index,
                         on_invalidated=self._withdraw_loser)

    def _drop_loser(self, round_index, match_index, previous, loser):
        feeds = losers_feed_rounds(self.winners_rounds)
        if round_index >= len(feeds):
            return
        target = self.losers_rounds[feeds[round_index]][match_index // 2]
        place_loser(target, previous, loser)

    def _withdraw_loser(self, round_index, match_index, previous_loser):
        if previous_loser is not None:
            self._drop_loser(round_index, match_index, previous_loser, None)

    @property
    def champion(self):
        return self.winners_rounds[-1][0].winner if self.winners_rounds else None


class RoundRobinBracket(Bracket):
    format = FORMAT_ROUND_ROBIN

    def __init__(self, entrants, match_ids, rounds):
        super().__init__(entrants, match_ids)
        self.rounds = rounds

    @classmethod
    def build(cls, roster, match_ids):
        return cls(roster, match_ids, build_round_robin(roster, match_ids))

    def sections(self):
        return [('rounds', self.rounds)]

    def standings(self):
        return round_robin_standings(self.entrants, self.rounds)
