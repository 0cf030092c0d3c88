"""
Tests for double elimination bracket functionality.
"""
import pytest

from octomatch.bracket import DoubleEliminationBracket
from octomatch.double_elimination import (
    build_losers_skeleton,
    get_losers_round_name,
    losers_feed_rounds,
    losers_round_sizes,
)
from octomatch.elimination import build_single_elimination
from octomatch.models import IdSequence, MatchState


def names(match):
    return (match.p1.name if match.p1 else None, match.p2.name if match.p2 else None)


class TestLosersRoundName:
    """Tests for get_losers_round_name."""

    def test_losers_final(self):
        assert get_losers_round_name(4, 5) == "Losers Final"
        assert get_losers_round_name(0, 1) == "Losers Final"

    def test_losers_semifinal(self):
        assert get_losers_round_name(3, 5) == "Losers Semifinal"

    def test_losers_numbered_round(self):
        assert get_losers_round_name(0, 5) == "Losers Round 1"
        assert get_losers_round_name(2, 5) == "Losers Round 3"


class TestLosersSkeleton:
    """Tests for the shape of the losers bracket."""

    @pytest.mark.parametrize("n, expected", [
        (2, []),
        (3, [1]),
        (4, [1]),
        (5, [2, 1, 1]),
        (8, [2, 1, 1]),
        (16, [4, 2, 1, 1, 1]),
        (32, [8, 4, 2, 2, 1, 1, 1]),
    ])
    def test_round_sizes(self, roster_factory, n, expected):
        ids = IdSequence('m')
        winners = build_single_elimination(roster_factory(n), ids)
        losers = build_losers_skeleton(winners, ids)
        assert [len(r) for r in losers] == expected

    def test_sizes_from_winners_counts(self):
        assert losers_round_sizes([16, 8, 4, 2, 1]) == [8, 4, 2, 2, 1, 1, 1]
        assert losers_round_sizes([1]) == []

    def test_all_losers_matches_start_empty(self, roster_factory):
        ids = IdSequence('m')
        winners = build_single_elimination(roster_factory(8), ids)
        losers = build_losers_skeleton(winners, ids)
        for match in (m for r in losers for m in r):
            assert names(match) == (None, None)
            assert match.state is MatchState.UNSET

    def test_skeleton_is_reproducible(self, roster_factory):
        """Same winners depth, same shape and id layout."""
        first = DoubleEliminationBracket.build(roster_factory(11), IdSequence('m'))
        second = DoubleEliminationBracket.build(roster_factory(11), IdSequence('m'))
        assert [[m.id for m in r] for r in first.losers_rounds] == \
            [[m.id for m in r] for r in second.losers_rounds]

    def test_feed_rounds(self, roster_factory):
        winners = build_single_elimination(roster_factory(16), IdSequence('m'))
        assert losers_feed_rounds(winners) == [0, 1, 3]


class TestLoserDrop:
    """Tests for winners-bracket losers moving into the losers bracket."""

    @pytest.fixture
    def bracket(self, roster_factory):
        return DoubleEliminationBracket.build(roster_factory(8), IdSequence('m'))

    def _score(self, bracket, round_index, match_index, score1, score2):
        match = bracket.winners_rounds[round_index][match_index]
        return bracket.record_score(match.id, score1, score2)

    def _play_first_round(self, bracket):
        for index in range(4):
            self._score(bracket, 0, index, 2, 1)

    def test_first_round_losers_fill_losers_round_one(self, bracket):
        self._play_first_round(bracket)
        assert [names(m) for m in bracket.losers_rounds[0]] == [('H', 'E'), ('G', 'F')]

    def test_winners_still_advance(self, bracket):
        self._play_first_round(bracket)
        assert [names(m) for m in bracket.winners_rounds[1]] == [('A', 'D'), ('B', 'C')]

    def test_second_round_losers_drop_into_their_round(self, bracket):
        self._play_first_round(bracket)
        self._score(bracket, 1, 0, 1, 2)
        self._score(bracket, 1, 1, 2, 1)
        assert names(bracket.losers_rounds[1][0]) == ('A', 'C')
        # Consolidation round stays empty
        assert names(bracket.losers_rounds[2][0]) == (None, None)

    def test_final_loser_is_not_dropped(self, bracket):
        self._play_first_round(bracket)
        self._score(bracket, 1, 0, 2, 1)
        self._score(bracket, 1, 1, 2, 1)
        before = [names(m) for r in bracket.losers_rounds for m in r]
        self._score(bracket, 2, 0, 2, 1)
        assert [names(m) for r in bracket.losers_rounds for m in r] == before
        assert bracket.champion.name == 'A'

    def test_correction_replaces_dropped_loser(self, bracket):
        self._play_first_round(bracket)
        bracket.record_score(bracket.losers_rounds[0][0].id, 3, 0)

        self._score(bracket, 0, 0, 1, 3)   # H now beats A
        target = bracket.losers_rounds[0][0]
        assert names(target) == ('A', 'E')
        assert target.state is MatchState.UNSET

    def test_cascade_withdraws_downstream_losers(self, bracket):
        """A changed first-round result pulls the old semifinal loser back out."""
        self._play_first_round(bracket)
        self._score(bracket, 1, 0, 2, 1)   # A beats D, D drops
        self._score(bracket, 1, 1, 2, 1)   # B beats C, C drops
        assert names(bracket.losers_rounds[1][0]) == ('D', 'C')

        self._score(bracket, 0, 1, 1, 2)   # E now beats D
        semifinal = bracket.winners_rounds[1][0]
        assert names(semifinal) == ('A', 'E')
        assert semifinal.state is MatchState.UNSET
        assert names(bracket.losers_rounds[1][0]) == (None, 'C')
        assert names(bracket.losers_rounds[0][0]) == ('H', 'D')
        assert bracket.winners_rounds[2][0].p1 is None

    def test_losers_matches_do_not_advance(self, bracket):
        self._play_first_round(bracket)
        bracket.record_score(bracket.losers_rounds[0][0].id, 3, 0)
        bracket.record_score(bracket.losers_rounds[0][1].id, 3, 0)
        assert bracket.losers_rounds[0][0].winner.name == 'H'
        assert names(bracket.losers_rounds[1][0]) == (None, None)
