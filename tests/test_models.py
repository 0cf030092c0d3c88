"""
Unit tests for the data models (Participant, Match, IdSequence).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from octomatch.models import DEFAULT_CATEGORY, IdSequence, Match, MatchState, Participant


class TestParticipant:
    """Tests for the Participant model."""

    def test_participant_creation_with_name(self):
        """Test creating a participant with just an id and name."""
        participant = Participant(id="p1", name="Alice")
        assert participant.name == "Alice"
        assert participant.score is None
        assert participant.category == DEFAULT_CATEGORY

    def test_participant_id_is_read_only(self):
        """The id is assigned once and cannot be reassigned."""
        participant = Participant(id="p1", name="Alice")
        with pytest.raises(AttributeError):
            participant.id = "p2"

    def test_participants_compare_by_id(self):
        """Two objects with the same id are the same participant."""
        assert Participant("p1", "Alice") == Participant("p1", "Alice (renamed)")
        assert Participant("p1", "Alice") != Participant("p2", "Alice")
        assert len({Participant("p1", "A"), Participant("p1", "A")}) == 1

    def test_participant_repr(self):
        """Test participant string representation."""
        repr_str = repr(Participant(id="p3", name="Carol", score=7))
        assert "Carol" in repr_str
        assert "p3" in repr_str


class TestMatch:
    """Tests for the Match model."""

    def test_new_match_is_unset(self):
        match = Match("m1")
        assert match.state is MatchState.UNSET
        assert match.winner is None
        assert match.loser is None
        assert match.score1 is None and match.score2 is None
        assert not match.is_ready

    def test_ready_needs_both_slots(self):
        alice, bob = Participant("p1", "Alice"), Participant("p2", "Bob")
        assert not Match("m1", alice).is_ready
        assert Match("m1", alice, bob).is_ready

    def test_set_result_marks_decided(self):
        alice, bob = Participant("p1", "Alice"), Participant("p2", "Bob")
        match = Match("m1", alice, bob)
        match.set_result(alice, bob)
        assert match.state is MatchState.DECIDED
        assert match.is_decided

    def test_clear_result_returns_previous(self):
        """Clearing drops scores and decision and reports what was there."""
        alice, bob = Participant("p1", "Alice"), Participant("p2", "Bob")
        match = Match("m1", alice, bob)
        match.score1, match.score2 = 3, 1
        match.set_result(alice, bob)

        assert match.clear_result() == (alice, bob)
        assert match.state is MatchState.UNSET
        assert match.score1 is None and match.score2 is None
        # Slots are untouched
        assert match.occupants() == [alice, bob]

    def test_match_repr(self):
        match = Match("m9", Participant("p1", "Alice"))
        repr_str = repr(match)
        assert "m9" in repr_str
        assert "Alice" in repr_str
        assert "unset" in repr_str


class TestIdSequence:
    """Tests for session-scoped id issuing."""

    def test_ids_are_monotonic(self):
        ids = IdSequence('m')
        assert [ids.next() for _ in range(3)] == ['m1', 'm2', 'm3']

    def test_advance_past_existing_ids(self):
        """Loaded ids are never issued again."""
        ids = IdSequence('p')
        ids.advance_past(['p2', 'p10', 'x99', 'pz', None])
        assert ids.next() == 'p11'

    def test_advance_past_never_moves_backwards(self):
        ids = IdSequence('m', start=20)
        ids.advance_past(['m3'])
        assert ids.peek == 20
