"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the exhaustive roster-size sweeps
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from octomatch.models import IdSequence, Participant
from octomatch.tournament import Tournament


def make_roster(count, with_scores=False):
    """Participants named A, B, C, ... (P27, P28, ... past Z) in seed order."""
    roster = []
    for i in range(count):
        name = chr(ord('A') + i) if i < 26 else f"P{i + 1}"
        score = (count - i) * 2 if with_scores else None
        roster.append(Participant(id=f"p{i + 1}", name=name, score=score))
    return roster


@pytest.fixture
def match_ids():
    return IdSequence('m')


@pytest.fixture
def roster_factory():
    return make_roster


@pytest.fixture
def scored_tournament():
    """Roster [A:10, B:8, C:6, D:4], already in score order."""
    tournament = Tournament(name='Club Night')
    for name, score in (('A', 10), ('B', 8), ('C', 6), ('D', 4)):
        tournament.add_participant(name, score)
    return tournament


@pytest.fixture
def tournament_factory():
    """Build a tournament with `count` participants named A, B, C, ..."""
    def factory(count, settings=None):
        tournament = Tournament(settings=settings)
        for participant in make_roster(count):
            tournament.add_participant(participant.name, participant.score)
        return tournament
    return factory

