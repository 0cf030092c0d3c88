"""
Tournament session: the single owner of a roster and its current bracket.

All mutations from a front end go through one method per user action. Each
method validates everything first and raises ValidationError without
touching state, so an operation is either fully applied or not at all.
"""
import logging
from typing import Dict, List, Optional

from .bracket import (
    FORMAT_DOUBLE,
    FORMAT_ROUND_ROBIN,
    FORMAT_SINGLE,
    FORMATS,
    Bracket,
    DoubleEliminationBracket,
    RoundRobinBracket,
    SingleEliminationBracket,
)
from .config import get_default_settings
from .errors import SerializationError, ValidationError
from .models import IdSequence, Match, Participant
from .progression import parse_score
from .seeding import pair_balanced_teams, sort_by_score
from .serialization import bracket_from_dict, bracket_to_dict, roster_from_list, roster_to_list

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2


class Tournament:
    def __init__(self, name=None, settings=None):
        self.name = name
        self.settings = get_default_settings()
        if settings:
            self.settings.update(settings)
        self.participants: List[Participant] = []
        self.bracket: Optional[Bracket] = None
        self._participant_ids = IdSequence('p')
        self._match_ids = IdSequence('m')

    def __repr__(self):
        bracket_format = self.bracket.format if self.bracket else None
        return f"Tournament(name={self.name}, participants={len(self.participants)}, format={bracket_format})"

    # ---- roster -------------------------------------------------------

    def add_participant(self, name, score=None) -> Participant:
        name = name.strip() if isinstance(name, str) else ''
        if not name:
            raise ValidationError('Please enter a participant name.')
        score = parse_score(score)
        participant = Participant(self._participant_ids.next(), name, score)
        self.participants.append(participant)
        return participant

    def get_participant(self, participant_id) -> Participant:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        raise ValidationError(f"No participant with id {participant_id!r}.")

    def remove_participant(self, participant_id) -> Participant:
        """Take a participant off the roster. An existing bracket keeps referring to them."""
        participant = self.get_participant(participant_id)
        self.participants.remove(participant)
        return participant

    def update_participant_score(self, participant_id, score) -> Participant:
        participant = self.get_participant(participant_id)
        participant.score = parse_score(score)
        return participant

    def set_participant_category(self, participant_id, category) -> Participant:
        participant = self.get_participant(participant_id)
        participant.category = category
        return participant

    def clear_participants(self):
        """Empty the roster. The bracket goes with it."""
        self.participants = []
        self.bracket = None

    def smart_seed(self):
        """Reorder the roster by score so the next bracket is seeded by it."""
        self.participants = sort_by_score(self.participants)

    def ranked_participants(self) -> List[Participant]:
        return sort_by_score(self.participants)

    def balanced_teams(self):
        if len(self.participants) < MIN_PARTICIPANTS:
            raise ValidationError('Need at least 2 participants to form teams.')
        return pair_balanced_teams(self.participants)

    # ---- bracket ------------------------------------------------------

    def generate(self, bracket_format=None) -> Bracket:
        """Build a new bracket from the current roster, replacing any existing one."""
        bracket_format = bracket_format or self.settings.get('format') or FORMAT_SINGLE
        if bracket_format not in FORMATS:
            raise ValidationError(f"Unknown bracket format {bracket_format!r}; "
                                  f"choose one of {', '.join(FORMATS)}.")
        if len(self.participants) < MIN_PARTICIPANTS:
            raise ValidationError('Add at least 2 participants to create a bracket.')

        roster = list(self.participants)
        if self.settings.get('seed_by_score'):
            roster = sort_by_score(roster)

        if bracket_format == FORMAT_SINGLE:
            bracket = SingleEliminationBracket.build(
                roster, self._match_ids,
                third_place_enabled=bool(self.settings.get('third_place_match', True)))
        elif bracket_format == FORMAT_DOUBLE:
            bracket = DoubleEliminationBracket.build(roster, self._match_ids)
        else:
            bracket = RoundRobinBracket.build(roster, self._match_ids)

        self.bracket = bracket
        logger.info(f"Generated {bracket_format} bracket for {len(roster)} participants")
        return bracket

    def _require_bracket(self) -> Bracket:
        if self.bracket is None:
            raise ValidationError('No bracket has been generated.')
        return self.bracket

    def record_score(self, match_id, score1, score2) -> Match:
        """Enter (or correct) a match result and carry it through the bracket."""
        match = self._require_bracket().record_score(match_id, score1, score2)
        winner = match.winner.name if match.winner else None
        logger.info(f"Recorded {match.score1}-{match.score2} for {match.id}; winner: {winner}")
        return match

    def reset(self):
        """Discard the current bracket; the roster stays."""
        if self.bracket is not None:
            logger.info(f"Discarded {self.bracket.format} bracket")
        self.bracket = None

    # ---- read accessors -----------------------------------------------

    @property
    def format(self) -> Optional[str]:
        return self.bracket.format if self.bracket else None

    def find_match(self, match_id) -> Match:
        return self._require_bracket().find_match(match_id)

    def rounds(self) -> List[List[Match]]:
        """Main rounds: single elimination, round robin, or the winners bracket."""
        if self.bracket is None:
            return []
        if isinstance(self.bracket, DoubleEliminationBracket):
            return [list(r) for r in self.bracket.winners_rounds]
        return [list(r) for r in self.bracket.rounds]

    def losers_rounds(self) -> List[List[Match]]:
        if isinstance(self.bracket, DoubleEliminationBracket):
            return [list(r) for r in self.bracket.losers_rounds]
        return []

    def third_place_match(self) -> Optional[Match]:
        if isinstance(self.bracket, SingleEliminationBracket):
            return self.bracket.third_place
        return None

    def champion(self) -> Optional[Participant]:
        return self.bracket.champion if self.bracket else None

    def standings(self) -> List[Dict]:
        if self.bracket is None or self.bracket.format != FORMAT_ROUND_ROBIN:
            raise ValidationError('Standings are only available for round robin brackets.')
        return self.bracket.standings()

    # ---- export / import ----------------------------------------------

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'participants': roster_to_list(self.participants),
            'bracket': bracket_to_dict(self.bracket) if self.bracket else None,
            'nextIds': {
                'participant': self._participant_ids.peek,
                'match': self._match_ids.peek,
            },
        }

    @classmethod
    def from_dict(cls, data, settings=None) -> 'Tournament':
        if not isinstance(data, dict):
            raise SerializationError('Tournament data must be a mapping')
        tournament = cls(name=data.get('name'), settings=settings)
        tournament.participants = roster_from_list(data.get('participants') or [])

        next_ids = data.get('nextIds') or {}
        if not isinstance(next_ids, dict):
            raise SerializationError('nextIds must be a mapping')
        try:
            tournament._participant_ids = IdSequence('p', int(next_ids.get('participant', 1)))
            tournament._match_ids = IdSequence('m', int(next_ids.get('match', 1)))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Malformed nextIds: {e}") from e
        tournament._participant_ids.advance_past(p.id for p in tournament.participants)

        if data.get('bracket'):
            tournament.bracket = bracket_from_dict(
                data['bracket'], tournament._match_ids, roster=tournament.participants,
                third_place_enabled=bool(tournament.settings.get('third_place_match', True)))
            tournament._participant_ids.advance_past(p.id for p in tournament.bracket.entrants)
        return tournament

    def import_dict(self, data):
        """Replace this session's roster and bracket with exported data."""
        imported = Tournament.from_dict(data, settings=self.settings)
        self.name = imported.name
        self.participants = imported.participants
        self.bracket = imported.bracket
        self._participant_ids = imported._participant_ids
        self._match_ids = imported._match_ids
