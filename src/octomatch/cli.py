#!/usr/bin/env python3
"""
Command line front end for the bracket engine.

The session lives in a YAML state file between invocations.

Usage:
    octomatch add "Alice" --score 10
    octomatch generate --format double
    octomatch score m3 21 18
    octomatch show

Exit codes:
    0: Success
    1: Request rejected (validation error, unreadable state, lock timeout)
"""
import argparse
import logging
import os
import sys
from contextlib import contextmanager

from filelock import FileLock, Timeout

from .bracket import FORMAT_DOUBLE, FORMAT_ROUND_ROBIN, FORMATS
from .config import load_settings
from .double_elimination import get_losers_round_name
from .errors import TournamentError
from .seeding import get_round_name
from .serialization import dump_json, dump_yaml, load_json, load_yaml
from .tournament import Tournament

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10


def load_state(path, settings) -> Tournament:
    """Load the session from the state file, or start a new one."""
    if not os.path.exists(path):
        return Tournament(settings=settings)
    return Tournament.from_dict(load_yaml(path), settings=settings)


def save_state(tournament, path):
    dump_yaml(tournament.to_dict(), path)


@contextmanager
def open_session(path, settings, save=True):
    """
    Hold the state file lock for a whole read-modify-write. The state is only
    written back when the body finishes without raising.
    """
    with FileLock(path + '.lock', timeout=LOCK_TIMEOUT_SECONDS):
        tournament = load_state(path, settings)
        yield tournament
        if save:
            save_state(tournament, path)


def _name(participant):
    return participant.name if participant is not None else '(empty)'


def _format_score(value):
    return '' if value is None else str(value)


def format_match(match) -> str:
    if match.is_bye:
        return f"{match.id}: {_name(match.occupants()[0])} - BYE"
    line = f"{match.id}: {_name(match.p1)} vs {_name(match.p2)}"
    if match.score1 is not None or match.score2 is not None:
        line += f"  [{_format_score(match.score1)}-{_format_score(match.score2)}]"
    if match.winner is not None:
        line += f"  -> {match.winner.name}"
    return line


def print_bracket(tournament):
    bracket_format = tournament.format
    if bracket_format is None:
        print("No bracket generated.")
        return

    rounds = tournament.rounds()
    if bracket_format == FORMAT_DOUBLE:
        losers = tournament.losers_rounds()
        sections = [
            ('Winners ' + get_round_name(len(r)), r) for r in rounds
        ] + [
            (get_losers_round_name(i, len(losers)), r) for i, r in enumerate(losers)
        ]
    elif bracket_format == FORMAT_ROUND_ROBIN:
        sections = [(f"Round {i + 1}", r) for i, r in enumerate(rounds)]
    else:
        sections = [(get_round_name(len(r)), r) for r in rounds]

    first = True
    for title, matches in sections:
        if not first:
            print()
        print(f"# {title}")
        for match in matches:
            print(f"  {format_match(match)}")
        first = False

    third_place = tournament.third_place_match()
    if third_place is not None:
        print("\n# Third Place")
        print(f"  {format_match(third_place)}")

    if bracket_format == FORMAT_ROUND_ROBIN:
        print("\n# Standings")
        for rank, entry in enumerate(tournament.standings(), start=1):
            print(f"  {rank}. {entry['participant'].name}: {entry['wins']}W {entry['losses']}L "
                  f"({entry['point_diff']:+})")
    elif tournament.champion() is not None:
        print(f"\nChampion: {tournament.champion().name}")


def cmd_add(args, tournament):
    participant = tournament.add_participant(args.name, args.score)
    print(f"Added {participant.name} ({participant.id})")


def cmd_remove(args, tournament):
    participant = tournament.remove_participant(args.participant_id)
    print(f"Removed {participant.name} ({participant.id})")


def cmd_roster(args, tournament):
    if not tournament.participants:
        print("No participants.")
        return
    for rank, participant in enumerate(tournament.ranked_participants(), start=1):
        print(f"{rank}. {participant.name} ({participant.id})  "
              f"score={_format_score(participant.score) or 'N/A'}  {participant.category}")


def cmd_seed(args, tournament):
    tournament.smart_seed()
    print("Participants sorted by score. A new bracket will use this order.")


def cmd_teams(args, tournament):
    for number, (first, second) in enumerate(tournament.balanced_teams(), start=1):
        partner = f" + {second.name}" if second is not None else " (with a bye)"
        print(f"Team {number}: {first.name}{partner}")


def cmd_generate(args, tournament):
    tournament.generate(args.format)
    print_bracket(tournament)


def cmd_score(args, tournament):
    match = tournament.record_score(args.match_id, args.score1, args.score2)
    print(format_match(match))


def cmd_show(args, tournament):
    print_bracket(tournament)


def cmd_reset(args, tournament):
    tournament.reset()
    print("Bracket cleared.")


def cmd_export(args, tournament):
    if args.path.endswith('.json'):
        dump_json(tournament.to_dict(), args.path)
    else:
        dump_yaml(tournament.to_dict(), args.path)
    print(f"Exported to {args.path}")


def cmd_import(args, tournament):
    data = load_json(args.path) if args.path.endswith('.json') else load_yaml(args.path)
    tournament.import_dict(data)
    print(f"Imported {len(tournament.participants)} participants from {args.path}")


# command name -> (handler, writes state)
COMMANDS = {
    'add': (cmd_add, True),
    'remove': (cmd_remove, True),
    'roster': (cmd_roster, False),
    'seed': (cmd_seed, True),
    'teams': (cmd_teams, False),
    'generate': (cmd_generate, True),
    'score': (cmd_score, True),
    'show': (cmd_show, False),
    'reset': (cmd_reset, True),
    'export': (cmd_export, False),
    'import': (cmd_import, True),
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog='octomatch',
        description='Generate tournament brackets and track match results'
    )
    parser.add_argument('--state', help='State file (default: state_file setting)')
    parser.add_argument('--config', help='Settings YAML file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('add', help='Add a participant')
    p.add_argument('name')
    p.add_argument('--score', help='Optional ranking score')

    p = sub.add_parser('remove', help='Remove a participant by id')
    p.add_argument('participant_id')

    sub.add_parser('roster', help='List participants ranked by score')
    sub.add_parser('seed', help='Sort the roster by score')
    sub.add_parser('teams', help='Print balanced two-person teams')

    p = sub.add_parser('generate', help='Generate a new bracket')
    p.add_argument('--format', choices=FORMATS, help='Bracket format (default: format setting)')

    p = sub.add_parser('score', help='Record the score of a match')
    p.add_argument('match_id')
    p.add_argument('score1')
    p.add_argument('score2')

    sub.add_parser('show', help='Print the current bracket')
    sub.add_parser('reset', help='Discard the current bracket')

    p = sub.add_parser('export', help='Write the session to a .json or .yaml file')
    p.add_argument('path')

    p = sub.add_parser('import', help='Replace the session with an exported file')
    p.add_argument('path')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)

    level = 'DEBUG' if args.verbose else str(settings.get('log_level', 'WARNING')).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    state_path = args.state or settings['state_file']
    handler, writes = COMMANDS[args.command]
    try:
        with open_session(state_path, settings, save=writes) as tournament:
            handler(args, tournament)
    except Timeout:
        print(f"Error: {state_path} is locked by another process.", file=sys.stderr)
        return 1
    except TournamentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
