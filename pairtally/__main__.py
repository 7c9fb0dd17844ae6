"""A commandline tool to evaluate a ranked pairs election from a JSON file.

Loads the candidates and ballots of an election, counts the pairwise tally
and prints the final ranking, optionally with the decided pairs in locking
order or as a JSON result.
"""

import argparse
import io
import json
import logging
import sys
import warnings
from typing import Optional

import pairtally.evaluate.condorcet
import pairtally.io.jsonfile
import pairtally.persist
from pairtally.election import Election
from pairtally.evaluate.core import FinalRanking

argparser = argparse.ArgumentParser(
    prog='pairtally',
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='JSON election file to load candidates and ballots from',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='load the election file from standard input',
)
argparser.add_argument(
    '-s', '--system',
    default='rankedpairs_margins',
    choices=sorted(pairtally.evaluate.condorcet.EVALUATORS.keys()),
    help='ranked pairs variant (strength measure of pairwise wins)',
)
argparser.add_argument(
    '-D', '--allow-duplicates',
    action='store_true',
    help='accept ballots ranking a candidate more than once',
)
argparser.add_argument(
    '-p', '--show-pairs',
    action='store_true',
    help='show the decided pairs in locking order',
)
argparser.add_argument(
    '-j', '--json',
    dest='as_json',
    action='store_true',
    help='print the result as JSON',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all evaluator log messages and other info',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any evaluator log messages or other info',
)


def main(input_file: Optional[io.TextIOBase] = None,
         use_stdin: bool = False,
         system: str = 'rankedpairs_margins',
         allow_duplicates: bool = False,
         show_pairs: bool = False,
         as_json: bool = False,
         verbose: bool = False,
         quiet: bool = False,
         ) -> Optional[FinalRanking]:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    data = pairtally.io.jsonfile.load(input_file)
    if not data.ballots:
        warnings.warn('no ballots: cannot evaluate election, terminating')
        return None
    election = Election.from_source(
        data.source(),
        evaluator=pairtally.evaluate.condorcet.EVALUATORS[system],
        allow_duplicates=allow_duplicates,
    )
    result = election.tally()
    if as_json:
        show_json(result)
    else:
        if data.name:
            print(f'Election: {data.name}')
        print(f'Counted {election.store.total_rankers} ballots'
              f' for {len(election.candidates)} candidates')
        print()
        if show_pairs:
            show_pairs_in_order(result)
            print()
        show_ranking(election, result)
    return result


def show_ranking(election: Election, result: FinalRanking) -> None:
    """Show the final order of candidates, winner first."""
    if not result.order:
        print('Nobody ranked')
        return
    n_just_chars = len(str(len(result.order)))
    for i, cand_id in enumerate(result.order, start=1):
        cand = election.candidate(cand_id)
        label = cand.name if cand is not None and cand.name else ''
        print(str(i).rjust(n_just_chars), ' ', cand_id, label)
    print()
    print('Winner:', result.winner)


def show_pairs_in_order(result: FinalRanking) -> None:
    """Show decided pairs in the order they were considered for locking."""
    locked = frozenset(result.locked)
    for pair in result.pairs:
        status = (
            'locked' if (pair.winner, pair.loser) in locked else 'skipped'
        )
        print(f'{pair.winner} > {pair.loser}'
              f' ({pair.winner_votes}:{pair.loser_votes},'
              f' margin {pair.margin}) {status}')


def show_json(result: FinalRanking) -> None:
    """Print the result as a JSON object."""
    print(json.dumps(pairtally.persist.to_dict(result)))


if __name__ == '__main__':
    args = argparser.parse_args()
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        main(**vars(args))
