'''Functions to score magnitudes of wins between pairs of candidates.

Ranked pairs orders the pairwise wins by one of these scores before locking
them. All scorers take the pairwise tally (counts of ballots preferring the
first candidate of the pair to the second) and return a score for each
ordered pair in it.
'''

from typing import Dict, Tuple

import pairtally.component.core


PairTally = Dict[Tuple[int, int], int]

PAIRWIN_SCORERS = {}


pairwin_scorer_mark, get, construct = \
    pairtally.component.core.register_functions(
        PAIRWIN_SCORERS, 'pairwise win scorer'
    )


@pairwin_scorer_mark
def margins(counts: PairTally) -> PairTally:
    '''Margins pairwise win scorer. Takes the difference from reverse option.

    Assigns the number of ballots ranking the pair in the given order minus
    the number doing the reverse as the win strength (which is thus negative
    for pairwise losses). This is the default ordering of ranked pairs.

    :param counts: Pairwise tally.
    '''
    return {
        pair: count - counts.get((pair[1], pair[0]), 0)
        for pair, count in counts.items()
    }


@pairwin_scorer_mark
def winning_votes(counts: PairTally) -> PairTally:
    '''Winning votes pairwise win scorer. Counts wins fully, zero otherwise.

    :param counts: Pairwise tally.
    '''
    return {
        pair: (count if count > counts.get((pair[1], pair[0]), 0) else 0)
        for pair, count in counts.items()
    }


@pairwin_scorer_mark
def pairwise_opposition(counts: PairTally) -> PairTally:
    '''Pairwise opposition win scorer. Returns the win counts unchanged.

    :param counts: Pairwise tally.
    '''
    return dict(counts)
