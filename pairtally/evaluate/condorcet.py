'''Condorcet evaluators working on the pairwise tally.

The main evaluator is :class:`RankedPairs` (Tideman's method). It runs in
three stages that are also exposed separately for auditing:

1.  :func:`extract_pairs` decides every head-to-head comparison where the
    two directions of the tally differ, producing :class:`Pair` objects.
2.  :meth:`RankedPairs.order_pairs` sorts them by strength and
    :meth:`RankedPairs.lock_pairs` locks them into a directed graph, skipping
    every pair that would close a cycle with the pairs locked before it.
3.  :meth:`RankedPairs.resolve_order` sorts the locked graph topologically
    into the final ranking.

All ties in the process are broken by candidate id, so the result depends
only on the tally, not on the order in which ballots were counted.

:class:`CondorcetWinner` finds a candidate beating every other candidate
head-to-head, if there is one; ranked pairs always elects such a candidate.
'''

import collections
import logging
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

import pairtally.component.pairwin_scorer
from pairtally.evaluate.core import CycleInvariantViolated, FinalRanking, Pair
from pairtally.persist import simple_serialization

PairTally = Dict[Tuple[int, int], int]
Edge = Tuple[int, int]

logger = logging.getLogger(__name__)


def tallied_candidates(votes: PairTally) -> List[int]:
    '''Return ids of all candidates occurring in the tally, ascending.'''
    return sorted(frozenset(cand for pair in votes for cand in pair))


def pairwise_wins(votes: PairTally) -> List[Edge]:
    """Select pairs of candidates where the first is preferred to the second.

    :param votes: Pairwise tally.
    :returns: Ordered pairs from the tally that are preferred to the
        opposite ordering by more ballots.
    """
    wins = []
    for pair, count in votes.items():
        upper_cand, lower_cand = pair
        if upper_cand == lower_cand:
            continue
        anti_count = votes.get((lower_cand, upper_cand), 0)
        if anti_count < count:
            wins.append(pair)
    return sorted(wins)


def beat_counts(votes: PairTally) -> Dict[int, int]:
    """Count the number of candidates a given candidate beats pairwise.

    :param votes: Pairwise tally.
    """
    n_beats = collections.defaultdict(int)
    for winner, loser in pairwise_wins(votes):
        n_beats[winner] += 1
    return dict(n_beats)


def extract_pairs(votes: PairTally) -> List[Pair]:
    '''Decide all head-to-head comparisons in the tally.

    For every unordered pair of candidates, the direction preferred by more
    ballots gives the winner. Pairs with equal counts in both directions
    (including pairs nobody compared) are left out.

    :param votes: Pairwise tally.
    :returns: At most one pair per couple of candidates, ordered by the
        ``(winner, loser)`` ids.
    '''
    pairs = []
    candidates = tallied_candidates(votes)
    for i, first in enumerate(candidates):
        for second in candidates[i+1:]:
            forward = votes.get((first, second), 0)
            backward = votes.get((second, first), 0)
            if forward > backward:
                pairs.append(Pair(first, second, forward, backward,
                                  forward - backward))
            elif backward > forward:
                pairs.append(Pair(second, first, backward, forward,
                                  backward - forward))
    pairs.sort(key=lambda pair: (pair.winner, pair.loser))
    return pairs


@simple_serialization
class CondorcetWinner:
    """Condorcet winner selector.

    Selects a candidate that pairwise beats all other candidates, if there
    is one. A lone candidate is trivially the Condorcet winner.
    """
    def evaluate(self,
                 votes: PairTally,
                 candidates: Optional[Iterable[int]] = None,
                 ) -> Optional[int]:
        """Select the Condorcet winner.

        :param votes: Pairwise tally.
        :param candidates: Candidates standing in the election; all candidates
            in the tally are taken if not given.
        :returns: Id of the Condorcet winner, or None if there is none.
        """
        all_cands = set(tallied_candidates(votes))
        if candidates is not None:
            all_cands.update(candidates)
        if len(all_cands) == 1:
            return next(iter(all_cands))
        n_required_wins = len(all_cands) - 1
        for cand, n_beats in sorted(beat_counts(votes).items()):
            if n_beats == n_required_wins:
                return cand
        return None


@simple_serialization
class RankedPairs:
    '''Tideman's ranked pairs Condorcet evaluator.

    Ranks pairwise wins by their magnitude and sequentially locks them
    into a directed graph of who beats whom, strongest first, skipping pairs
    that would contradict the pairs locked before (i.e. create a cycle).
    The graph is then ordered topologically into the final ranking.

    Pairs of equal strength are ordered by the number of votes for the
    winner (descending), then by winner id and loser id (ascending).
    Candidates left unordered by the locked graph are ordered by id.

    :param pairwin_scoring: A pairwise win scorer callable measuring the
        strength of wins. Most common variants are found in the
        :mod:`pairtally.component.pairwin_scorer` module and can be referred
        to by their names; the default is ``margins``.
    '''
    def __init__(self,
                 pairwin_scoring: Union[str, Callable] = 'margins',
                 ):
        self.pairwin_scoring = pairtally.component.pairwin_scorer.construct(
            pairwin_scoring
        )

    def evaluate(self,
                 votes: PairTally,
                 candidates: Optional[Iterable[int]] = None,
                 ) -> FinalRanking:
        '''Rank the candidates by the ranked pairs method.

        :param votes: Pairwise tally. It is not modified.
        :param candidates: Candidates standing in the election. Those that
            do not win or lose any pair are ranked last by ascending id.
            All candidates in the tally are taken if not given.
        :returns: The final ranking with the pairs and locked edges behind it.
        '''
        all_cands = set(tallied_candidates(votes))
        if candidates is not None:
            all_cands.update(candidates)
        ordered = self.order_pairs(votes)
        locked = self.lock_pairs(ordered)
        order = self.resolve_order(locked, all_cands)
        logger.info('ranked pairs: %d pairs, %d locked, winner %s',
                    len(ordered), len(locked), order[0] if order else None)
        return FinalRanking(
            order=tuple(order),
            winner=(order[0] if order else None),
            pairs=tuple(ordered),
            locked=tuple(locked),
        )

    def order_pairs(self, votes: PairTally) -> List[Pair]:
        '''Return the decided pairs in the order they are to be locked.

        :param votes: Pairwise tally.
        '''
        scores = self.pairwin_scoring(votes)
        return sorted(
            extract_pairs(votes),
            key=lambda pair: (
                -scores.get((pair.winner, pair.loser), pair.margin),
                -pair.winner_votes,
                pair.winner,
                pair.loser,
            )
        )

    @classmethod
    def lock_pairs(cls, pairs: List[Pair]) -> List[Edge]:
        '''Lock pairs in the given order, skipping those closing a cycle.

        A pair is locked unless its loser already reaches its winner over
        the edges locked so far. Skipped pairs are never reconsidered.

        :param pairs: Pairs in locking order.
        :returns: Locked ``(winner, loser)`` edges in the order of locking.
        '''
        successors: Dict[int, Set[int]] = collections.defaultdict(set)
        locked = []
        for pair in pairs:
            if cls._is_path(successors, pair.loser, pair.winner):
                logger.debug('skipping %d > %d (margin %d): would close cycle',
                             pair.winner, pair.loser, pair.margin)
            else:
                successors[pair.winner].add(pair.loser)
                locked.append((pair.winner, pair.loser))
                logger.debug('locking %d > %d (margin %d)',
                             pair.winner, pair.loser, pair.margin)
        return locked

    @staticmethod
    def _is_path(successors: Dict[int, Set[int]],
                 source: int,
                 sink: int,
                 ) -> bool:
        if source == sink:
            return True
        visited = {source}
        stack = [source]
        while stack:
            for next_cand in successors.get(stack.pop(), ()):
                if next_cand == sink:
                    return True
                if next_cand not in visited:
                    visited.add(next_cand)
                    stack.append(next_cand)
        return False

    @staticmethod
    def resolve_order(locked: List[Edge],
                      candidates: Iterable[int] = (),
                      ) -> List[int]:
        '''Order the candidates by the locked edges.

        Repeatedly takes all remaining candidates not beaten by any other
        remaining candidate over a locked edge, in ascending id order.
        Candidates given but not touched by any locked edge go last,
        in ascending id order.

        :param locked: Locked ``(winner, loser)`` edges; must be acyclic.
        :param candidates: Further candidates to include in the ranking.
        :raises CycleInvariantViolated: If the locked edges contain a cycle.
        '''
        n_beaten_by = collections.defaultdict(int)
        successors = collections.defaultdict(list)
        for winner, loser in locked:
            successors[winner].append(loser)
            n_beaten_by[loser] += 1
            n_beaten_by[winner] += 0
        remaining = set(n_beaten_by)
        isolated = sorted(set(candidates).difference(remaining))
        ranking = []
        while remaining:
            sources = sorted(
                cand for cand in remaining if n_beaten_by[cand] == 0
            )
            if not sources:
                raise CycleInvariantViolated(sorted(remaining))
            for source in sources:
                ranking.append(source)
                remaining.discard(source)
                for loser in successors[source]:
                    n_beaten_by[loser] -= 1
        return ranking + isolated


EVALUATORS = {
    'rankedpairs_margins': RankedPairs(),
    'rankedpairs_winvotes': RankedPairs('winning_votes'),
    'rankedpairs_pwo': RankedPairs('pairwise_opposition'),
}
