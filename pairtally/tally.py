'''Incrementally maintained pairwise tally of ranked ballots.

The :class:`PairwiseTallyStore` keeps, for every ordered pair of candidates
``(a, b)``, the number of currently submitted ballots that rank both ``a``
and ``b`` and place ``a`` strictly above ``b``. Candidates tied on a ballot
or missing from it do not count for the pair.

Each voter holds at most one ballot. Submitting a new ballot for a voter
replaces the old one: its contribution is retracted and the new one applied
in a single step under the store lock, so no reader ever sees a tally with
the ballot counted twice or not at all. The tally thus always equals a count
made from scratch over the current ballots (see :meth:`recount`).

The store does not verify voter identities or eligibility; that is up to
its caller.
'''

import collections
import dataclasses
import itertools
import logging
import threading
from typing import Any, Dict, Hashable, List, Optional, Tuple

import pairtally.evaluate.condorcet
from pairtally.candidate import CandidateError, RosterNominator
from pairtally.vote import (
    Ballot, RankAssignment, RankedBallotValidator, UNRANKED
)
import pairtally.vote

PairTally = Dict[Tuple[int, int], int]

logger = logging.getLogger(__name__)


class InconsistentState(Exception):
    '''The store was asked to do something its contents do not allow.

    E.g. retracting the ballot of a voter that has not submitted one.

    :param voter: Key of the voter concerned.
    '''
    def __init__(self, voter: Hashable, message: str):
        self.voter = voter
        super().__init__(f'{message}: {voter!r}')


@dataclasses.dataclass(frozen=True)
class RankingStats:
    """Summary counts of a tally store."""
    total_rankers: int
    total_comparisons: int
    candidate_count: int


def ballot_pairs(ranks: RankAssignment):
    '''Yield ordered candidate pairs strictly preferred on one ballot.

    :param ranks: Rank values of the ballot.
    '''
    for upper, lower in itertools.permutations(ranks.items(), 2):
        if lower[1] != UNRANKED and upper[1] > lower[1]:
            yield upper[0], lower[0]


class PairwiseTallyStore:
    '''A pairwise tally kept up to date as voters submit and retract ballots.

    :param validator: Validator checking every ballot before it is counted.
        To admit only active candidates of an election, give it a
        :class:`pairtally.candidate.RosterNominator`; see
        :meth:`for_candidates`.
    '''
    def __init__(self,
                 validator: Optional[RankedBallotValidator] = None,
                 ):
        if validator is None:
            validator = RankedBallotValidator()
        self.validator = validator
        self._lock = threading.RLock()
        self._tally: PairTally = collections.defaultdict(int)
        self._ballots: Dict[Hashable, Ballot] = {}
        self._ranks: Dict[Hashable, RankAssignment] = {}

    @classmethod
    def for_candidates(cls,
                       candidates: List[Any],
                       allow_duplicates: bool = False,
                       ) -> 'PairwiseTallyStore':
        '''Create a store admitting only the active candidates given.

        :param candidates: Candidates of the election
            (:class:`pairtally.candidate.Candidate` objects).
        :param allow_duplicates: Whether to accept ballots listing a candidate
            more than once.
        '''
        return cls(RankedBallotValidator(
            RosterNominator(candidates), allow_duplicates=allow_duplicates
        ))

    def submit(self,
               voter: Hashable,
               ballot: Ballot,
               check_candidates: bool = True,
               ) -> None:
        '''Count a voter's ballot, replacing their previous one if any.

        The ballot is validated first; an invalid ballot is rejected as a
        whole and the store stays unchanged.

        :param voter: Key identifying the voter (address, nullifier...).
        :param ballot: Ranking entries in order of preference.
        :param check_candidates: Whether to check that the ranked candidates
            are eligible; turned off to replay ballots accepted earlier.
        :raises pairtally.vote.VoteError: If the ballot is invalid.
        '''
        ballot = tuple(ballot)
        ranks = self.validator.ranks(ballot, check_candidates=check_candidates)
        with self._lock:
            if voter in self._ranks:
                self._retract_ranks(self._ranks[voter])
                logger.debug('replacing ballot of %r', voter)
            self._ballots[voter] = ballot
            self._ranks[voter] = ranks
            for pair in ballot_pairs(ranks):
                self._tally[pair] += 1
        logger.debug('counted ballot of %r ranking %d candidates',
                     voter, len(ranks))

    def retract(self, voter: Hashable) -> Ballot:
        '''Remove a voter's ballot from the tally.

        :param voter: Key identifying the voter.
        :returns: The retracted ballot.
        :raises InconsistentState: If the voter has no ballot counted.
        '''
        with self._lock:
            if voter not in self._ranks:
                raise InconsistentState(voter, 'no ballot to retract for')
            self._retract_ranks(self._ranks[voter])
            del self._ranks[voter]
            ballot = self._ballots.pop(voter)
        logger.debug('retracted ballot of %r', voter)
        return ballot

    def _retract_ranks(self, ranks: RankAssignment) -> None:
        # all counts are checked before any is written
        remaining = {}
        for pair in ballot_pairs(ranks):
            remaining[pair] = self._tally.get(pair, 0) - 1
            if remaining[pair] < 0:
                raise InconsistentState(pair, 'tally drops below zero for')
        for pair, count in remaining.items():
            if count == 0:
                del self._tally[pair]
            else:
                self._tally[pair] = count

    def pairwise_count(self, first: int, second: int) -> int:
        '''Return the number of ballots preferring first to second.'''
        with self._lock:
            return self._tally.get((first, second), 0)

    def snapshot(self) -> PairTally:
        '''Return a consistent copy of the current tally.

        Pairs with zero count are left out.
        '''
        with self._lock:
            return dict(self._tally)

    def recount(self) -> PairTally:
        '''Count the current ballots from scratch.

        Must always equal :meth:`snapshot`; provided for auditing.
        '''
        counts = collections.defaultdict(int)
        with self._lock:
            for ranks in self._ranks.values():
                for pair in ballot_pairs(ranks):
                    counts[pair] += 1
        return dict(counts)

    def ballot(self, voter: Hashable) -> Optional[Ballot]:
        '''Return the ballot counted for the voter, None if there is none.'''
        with self._lock:
            return self._ballots.get(voter)

    def candidate_rank(self, voter: Hashable, candidate: int) -> int:
        '''Return the rank value the voter gave to the candidate.

        Zero means the candidate is not ranked (or the voter has no ballot).
        '''
        with self._lock:
            return self._ranks.get(voter, {}).get(candidate, UNRANKED)

    def preference(self, voter: Hashable, first: int, second: int) -> int:
        '''Return 1, -1 or 0 by the voter's preference between two candidates.

        See :func:`pairtally.vote.preference`.
        '''
        with self._lock:
            ranks = self._ranks.get(voter, {})
            return pairtally.vote.preference(ranks, first, second)

    @property
    def voters(self) -> List[Hashable]:
        '''Keys of voters with a ballot counted, in order of first submission.

        A voter that retracted and submitted again counts as new.
        '''
        with self._lock:
            return list(self._ballots)

    @property
    def total_rankers(self) -> int:
        '''Number of voters with a ballot counted.'''
        with self._lock:
            return len(self._ballots)

    @property
    def candidates(self) -> List[int]:
        '''Ids of candidates the store knows of, ascending.

        These are the registered candidates if the validator uses a
        :class:`pairtally.candidate.RosterNominator`, otherwise all candidates
        ranked on any current ballot.
        '''
        nominator = self.validator.nominator
        if isinstance(nominator, RosterNominator):
            return nominator.ids
        with self._lock:
            return sorted(frozenset(
                cand for ranks in self._ranks.values() for cand in ranks
            ))

    def stats(self) -> RankingStats:
        '''Return summary counts of the store.'''
        with self._lock:
            return RankingStats(
                total_rankers=len(self._ballots),
                total_comparisons=sum(self._tally.values()),
                candidate_count=len(self.candidates),
            )

    def comparison_matrix(self) -> List[List[int]]:
        '''Return the tally as a dense matrix indexed by candidate id.

        ``matrix[a][b]`` is the number of ballots preferring ``a`` to ``b``.
        Row and column zero are unused since candidate ids start at one.
        '''
        with self._lock:
            tally = dict(self._tally)
            candidates = self.candidates
        size = max(candidates + [cand for pair in tally for cand in pair],
                   default=0) + 1
        matrix = [[0] * size for _ in range(size)]
        for (first, second), count in tally.items():
            matrix[first][second] = count
        return matrix

    def win_count(self, candidate: int) -> int:
        '''Return the number of candidates beaten head-to-head by one.

        :raises pairtally.candidate.CandidateError: If the candidate is not
            known to the store.
        '''
        if candidate not in self.candidates:
            raise CandidateError(candidate, 'a known candidate')
        return pairtally.evaluate.condorcet.beat_counts(
            self.snapshot()
        ).get(candidate, 0)

    def condorcet_winner(self) -> Optional[int]:
        '''Return the candidate beating all others head-to-head, if any.'''
        with self._lock:
            tally = dict(self._tally)
            candidates = self.candidates
        return pairtally.evaluate.condorcet.CondorcetWinner().evaluate(
            tally, candidates
        )
