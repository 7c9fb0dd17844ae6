'''Elections: a tally store tied to its candidates and its evaluator.

An :class:`Election` keeps the :class:`pairtally.tally.PairwiseTallyStore` of
one election together with the candidates standing in it, accepts ballot
submissions and retractions, and evaluates the current tally by ranked pairs
on request.

Elections whose ballots are kept elsewhere (a ledger, a database, a file)
are loaded through the :class:`BallotSource` interface with
:meth:`Election.from_source`. Verifying that each ballot comes from an
eligible, unique voter is the job of the source, not of this library.
'''

import abc
import logging
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple

import pairtally.convert
import pairtally.evaluate.condorcet
from pairtally.candidate import Candidate
from pairtally.evaluate.core import FinalRanking, Pair
from pairtally.tally import PairwiseTallyStore
from pairtally.vote import Ballot

logger = logging.getLogger(__name__)


class BallotSource(metaclass=abc.ABCMeta):
    '''Read-only access to the candidates and ballots of an election.'''

    @abc.abstractmethod
    def get_candidates(self) -> List[Candidate]:
        '''Return all candidates registered for the election.'''
        raise NotImplementedError

    @abc.abstractmethod
    def get_ballot_identities(self) -> List[Hashable]:
        '''Return keys of all voters that have submitted a ballot.'''
        raise NotImplementedError

    @abc.abstractmethod
    def get_ballot(self, identity: Hashable) -> Iterable[Any]:
        '''Return the ballot of a voter, in any shape known to
        :class:`pairtally.convert.AnyRankingConverter`.'''
        raise NotImplementedError


class StaticBallotSource(BallotSource):
    '''A ballot source over candidates and ballots held in memory.

    :param candidates: Candidates of the election.
    :param ballots: Ballots keyed by voter, in insertion order.
    '''
    def __init__(self,
                 candidates: List[Candidate],
                 ballots: Dict[Hashable, Iterable[Any]],
                 ):
        self.candidates = list(candidates)
        self.ballots = dict(ballots)

    def get_candidates(self) -> List[Candidate]:
        return list(self.candidates)

    def get_ballot_identities(self) -> List[Hashable]:
        return list(self.ballots)

    def get_ballot(self, identity: Hashable) -> Iterable[Any]:
        return self.ballots[identity]


class Election:
    '''A ranked pairs election over a fixed set of candidates.

    :param candidates: Candidates registered for the election. Only the
        active ones can be ranked on submitted ballots.
    :param evaluator: Evaluator of the tally; ranked pairs ordered by
        margins by default.
    :param allow_duplicates: Whether to accept ballots listing a candidate
        more than once.
    '''
    def __init__(self,
                 candidates: List[Candidate],
                 evaluator: Optional[
                     pairtally.evaluate.condorcet.RankedPairs
                 ] = None,
                 allow_duplicates: bool = False,
                 ):
        self.candidates = list(candidates)
        if evaluator is None:
            evaluator = pairtally.evaluate.condorcet.RankedPairs()
        self.evaluator = evaluator
        self.store = PairwiseTallyStore.for_candidates(
            self.candidates, allow_duplicates=allow_duplicates
        )

    @classmethod
    def from_source(cls,
                    source: BallotSource,
                    evaluator: Optional[
                        pairtally.evaluate.condorcet.RankedPairs
                    ] = None,
                    allow_duplicates: bool = False,
                    ) -> 'Election':
        '''Load an election with all ballots from a ballot source.

        The ballots are taken as accepted by the source: candidates that
        were deactivated since do not invalidate them.

        :param source: Source of candidates and ballots.
        :param evaluator: Evaluator of the tally.
        :param allow_duplicates: Whether to accept ballots listing
            a candidate more than once.
        :raises pairtally.vote.VoteError: If a ballot is malformed.
        '''
        election = cls(source.get_candidates(), evaluator, allow_duplicates)
        converter = pairtally.convert.AnyRankingConverter()
        identities = source.get_ballot_identities()
        for identity in identities:
            election.store.submit(
                identity,
                converter.convert(source.get_ballot(identity)),
                check_candidates=False,
            )
        logger.info('loaded %d ballots for %d candidates',
                    len(identities), len(election.candidates))
        return election

    def submit(self, voter: Hashable, ranking: Iterable[Any]) -> None:
        '''Count a voter's ballot, replacing any previous one.

        :param voter: Key identifying the voter.
        :param ranking: The ballot, as ranking entries or any other shape
            known to :class:`pairtally.convert.AnyRankingConverter`.
        :raises pairtally.vote.VoteError: If the ballot is invalid.
        '''
        self.store.submit(
            voter, pairtally.convert.AnyRankingConverter().convert(ranking)
        )

    def retract(self, voter: Hashable) -> Ballot:
        '''Remove a voter's ballot.

        :raises pairtally.tally.InconsistentState: If the voter has no ballot.
        '''
        return self.store.retract(voter)

    @property
    def active_candidates(self) -> List[int]:
        '''Ids of candidates that can currently be ranked, ascending.'''
        return sorted(cand.id for cand in self.candidates if cand.active)

    def tally(self) -> FinalRanking:
        '''Evaluate a snapshot of the current tally.

        Active candidates not winning or losing any pair are ranked last.
        '''
        return self.evaluator.evaluate(
            self.store.snapshot(), self.active_candidates
        )

    def pairwise_count(self, first: int, second: int) -> int:
        '''Return the number of ballots preferring first to second.'''
        return self.store.pairwise_count(first, second)

    def locked_edges(self) -> List[Tuple[int, int]]:
        '''Return the ``(winner, loser)`` edges locked by the evaluation.'''
        return list(self.tally().locked)

    def ranked_pairs_in_order(self) -> List[Pair]:
        '''Return all decided pairs in the order they were considered.'''
        return list(self.tally().pairs)

    def candidate(self, candidate_id: int) -> Optional[Candidate]:
        '''Return the registered candidate with the given id, if any.'''
        for cand in self.candidates:
            if cand.id == candidate_id:
                return cand
        return None
