'''General evaluator machinery: result types and errors.'''

from __future__ import annotations

import dataclasses
from typing import List, Optional, Tuple

from pairtally.persist import simple_serialization


__all__ = [
    'VotingSystemError', 'CycleInvariantViolated', 'Pair', 'FinalRanking',
]


class VotingSystemError(Exception):
    '''A voting system with a valid setup ended up in an unresolvable state.'''
    pass


class CycleInvariantViolated(VotingSystemError):
    '''The locked pairs of a ranked pairs evaluation contain a cycle.

    This signals a defect in the evaluator, never a property of the votes.

    :param candidates: Candidates left unordered because they lie on or
        below the cycle.
    '''
    def __init__(self, candidates: List[int]):
        self.candidates = candidates
        super().__init__(
            f'locked pairs contain a cycle among candidates {candidates}'
        )


@simple_serialization
@dataclasses.dataclass(frozen=True)
class Pair:
    '''A decided head-to-head comparison of two candidates.

    :param winner: Id of the candidate preferred by more ballots.
    :param loser: Id of the other candidate.
    :param winner_votes: Number of ballots preferring the winner.
    :param loser_votes: Number of ballots preferring the loser.
    :param margin: Difference between the two.
    '''
    winner: int
    loser: int
    winner_votes: int
    loser_votes: int
    margin: int


@simple_serialization
@dataclasses.dataclass(frozen=True)
class FinalRanking:
    '''Result of a ranked pairs evaluation.

    :param order: All candidates from the winner down.
    :param winner: The first candidate of the order, None if there is none.
    :param pairs: All decided pairs in the order they were considered for
        locking.
    :param locked: Locked ``(winner, loser)`` edges in the order they were
        locked.
    '''
    order: Tuple[int, ...]
    winner: Optional[int] = None
    pairs: Tuple[Pair, ...] = ()
    locked: Tuple[Tuple[int, int], ...] = ()

    @property
    def skipped(self) -> Tuple[Pair, ...]:
        '''Pairs that were not locked because they would create a cycle.'''
        locked = frozenset(self.locked)
        return tuple(
            pair for pair in self.pairs
            if (pair.winner, pair.loser) not in locked
        )
