'''Candidate specifications and nomination validators.

Candidates are identified by positive integer ids that are dense and stable
for the lifetime of an election. A candidate can be deactivated but never
removed; only active candidates may be ranked on newly submitted ballots,
while ballots already counted keep their contribution.

The registry of candidates itself lives outside this library; a list of
:class:`Candidate` objects read from it is wrapped in a
:class:`RosterNominator` to validate the ids on incoming ballots.
'''

from __future__ import annotations

import abc
from typing import Any, Dict, Iterable, List, Optional

from pairtally.persist import simple_serialization


class CandidateError(Exception):
    '''A candidate is invalid in the given context.

    :param candidate: Candidate (or candidate id) that was found to be invalid.
    :param expected: Description of what was expected instead.
    '''
    def __init__(self, candidate: Any, expected: Any = None):
        self.candidate = candidate
        self.expected = expected
        message = f'invalid candidate: {candidate}'
        if expected:
            message += f', must be {expected}'
        super().__init__(message)


@simple_serialization
class Candidate:
    '''A candidate standing in the election.

    Candidates compare and hash by their id so that they can be matched
    against the ids used in ballots and tallies.

    :param id: Positive integer identifier of the candidate.
    :param name: Name of the candidate, in any customary text format.
    :param description: Free-form description shown to voters.
    :param active: Whether the candidate can be ranked on new ballots.
    '''
    def __init__(self,
                 id: int,
                 name: str = '',
                 description: str = '',
                 active: bool = True,
                 ):
        if isinstance(id, bool) or not isinstance(id, int) or id < 1:
            raise CandidateError(id, 'a positive integer id')
        self.id = id
        self.name = name
        self.description = description
        self.active = active

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Candidate):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return (
            f'<Candidate({self.id}'
            + (f',{self.name}' if self.name else '')
            + ('' if self.active else ',inactive')
            + ')>'
        )


class Nominator(metaclass=abc.ABCMeta):
    '''An abstract class for candidate validators.'''
    @abc.abstractmethod
    def validate(self, candidate_id: int) -> None:
        raise NotImplementedError

    def is_valid(self, candidate_id: int) -> bool:
        '''Return True if the candidate id can be ranked, False otherwise.'''
        try:
            self.validate(candidate_id)
        except CandidateError:
            return False
        return True


@simple_serialization
class BasicNominator(Nominator):
    '''Validate that candidate ids are technically valid.

    Accepts any positive integer; does not know which candidates exist.
    '''
    def validate(self, candidate_id: int) -> None:
        '''Check whether a candidate id is a positive integer.

        :param candidate_id: Candidate id to be checked.
        :raises CandidateError: If the id is not a positive integer.
        '''
        if (isinstance(candidate_id, bool)
                or not isinstance(candidate_id, int)
                or candidate_id < 1):
            raise CandidateError(candidate_id, 'a positive integer id')


@simple_serialization
class RosterNominator(Nominator):
    '''Validate that candidate ids refer to active candidates of an election.

    :param candidates: All candidates registered for the election, including
        inactive ones.
    '''
    def __init__(self, candidates: Iterable[Candidate]):
        self.candidates = list(candidates)
        self._by_id: Dict[int, Candidate] = {}
        for candidate in self.candidates:
            if candidate.id in self._by_id:
                raise CandidateError(candidate, 'a unique candidate id')
            self._by_id[candidate.id] = candidate

    def validate(self, candidate_id: int) -> None:
        '''Check whether a candidate id refers to an active candidate.

        :param candidate_id: Candidate id to be checked.
        :raises CandidateError: If the candidate is unknown or inactive.
        '''
        candidate = self._by_id.get(candidate_id)
        if candidate is None:
            raise CandidateError(candidate_id, 'a registered candidate')
        if not candidate.active:
            raise CandidateError(candidate_id, 'an active candidate')

    def get(self, candidate_id: int) -> Optional[Candidate]:
        '''Return the candidate with the given id, or None if unknown.'''
        return self._by_id.get(candidate_id)

    @property
    def ids(self) -> List[int]:
        '''Ids of all registered candidates (active or not), ascending.'''
        return sorted(self._by_id)
