'''Ranked ballots, their rank values and the ballot validator.

A ballot is a non-empty tuple of :class:`RankingEntry` objects, listing
candidate ids from the most to the least preferred. An entry marked as
``tied_with_previous`` shares its rank with the entry before it, so the ballot
``(1), (2, tied), (3)`` means "1 and 2 equally, both over 3". Candidates not
listed on a ballot are unranked: the voter expressed no preference about them.

For counting, every ballot is turned into *rank values* by
:func:`assign_ranks`. The first tier gets :data:`MAX_RANK` and each following
tier one less; tied entries share the value of the previous entry. Unranked
candidates implicitly have the value :data:`UNRANKED` (zero).

Invalid ballots raise a subclass of :class:`InvalidBallot` and are rejected
as a whole.
'''

from __future__ import annotations

import dataclasses
from typing import Any, Dict, Tuple

import pairtally.candidate
from pairtally.candidate import CandidateError
from pairtally.persist import simple_serialization


MAX_RANK: int = 2 ** 256 - 1
'''Rank value of the first tier of every ballot.'''

UNRANKED: int = 0
'''Rank value of candidates not listed on a ballot.'''


class VoteError(Exception):
    '''A vote is invalid given the election rules.'''
    pass


class VoteTypeError(VoteError):
    '''A vote is of an invalid type.

    E.g. plain candidate ids in place of ranking entries.

    :param vtype: Vote type detected as invalid.
    :param expected: Vote type that was expected.
    '''
    def __init__(self, vtype: type, expected: type = None):
        self.vtype = vtype
        self.expected = expected
        message = f'invalid vote type: {vtype}'
        if expected:
            message += f', must be {expected}'
        super().__init__(message)


class InvalidBallot(VoteError):
    '''A ballot was rejected; none of it was counted.'''
    pass


class EmptyBallot(InvalidBallot):
    '''A ballot ranks no candidates.'''
    def __init__(self):
        super().__init__('ranking cannot be empty')


class TiedFirstEntry(InvalidBallot):
    '''The first entry of a ballot is marked as tied with a previous one.'''
    def __init__(self):
        super().__init__('first entry cannot be tied')


class DuplicateCandidate(InvalidBallot):
    '''A candidate appears more than once on a single ballot.

    :param candidate_id: The repeated candidate id.
    '''
    def __init__(self, candidate_id: int):
        self.candidate_id = candidate_id
        super().__init__(f'candidate {candidate_id} ranked more than once')


class UnknownCandidate(InvalidBallot, CandidateError):
    '''A ballot ranks a candidate that is unknown or inactive.

    :param candidate_id: The offending candidate id.
    :param expected: Description of what was expected instead.
    '''
    def __init__(self, candidate_id: Any, expected: Any = None):
        CandidateError.__init__(self, candidate_id, expected)
        self.candidate_id = candidate_id


@simple_serialization
@dataclasses.dataclass(frozen=True)
class RankingEntry:
    '''A single position on a ranked ballot.

    :param candidate_id: Id of the ranked candidate.
    :param tied_with_previous: Whether the candidate shares the rank of the
        entry listed just before it.
    '''
    candidate_id: int
    tied_with_previous: bool = False


Ballot = Tuple[RankingEntry, ...]
RankAssignment = Dict[int, int]


def assign_ranks(ballot: Ballot,
                 allow_duplicates: bool = False,
                 ) -> RankAssignment:
    '''Compute rank values of the candidates listed on a ballot.

    The first entry gets :data:`MAX_RANK`. Every following entry either
    repeats the value of the previous entry (if tied with it) or gets the
    value of the previous tier minus one, so a tier of three tied candidates
    followed by an untied one only lowers the value by one.

    :param ballot: Ranking entries in order of preference.
    :param allow_duplicates: Whether a candidate may be listed more than once;
        if so, the value from its last occurrence is kept.
    :returns: Mapping of ranked candidate ids to their rank values.
    :raises EmptyBallot: If the ballot has no entries.
    :raises TiedFirstEntry: If the first entry is marked as tied.
    :raises DuplicateCandidate: If a candidate is listed twice and duplicates
        are not allowed.
    '''
    if not ballot:
        raise EmptyBallot()
    if ballot[0].tied_with_previous:
        raise TiedFirstEntry()
    ranks = {}
    current = MAX_RANK
    for i, entry in enumerate(ballot):
        if i > 0 and not entry.tied_with_previous:
            current -= 1
        if entry.candidate_id in ranks and not allow_duplicates:
            raise DuplicateCandidate(entry.candidate_id)
        ranks[entry.candidate_id] = current
    return ranks


def preference(ranks: RankAssignment,
               first: int,
               second: int,
               ) -> int:
    '''Return how a single voter compares two candidates.

    Follows the pairwise tally rule: only candidates ranked on the ballot
    are compared, so a preference is reported only when both are ranked
    and not tied.

    :param ranks: Rank values of the voter as produced by
        :func:`assign_ranks`.
    :param first: Id of the first candidate.
    :param second: Id of the second candidate.
    :returns: 1 if the first candidate is preferred, -1 if the second is,
        0 otherwise.
    '''
    first_rank = ranks.get(first, UNRANKED)
    second_rank = ranks.get(second, UNRANKED)
    if first_rank == UNRANKED or second_rank == UNRANKED:
        return 0
    elif first_rank > second_rank:
        return 1
    elif first_rank < second_rank:
        return -1
    else:
        return 0


DEFAULT_NOMINATOR = pairtally.candidate.BasicNominator()


@simple_serialization
class RankedBallotValidator:
    '''Validate a ranked ballot before it is counted.

    Checks the structure of the ballot (entry types, non-emptiness, untied
    first entry, no repeated candidates) and the eligibility of every
    candidate listed.

    :param nominator: Nominator used to check candidate ids. The default only
        checks that they are positive integers; use
        :class:`pairtally.candidate.RosterNominator` to admit only the active
        candidates of an election.
    :param allow_duplicates: Whether to accept a candidate listed more than
        once (the last occurrence then determines its rank).
    '''
    def __init__(self,
                 nominator: pairtally.candidate.Nominator = DEFAULT_NOMINATOR,
                 allow_duplicates: bool = False,
                 ):
        self.nominator = nominator
        self.allow_duplicates = allow_duplicates

    def validate(self,
                 ballot: Ballot,
                 check_candidates: bool = True,
                 ) -> None:
        '''Check if the ballot is valid.

        :param ballot: Ballot to be checked.
        :param check_candidates: Whether to check candidate eligibility with
            the nominator. Ballots accepted earlier stay valid after their
            candidates are deactivated, so replays skip this check.
        :raises VoteTypeError: If the ballot is not a sequence of
            :class:`RankingEntry` objects.
        :raises InvalidBallot: If the ballot is empty, starts with a tie,
            repeats a candidate or lists an ineligible candidate.
        '''
        if not isinstance(ballot, (tuple, list)):
            raise VoteTypeError(type(ballot), Ballot)
        for entry in ballot:
            if not isinstance(entry, RankingEntry):
                raise VoteTypeError(type(entry), RankingEntry)
        assign_ranks(ballot, allow_duplicates=self.allow_duplicates)
        if not check_candidates:
            return
        for entry in ballot:
            try:
                self.nominator.validate(entry.candidate_id)
            except CandidateError as err:
                raise UnknownCandidate(
                    entry.candidate_id, err.expected
                ) from err

    def ranks(self,
              ballot: Ballot,
              check_candidates: bool = True,
              ) -> RankAssignment:
        '''Validate the ballot and return its rank values.

        :param ballot: Ballot to be checked and ranked.
        :param check_candidates: Whether to check candidate eligibility.
        :raises VoteError: If the ballot is invalid.
        '''
        self.validate(ballot, check_candidates=check_candidates)
        return assign_ranks(ballot, allow_duplicates=self.allow_duplicates)
