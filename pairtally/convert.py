'''Converters between ballot shapes.

The core only ever handles ballots as tuples of
:class:`pairtally.vote.RankingEntry`. Ballots arriving in other shapes are
converted at the boundary:

-   **legacy** ballots - plain lists of candidate ids, strictly ordered
    (no ties); see :class:`LegacyRankingConverter`.
-   **tagged** ballots - sequences of ``{"candidateId", "tiedWithPrevious"}``
    mappings or ``(candidate_id, tied_with_previous)`` pairs, as read from
    ledgers or JSON files; see :class:`TaggedRankingConverter`.
-   **grouped** ballots - tuples of candidate ids or frozen sets of them
    (each set being a tier of tied candidates); see
    :class:`GroupedRankingConverter` and :func:`ballot_to_groups`.

:class:`AnyRankingConverter` detects the shape automatically.
'''

import collections.abc
from typing import Any, FrozenSet, Iterable, List, Tuple, Union

from pairtally.persist import simple_serialization
from pairtally.vote import Ballot, RankingEntry, VoteTypeError


GroupedBallot = Tuple[Union[int, FrozenSet[int]], ...]

ID_KEYS = ('candidateId', 'candidate_id')
TIE_KEYS = ('tiedWithPrevious', 'tied_with_previous')


def _check_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise VoteTypeError(type(value), int)
    return value


def _check_tie(value: Any) -> bool:
    if not isinstance(value, bool):
        raise VoteTypeError(type(value), bool)
    return value


@simple_serialization
class LegacyRankingConverter:
    '''Convert a plain list of candidate ids to ranking entries.

    Every candidate gets its own tier, in the order listed.
    '''
    def convert(self, ranking: Iterable[int]) -> Ballot:
        '''Convert an untagged ranking.

        :param ranking: Candidate ids from the most to the least preferred.
        :raises VoteTypeError: If any item is not an integer id.
        '''
        return tuple(RankingEntry(_check_id(cand)) for cand in ranking)


@simple_serialization
class TaggedRankingConverter:
    '''Convert tie-annotated ranking items to ranking entries.

    Accepts :class:`RankingEntry` objects (passed through), mappings with
    a candidate id key (``candidateId`` or ``candidate_id``) and an optional
    tie flag key (``tiedWithPrevious`` or ``tied_with_previous``), and
    two-item ``(candidate_id, tied_with_previous)`` sequences.
    '''
    def convert(self, ranking: Iterable[Any]) -> Ballot:
        '''Convert a tagged ranking.

        :param ranking: Ranking items in order of preference.
        :raises VoteTypeError: If an item has none of the accepted shapes or
            its tie flag is not a boolean.
        '''
        return tuple(self.convert_one(item) for item in ranking)

    @staticmethod
    def convert_one(item: Any) -> RankingEntry:
        if isinstance(item, RankingEntry):
            return item
        elif isinstance(item, collections.abc.Mapping):
            cand = next((item[key] for key in ID_KEYS if key in item), None)
            if cand is None:
                raise VoteTypeError(type(item), RankingEntry)
            tied = next((item[key] for key in TIE_KEYS if key in item), False)
            return RankingEntry(_check_id(cand), _check_tie(tied))
        elif (isinstance(item, collections.abc.Sequence)
                and not isinstance(item, str)
                and len(item) == 2):
            return RankingEntry(_check_id(item[0]), _check_tie(item[1]))
        else:
            raise VoteTypeError(type(item), RankingEntry)


@simple_serialization
class GroupedRankingConverter:
    '''Convert a ranking of candidates and tied groups to ranking entries.

    Candidates within a tied group are listed in ascending id order, the
    first of them untied and the rest tied with their predecessor.
    '''
    def convert(self, ranking: GroupedBallot) -> Ballot:
        '''Convert a grouped ranking.

        :param ranking: Candidate ids or sets of them, in order of preference.
        :raises VoteTypeError: If a group is empty or contains a non-integer.
        '''
        entries = []
        for item in ranking:
            if isinstance(item, collections.abc.Set):
                if not item:
                    raise VoteTypeError(type(item), 'a non-empty set of ids')
                for i, cand in enumerate(sorted(_check_id(c) for c in item)):
                    entries.append(RankingEntry(cand, i > 0))
            else:
                entries.append(RankingEntry(_check_id(item)))
        return tuple(entries)


@simple_serialization
class AnyRankingConverter:
    '''Convert a ranking in any of the supported shapes to ranking entries.

    Plain integer lists are treated as legacy rankings, rankings containing
    sets as grouped ones, everything else as tagged ones.
    '''
    def convert(self, ranking: Iterable[Any]) -> Ballot:
        '''Convert a ranking after detecting its shape.

        :param ranking: Ranking in any supported shape.
        :raises VoteTypeError: If the shape is not recognized.
        '''
        items = list(ranking)
        if all(isinstance(item, int) and not isinstance(item, bool)
               for item in items):
            return LegacyRankingConverter().convert(items)
        elif any(isinstance(item, collections.abc.Set) for item in items):
            return GroupedRankingConverter().convert(tuple(items))
        else:
            return TaggedRankingConverter().convert(items)


def ballot_to_groups(ballot: Ballot) -> List[List[int]]:
    '''Split a ballot into its tiers of tied candidates.

    :param ballot: Ranking entries in order of preference.
    :returns: A list of tiers, each a list of candidate ids in ballot order.
    '''
    groups = []
    for entry in ballot:
        if groups and entry.tied_with_previous:
            groups[-1].append(entry.candidate_id)
        else:
            groups.append([entry.candidate_id])
    return groups


def ballot_to_tagged(ballot: Ballot) -> List[dict]:
    '''Convert ranking entries to JSON-ready tagged mappings.'''
    return [
        {
            'candidateId': entry.candidate_id,
            'tiedWithPrevious': entry.tied_with_previous,
        }
        for entry in ballot
    ]
