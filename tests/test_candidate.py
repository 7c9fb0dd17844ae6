
import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import pairtally.candidate
from pairtally.candidate import Candidate, CandidateError


CANDIDATES = [
    Candidate(1, 'Alice Johnson', 'Leader'),
    Candidate(2, 'Bob Smith', 'Innovator'),
    Candidate(3, 'Carol Davis', 'Environmentalist', active=False),
]


@pytest.mark.parametrize('cand_id', [0, -1, 1.5, '1', True, None])
def test_invalid_id(cand_id):
    with pytest.raises(CandidateError):
        Candidate(cand_id, 'Nobody')


def test_equality_by_id():
    assert Candidate(1, 'Alice') == Candidate(1, 'Alice Johnson')
    assert Candidate(1) != Candidate(2)
    assert len({Candidate(1), Candidate(1, 'Alice'), Candidate(2)}) == 2


def test_repr():
    assert repr(CANDIDATES[0]) == '<Candidate(1,Alice Johnson)>'
    assert repr(CANDIDATES[2]) == '<Candidate(3,Carol Davis,inactive)>'


def test_roster():
    roster = pairtally.candidate.RosterNominator(CANDIDATES)
    roster.validate(1)
    roster.validate(2)
    assert roster.is_valid(2)
    assert not roster.is_valid(3)
    assert not roster.is_valid(4)
    assert roster.ids == [1, 2, 3]
    assert roster.get(2).name == 'Bob Smith'
    assert roster.get(4) is None


@pytest.mark.parametrize(('cand_id', 'expected'), [
    (3, 'an active candidate'),
    (4, 'a registered candidate'),
    (0, 'a registered candidate'),
])
def test_roster_rejects(cand_id, expected):
    roster = pairtally.candidate.RosterNominator(CANDIDATES)
    with pytest.raises(CandidateError) as excinfo:
        roster.validate(cand_id)
    assert excinfo.value.candidate == cand_id
    assert excinfo.value.expected == expected


def test_roster_duplicate_ids():
    with pytest.raises(CandidateError):
        pairtally.candidate.RosterNominator([Candidate(1), Candidate(1, 'A')])


def test_basic_nominator():
    nominator = pairtally.candidate.BasicNominator()
    assert nominator.is_valid(1)
    assert nominator.is_valid(10 ** 6)
    assert not nominator.is_valid(0)
    assert not nominator.is_valid(False)
