
import sys
import os
import itertools
import random

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import pairtally.evaluate.condorcet
import pairtally.evaluate.core
import pairtally.tally
from pairtally.evaluate.core import Pair, FinalRanking
from pairtally.evaluate.condorcet import RankedPairs
from pairtally.vote import RankingEntry


def tally_of(*ballots):
    store = pairtally.tally.PairwiseTallyStore()
    for i, ballot in enumerate(ballots):
        store.submit(i, tuple(RankingEntry(cand) for cand in ballot))
    return store.snapshot()


PARADOX = tally_of(*([[1, 2, 3]] * 2 + [[2, 3, 1]] * 2 + [[3, 1, 2]] * 2))

# margins lock 2 > 3 first, winning votes lock 1 > 2 and then 3 > 1
DIVERGING = {
    (1, 2): 10, (2, 1): 8,
    (2, 3): 5,
    (3, 1): 7, (1, 3): 6,
}


def random_tally(rng, n_cands, max_count=6):
    return {
        pair: rng.randint(0, max_count)
        for pair in itertools.permutations(range(1, n_cands + 1), 2)
    }


def has_cycle(edges):
    successors = {}
    for winner, loser in edges:
        successors.setdefault(winner, []).append(loser)
    state = {}

    def visit(node):
        state[node] = 'open'
        for nxt in successors.get(node, ()):
            if state.get(nxt) == 'open':
                return True
            if nxt not in state and visit(nxt):
                return True
        state[node] = 'done'
        return False

    return any(visit(node) for node in list(successors) if node not in state)


def test_extract_pairs():
    votes = {(1, 2): 3, (2, 1): 1, (2, 3): 2, (3, 2): 2, (4, 1): 2}
    assert pairtally.evaluate.condorcet.extract_pairs(votes) == [
        Pair(1, 2, 3, 1, 2),
        Pair(4, 1, 2, 0, 2),
    ]


def test_extract_pairs_ignores_self():
    votes = {(1, 1): 5, (2, 1): 1}
    assert pairtally.evaluate.condorcet.extract_pairs(votes) == [
        Pair(2, 1, 1, 0, 1),
    ]


def test_paradox_tally():
    for pair in [(1, 2), (2, 3), (3, 1)]:
        assert PARADOX[pair] == 4
        assert PARADOX[pair[::-1]] == 2


def test_paradox():
    result = RankedPairs().evaluate(PARADOX)
    assert result.pairs == (
        Pair(1, 2, 4, 2, 2),
        Pair(2, 3, 4, 2, 2),
        Pair(3, 1, 4, 2, 2),
    )
    assert result.locked == ((1, 2), (2, 3))
    assert result.skipped == (Pair(3, 1, 4, 2, 2), )
    assert result.order == (1, 2, 3)
    assert result.winner == 1


def test_clear_winner():
    votes = tally_of(
        [1, 2, 3, 4, 5],
        [1, 3, 2, 5, 4],
        [1, 5, 4, 3, 2],
        [1, 4],
        [1, 2, 5],
    )
    for other in range(2, 6):
        assert votes.get((1, other), 0) > votes.get((other, 1), 0)
    result = RankedPairs().evaluate(votes, range(1, 6))
    assert result.winner == 1
    assert sorted(result.order) == [1, 2, 3, 4, 5]


def test_order_by_winner_votes():
    votes = {(1, 2): 3, (2, 1): 1, (3, 4): 4, (4, 3): 2}
    ordered = RankedPairs().order_pairs(votes)
    assert [(pair.winner, pair.loser) for pair in ordered] == [(3, 4), (1, 2)]


def test_order_by_ids():
    votes = {(2, 3): 1, (1, 4): 1, (1, 3): 1}
    ordered = RankedPairs().order_pairs(votes)
    assert [(pair.winner, pair.loser) for pair in ordered] == [
        (1, 3), (1, 4), (2, 3),
    ]


@pytest.mark.parametrize(('system', 'order'), [
    ('rankedpairs_margins', (1, 2, 3)),
    ('rankedpairs_winvotes', (3, 1, 2)),
    ('rankedpairs_pwo', (3, 1, 2)),
])
def test_scorers(system, order):
    result = pairtally.evaluate.condorcet.EVALUATORS[system].evaluate(
        DIVERGING
    )
    assert result.order == order


def test_custom_scorer():
    def inverted(votes):
        return {pair: -count for pair, count in votes.items()}

    result = RankedPairs(inverted).evaluate(DIVERGING)
    assert result.locked[0] == (2, 3)


def test_unknown_scorer():
    with pytest.raises(KeyError):
        RankedPairs('borda')


def test_no_candidates():
    result = RankedPairs().evaluate({})
    assert result == FinalRanking(order=(), winner=None)


def test_single_candidate():
    result = RankedPairs().evaluate({}, [1])
    assert result.order == (1, )
    assert result.winner == 1


def test_weak_winner_and_isolated():
    votes = {(1, 2): 1, (2, 1): 1, (1, 3): 2}
    result = RankedPairs().evaluate(votes, [5, 4])
    assert result.locked == ((1, 3), )
    assert result.order == (1, 3, 2, 4, 5)
    assert result.winner == 1


def test_resolve_order_rounds():
    resolve = RankedPairs.resolve_order
    assert resolve([(1, 3), (2, 3)]) == [1, 2, 3]
    assert resolve([(3, 1), (2, 1), (1, 4)], [6, 5]) == [2, 3, 1, 4, 5, 6]
    assert resolve([]) == []
    assert resolve([], [2, 1]) == [1, 2]


@pytest.mark.parametrize(('edges', 'remaining'), [
    ([(1, 2), (2, 3), (3, 1)], [1, 2, 3]),
    ([(4, 1), (1, 2), (2, 1)], [1, 2]),
])
def test_resolve_order_cycle(edges, remaining):
    with pytest.raises(pairtally.evaluate.core.CycleInvariantViolated) as exc:
        RankedPairs.resolve_order(edges)
    assert exc.value.candidates == remaining


def test_lock_pairs_full_cycle():
    pairs = [Pair(i, i % 5 + 1, 3, 1, 2) for i in range(1, 6)]
    locked = RankedPairs.lock_pairs(pairs)
    assert locked == [(1, 2), (2, 3), (3, 4), (4, 5)]


@pytest.mark.parametrize('seed', range(20))
def test_random_tallies(seed):
    rng = random.Random(seed)
    n_cands = rng.randint(2, 8)
    votes = random_tally(rng, n_cands)
    result = RankedPairs().evaluate(votes)
    assert not has_cycle(result.locked)
    assert sorted(result.order) == (
        pairtally.evaluate.condorcet.tallied_candidates(votes)
    )
    assert result.winner == result.order[0]
    shuffled = list(votes.items())
    rng.shuffle(shuffled)
    assert RankedPairs().evaluate(dict(shuffled)) == result


@pytest.mark.parametrize('seed', range(10))
def test_adversarial_cycles(seed):
    rng = random.Random(seed)
    cands = list(range(1, 9))
    rng.shuffle(cands)
    # every candidate beats the next three around a circle by the same margin
    votes = {}
    for i, cand in enumerate(cands):
        for step in (1, 2, 3):
            votes[cand, cands[(i + step) % len(cands)]] = 3
            votes[cands[(i + step) % len(cands)], cand] = 1
    result = RankedPairs().evaluate(votes)
    assert not has_cycle(result.locked)
    assert sorted(result.order) == sorted(cands)
    assert result.skipped


def test_condorcet_winner_agrees():
    votes = tally_of([2, 1, 3], [2, 3, 1], [1, 2, 3])
    assert pairtally.evaluate.condorcet.CondorcetWinner().evaluate(votes) == 2
    assert RankedPairs().evaluate(votes).winner == 2


def test_condorcet_winner_trivial():
    selector = pairtally.evaluate.condorcet.CondorcetWinner()
    assert selector.evaluate({}, [7]) == 7
    assert selector.evaluate({}) is None
    assert selector.evaluate(PARADOX) is None


def test_beat_counts():
    votes = tally_of([1, 2, 3], [1, 3, 2], [2, 3, 1])
    assert pairtally.evaluate.condorcet.beat_counts(votes) == {1: 2, 2: 1}


def test_input_not_modified():
    votes = dict(PARADOX)
    RankedPairs().evaluate(votes, [9])
    assert votes == PARADOX
