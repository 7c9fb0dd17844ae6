'''Evaluate the results of the elections.

Evaluators take the pairwise tally of an election - a mapping of ordered
candidate id pairs ``(a, b)`` to the number of ballots preferring ``a`` to
``b`` - and determine the final ranking of the candidates. The tally is
normally obtained as a snapshot of a :class:`pairtally.tally.PairwiseTallyStore`.

Evaluators never modify the tally they are given and are deterministic: the
same tally always produces the same result.
'''

from pairtally.evaluate.core import *    # noqa
