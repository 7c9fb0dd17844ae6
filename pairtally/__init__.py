"""Pairtally - ranked pairs elections over an incremental pairwise tally.

Pairtally counts ranked ballots, optionally with tied candidates, into a
pairwise tally that is kept up to date as voters submit, replace and retract
their ballots, and evaluates the tally by Tideman's ranked pairs method into
a single deterministic ranking of the candidates.

The library is organized as follows:

-   The ``candidate`` module defines candidates and validators of the
    candidate ids used on ballots.
-   The ``vote`` module defines ballots (tuples of ranking entries), turns them
    into rank values and validates them; the ``convert`` module converts
    ballots from other shapes such as plain lists of candidate ids.
-   The ``tally`` module holds the :class:`tally.PairwiseTallyStore`, the
    incrementally updated pairwise tally.
-   The ``evaluate`` subpackage evaluates a tally snapshot by ranked pairs.
-   The ``election`` module ties a store to the candidates of an election and
    its evaluator and loads ballots from external sources; the ``io``
    subpackage reads and writes JSON election files.
"""
