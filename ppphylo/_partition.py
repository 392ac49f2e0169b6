"""
_partition.py
=============
Splitting an ordered set of characters into the classes that hang below
distinct maximal characters.

Both functions expect the labels in the order produced by
:meth:`CharacterMatrix.sort_columns` (or any subsequence of it).  Under that
order the first label still unassigned is never a strict subset of another
unassigned label, so it can serve as the maximal character of its class
whenever the matrix admits a perfect phylogeny.

Neither function validates compatibility: on a matrix without a perfect
phylogeny the classes may overlap or miss characters.  See
:func:`ppphylo.validate_partition` for the opt-in check.
"""

from typing import List, Sequence

from ppphylo._logging import log_partition


def _species_union(matrix, label) -> set:
    """Every character possessed by some species that has *label*."""
    union = set()
    for species in matrix.species_with(label):
        union |= matrix.characters_of(species)
    return union


def find_maximal(labels: Sequence[str], matrix) -> List[str]:
    """
    Return the maximal characters of *labels*, one per partition class.

    The first remaining label is recorded as maximal and every character
    sharing a species with it is discarded; this repeats until no label is
    left.  The label itself is always discarded, so the loop runs at most
    ``len(labels)`` times even for a null column.

    Parameters
    ----------
    labels : sequence of str
        Character labels in sorted column order.  Not modified; the function
        works on its own copy.
    matrix : CharacterMatrix

    Returns
    -------
    list[str]
        Maximal characters in discovery order.
    """
    working = list(labels)
    maximals = []
    while working:
        first = working[0]
        maximals.append(first)
        discard = _species_union(matrix, first)
        discard.add(first)
        working = [label for label in working if label not in discard]
    return maximals


def partition(labels: Sequence[str], matrix) -> List[List[str]]:
    """
    Split *labels* into one class per maximal character.

    The class of maximal character ``m`` contains every label of *labels*
    possessed by some species that has ``m``.  Classes are emitted in the
    order the maximal characters were found, and each class keeps the
    relative order of *labels*, so ``m`` is its first element on compatible
    input.

    Parameters
    ----------
    labels : sequence of str
        Character labels in sorted column order.  Not modified.
    matrix : CharacterMatrix

    Returns
    -------
    list[list[str]]

    Examples
    --------
    >>> m = CharacterMatrix.from_rows(['110', '100', '001'])
    >>> m.sort_columns()
    >>> partition(m.character_labels, m)
    [['C00001', 'C00002'], ['C00003']]
    """
    labels = list(labels)
    classes = []
    for maximal in find_maximal(labels, matrix):
        members = _species_union(matrix, maximal)
        members.add(maximal)
        classes.append([label for label in labels if label in members])

    log_partition(len(labels), [len(c) for c in classes])
    return classes
