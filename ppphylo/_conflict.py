"""
_conflict.py
============
Compatibility checks for character matrices.

Two characters are compatible when their species sets can both be realized
as subtrees of one tree.  With an all-zero ancestral state (the rooted
setting used by the tree builder) that means the sets are nested or
disjoint: the pair must not show all three gametes 11, 10 and 01.  Without
a fixed root the classic four-gamete rule applies.

Backends
--------
``conflict_pairs`` runs either a pure Python set comparison or the numba
kernel in ``_cpu_kernels``.  Selection follows the same rules as everywhere
else in the package: an explicit ``backend=`` argument, overridden by an
active :func:`ppphylo.use_backend` context, resolved with
:func:`ppphylo._backend.resolve_backend`.
"""

import logging
from typing import List, Sequence, Tuple

import networkx as nx
import numpy as np

from ppphylo._backend import (
    check_numba_available,
    get_available_backends,
    get_best_backend,
    import_cpu_kernels,
    resolve_backend,
)
from ppphylo._context import get_backend_override
from ppphylo._errors import IncompatibleMatrixError
from ppphylo._logging import (
    install_numba_warning_filter,
    log_backend_availability,
    log_conflict_components,
    log_conflicts,
    log_optimization_status,
)


logger = logging.getLogger(__name__)

_NUMBA_AVAILABLE = check_numba_available()
_cpu_import_ok, _gamete_conflicts = import_cpu_kernels()
_BACKENDS_AVAILABLE = get_available_backends()

# Track first kernel call for compilation logging
_kernel_first_call = True

# Log system info and backend availability on module import
log_optimization_status(_NUMBA_AVAILABLE)
log_backend_availability(_BACKENDS_AVAILABLE)
install_numba_warning_filter(_NUMBA_AVAILABLE)


def _python_conflicts(matrix, rooted: bool) -> List[Tuple[int, int]]:
    n_species = matrix.species_count
    species_sets = [frozenset(matrix.species_with(c)) for c in matrix.character_labels]

    pairs = []
    for a in range(len(species_sets)):
        set_a = species_sets[a]
        for b in range(a + 1, len(species_sets)):
            set_b = species_sets[b]
            if not (set_a & set_b and set_a - set_b and set_b - set_a):
                continue
            if rooted or len(set_a | set_b) < n_species:
                pairs.append((a, b))
    return pairs


def conflict_pairs(
    matrix, rooted: bool = True, backend: str = "best"
) -> List[Tuple[str, str]]:
    """
    Return every pair of incompatible characters.

    Parameters
    ----------
    matrix : CharacterMatrix
    rooted : bool, default True
        Use the three-gamete rule (ancestral state all zero).  If False, a
        pair conflicts only when all four gametes occur.
    backend : str, default 'best'
        'python', 'cpu-parallel' or 'best'.  An active
        :func:`ppphylo.use_backend` context takes precedence.

    Returns
    -------
    list[tuple[str, str]]
        Pairs ``(a, b)`` with *a* before *b* in ``matrix.character_labels``,
        ordered by *a* then *b*.

    Examples
    --------
    >>> m = CharacterMatrix.from_rows(['11', '01', '10'])
    >>> conflict_pairs(m)
    [('C00001', 'C00002')]
    >>> conflict_pairs(m, rooted=False)
    []
    """
    global _kernel_first_call

    backend_override = get_backend_override()
    if backend_override is not None:
        backend = backend_override

    try:
        resolved_backend = resolve_backend(backend)
    except ValueError as e:
        logger.warning(str(e))
        resolved_backend = get_best_backend()

    if resolved_backend == "cpu-parallel" and not _cpu_import_ok:
        logger.warning("CPU kernels failed to import; using the python backend")
        resolved_backend = "python"

    logger.info(
        "conflict_pairs(%s, backend=%r)",
        "rooted" if rooted else "unrooted",
        resolved_backend,
    )

    labels = matrix.character_labels
    if resolved_backend == "cpu-parallel":
        if _kernel_first_call:
            logger.info("  Compiling conflict kernel (cached for future calls)")
            _kernel_first_call = False
        conflicts = _gamete_conflicts(matrix.to_array(), rooted)
        index_pairs = [(int(a), int(b)) for a, b in np.argwhere(conflicts)]
    else:
        index_pairs = _python_conflicts(matrix, rooted)

    pairs = [(labels[a], labels[b]) for a, b in index_pairs]
    log_conflicts(pairs, rooted)
    return pairs


def is_compatible(matrix, rooted: bool = True, backend: str = "best") -> bool:
    """True if no pair of characters conflicts; see :func:`conflict_pairs`."""
    return not conflict_pairs(matrix, rooted=rooted, backend=backend)


def check_compatible(matrix, rooted: bool = True, backend: str = "best") -> None:
    """
    Raise :class:`IncompatibleMatrixError` if any pair of characters conflicts.

    The exception's ``conflicts`` attribute holds all conflicting pairs.
    """
    pairs = conflict_pairs(matrix, rooted=rooted, backend=backend)
    if pairs:
        shown = ", ".join(f"{a}/{b}" for a, b in pairs[:3])
        raise IncompatibleMatrixError(
            f"Matrix admits no perfect phylogeny: {len(pairs)} conflicting "
            f"character pair(s), e.g. {shown}",
            conflicts=pairs,
        )


def conflict_components(
    matrix, rooted: bool = True, backend: str = "best"
) -> List[List[str]]:
    """
    Group characters into connected components of the conflict graph.

    The graph has one vertex per character and an edge for every pair
    reported by :func:`conflict_pairs`.  A character that conflicts with
    nothing forms a component of its own.

    Returns
    -------
    list[list[str]]
        Components ordered by their first character; labels inside a
        component follow ``matrix.character_labels``.

    Examples
    --------
    >>> m = CharacterMatrix.from_rows(['#X,Y,Z,W', '1001', '1100', '0110', '0010'])
    >>> conflict_components(m, backend='python')
    [['X', 'Y', 'Z'], ['W']]
    """
    labels = matrix.character_labels
    position = {label: k for k, label in enumerate(labels)}

    graph = nx.Graph()
    graph.add_nodes_from(labels)
    graph.add_edges_from(conflict_pairs(matrix, rooted=rooted, backend=backend))

    components = [
        sorted(members, key=position.__getitem__)
        for members in nx.connected_components(graph)
    ]
    components.sort(key=lambda members: position[members[0]])

    log_conflict_components([len(members) for members in components])
    return components


def validate_partition(
    labels: Sequence[str], classes: Sequence[Sequence[str]]
) -> None:
    """
    Check that *classes* is a partition of *labels*.

    Raises
    ------
    IncompatibleMatrixError
        If a label appears in two classes, a class holds a label outside
        *labels*, or some label is in no class.
    """
    seen = set()
    for members in classes:
        for label in members:
            if label in seen:
                raise IncompatibleMatrixError(
                    f"Character '{label}' falls into more than one partition class."
                )
            seen.add(label)

    expected = set(labels)
    extra = seen - expected
    if extra:
        raise IncompatibleMatrixError(
            f"Partition classes contain unknown characters: {sorted(extra)}"
        )
    missing = [label for label in labels if label not in seen]
    if missing:
        raise IncompatibleMatrixError(
            f"Characters not covered by any partition class: {missing}"
        )
