"""
_cpu_kernels.py
===============
CPU-accelerated character-compatibility kernels using Numba.

This module contains ONLY numba-accelerated code and should not import other
project modules to avoid import-time complications.

Exported Functions
------------------
_gamete_conflicts_njit : njit function
    Parallel pairwise gamete scan over a species × character 0/1 matrix.

Notes
-----
- The outer loop over the first character runs in parallel via prange
- cache=True persists compiled binary to disk for faster subsequent runs
"""

import numpy as np
from numba import njit, prange


# ======================================================================== #
# CPU Kernels                                                               #
# ======================================================================== #


@njit(parallel=True, cache=True)
def _gamete_conflicts_njit(matrix, rooted, conflicts_out):
    """
    Numba-compiled pairwise gamete test.

    For every character pair (c1, c2) with c1 < c2 the kernel records which
    of the four gametes 00, 01, 10, 11 occur among the species.  The pair
    conflicts when all four occur, or, if *rooted* is True (ancestral state
    all-zero), when 01, 10 and 11 occur.

    Each parallel thread owns row c1 of *conflicts_out*, so no atomics are
    needed.

    Parameters
    ----------
    matrix : uint8[n_species, n_characters]
        0/1 matrix, one column per character.
    rooted : bool
        Use the three-gamete rule instead of the four-gamete rule.
    conflicts_out : bool[n_characters, n_characters]
        Output; only the strict upper triangle is written.
    """
    n_species = matrix.shape[0]
    n_characters = matrix.shape[1]

    for c1 in prange(n_characters):
        for c2 in range(c1 + 1, n_characters):
            g00 = 0
            g01 = 0
            g10 = 0
            g11 = 0
            for s in range(n_species):
                a = matrix[s, c1]
                b = matrix[s, c2]
                if a == 0 and b == 0:
                    g00 = 1
                elif a == 0:
                    g01 = 1
                elif b == 0:
                    g10 = 1
                else:
                    g11 = 1

            if rooted:
                conflicts_out[c1, c2] = (g01 + g10 + g11) == 3
            else:
                conflicts_out[c1, c2] = (g00 + g01 + g10 + g11) == 4


def gamete_conflicts(matrix: np.ndarray, rooted: bool = True) -> np.ndarray:
    """
    Allocate the output buffer and run :func:`_gamete_conflicts_njit`.

    Returns
    -------
    bool ndarray (n_characters, n_characters)
        Strict upper triangle marks conflicting pairs.
    """
    n_characters = matrix.shape[1]
    conflicts_out = np.zeros((n_characters, n_characters), dtype=np.bool_)
    _gamete_conflicts_njit(
        np.ascontiguousarray(matrix, dtype=np.uint8), rooted, conflicts_out
    )
    return conflicts_out
