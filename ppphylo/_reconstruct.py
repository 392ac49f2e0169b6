"""
_reconstruct.py
===============
End-to-end pipeline: matrix text in, terminated tree text out.

    parse → remove null columns → sort columns → build → serialize → ';'
"""

import logging
from typing import Iterable, Optional

from ppphylo._conflict import check_compatible
from ppphylo._reader import parse_matrix, read_matrix
from ppphylo._tree import build_tree, to_newick
from ppphylo._utils import format_newick


logger = logging.getLogger(__name__)


def reconstruct_matrix(
    matrix, validate: bool = False, backend: str = "best"
) -> str:
    """
    Normalize *matrix* in place and return its terminated tree text.

    Parameters
    ----------
    matrix : CharacterMatrix
        Pruned of null columns and sorted as a side effect.
    validate : bool, default False
        Reject matrices without a perfect phylogeny: run the rooted
        compatibility scan first and check every partition while building.
    backend : str, default 'best'
        Backend for the compatibility scan.

    Returns
    -------
    str
        Tree text ending in ``;``.

    Raises
    ------
    IncompatibleMatrixError
        Only when *validate* is True.
    """
    matrix.remove_null_columns()
    matrix.sort_columns()
    if validate:
        check_compatible(matrix, rooted=True, backend=backend)

    tree = build_tree(matrix, matrix.character_labels, validate=validate)
    return format_newick(to_newick(tree))


def reconstruct(
    lines: Iterable[str],
    persistent: bool = False,
    label_scheme: Optional[str] = None,
    validate: bool = False,
    backend: str = "best",
) -> str:
    """
    Reconstruct the tree for matrix text *lines*.

    Parameters
    ----------
    lines : iterable of str or str
        Matrix text; see :func:`ppphylo.parse_matrix`.
    persistent : bool, default False
        Persistent (+/-) label synthesis when there is no header.
    label_scheme : {'observed', 'corrected'}, optional
        Sign rule for persistent labels.
    validate : bool, default False
        See :func:`reconstruct_matrix`.
    backend : str, default 'best'
        Backend for the compatibility scan.

    Returns
    -------
    str
        Tree text ending in ``;``.

    Examples
    --------
    >>> reconstruct(['11', '01', '10'])
    '((:C00001):C00002);'
    >>> reconstruct(['#A,B,C', '110', '100', '001'])
    '((:B):A,:C);'
    """
    matrix = parse_matrix(lines, persistent=persistent, label_scheme=label_scheme)
    return reconstruct_matrix(matrix, validate=validate, backend=backend)


def reconstruct_file(
    path,
    persistent: bool = False,
    label_scheme: Optional[str] = None,
    validate: bool = False,
    backend: str = "best",
) -> str:
    """Same as :func:`reconstruct`, reading the matrix from *path*."""
    matrix = read_matrix(path, persistent=persistent, label_scheme=label_scheme)
    return reconstruct_matrix(matrix, validate=validate, backend=backend)
