"""
_context.py
===========
Context managers for ppphylo.

Provides clean, Pythonic context managers for temporarily changing state:
- Logging control (suppress/change levels)
- Warning control (suppress specific warnings)
- Backend selection (force specific backend for conflict scans)
- Label scheme selection (persistent character labels)

All context managers properly restore state on exit, even if exceptions occur.
"""

import logging
import warnings
from contextlib import contextmanager
from typing import Optional, Type

from ppphylo._utils import LABEL_SCHEMES


# Module-level state for overrides
_backend_override = None
_label_scheme_override = None


# ============================================================================ #
# Logging Context Managers
# ============================================================================ #


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Temporarily change a logger's level.

    Useful for suppressing verbose output from specific modules during
    bulk operations.

    Parameters
    ----------
    logger_name : str
        Name of the logger to suppress (e.g., 'ppphylo._matrix')
    level : int, default logging.CRITICAL
        Temporary logging level.

    Yields
    ------
    None
        Control is yielded back to the with-block.

    Examples
    --------
    >>> # Silence matrix construction messages while reading many files
    >>> with suppress_logger('ppphylo._matrix'):
    ...     matrices = [read_matrix(p) for p in paths]

    Notes
    -----
    - Exception-safe: Logger level restored even if exception raised
    - Nesting-safe: Can nest multiple suppress_logger contexts
    """
    logger = logging.getLogger(logger_name)
    original_level = logger.level

    try:
        logger.setLevel(level)
        yield
    finally:
        logger.setLevel(original_level)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Temporarily suppress all ppphylo logging.

    Every module logger is a child of the ``ppphylo`` logger, so raising
    the parent's level silences the whole package.

    Parameters
    ----------
    level : int, default logging.CRITICAL
        Temporary logging level for the package logger.

    Examples
    --------
    >>> with quiet():
    ...     newick = reconstruct(lines)

    >>> # Show only warnings
    >>> with quiet(logging.WARNING):
    ...     newick = reconstruct(lines, validate=True)
    """
    with suppress_logger("ppphylo", level):
        yield


# ============================================================================ #
# Warning Context Managers
# ============================================================================ #


@contextmanager
def suppress_warnings(category: Optional[Type[Warning]] = None):
    """
    Temporarily suppress warnings.

    Parameters
    ----------
    category : Type[Warning] or None, default None
        Warning category to suppress. If None, suppresses all warnings.

    Examples
    --------
    >>> from numba.core.errors import NumbaPerformanceWarning
    >>> with suppress_warnings(NumbaPerformanceWarning):
    ...     pairs = conflict_pairs(matrix, backend='cpu-parallel')
    """
    with warnings.catch_warnings():
        if category is None:
            warnings.simplefilter("ignore")
        else:
            warnings.filterwarnings("ignore", category=category)
        yield


# ============================================================================ #
# Backend Context Managers
# ============================================================================ #


@contextmanager
def use_backend(backend: str):
    """
    Temporarily force a specific backend for conflict scans.

    Parameters
    ----------
    backend : str
        Backend to use. Valid options:
        - 'python': Pure Python set comparisons (always available)
        - 'cpu-parallel': Numba parallel kernel
        - 'best': Use best available (default behavior)

    Raises
    ------
    ValueError
        If requested backend is not available.

    Examples
    --------
    >>> with use_backend('python'):
    ...     pairs = conflict_pairs(matrix)

    Notes
    -----
    **Not thread-safe**: uses module-level state.  Pass ``backend=`` to
    :func:`conflict_pairs` directly when threads are involved.
    """
    global _backend_override

    from ppphylo._backend import get_available_backends

    available = get_available_backends()

    if backend != "best" and backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )

    original_override = _backend_override

    try:
        _backend_override = backend
        yield
    finally:
        _backend_override = original_override


def get_backend_override() -> Optional[str]:
    """
    Get the current backend override, if any.

    Returns
    -------
    str or None
        Current backend override, or None if no override active.
    """
    return _backend_override


# ============================================================================ #
# Label Scheme Context Managers
# ============================================================================ #


@contextmanager
def use_label_scheme(scheme: str):
    """
    Temporarily select the sign rule for synthesized persistent labels.

    Parameters
    ----------
    scheme : {'observed', 'corrected'}
        See :func:`ppphylo.character_label`.

    Raises
    ------
    ValueError
        If *scheme* is unknown.

    Examples
    --------
    >>> with use_label_scheme('corrected'):
    ...     m = CharacterMatrix.from_rows(['10', '11'], persistent=True)
    >>> m.character_labels
    ['C0001+', 'C0001-']
    """
    global _label_scheme_override

    if scheme not in LABEL_SCHEMES:
        raise ValueError(
            f"Unknown label scheme '{scheme}'. "
            f"Valid schemes: {', '.join(LABEL_SCHEMES)}"
        )

    original_override = _label_scheme_override

    try:
        _label_scheme_override = scheme
        yield
    finally:
        _label_scheme_override = original_override


def get_label_scheme() -> str:
    """Return the active persistent label scheme ('observed' by default)."""
    if _label_scheme_override is None:
        return "observed"
    return _label_scheme_override
