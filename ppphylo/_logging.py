"""
_logging.py
===========
Logging functions for ppphylo.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
"""

import logging
from typing import List, Sequence, Tuple


logger = logging.getLogger(__name__)


# ============================================================================ #
# System and Backend Logging (called at module import time)
# ============================================================================ #


def log_optimization_status(numba_available: bool) -> None:
    """
    Log system capabilities and optimization library availability at INFO level.

    Called once at module import time. Reports CPU count, memory, numba version
    (if available), LLVM info, and threading configuration.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import os
    import platform

    cpu_count = os.cpu_count() or 1
    logger.info(
        f"System: {platform.machine()} ({platform.system()}), "
        f"{cpu_count} CPU cores, Python {platform.python_version()}"
    )

    # Memory info (optional psutil)
    try:
        import psutil

        mem = psutil.virtual_memory()
        logger.info(
            f"Memory: {mem.total / (1024**3):.1f} GB total, "
            f"{mem.available / (1024**3):.1f} GB available"
        )
    except ImportError:
        pass  # psutil not required

    if numba_available:
        import numba

        logger.info(f"Numba {numba.__version__} loaded successfully")

        try:
            import llvmlite

            logger.info(f"LLVM backend: llvmlite {llvmlite.__version__}")
        except (ImportError, AttributeError):
            pass  # LLVM version unavailable

        try:
            num_threads = numba.get_num_threads()
            logger.info(f"Numba threading: {num_threads} threads active")
        except Exception:
            pass  # Threading info unavailable in some configs
    else:
        logger.info("Numba not installed; conflict scans will run as pure Python")


def install_numba_warning_filter(numba_available: bool) -> None:
    """
    Capture NumbaPerformanceWarning and route it through our logger.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import warnings

    if not numba_available:
        return

    try:
        from numba.core.errors import NumbaPerformanceWarning

        original_showwarning = warnings.showwarning

        def custom_showwarning(
            message, category, filename, lineno, file=None, line=None
        ):
            if issubclass(category, NumbaPerformanceWarning):
                logger.warning(f"Numba performance issue: {message}")
                logger.warning(f"  at {filename}:{lineno}")
                return
            original_showwarning(message, category, filename, lineno, file, line)

        warnings.showwarning = custom_showwarning

    except ImportError:
        pass  # NumbaPerformanceWarning not available in this numba version


def log_backend_availability(backends_available: List[str]) -> None:
    """
    Log which execution backends are available for conflict scans.

    Parameters
    ----------
    backends_available : List[str]
        List of available backends (e.g., ['python', 'cpu-parallel'])
    """
    logger.info(f"Available backends: {', '.join(backends_available)}")

    if "cpu-parallel" in backends_available:
        logger.info("  cpu-parallel: LLVM-compiled parallel code (numba.njit + prange)")
    logger.info("  python: unoptimized reference implementation")

    best = backends_available[-1]
    logger.info(f"Default backend='best' will use: {best}")


# ============================================================================ #
# Matrix Logging
# ============================================================================ #


def log_matrix_statistics(
    species_count: int, character_count: int, density: float, labels_from: str
) -> None:
    """
    Log the shape of a newly constructed matrix.

    Parameters
    ----------
    species_count, character_count : int
        Matrix dimensions.
    density : float
        Fraction of entries equal to 1.
    labels_from : str
        Where character labels came from ('header', 'synthesized', 'columns').
    """
    logger.info(
        "Matrix built: %d species, %d characters (%.1f%% ones), labels from %s",
        species_count,
        character_count,
        100.0 * density,
        labels_from,
    )


def log_null_columns(removed: Sequence[str], remaining: int) -> None:
    """Log the outcome of null-column pruning."""
    if not removed:
        logger.info("No null characters; %d characters kept", remaining)
        return
    if len(removed) <= 5:
        logger.info(
            "Removed %d null character(s) (%s); %d characters kept",
            len(removed),
            ", ".join(removed),
            remaining,
        )
    else:
        logger.info(
            "Removed %d null characters; %d characters kept",
            len(removed),
            remaining,
        )


def log_observed_label_scheme(character_count: int) -> None:
    """
    Warn that persistent labels were synthesized with the 'observed' rule.

    Under that rule both members of a +/- character pair receive the same
    '+' label.
    """
    logger.warning(
        "Persistent labels synthesized with the 'observed' scheme: the sign "
        "is computed as index %% 1, so all %d labels are '+' and adjacent "
        "columns share a label. Use use_label_scheme('corrected') for "
        "alternating +/- labels.",
        character_count,
    )


# ============================================================================ #
# Reconstruction Logging
# ============================================================================ #


def log_partition(n_labels: int, class_sizes: List[int]) -> None:
    """Log one partition step at DEBUG level."""
    logger.debug(
        "Partitioned %d characters into %d class(es): sizes %s",
        n_labels,
        len(class_sizes),
        class_sizes,
    )


def log_tree_statistics(n_characters: int, n_root_children: int, depth: int) -> None:
    """Log a summary of a constructed tree."""
    logger.info(
        "Tree built: %d characters, %d root subtree(s), depth %d",
        n_characters,
        n_root_children,
        depth,
    )


def log_conflicts(conflicts: List[Tuple[str, str]], rooted: bool) -> None:
    """
    Log the result of a pairwise compatibility scan.

    Parameters
    ----------
    conflicts : List[Tuple[str, str]]
        Conflicting character pairs.
    rooted : bool
        Whether the three-gamete (rooted) rule was used.
    """
    rule = "three-gamete" if rooted else "four-gamete"
    if not conflicts:
        logger.info("Compatibility scan (%s): no conflicting pairs", rule)
        return

    shown = ", ".join(f"{a}/{b}" for a, b in conflicts[:5])
    if len(conflicts) > 5:
        shown += ", ..."
    logger.warning(
        "Compatibility scan (%s): %d conflicting pair(s): %s",
        rule,
        len(conflicts),
        shown,
    )


def log_conflict_components(component_sizes: List[int]) -> None:
    """Log the component structure of the conflict graph."""
    nontrivial = [size for size in component_sizes if size > 1]
    logger.info(
        "Conflict graph: %d component(s), %d with conflicts (largest %d)",
        len(component_sizes),
        len(nontrivial),
        max(component_sizes, default=0),
    )
