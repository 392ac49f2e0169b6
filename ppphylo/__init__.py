"""
ppphylo
=======

Perfect phylogeny reconstruction from binary character matrices.

Given a species × character 0/1 matrix, *ppphylo* orders the characters by
their columns, repeatedly splits them into classes under maximal characters,
and assembles the nested tree those classes describe.

Main Classes
------------
CharacterMatrix : Binary matrix with column sort and null-column pruning
TreeBuilder : Matrix → tree text
Leaf, Internal : Explicit tree nodes

Pipeline
--------
reconstruct : Matrix text → terminated tree text
reconstruct_file : Same, from a file
reconstruct_matrix : Same, from a CharacterMatrix

Algorithm
---------
find_maximal : Maximal characters of an ordered character set
partition : Split characters into classes under maximal characters
build_tree : Build the tree object
to_newick, parse_tree : Tree object ↔ text

Compatibility
-------------
conflict_pairs : Pairwise gamete scan
is_compatible, check_compatible : Whole-matrix check
conflict_components : Connected components of the conflict graph
validate_partition : Partition coverage/disjointness check

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
suppress_warnings : Suppress specific warnings
use_backend : Force specific backend for conflict scans
use_label_scheme : Select the persistent label sign rule

Examples
--------
>>> from ppphylo import reconstruct
>>> reconstruct(['#A,B,C', '110', '100', '001'])
'((:B):A,:C);'

>>> from ppphylo import CharacterMatrix, TreeBuilder
>>> m = CharacterMatrix.from_rows(['110', '100', '001'])
>>> m.remove_null_columns()
[]
>>> m.sort_columns()
>>> TreeBuilder(m).build()
'((:C00002):C00001,:C00003)'
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._matrix import CharacterMatrix
from ._tree import (
    Leaf,
    Internal,
    TreeBuilder,
    build_tree,
    to_newick,
    parse_tree,
    tree_labels,
    tree_depth,
)
from ._partition import find_maximal, partition

# Errors
from ._errors import MalformedInputError, IncompatibleMatrixError

# Boundary I/O and pipeline
from ._reader import parse_matrix, read_matrix
from ._reconstruct import reconstruct, reconstruct_file, reconstruct_matrix

# Compatibility checks
from ._conflict import (
    conflict_pairs,
    is_compatible,
    check_compatible,
    conflict_components,
    validate_partition,
)

# Context managers (user-facing utilities)
from ._context import (
    suppress_logger,
    quiet,
    suppress_warnings,
    use_backend,
    use_label_scheme,
)

# Utilities (generally useful functions)
from ._utils import (
    species_label,
    character_label,
    character_labels,
    format_newick,
    check_balanced,
)

# Backend information (useful for checking capabilities)
from ._backend import (
    get_available_backends,
    get_backend_info,
    check_numba_available,
)

# Public API
__all__ = [
    # Main classes
    "CharacterMatrix",
    "Leaf",
    "Internal",
    "TreeBuilder",
    # Algorithm
    "find_maximal",
    "partition",
    "build_tree",
    "to_newick",
    "parse_tree",
    "tree_labels",
    "tree_depth",
    # Errors
    "MalformedInputError",
    "IncompatibleMatrixError",
    # I/O and pipeline
    "parse_matrix",
    "read_matrix",
    "reconstruct",
    "reconstruct_file",
    "reconstruct_matrix",
    # Compatibility
    "conflict_pairs",
    "is_compatible",
    "check_compatible",
    "conflict_components",
    "validate_partition",
    # Context managers
    "suppress_logger",
    "quiet",
    "suppress_warnings",
    "use_backend",
    "use_label_scheme",
    # Utilities
    "species_label",
    "character_label",
    "character_labels",
    "format_newick",
    "check_balanced",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "check_numba_available",
    # Version info
    "__version__",
]
