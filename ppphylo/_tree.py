"""
_tree.py
========
Explicit tree nodes for reconstructed phylogenies, the matrix-to-tree
builder, and conversion to and from the NEWICK-like text form.

Public API
----------
  Leaf(), Internal(children)
      Node types.  ``Internal.children`` is an ordered list of
      ``(subtree, label)`` pairs: the character *label* is realized on the
      edge above *subtree*.

  build_tree(matrix, characters, validate=False) -> Leaf | Internal
  to_newick(tree) -> str
  parse_tree(text) -> Leaf | Internal
  tree_labels(tree), tree_depth(tree)
  TreeBuilder(matrix, validate=False).build(characters) -> str

Text form
---------
A ``Leaf`` is the empty string.  An ``Internal`` node is
``(<sub>:<label>,<sub>:<label>,...)``.  The terminating ``;`` is added at
the output boundary by :func:`ppphylo.format_newick`, not here.

No recursion
------------
Tree depth can reach the number of characters, so construction,
serialization and parsing all use explicit stacks instead of Python
recursion.  The results are identical to the recursive definitions.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ppphylo._conflict import validate_partition
from ppphylo._errors import MalformedInputError
from ppphylo._logging import log_tree_statistics
from ppphylo._partition import partition


logger = logging.getLogger(__name__)


# ================================================================== #
# Node types                                                           #
# ================================================================== #


class Leaf:
    """A subtree with no further structure."""

    __slots__ = ()

    def __eq__(self, other) -> bool:
        return isinstance(other, Leaf)

    def __hash__(self) -> int:
        return hash(Leaf)

    def __repr__(self) -> str:
        return "Leaf()"


class Internal:
    """
    A node with one or more labelled children.

    Attributes
    ----------
    children : list[tuple[Leaf | Internal, str]]
        ``(subtree, label)`` pairs in output order.
    """

    __slots__ = ("children",)

    def __init__(self, children=None) -> None:
        self.children: List[Tuple["Node", str]] = list(children) if children else []

    def __eq__(self, other) -> bool:
        if not isinstance(other, Internal):
            return NotImplemented
        return self.children == other.children

    def __repr__(self) -> str:
        return f"Internal({self.children!r})"


Node = Union[Leaf, Internal]


# ================================================================== #
# Construction                                                         #
# ================================================================== #


def build_tree(matrix, characters: Sequence[str], validate: bool = False) -> Node:
    """
    Build the tree realizing *characters* on *matrix*.

    Each partition class of *characters* becomes one child; its first label
    (the class's maximal character) labels the edge to that child and the
    rest of the class is realized below it.

    Parameters
    ----------
    matrix : CharacterMatrix
        Normally pruned and sorted (see :meth:`CharacterMatrix.sort_columns`).
    characters : sequence of str
        Labels to realize, in sorted column order.  Not modified.
    validate : bool, default False
        Check every partition for coverage and disjointness.

    Returns
    -------
    Leaf
        When *characters* is empty.
    Internal
        Otherwise.

    Raises
    ------
    IncompatibleMatrixError
        If *validate* is True and a partition is not a proper partition.
    """
    characters = list(characters)
    if not characters:
        return Leaf()

    root = Internal()
    stack = [(root, characters)]
    while stack:
        node, labels = stack.pop()
        classes = partition(labels, matrix)
        if validate:
            validate_partition(labels, classes)
        for members in classes:
            head, rest = members[0], members[1:]
            if rest:
                child = Internal()
                stack.append((child, rest))
            else:
                child = Leaf()
            node.children.append((child, head))

    log_tree_statistics(len(characters), len(root.children), tree_depth(root))
    return root


class TreeBuilder:
    """
    String-producing front end to :func:`build_tree`.

    Parameters
    ----------
    matrix : CharacterMatrix
    validate : bool, default False
        Forwarded to :func:`build_tree`.

    Examples
    --------
    >>> m = CharacterMatrix.from_rows(['11', '10'])
    >>> m.sort_columns()
    >>> TreeBuilder(m).build(m.character_labels)
    '((:C00002):C00001)'
    """

    def __init__(self, matrix, validate: bool = False) -> None:
        self.matrix = matrix
        self.validate = validate

    def build_tree(self, characters: Optional[Sequence[str]] = None) -> Node:
        """Tree object for *characters* (default: all matrix characters)."""
        if characters is None:
            characters = self.matrix.character_labels
        return build_tree(self.matrix, characters, validate=self.validate)

    def build(self, characters: Optional[Sequence[str]] = None) -> str:
        """Text form of :meth:`build_tree`, without the trailing ``;``."""
        return to_newick(self.build_tree(characters))


# ================================================================== #
# Traversal                                                            #
# ================================================================== #


def _text_tokens(tree: Node) -> Iterator[Tuple[str, str]]:
    """
    Yield ``(kind, value)`` tokens in text order.

    *kind* is ``'punct'`` for ``(``, ``,`` and ``)``, or ``'label'`` for a
    character label.
    """
    stack: List[object] = [tree]
    while stack:
        item = stack.pop()
        if isinstance(item, tuple):
            yield item
        elif isinstance(item, Internal):
            tokens: List[object] = [("punct", "(")]
            for k, (sub, label) in enumerate(item.children):
                if k:
                    tokens.append(("punct", ","))
                tokens.append(sub)
                tokens.append(("label", label))
            tokens.append(("punct", ")"))
            stack.extend(reversed(tokens))


def to_newick(tree: Node) -> str:
    """
    Serialize *tree* to its text form (no trailing ``;``).

    Examples
    --------
    >>> to_newick(Leaf())
    ''
    >>> to_newick(Internal([(Internal([(Leaf(), 'B')]), 'A'), (Leaf(), 'C')]))
    '((:B):A,:C)'
    """
    parts = []
    for kind, value in _text_tokens(tree):
        parts.append(":" + value if kind == "label" else value)
    return "".join(parts)


def tree_labels(tree: Node) -> List[str]:
    """Character labels in the order they appear in the text form."""
    return [value for kind, value in _text_tokens(tree) if kind == "label"]


def tree_depth(tree: Node) -> int:
    """Number of nested Internal levels (0 for a Leaf)."""
    deepest = 0
    stack = [(tree, 0)]
    while stack:
        node, level = stack.pop()
        if isinstance(node, Internal):
            level += 1
            deepest = max(deepest, level)
            stack.extend((sub, level) for sub, _ in node.children)
    return deepest


# ================================================================== #
# Parsing                                                              #
# ================================================================== #


def parse_tree(text: str) -> Node:
    """
    Parse the text form produced by :func:`to_newick`.

    A trailing ``;`` and surrounding whitespace are accepted.  Labels run up
    to the next ``,``, ``)`` or ``;`` and are stripped of whitespace.

    Parameters
    ----------
    text : str

    Returns
    -------
    Leaf | Internal

    Raises
    ------
    MalformedInputError
        On unbalanced parentheses, empty labels, empty ``()`` groups, or any
        other deviation from the grammar.

    Examples
    --------
    >>> parse_tree('((:B):A,:C);')
    Internal([(Internal([(Leaf(), 'B')]), 'A'), (Leaf(), 'C')])
    """
    s = text.strip()
    n_chars = len(s)
    if n_chars > 0 and s[n_chars - 1] == ";":
        n_chars -= 1
    if s[:n_chars].strip() == "":
        return Leaf()

    # States: 'start' expects '(' ; 'item' expects '(' or ':' ;
    # 'label' expects ':' after a closed subtree ; 'sep' expects ',' or ')' ;
    # 'end' accepts only whitespace.
    state = "start"
    stack: List[Internal] = []
    pending: Optional[Internal] = None
    root: Optional[Internal] = None

    i = 0
    while i < n_chars:
        c = s[i]

        if c == " " or c == "\t" or c == "\n" or c == "\r":
            i += 1
            continue

        if c == "(" and (state == "start" or state == "item"):
            stack.append(Internal())
            state = "item"
            i += 1
            continue

        if c == ":" and (state == "item" or state == "label"):
            j = i + 1
            while j < n_chars and s[j] != "," and s[j] != ")" and s[j] != ";":
                j += 1
            label = s[i + 1:j].strip()
            if not label:
                raise MalformedInputError(f"Empty label at position {i}.")
            subtree = pending if pending is not None else Leaf()
            stack[-1].children.append((subtree, label))
            pending = None
            state = "sep"
            i = j
            continue

        if c == "," and state == "sep":
            state = "item"
            i += 1
            continue

        if c == ")" and state == "sep":
            node = stack.pop()
            if stack:
                pending = node
                state = "label"
            else:
                root = node
                state = "end"
            i += 1
            continue

        raise MalformedInputError(
            f"Unexpected {c!r} at position {i} in tree text."
        )

    if state != "end":
        raise MalformedInputError("Tree text ended before all groups were closed.")
    return root
