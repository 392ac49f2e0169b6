"""
tests/test_tree.py
==================
Pytest test suite for tree nodes, build_tree, TreeBuilder and the text form.

Reference tree
--------------
The nested matrix (examples_matrices.nested_rows) builds::

    (((:D):B):A,(:E):C)

    root ─┬─ A ── B ── D
          └─ C ── E
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from ppphylo._errors import IncompatibleMatrixError, MalformedInputError
from ppphylo._matrix import CharacterMatrix
from ppphylo._tree import (
    Internal,
    Leaf,
    TreeBuilder,
    build_tree,
    parse_tree,
    to_newick,
    tree_depth,
    tree_labels,
)
from ppphylo._utils import check_balanced

from examples_matrices import laminar_columns, nested_rows, overlapping_rows


NESTED_TEXT = "(((:D):B):A,(:E):C)"


# ======================================================================== #
# Fixtures                                                                  #
# ======================================================================== #


@pytest.fixture
def nested():
    m = CharacterMatrix.from_rows(nested_rows())
    m.remove_null_columns()
    m.sort_columns()
    return m


@pytest.fixture
def nested_tree():
    return Internal(
        [
            (Internal([(Internal([(Leaf(), "D")]), "B")]), "A"),
            (Internal([(Leaf(), "E")]), "C"),
        ]
    )


# ======================================================================== #
# Node types                                                                #
# ======================================================================== #


class TestNodes:
    def test_leaf_equality(self):
        assert Leaf() == Leaf()
        assert hash(Leaf()) == hash(Leaf())

    def test_leaf_not_internal(self):
        assert Leaf() != Internal()

    def test_internal_equality(self):
        a = Internal([(Leaf(), "x")])
        assert a == Internal([(Leaf(), "x")])
        assert a != Internal([(Leaf(), "y")])

    def test_internal_children_copied(self):
        children = [(Leaf(), "x")]
        node = Internal(children)
        children.append((Leaf(), "y"))
        assert len(node.children) == 1

    def test_repr(self):
        assert repr(Internal([(Leaf(), "x")])) == "Internal([(Leaf(), 'x')])"


# ======================================================================== #
# Serialization and traversal                                               #
# ======================================================================== #


class TestToNewick:
    def test_leaf(self):
        assert to_newick(Leaf()) == ""

    def test_single(self):
        assert to_newick(Internal([(Leaf(), "A")])) == "(:A)"

    def test_nested(self, nested_tree):
        assert to_newick(nested_tree) == NESTED_TEXT

    def test_labels_in_text_order(self, nested_tree):
        assert tree_labels(nested_tree) == ["D", "B", "A", "E", "C"]

    def test_depth(self, nested_tree):
        assert tree_depth(nested_tree) == 3
        assert tree_depth(Leaf()) == 0
        assert tree_depth(Internal([(Leaf(), "A")])) == 1


class TestParseTree:
    def test_nested(self, nested_tree):
        assert parse_tree(NESTED_TEXT) == nested_tree

    def test_terminated(self, nested_tree):
        assert parse_tree(NESTED_TEXT + ";") == nested_tree

    def test_whitespace(self):
        assert parse_tree(" ( :A , :B ) ;\n") == Internal(
            [(Leaf(), "A"), (Leaf(), "B")]
        )

    @pytest.mark.parametrize("text", ["", ";", "  ;  "])
    def test_empty_is_leaf(self, text):
        assert parse_tree(text) == Leaf()

    def test_labels_with_signs(self):
        tree = parse_tree("((:C0001-):C0001+);")
        assert tree_labels(tree) == ["C0001-", "C0001+"]

    @pytest.mark.parametrize(
        "text",
        [
            "(:A",        # unclosed
            "(:A))",      # extra close
            "()",         # empty group
            "(:)",        # empty label
            ":A",         # no enclosing group
            "(,:A)",      # leading comma
            "(:A,)",      # trailing comma
            "(:A)x",      # trailing garbage
            "((:A))",     # subtree without label
            "(:A)(:B)",   # two roots
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(MalformedInputError):
            parse_tree(text)

    def test_round_trip(self, nested_tree):
        assert to_newick(parse_tree(to_newick(nested_tree))) == NESTED_TEXT


# ======================================================================== #
# Construction                                                              #
# ======================================================================== #


class TestBuildTree:
    def test_nested(self, nested, nested_tree):
        assert build_tree(nested, nested.character_labels) == nested_tree

    def test_empty_characters(self, nested):
        assert build_tree(nested, []) == Leaf()

    def test_input_not_modified(self, nested):
        labels = nested.character_labels
        build_tree(nested, labels)
        assert labels == ["A", "B", "D", "C", "E"]

    def test_subset(self, nested):
        tree = build_tree(nested, ["B", "D", "E"])
        assert to_newick(tree) == "((:D):B,:E)"

    def test_identical_columns_chain(self):
        m = CharacterMatrix({"c0": "1", "c1": "1", "c2": "1"})
        assert to_newick(build_tree(m, m.character_labels)) == "(((:c2):c1):c0)"

    def test_validate_passes_on_compatible(self, nested, nested_tree):
        assert build_tree(nested, nested.character_labels, validate=True) == nested_tree

    def test_overlapping_permissive(self):
        m = CharacterMatrix.from_rows(overlapping_rows())
        m.sort_columns()
        tree = build_tree(m, m.character_labels)
        assert to_newick(tree) == "((:Y):X,(:Z):Y)"

    def test_overlapping_validate_raises(self):
        m = CharacterMatrix.from_rows(overlapping_rows())
        m.sort_columns()
        with pytest.raises(IncompatibleMatrixError):
            build_tree(m, m.character_labels, validate=True)

    def test_deeper_than_recursion_limit(self):
        n = max(sys.getrecursionlimit(), 1000) + 200
        labels = ["c%05d" % i for i in range(n)]
        m = CharacterMatrix({label: "1" for label in labels})
        tree = build_tree(m, labels)

        assert tree_depth(tree) == n
        assert tree_labels(tree) == labels[::-1]
        text = to_newick(tree)
        assert check_balanced(text)
        assert text.count(":") == n
        assert text.startswith("(" * n)


class TestTreeBuilder:
    def test_build_string(self, nested):
        assert TreeBuilder(nested).build(nested.character_labels) == NESTED_TEXT

    def test_default_characters(self, nested):
        assert TreeBuilder(nested).build() == NESTED_TEXT

    def test_build_tree(self, nested, nested_tree):
        assert TreeBuilder(nested).build_tree() == nested_tree

    def test_empty(self, nested):
        assert TreeBuilder(nested).build([]) == ""

    def test_two_characters(self):
        m = CharacterMatrix.from_rows(["11", "10"])
        m.sort_columns()
        assert TreeBuilder(m).build() == "((:C00002):C00001)"

    def test_validate_flag(self):
        m = CharacterMatrix.from_rows(overlapping_rows())
        m.sort_columns()
        with pytest.raises(IncompatibleMatrixError):
            TreeBuilder(m, validate=True).build()

    def test_deterministic(self, nested):
        builder = TreeBuilder(nested)
        assert builder.build() == builder.build()


class TestTreeProperties:
    """Well-formedness on random matrices that admit a perfect phylogeny."""

    @pytest.mark.parametrize("seed", range(15))
    def test_well_formed(self, seed):
        rng = np.random.default_rng(seed)
        m = CharacterMatrix(laminar_columns(rng, 12, 18))
        m.sort_columns()
        tree = build_tree(m, m.character_labels, validate=True)
        text = to_newick(tree)

        assert check_balanced(text)
        assert sorted(tree_labels(tree)) == sorted(m.character_labels)
        assert text.count(":") == m.character_count
        assert parse_tree(text) == tree

    @pytest.mark.parametrize("seed", range(10))
    def test_edges_nest_species_sets(self, seed):
        """Every label's species set contains those of the labels below it."""
        rng = np.random.default_rng(seed)
        m = CharacterMatrix(laminar_columns(rng, 10, 14))
        m.sort_columns()
        tree = build_tree(m, m.character_labels)

        stack = [(tree, None)]
        while stack:
            node, above = stack.pop()
            if isinstance(node, Internal):
                for sub, label in node.children:
                    if above is not None:
                        assert m.species_with(label) <= m.species_with(above)
                    stack.append((sub, label))
