"""
tests/test_reconstruct.py
=========================
End-to-end tests for reconstruct, reconstruct_file and reconstruct_matrix.

Worked example
--------------
Rows 11, 01, 10 give columns C00001 = '101' and C00002 = '110'.  Sorting
puts C00002 first; it is the only maximal character and its class holds
both characters, so the result is ``((:C00001):C00002);``.
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from ppphylo import (
    CharacterMatrix,
    IncompatibleMatrixError,
    MalformedInputError,
    check_balanced,
    parse_tree,
    reconstruct,
    reconstruct_file,
    reconstruct_matrix,
    tree_labels,
    use_label_scheme,
)

from examples_matrices import (
    columns_to_rows,
    laminar_columns,
    nested_rows,
    overlapping_rows,
    random_columns,
)


class TestReconstruct:
    def test_worked_example(self):
        assert reconstruct(["11", "01", "10"]) == "((:C00001):C00002);"

    def test_header(self):
        assert reconstruct(["#A,B,C", "110", "100", "001"]) == "((:B):A,:C);"

    def test_nested(self):
        assert reconstruct(nested_rows()) == "(((:D):B):A,(:E):C);"

    def test_string_input(self):
        assert reconstruct("#A,B,C\n110\n100\n001\n") == "((:B):A,:C);"

    def test_null_columns_dropped(self):
        assert reconstruct(["#A,Z,B", "100", "101"]) == "((:B):A);"

    def test_all_null(self):
        assert reconstruct(["00", "00"]) == ";"

    def test_persistent_corrected(self):
        out = reconstruct(["10", "11"], persistent=True, label_scheme="corrected")
        assert out == "((:C0001-):C0001+);"

    def test_persistent_corrected_context(self):
        with use_label_scheme("corrected"):
            out = reconstruct(["10", "11"], persistent=True)
        assert out == "((:C0001-):C0001+);"

    def test_persistent_observed_duplicates(self):
        with pytest.raises(MalformedInputError):
            reconstruct(["10", "11"], persistent=True)

    def test_overlapping_permissive(self):
        assert reconstruct(overlapping_rows()) == "((:Y):X,(:Z):Y);"

    @pytest.mark.parametrize(
        "lines", [["#A),B", "11", "10"], ["#A,,B", "110", "101"]]
    )
    def test_header_names_must_fit_tree_text(self, lines):
        with pytest.raises(MalformedInputError):
            reconstruct(lines)

    @pytest.mark.parametrize("lines", [[], ["#A"], ["12"], ["10", "1"]])
    def test_malformed(self, lines):
        with pytest.raises(MalformedInputError):
            reconstruct(lines)

    def test_deterministic(self):
        rng = np.random.default_rng(7)
        rows = columns_to_rows(random_columns(rng, 12, 20))
        assert reconstruct(rows) == reconstruct(rows)


class TestValidate:
    def test_incompatible_raises(self):
        with pytest.raises(IncompatibleMatrixError) as info:
            reconstruct(["11", "01", "10"], validate=True, backend="python")
        assert info.value.conflicts == [("C00002", "C00001")]

    def test_overlapping_raises(self):
        with pytest.raises(IncompatibleMatrixError):
            reconstruct(overlapping_rows(), validate=True)

    def test_compatible_unchanged(self):
        rows = nested_rows()
        assert reconstruct(rows, validate=True) == reconstruct(rows)


class TestReconstructMatrix:
    def test_normalizes_in_place(self):
        m = CharacterMatrix({"a": "10", "z": "00", "b": "11"})
        assert reconstruct_matrix(m) == "((:a):b);"
        assert m.character_labels == ["b", "a"]

    def test_already_normalized(self):
        m = CharacterMatrix.from_rows(nested_rows())
        first = reconstruct_matrix(m)
        assert reconstruct_matrix(m) == first


class TestReconstructFile:
    def test_row_layout(self, tmp_path):
        path = tmp_path / "matrix.txt"
        path.write_text("#A,B,C\n110\n100\n001\n")
        assert reconstruct_file(path) == "((:B):A,:C);"

    def test_dimension_layout(self, tmp_path):
        path = tmp_path / "matrix.txt"
        path.write_text("3 2\n1 1\n0 1\n1 0\n")
        assert reconstruct_file(str(path)) == "((:C00001):C00002);"

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            reconstruct_file(tmp_path / "absent.txt")


class TestOutputProperties:
    @pytest.mark.parametrize("seed", range(12))
    def test_laminar(self, seed):
        rng = np.random.default_rng(seed)
        columns = laminar_columns(rng, 15, 20)
        out = reconstruct(columns_to_rows(columns), validate=True)

        assert out.endswith(";")
        assert check_balanced(out)
        labels = tree_labels(parse_tree(out))
        assert sorted(labels) == sorted(columns)
        assert out.count(":") == len(columns)

    @pytest.mark.parametrize("seed", range(12))
    def test_random_covers_every_character(self, seed):
        """Without validation every non-null character still appears."""
        rng = np.random.default_rng(100 + seed)
        columns = random_columns(rng, 8, 10, density=0.3)
        expected = {label for label, col in columns.items() if "1" in col}
        out = reconstruct(columns_to_rows(columns))

        assert check_balanced(out)
        assert set(tree_labels(parse_tree(out))) == expected

    @pytest.mark.large_scale
    def test_large_laminar(self):
        rng = np.random.default_rng(2024)
        columns = laminar_columns(rng, 300, 500)
        out = reconstruct(columns_to_rows(columns), validate=True)

        assert check_balanced(out)
        assert out.count(":") == len(columns)
