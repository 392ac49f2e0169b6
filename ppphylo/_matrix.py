"""
_matrix.py
==========
A binary species × character matrix stored column-major, one '0'/'1'
string per character.

Public API
----------
  CharacterMatrix(columns, species_labels=None)
      Constructor from already-validated structured input: an ordered
      mapping character label → column string.

  CharacterMatrix.from_rows(rows, persistent=False, label_scheme=None)
      Construction from row strings, with an optional ``#`` header line.

  .remove_null_columns()
  .sort_columns()
  .species_with(label)
  .characters_of(species)
  .to_array()

Ordering
--------
``character_labels`` is the working order used by the partition algorithm.
After :meth:`sort_columns` it is the decreasing lexicographic order of the
column strings, so a character whose species set contains another's always
precedes it.  The bit content of a column never changes after construction;
only the label order (sort) and the label set (null pruning) do.
"""

import logging
import re
from typing import Dict, List, Mapping, Optional, Sequence, Set

import numpy as np

from ppphylo._context import get_label_scheme
from ppphylo._errors import MalformedInputError
from ppphylo._logging import (
    log_matrix_statistics,
    log_null_columns,
    log_observed_label_scheme,
)
from ppphylo._utils import LABEL_SCHEMES, character_labels, species_label


logger = logging.getLogger(__name__)

_HEADER_SEPARATORS = re.compile(r"[,;]")

# Characters with a meaning in the tree text form
_RESERVED_IN_LABEL = re.compile(r"[(),:;\s]")


class CharacterMatrix:
    """
    Binary character matrix for perfect phylogeny reconstruction.

    Attributes
    ----------
    persistent : bool
        Whether synthesized labels follow the persistent (+/-) rule.
        Informational only for matrices built from explicit columns.
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(
        self,
        columns: Mapping[str, str],
        species_labels: Optional[Sequence[str]] = None,
        persistent: bool = False,
        labels_from: str = "columns",
    ) -> None:
        """
        Parameters
        ----------
        columns : Mapping[str, str]
            Character label → column string of '0'/'1', one symbol per
            species.  Iteration order of the mapping becomes the initial
            ``character_labels`` order.
        species_labels : sequence of str, optional
            Row labels; synthesized as ``s%04d`` when omitted.
        persistent : bool, default False
            Recorded on the instance.
        labels_from : str
            Provenance of the labels, used for logging only.

        Raises
        ------
        MalformedInputError
            If there are no columns, columns are empty or of unequal length,
            contain symbols other than '0'/'1', a label is empty or contains
            one of ``(),:;`` or whitespace, or *species_labels* has the
            wrong length.
        """
        if not columns:
            raise MalformedInputError("Matrix must contain at least one character.")

        self._columns: Dict[str, str] = {}
        n_species = None
        for label, column in columns.items():
            _check_label(label, "Character label")
            if n_species is None:
                n_species = len(column)
                if n_species == 0:
                    raise MalformedInputError("Matrix must contain at least one species.")
            elif len(column) != n_species:
                raise MalformedInputError(
                    f"Column '{label}' has {len(column)} entries; "
                    f"expected {n_species}."
                )
            if not set(column) <= {"0", "1"}:
                bad = sorted(set(column) - {"0", "1"})
                raise MalformedInputError(
                    f"Column '{label}' contains symbols other than 0/1: {bad}"
                )
            self._columns[label] = column

        if species_labels is None:
            species_labels = [species_label(i) for i in range(n_species)]
        elif len(species_labels) != n_species:
            raise MalformedInputError(
                f"{len(species_labels)} species labels given for "
                f"{n_species} species."
            )

        self.persistent = persistent
        self._species_count = n_species
        self._species_labels: List[str] = list(species_labels)
        self._labels: List[str] = list(self._columns)

        # species index -> set of character labels, built on first use
        self._rows: Optional[List[Set[str]]] = None

        log_matrix_statistics(
            self._species_count, len(self._labels), self.density(), labels_from
        )

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[str],
        persistent: bool = False,
        label_scheme: Optional[str] = None,
    ) -> "CharacterMatrix":
        """
        Build a matrix from row strings, one row per species.

        Parameters
        ----------
        rows : sequence of str
            Equal-length strings over {0, 1}.  The first row may instead be a
            header starting with ``#`` that lists the character names
            separated by ``,`` or ``;``.
        persistent : bool, default False
            Label synthesis rule when there is no header; see
            :func:`ppphylo.character_label`.
        label_scheme : {'observed', 'corrected'}, optional
            Sign rule for persistent labels.  Defaults to the scheme selected
            with :func:`ppphylo.use_label_scheme` ('observed').

        Returns
        -------
        CharacterMatrix

        Raises
        ------
        MalformedInputError
            On empty input, ragged rows, symbols other than 0/1, a header
            whose names do not match the column count, empty header names or
            names using ``(),:;`` or whitespace, or duplicate labels.
        ValueError
            If *label_scheme* is unknown.

        Examples
        --------
        >>> m = CharacterMatrix.from_rows(['11', '01', '10'])
        >>> m.character_labels
        ['C00001', 'C00002']
        >>> m.column('C00001')
        '101'
        """
        scheme = label_scheme if label_scheme is not None else get_label_scheme()
        if scheme not in LABEL_SCHEMES:
            raise ValueError(
                f"Unknown label scheme '{scheme}'. "
                f"Valid schemes: {', '.join(LABEL_SCHEMES)}"
            )

        rows = [row.strip() for row in rows]
        if not rows:
            raise MalformedInputError("Matrix input contains no rows.")

        header = None
        if rows[0].startswith("#"):
            header = _split_header(rows[0][1:])
            rows = rows[1:]
            if not rows:
                raise MalformedInputError("Matrix input contains a header but no rows.")

        width = len(rows[0])
        if width == 0:
            raise MalformedInputError("Matrix rows must not be empty.")
        for i, row in enumerate(rows):
            if len(row) != width:
                raise MalformedInputError(
                    f"Row {i} has length {len(row)}; expected {width}."
                )
            if not set(row) <= {"0", "1"}:
                raise MalformedInputError(
                    f"Row {i} contains symbols other than 0/1: {row!r}"
                )

        if header is not None:
            for k, name in enumerate(header):
                _check_label(name, f"Header name {k}")
            if len(header) != width:
                raise MalformedInputError(
                    f"Header declares {len(header)} character names "
                    f"but rows have {width} columns."
                )
            labels = header
            labels_from = "header"
        else:
            labels = character_labels(width, persistent, scheme)
            labels_from = "synthesized"

        duplicates = _duplicates(labels)
        if duplicates:
            if header is not None:
                raise MalformedInputError(
                    f"Duplicate character names in header: {', '.join(duplicates)}"
                )
            raise MalformedInputError(
                f"Synthesized labels are not unique under the '{scheme}' "
                f"persistent scheme (duplicates: {', '.join(duplicates[:5])}). "
                "Supply a header or select the 'corrected' scheme."
            )
        if header is None and persistent and scheme == "observed":
            log_observed_label_scheme(width)

        columns = {
            label: "".join(column) for label, column in zip(labels, zip(*rows))
        }
        return cls(columns, persistent=persistent, labels_from=labels_from)

    # ================================================================== #
    # Properties                                                           #
    # ================================================================== #

    @property
    def species_count(self) -> int:
        return self._species_count

    @property
    def character_count(self) -> int:
        return len(self._labels)

    @property
    def species_labels(self) -> List[str]:
        return list(self._species_labels)

    @property
    def character_labels(self) -> List[str]:
        """Current character order (a copy; mutating it has no effect)."""
        return list(self._labels)

    def column(self, label: str) -> str:
        """Return the column string of character *label*."""
        try:
            return self._columns[label]
        except KeyError:
            raise KeyError(f"Unknown character label '{label}'") from None

    def density(self) -> float:
        """Fraction of matrix entries equal to 1 (0.0 for an empty matrix)."""
        total = self._species_count * len(self._labels)
        if total == 0:
            return 0.0
        ones = sum(self._columns[label].count("1") for label in self._labels)
        return ones / total

    # ================================================================== #
    # Normalization                                                        #
    # ================================================================== #

    def remove_null_columns(self) -> List[str]:
        """
        Delete every character that no species possesses.

        Survivors keep their relative order.

        Returns
        -------
        list[str]
            The removed labels, in their former order.
        """
        removed = [label for label in self._labels if "1" not in self._columns[label]]
        for label in removed:
            del self._columns[label]
        self._labels = [label for label in self._labels if label in self._columns]
        self._rows = None

        log_null_columns(removed, len(self._labels))
        return removed

    def sort_columns(self) -> None:
        """
        Reorder characters by decreasing lexicographic order of their column
        strings.

        Identical columns keep their relative order, so the sort is
        idempotent.
        """
        self._labels = sorted(
            self._labels, key=self._columns.__getitem__, reverse=True
        )

    # ================================================================== #
    # Adjacency queries                                                    #
    # ================================================================== #

    def species_with(self, label: str) -> Set[int]:
        """Indices of the species that possess character *label*."""
        column = self.column(label)
        return {i for i, bit in enumerate(column) if bit == "1"}

    def characters_of(self, species: int) -> Set[str]:
        """Labels of the characters that species *species* possesses."""
        if not 0 <= species < self._species_count:
            raise IndexError(
                f"Species index {species} out of range "
                f"[0, {self._species_count})."
            )
        if self._rows is None:
            self._rows = self._build_rows()
        return set(self._rows[species])

    def _build_rows(self) -> List[Set[str]]:
        rows = [set() for _ in range(self._species_count)]
        for label in self._labels:
            column = self._columns[label]
            for i in range(self._species_count):
                if column[i] == "1":
                    rows[i].add(label)
        return rows

    # ================================================================== #
    # Conversion                                                           #
    # ================================================================== #

    def to_array(self) -> np.ndarray:
        """
        Return the matrix as a uint8 array of shape (species, characters)
        with columns in ``character_labels`` order.
        """
        out = np.zeros((self._species_count, len(self._labels)), dtype=np.uint8)
        for j, label in enumerate(self._labels):
            bits = np.frombuffer(self._columns[label].encode("ascii"), dtype=np.uint8)
            out[:, j] = bits == ord("1")
        return out

    def to_rows(self) -> List[str]:
        """Row strings in ``character_labels`` order (inverse of from_rows)."""
        columns = [self._columns[label] for label in self._labels]
        return ["".join(bits) for bits in zip(*columns)] if columns else [
            "" for _ in range(self._species_count)
        ]

    def copy(self) -> "CharacterMatrix":
        """Independent copy preserving the current label order."""
        other = CharacterMatrix.__new__(CharacterMatrix)
        other.persistent = self.persistent
        other._species_count = self._species_count
        other._species_labels = list(self._species_labels)
        other._columns = dict(self._columns)
        other._labels = list(self._labels)
        other._rows = None
        return other

    # ================================================================== #
    # Dunder methods                                                       #
    # ================================================================== #

    def __contains__(self, label) -> bool:
        return label in self._columns

    def __eq__(self, other) -> bool:
        if not isinstance(other, CharacterMatrix):
            return NotImplemented
        return (
            self._labels == other._labels
            and self._columns == other._columns
            and self._species_labels == other._species_labels
        )

    def __repr__(self) -> str:
        return (
            f"CharacterMatrix({self._species_count} species x "
            f"{len(self._labels)} characters)"
        )


def _check_label(label, what: str) -> None:
    if not isinstance(label, str):
        raise MalformedInputError(f"{what} {label!r} is not a string.")
    if label == "":
        raise MalformedInputError(f"{what} is empty.")
    found = _RESERVED_IN_LABEL.search(label)
    if found:
        raise MalformedInputError(
            f"{what} '{label}' contains {found.group()!r}, which is reserved "
            "by the tree text form."
        )


def _split_header(header: str) -> List[str]:
    names = [name.strip() for name in _HEADER_SEPARATORS.split(header)]
    while names and names[-1] == "":
        names.pop()
    return names


def _duplicates(labels: Sequence[str]) -> List[str]:
    seen = set()
    duplicates = []
    for label in labels:
        if label in seen and label not in duplicates:
            duplicates.append(label)
        seen.add(label)
    return duplicates
