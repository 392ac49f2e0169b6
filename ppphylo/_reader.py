"""
_reader.py
==========
Boundary parsing: matrix text → :class:`CharacterMatrix`.

Two text layouts are accepted.

Row layout
    An optional header line ``#name1,name2;name3`` followed by one line per
    species, each an unbroken string over {0, 1}::

        #A,B
        11
        01
        10

Dimension layout
    A first line ``<species> <characters>``, an optional blank line, then one
    line per species with whitespace-separated 0/1 entries::

        3 2

        1 1
        0 1
        1 0

Blank lines are ignored in both layouts.  A dimension layout whose data does
not match the declared dimensions is rejected.
"""

import logging
import re
from typing import Iterable, Optional

from ppphylo._errors import MalformedInputError
from ppphylo._matrix import CharacterMatrix


logger = logging.getLogger(__name__)

_DIMENSIONS = re.compile(r"^\s*(\d+)\s+(\d+)\s*$")


def parse_matrix(
    lines: Iterable[str],
    persistent: bool = False,
    label_scheme: Optional[str] = None,
) -> CharacterMatrix:
    """
    Parse matrix text into a :class:`CharacterMatrix`.

    Parameters
    ----------
    lines : iterable of str
        Text lines, with or without trailing newlines.  A single string is
        split into lines.
    persistent : bool, default False
        Use persistent (+/-) character labels when no header is present.
    label_scheme : {'observed', 'corrected'}, optional
        Sign rule for persistent labels; see :func:`ppphylo.character_label`.

    Returns
    -------
    CharacterMatrix

    Raises
    ------
    MalformedInputError
        If the text does not describe a valid 0/1 matrix.

    Examples
    --------
    >>> m = parse_matrix("11\\n01\\n10\\n")
    >>> m.species_count, m.character_count
    (3, 2)
    >>> parse_matrix(["2 2", "", "1 0", "1 1"]).to_rows()
    ['10', '11']
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    rows = [line.strip() for line in lines]
    rows = [row for row in rows if row]
    if not rows:
        raise MalformedInputError("Matrix input contains no rows.")

    match = _DIMENSIONS.match(rows[0])
    if match is not None:
        n_species, n_characters = int(match.group(1)), int(match.group(2))
        rows = ["".join(row.split()) for row in rows[1:]]
        if len(rows) != n_species:
            raise MalformedInputError(
                f"Dimension line declares {n_species} species "
                f"but {len(rows)} rows follow."
            )
        for i, row in enumerate(rows):
            if len(row) != n_characters:
                raise MalformedInputError(
                    f"Row {i} has {len(row)} entries; dimension line "
                    f"declares {n_characters} characters."
                )
        logger.debug("Dimension layout: %d x %d", n_species, n_characters)

    return CharacterMatrix.from_rows(
        rows, persistent=persistent, label_scheme=label_scheme
    )


def read_matrix(
    path,
    persistent: bool = False,
    label_scheme: Optional[str] = None,
) -> CharacterMatrix:
    """
    Read a matrix file; see :func:`parse_matrix` for the accepted layouts.

    Parameters
    ----------
    path : str or os.PathLike
        UTF-8 text file.  I/O errors propagate unchanged.

    Raises
    ------
    MalformedInputError
        If the file is not valid UTF-8 or its content is malformed.
    """
    logger.info("Reading matrix from %s", path)
    with open(path, encoding="utf-8") as fh:
        try:
            return parse_matrix(
                fh, persistent=persistent, label_scheme=label_scheme
            )
        except UnicodeDecodeError as e:
            raise MalformedInputError(
                f"Matrix file {path} is not valid UTF-8 text ({e.reason})."
            ) from e
