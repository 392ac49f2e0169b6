"""
_errors.py
==========
Exception types raised by ppphylo.

Both errors derive from ``ValueError`` so that callers who already guard
against bad input with ``except ValueError`` keep working.
"""


class MalformedInputError(ValueError):
    """
    Raised when a character matrix cannot be constructed from its input.

    Typical causes: no rows, rows of unequal length, symbols other than
    ``0``/``1``, a header whose names do not match the column count, or
    duplicate character labels.
    """


class IncompatibleMatrixError(ValueError):
    """
    Raised by the opt-in validation passes when a matrix does not admit a
    perfect phylogeny.

    Attributes
    ----------
    conflicts : list[tuple[str, str]]
        Conflicting character pairs, when known.  Empty when the failure was
        detected from partition classes instead of a pairwise scan.
    """

    def __init__(self, message, conflicts=None):
        super().__init__(message)
        self.conflicts = list(conflicts) if conflicts else []
