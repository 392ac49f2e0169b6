"""
_utils.py
=========
General-purpose helpers for ppphylo: label synthesis and NEWICK-style
string handling.

These are standalone functions that don't depend on the main classes
and could be useful in multiple contexts.
"""

from typing import List


LABEL_SCHEMES = ("observed", "corrected")


def species_label(index: int) -> str:
    """
    Synthesize the label of the species on row *index* (0-based).

    Examples
    --------
    >>> species_label(0)
    's0000'
    >>> species_label(42)
    's0042'
    """
    return "s%04d" % index


def character_label(index: int, persistent: bool = False,
                    scheme: str = "observed") -> str:
    """
    Synthesize the label of the character on column *index* (0-based).

    Parameters
    ----------
    index : int
        Column index, 0-based.
    persistent : bool, default False
        If False, labels are ``C%05d`` over the 1-based column index.
        If True, column *index* belongs to root character
        ``index // 2 + 1`` and carries a ``+`` (gain) or ``-`` (loss) sign.
    scheme : {'observed', 'corrected'}, default 'observed'
        Sign rule for persistent labels.

        - ``'observed'``: the sign is ``index % 1``, which is always 0, so
          every label is a ``+`` label and columns ``2k`` and ``2k+1`` share
          the label ``C%04d+``.  Existing outputs in this
          format were labelled this way.
        - ``'corrected'``: the sign is ``index % 2``; even columns are
          ``+`` and odd columns are ``-``.

    Returns
    -------
    str

    Raises
    ------
    ValueError
        If *scheme* is not a known label scheme.

    Examples
    --------
    >>> character_label(0)
    'C00001'
    >>> [character_label(i, persistent=True) for i in range(3)]
    ['C0001+', 'C0001+', 'C0002+']
    >>> [character_label(i, True, 'corrected') for i in range(3)]
    ['C0001+', 'C0001-', 'C0002+']
    """
    if scheme not in LABEL_SCHEMES:
        raise ValueError(
            f"Unknown label scheme '{scheme}'. "
            f"Valid schemes: {', '.join(LABEL_SCHEMES)}"
        )
    if not persistent:
        return "C%05d" % (index + 1)

    sign = index % 1 if scheme == "observed" else index % 2
    root = (index - sign) // 2 + 1
    if sign == 0:
        return "C%04d+" % root
    return "C%04d-" % root


def character_labels(count: int, persistent: bool = False,
                     scheme: str = "observed") -> List[str]:
    """Labels for *count* columns; see :func:`character_label`."""
    return [character_label(i, persistent, scheme) for i in range(count)]


def format_newick(newick: str) -> str:
    """
    Format a NEWICK string for consistent representation.
    
    Ensures the NEWICK string:
    - Ends with a semicolon
    - Has no leading/trailing whitespace
    
    Parameters
    ----------
    newick : str
        NEWICK string to format.
    
    Returns
    -------
    str
        Formatted NEWICK string.
    
    Examples
    --------
    >>> format_newick('((:C00002):C00001)')
    '((:C00002):C00001);'
    
    >>> format_newick('  (:C00001);  ')
    '(:C00001);'
    
    >>> format_newick('')
    ';'
    """
    newick = newick.strip()
    if not newick.endswith(';'):
        newick += ';'
    return newick


def check_balanced(text: str) -> bool:
    """
    Return True if the parentheses in *text* are balanced.

    Every ``)`` must close an earlier ``(`` and no ``(`` may be left open.

    Examples
    --------
    >>> check_balanced('((:C00002):C00001);')
    True
    >>> check_balanced('(:C00001));')
    False
    >>> check_balanced(';')
    True
    """
    open_count = 0
    for c in text:
        if c == "(":
            open_count += 1
        elif c == ")":
            open_count -= 1
            if open_count < 0:
                return False
    return open_count == 0
