"""
Tokenizer for the boolean query language.
"""

from typing import List

# Sentinel appended to every token stream
END = "END"

OPEN_GROUP = "("
CLOSE_GROUP = ")"


def tokenize(query: str) -> List[str]:
    """
    Split a raw query string into tokens.

    Parentheses always become tokens of their own, everything else is split
    on whitespace. The stream is terminated by the ``END`` sentinel, so an
    empty query yields ``["END"]``. Case is left untouched.

    Example:
        >>> tokenize("ripp AND (streptomyces OR lactococcus)")
        ['ripp', 'AND', '(', 'streptomyces', 'OR', 'lactococcus', ')', 'END']
    """
    padded = query.replace(OPEN_GROUP, f" {OPEN_GROUP} ").replace(
        CLOSE_GROUP, f" {CLOSE_GROUP} "
    )
    tokens = padded.split()
    tokens.append(END)
    return tokens
