"""
Boundary-preserving word inversion.

A token is split into three parts around its alphanumeric core::

    "(don't!)"  ->  prefix "("  core "don't"  suffix "!)"

Only the core is reversed; embedded punctuation inside the core is reversed
along with the letters. Characters are handled per code point, so this is not
a grapheme-aware reverser.
"""

from typing import Tuple

WORD_SEPARATOR = " "


def find_core_bounds(token: str) -> Tuple[int, int]:
    """
    Return the inclusive ``(left, right)`` indexes of the alphanumeric core.

    When the token has no alphanumeric character ``left > right``.
    """
    left = 0
    right = len(token) - 1

    while left < len(token) and not token[left].isalnum():
        left += 1

    while right >= 0 and not token[right].isalnum():
        right -= 1

    return left, right


def normalize_core(token: str) -> str:
    """
    Derive the cache key for a token: its boundary-trimmed core, lowercased.

    Returns an empty string when there is nothing to invert.
    """
    if not token or token.isspace():
        return ""

    left, right = find_core_bounds(token)
    if left > right:
        return ""

    return token[left:right + 1].lower()


def invert(token: str) -> str:
    """Reverse the core of a token, keeping its boundary punctuation and casing."""
    if not token or token.isspace():
        return token

    left, right = find_core_bounds(token)

    # Zero or one alphanumeric characters: nothing to reverse
    if left >= right:
        return token

    prefix = token[:left]
    suffix = token[right + 1:]
    core = token[left:right + 1]

    return prefix + core[::-1] + suffix


def reconstruct(original_token: str, inverted_core: str) -> str:
    """
    Re-dress a cached, already-inverted core with the original token's punctuation.

    The cached core is lowercase, so the original casing is not restored.
    """
    if not original_token or original_token.isspace():
        return original_token

    left, right = find_core_bounds(original_token)
    if left > right:
        return original_token

    return original_token[:left] + inverted_core + original_token[right + 1:]


def invert_sentence(sentence: str) -> str:
    """Invert every space-separated token of a sentence without consulting any cache."""
    if not sentence or sentence.isspace():
        return sentence

    return WORD_SEPARATOR.join(invert(token) for token in sentence.split(WORD_SEPARATOR))
