"""Parsing of comma-separated target strings into token ids."""

from typing import Callable, List

TARGET_SEPARATOR = ","


def split_targets(target_chars: str) -> List[str]:
    """
    Split a comma-separated target string into its pieces.

    Empty pieces (``"a,,b"``, a trailing comma) are dropped since they would
    tokenize to nothing.
    """
    return [piece for piece in target_chars.split(TARGET_SEPARATOR) if piece]


def parse_target_tokens(
    tokenize: Callable[[str], List[int]], target_chars: str
) -> List[int]:
    """
    Tokenize each comma-delimited piece independently and concatenate.

    Args:
        tokenize: Tokenizer callable; must not add a beginning-of-sequence
            or other special marker
        target_chars: Comma-separated target string

    Returns:
        Token ids in piece order, duplicates kept
    """
    target_tokens: List[int] = []
    for piece in split_targets(target_chars):
        target_tokens.extend(tokenize(piece))
    return target_tokens
