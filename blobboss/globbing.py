"""Shell-style glob matching over ``/``-delimited blob names.

``*`` matches within one path segment, ``?`` matches one non-``/``
character and ``**`` matches across any number of segments (including
none, so ``a/**/*.txt`` matches ``a/c.txt``). Any other character is
literal; there is no character-class syntax, so a stray ``[`` never fails.
"""
import functools
import re
from typing import Optional

from .patterns import RECURSIVE_WILDCARD, contains_recursive_wildcard, tokenize_pattern


@functools.lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> 're.Pattern[str]':
    parts = []
    for token in tokenize_pattern(pattern):
        if token == RECURSIVE_WILDCARD + '/':
            # '**/' may also stand for no directories at all
            parts.append('(?:.*/)?')
        elif token == RECURSIVE_WILDCARD:
            parts.append('.*')
        elif token == '*':
            parts.append('[^/]*')
        elif token == '?':
            parts.append('[^/]')
        else:
            parts.append(re.escape(token))
    return re.compile(''.join(parts), re.DOTALL)


def matches_pattern(candidate: str, pattern: str) -> bool:
    return compile_pattern(pattern).fullmatch(candidate) is not None


def matches_directory(prefix: str, pattern: str) -> bool:
    """Match a virtual directory name, with or without its trailing ``/``."""
    if matches_pattern(prefix, pattern):
        return True
    return prefix.endswith('/') and matches_pattern(prefix[:-1], pattern)


def pattern_depth(pattern: str) -> Optional[int]:
    """Number of path segments in ``pattern``; ``None`` when it contains ``**``."""
    if contains_recursive_wildcard(pattern):
        return None
    return len(pattern.split('/'))
