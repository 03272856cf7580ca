"""Splitting of wildcard paths into a listing prefix and a glob pattern."""
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

WILDCARD_CHARS = '*?'
RECURSIVE_WILDCARD = '**'


def has_wildcard(path: str) -> bool:
    return any(ch in path for ch in WILDCARD_CHARS)


def tokenize_pattern(pattern: str) -> Iterator[str]:
    """Split a glob into wildcard tokens and single literal characters.

    A run of exactly two stars is the recursive token (``**/`` when a slash
    follows it). Any other run of stars is a single ``*``.
    """
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] != '*':
            yield pattern[i]
            i += 1
            continue
        j = i
        while j < n and pattern[j] == '*':
            j += 1
        if j - i == 2:
            if j < n and pattern[j] == '/':
                yield RECURSIVE_WILDCARD + '/'
                j += 1
            else:
                yield RECURSIVE_WILDCARD
        else:
            yield '*'
        i = j


def contains_recursive_wildcard(pattern: str) -> bool:
    return any(token.startswith(RECURSIVE_WILDCARD) for token in tokenize_pattern(pattern))


def split_wildcard_path(path: str) -> Optional[Tuple[str, str]]:
    """Split ``path`` at the last ``/`` before its first wildcard.

    Returns ``(literal_prefix, glob_pattern)``, or ``None`` when the path has
    no wildcard. A pattern ending in ``/`` gets a trailing ``*`` so that it
    selects the contents of that virtual directory.

    >>> split_wildcard_path('photos/2024/*.jpg')
    ('photos/2024/', '*.jpg')
    >>> split_wildcard_path('photos/*/')
    ('photos/', '*/*')
    """
    if not has_wildcard(path):
        return None
    first = min(i for i in (path.find(ch) for ch in WILDCARD_CHARS) if i >= 0)
    cut = path.rfind('/', 0, first) + 1
    literal_prefix, pattern = path[:cut], path[cut:]
    if pattern.endswith('/'):
        pattern += '*'
    return literal_prefix, pattern


@dataclass(frozen=True)
class PatternSpec:
    """How a listing path splits into a literal prefix and a glob pattern.

    ``selects_directories`` records that the path ended in ``/`` (so the
    pattern was completed with ``*``): the caller asked for directories.
    """

    literal_prefix: Optional[str] = None
    glob_pattern: Optional[str] = None
    force_recursive: bool = False
    selects_directories: bool = False

    @classmethod
    def from_path(cls, path: Optional[str]) -> 'PatternSpec':
        if not path:
            return cls()
        split = split_wildcard_path(path)
        if split is None:
            return cls(literal_prefix=path)
        literal_prefix, pattern = split
        return cls(
            literal_prefix=literal_prefix or None,
            glob_pattern=pattern,
            force_recursive=contains_recursive_wildcard(pattern) or '/' in pattern,
            selects_directories=path.endswith('/'),
        )
