"""Disk usage: cumulative sizes per virtual directory."""
import os
from collections import defaultdict
from typing import Dict, Iterable, List, NamedTuple, Optional

from .lister import iter_pages
from .models import Blob, Entry
from .providers.base import CloudProvider


class DiskUsage(NamedTuple):
    directories: Dict[str, int]
    total: int


class SizeAggregator:
    """Fold blobs into per-directory totals, one batch at a time.

    A blob ``a/b/c.txt`` under ``base_prefix`` adds its size to ``a/`` and
    ``a/b/`` (keys keep ``base_prefix`` in front). The queried location itself
    has no ancestor segment, so its total is kept separately in ``total``.
    """

    def __init__(self, base_prefix: Optional[str] = None):
        self.base_prefix = base_prefix or ''
        self.directories: Dict[str, int] = defaultdict(int)
        self.total = 0

    def __call__(self, items: Iterable[Entry]) -> None:
        for item in items:
            if isinstance(item, Blob):
                self.add(item.name, item.size)

    def add(self, name: str, size: int) -> None:
        self.total += size
        relative = name[len(self.base_prefix):] if name.startswith(self.base_prefix) else name
        segments = relative.split('/')
        for i in range(1, len(segments)):
            self.directories[self.base_prefix + '/'.join(segments[:i]) + '/'] += size

    def result(self) -> DiskUsage:
        return DiskUsage(dict(self.directories), self.total)


def calculate_directory_sizes(entries: Iterable[Entry], base_prefix: Optional[str] = None) -> Dict[str, int]:
    aggregator = SizeAggregator(base_prefix)
    aggregator(entries)
    return aggregator.result().directories


def calculate_total_size(entries: Iterable[Entry]) -> int:
    return sum(item.size for item in entries if isinstance(item, Blob))


def aggregate_sizes(provider: CloudProvider, container: str, prefix: Optional[str] = None) -> DiskUsage:
    """Recursively enumerate ``container``/``prefix`` and total it up."""
    aggregator = SizeAggregator(prefix)
    for page in iter_pages(provider, container, prefix, None):
        aggregator(page.items)
    return aggregator.result()


def calculate_local_directory_sizes(root: str) -> Dict[str, int]:
    """Size of every directory under ``root`` (inclusive), keyed by path.

    Walks with an explicit stack; each directory's total is pushed up to its
    parent once all of its children have been visited.
    """
    own_size: Dict[str, int] = defaultdict(int)
    parents: Dict[str, Optional[str]] = {root: None}
    visit_order: List[str] = []
    stack = [root]

    while stack:
        current = stack.pop()
        visit_order.append(current)
        with os.scandir(current) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    parents[entry.path] = current
                    stack.append(entry.path)
                elif entry.is_file(follow_symlinks=False):
                    own_size[current] += entry.stat(follow_symlinks=False).st_size

    # Children are always visited after their parent, so reverse order is post-order
    sizes: Dict[str, int] = {}
    for path in reversed(visit_order):
        sizes[path] = own_size[path]
        parent = parents[path]
        if parent is not None:
            own_size[parent] += own_size[path]
    return sizes
