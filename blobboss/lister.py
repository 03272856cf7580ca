"""Hierarchical and wildcard listing over a flat blob namespace.

Blob storage has no real directories. A listing either lets the service
group names at the next ``/`` (one level per request, via a delimiter) or
enumerates every name under a prefix and rebuilds directories here. The
latter is needed when a pattern spans more than one segment, as in
``ls photos/*/raw/``.
"""
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence

from .config import log
from .globbing import matches_directory, matches_pattern, pattern_depth
from .models import Blob, Entry, ListingPage, Prefix
from .patterns import PatternSpec
from .providers.base import CloudProvider

DELIMITER = '/'

Consumer = Callable[[List[Entry]], None]


@dataclass(frozen=True)
class ListingPlan:
    container: str
    list_prefix: Optional[str] = None
    pattern: Optional[str] = None
    force_recursive: bool = False
    recursive: bool = False
    selects_directories: bool = False

    @property
    def delimiter(self) -> Optional[str]:
        if self.recursive or self.force_recursive:
            return None
        return DELIMITER

    @property
    def depth(self) -> Optional[int]:
        """Depth at which matching directories are rebuilt, ``None`` if unbounded."""
        if self.pattern is None:
            return None
        depth = pattern_depth(self.pattern)
        if depth is not None and self.selects_directories:
            # 'a/*/' was completed to 'a/*/*'; the directories sit one level up
            depth -= 1
        return depth

    @property
    def reconstructs_prefixes(self) -> bool:
        # Recursion was only forced by a multi-segment pattern, so the caller
        # still expects a one-level view at the pattern's depth.
        return (
            self.pattern is not None
            and self.depth is not None
            and self.force_recursive
            and not self.recursive
        )


def plan_listing(container: str, path: Optional[str], recursive: bool = False) -> ListingPlan:
    spec = PatternSpec.from_path(path)
    return ListingPlan(
        container=container,
        list_prefix=spec.literal_prefix,
        pattern=spec.glob_pattern,
        force_recursive=spec.force_recursive,
        recursive=recursive,
        selects_directories=spec.selects_directories,
    )


def iter_pages(
    provider: CloudProvider,
    container: str,
    prefix: Optional[str] = None,
    delimiter: Optional[str] = None,
) -> Iterator[ListingPage]:
    """Yield listing pages in order, requesting the next only when asked."""
    log(f"Fetch: {container}/{prefix or ''}{' (recursive)' if delimiter is None else ''}")
    token = None
    while True:
        page = provider.list_blobs_page(container, prefix, delimiter, token)
        yield page
        token = page.continuation_token
        if not token:
            return


def relative_name(name: str, list_prefix: Optional[str]) -> str:
    if list_prefix and name.startswith(list_prefix):
        return name[len(list_prefix):]
    return name


def entry_matches(entry: Entry, list_prefix: Optional[str], pattern: str) -> bool:
    rel = relative_name(entry.name, list_prefix)
    if isinstance(entry, Prefix):
        return matches_directory(rel, pattern)
    return matches_pattern(rel, pattern)


def filter_entries(entries: Sequence[Entry], list_prefix: Optional[str], pattern: str) -> List[Entry]:
    return [entry for entry in entries if entry_matches(entry, list_prefix, pattern)]


def reconstruct_prefixes(
    entries: Sequence[Entry],
    list_prefix: Optional[str],
    pattern: str,
    depth: int,
    keep_blobs: bool = False,
) -> List[Entry]:
    """Rebuild the virtual directories at ``depth`` that match ``pattern``.

    Each name is cut to its first ``depth`` segments below ``list_prefix``.
    Only names with something beneath that cut become directories. A blob
    sitting exactly at ``depth`` is kept as a blob when ``keep_blobs`` is set
    and it matches ``pattern``; otherwise it is dropped.
    """
    unique = set()
    blobs = []
    for entry in entries:
        rel = relative_name(entry.name, list_prefix)
        segments = rel.split('/')
        if len(segments) < depth:
            continue
        if len(segments) == depth:
            if keep_blobs and isinstance(entry, Blob) and matches_pattern(rel, pattern):
                blobs.append(entry)
            continue
        prefix_at_depth = '/'.join(segments[:depth]) + '/'
        if matches_directory(prefix_at_depth, pattern):
            unique.add(prefix_at_depth)
    base = list_prefix or ''
    found = blobs + [Prefix(base + prefix) for prefix in unique]
    return sorted(found, key=lambda entry: entry.name)


def select_entries(entries: Sequence[Entry], plan: ListingPlan) -> List[Entry]:
    if plan.pattern is None:
        return list(entries)
    if plan.reconstructs_prefixes:
        return reconstruct_prefixes(
            entries,
            plan.list_prefix,
            plan.pattern,
            plan.depth,
            keep_blobs=not plan.selects_directories,
        )
    return filter_entries(entries, plan.list_prefix, plan.pattern)


class EntryCollector:
    """Consumer that keeps every entry it is handed."""

    def __init__(self):
        self.entries: List[Entry] = []

    def __call__(self, items: List[Entry]) -> None:
        self.entries.extend(items)


class BlobLister:
    def __init__(self, provider: CloudProvider):
        self.provider = provider

    def pages(self, plan: ListingPlan) -> Iterator[ListingPage]:
        return iter_pages(self.provider, plan.container, plan.list_prefix, plan.delimiter)

    def stream(self, plan: ListingPlan, consumer: Consumer) -> int:
        """Hand each page to ``consumer`` before fetching the next one.

        If the provider fails mid-listing, pages already consumed stay consumed.
        """
        count = 0
        for page in self.pages(plan):
            if page.items:
                consumer(list(page.items))
                count += len(page.items)
        return count

    def collect(self, plan: ListingPlan) -> List[Entry]:
        """Enumerate everything, then filter or rebuild directories.

        A pattern can only be resolved once every name has been seen, so
        this path holds the whole enumeration in memory.
        """
        entries: List[Entry] = []
        for page in self.pages(plan):
            entries.extend(page.items)
        return select_entries(entries, plan)

    def list(self, plan: ListingPlan, consumer: Consumer) -> int:
        if plan.pattern is None:
            return self.stream(plan, consumer)
        entries = self.collect(plan)
        if entries:
            consumer(entries)
        return len(entries)
