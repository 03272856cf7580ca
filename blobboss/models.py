"""Data models representing blob listings."""
from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Blob:
    """A single named object in a container."""

    name: str
    size: int = 0
    last_modified: str = ''
    content_type: Optional[str] = None


@dataclass(frozen=True)
class Prefix:
    """A virtual directory, reported by the service or rebuilt client-side."""

    name: str


Entry = Union[Blob, Prefix]


@dataclass(frozen=True)
class ListingPage:
    """One page of a paginated blob listing."""

    items: List[Entry] = field(default_factory=list)
    continuation_token: Optional[str] = None


@dataclass(frozen=True)
class ContainerInfo:
    name: str
    last_modified: str = ''
