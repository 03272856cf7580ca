from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..models import ContainerInfo, ListingPage


class CloudProvider(ABC):
    """Abstract base class for blob storage providers."""

    @abstractmethod
    def get_prompt_prefix(self) -> str:
        """Return the string prefix for the prompt (e.g., 'az://account/')."""
        pass

    @abstractmethod
    def head_account(self):
        """Check that the storage account is reachable."""
        pass

    @abstractmethod
    def list_containers(self) -> List[ContainerInfo]:
        """List every container of the account."""
        pass

    @abstractmethod
    def list_blobs_page(
        self,
        container: str,
        prefix: Optional[str] = None,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> ListingPage:
        """Fetch one page of blobs.

        Without a delimiter every blob under ``prefix`` is returned flat.
        With one, names are grouped at the next delimiter into ``Prefix``
        entries.
        """
        pass

    @abstractmethod
    def download_blob(
        self,
        container: str,
        name: str,
        byte_range: Optional[Tuple[int, Optional[int]]] = None,
    ) -> bytes:
        """Get the content of a blob, optionally an inclusive byte range."""
        pass

    def resolve_path(self, current_prefix: str, input_path: str, is_directory: bool = False) -> str:
        """Resolve an input path relative to the current prefix."""
        if input_path.startswith('/'):
            path_parts = input_path.lstrip('/').split('/')
        else:
            current_parts = current_prefix.rstrip('/').split('/') if current_prefix else []
            path_parts = current_parts + input_path.split('/')

        normalized_parts = []
        for part in path_parts:
            if part == '..':
                if normalized_parts:
                    normalized_parts.pop()
            elif part and part != '.':
                normalized_parts.append(part)

        normalized_path = '/'.join(normalized_parts)

        if is_directory and normalized_path:
            normalized_path += '/'
        return normalized_path
