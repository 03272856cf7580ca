"""Parsing of ``az://`` storage addresses."""
import os
from typing import NamedTuple, Optional

SCHEME = 'az://'


class InvalidUriError(ValueError):
    """Raised when an address is not a usable ``az://`` URI."""


class AzureUri(NamedTuple):
    account: Optional[str]
    container: str
    path: Optional[str]

    @property
    def lists_containers(self) -> bool:
        """True for ``az://account/``, which enumerates the account's containers."""
        return self.account is not None and self.container == ''


def is_azure_uri(text: str) -> bool:
    return text.startswith(SCHEME)


def is_storage_account_name(text: str) -> bool:
    """Storage account names are 3-24 chars of lowercase ASCII letters and digits."""
    return 3 <= len(text) <= 24 and all(
        ('a' <= c <= 'z') or ('0' <= c <= '9') for c in text
    )


def parse_azure_uri(address: str) -> AzureUri:
    """Parse an address into (account, container, path).

    Supported forms:
      - az://account/container/path/to/blob -> (account, container, 'path/to/blob')
      - az://account/container[/]           -> (account, container, None)
      - az://account[/]                     -> (account, '', None)
      - az://container/path (legacy)        -> (None, container, 'path')

    The first segment is taken as an account name whenever it passes
    :func:`is_storage_account_name`, so a legacy container whose name also
    looks like an account is read as an account.
    """
    if not is_azure_uri(address):
        raise InvalidUriError(f"Invalid Azure URI. Must start with '{SCHEME}'")

    parts = address[len(SCHEME):].split('/', 2)
    if not parts[0]:
        raise InvalidUriError("Invalid Azure URI. Storage account or container name is required")

    head = parts[0]
    if is_storage_account_name(head):
        if len(parts) == 1:
            return AzureUri(head, '', None)
        path = parts[2] if len(parts) > 2 and parts[2] else None
        return AzureUri(head, parts[1], path)

    # Legacy one-tier form: everything after the container is the blob path
    rest = '/'.join(parts[1:])
    return AzureUri(None, head, rest or None)


def format_azure_uri(account: Optional[str], container: str, path: Optional[str] = None) -> str:
    """Inverse of :func:`parse_azure_uri`."""
    segments = [s for s in (account, container) if s]
    text = SCHEME + '/'.join(segments)
    if path is not None:
        return f"{text}/{path}"
    if account and not container:
        return text + '/'
    return text


def blob_basename(path: str) -> str:
    """Last component of an ``az://`` address or a local path."""
    if is_azure_uri(path):
        try:
            blob_path = parse_azure_uri(path).path
        except InvalidUriError:
            return ''
        if not blob_path:
            return ''
        return os.path.basename(blob_path.rstrip('/')) or blob_path
    stripped = path.rstrip('/')
    if not stripped:
        return path
    return os.path.basename(stripped)
