from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Callable, List, Optional, Tuple
from urllib.parse import quote, urlencode, urlparse
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET

from ..models import Blob, ContainerInfo, ListingPage, Prefix
from .base import CloudProvider

API_VERSION = '2021-08-06'
DEFAULT_TIMEOUT = 30
BLOB_HOST_SUFFIX = '.blob.core.windows.net'


def parse_blob_url(url: str) -> Tuple[str, str, Optional[str]]:
    """Parse an Azure Blob HTTP URL into (endpoint, container, blob_path).

    Supported formats:
      - https://ACCOUNT.blob.core.windows.net/CONTAINER/path/to/blob
      - http://127.0.0.1:10000/ACCOUNT/CONTAINER/path    (Azurite, path style)
    """
    parsed = urlparse(url)
    host = parsed.hostname or ''
    scheme = parsed.scheme or 'https'
    path = parsed.path.lstrip('/')

    if host.endswith(BLOB_HOST_SUFFIX):
        endpoint = f"{scheme}://{host}"
        rest = path.split('/', 1)
    else:
        # Path style: the first path segment is the account
        account, _, remainder = path.partition('/')
        if not account:
            raise ValueError(f"Cannot determine account from URL: {url}")
        port_str = f":{parsed.port}" if parsed.port else ''
        endpoint = f"{scheme}://{host}{port_str}/{account}"
        rest = remainder.split('/', 1)

    if not rest[0]:
        raise ValueError(f"Cannot determine container from URL: {url}")
    blob_path = rest[1] if len(rest) > 1 and rest[1] else None
    return endpoint, rest[0], blob_path


class AzureXMLProvider(CloudProvider):
    """Azure Blob provider using the REST API over raw HTTP/XML."""

    def __init__(
        self,
        account: str,
        sas_token: Optional[str] = None,
        endpoint: Optional[str] = None,
        page_size: Optional[int] = None,
        opener: Optional[Callable] = None,
    ):
        self.account = account
        self.endpoint = (endpoint or f"https://{account}{BLOB_HOST_SUFFIX}").rstrip('/')
        self.sas_token = (sas_token or '').lstrip('?') or None
        self.page_size = page_size
        self._open = opener or urllib.request.urlopen

    def get_prompt_prefix(self) -> str:
        return f"az://{self.account}/"

    def head_account(self):
        self._request(self._url('', {'comp': 'list', 'maxresults': '1'}), context='listing containers')

    def list_containers(self) -> List[ContainerInfo]:
        containers = []
        marker = None
        while True:
            params = {'comp': 'list'}
            if marker:
                params['marker'] = marker
            body = self._request(self._url('', params), context='listing containers')
            root = _parse_xml(body, self.endpoint)
            ns = _namespace(root)
            for elem in root.iter(f'{ns}Container'):
                name = _text(elem, f'{ns}Name')
                if not name:
                    continue
                containers.append(ContainerInfo(
                    name=name,
                    last_modified=_format_http_date(_text(elem, f'{ns}Properties/{ns}Last-Modified')),
                ))
            marker = _text(root, f'{ns}NextMarker')
            if not marker:
                return containers

    def list_blobs_page(
        self,
        container: str,
        prefix: Optional[str] = None,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> ListingPage:
        params = {'restype': 'container', 'comp': 'list'}
        if prefix:
            params['prefix'] = prefix
        if delimiter:
            params['delimiter'] = delimiter
        if continuation_token:
            params['marker'] = continuation_token
        max_results = max_results or self.page_size
        if max_results:
            params['maxresults'] = str(max_results)

        body = self._request(
            self._url(quote(container), params),
            context=f"listing blobs in '{container}' at '{prefix or ''}'",
        )
        return parse_list_blobs_response(body)

    def download_blob(
        self,
        container: str,
        name: str,
        byte_range: Optional[Tuple[int, Optional[int]]] = None,
    ) -> bytes:
        headers = {}
        if byte_range is not None:
            start, end = byte_range
            headers['x-ms-range'] = f"bytes={start}-{'' if end is None else end}"
        url = self._url(f"{quote(container)}/{quote(name, safe='/')}", {})
        return self._request(url, headers=headers, context=f"downloading '{container}/{name}'")

    def _url(self, path: str, params: dict) -> str:
        url = f"{self.endpoint}/{path}"
        query = urlencode(params)
        if self.sas_token:
            query = f"{query}&{self.sas_token}" if query else self.sas_token
        return f"{url}?{query}" if query else url

    def _request(self, url: str, headers: Optional[dict] = None, context: str = '') -> bytes:
        req = urllib.request.Request(url, method='GET')
        req.add_header('x-ms-version', API_VERSION)
        for key, value in (headers or {}).items():
            req.add_header(key, value)
        try:
            resp = self._open(req, timeout=DEFAULT_TIMEOUT)
            return resp.read()
        except urllib.error.HTTPError as e:
            raise _translate_http_error(e, context) from e
        except urllib.error.URLError as e:
            raise ConnectionError(f"Cannot reach {self.endpoint}: {e.reason}") from e


def parse_list_blobs_response(body: bytes) -> ListingPage:
    """Parse a List Blobs ``EnumerationResults`` document into a page."""
    root = _parse_xml(body)

    # Handle both namespaced and non-namespaced XML
    ns = _namespace(root)
    items = []
    blobs = root.find(f'{ns}Blobs')
    if blobs is not None:
        for elem in blobs:
            tag = elem.tag[len(ns):]
            name = _text(elem, f'{ns}Name')
            if not name:
                continue
            if tag == 'BlobPrefix':
                items.append(Prefix(name))
            elif tag == 'Blob':
                size = _text(elem, f'{ns}Properties/{ns}Content-Length')
                items.append(Blob(
                    name=name,
                    size=int(size) if size else 0,
                    last_modified=_format_http_date(_text(elem, f'{ns}Properties/{ns}Last-Modified')),
                    content_type=_text(elem, f'{ns}Properties/{ns}Content-Type'),
                ))

    return ListingPage(items=items, continuation_token=_text(root, f'{ns}NextMarker'))


def _parse_xml(body: bytes, source: str = 'the storage service'):
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise ConnectionError(f"Unexpected non-XML response from {source}: {e}") from e


def _namespace(root) -> str:
    if root.tag.startswith('{'):
        return root.tag.split('}')[0] + '}'
    return ''


def _text(elem, path: str) -> Optional[str]:
    found = elem.find(path)
    if found is None or not found.text:
        return None
    return found.text


def _format_http_date(value: Optional[str]) -> str:
    """Normalize an RFC 1123 date to ``YYYY-MM-DD HH:MM:SS``."""
    if not value:
        return ''
    try:
        parsed: datetime = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return value
    return parsed.strftime('%Y-%m-%d %H:%M:%S')


def _translate_http_error(e: urllib.error.HTTPError, context: str) -> Exception:
    code = e.headers.get('x-ms-error-code') if e.headers else None
    detail = f" ({code})" if code else ''
    if e.code == 403:
        return PermissionError(f"Access denied {context}{detail}")
    if e.code == 404:
        return FileNotFoundError(f"Not found {context}{detail}")
    return ConnectionError(f"HTTP {e.code}: {e.reason} {context}{detail}")
