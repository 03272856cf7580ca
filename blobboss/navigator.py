"""Entry points used by the command handlers: resolve, list, size, read."""
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from .lister import BlobLister, Consumer, EntryCollector, ListingPlan, plan_listing
from .models import ContainerInfo, Entry
from .parallel import parallel_container_sizes
from .providers.base import CloudProvider
from .sizes import DiskUsage, aggregate_sizes
from .uri import AzureUri, parse_azure_uri


class ListingResult(NamedTuple):
    account: str
    container: str
    plan: Optional[ListingPlan]
    count: int
    entries: Optional[List[Entry]] = None
    containers: Optional[List[ContainerInfo]] = None


class Navigator:
    def __init__(self, provider_factory: Callable[[str], CloudProvider], default_account: Optional[str] = None,
                 workers: int = 8):
        self.provider_factory = provider_factory
        self.default_account = default_account
        self.workers = workers
        self._providers: Dict[str, CloudProvider] = {}

    def resolve(self, address: str) -> AzureUri:
        return parse_azure_uri(address)

    def account_for(self, uri: AzureUri, account: Optional[str] = None) -> str:
        """The account named in the URI wins, then ``account``, then the default."""
        chosen = uri.account or account or self.default_account
        if not chosen:
            raise ValueError("Storage account not configured. Use az://account/container/... or --account")
        return chosen

    def provider(self, account: str) -> CloudProvider:
        if account not in self._providers:
            self._providers[account] = self.provider_factory(account)
        return self._providers[account]

    def provider_for(self, uri: AzureUri, account: Optional[str] = None) -> CloudProvider:
        return self.provider(self.account_for(uri, account))

    def list_containers(self, account: str) -> List[ContainerInfo]:
        return sorted(self.provider(account).list_containers(), key=lambda c: c.name)

    def list(
        self,
        address: str,
        recursive: bool = False,
        account: Optional[str] = None,
        consumer: Optional[Consumer] = None,
    ) -> ListingResult:
        """List an address.

        With a ``consumer``, entries are handed over as they arrive (page by
        page when no pattern is involved); otherwise they are collected into
        ``ListingResult.entries``. ``az://account/`` lists containers.
        """
        uri = self.resolve(address)
        account_name = self.account_for(uri, account)

        if uri.lists_containers:
            containers = self.list_containers(account_name)
            return ListingResult(account_name, '', None, len(containers), containers=containers)

        plan = plan_listing(uri.container, uri.path, recursive)
        collector = None
        if consumer is None:
            collector = consumer = EntryCollector()
        count = BlobLister(self.provider(account_name)).list(plan, consumer)
        return ListingResult(
            account_name,
            uri.container,
            plan,
            count,
            entries=collector.entries if collector is not None else None,
        )

    def has_entries(self, address: str, account: Optional[str] = None) -> bool:
        """True if anything lives at or under ``address`` (first page only)."""
        uri = self.resolve(address)
        account_name = self.account_for(uri, account)
        provider = self.provider(account_name)
        if uri.lists_containers:
            return True
        if not uri.path:
            return any(c.name == uri.container for c in provider.list_containers())
        page = provider.list_blobs_page(uri.container, uri.path, '/', None, 1)
        return bool(page.items)

    def aggregate_sizes(self, address: str, account: Optional[str] = None) -> Tuple[str, DiskUsage]:
        uri = self.resolve(address)
        account_name = self.account_for(uri, account)
        if uri.lists_containers:
            raise ValueError("A container is required to aggregate directory sizes")
        return account_name, aggregate_sizes(self.provider(account_name), uri.container, uri.path)

    def container_sizes(self, account: str) -> Dict[str, int]:
        names = [c.name for c in self.list_containers(account)]
        return parallel_container_sizes(self.provider(account), names, workers=self.workers)

    def read_blob(
        self,
        address: str,
        byte_range: Optional[Tuple[int, Optional[int]]] = None,
        account: Optional[str] = None,
    ) -> bytes:
        uri = self.resolve(address)
        if not uri.path:
            raise ValueError(f"No blob path specified in URL '{address}'")
        account_name = self.account_for(uri, account)
        return self.provider(account_name).download_blob(uri.container, uri.path, byte_range)
