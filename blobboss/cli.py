import argparse
import sys

from .app import BlobBossApp
from .commands.info import disk_usage
from .commands.navigation import list_path
from .commands.read import cat_blobs
from .config import get_page_size, get_workers, load_config, log, set_verbose
from .navigator import Navigator
from .providers.azurexml import AzureXMLProvider, parse_blob_url
from .uri import format_azure_uri


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='blobboss', description='BlobBoss - Azure Blob Storage navigator')
    parser.add_argument('--config', dest='config_path', default=None, help='Path to config file (default: ~/.blobboss/config.json)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Print diagnostic lines to stderr')
    group = parser.add_argument_group('Azure access')
    group.add_argument('--account', help='Storage account used when an address does not name one')
    group.add_argument('--sas-token', help='SAS token query string appended to every request')
    group.add_argument('--endpoint', help="Blob service endpoint; may contain '{account}' (e.g. http://127.0.0.1:10000/{account})")

    subparsers = parser.add_subparsers(dest='command')

    ls_parser = subparsers.add_parser('ls', help='List containers, blobs or a local path')
    ls_parser.add_argument('path', nargs='?', help='az://account/container/path, wildcards allowed, or a local path')
    ls_parser.add_argument('-l', '--long', action='store_true', help='Long listing with size, type and modified date')
    ls_parser.add_argument('-H', '--human-readable', action='store_true', help='Human-readable sizes')
    ls_parser.add_argument('-r', '-R', '--recursive', action='store_true', help='List recursively')
    ls_parser.add_argument('-a', '--account', dest='command_account', help='Storage account for this command')

    du_parser = subparsers.add_parser('du', help='Cumulative size of every virtual directory')
    du_parser.add_argument('path', help='az://account/, az://account/container/prefix or a local path')
    du_parser.add_argument('-s', '--summarize', action='store_true', help='Only show the total')
    du_parser.add_argument('-H', '--human-readable', action='store_true', help='Human-readable sizes')
    du_parser.add_argument('-c', '--total', action='store_true', help='Print a grand total')
    du_parser.add_argument('-a', '--account', dest='command_account', help='Storage account for this command')

    cat_parser = subparsers.add_parser('cat', help='Write blob contents to stdout')
    cat_parser.add_argument('urls', nargs='+', help='az:// blob addresses')
    cat_parser.add_argument('--header', action='store_true', help="Print '==> url <==' before each blob")
    cat_parser.add_argument('-r', '--range', dest='byte_range', help="Byte range 'start-end' or 'start-'")
    cat_parser.add_argument('-a', '--account', dest='command_account', help='Storage account for this command')

    shell_parser = subparsers.add_parser('shell', help='Interactive shell')
    shell_parser.add_argument('address', nargs='?', help='Starting location (az://account/container/)')
    shell_parser.add_argument('--url', help='Blob HTTP URL to start at (e.g. https://acct.blob.core.windows.net/container/)')

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = 'shell'
        args.address = None
        args.url = None
    return args


def make_provider_factory(config, sas_token=None, endpoint=None):
    """Build the per-account provider constructor from config and flags."""
    azure = config.get("azure", {})
    sas_token = sas_token or azure.get("sas_token")
    endpoint = endpoint or azure.get("endpoint")
    page_size = get_page_size(config)

    def factory(account):
        account_endpoint = endpoint.format(account=account) if endpoint and '{account}' in endpoint else endpoint
        log(f"Provider: {account} via {account_endpoint or 'default endpoint'}")
        return AzureXMLProvider(account, sas_token=sas_token, endpoint=account_endpoint, page_size=page_size)

    return factory


def _print_banner(app, reachable, sas):
    if reachable is None:
        access = '-'
    else:
        access = '✅ List' if reachable else '❌ List'
    print("")
    print("🗄  BlobBoss v0.1.0")
    print("   Target:    %s" % (app.current_location or '(none)'))
    print("   Transport: %s" % ('HTTP/XML (SAS)' if sas else 'HTTP/XML (anonymous)'))
    print("   Access:    %s" % access)
    print("")


def run_shell(args, config, navigator):
    location = args.address
    account = args.account
    if args.url:
        endpoint, container, blob_path = parse_blob_url(args.url)
        account = endpoint.rstrip('/').rsplit('/', 1)[-1].split('.')[0]
        navigator.provider_factory = make_provider_factory(config, args.sas_token, endpoint)
        directory = blob_path if not blob_path or blob_path.endswith('/') else blob_path + '/'
        location = format_azure_uri(account, container, directory)
    elif location is None and (account or navigator.default_account):
        location = f"az://{account or navigator.default_account}/"

    app = BlobBossApp(navigator, account=account, location=location)
    reachable = None
    if location:
        uri = navigator.resolve(location)
        try:
            navigator.provider_for(uri, account).head_account()
            reachable = True
        except (PermissionError, FileNotFoundError, ConnectionError) as e:
            print(f"Warning: {e}", file=sys.stderr)
            reachable = False
    _print_banner(app, reachable, bool(args.sas_token or config.get("azure", {}).get("sas_token")))
    app.run()


def main(argv=None, provider_factory=None, out=None):
    args = parse_args(argv)
    config = load_config(args.config_path)
    set_verbose(args.verbose or config.get("general", {}).get("verbose"))

    default_account = args.account or config.get("azure", {}).get("default_account")
    if provider_factory is None:
        provider_factory = make_provider_factory(config, args.sas_token, args.endpoint)
    navigator = Navigator(provider_factory, default_account=default_account, workers=get_workers(config))

    try:
        if args.command == 'shell':
            run_shell(args, config, navigator)
            return 0

        app = BlobBossApp(navigator, account=args.command_account or args.account, out=out)
        if args.command == 'ls':
            list_path(app, args.path, long=args.long, human_readable=args.human_readable, recursive=args.recursive)
        elif args.command == 'du':
            disk_usage(app, args.path, summarize=args.summarize, human_readable=args.human_readable, total=args.total)
        elif args.command == 'cat':
            binary_out = getattr(out, 'buffer', out) if out is not None else None
            cat_blobs(app, args.urls, header=args.header, byte_range=args.byte_range, out=binary_out)
        return 0
    except KeyboardInterrupt:
        return 130
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
