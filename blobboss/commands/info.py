import os

from ..formatting import format_size
from ..sizes import calculate_local_directory_sizes
from ..uri import SCHEME, format_azure_uri, is_azure_uri


def disk_usage(app, path, summarize=False, human_readable=False, total=False):
    """Print cumulative sizes for an account, container, prefix or local directory."""
    if is_azure_uri(path):
        uri = app.navigator.resolve(path)
        if uri.lists_containers:
            _account_usage(app, uri, summarize, human_readable)
        else:
            _blob_usage(app, path, summarize, human_readable, total)
    else:
        _local_usage(app, path, summarize, human_readable, total)


def _account_usage(app, uri, summarize, human_readable):
    writer = app.writer
    account = app.navigator.account_for(uri, app.account)
    sizes = app.navigator.container_sizes(account)
    if not summarize:
        for name in sorted(sizes):
            writer.write_disk_usage(format_size(sizes[name], human_readable), format_azure_uri(account, name, ''))
    writer.write_disk_usage_total(format_size(sum(sizes.values()), human_readable), f"{SCHEME}{account}/")


def _blob_usage(app, path, summarize, human_readable, total):
    writer = app.writer
    account, usage = app.navigator.aggregate_sizes(path, app.account)
    uri = app.navigator.resolve(path)
    location = format_azure_uri(account, uri.container, uri.path)

    if summarize:
        writer.write_disk_usage(format_size(usage.total, human_readable), location)
        return

    for directory in sorted(usage.directories):
        writer.write_disk_usage(
            format_size(usage.directories[directory], human_readable),
            format_azure_uri(account, uri.container, directory),
        )
    if total:
        writer.write_disk_usage_total(format_size(usage.total, human_readable), location)


def _local_usage(app, path, summarize, human_readable, total):
    writer = app.writer
    if not os.path.exists(path):
        raise FileNotFoundError(f"Path '{path}' does not exist")

    if os.path.isfile(path):
        writer.write_disk_usage(format_size(os.path.getsize(path), human_readable), path)
        return

    sizes = calculate_local_directory_sizes(path)
    if not summarize:
        for directory in sorted(sizes):
            if directory != path:
                writer.write_disk_usage(format_size(sizes[directory], human_readable), directory)
    if summarize or not total:
        writer.write_disk_usage(format_size(sizes[path], human_readable), path)
    else:
        writer.write_disk_usage_total(format_size(sizes[path], human_readable), path)


def do_du(app, *args):
    """Disk usage for a location.

    Usage: du [-s] [-H] [-c] [path]
    Options:
      -s   Only show the total for the location
      -H   Human-readable sizes
      -c   Print a grand total line
    """
    from .navigation import resolve_shell_path, default_location

    summarize = human_readable = total = False
    path = None
    for arg in args:
        if arg == '--help':
            print("Usage: du [-s] [-H] [-c] [path]")
            return
        if arg.startswith('-') and len(arg) > 1:
            for flag in arg[1:]:
                if flag == 's':
                    summarize = True
                elif flag == 'H':
                    human_readable = True
                elif flag == 'c':
                    total = True
                else:
                    print("Unknown option: -" + flag)
                    return
        elif path is None:
            path = arg
        else:
            print("Usage: du [-s] [-H] [-c] [path]")
            return

    path = resolve_shell_path(app, path, is_directory=True) if path else default_location(app)
    disk_usage(app, path, summarize=summarize, human_readable=human_readable, total=total)
