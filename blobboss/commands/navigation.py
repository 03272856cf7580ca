import os

from ..formatting import format_size
from ..models import Blob
from ..uri import SCHEME, format_azure_uri, is_azure_uri


def default_location(app):
    """Where a bare ``ls`` looks: the shell's location, else the default account."""
    if getattr(app, 'current_location', None):
        return app.current_location
    account = app.account or app.navigator.default_account
    if not account:
        raise ValueError("No path given and no storage account configured")
    return f"{SCHEME}{account}/"


def list_path(app, path=None, long=False, human_readable=False, recursive=False):
    """List containers, blobs or a local path. Returns the number of entries shown."""
    if path is None:
        path = default_location(app)
    if is_azure_uri(path):
        return _list_azure(app, path, long, human_readable, recursive)
    return _list_local(app, path, long, human_readable, recursive)


def _list_azure(app, path, long, human_readable, recursive):
    navigator = app.navigator
    writer = app.writer
    uri = navigator.resolve(path)
    account = navigator.account_for(uri, app.account)

    if uri.lists_containers:
        result = navigator.list(path, account=app.account)
        if not result.containers:
            print("No containers found", file=writer.out)
            return 0
        writer.write_header("Azure Storage Containers:")
        for container in result.containers:
            writer.write_container(format_azure_uri(account, container.name, ''), container.last_modified, long)
        return result.count

    header_written = False

    def _write(items):
        nonlocal header_written
        if not header_written:
            writer.write_header(f"Contents of {format_azure_uri(account, uri.container)}:")
            if long:
                writer.write_table_header([("Size", 10), ("Type", 15), ("Modified", 20), ("Name", 0)])
                writer.write_separator(80)
            header_written = True
        for item in items:
            item_uri = format_azure_uri(account, uri.container, item.name)
            if isinstance(item, Blob):
                writer.write_blob(
                    item_uri,
                    format_size(item.size, human_readable),
                    item.content_type or 'unknown',
                    item.last_modified,
                    long,
                )
            else:
                writer.write_prefix(item_uri, long)

    result = navigator.list(path, recursive=recursive, account=app.account, consumer=_write)

    if result.count == 0:
        location = format_azure_uri(account, uri.container, '')
        if result.plan.pattern is not None:
            print(f"No objects matching pattern in {location}", file=writer.out)
        else:
            print(f"No objects found in {location}", file=writer.out)
    return result.count


def _list_local(app, path, long, human_readable, recursive):
    writer = app.writer
    if not os.path.exists(path):
        raise FileNotFoundError(f"Path '{path}' does not exist")

    if os.path.isfile(path):
        size = format_size(os.path.getsize(path), human_readable) if long else ''
        writer.write_local_file(path, size, 'file', long)
        return 1

    if long:
        writer.write_table_header([("Size", 10), ("Type", 10), ("Name", 0)])
        writer.write_separator(50)

    count = 0
    if recursive:
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames.sort()
            rel_dir = os.path.relpath(dirpath, path)
            for name in dirnames:
                _write_local(writer, os.path.join(dirpath, name), _join(rel_dir, name), long, human_readable)
                count += 1
            for name in sorted(filenames):
                _write_local(writer, os.path.join(dirpath, name), _join(rel_dir, name), long, human_readable)
                count += 1
        return count

    for entry in sorted(os.scandir(path), key=lambda e: e.name):
        _write_local(writer, entry.path, entry.name, long, human_readable)
        count += 1
    return count


def _join(rel_dir, name):
    return name if rel_dir == '.' else f"{rel_dir}/{name}"


def _write_local(writer, full_path, display_name, long, human_readable):
    is_dir = os.path.isdir(full_path)
    if is_dir:
        display_name += '/'
    size = format_size(os.path.getsize(full_path), human_readable) if long else ''
    writer.write_local_file(display_name, size, 'dir' if is_dir else 'file', long)


def do_ls(app, *args):
    """List objects. Usage: ls [-l] [-H] [-r] [path]"""
    long = human_readable = recursive = False
    arg_list = list(args)
    while arg_list and arg_list[0].startswith('-') and arg_list[0] != '-':
        opt = arg_list.pop(0)
        if opt == '--help':
            print("Usage: ls [-l] [-H] [-r] [path]")
            return
        for flag in opt.lstrip('-'):
            if flag == 'l':
                long = True
            elif flag == 'H':
                human_readable = True
            elif flag == 'r':
                recursive = True
            else:
                print(f"Invalid option: -{flag}")
                return

    path = resolve_shell_path(app, arg_list[0]) if arg_list else None
    list_path(app, path, long=long, human_readable=human_readable, recursive=recursive)


def _resolve_at_account(account, path_arg):
    """Resolve a shell argument from ``az://account/``: its first segment names a container."""
    container, _, rest = path_arg.strip('/').partition('/')
    if not container or container == '..':
        return f"{SCHEME}{account}/"
    if not rest:
        return format_azure_uri(account, container, '')
    return format_azure_uri(account, container, rest + ('/' if path_arg.endswith('/') else ''))


def resolve_shell_path(app, path_arg, is_directory=False):
    """Turn a shell argument into an ``az://`` address relative to the current location."""
    if is_azure_uri(path_arg) or not app.current_location:
        return path_arg
    uri = app.navigator.resolve(app.current_location)
    account = app.navigator.account_for(uri, app.account)
    if not uri.container:
        return _resolve_at_account(account, path_arg)

    if path_arg.startswith('/'):
        current = ''
    else:
        current = uri.path or ''
    # '..' past the container root climbs back to the account
    depth = len([p for p in current.split('/') if p])
    parts = path_arg.split('/')
    ups = 0
    for index, part in enumerate(parts):
        if part == '..':
            ups += 1
            if ups > depth:
                return _resolve_at_account(account, '/'.join(parts[index + 1:]))
        elif part and part != '.':
            break

    provider = app.navigator.provider(account)
    keep_slash = is_directory or path_arg.endswith('/') or path_arg in ('.', '..')
    resolved = provider.resolve_path(current, path_arg.lstrip('/'), is_directory=keep_slash)
    return format_azure_uri(account, uri.container, resolved)


def do_cd(app, *args):
    """Change the current location after verifying it exists."""
    if len(args) != 1:
        print("Usage: cd <path>")
        return

    target = resolve_shell_path(app, args[0], is_directory=True)
    if not is_azure_uri(target):
        print("Error: cd only works on az:// locations")
        return
    uri = app.navigator.resolve(target)
    if uri.path and not uri.path.endswith('/'):
        target += '/'

    if app.navigator.has_entries(target, app.account):
        app.current_location = target
    else:
        print(f"Error: Directory not found: {args[0]}")


def do_pwd(app, *args):
    """Print the full current location."""
    print(app.current_location or '(no location)')
