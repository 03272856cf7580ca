import sys

from ..uri import is_azure_uri


def parse_range(text):
    """Parse a byte range as ``start-end`` or ``start-`` (both inclusive).

    >>> parse_range('0-99')
    (0, 99)
    >>> parse_range('100-')
    (100, None)
    """
    if text.startswith('-'):
        raise ValueError("Negative byte range (-N) not yet supported. Use start-end or start- format.")

    parts = text.split('-')
    if len(parts) != 2:
        raise ValueError("Invalid range format. Use 'start-end', 'start-', or '-numbytes'")

    try:
        start = int(parts[0])
    except ValueError:
        raise ValueError("Invalid start byte offset") from None

    if not parts[1]:
        return start, None
    try:
        end = int(parts[1])
    except ValueError:
        raise ValueError("Invalid end byte offset") from None
    return start, end


def cat_blobs(app, urls, header=False, byte_range=None, out=None):
    """Write the raw content of each blob to ``out`` (stdout's binary buffer by default)."""
    if not urls:
        raise ValueError("No URLs provided")
    if out is None:
        out = sys.stdout.buffer

    parsed_range = parse_range(byte_range) if byte_range else None

    for idx, url in enumerate(urls):
        if not is_azure_uri(url):
            raise ValueError(f"Invalid URL '{url}'. Must be an Azure URL (az://account/container/path)")

        if header:
            if idx > 0:
                print(file=sys.stderr)
            print(f"==> {url} <==", file=sys.stderr)

        content = app.navigator.read_blob(url, parsed_range, app.account)
        out.write(content)
        out.flush()


def do_cat(app, *args):
    """Print blob contents. Usage: cat [-r RANGE] [--header] <blob> [blob ...]"""
    from .navigation import resolve_shell_path

    arg_list = list(args)
    byte_range = None
    header = False
    paths = []
    i = 0
    while i < len(arg_list):
        arg = arg_list[i]
        if arg in ('-r', '--range') and i + 1 < len(arg_list):
            byte_range = arg_list[i + 1]
            i += 2
        elif arg in ('-h', '--header'):
            header = True
            i += 1
        else:
            paths.append(arg)
            i += 1

    if not paths:
        print("Usage: cat [-r RANGE] [--header] <blob> [blob ...]")
        return

    urls = [resolve_shell_path(app, p) for p in paths]
    out = getattr(app.writer.out, 'buffer', None) or sys.stdout.buffer
    cat_blobs(app, urls, header=header, byte_range=byte_range, out=out)
