import sys

BOLD = '1'
DIM = '2'
GREEN = '32'
YELLOW = '33'
BLUE = '34'
CYAN = '36'


def human_readable_size(size_bytes):
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0 or unit == 'TB':
            break
        size /= 1024.0
    return f"{size:.1f} {unit}"


def format_size(size_bytes, human_readable=False):
    return human_readable_size(size_bytes) if human_readable else str(size_bytes)


class OutputWriter:
    """Line-oriented listing output, styled with ANSI codes only on a terminal."""

    def __init__(self, out=None, color=None):
        self.out = out or sys.stdout
        if color is None:
            isatty = getattr(self.out, 'isatty', None)
            color = bool(isatty and isatty())
        self.color = color

    def _style(self, text, *codes):
        if not self.color or not codes:
            return text
        return f"\033[{';'.join(codes)}m{text}\033[0m"

    def _print(self, line):
        print(line, file=self.out)

    def write_header(self, text):
        self._print(self._style(text, BOLD))

    def write_table_header(self, columns):
        cells = [f"{name:<{width}}" if width else name for name, width in columns]
        self._print(self._style(' '.join(cells), BOLD))

    def write_separator(self, length):
        if self.color:
            self._print(self._style('-' * length, DIM))

    def write_container(self, uri, modified, long=False):
        if long:
            self._print(f"{self._style(f'{uri:<30}', CYAN)} {self._style(modified, DIM)}")
        else:
            self._print(self._style(uri, CYAN))

    def write_blob(self, uri, size, content_type, modified, long=False):
        if long:
            self._print(
                f"{self._style(f'{size:<10}', GREEN)} {self._style(f'{content_type:<15}', YELLOW)} "
                f"{self._style(f'{modified:<20}', DIM)} {self._style(uri, CYAN)}"
            )
        else:
            self._print(self._style(uri, CYAN))

    def write_prefix(self, uri, long=False):
        if long:
            self._print(
                f"{self._style('-'.ljust(10), DIM)} {self._style('DIR'.ljust(15), BLUE)} "
                f"{self._style('-'.ljust(20), DIM)} {self._style(uri, BLUE, BOLD)}"
            )
        else:
            self._print(self._style(uri, BLUE, BOLD))

    def write_local_file(self, name, size, file_type, long=False):
        display = self._style(name, BLUE) if file_type == 'dir' else name
        if long:
            self._print(f"{self._style(f'{size:<10}', GREEN)} {self._style(f'{file_type:<10}', YELLOW)} {display}")
        else:
            self._print(display)

    def write_disk_usage(self, size, path):
        self._print(f"{self._style(size, GREEN)}\t{path}")

    def write_disk_usage_total(self, size, path):
        self._print(self._style(f"{size}\t{path} (total)", BOLD))
