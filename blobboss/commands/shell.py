import os


COMMAND_HELP = {
    'ls': """ls [-l] [-H] [-r] [path]
  List containers, blobs and virtual directories.
  -l              Long view with size, content type and modified date
  -H              Human-readable sizes (1.5 KB, 2.0 MB)
  -r              List recursively
  Wildcards: '*' and '?' stay within one path segment, '**' spans segments.
  ls 'photos/*/'  List the directories one level below photos/""",

    'cd': """cd <path>
  Change the current location.
  cd ..           Go up one level (past the container root: back to the account)
  cd /            Go to the container root
  cd az://acct/c/ Jump to an absolute location""",

    'pwd': """pwd
  Print the full current location.""",

    'du': """du [-s] [-H] [-c] [path]
  Cumulative size of every virtual directory under path.
  -s              Only show the total for path
  -H              Human-readable sizes
  -c              Also print a grand total
  du az://acct/   Size of every container in the account""",

    'cat': """cat [-r RANGE] [--header] <blob> [blob ...]
  Write blob contents to stdout.
  -r RANGE        Byte range: 'start-end' or 'start-' (inclusive)
  --header        Print '==> name <==' before each blob""",

    'help': """help [command]
  Show available commands or detailed help for a specific command.""",

    'clear': """clear
  Clear the terminal screen.""",

    'exit': """exit
  Exit BlobBoss.""",

    'quit': """quit
  Exit BlobBoss (alias for exit).""",
}

COMMAND_CATEGORIES = [
    ('Navigation', ['ls', 'cd', 'pwd']),
    ('Reading', ['cat']),
    ('Info', ['du']),
    ('Shell', ['help', 'clear', 'exit', 'quit']),
]


def do_exit(app, *args):
    """Exit the shell."""
    print("Exiting...")
    return False


def do_clear(app, *args):
    """Clear the terminal screen."""
    os.system('cls' if os.name == 'nt' else 'clear')


def do_help(app, *args):
    """Show available commands or detailed help for a specific command."""
    if args:
        cmd_name = args[0].lower()
        if cmd_name in COMMAND_HELP:
            print()
            print(COMMAND_HELP[cmd_name])
            print()
        elif cmd_name in app.commands:
            print("  No detailed help available for '%s'." % cmd_name)
        else:
            print("  Unknown command: %s" % cmd_name)
        return

    print("\nBlobBoss Commands:\n")
    for category, cmds in COMMAND_CATEGORIES:
        available = [c for c in cmds if c in app.commands]
        if available:
            print("  \033[1m%s\033[0m" % category)
            print("    " + '  '.join(available))
            print()
    print("Type 'help <command>' for detailed usage. Use TAB for completion.")
