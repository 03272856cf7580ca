import os
import shlex

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.shortcuts import CompleteStyle
from prompt_toolkit.patch_stdout import patch_stdout

from .completer import BlobBossCompleter
from .formatting import OutputWriter
from .navigator import Navigator
from .commands.navigation import do_ls, do_cd, do_pwd
from .commands.read import do_cat
from .commands.info import do_du
from .commands.shell import do_exit, do_clear, do_help


class BlobBossApp:
    def __init__(self, navigator: Navigator, account=None, location=None, out=None):
        self.navigator = navigator
        # Explicit --account; addresses naming their own account still win
        self.account = account
        self.current_location = location
        self.writer = OutputWriter(out)
        self._session = None
        # Commands map to functions that take (app, *args)
        self.commands = {
            'exit': lambda *args: do_exit(self, *args),
            'quit': lambda *args: do_exit(self, *args),
            'ls': lambda *args: do_ls(self, *args),
            'cd': lambda *args: do_cd(self, *args),
            'pwd': lambda *args: do_pwd(self, *args),
            'du': lambda *args: do_du(self, *args),
            'cat': lambda *args: do_cat(self, *args),
            'clear': lambda *args: do_clear(self, *args),
            'help': lambda *args: do_help(self, *args),
        }

    @property
    def session(self):
        if self._session is None:
            history = FileHistory(os.path.join(os.path.expanduser("~"), ".blobboss_history"))
            self._session = PromptSession(
                history=history,
                completer=BlobBossCompleter(self),
                complete_style=CompleteStyle.COLUMN,
            )
        return self._session

    def get_prompt(self):
        """Generate the prompt string from the current location."""
        if self.current_location:
            return f'{self.current_location}> '
        account = self.account or self.navigator.default_account
        if account:
            return f'{self.navigator.provider(account).get_prompt_prefix()}> '
        return 'blobboss> '

    def run(self):
        """Main loop to run the shell application."""
        print("BlobBoss Shell. Type 'help' or 'exit'.")
        while True:
            try:
                with patch_stdout():
                    text = self.session.prompt(self.get_prompt())
                if not text.strip():
                    continue
                if not self.handle_command(text):
                    break
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nExiting...")
                break

    def handle_command(self, text):
        """Parse and execute the entered command."""
        try:
            parts = shlex.split(text.strip())
            if not parts:
                return True

            command_name = parts[0].lower()
            args = parts[1:]

            if command_name in self.commands:
                should_continue = self.commands[command_name](*args)
                return should_continue if should_continue is not None else True
            else:
                print(f"Unknown command: {command_name}")
                return True
        except Exception as e:
            print(f"Error processing command: {e}")
            return True
