import os
import shlex

from prompt_toolkit.completion import Completer, Completion

from .models import Prefix
from .uri import SCHEME, is_azure_uri


class BlobBossCompleter(Completer):
    remote_path_commands = {'ls', 'cd', 'cat', 'du'}

    def __init__(self, blob_boss_app):
        self.app = blob_boss_app

    def _get_remote_suggestions(self, directory, include_files=False):
        """Names one level below ``directory`` (an ``az://`` address ending in '/')."""
        try:
            result = self.app.navigator.list(directory, account=self.app.account)
        except Exception:
            return []
        if result.containers is not None:
            return [c.name + '/' for c in result.containers]
        base = self.app.navigator.resolve(directory).path or ''
        suggestions = []
        for entry in result.entries:
            if isinstance(entry, Prefix) or include_files:
                suggestions.append(entry.name[len(base):])
        return suggestions

    def _get_local_suggestions(self, text):
        """Complete local filesystem paths."""
        try:
            path = os.path.expanduser(text)
            dir_path = os.path.dirname(path)
            partial = os.path.basename(path)

            if not dir_path:
                dir_path = '.'
            elif not os.path.isdir(dir_path):
                return []

            completions = []
            for name in os.listdir(dir_path):
                if name.startswith(partial):
                    full_item_path = os.path.join(dir_path, name)
                    completion_text = os.path.join(os.path.dirname(text), name)

                    if os.path.isdir(full_item_path):
                        completions.append(completion_text + '/')
                    else:
                        completions.append(completion_text)
            return completions
        except OSError:
            return []

    def _directory_address(self, dir_part):
        """The ``az://`` address that holds completions for ``dir_part``."""
        from .commands.navigation import resolve_shell_path

        if is_azure_uri(dir_part):
            return dir_part
        if not self.app.current_location:
            return None
        if not dir_part:
            return self.app.current_location
        return resolve_shell_path(self.app, dir_part, is_directory=True)

    def get_completions(self, document, complete_event):
        text_before_cursor = document.text_before_cursor
        word = document.get_word_before_cursor(WORD=True)

        try:
            parts = shlex.split(text_before_cursor)
        except ValueError:
            parts = text_before_cursor.split()
        num_parts = len(parts)

        completing_new_word = text_before_cursor.endswith(' ')

        # Completing the command name
        if num_parts == 0 or (num_parts == 1 and not completing_new_word):
            for cmd in sorted(self.app.commands.keys()):
                if cmd.startswith(word):
                    yield Completion(cmd, start_position=-len(word))
            return

        command = parts[0].lower()
        if command not in self.remote_path_commands:
            return
        if completing_new_word:
            path_to_complete = ''
            start_pos = 0
        else:
            path_to_complete = parts[-1]
            start_pos = -len(word)
        if path_to_complete.startswith('-'):
            return

        if '/' in path_to_complete:
            dir_part, partial = path_to_complete.rsplit('/', 1)
            dir_part += '/'
        else:
            dir_part = ''
            partial = path_to_complete

        # A bare 'az:/' or 'az://acct' is still being typed
        if path_to_complete and SCHEME.startswith(path_to_complete):
            yield Completion(SCHEME, start_position=start_pos)
            return
        if is_azure_uri(path_to_complete) and path_to_complete.count('/') < 3:
            return

        if not is_azure_uri(path_to_complete) and not self.app.current_location:
            for suggestion in self._get_local_suggestions(path_to_complete):
                yield Completion(suggestion, start_position=start_pos)
            return

        try:
            directory = self._directory_address(dir_part)
        except ValueError:
            return
        if directory is None:
            return
        include_files = command != 'cd'
        for s in self._get_remote_suggestions(directory, include_files=include_files):
            if s.startswith(partial):
                yield Completion(dir_part + s, start_position=start_pos)
