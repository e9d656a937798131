"""Main CLI Entry Point"""

import logging
import os
import sys

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.markup import escape

from .commands import CommandHandler
from .config import Config
from .exceptions import FatalInitError
from .session import Session
from .version import get_version_string

console = Console()

# Commands whose first argument names a local path
LOCAL_PATH_COMMANDS = {"lcd", "lmkdir", "lrm", "lmv", "put"}


class FTPCompleter(Completer):
    """Completes command names, and local paths for local-side arguments"""

    def __init__(self, handler):
        self.handler = handler
        self.command_names = sorted(handler.commands.keys())

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        words = text.split()

        # Typing the command itself
        if len(words) == 0 or (len(words) == 1 and not text.endswith(" ")):
            word = words[0] if words else ""
            for name in self.command_names:
                if name.startswith(word.lower()):
                    yield Completion(name, start_position=-len(word))
            return

        if words[0].lower() not in LOCAL_PATH_COMMANDS:
            return

        current_word = "" if text.endswith(" ") else words[-1]
        dir_part, file_part = os.path.split(current_word)
        list_dir = self.handler.state.local_path(dir_part or ".")
        try:
            names = sorted(os.listdir(list_dir))
        except OSError:
            return

        for name in names:
            if not name.startswith(file_part):
                continue
            is_dir = os.path.isdir(os.path.join(list_dir, name))
            display_name = name + "/" if is_dir else name
            yield Completion(
                os.path.join(dir_part, display_name),
                start_position=-len(current_word),
                display=display_name,
            )


def stream_reader(stream, output: Console):
    """Line reader for non-interactive input (pipes, scripts)"""

    def read_line(prompt_text: str) -> str:
        output.print(prompt_text, end="", highlight=False, markup=False)
        line = stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")

    return read_line


def run_shell(handler: CommandHandler, read_line) -> int:
    """Read-dispatch loop. Runs until 'exit' or end of input."""
    while True:
        try:
            line = read_line(handler.session.prompt())
        except KeyboardInterrupt:
            handler.console.print("\nUse 'exit' to leave", highlight=False)
            continue
        except EOFError:
            handler.console.print("\nGoodbye!", highlight=False)
            break

        try:
            if not handler.execute(line):
                break
        except KeyboardInterrupt:
            handler.console.print("\n[yellow]Interrupted[/yellow]", highlight=False)
        except Exception as e:
            handler.console.print(f"[red]Unexpected error: {escape(str(e))}[/red]", highlight=False)
    return 0


def start_repl(config: Config) -> int:
    """Start interactive REPL session"""
    try:
        session = Session(config)
    except FatalInitError as e:
        console.print(f"[red]Failed to initialize FTP client: {e}[/red]", highlight=False)
        return 1

    handler = CommandHandler(session, console)
    console.print(f"[dim]{get_version_string()}[/dim]", highlight=False)
    console.print("Interactive FTP client and local file manager", highlight=False)
    handler.cmd_help([])
    print()

    if sys.stdin.isatty():
        prompt_session = PromptSession(
            history=InMemoryHistory(),
            auto_suggest=AutoSuggestFromHistory(),
            completer=FTPCompleter(handler),
        )
        read_line = prompt_session.prompt
    else:
        read_line = stream_reader(sys.stdin, console)

    try:
        return run_shell(handler, read_line)
    finally:
        session.close()


@click.command()
@click.version_option(version=get_version_string(), prog_name="ftpsh")
@click.option("-v", "--verbose", is_flag=True, help="Log connection and transfer activity to stderr")
def main(verbose):
    """Interactive FTP client and local file manager"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    config = Config.from_args(verbose=verbose)
    sys.exit(start_repl(config))


if __name__ == "__main__":
    main()
