"""REPL Command Handlers"""

import logging
from typing import Callable, List, NamedTuple, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from . import cli_commands
from .exceptions import LocalFileError, NotConnectedError, TransferError, UsageError
from .listing import parse_listing
from .session import Session

logger = logging.getLogger(__name__)

console = Console()

TRUE_FLAGS = ("1", "true")
FALSE_FLAGS = ("0", "false")
RM_USAGE = "rm <name> <is_dir(0|1|true|false)>"


class Command(NamedTuple):
    """One entry of the command table"""

    names: Tuple[str, ...]
    handler: Callable[[List[str]], bool]
    min_args: int
    max_args: int
    usage: str
    description: str
    section: str
    # Remote commands need a prior 'connect'
    remote: bool = False

    def accepts(self, argc: int) -> bool:
        return self.min_args <= argc <= self.max_args


class CommandHandler:
    """Handler for REPL commands"""

    def __init__(self, session: Session, output: Optional[Console] = None):
        self.session = session
        self.console = output or console
        self.command_table = [
            Command(("connect",), self.cmd_connect, 1, 2, "connect <url> [user:password]",
                    "Set the FTP server (e.g. connect ftp://demo.wftpserver.com demo:demo)", "FTP"),
            Command(("ls", "dir"), self.cmd_ls, 0, 0, "ls",
                    "List the remote directory", "FTP", remote=True),
            Command(("cd",), self.cmd_cd, 1, 1, "cd <directory_name>",
                    "Change remote directory ('..' goes up)", "FTP", remote=True),
            Command(("pwd",), self.cmd_pwd, 0, 0, "pwd",
                    "Print the remote directory", "FTP", remote=True),
            Command(("mkdir",), self.cmd_mkdir, 1, 1, "mkdir <directory_name>",
                    "Create a remote directory", "FTP", remote=True),
            Command(("rm",), self.cmd_rm, 2, 2, RM_USAGE,
                    "Delete a remote file (0) or directory (1)", "FTP", remote=True),
            Command(("get",), self.cmd_get, 2, 2, "get <remote_file> <local_file>",
                    "Download a file", "FTP", remote=True),
            Command(("put",), self.cmd_put, 2, 2, "put <local_file> <remote_file>",
                    "Upload a file", "FTP", remote=True),
            Command(("lls", "ldir"), self.cmd_lls, 0, 0, "lls",
                    "List the local directory", "Local"),
            Command(("lcd",), self.cmd_lcd, 1, 1, "lcd <directory_name>",
                    "Change local directory", "Local"),
            Command(("lpwd",), self.cmd_lpwd, 0, 0, "lpwd",
                    "Print the local directory", "Local"),
            Command(("lmkdir",), self.cmd_lmkdir, 1, 1, "lmkdir <directory_name>",
                    "Create a local directory", "Local"),
            Command(("lrm",), self.cmd_lrm, 1, 1, "lrm <path>",
                    "Delete a local file or empty directory", "Local"),
            Command(("lmv",), self.cmd_lmv, 2, 2, "lmv <from_path> <to_path>",
                    "Move/rename a local file or directory", "Local"),
            Command(("help", "?"), self.cmd_help, 0, 0, "help",
                    "Show this help", "General"),
            Command(("exit", "quit"), self.cmd_exit, 0, 0, "exit",
                    "Exit", "General"),
        ]
        self.commands = {}
        for command in self.command_table:
            for name in command.names:
                self.commands[name] = command

    @property
    def state(self):
        return self.session.state

    def _print(self, message: str):
        self.console.print(message, highlight=False)

    def _error(self, message: str):
        self._print(f"[red]{escape(message)}[/red]")

    def execute(self, line: str) -> bool:
        """Execute a command. Returns False if should exit."""
        parts = line.split()
        if not parts:
            return True

        cmd = parts[0].lower()
        args = parts[1:]

        command = self.commands.get(cmd)
        if command is None:
            self._print(f"[red]Unknown command: {escape(cmd)}[/red]")
            self._print("Type 'help' for available commands")
            return True
        if not command.accepts(len(args)):
            self._print(f"Usage: {escape(command.usage)}")
            return True

        logger.debug("Dispatching %s %s", cmd, args)
        try:
            if command.remote and not self.state.remote.is_set:
                raise NotConnectedError(cmd)
            return command.handler(args)
        except UsageError as e:
            self._print(f"[yellow]{escape(str(e))}[/yellow]")
        except (LocalFileError, TransferError) as e:
            logger.debug("%s failed: %s", cmd, e)
            self._error(f"{cmd}: {e}")
        except Exception as e:
            logger.debug("%s raised %s", cmd, type(e).__name__, exc_info=True)
            self._error(f"{cmd}: unexpected error: {e}")
        return True

    # Remote commands

    def cmd_connect(self, args: List[str]) -> bool:
        """Set the remote base address and credentials"""
        credentials = args[1] if len(args) > 1 else ""
        base = self.session.connect(args[0], credentials)
        self._print(f"Base URL set to: {escape(base)}")
        return True

    def cmd_ls(self, args: List[str]) -> bool:
        """List the remote directory"""
        base = self.state.remote_base
        entries = parse_listing(self.session.remote.list(base))
        cli_commands.print_listing(self.console, f"Remote directory {base}", entries)
        return True

    def cmd_cd(self, args: List[str]) -> bool:
        """Change remote directory"""
        remote = self.state.change_remote(args[0])
        self._print(f"Remote directory changed to: {escape(remote.address)}")
        return True

    def cmd_pwd(self, args: List[str]) -> bool:
        self._print(escape(self.state.remote_base))
        return True

    def cmd_mkdir(self, args: List[str]) -> bool:
        name = args[0]
        self.session.remote.make_directory(self.state.remote.join(name))
        self._print(f"Remote directory '{escape(name)}' created.")
        return True

    def cmd_rm(self, args: List[str]) -> bool:
        """Delete a remote file or directory; the caller says which"""
        name, flag = args
        if flag.lower() in TRUE_FLAGS:
            is_dir = True
        elif flag.lower() in FALSE_FLAGS:
            is_dir = False
        else:
            raise UsageError(f"Usage: {RM_USAGE}", "rm")
        self.session.remote.remove(self.state.remote.join(name), is_dir)
        kind = "directory" if is_dir else "file"
        self._print(f"Remote {kind} '{escape(name)}' deleted.")
        return True

    def cmd_get(self, args: List[str]) -> bool:
        remote_name, local_name = args
        self.session.remote.download(
            self.state.remote.join(remote_name), self.state.local_path(local_name)
        )
        self._print(f"Downloaded '{escape(remote_name)}' to '{escape(local_name)}'")
        return True

    def cmd_put(self, args: List[str]) -> bool:
        local_name, remote_name = args
        self.session.remote.upload(
            self.state.local_path(local_name), self.state.remote.join(remote_name)
        )
        self._print(f"Uploaded '{escape(local_name)}' as '{escape(remote_name)}'")
        return True

    # Local commands

    def cmd_lls(self, args: List[str]) -> bool:
        """List the local directory"""
        directory = self.state.local_directory
        entries = self.session.local.list_directory(directory)
        cli_commands.print_listing(self.console, f"Local directory {directory}", entries)
        return True

    def cmd_lcd(self, args: List[str]) -> bool:
        directory = self.state.set_local(args[0], self.session.local)
        self._print(f"Local directory changed to: {escape(directory)}")
        return True

    def cmd_lpwd(self, args: List[str]) -> bool:
        self._print(escape(self.state.local_directory))
        return True

    def cmd_lmkdir(self, args: List[str]) -> bool:
        name = args[0]
        if self.session.local.create_directory(self.state.local_path(name)):
            self._print(f"Local directory '{escape(name)}' created.")
        else:
            self._print(f"[yellow]Local directory '{escape(name)}' already exists.[/yellow]")
        return True

    def cmd_lrm(self, args: List[str]) -> bool:
        path = args[0]
        self.session.local.remove(self.state.local_path(path))
        self._print(f"Removed '{escape(path)}'.")
        return True

    def cmd_lmv(self, args: List[str]) -> bool:
        src, dst = args
        self.session.local.rename(self.state.local_path(src), self.state.local_path(dst))
        self._print(f"Moved '{escape(src)}' to '{escape(dst)}'")
        return True

    # Utility commands

    def cmd_help(self, args: List[str]) -> bool:
        """Show help information"""
        section = None
        for command in self.command_table:
            if command.section != section:
                section = command.section
                self._print(f"\n[bold]{section} commands[/bold]")
            names = " / ".join(command.names)
            usage = command.usage.replace(command.names[0], names, 1)
            padded = f"{usage:<40}"
            self._print(f"  {escape(padded)} {escape(command.description)}")
        return True

    def cmd_exit(self, args: List[str]) -> bool:
        """Exit REPL"""
        self._print("Goodbye!")
        return False
