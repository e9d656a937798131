import io
import os
import tempfile
import unittest
from unittest import mock

from click.testing import CliRunner
from prompt_toolkit.document import Document
from rich.console import Console

from ftpcli import cli
from ftpcli.client import FTPClient
from ftpcli.commands import CommandHandler
from ftpcli.exceptions import FatalInitError
from ftpcli.paths import PathState
from ftpcli.session import Session


class ScriptedInput:
    """Feeds prepared lines to run_shell and records the prompts shown"""

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def __call__(self, prompt_text):
        self.prompts.append(prompt_text)
        if not self.lines:
            raise EOFError
        line = self.lines.pop(0)
        if isinstance(line, BaseException):
            raise line
        return line


class ShellTestCase(unittest.TestCase):
    def setUp(self):
        self.orig_cwd = os.getcwd()
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = os.path.realpath(self.tmpdir.name)
        self.remote = mock.create_autospec(FTPClient, instance=True)
        self.remote.list.return_value = ""
        self.session = Session(state=PathState(self.root), remote=self.remote)
        self.console = Console(file=io.StringIO(), width=200, color_system=None)
        self.handler = CommandHandler(self.session, self.console)

    def tearDown(self):
        os.chdir(self.orig_cwd)
        self.tmpdir.cleanup()


class TestRunShell(ShellTestCase):
    def test_exit_stops_loop(self):
        reader = ScriptedInput(["help", "exit", "connect ftp://never.test/"])
        self.assertEqual(cli.run_shell(self.handler, reader), 0)
        self.assertEqual(len(reader.prompts), 2)
        self.assertEqual(self.session.state.remote_base, "")

    def test_end_of_input_stops_loop(self):
        reader = ScriptedInput(["connect ftp://example.test/", "cd pub"])
        self.assertEqual(cli.run_shell(self.handler, reader), 0)
        self.assertEqual(len(reader.prompts), 3)
        self.assertIn("Goodbye!", self.console.file.getvalue())

    def test_prompt_tracks_both_locations(self):
        os.mkdir(os.path.join(self.root, "work"))
        reader = ScriptedInput(["lcd work", "connect ftp://example.test/", "cd pub"])
        cli.run_shell(self.handler, reader)
        self.assertEqual(reader.prompts[-1], "local:work | remote:pub> ")
        self.assertEqual(reader.prompts[1], "local:work | remote:> ")

    def test_keyboard_interrupt_keeps_running(self):
        reader = ScriptedInput([KeyboardInterrupt(), "exit"])
        self.assertEqual(cli.run_shell(self.handler, reader), 0)
        self.assertIn("Use 'exit' to leave", self.console.file.getvalue())

    def test_unexpected_error_keeps_running(self):
        reader = ScriptedInput(["ls", "exit"])
        with mock.patch.object(self.handler, "execute", side_effect=[RuntimeError("boom"), False]):
            self.assertEqual(cli.run_shell(self.handler, reader), 0)
        self.assertEqual(len(reader.prompts), 2)
        self.assertIn("Unexpected error: boom", self.console.file.getvalue())


class TestStreamReader(unittest.TestCase):
    def test_reads_lines_until_eof(self):
        output = Console(file=io.StringIO(), color_system=None)
        read_line = cli.stream_reader(io.StringIO("ls\r\nexit\n"), output)
        self.assertEqual(read_line("p> "), "ls")
        self.assertEqual(read_line("p> "), "exit")
        with self.assertRaises(EOFError):
            read_line("p> ")
        self.assertEqual(output.file.getvalue(), "p> p> p> ")


class TestCompleter(ShellTestCase):
    def complete(self, text):
        completer = cli.FTPCompleter(self.handler)
        return [c.text for c in completer.get_completions(Document(text), None)]

    def test_command_names(self):
        self.assertEqual(self.complete("lm"), ["lmkdir", "lmv"])

    def test_local_paths(self):
        os.mkdir(os.path.join(self.root, "docs"))
        open(os.path.join(self.root, "data.txt"), "w").close()
        self.assertEqual(self.complete("lcd d"), ["data.txt", "docs/"])

    def test_remote_arguments_not_completed(self):
        open(os.path.join(self.root, "data.txt"), "w").close()
        self.assertEqual(self.complete("get d"), [])


class TestMain(unittest.TestCase):
    def setUp(self):
        self.orig_cwd = os.getcwd()

    def tearDown(self):
        os.chdir(self.orig_cwd)

    def test_scripted_session(self):
        runner = CliRunner()
        result = runner.invoke(cli.main, input="lpwd\nbogus\nexit\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Unknown command: bogus", result.output)
        self.assertIn("Goodbye!", result.output)

    def test_eof_exits_cleanly(self):
        runner = CliRunner()
        result = runner.invoke(cli.main, input="help\n")
        self.assertEqual(result.exit_code, 0)

    def test_fatal_init_error(self):
        runner = CliRunner()
        with mock.patch.object(cli, "Session", side_effect=FatalInitError("boom")):
            result = runner.invoke(cli.main, input="")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Failed to initialize FTP client: boom", result.output)

    def test_version(self):
        result = CliRunner().invoke(cli.main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("ftpsh", result.output)


if __name__ == '__main__':
    unittest.main()
