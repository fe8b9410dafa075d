__author__ = 'Will Hart'

import io
import unittest

from tcpecho.commands import (ServerCommandHandler, ClientCommandHandler, ArgumentParseFailure,
                              InvalidNumberOfArguments, ExecutionError)
from tcpecho.console import CliManager
from tcpecho.utilities import Address


class ControllerMock(object):
    """Records the calls made by the command handlers"""

    def __init__(self):
        self.calls = []
        self.running = False
        self.connected = False

    def set_address(self, address):
        self.calls.append(("set_address", address))

    def is_running(self):
        return self.running

    def is_connected(self):
        return self.connected

    def send_message(self, message):
        self.calls.append(("send_message", message))

    def start(self):
        self.calls.append(("start",))

    def stop(self):
        self.calls.append(("stop",))


class BrokenWriter(object):
    def write(self, text):
        raise OSError("stream closed")

    def flush(self):
        pass


class TestServerCommandHandler(unittest.TestCase):

    def setUp(self):
        self.controller = ControllerMock()
        self.handler = ServerCommandHandler(self.controller)
        self.writer = io.StringIO()

    def test_commands(self):
        assert self.handler.get_commands() == {"set-address", "is-running", "start", "stop"}

    def test_set_address(self):
        self.handler.handle_command("set-address", ["127.0.0.1:9001"], self.writer)
        assert self.controller.calls == [("set_address", Address("127.0.0.1", 9001))]

    def test_set_address_parse_failure(self):
        with self.assertRaises(ArgumentParseFailure):
            self.handler.handle_command("set-address", ["localhost"], self.writer)
        assert self.controller.calls == []

    def test_set_address_needs_an_argument(self):
        with self.assertRaises(InvalidNumberOfArguments) as ctx:
            self.handler.handle_command("set-address", [], self.writer)
        assert ctx.exception.min == 1 and ctx.exception.given == 0

    def test_is_running(self):
        self.handler.handle_command("is-running", [], self.writer)
        self.controller.running = True
        self.handler.handle_command("is-running", [], self.writer)
        assert self.writer.getvalue() == "false\ntrue\n"

    def test_start_and_stop(self):
        self.handler.handle_command("start", [], self.writer)
        self.handler.handle_command("stop", [], self.writer)
        assert self.controller.calls == [("start",), ("stop",)]
        assert self.writer.getvalue() == ""

    def test_client_commands_unknown(self):
        with self.assertRaises(ExecutionError):
            self.handler.handle_command("send-message", ["hi"], self.writer)

    def test_unwritable_output(self):
        with self.assertRaises(ExecutionError):
            self.handler.handle_command("is-running", [], BrokenWriter())


class TestClientCommandHandler(unittest.TestCase):

    def setUp(self):
        self.controller = ControllerMock()
        self.handler = ClientCommandHandler(self.controller)
        self.writer = io.StringIO()

    def test_commands(self):
        assert self.handler.get_commands() == {
            "set-address", "is-running", "is-connected", "send-message", "start", "stop"}

    def test_is_connected(self):
        self.controller.connected = True
        self.handler.handle_command("is-connected", [], self.writer)
        assert self.writer.getvalue() == "true\n"

    def test_send_message_joins_arguments(self):
        self.handler.handle_command("send-message", ["hello", "there"], self.writer)
        assert self.controller.calls == [("send_message", "hello there")]

    def test_send_message_needs_an_argument(self):
        with self.assertRaises(InvalidNumberOfArguments):
            self.handler.handle_command("send-message", [], self.writer)

    def test_inherits_server_commands(self):
        self.handler.handle_command("start", [], self.writer)
        assert self.controller.calls == [("start",)]


class TestCliManager(unittest.TestCase):

    def setUp(self):
        self.controller = ControllerMock()
        self.output = io.StringIO()
        self.manager = CliManager(input=io.StringIO(), output=self.output)
        self.manager.add_handler(ClientCommandHandler(self.controller))

    def test_dispatches_quoted_arguments(self):
        assert self.manager.execute('send-message "hello world"\n')
        assert self.controller.calls == [("send_message", "hello world")]

    def test_query_output(self):
        self.manager.execute("is-connected")
        assert self.output.getvalue() == "false\n"

    def test_blank_line_ignored(self):
        assert self.manager.execute("   \n")
        assert self.output.getvalue() == ""

    def test_errors_reported_not_raised(self):
        assert self.manager.execute("set-address nowhere")
        assert self.manager.execute("launch")
        assert self.manager.execute('send-message "unterminated')
        lines = self.output.getvalue().splitlines()
        assert len(lines) == 3
        assert all(line.startswith("Error: ") for line in lines), lines
        assert "Unknown command: launch" in lines[1]

    def test_help(self):
        self.manager.execute("help")
        assert "is-connected" in self.output.getvalue()
        assert "send-message" in self.output.getvalue()

    def test_exit(self):
        assert not self.manager.execute("exit")
        assert not self.manager.execute("quit")

    def test_duplicate_handler_rejected(self):
        with self.assertRaises(ValueError):
            self.manager.add_handler(ServerCommandHandler(ControllerMock()))

    def test_start_reads_until_exit(self):
        manager = CliManager(input=io.StringIO("start\nis-running\nexit\nstop\n"), output=self.output)
        manager.add_handler(ServerCommandHandler(self.controller))
        manager.start()
        assert self.controller.calls == [("start",)], "Commands after exit should not run"
        assert self.output.getvalue() == "false\n"
