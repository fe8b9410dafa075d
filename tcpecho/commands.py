__author__ = 'Will Hart'

import logging

from tcpecho.constants import Commands, SERVER_COMMANDS, CLIENT_COMMANDS
from tcpecho.utilities import parse_address


class CliError(Exception):
    pass


class ArgumentParseFailure(CliError):
    pass


class InvalidNumberOfArguments(CliError):
    def __init__(self, min, max, given):
        self.min = min
        self.max = max
        self.given = given
        if max is None:
            expected = "at least %s" % min
        elif max == min:
            expected = "%s" % min
        else:
            expected = "%s to %s" % (min, max)
        super(InvalidNumberOfArguments, self).__init__(
            "Invalid number of arguments, expected %s but got %s" % (expected, given))


class ExecutionError(CliError):
    pass


class ServerCommandHandler(object):
    """
    Maps the console commands onto an EchoServer.  Usage is::

        handler = ServerCommandHandler(EchoServer())
        handler.handle_command("start", [], sys.stdout)
    """

    COMMANDS = SERVER_COMMANDS

    logger = logging.getLogger(__name__)

    def __init__(self, controller):
        self.controller = controller

    def get_commands(self):
        return set(self.COMMANDS)

    def handle_command(self, command, args, writer):
        """
        Runs a single command against the controller

        :param command: the command name, one of get_commands()
        :param args: a list of string arguments
        :param writer: a text stream that query results are written to
        :raises: CliError if the command or its arguments are invalid
        """
        self.logger.debug("Handling command %s %s" % (command, args))

        if command == Commands.SetAddress:
            check_arguments(args, 1, 1)
            try:
                address = parse_address(args[0])
            except ValueError as e:
                raise ArgumentParseFailure(str(e))
            self.controller.set_address(address)
        elif command == Commands.IsRunning:
            check_arguments(args, 0, 0)
            write_result(writer, self.controller.is_running())
        elif command == Commands.Start:
            check_arguments(args, 0, 0)
            self.controller.start()
        elif command == Commands.Stop:
            check_arguments(args, 0, 0)
            self.controller.stop()
        else:
            raise ExecutionError("Unknown command: %s" % command)


class ClientCommandHandler(ServerCommandHandler):
    """
    Adds the is-connected and send-message commands for an EchoClient
    """

    COMMANDS = CLIENT_COMMANDS

    def handle_command(self, command, args, writer):
        if command == Commands.IsConnected:
            check_arguments(args, 0, 0)
            write_result(writer, self.controller.is_connected())
        elif command == Commands.SendMessage:
            check_arguments(args, 1, None)
            # unquoted messages arrive split on whitespace
            self.controller.send_message(" ".join(args))
        else:
            super(ClientCommandHandler, self).handle_command(command, args, writer)


def check_arguments(args, min, max):
    if len(args) < min or (max is not None and len(args) > max):
        raise InvalidNumberOfArguments(min, max, len(args))


def write_result(writer, value):
    """Writes a boolean as a "true" / "false" line"""
    try:
        writer.write("%s\n" % ("true" if value else "false"))
        writer.flush()
    except (OSError, ValueError):
        raise ExecutionError("Unable to write output")
