__author__ = 'Will Hart'

import argparse
import logging
import shlex
import signal
import sys

from tcpecho.commands import CliError, ServerCommandHandler, ClientCommandHandler
from tcpecho.config import Config
from tcpecho.io.tcp import EchoServer, EchoClient, TcpCommunicationException

LOG_FORMAT = '%(asctime)-27s %(levelname)-10s %(name)-25s %(threadName)-15s   %(message)s'

HELP_COMMAND = "help"
EXIT_COMMANDS = ["exit", "quit"]


def setup_logging(debug=False, filename=None):
    """
    Configures the root logger.  Logs go to stderr, or to the given file,
    so they never mix with the data printed to stdout
    """
    level = logging.DEBUG if debug else logging.WARNING
    if filename is None:
        logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT)
    else:
        logging.basicConfig(filename=filename, level=level, format=LOG_FORMAT)


class CliManager(object):
    """
    Reads commands line by line and dispatches them to the registered
    handlers.  Each line is split like a shell command line, so quoted
    arguments may contain spaces
    """

    logger = logging.getLogger(__name__)

    def __init__(self, input=None, output=None):
        self.input = input if input is not None else sys.stdin
        self.output = output if output is not None else sys.stdout
        self.__handlers = {}

    def add_handler(self, handler):
        """
        Registers every command of the given handler

        :raises: ValueError if one of the commands already has a handler
        """
        commands = handler.get_commands()
        duplicates = commands.intersection(self.__handlers.keys())
        if duplicates:
            raise ValueError("Commands already registered: %s" % ", ".join(sorted(duplicates)))

        for command in commands:
            self.__handlers[command] = handler

    def get_commands(self):
        return sorted(self.__handlers.keys())

    def execute(self, line):
        """
        Runs a single command line

        :returns: False if the line asked to exit, True otherwise
        """
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.write("Error: %s" % e)
            return True

        if not parts:
            return True

        command, args = parts[0], parts[1:]
        if command in EXIT_COMMANDS:
            return False

        if command == HELP_COMMAND:
            self.write("Commands: %s" % " ".join(self.get_commands() + [HELP_COMMAND] + EXIT_COMMANDS))
            return True

        handler = self.__handlers.get(command)
        if handler is None:
            self.write("Error: Unknown command: %s" % command)
            return True

        try:
            handler.handle_command(command, args, self.output)
        except CliError as e:
            self.logger.debug("Command %s failed: %s" % (command, e))
            self.write("Error: %s" % e)
        return True

    def start(self):
        """Reads and runs commands until the input is exhausted or an exit command is given"""
        self.logger.info("Console started")
        for line in self.input:
            if not self.execute(line):
                break
        self.logger.info("Console stopped")

    def write(self, text):
        self.output.write(text + "\n")
        self.output.flush()


def parse_args(argv, description):
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", default=None, help="Path to a JSON config file, created if missing")
    parser.add_argument("--address", default=None, help="host:port to use instead of the configured address")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Write logs to this file instead of stderr")
    return parser.parse_args(argv)


def run_console(controller_class, handler_class, address_key, argv=None):
    """
    Builds a controller from the configuration, attaches it to a console
    and runs the console until exit.  The controller is stopped on exit or
    when SIGTERM is received
    """
    args = parse_args(argv, "Interactive console for a TCP %s" % controller_class.__name__)
    config = Config(args.config)
    setup_logging(args.debug or config["debug"], args.log_file)

    address = args.address if args.address is not None else config[address_key]
    try:
        controller = controller_class(address, poll_interval=config["poll_interval"])
    except TcpCommunicationException as e:
        print("Error: %s" % e, file=sys.stderr)
        return 2

    def do_shutdown(signum, frame):
        controller.stop()
        raise SystemExit(0)

    signal.signal(signal.SIGTERM, do_shutdown)

    manager = CliManager()
    manager.add_handler(handler_class(controller))
    try:
        manager.start()
    except KeyboardInterrupt:
        pass
    finally:
        controller.stop(wait=True)
    return 0


def server_main(argv=None):
    return run_console(EchoServer, ServerCommandHandler, "server_address", argv)


def client_main(argv=None):
    return run_console(EchoClient, ClientCommandHandler, "client_address", argv)
