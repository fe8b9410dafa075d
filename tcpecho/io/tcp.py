__author__ = 'Will Hart'

import logging
import queue
import socket
import threading
import time

from tcpecho.constants import (LinkStates, POLL_INTERVAL, LISTEN_BACKLOG,
                               DEFAULT_SERVER_ADDRESS, DEFAULT_CLIENT_ADDRESS)
from tcpecho.io.session import PeerSession, write_line
from tcpecho.io.states import LinkState
import tcpecho.io.signals as sigs
from tcpecho.utilities import Address, to_address


class TcpCommunicationException(Exception):
    pass


class TcpBase(object):
    """
    Owns an address and a background loop which can be started and stopped
    at any time.  Subclasses provide the loop itself in run_loop.

    start() and stop() never block: they change the link state and return,
    and the loop thread notices the change within one poll interval.  Every
    call to start() gets a fresh LinkState, so a loop that has not yet noticed
    an earlier stop() can never be revived by a later start().
    """

    DEFAULT_ADDRESS = None
    THREAD_NAME = "TcpEcho-loop"

    logger = logging.getLogger(__name__)

    def __init__(self, address=None, poll_interval=POLL_INTERVAL, output=None):
        self.__address = self.__validate(address if address is not None else self.DEFAULT_ADDRESS)
        self.poll_interval = poll_interval
        self.output = output
        self.link = LinkState(self.__class__.__name__)
        self.__start_lock = threading.Lock()
        self.__thread = None

    @property
    def address(self):
        return self.__address

    def set_address(self, address):
        """
        Sets the address to use.  A running loop keeps the address it was
        started with, the change takes effect on the next call to start
        """
        self.__address = self.__validate(address)

    def is_running(self):
        return self.link.is_running()

    def start(self):
        """
        Asynchronously starts the background loop.  Has no effect if the loop
        is already running or attempting to run
        """
        with self.__start_lock:
            if self.link.is_running():
                self.logger.debug("Ignoring start request, %s is already running" % self.__class__.__name__)
                return

            link = LinkState(self.__class__.__name__)
            link.try_start()
            self.link = link

            address = self.__address
            self.logger.info("Starting %s on %s" % (self.__class__.__name__, address))
            self.__thread = threading.Thread(target=self.__run, args=[address, link], name=self.THREAD_NAME)
            self.__thread.daemon = True
            self.__thread.start()

    def stop(self, wait=False):
        """
        Asynchronously stops the background loop and any live sessions.

        :param wait: if True, also block until the loop thread has exited
        """
        if self.link.force(LinkStates.Stopped) != LinkStates.Stopped:
            self.logger.info("Stopping %s" % self.__class__.__name__)
        if wait:
            self.join()

    def join(self, timeout=None):
        """
        Waits for the most recently started loop thread to exit

        :returns: True if no loop thread is running when this returns
        """
        thread = self.__thread
        if thread is None:
            return True
        if thread is not threading.current_thread():
            thread.join(timeout)
        return not thread.is_alive()

    def run_loop(self, address, link):
        raise NotImplementedError()

    def print_line(self, text):
        write_line(self.output, text)

    def sleep(self):
        time.sleep(self.poll_interval)

    def __run(self, address, link):
        try:
            self.run_loop(address, link)
        except Exception:
            # the loop is fire and forget, failures are only ever logged
            self.logger.exception("%s loop failed" % self.__class__.__name__)
            link.force(LinkStates.Stopped)
        self.logger.info("%s loop exited" % self.__class__.__name__)

    @staticmethod
    def __validate(address):
        try:
            return to_address(address)
        except (TypeError, ValueError) as e:
            raise TcpCommunicationException("Invalid address %r: %s" % (address, e))


class EchoServer(TcpBase):
    """
    Binds to an address, accepts any number of clients and prints whatever
    they send
    """

    DEFAULT_ADDRESS = DEFAULT_SERVER_ADDRESS
    THREAD_NAME = "TcpEcho-accept"

    def run_loop(self, address, link):
        while link.is_running():
            listener = self.bind(address)
            if listener is None:
                self.sleep()
                continue

            with listener:
                link.transition(LinkStates.Starting, LinkStates.Listening)
                self.logger.info("Listening on %s" % (address,))
                if not self.accept_process(listener, link):
                    return

        self.logger.debug("Accept loop stopped")

    def bind(self, address):
        """Creates a listening socket on the address, returning None if it cannot be bound"""
        family = socket.AF_INET6 if ":" in address.host else socket.AF_INET
        try:
            listener = socket.create_server(tuple(address), family=family, backlog=LISTEN_BACKLOG)
        except OSError as e:
            self.logger.debug("Unable to bind %s, retrying: %s" % (address, e))
            return None

        listener.settimeout(self.poll_interval)
        return listener

    def accept_process(self, listener, link):
        """
        Accepts peers until the server is stopped, spawning a read worker for each

        :returns: False if the accept loop died on an error, True if it was stopped
        """
        while link.is_running():
            try:
                sock, peer = listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                # the listener is unusable, so report the server as stopped rather than running with no listener
                self.logger.error("Accept failed, stopping server: %s" % e)
                sigs.accept_failed.send(self, error=e)
                link.force(LinkStates.Stopped)
                return False

            peer = Address(*peer[:2])
            self.print_line("Accepted connection from %s" % (peer,))
            sigs.peer_accepted.send(self, peer=peer)

            try:
                sock.settimeout(self.poll_interval)
            except OSError as e:
                self.logger.debug("Dropping %s, unable to set socket timeout: %s" % (peer, e))
                sock.close()
                continue

            session = PeerSession(sock, peer, link, self.output, self.poll_interval)
            try:
                session.spawn_reader()
            finally:
                # the reader works on its own duplicate of the socket
                session.close()

        return True


class EchoClient(TcpBase):
    """
    Connects to a server, prints whatever it sends and writes messages
    queued with send_message.  Reconnects automatically until stopped.
    """

    DEFAULT_ADDRESS = DEFAULT_CLIENT_ADDRESS
    THREAD_NAME = "TcpEcho-connect"

    def __init__(self, address=None, poll_interval=POLL_INTERVAL, output=None):
        super(EchoClient, self).__init__(address, poll_interval, output)
        self.__outbox = None
        self.__outbox_lock = threading.Lock()

    def is_connected(self):
        return self.link.is_connected()

    def send_message(self, message):
        """
        Queues a message for the server.  If the client is not currently
        connected, the message is dropped

        :param message: the text to send, or bytes to send unchanged
        :raises: TypeError if the message is neither str nor bytes
        """
        if not isinstance(message, (str, bytes)):
            raise TypeError("Messages must be str or bytes, not %s" % type(message).__name__)

        with self.__outbox_lock:
            if self.__outbox is not None:
                self.__outbox.put(message)
                return

        self.logger.debug("Not connected, dropping message: %s" % message)

    def run_loop(self, address, link):
        while link.is_running():
            try:
                sock = socket.create_connection(tuple(address), timeout=self.poll_interval)
            except OSError as e:
                self.logger.debug("Unable to connect to %s, retrying: %s" % (address, e))
                self.sleep()
                continue

            self.print_line("Successfully connected to %s" % (address,))

            try:
                sock.settimeout(self.poll_interval)
            except OSError as e:
                self.logger.debug("Unable to set socket timeout, reconnecting: %s" % e)
                sock.close()
                continue

            self.run_session(PeerSession(sock, address, link, self.output, self.poll_interval,
                                         client_side=True))

        self.logger.debug("Connect loop stopped")

    def run_session(self, session):
        """Runs the read and write workers for one connection and blocks until both have exited"""
        link = session.link
        outbox = queue.Queue()

        # the outbox is published before the link reports connected, so a
        # message sent as soon as is_connected() is true is never dropped
        with self.__outbox_lock:
            self.__outbox = outbox

        if not link.transition(LinkStates.Starting, LinkStates.Connected):
            # stopped while the connection was being made
            self.__release_outbox(outbox)
            session.close()
            return

        try:
            session.spawn_reader()
            session.spawn_writer(outbox)
            sigs.connected.send(self, address=session.peer)
            session.join()
        finally:
            self.__release_outbox(outbox)
            session.close()
            link.transition(LinkStates.Connected, LinkStates.Starting)

        self.logger.info("Disconnected from %s" % (session.peer,))
        sigs.disconnected.send(self, address=session.peer)

    def __release_outbox(self, outbox):
        with self.__outbox_lock:
            if self.__outbox is outbox:
                self.__outbox = None
