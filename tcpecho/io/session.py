__author__ = 'Will Hart'

import logging
import queue
import socket
import sys
import threading

from tcpecho.constants import LinkStates, POLL_INTERVAL, RECV_BUFFER_SIZE
import tcpecho.io.signals as sigs


# print() from several worker threads must not interleave lines
_output_lock = threading.Lock()


def write_line(output, text):
    """Writes a line of user visible text to the given stream (stdout if None)"""
    stream = output if output is not None else sys.stdout
    with _output_lock:
        print(text, file=stream, flush=True)


class PeerSession(object):
    """
    The read / write activity for one established connection.

    The session owns its socket.  The read worker always runs on a duplicate of
    the socket so that each direction has its own handle to the same underlying
    descriptor, and the session is over as soon as either direction fails or
    the link stops.
    """

    logger = logging.getLogger(__name__)

    def __init__(self, sock, peer, link, output=None, poll_interval=POLL_INTERVAL, client_side=False):
        self.sock = sock
        self.peer = peer
        self.link = link
        self.output = output
        self.poll_interval = poll_interval
        self.client_side = client_side
        self.__threads = []

    def is_alive(self):
        """Client sessions live while connected, server sessions while the server is running"""
        if self.client_side:
            return self.link.is_connected()
        return self.link.is_running()

    def spawn_reader(self):
        """Starts the read worker on a duplicate of the socket and returns its thread"""
        read_sock = self.sock.dup()
        return self.__spawn(self.read_process, read_sock, "read")

    def spawn_writer(self, outbox):
        """Starts the write worker on the socket, draining the given queue"""
        return self.__spawn(self.write_process, self.sock, "write", outbox)

    def join(self):
        for thread in self.__threads:
            thread.join()

    def close(self):
        try:
            self.sock.close()
        except OSError as e:
            self.logger.debug("Error closing socket for %s: %s" % (self.peer, e))

    def __spawn(self, target, sock, direction, *args):
        thread = threading.Thread(
            target=target, args=[sock] + list(args), name="TcpEcho-%s-%s" % (self.peer, direction))
        thread.daemon = True
        thread.start()
        self.__threads.append(thread)
        return thread

    def read_process(self, sock):
        """
        Drains inbound bytes and prints them as text until the session ends.

        A timeout on recv is the "nothing available yet" result and is simply
        retried.  Any other socket error, or the peer closing the connection,
        ends the worker; on the client side this also drops the link out of
        the CONNECTED state which in turn stops the paired write worker.
        """
        self.logger.debug("Read worker started for %s" % (self.peer,))
        with sock:
            while self.is_alive():
                try:
                    data = sock.recv(RECV_BUFFER_SIZE)
                except socket.timeout:
                    continue
                except OSError as e:
                    self.logger.info("Read from %s failed: %s" % (self.peer, e))
                    self.__lost_connection()
                    return

                if not data:
                    self.logger.info("Connection closed by %s" % (self.peer,))
                    self.__lost_connection()
                    return

                self.handle_data(data)

        self.logger.debug("Read worker stopped for %s" % (self.peer,))

    def handle_data(self, data):
        """Decodes a chunk of received bytes and prints it.  Decode errors never end the session"""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            write_line(self.output, "Could not parse data: %s" % e)
            sigs.decode_failed.send(self, data=data, error=e)
            return

        write_line(self.output, text)
        sigs.data_received.send(self, data=text)

    def write_process(self, sock, outbox):
        """
        Writes queued messages to the socket.

        Waits up to one poll interval for each message so that a read side
        failure, which leaves the link disconnected, is noticed even when
        nothing is being sent.
        """
        self.logger.debug("Write worker started for %s" % (self.peer,))
        while self.link.is_running():
            try:
                message = outbox.get(True, self.poll_interval)
            except queue.Empty:
                message = None

            if message is not None:
                if isinstance(message, str):
                    data = message.encode("utf-8")
                else:
                    data = message

                try:
                    sock.sendall(data)
                except OSError as e:
                    self.logger.info("Write to %s failed: %s" % (self.peer, e))
                    self.__lost_connection()
                    return
                sigs.message_sent.send(self, message=message)

            if not self.link.is_connected():
                break

        self.logger.debug("Write worker stopped for %s" % (self.peer,))

    def __lost_connection(self):
        if self.client_side:
            self.link.transition(LinkStates.Connected, LinkStates.Starting)
