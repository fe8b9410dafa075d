__author__ = 'Will Hart'

import errno
import socket
import time

from tcpecho.utilities import Address

LOCALHOST = "127.0.0.1"


def free_address():
    """Finds a local port that is currently free"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((LOCALHOST, 0))
        return Address(LOCALHOST, s.getsockname()[1])


def make_listener(address):
    """Binds a plain listening socket the way an external program would"""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    listener.bind(tuple(address))
    listener.listen(16)
    listener.settimeout(2.0)
    return listener


def port_available(address):
    """
    Returns True if the address can be bound and False if it is in use.
    Any error other than "address in use" is raised
    """
    try:
        make_listener(address).close()
    except OSError as e:
        if e.errno != errno.EADDRINUSE:
            raise
        return False
    return True


def wait_until(predicate, timeout=2.0, interval=0.01):
    """Polls predicate until it is true or the timeout expires, returning its last value"""
    deadline = time.monotonic() + timeout
    while True:
        result = predicate()
        if result or time.monotonic() >= deadline:
            return result
        time.sleep(interval)


def recv_all(sock, timeout=0.5):
    """Reads from the socket until nothing more arrives within the timeout"""
    sock.settimeout(timeout)
    chunks = []
    while True:
        try:
            data = sock.recv(4096)
        except socket.timeout:
            break
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)
