__author__ = 'Will Hart'

from collections import namedtuple


class Address(namedtuple('Address', ['host', 'port'])):
    """
    A TCP endpoint.  Can be passed straight to the socket module as it is a
    (host, port) tuple, and formats as "host:port"
    """

    __slots__ = ()

    def __str__(self):
        if ":" in self.host:
            return "[%s]:%s" % (self.host, self.port)
        return "%s:%s" % (self.host, self.port)


def parse_address(text):
    """
    Parses a "host:port" string into an Address.  IPv6 hosts must be
    wrapped in square brackets, e.g. "[::1]:8080"

    :param text: the address string to parse
    :raises: ValueError if the string is not a valid address
    :returns: the parsed Address
    """
    text = text.strip()
    host, sep, port = text.rpartition(":")
    if not sep or not host:
        raise ValueError("Invalid address, expected host:port - %r" % text)

    if host.startswith("["):
        if not host.endswith("]") or len(host) < 3:
            raise ValueError("Invalid IPv6 address - %r" % text)
        host = host[1:-1]
    elif ":" in host:
        raise ValueError("IPv6 addresses must be enclosed in brackets - %r" % text)

    if not port.isdigit():
        raise ValueError("Invalid port number - %r" % port)

    return Address(host, check_port(int(port)))


def check_port(port):
    """
    :raises: ValueError if the port is outside 0-65535
    :returns: the port
    """
    if not 0 <= port <= 65535:
        raise ValueError("Port number out of range - %s" % port)
    return port


def to_address(value):
    """Accepts an Address, a (host, port) tuple or a "host:port" string"""
    if isinstance(value, Address):
        check_port(value.port)
        return value
    if isinstance(value, str):
        return parse_address(value)
    host, port = value
    return Address(host, check_port(int(port)))
