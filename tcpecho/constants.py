__author__ = 'Will Hart'

POLL_INTERVAL = 0.1  # seconds, retry backoff and the bound on reacting to stop()
RECV_BUFFER_SIZE = 4096
LISTEN_BACKLOG = 128

DEFAULT_SERVER_ADDRESS = "0.0.0.0:8080"
DEFAULT_CLIENT_ADDRESS = "127.0.0.1:8080"


class LinkStates(object):
    """
    Provides "static" state codes for a connection controller.  Usage is::

        from tcpecho.constants import LinkStates
        if link.get() == LinkStates.Connected:
            ...
    """

    Stopped = "STOPPED"
    Starting = "STARTING"
    Listening = "LISTENING"
    Connected = "CONNECTED"


# every state other than Stopped means the background loop should be active
RUNNING_STATES = [
    LinkStates.Starting,
    LinkStates.Listening,
    LinkStates.Connected
]


class Commands(object):
    """
    Command names understood by the console handlers
    """

    SetAddress = "set-address"
    IsRunning = "is-running"
    IsConnected = "is-connected"
    SendMessage = "send-message"
    Start = "start"
    Stop = "stop"


SERVER_COMMANDS = [
    Commands.SetAddress,
    Commands.IsRunning,
    Commands.Start,
    Commands.Stop
]

CLIENT_COMMANDS = SERVER_COMMANDS + [
    Commands.IsConnected,
    Commands.SendMessage
]
