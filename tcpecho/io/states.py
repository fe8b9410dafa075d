__author__ = 'Will Hart'

import logging
import threading

from tcpecho.constants import LinkStates, RUNNING_STATES
import tcpecho.io.signals as sigs


class LinkState(object):
    """
    Holds the state of a connection controller and is shared by reference
    between the controller, its loop thread and the session workers.

    All reads and writes go through a single condition so that starting,
    stopping and connecting cannot interleave.  Because "connected" is one of
    the states rather than a separate flag, a link can never report being
    connected once it has been stopped.
    """

    logger = logging.getLogger(__name__)

    def __init__(self, name="link", initial_state=LinkStates.Stopped):
        self.name = name
        self.__state = initial_state
        self.__condition = threading.Condition()

    def get(self):
        with self.__condition:
            return self.__state

    def is_running(self):
        return self.get() in RUNNING_STATES

    def is_connected(self):
        return self.get() == LinkStates.Connected

    def try_start(self):
        """
        Moves from STOPPED to STARTING in one step

        :returns: True if the link was stopped and is now starting, False if it was already running
        """
        return self.transition(LinkStates.Stopped, LinkStates.Starting)

    def transition(self, expected, state):
        """
        Changes to the given state only if the link is currently in the expected state

        :param expected: the state the link must be in, or a list of acceptable states
        :param state: the state to move to
        :returns: True if the change was made
        """
        if isinstance(expected, str):
            expected = [expected]

        with self.__condition:
            if self.__state not in expected:
                return False
            old = self.__state
            self.__set(state)

        self.__notify(old, state)
        return True

    def force(self, state):
        """Unconditionally changes to the given state, returning the previous one"""
        with self.__condition:
            old = self.__state
            self.__set(state)

        if old != state:
            self.__notify(old, state)
        return old

    def wait_for(self, state, timeout=None):
        """
        Blocks until the link reaches the given state or the timeout expires

        :param state: a state, or a list of states, to wait for
        :param timeout: the maximum time to wait in seconds, None to wait forever
        :returns: True if the state was reached
        """
        if isinstance(state, str):
            state = [state]

        with self.__condition:
            return self.__condition.wait_for(lambda: self.__state in state, timeout)

    def __set(self, state):
        self.__state = state
        self.__condition.notify_all()

    def __notify(self, old, new):
        self.logger.debug("[%s] %s >> %s" % (self.name, old, new))
        sigs.link_state_changed.send(self, old=old, new=new)

    def __str__(self):
        return "<LinkState %s: %s>" % (self.name, self.get())
