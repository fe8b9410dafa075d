__author__ = 'Will Hart'

import json
import logging
import os

from tcpecho.constants import DEFAULT_SERVER_ADDRESS, DEFAULT_CLIENT_ADDRESS, POLL_INTERVAL


class Config(object):
    """
    Holds configuration for the echo applications.  Settings start from the
    defaults below and are overridden by the JSON file at `path`, if given
    """

    logger = logging.getLogger(__name__)

    def __init__(self, path=None):
        """
        Sets up default settings, then loads the config file if one is used
        """
        self.path = path
        self.settings = {
            "server_address": DEFAULT_SERVER_ADDRESS,
            "client_address": DEFAULT_CLIENT_ADDRESS,
            "poll_interval": POLL_INTERVAL,
            "debug": False
        }

        if self.path is not None:
            self.logger.info("Loading configuration from %s" % self.path)
            self.load_from_file()

    def write_to_file(self):
        with open(self.path, 'w') as f:
            json.dump(self.settings, f, indent=4, sort_keys=True)

        self.logger.debug("Writing configuration to file")

    def load_from_file(self):
        if not os.path.isfile(self.path):
            self.write_to_file()
            return

        with open(self.path, 'r') as f:
            json_config = json.load(f)

        for key, val in json_config.items():
            if key in self.settings:
                self.settings[key] = val
            else:
                self.logger.warning("Ignoring unknown configuration setting - %s" % key)

    def get(self, key):
        """
        Gets an item from settings

        :raises: KeyError if the item doesn't exist
        :returns: A value corresponding to the given key
        """
        if key in self.settings:
            return self.settings[key]
        raise KeyError("Unknown configuration setting - " + key)

    def set(self, key, value):
        """
        Sets the given configuration key to value, saving to file if a path is set

        :param key: the key to set
        :param value: the value to set the key to
        :returns: the value that was set
        """
        if key not in self.settings:
            raise KeyError("Unknown configuration setting - " + key)

        self.settings[key] = value
        if self.path is not None:
            self.write_to_file()
        return value

    def __getitem__(self, item):
        return self.get(item)

    def __setitem__(self, key, value):
        self.set(key, value)
