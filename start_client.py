__author__ = 'Will Hart'

from tcpecho.console import client_main


if __name__ == "__main__":
    raise SystemExit(client_main())
