__author__ = 'Will Hart'

from tcpecho.console import server_main


if __name__ == "__main__":
    raise SystemExit(server_main())
