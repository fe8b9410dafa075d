__author__ = 'Will Hart'

from blinker import signal

# fired whenever a controller's link state changes, sent with the LinkState
# and the keyword arguments old and new
link_state_changed = signal('link_state_changed')

# fired when the server accepts a peer, sent with the server and the peer address
peer_accepted = signal('peer_accepted')

# fired when the accept loop dies on an error that is not a timeout
accept_failed = signal('accept_failed')

# fired when the client establishes a session with a server
connected = signal('connected')

# fired when a client session has ended and both workers have exited
disconnected = signal('disconnected')

# fired by a read worker for every decoded chunk of text, keyword argument data
data_received = signal('data_received')

# fired by a read worker when a chunk could not be decoded as UTF-8
decode_failed = signal('decode_failed')

# fired by the client write worker once a message has been written to the socket
message_sent = signal('message_sent')
