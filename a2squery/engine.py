"""
Challenge round of the A2S_INFO exchange.

A server answers the bare info request with a challenge carrying a 4 byte
token; the request is sent again with the token appended and the next reply
is the authoritative info response.
"""

import enum
from contextlib import contextmanager

from .errors import QueryError
from .protocol import INFO_REQUEST, challenge_request, decode_server_info
from .transport import UdpTransport


class State(enum.Enum):
    INITIAL = 'initial'
    AWAIT_FIRST_REPLY = 'await first reply'
    AWAIT_FINAL_REPLY = 'await final reply'
    DONE = 'done'


@contextmanager
def phase(name):
    try:
        yield
    except QueryError as e:
        if e.phase is None:
            e.phase = name
        raise


class ChallengeEngine:
    """Runs a single query over ``transport``; build a new engine for the next one."""

    def __init__(self, transport):
        self.transport = transport
        self.state = State.INITIAL

    def run(self):
        if self.state is not State.INITIAL:
            raise RuntimeError('challenge engine already used')

        with phase('initial query'):
            self.state = State.AWAIT_FIRST_REPLY
            self.transport.send(INFO_REQUEST)
            request = challenge_request(self.transport.receive())

        with phase('resending query'):
            self.state = State.AWAIT_FINAL_REPLY
            self.transport.send(request)
            # The marker of the final reply is the decoder's business.
            response = self.transport.receive()

        self.state = State.DONE
        return response


def query_server_info(endpoint, timeout=None):
    with UdpTransport.connect(endpoint, timeout) as transport:
        raw = ChallengeEngine(transport).run()
    return decode_server_info(raw)
