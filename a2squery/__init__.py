"""
Utility for querying basic status (name, map, players, version) from Source engine servers
with the A2S_INFO query and its challenge round.
Query docs: https://developer.valvesoftware.com/wiki/Server_queries
"""

from .engine import ChallengeEngine, query_server_info
from .errors import (ConnectError, DecodeError, QueryError, QueryTimeoutError, ReadError,
                     UnexpectedResponseError, WriteError)
from .poller import Poller, PollResult, query_all
from .protocol import INFO_REQUEST, challenge_request, decode_server_info
from .transport import TransportConfig, UdpTransport
from .types import Endpoint, ServerInfo

__version__ = '0.1.0'
