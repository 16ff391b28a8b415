import socket
import time
from dataclasses import dataclass
from typing import Optional

from .errors import ConnectError, QueryTimeoutError, ReadError, WriteError
from .protocol import MAX_PACKET_SIZE

DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class TransportConfig:
    timeout_seconds: Optional[int] = None

    @property
    def timeout(self):
        # Unset, zero and negative values all fall back to the default.
        if self.timeout_seconds is None or self.timeout_seconds < 1:
            return DEFAULT_TIMEOUT
        return self.timeout_seconds


class UdpTransport:
    """One connected datagram socket to a single server, bounded by a deadline."""

    def __init__(self, endpoint, sock, config):
        self.endpoint = endpoint
        self.socket = sock
        self.config = config
        self.deadline = time.monotonic() + config.timeout

    @classmethod
    def connect(cls, endpoint, timeout=None):
        config = timeout if isinstance(timeout, TransportConfig) else TransportConfig(timeout)
        try:
            family, type_, proto, _, address = socket.getaddrinfo(
                endpoint.host, endpoint.port, 0, socket.SOCK_DGRAM)[0]
        except (OSError, ValueError, IndexError) as e:
            raise ConnectError('resolving {}: {}'.format(endpoint, e)) from e
        try:
            sock = socket.socket(family, type_, proto)
        except (OSError, ValueError) as e:
            raise ConnectError('creating socket for {}: {}'.format(endpoint, e)) from e
        try:
            sock.settimeout(config.timeout)
            sock.connect(address)
        except OSError as e:
            sock.close()
            raise ConnectError('connecting to {}: {}'.format(endpoint, e)) from e
        return cls(endpoint, sock, config)

    @property
    def timeout(self):
        return self.config.timeout

    def send(self, data):
        try:
            sent = self.socket.send(data)
        except OSError as e:
            raise WriteError('sending query: {}'.format(e)) from e
        if sent != len(data):
            raise WriteError('sending query: wrote {} of {} bytes'.format(sent, len(data)))

    def receive(self):
        remaining = self.deadline - time.monotonic()
        if remaining <= 0:
            raise QueryTimeoutError('reading response: deadline exceeded')
        self.socket.settimeout(remaining)
        try:
            # One spare byte tells an oversized datagram apart from a full one.
            data = self.socket.recv(MAX_PACKET_SIZE + 1)
        except socket.timeout as e:
            raise QueryTimeoutError('reading response: deadline exceeded') from e
        except OSError as e:
            raise ReadError('reading response: {}'.format(e)) from e
        if len(data) > MAX_PACKET_SIZE:
            raise ReadError('reading response: datagram exceeds {} bytes'.format(MAX_PACKET_SIZE))
        return data

    def close(self):
        self.socket.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
