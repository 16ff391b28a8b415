import socket
import struct
import threading

import pytest

from a2squery.protocol import INFO_REQUEST
from a2squery.types import Endpoint, ServerInfo

TOKEN = 0x1A2B3C4D

HEADER = b'\xff\xff\xff\xff'

# protocol 17, "ABC", "MAP", "DIR", "", app 608, 5/16 players, 0 bots, dedicated, os 0x00,
# no password, VAC, "v1"
INFO_REPLY = (HEADER + b'\x49' + b'\x11' + b'ABC\0' + b'MAP\0' + b'DIR\0' + b'\0' + b'\x60\x02'
              + b'\x05' + b'\x10' + b'\x00' + b'd' + b'\x00' + b'\x00' + b'\x01' + b'v1\0')

EXPECTED_INFO = ServerInfo(
    protocol_version=17,
    server_name='ABC',
    map_name='MAP',
    game_directory='DIR',
    game_description='',
    app_id=608,
    players=5,
    max_players=16,
    bots=0,
    server_type='d',
    os_type='\x00',
    password_protected=False,
    vac_secured=True,
    version='v1',
)


def challenge_reply(token=TOKEN):
    return HEADER + b'\x41' + struct.pack('<I', token)


def a2s_handler(token=TOKEN, info=INFO_REPLY):
    """Answer like a challenging server: probe -> challenge, probe + token -> info."""
    def handle(data):
        if data == INFO_REQUEST:
            return [challenge_reply(token)]
        if data == INFO_REQUEST + struct.pack('<I', token):
            return [info]
        return []
    return handle


class FakeServer:

    def __init__(self, handler):
        self.handler = handler
        self.requests = []
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.socket.bind(('127.0.0.1', 0))
        self.socket.settimeout(0.05)
        self.stopped = threading.Event()
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    @property
    def endpoint(self):
        return Endpoint('127.0.0.1', self.socket.getsockname()[1])

    def _run(self):
        while not self.stopped.is_set():
            try:
                data, addr = self.socket.recvfrom(4096)
            except socket.timeout:
                continue
            self.requests.append(data)
            for reply in self.handler(data):
                self.socket.sendto(reply, addr)

    def close(self):
        self.stopped.set()
        self.thread.join()
        self.socket.close()


@pytest.fixture
def fake_server():
    servers = []

    def start(handler=None):
        server = FakeServer(handler or a2s_handler())
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


@pytest.fixture
def closed_endpoint():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return Endpoint('127.0.0.1', port)
