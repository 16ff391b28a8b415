import socket
import time

import pytest

from a2squery.errors import ConnectError, QueryTimeoutError, ReadError, WriteError
from a2squery.protocol import MAX_PACKET_SIZE
from a2squery.transport import DEFAULT_TIMEOUT, TransportConfig, UdpTransport
from a2squery.types import Endpoint


def echo(data):
    return [data]


@pytest.mark.parametrize('timeout', [None, 0, -1, -30, 0.5])
def test_timeout_below_one_means_default(timeout):
    assert TransportConfig(timeout).timeout == DEFAULT_TIMEOUT == 30


def test_timeout_is_kept_when_valid():
    assert TransportConfig(1).timeout == 1
    assert TransportConfig(10).timeout == 10


@pytest.mark.parametrize('timeout', [0, -5, None])
def test_connect_coerces_timeout(fake_server, timeout):
    server = fake_server(echo)

    with UdpTransport.connect(server.endpoint, timeout) as transport:
        assert transport.timeout == 30
        assert transport.socket.gettimeout() == 30
        assert transport.deadline - time.monotonic() > 29


def test_connect_accepts_config(fake_server):
    server = fake_server(echo)

    with UdpTransport.connect(server.endpoint, TransportConfig(7)) as transport:
        assert transport.timeout == 7


def test_send_and_receive_one_datagram(fake_server):
    server = fake_server(echo)

    with UdpTransport.connect(server.endpoint, 5) as transport:
        transport.send(b'\xff\xff\xff\xffhello')
        assert transport.receive() == b'\xff\xff\xff\xffhello'

    assert server.requests == [b'\xff\xff\xff\xffhello']


def test_receive_times_out(fake_server):
    server = fake_server(lambda data: [])

    with UdpTransport.connect(server.endpoint, 1) as transport:
        transport.send(b'ping')
        started = time.monotonic()
        with pytest.raises(QueryTimeoutError) as excinfo:
            transport.receive()

    assert 0.5 < time.monotonic() - started < 5
    assert isinstance(excinfo.value, TimeoutError)


def test_receive_after_deadline_fails_immediately(fake_server):
    server = fake_server(echo)

    with UdpTransport.connect(server.endpoint, 5) as transport:
        transport.deadline = time.monotonic() - 1
        with pytest.raises(QueryTimeoutError):
            transport.receive()


def test_oversized_datagram_is_a_read_error(fake_server):
    server = fake_server(lambda data: [b'\xff' * (MAX_PACKET_SIZE + 100)])

    with UdpTransport.connect(server.endpoint, 5) as transport:
        transport.send(b'ping')
        with pytest.raises(ReadError):
            transport.receive()


def test_full_size_datagram_is_accepted(fake_server):
    server = fake_server(lambda data: [b'\xff' * MAX_PACKET_SIZE])

    with UdpTransport.connect(server.endpoint, 5) as transport:
        transport.send(b'ping')
        assert len(transport.receive()) == MAX_PACKET_SIZE


def test_refused_port_is_a_read_error(closed_endpoint):
    with UdpTransport.connect(closed_endpoint, 5) as transport:
        transport.send(b'ping')
        with pytest.raises(ReadError):
            transport.receive()


def test_unresolvable_host_is_a_connect_error(monkeypatch):
    def fail(*args, **kwargs):
        raise socket.gaierror(socket.EAI_NONAME, 'Name or service not known')

    monkeypatch.setattr(socket, 'getaddrinfo', fail)

    with pytest.raises(ConnectError) as excinfo:
        UdpTransport.connect(Endpoint('server.invalid', 27015), 5)
    assert 'server.invalid:27015' in str(excinfo.value)


class ShortSocket:

    def send(self, data):
        return len(data) - 1

    def close(self):
        pass


class BrokenSocket(ShortSocket):

    def send(self, data):
        raise OSError('network is unreachable')


@pytest.mark.parametrize('sock', [ShortSocket(), BrokenSocket()])
def test_failed_send_is_a_write_error(sock):
    transport = UdpTransport(Endpoint('127.0.0.1', 27015), sock, TransportConfig(5))

    with pytest.raises(WriteError):
        transport.send(b'ping')


def test_unencodable_host_is_a_connect_error():
    endpoint = Endpoint('a' * 64 + '.example.com', 27015)

    with pytest.raises(ConnectError) as excinfo:
        UdpTransport.connect(endpoint, 5)
    assert str(endpoint) in str(excinfo.value)
