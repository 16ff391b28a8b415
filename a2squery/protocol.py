"""
Wire format of the A2S_INFO query used by Source engine servers.
Only the single-packet info exchange is handled: probe, challenge, info reply.
Query docs: https://developer.valvesoftware.com/wiki/Server_queries
"""

import io
import struct

from .errors import DecodeError, UnexpectedResponseError
from .types import ServerInfo

MAX_PACKET_SIZE = 2048
SINGLE = -1
HEADER_SIZE = 5

S2C_CHALLENGE = 0x41
S2A_INFO = 0x49


def build_packet(packet_type):
    return struct.pack('<lB', SINGLE, packet_type)


INFO_REQUEST = build_packet(ord('T')) + b'Source Engine Query\0'


def build_info_request(challenge):
    return INFO_REQUEST + struct.pack('<I', challenge)


def marker(packet):
    """Return the reply type byte at offset 4, or None for a short packet."""
    if len(packet) < HEADER_SIZE:
        return None
    return packet[4]


def challenge_request(reply):
    """Build the info request that echoes the token carried by a challenge reply."""
    kind = marker(reply)
    if kind != S2C_CHALLENGE:
        raise UnexpectedResponseError('expected challenge reply, got {}'.format(
            'short packet' if kind is None else hex(kind)))
    if len(reply) < HEADER_SIZE + 4:
        raise UnexpectedResponseError('challenge reply has no token')
    challenge, = struct.unpack_from('<I', reply, HEADER_SIZE)
    return build_info_request(challenge)


class Buffer(io.BytesIO):

    def _read_exact(self, size, field):
        data = self.read(size)
        if len(data) != size:
            raise DecodeError('truncated field', field)
        return data

    def read_string(self, field=None):
        val = self.getvalue()
        start = self.tell()
        end = val.find(b'\0', start)
        if end < 0:
            raise DecodeError('truncated string', field)
        self.seek(end + 1)
        return val[start:end].decode('utf-8', errors='replace')

    def read_byte(self, field=None):
        return struct.unpack('<B', self._read_exact(1, field))[0]

    def read_short(self, field=None):
        return struct.unpack('<H', self._read_exact(2, field))[0]

    def read_char(self, field=None):
        return chr(self.read_byte(field))

    def read_bool(self, field=None):
        return self.read_byte(field) != 0


def decode_server_info(raw):
    if marker(raw) != S2A_INFO:
        raise DecodeError('too short or wrong marker')
    response = Buffer(raw)
    response.seek(HEADER_SIZE)
    # Positional layout: every field is read even if the caller ignores it.
    return ServerInfo(
        protocol_version=response.read_byte('protocol_version'),
        server_name=response.read_string('server_name'),
        map_name=response.read_string('map_name'),
        game_directory=response.read_string('game_directory'),
        game_description=response.read_string('game_description'),
        app_id=response.read_short('app_id'),
        players=response.read_byte('players'),
        max_players=response.read_byte('max_players'),
        bots=response.read_byte('bots'),
        server_type=response.read_char('server_type'),
        os_type=response.read_char('os_type'),
        password_protected=response.read_bool('password_protected'),
        vac_secured=response.read_bool('vac_secured'),
        version=response.read_string('version'),
    )
