from dataclasses import dataclass

SERVER_TYPES = {'d': 'dedicated', 'l': 'listen', 'p': 'proxy'}
OS_TYPES = {'w': 'Windows', 'l': 'Linux', 'm': 'Mac', 'o': 'Mac'}


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    def __post_init__(self):
        if not self.host:
            raise ValueError('host is empty')
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError('port {!r} is not a number'.format(self.port))
        if not 1 <= self.port <= 65535:
            raise ValueError('port {} is out of range'.format(self.port))

    def __str__(self):
        if ':' in self.host:
            return '[{}]:{}'.format(self.host, self.port)
        return '{}:{}'.format(self.host, self.port)

    @property
    def address(self):
        return self.host, self.port

    @classmethod
    def parse(cls, text):
        """Build an endpoint from ``host:port`` (``[v6]:port`` for IPv6 literals)."""
        text = text.strip()
        if text.startswith('['):
            host, sep, port = text[1:].partition(']:')
        else:
            host, sep, port = text.rpartition(':')
            if ':' in host:
                raise ValueError('{!r}: IPv6 host must be bracketed'.format(text))
        if not sep:
            raise ValueError('{!r}: missing port'.format(text))
        if not port:
            raise ValueError('{!r}: port is empty'.format(text))
        if not port.isdigit():
            raise ValueError('{!r}: port is not a number'.format(text))
        return cls(host, int(port))


@dataclass(frozen=True)
class ServerInfo:
    """Decoded A2S_INFO reply. Fields are kept in wire order."""

    protocol_version: int
    server_name: str
    map_name: str
    game_directory: str
    game_description: str
    app_id: int
    players: int
    max_players: int
    bots: int
    server_type: str
    os_type: str
    password_protected: bool
    vac_secured: bool
    version: str

    @property
    def server_type_name(self):
        return SERVER_TYPES.get(self.server_type)

    @property
    def os_type_name(self):
        return OS_TYPES.get(self.os_type)
