import os
from dataclasses import dataclass
from typing import Tuple

from .poller import DEFAULT_INTERVAL
from .types import Endpoint

# Comma separated "host:port" list, e.g. 50.108.116.1:2324,50.108.116.1:2315
ENV_SERVER_LIST = 'A2S_SERVER_LIST'
ENV_TIMEOUT = 'A2S_TIMEOUT_SECONDS'
ENV_INTERVAL = 'A2S_POLL_INTERVAL_SECONDS'

DEFAULT_TIMEOUT = 10


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Config:
    endpoints: Tuple[Endpoint, ...]
    timeout: int = DEFAULT_TIMEOUT
    interval: int = DEFAULT_INTERVAL

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        value = environ.get(ENV_SERVER_LIST)
        if value is None:
            raise ConfigError('{} is a required option'.format(ENV_SERVER_LIST))
        return cls(
            endpoints=parse_server_list(value, ENV_SERVER_LIST),
            timeout=parse_seconds(environ.get(ENV_TIMEOUT), ENV_TIMEOUT, DEFAULT_TIMEOUT),
            interval=parse_seconds(environ.get(ENV_INTERVAL), ENV_INTERVAL, DEFAULT_INTERVAL,
                                   minimum=1),
        )


def parse_server_list(value, source=ENV_SERVER_LIST):
    if not value.strip():
        raise ConfigError('{} is empty'.format(source))
    endpoints = []
    for entry in value.split(','):
        try:
            endpoints.append(Endpoint.parse(entry))
        except ValueError as e:
            raise ConfigError('invalid server endpoint {!r} while reading {}: {}'.format(
                entry, source, e)) from e
    return tuple(endpoints)


def parse_seconds(value, source, default, minimum=None):
    if value is None or value == '':
        return default
    try:
        seconds = int(value)
    except ValueError:
        raise ConfigError('{} must be a whole number of seconds, got {!r}'.format(
            source, value)) from None
    if minimum is not None and seconds < minimum:
        raise ConfigError('{} must be at least {}, got {}'.format(source, minimum, seconds))
    return seconds
