import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from .engine import ChallengeEngine
from .errors import QueryError
from .protocol import decode_server_info
from .transport import TransportConfig, UdpTransport
from .types import Endpoint, ServerInfo

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60


@dataclass(frozen=True)
class PollResult:
    endpoint: Endpoint
    info: Optional[ServerInfo] = None
    error: Optional[QueryError] = None

    @property
    def ok(self):
        return self.error is None


def poll(endpoint, config, connect=UdpTransport.connect):
    """Query one endpoint once and wrap the outcome, failures included."""
    try:
        with connect(endpoint, config) as transport:
            raw = ChallengeEngine(transport).run()
        return PollResult(endpoint, info=decode_server_info(raw))
    except QueryError as e:
        return PollResult(endpoint, error=e)


def query_all(endpoints, timeout=None, connect=UdpTransport.connect):
    """Query every endpoint once in parallel; results keep the input order."""
    endpoints = list(endpoints)
    if not endpoints:
        return []
    config = TransportConfig(timeout)
    with ThreadPoolExecutor(max_workers=len(endpoints)) as pool:
        return list(pool.map(lambda endpoint: poll(endpoint, config, connect), endpoints))


class Poller:
    """Polls each endpoint from its own thread until cancelled.

    Workers share nothing but the cancellation event. A worker blocked in a
    receive is not interrupted; it notices the cancellation once its query
    returns or times out and drops that result.
    """

    def __init__(self, endpoints, timeout=None, interval=DEFAULT_INTERVAL, on_result=None,
                 connect=UdpTransport.connect):
        self.endpoints = list(endpoints)
        self.config = TransportConfig(timeout)
        self.interval = interval
        self.on_result = on_result or (lambda result: None)
        self.connect = connect
        self.cancelled = threading.Event()
        self.threads = []

    def start(self):
        if self.threads:
            raise RuntimeError('poller already started')
        for endpoint in self.endpoints:
            thread = threading.Thread(target=self._worker, args=(endpoint,),
                                      name='poll-{}'.format(endpoint), daemon=True)
            self.threads.append(thread)
            thread.start()
        logger.debug('started %d poll workers', len(self.threads))

    def cancel(self):
        self.cancelled.set()

    def join(self, timeout=None):
        """Wait for the workers; returns True when all of them have exited."""
        for thread in self.threads:
            thread.join(timeout)
        return not any(thread.is_alive() for thread in self.threads)

    def _worker(self, endpoint):
        while not self.cancelled.is_set():
            result = poll(endpoint, self.config, self.connect)
            if self.cancelled.is_set():
                logger.debug('%s: cancelled, dropping in-flight result', endpoint)
                break
            try:
                self.on_result(result)
            except Exception:
                logger.exception('%s: result handler failed', endpoint)
            self.cancelled.wait(self.interval)
        logger.debug('%s: worker stopped', endpoint)
