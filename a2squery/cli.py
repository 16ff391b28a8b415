#!/usr/bin/env python3
import logging
import os
import signal
import sys
from dataclasses import replace
from optparse import OptionParser

from .config import ENV_SERVER_LIST, Config, ConfigError
from .poller import Poller, query_all

EXIT_QUERY_ERROR = 2
EXIT_CONFIG_ERROR = 5

HANDLER_NAME = 'a2squery'

logger = logging.getLogger(__name__)


def setup_logging(verbose=False, quiet=False):
    root = logging.getLogger()
    if not any(handler.get_name() == HANDLER_NAME for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        root.addHandler(handler)
    if verbose:
        root.setLevel(logging.DEBUG)
    elif quiet:
        root.setLevel(logging.WARNING)
    else:
        root.setLevel(logging.INFO)


def report(result):
    if not result.ok:
        logger.error('%s: %s', result.endpoint, result.error)
        return
    info = result.info
    logger.info('%s: name=%r map=%r players=%d/%d bots=%d type=%s os=%s password=%s vac=%s version=%s',
                result.endpoint, info.server_name, info.map_name, info.players, info.max_players,
                info.bots, info.server_type_name or info.server_type, info.os_type_name or info.os_type,
                info.password_protected, info.vac_secured, info.version)


def build_parser():
    parser = OptionParser(usage='%prog [options]')
    parser.add_option('-s', '--servers', action='store', dest='servers', default=None,
                      help='comma separated host:port list [default: $%s]' % ENV_SERVER_LIST)
    parser.add_option('-t', '--timeout', action='store', dest='timeout', type='int', default=None,
                      help='query timeout in seconds, below 1 means 30')
    parser.add_option('-i', '--interval', action='store', dest='interval', type='int', default=None,
                      help='seconds between polls of one server')
    parser.add_option('-1', '--once', action='store_true', dest='once', default=False,
                      help='query every server once and exit [default: %default]')
    parser.add_option('-q', '--quiet', action='store_true', dest='quiet', default=False,
                      help='only log failures [default: %default]')
    parser.add_option('-v', '--verbose', action='store_true', dest='verbose', default=False,
                      help='log debug messages [default: %default]')
    return parser


def load_config(options, environ):
    environ = dict(environ)
    if options.servers:
        environ[ENV_SERVER_LIST] = options.servers
    config = Config.from_env(environ)
    if options.timeout is not None:
        config = replace(config, timeout=options.timeout)
    if options.interval is not None:
        if options.interval < 1:
            raise ConfigError('interval must be at least 1, got {}'.format(options.interval))
        config = replace(config, interval=options.interval)
    return config


def run_once(config):
    results = query_all(config.endpoints, config.timeout)
    for result in results:
        report(result)
    return 0 if all(result.ok for result in results) else EXIT_QUERY_ERROR


def run_poller(config):
    poller = Poller(config.endpoints, config.timeout, config.interval, on_result=report)

    def shutdown(signum, frame):
        logger.info('signal %d received, shutting down', signum)
        poller.cancel()

    previous = {signum: signal.signal(signum, shutdown) for signum in (signal.SIGINT, signal.SIGTERM)}
    try:
        poller.start()
        logger.info('polling %d servers every %ds', len(config.endpoints), config.interval)
        poller.cancelled.wait()
        poller.join()
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
    logger.info('all workers stopped')
    return 0


def main(argv=None, environ=None):
    options, _ = build_parser().parse_args(argv)
    setup_logging(options.verbose, options.quiet)

    try:
        config = load_config(options, os.environ if environ is None else environ)
    except ConfigError as e:
        logger.error('configuration: %s', e)
        return EXIT_CONFIG_ERROR

    if options.once:
        return run_once(config)
    return run_poller(config)


if __name__ == '__main__':
    sys.exit(main())
