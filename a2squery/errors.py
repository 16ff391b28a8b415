class QueryError(Exception):
    """Base class for every failure of a single server query.

    ``phase`` names the round of the exchange that failed ("initial query",
    "resending query") and is filled in by the challenge engine.
    """

    def __init__(self, message, phase=None):
        super().__init__(message)
        self.message = message
        self.phase = phase

    def __str__(self):
        if self.phase:
            return '{}: {}'.format(self.phase, self.message)
        return self.message


class ConnectError(QueryError):
    pass


class WriteError(QueryError):
    pass


class ReadError(QueryError):
    pass


class QueryTimeoutError(QueryError, TimeoutError):
    pass


class UnexpectedResponseError(QueryError):
    pass


class DecodeError(QueryError):

    def __init__(self, reason, field=None):
        message = reason if field is None else '{} ({})'.format(reason, field)
        super().__init__(message)
        self.reason = reason
        self.field = field
