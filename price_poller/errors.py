class PollerError(Exception):
    """
    Base for every error that terminates the poller
    """


class ConfigError(PollerError):
    pass


class FetchError(PollerError):
    pass


class ParseError(PollerError):
    pass


class SubmitError(PollerError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SchedulerError(PollerError):
    pass
