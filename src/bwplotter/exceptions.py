class InitializationError(Exception):
    """
    Raised when a resource required before the render loop cannot be set up.
    The CLI reports it and exits with a negative status.
    """


class WindowInitializationError(InitializationError):
    pass


class FontNotFoundError(InitializationError):
    """
    Raised when none of the candidate font families is installed.

    Attributes:
        candidates (tuple[str, ...]): Families that were searched, in order.
    """

    def __init__(self, candidates: tuple[str, ...]):
        self.candidates = candidates
        super().__init__(f"Cannot find font, searched: {', '.join(candidates)}")


class TransportInitializationError(InitializationError):
    def __init__(self, url: str, message: str | None = None):
        self.url = url
        message_str = f": {message}" if message else ""
        super().__init__(f"Cannot initialize transport for {url=}{message_str}")


class OutputFileError(InitializationError):
    def __init__(self, output_file: str, err: Exception | None = None):
        self.output_file = output_file
        self.err = err
        super().__init__(f"Cannot open '{output_file}' for writing. {repr(err)}")


class UnexpectedStatusException(Exception):
    """
    Raised when an HTTP response returns an unexpected status code.

    Attributes:
        status (int): The HTTP status code received.
        expected (tuple[int, ...] | None): Expected status codes.
        url (str | None): Request URL.
        message (str): Human-readable error message.
    """

    def __init__(
        self,
        status: int,
        expected: tuple[int, ...] | None = None,
        url: str | None = None,
    ):
        self.status = status
        self.expected = expected
        self.url = url

        expected_str = f", expected={expected}" if expected else ""
        url_str = f", url={url}" if url else ""
        self.message = f"Unexpected HTTP status: {status}{expected_str}{url_str}"

        super().__init__(self.message)
