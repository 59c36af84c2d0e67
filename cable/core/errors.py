class FTPError(Exception):
    """Base class for every error raised by the control-channel client."""

    def __init__(self, message: str = "FTP error"):
        self.message = message
        super().__init__(self.message)


class FTPConnectionError(FTPError, ConnectionError):
    """Stream-level I/O failure on the control connection.

    Covers reset/broken sockets, EOF from the server and deadline expiry.
    Never retried internally.
    """


class DialError(FTPConnectionError):
    """The TCP dial to the server failed."""


class NotConnected(FTPConnectionError):
    """A command was issued while no connection is open."""

    def __init__(self, message: str = "No connection open."):
        super().__init__(message)


class MalformedReply(FTPError):
    """A reply line whose leading status code is not three decimal digits."""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Malformed reply: {line!r}")


class MalformedPasvReply(FTPError):
    """A PASV reply without a usable (h1,h2,h3,h4,p1,p2) tuple."""

    def __init__(self, message: str, reason: str = "missing address tuple"):
        self.reply_message = message
        self.reason = reason
        super().__init__(f"Malformed PASV reply ({reason}): {message!r}")


class InvalidState(FTPError):
    """An operation was called out of order for the session state."""


class InvalidCommand(FTPError):
    """A command line that cannot be framed, e.g. an argument with CR or LF."""
