"""
Exception classes raised by the FTP client.

Every failure of a client operation is an ``FTPError``. Cleanup failures
(QUIT on close, the post-transfer status drain) are logged and never
raised.
"""

from typing import Optional

__all__ = [
    "FTPError",
    "TransportError",
    "ConnectionClosedError",
    "StatusError",
    "MalformedResponseError",
    "ConcurrentUseError",
]


class FTPError(Exception):
    """General client error."""

    def __init__(self, *args):
        super().__init__(*args)
        # `args` may be empty
        self.strerror = self.args[0] if self.args else ""

    def __str__(self):
        return str(self.strerror)


class TransportError(FTPError):
    """Dialing or socket I/O failed."""


class ConnectionClosedError(TransportError):
    """The peer closed the connection, or no connection is open."""


class StatusError(FTPError):
    """The server answered with a code other than the one required."""

    def __init__(self, command: Optional[str], code: int, message: str):
        if command is None:
            # Rejected greeting, no command was sent
            text = f"server is not ready: FTP {code} {message}"
        else:
            text = f"failed to execute {command} command: FTP {code} {message}"
        super().__init__(text)
        self.command = command
        self.code = code
        self.message = message


class MalformedResponseError(FTPError):
    """A reply could not be parsed into the expected shape."""

    def __init__(self, description: str, raw: str):
        super().__init__(f"{description}: {raw}")
        self.raw = raw


class ConcurrentUseError(FTPError):
    """A client was entered from a second thread while busy."""
