import socket
import logging
from typing import Optional

from ftpclient.core.errors import ConnectionClosedError, TransportError
from ftpclient.core.parser import Response, parse_reply_line

logger = logging.getLogger(__name__)


class ControlConnection:
    """
    Line-oriented transport for the FTP control connection.

    Commands go out as CRLF-terminated lines; replies are read back one at a
    time, following the ``NNN-`` continuation convention for multi-line
    replies.
    """

    def __init__(self, host: str, port: int, timeout: Optional[float] = None, encoding: str = 'utf-8'):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.encoding = encoding
        self.socket: Optional[socket.socket] = None
        self._reader = None

    def connect(self):
        if self.socket is not None:
            raise RuntimeError("Connection already established.")
        try:
            logger.info(f"Connecting to {self.host}:{self.port}")
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError as e:
            logger.error(f"Failed to connect to {self.host}:{self.port} - {e}")
            self.socket = None
            raise TransportError(f"failed to dial {self.host}:{self.port}: {e}") from e
        self._reader = self.socket.makefile('rb')
        logger.info(f"Connected to {self.host}:{self.port}")

    def close(self):
        """Closes the socket. Errors propagate to the caller."""
        if self.socket is None:
            return
        sock, reader = self.socket, self._reader
        self.socket = None
        self._reader = None
        try:
            reader.close()
        finally:
            sock.close()
        logger.info(f"Disconnected from {self.host}:{self.port}")

    @property
    def closed(self) -> bool:
        return self.socket is None

    def send_command(self, command: str):
        if self.socket is None:
            raise ConnectionClosedError("no control connection")
        if '\r' in command or '\n' in command:
            raise ValueError("command must be a single line")
        try:
            self.socket.sendall((command + '\r\n').encode(self.encoding))
        except OSError as e:
            raise TransportError(f"failed to send {command.split(' ', 1)[0]} command: {e}") from e

    def read_line(self) -> str:
        if self._reader is None:
            raise ConnectionClosedError("no control connection")
        try:
            line = self._reader.readline()
        except OSError as e:
            raise TransportError(f"failed to read response: {e}") from e
        if not line:
            raise ConnectionClosedError("connection closed by server")
        return line.decode(self.encoding, errors='replace').rstrip('\r\n')

    def read_response(self) -> Response:
        """
        Reads one complete reply.

        Continuation lines of a multi-line reply are joined with ``\\n``.
        Lines carrying the reply code with a dash contribute their text only;
        any other line is kept verbatim. The reply ends at the first line
        starting with the same code followed by a space.
        """
        code, continued, message = parse_reply_line(self.read_line())
        lines = [message]
        prefix = str(code)
        while continued:
            line = self.read_line()
            if line.startswith(prefix) and line[3:4] in (' ', '-'):
                continued = line[3] == '-'
                lines.append(line[4:])
            elif line == prefix:
                continued = False
                lines.append('')
            else:
                lines.append(line)
        return Response(code, '\n'.join(lines))
