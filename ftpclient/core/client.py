import functools
import logging
import threading
from typing import BinaryIO, Optional, Union

from ftpclient.core.connection import ControlConnection
from ftpclient.core.data_connection import DataConnection
from ftpclient.core.errors import (
    ConcurrentUseError,
    ConnectionClosedError,
    FTPError,
    StatusError,
    TransportError,
)
from ftpclient.core.parser import (
    STATUS_COMMAND_OK,
    STATUS_ENTERING_PASSIVE_MODE,
    STATUS_NEED_PASSWORD,
    STATUS_SERVICE_READY,
    STATUS_USER_LOGGED_IN,
    Response,
    join_address,
    parse_pasv_response,
    split_address,
)

logger = logging.getLogger(__name__)


def _verb(text: str) -> str:
    return text.split(' ', 1)[0].upper()


def _mask(text: str) -> str:
    if _verb(text) == 'PASS':
        return 'PASS ****'
    return text


def _exclusive(method):
    """Rejects calls from a second thread while the client is busy."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if not self._lock.acquire(blocking=False):
            raise ConcurrentUseError(
                f"{method.__name__} called while the client is in use by another thread")
        try:
            return method(self, *args, **kwargs)
        finally:
            self._lock.release()
    return wrapper


class Client:
    """
    One session with an FTP server.

    The client owns at most one control connection and opens a fresh
    passive-mode data connection for every ``data_cmd`` call. It is not
    thread safe: the control connection carries one command/reply cycle at a
    time, and entering the client from a second thread while an operation is
    in flight raises ``ConcurrentUseError``.

    Use it as a context manager so ``close`` runs on every exit path::

        with Client("ftp.example.com") as client:
            client.login("anonymous", "anonymous@example.com")
            listing = client.data_cmd("NLST")
    """

    def __init__(self, host: str, port: int = 21, timeout: Optional[float] = None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.conn: Optional[ControlConnection] = None
        self.logger = logger
        self._lock = threading.RLock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def set_logger(self, logger: logging.Logger):
        """Replaces the logger that traces commands and replies."""
        self.logger = logger

    @property
    def closed(self) -> bool:
        return self.conn is None

    @_exclusive
    def close(self):
        """
        Sends QUIT and closes the control connection.

        Both steps are best effort: failures are logged, never raised.
        Calling ``close`` without an open connection does nothing.
        """
        if self.conn is None:
            return
        try:
            self.cmd("QUIT")
        except FTPError as e:
            self.logger.warning(f"failed to send QUIT command: {e}")
        conn, self.conn = self.conn, None
        try:
            conn.close()
        except OSError as e:
            self.logger.warning(f"failed to close control connection: {e}")

    @_exclusive
    def open(self):
        """Dials the control connection and waits for the 220 greeting."""
        if self.conn is not None:
            previous, self.conn = self.conn, None
            try:
                previous.close()
            except OSError as e:
                raise TransportError(f"failed to close previous connection: {e}") from e
        self.logger.debug(f"> {self.host}:{self.port}")
        conn = ControlConnection(self.host, self.port, self.timeout)
        try:
            conn.connect()
            response = conn.read_response()
        except FTPError as e:
            self.logger.debug(str(e))
            self._discard(conn)
            raise
        self.logger.debug(f"< {response}")
        if response.code != STATUS_SERVICE_READY:
            self._discard(conn)
            raise StatusError(None, response.code, response.message)
        self.conn = conn

    @_exclusive
    def login(self, user: str, password: str):
        """
        Opens the control connection, authenticates and switches to binary
        mode. Stops at the first step that fails.
        """
        self.open()
        self._expect(f"USER {user}", STATUS_NEED_PASSWORD)
        self._expect(f"PASS {password}", STATUS_USER_LOGGED_IN)
        self._expect("TYPE I", STATUS_COMMAND_OK)

    @_exclusive
    def cmd(self, text: str) -> Response:
        """Sends one command line and reads exactly one reply."""
        if self.conn is None:
            raise ConnectionClosedError(f"failed to send {_verb(text)} command: not connected")
        self.logger.debug(f"> {_mask(text)}")
        self.conn.send_command(text)
        try:
            response = self.conn.read_response()
        except TransportError as e:
            self.logger.debug(str(e))
            raise type(e)(f"no reply to {_verb(text)} command: {e}") from e
        self.logger.debug(f"< {response}")
        return response

    @_exclusive
    def passive_mode(self) -> str:
        """Sends PASV and returns the announced data address as ``host:port``."""
        response = self._expect("PASV", STATUS_ENTERING_PASSIVE_MODE)
        host, port = parse_pasv_response(response.message)
        return join_address(host, port)

    @_exclusive
    def data_cmd(self, text: str, payload: Union[bytes, BinaryIO, None] = None) -> bytes:
        """
        Runs a command that transfers a payload over a data connection.

        Without ``payload`` the data connection is read until the server
        closes it and the bytes are returned. With ``payload`` (bytes or a
        binary file object) the bytes are written instead and ``b""`` is
        returned.
        """
        address = self.passive_mode()
        self.logger.debug(f"> {address}")
        host, port = split_address(address)
        data_conn = DataConnection(host, port, self.timeout)
        data_conn.connect()
        pending = False
        try:
            response = self.cmd(text)
            if not 100 <= response.code < 300:
                raise StatusError(_verb(text), response.code, response.message)
            # A 1xx reply is followed by the transfer status
            pending = response.is_preliminary
            if payload is None:
                return data_conn.receive_all()
            data_conn.send_all(payload)
            return b''
        finally:
            try:
                data_conn.close()
            except OSError as e:
                self.logger.warning(f"failed to close data connection: {e}")
            if pending:
                self._drain()

    def _expect(self, text: str, code: int) -> Response:
        response = self.cmd(text)
        if response.code != code:
            raise StatusError(_verb(text), response.code, response.message)
        return response

    def _drain(self):
        try:
            response = self.conn.read_response()
        except FTPError as e:
            self.logger.warning(f"transfer incomplete: {e}")
            return
        self.logger.debug(f"< {response}")
        if response.code >= 300:
            self.logger.warning(f"transfer failed: FTP {response}")

    def _discard(self, conn: ControlConnection):
        try:
            conn.close()
        except OSError as e:
            self.logger.warning(f"failed to close control connection: {e}")
