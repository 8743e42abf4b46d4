import logging
from typing import NamedTuple, Tuple

from ftpclient.core.errors import MalformedResponseError

logger = logging.getLogger(__name__)

# Status codes checked by the client
STATUS_COMMAND_OK = 200
STATUS_SERVICE_READY = 220
STATUS_ENTERING_PASSIVE_MODE = 227
STATUS_USER_LOGGED_IN = 230
STATUS_NEED_PASSWORD = 331

RESPONSE_TYPES = {
    '1': 'preliminary',
    '2': 'success',
    '3': 'missing_info',
    '4': 'error',
    '5': 'error'
}


class Response(NamedTuple):
    """One reply from the control connection."""
    code: int
    message: str

    @property
    def type(self) -> str:
        return RESPONSE_TYPES.get(str(self.code)[0], 'unknown')

    @property
    def is_preliminary(self) -> bool:
        return 100 <= self.code < 200

    @property
    def is_error(self) -> bool:
        return self.type in ('error', 'unknown')

    def __str__(self):
        return f"{self.code} {self.message}"


def parse_reply_line(line: str) -> Tuple[int, bool, str]:
    """
    Splits a reply line into ``(code, continued, message)``.

    A reply line is ``<3-digit code><sep><message>`` where ``sep`` is a space
    for the last line of a reply and a dash when more lines follow.
    """
    line = line.rstrip('\r\n')
    if len(line) < 4 or line[3] not in (' ', '-'):
        # A bare code with nothing after it is still a complete reply
        if len(line) == 3 and line.isdigit():
            return _parse_code(line, line), False, ''
        raise MalformedResponseError("short response", line)
    code = _parse_code(line[:3], line)
    return code, line[3] == '-', line[4:]


def _parse_code(text: str, line: str) -> int:
    if not text.isdigit() or text[0] == '0':
        raise MalformedResponseError("invalid response code", line)
    return int(text)


def parse_pasv_response(message: str) -> Tuple[str, int]:
    """
    Parses a 227 message to extract the data connection host and port.

    The address is the last parenthesised group, ``(h1,h2,h3,h4,p1,p2)``,
    so servers may put any text in front of it.
    """
    start = message.rfind('(')
    end = message.rfind(')')
    if start == -1 or end < start:
        logger.error(f"Failed to parse PASV response: {message}")
        raise MalformedResponseError("unexpected PASV response", message)
    parts = message[start + 1:end].split(',')
    if len(parts) != 6:
        logger.error(f"Failed to parse PASV response: {message}")
        raise MalformedResponseError("unexpected PASV response", message)
    try:
        fields = [int(part.strip()) for part in parts]
    except ValueError as e:
        raise MalformedResponseError("non-numeric PASV field", message) from e
    if any(not 0 <= field <= 255 for field in fields):
        raise MalformedResponseError("PASV field out of range", message)
    p1, p2 = fields[4], fields[5]
    ip = '.'.join(str(field) for field in fields[:4])
    port = p1 * 256 + p2
    logger.debug(f"PASV parsed: {ip}:{port}")
    return ip, port


def join_address(host: str, port: int) -> str:
    return f"{host}:{port}"


def split_address(address: str) -> Tuple[str, int]:
    """Inverse of ``join_address``: ``"10.0.0.1:5000"`` -> ``("10.0.0.1", 5000)``."""
    host, _, port = address.rpartition(':')
    return host, int(port)
