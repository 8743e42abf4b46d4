"""
Core FTP client logic.
Includes the connection managers, the reply parser, the client and the
command handler used by the front ends.
"""

from .errors import (
    FTPError,
    TransportError,
    ConnectionClosedError,
    StatusError,
    MalformedResponseError,
    ConcurrentUseError,
)
from .parser import Response, parse_pasv_response
from .connection import ControlConnection
from .data_connection import DataConnection
from .client import Client
from .commands import CommandHandler, DATA_COMMANDS, UPLOAD_COMMANDS

__all__ = [
    "FTPError",
    "TransportError",
    "ConnectionClosedError",
    "StatusError",
    "MalformedResponseError",
    "ConcurrentUseError",
    "Response",
    "parse_pasv_response",
    "ControlConnection",
    "DataConnection",
    "Client",
    "CommandHandler",
    "DATA_COMMANDS",
    "UPLOAD_COMMANDS",
]
