import socket
from typing import BinaryIO, Optional, Union

from ftpclient.core.errors import TransportError

CHUNK_SIZE = 4096


class DataConnection:
    def __init__(self, ip: str, port: int, timeout: Optional[float] = None):
        """
        Passive-mode data connection of the FTP client.
        """
        self.ip = ip
        self.port = port
        self.timeout = timeout
        self.data_socket: Optional[socket.socket] = None

    def connect(self):
        """
        Opens the TCP connection to the address announced by PASV.
        """
        try:
            self.data_socket = socket.create_connection((self.ip, self.port), timeout=self.timeout)
        except OSError as e:
            self.data_socket = None
            raise TransportError(f"failed to dial data connection {self.ip}:{self.port}: {e}") from e

    def close(self):
        if self.data_socket:
            sock = self.data_socket
            self.data_socket = None
            sock.close()

    def receive_all(self) -> bytes:
        """
        Reads until the server closes the connection, which marks the end of
        the payload.
        """
        buffer = []
        try:
            while True:
                data = self.data_socket.recv(CHUNK_SIZE)
                if not data:
                    break
                buffer.append(data)
        except OSError as e:
            raise TransportError(f"failed to read response: {e}") from e
        return b''.join(buffer)

    def send_all(self, payload: Union[bytes, BinaryIO]):
        """
        Writes the payload and shuts down the write side so the server sees
        end of file.
        """
        try:
            if isinstance(payload, (bytes, bytearray, memoryview)):
                self.data_socket.sendall(payload)
            else:
                while chunk := payload.read(CHUNK_SIZE):
                    self.data_socket.sendall(chunk)
            self.data_socket.shutdown(socket.SHUT_WR)
        except OSError as e:
            raise TransportError(f"failed to write payload: {e}") from e
