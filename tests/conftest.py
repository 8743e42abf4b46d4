"""
Scripted FTP server for the tests.

Each control connection is served in its own daemon thread. Verbs are
answered by, in order: a canned reply from ``server.replies``, a custom
handler from ``server.handlers`` (called as ``handler(session, arg)``), or
one of the ``do_<VERB>`` methods of ``FakeSession``. Anything else gets
``500``. Every received line is appended to ``server.commands`` before the
reply goes out.
"""

import socket
import threading

import pytest

from ftpclient.core import Client

SOCKET_TIMEOUT = 5.0


class FakeSession:
    def __init__(self, server, conn):
        self.server = server
        self.conn = conn
        self.conn.settimeout(SOCKET_TIMEOUT)
        self.reader = conn.makefile('rb')
        self.pasv = None

    def reply(self, *lines):
        self.conn.sendall(''.join(line + '\r\n' for line in lines).encode('utf-8'))

    def run(self):
        try:
            self.reply(self.server.greeting)
            while True:
                raw = self.reader.readline()
                if not raw:
                    break
                line = raw.decode('utf-8').rstrip('\r\n')
                self.server.commands.append(line)
                verb, _, arg = line.partition(' ')
                verb = verb.upper()
                if verb in self.server.replies:
                    canned = self.server.replies[verb]
                    self.reply(*([canned] if isinstance(canned, str) else canned))
                else:
                    handler = self.server.handlers.get(verb) or getattr(FakeSession, f"do_{verb}", None)
                    if handler is None:
                        self.reply('500 Unknown command')
                    else:
                        handler(self, arg)
                if verb == 'QUIT':
                    break
        except OSError:
            pass
        finally:
            self.close()

    def close(self):
        self.close_pasv()
        for resource in (self.reader, self.conn):
            try:
                resource.close()
            except OSError:
                pass

    # --- data connection -----------------------------------------------------
    def close_pasv(self):
        if self.pasv is not None:
            self.pasv.close()
            self.pasv = None

    def accept_data(self) -> socket.socket:
        data, _ = self.pasv.accept()
        data.settimeout(SOCKET_TIMEOUT)
        self.close_pasv()
        return data

    def send_data(self, payload: bytes):
        data = self.accept_data()
        self.reply('150 Opening BINARY mode data connection')
        data.sendall(payload)
        data.close()
        self.reply('226 Transfer complete')

    def receive_data(self) -> bytes:
        data = self.accept_data()
        self.reply('150 Ok to send data')
        chunks = []
        while True:
            chunk = data.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        data.close()
        return b''.join(chunks)

    # --- commands ------------------------------------------------------------
    def do_USER(self, arg):
        self.reply('331 Please specify the password')

    def do_PASS(self, arg):
        self.reply('230 Login successful')

    def do_TYPE(self, arg):
        self.reply(f'200 Switching to {"Binary" if arg == "I" else "ASCII"} mode')

    def do_NOOP(self, arg):
        self.reply('200 NOOP ok')

    def do_QUIT(self, arg):
        self.reply('221 Goodbye')

    def do_PASV(self, arg):
        self.close_pasv()
        self.pasv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.pasv.bind(('127.0.0.1', 0))
        self.pasv.listen(1)
        self.pasv.settimeout(SOCKET_TIMEOUT)
        port = self.pasv.getsockname()[1]
        self.reply(f"227 Entering Passive Mode (127,0,0,1,{port // 256},{port % 256})")

    def do_RETR(self, arg):
        if arg not in self.server.files:
            self.reply('550 Failed to open file')
            return
        self.send_data(self.server.files[arg])

    def do_NLST(self, arg):
        self.send_data(''.join(f"{name}\r\n" for name in sorted(self.server.files)).encode())

    def do_LIST(self, arg):
        lines = [f"-rw-r--r--    1 ftp      ftp      {len(body):>8} Jan 01 00:00 {name}\r\n"
                 for name, body in sorted(self.server.files.items())]
        self.send_data(''.join(lines).encode())

    def do_STOR(self, arg):
        self.server.files[arg] = self.receive_data()
        self.reply('226 Transfer complete')

    def do_APPE(self, arg):
        self.server.files[arg] = self.server.files.get(arg, b'') + self.receive_data()
        self.reply('226 Transfer complete')


class FakeFTPServer:
    def __init__(self, greeting: str = '220 Service ready'):
        self.greeting = greeting
        self.replies = {}
        self.handlers = {}
        self.files = {}
        self.commands = []
        self.sessions = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.listen(5)
        self.sock.settimeout(0.1)
        self.host, self.port = self.sock.getsockname()
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self):
        self._thread.start()

    def _serve(self):
        while not self._stopped.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            session = FakeSession(self, conn)
            self.sessions.append(session)
            threading.Thread(target=session.run, daemon=True).start()

    def close(self):
        self._stopped.set()
        self._thread.join(timeout=1)
        self.sock.close()
        for session in self.sessions:
            session.close()


@pytest.fixture
def server():
    srv = FakeFTPServer()
    srv.files = {
        'readme.txt': b'hello from the server\n',
        'data.bin': bytes(range(256)) * 8,
    }
    srv.start()
    yield srv
    srv.close()


@pytest.fixture
def client(server):
    c = Client(server.host, server.port, timeout=SOCKET_TIMEOUT)
    yield c
    c.close()


@pytest.fixture
def logged_in(client):
    client.login('bob', 'secret')
    return client
