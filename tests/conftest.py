import socket
import time
import threading

import pytest

from cable.core import FTPConnectionError, NotConnected, Session


class StubFTPServer:
    """Scripted single-client FTP server.

    Sends ``greeting`` on accept, then answers each command line with the
    reply registered for its verb. Verbs listed in ``hang_up_on`` make the
    server close the connection without replying. ``delays`` holds seconds
    to wait before answering a verb.
    """

    def __init__(self, greeting="220 Welcome\n", replies=None, hang_up_on=(), delays=None):
        self.greeting = greeting
        self.replies = dict(replies or {})
        self.hang_up_on = set(hang_up_on)
        self.delays = dict(delays or {})
        self.received = []
        self.done = threading.Event()

        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.listen(1)
        self.sock.settimeout(5)
        self.port = self.sock.getsockname()[1]
        self.address = f"127.0.0.1:{self.port}"
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def start(self):
        self.thread.start()
        return self

    def _serve(self):
        try:
            client, _ = self.sock.accept()
        except OSError:
            self.done.set()
            return
        with client:
            client.settimeout(5)
            reader = client.makefile('rb')
            try:
                if self.greeting is not None:
                    client.sendall(self.greeting.encode('utf-8'))
                while True:
                    line = reader.readline()
                    if not line:
                        break
                    self.received.append(line)
                    verb = line.decode('utf-8').split(' ', 1)[0].strip().upper()
                    if verb in self.hang_up_on:
                        break
                    reply = self.replies.get(verb, "502 Command not implemented\n")
                    if verb in self.delays:
                        time.sleep(self.delays[verb])
                    client.sendall(reply.encode('utf-8'))
                    if verb == "QUIT":
                        break
            except OSError:
                pass
            finally:
                reader.close()
        self.done.set()

    def wait(self, timeout=5):
        return self.done.wait(timeout)

    def stop(self):
        self.sock.close()
        self.thread.join(timeout=5)


class FakeConnection:
    """In-memory stand-in for ControlConnection.

    ``replies`` are returned by read_line in order; an exception instance in
    the list is raised instead. Running out of replies behaves like EOF.
    """

    def __init__(self, replies=(), timeout=None):
        self.replies = list(replies)
        self.timeout = timeout
        self.sent = []
        self.address = None
        self.close_calls = 0
        self.closed = False

    @property
    def is_open(self):
        return self.address is not None and not self.closed

    def connect(self, address):
        self.address = address

    def settimeout(self, timeout):
        self.timeout = timeout

    def send_line(self, command):
        if self.closed:
            raise NotConnected()
        self.sent.append(command)

    def read_line(self):
        if self.closed:
            raise NotConnected()
        if not self.replies:
            raise FTPConnectionError("Connection closed by server")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self):
        self.close_calls += 1
        self.closed = True


@pytest.fixture
def stub_server():
    servers = []

    def factory(**kwargs):
        server = StubFTPServer(**kwargs).start()
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.stop()


@pytest.fixture
def fake_session():
    """Builds a connected Session over a FakeConnection.

    The greeting is read from the first scripted reply.
    """

    def factory(*replies, greeting="220 Welcome\r\n", **session_kwargs):
        conn = FakeConnection([greeting] + list(replies))
        session = Session(connection_factory=lambda timeout=None: conn, **session_kwargs)
        session.connect("ftp.example.org:21")
        return session, conn

    return factory
