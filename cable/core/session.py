import enum
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .connection import ControlConnection
from .errors import FTPConnectionError, FTPError, InvalidCommand, InvalidState, NotConnected
from .parser import Parser, Reply

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"


class SessionState(enum.Enum):
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class Session:
    """One FTP control-channel conversation.

    Every operation writes exactly one command line and blocks for exactly
    one reply line. A Session is not safe for concurrent use; callers must
    serialize access to it.

    Args:
        timeout: deadline in seconds applied to the connection, None blocks.
        debug: emit every parsed reply to ``trace``.
        trace: diagnostic sink for parsed replies, scoped to this session.
        connection_factory: builds the byte-stream connection from a timeout.
    """

    def __init__(self, timeout: Optional[float] = None, debug: bool = False,
                 trace: Optional[Callable[[str], None]] = None,
                 connection_factory: Callable[..., ControlConnection] = ControlConnection):
        self.timeout = timeout
        self.parser = Parser(debug=debug, trace=trace)
        self.connection_factory = connection_factory
        self.conn: Optional[ControlConnection] = None
        self.state = SessionState.UNCONNECTED

        self.address: Optional[str] = None
        self.welcome: Optional[Reply] = None
        self.authenticated = False
        self.pasv_host: Optional[str] = None
        self.pasv_port: Optional[int] = None
        # history as list of dicts: {"time":..., "command":..., "reply":..., "error":...}
        self.history: List[dict] = []

    @property
    def debug(self) -> bool:
        return self.parser.debug

    def set_debug(self, debug: bool):
        """Sets the level of verbosity."""
        self.parser.debug = debug

    def set_timeout(self, timeout: Optional[float]):
        self.timeout = timeout
        if self.conn is not None:
            self.conn.settimeout(timeout)

    # ----------------- connection lifecycle -----------------
    def connect(self, address: str) -> Reply:
        """Dials the server and reads its greeting."""
        if self.conn is not None:
            raise InvalidState(f"Already connected to {self.address}")

        conn = self.connection_factory(timeout=self.timeout)
        conn.connect(address)
        self.conn = conn
        try:
            greeting = self._receive()
        except FTPError as e:
            self._record("CONNECT " + address, None, e)
            self.close()
            raise

        self._record("CONNECT " + address, greeting)
        self.address = address
        self.welcome = greeting
        self.authenticated = False
        self.state = SessionState.CONNECTED
        return greeting

    def close(self):
        """Closes the current connection, if any. Safe to call repeatedly."""
        if self.conn is not None:
            conn, self.conn = self.conn, None
            conn.close()
        if self.state is not SessionState.UNCONNECTED:
            self.state = SessionState.CLOSED
        self.authenticated = False

    def quit(self) -> Reply:
        """Sends QUIT; the connection is closed on every exit path."""
        try:
            return self._execute("QUIT")
        finally:
            self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ----------------- access control -----------------
    def login(self, user: str = "", password: str = "") -> Reply:
        """Runs USER then PASS; the first failure stops the sequence."""
        self._require_connection()
        self._user(user)
        reply = self._pass(password)
        self.authenticated = True
        self.state = SessionState.AUTHENTICATED
        logger.info(f"Logged in to {self.address} as {user or ANONYMOUS_USER}")
        return reply

    def _user(self, user: str) -> Reply:
        return self._execute("USER", user or ANONYMOUS_USER)

    def _pass(self, password: str) -> Reply:
        return self._execute("PASS", password or "")

    # ----------------- directory commands -----------------
    def pwd(self) -> Reply:
        return self._execute("PWD")

    def cwd(self, path: str) -> Reply:
        return self._execute("CWD", path)

    # ----------------- passive mode -----------------
    def pasv(self) -> Reply:
        """Requests passive mode and records the advertised data port.

        On a malformed reply the previously recorded address is kept.
        """
        reply = self._execute("PASV")
        host, port = self.parser.parse_pasv_response(reply.message)
        self.pasv_host, self.pasv_port = host, port
        return reply

    # ----------------- request/reply -----------------
    def _require_connection(self):
        if self.conn is None:
            raise NotConnected()

    def _execute(self, verb: str, argument: Optional[str] = None) -> Reply:
        if argument is not None and ('\r' in argument or '\n' in argument):
            raise InvalidCommand(f"{verb} argument contains a line break")
        command = verb if argument is None else f"{verb} {argument}"
        self._require_connection()
        try:
            self.conn.send_line(command)
            reply = self._receive()
        except FTPConnectionError as e:
            # the stream is out of step with the server; nothing more may be sent
            self._record(command, None, e)
            self.close()
            raise
        except FTPError as e:
            self._record(command, None, e)
            raise
        self._record(command, reply)
        return reply

    def _receive(self) -> Reply:
        self._require_connection()
        return self.parser.parse_reply(self.conn.read_line())

    def _record(self, command: str, reply: Optional[Reply], error: Optional[Exception] = None):
        if command.startswith("PASS "):
            command = "PASS ****"
        self.history.append({
            "time": datetime.now(timezone.utc),
            "command": command,
            "reply": reply,
            "error": error
        })

    # Helpers for UI
    def get_history(self):
        """Return a copy of the history list."""
        return list(self.history)

    def clear_history(self):
        self.history.clear()
