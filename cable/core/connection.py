import socket
import logging
from typing import Optional, Tuple

from .errors import DialError, FTPConnectionError, InvalidCommand, InvalidState, NotConnected

logger = logging.getLogger(__name__)

CRLF = '\r\n'
DEFAULT_PORT = 21
# Longest reply line accepted from the server
MAXLINE = 8192


def parse_address(address: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Splits a ``host:port`` string. ``[v6addr]:port`` is accepted too."""
    address = address.strip()
    if not address:
        raise DialError("Empty server address")

    if address.startswith('['):
        host, sep, rest = address[1:].partition(']')
        if not sep:
            raise DialError(f"Invalid server address: {address}")
        port = rest[1:] if rest.startswith(':') else ''
    elif address.count(':') == 1:
        host, _, port = address.partition(':')
    else:
        # bare hostname or unbracketed IPv6 literal
        host, port = address, ''

    if not port:
        return host, default_port
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise DialError(f"Invalid port in server address: {address}")
    return host, int(port)


class ControlConnection:
    """Line-oriented TCP stream used for the FTP control channel."""

    def __init__(self, timeout: Optional[float] = None):
        self.host: Optional[str] = None
        self.port: Optional[int] = None
        self.timeout = timeout
        self.socket: Optional[socket.socket] = None
        self._reader = None

    @property
    def is_open(self) -> bool:
        return self.socket is not None

    def connect(self, address: str):
        if self.socket is not None:
            raise InvalidState(f"Already connected to {self.host}:{self.port}")
        self.host, self.port = parse_address(address)
        try:
            logger.info(f"Connecting to {self.host}:{self.port} (timeout={self.timeout}s)")
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            self._reader = self.socket.makefile('rb')
            logger.info(f"✓ Connected to {self.host}:{self.port}")
        except OSError as e:
            logger.error(f"✗ Failed to connect to {self.host}:{self.port} - {e}")
            self.socket = None
            self._reader = None
            raise DialError(f"Failed to connect to {self.host}:{self.port} - {e}") from e

    def settimeout(self, timeout: Optional[float]):
        """Deadline for each subsequent read/write; None blocks indefinitely."""
        self.timeout = timeout
        if self.socket is not None:
            self.socket.settimeout(timeout)

    def close(self):
        if self.socket is None:
            return
        sock, reader = self.socket, self._reader
        self.socket = None
        self._reader = None
        try:
            if reader is not None:
                reader.close()
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # peer may already be gone
            pass
        try:
            sock.close()
        except OSError as e:
            logger.warning(f"Error closing socket to {self.host}:{self.port}: {e}")
        logger.info(f"✓ Disconnected from {self.host}:{self.port}")

    def send_line(self, command: str):
        """Writes one command followed by exactly one CRLF.

        A command holding CR or LF would reach the server as several
        commands, so it is rejected before anything is written.
        """
        if '\r' in command or '\n' in command:
            raise InvalidCommand("an illegal newline character should not be contained")
        if self.socket is None:
            raise NotConnected()
        if command.startswith('PASS '):
            logger.debug("→ SEND: PASS ****")
        else:
            logger.debug(f"→ SEND: {command}")
        try:
            self.socket.sendall((command + CRLF).encode('utf-8'))
        except OSError as e:
            logger.error(f"Send to {self.host}:{self.port} failed - {e}")
            self.close()
            raise FTPConnectionError(f"Connection lost: {e}") from e

    def read_line(self) -> str:
        """Blocks for one LF-terminated line; returns it with the terminator.

        Any stream failure, deadline expiry included, closes the connection:
        the reader is unusable afterwards and a late reply would be paired
        with the next command.
        """
        if self._reader is None:
            raise NotConnected()
        try:
            data = self._reader.readline(MAXLINE + 1)
        except OSError as e:
            logger.error(f"Receive from {self.host}:{self.port} failed - {e}")
            self.close()
            raise FTPConnectionError(f"Connection lost: {e}") from e

        if len(data) > MAXLINE:
            self.close()
            raise FTPConnectionError(f"Reply line longer than {MAXLINE} bytes")
        if not data.endswith(b'\n'):
            self.close()
            raise FTPConnectionError("Connection closed by server")

        line = data.decode('utf-8', errors='replace')
        logger.debug(f"← RECV: {line.strip()}")
        return line
