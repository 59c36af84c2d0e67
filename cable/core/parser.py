import logging
import re
from typing import Callable, Optional, Tuple

from .errors import MalformedPasvReply, MalformedReply

logger = logging.getLogger(__name__)

RESPONSE_TYPES = {
    '1': 'preliminary',
    '2': 'success',
    '3': 'missing_info',
    '4': 'error',
    '5': 'error'
}

_PASV_GROUP = re.compile(r'\((.*)\)')
_QUOTED_PATH = re.compile(r'"((?:[^"]|"")*)"')


class Reply:
    """One decoded server reply line: numeric code plus message text."""

    def __init__(self, code: int, message: str, separator: str = " ", raw: str = ""):
        self.code = code
        self.message = message
        self.separator = separator
        self.raw = raw

    @property
    def type(self) -> str:
        return RESPONSE_TYPES.get(str(self.code)[0], 'unknown')

    @property
    def is_success(self) -> bool:
        return 200 <= self.code < 300

    @property
    def is_error(self) -> bool:
        return self.code >= 400

    def __eq__(self, other):
        if not isinstance(other, Reply):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __str__(self):
        return f"{self.code} {self.message}"

    def __repr__(self):
        return f"Reply(code={self.code}, message={self.message!r})"


class Parser:
    """Decodes control-channel reply lines.

    ``trace`` is the diagnostic sink for parsed replies; it is only called
    while ``debug`` is on.
    """

    def __init__(self, debug: bool = False, trace: Optional[Callable[[str], None]] = None):
        self.debug = debug
        self.trace = trace if trace is not None else logger.debug

    def parse_reply(self, line: str) -> Reply:
        raw = line.rstrip('\r\n')
        code = raw[:3]

        # str.isdigit() also accepts non-ASCII digits
        if len(code) != 3 or not (code.isascii() and code.isdigit()):
            logger.error(f"Invalid FTP reply format: {raw!r}")
            raise MalformedReply(raw)

        separator = raw[3:4]
        message = raw[4:]
        reply = Reply(int(code), message, separator, raw)

        if self.debug:
            self.trace(f"Code: {reply.code} Message: {reply.message}")
        return reply

    def parse_pasv_response(self, message: str) -> Tuple[str, int]:
        """Parses the PASV reply text to extract the data-channel IP and port.

        "Entering Passive Mode (127,0,0,1,200,13)" -> ("127.0.0.1", 51213)
        """
        match = _PASV_GROUP.search(message)
        if match is None:
            raise MalformedPasvReply(message)

        fields = [f.strip() for f in match.group(1).split(',')]
        if len(fields) != 6:
            raise MalformedPasvReply(message, f"expected 6 fields, got {len(fields)}")

        numbers = []
        for field in fields:
            if not (field.isascii() and field.isdigit()) or int(field) > 255:
                raise MalformedPasvReply(message, f"invalid field {field!r}")
            numbers.append(int(field))

        ip = '.'.join(str(n) for n in numbers[:4])
        port = numbers[4] * 256 + numbers[5]
        logger.debug(f"PASV parsed: {ip}:{port}")
        return ip, port

    @staticmethod
    def parse_pwd_response(reply: Reply) -> Optional[str]:
        """Returns the quoted directory of a 257 reply, or None."""
        if reply.code != 257:
            return None
        match = _QUOTED_PATH.search(reply.message)
        if match is None:
            return None
        # embedded quotes are doubled
        return match.group(1).replace('""', '"')
