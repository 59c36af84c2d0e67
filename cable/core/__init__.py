"""
Core FTP control-channel logic.
Includes the connection, the reply parser and the session engine.
"""

from .connection import ControlConnection, parse_address
from .errors import (
    DialError,
    FTPConnectionError,
    FTPError,
    InvalidCommand,
    InvalidState,
    MalformedPasvReply,
    MalformedReply,
    NotConnected,
)
from .parser import Parser, Reply
from .session import Session, SessionState

__all__ = [
    "ControlConnection",
    "parse_address",
    "Parser",
    "Reply",
    "Session",
    "SessionState",
    "FTPError",
    "FTPConnectionError",
    "DialError",
    "NotConnected",
    "MalformedReply",
    "MalformedPasvReply",
    "InvalidState",
    "InvalidCommand"
]
