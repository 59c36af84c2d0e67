"""
cable - a minimal FTP control-channel client.
"""

from .core import (
    ControlConnection,
    DialError,
    FTPConnectionError,
    FTPError,
    InvalidCommand,
    InvalidState,
    MalformedPasvReply,
    MalformedReply,
    NotConnected,
    Parser,
    Reply,
    Session,
    SessionState,
)

VERSION = "0.0.1"

__all__ = [
    "VERSION",
    "ControlConnection",
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
