#!/usr/bin/env python3
"""
Command line entry point for cable.

    cable session ftp.example.org:21 --pwd --pasv
    cable ui --port 8501
"""

import os
import sys
import argparse
import logging
import subprocess

from cable import VERSION
from cable.config import Settings, configure_logging
from cable.core import FTPError, Parser, Session

logger = logging.getLogger("cable.cli")

UI_APP = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'ui', 'app.py')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cable", description="Minimal FTP control-channel client")
    parser.add_argument("--version", action="version", version=f"cable {VERSION}")
    parser.add_argument("--log-level", default=None, help="Logging level (default: CABLE_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    session = sub.add_parser("session", help="Connect, log in, query the server and quit")
    session.add_argument("address", nargs="?", default=None, help="Server host:port (default: CABLE_ADDRESS)")
    session.add_argument("--user", default=None, help="User name, empty for anonymous")
    session.add_argument("--password", default=None, help="Password")
    session.add_argument("--cwd", default=None, metavar="PATH", help="Change to PATH after login")
    session.add_argument("--pasv", action="store_true", help="Negotiate passive mode and print the data port")
    session.add_argument("--timeout", type=float, default=None, help="Deadline in seconds for each reply")
    session.add_argument("--debug", action="store_true", default=None, help="Trace every parsed reply")

    ui = sub.add_parser("ui", help="Start the Streamlit client UI")
    ui.add_argument("--host", default="127.0.0.1", help="Address Streamlit binds to")
    ui.add_argument("--port", type=int, default=None, help="Port Streamlit listens on (default: CABLE_UI_PORT)")
    return parser


def run_session(settings: Settings, cwd: str = None, pasv: bool = False, out=None) -> int:
    out = out or sys.stdout
    session = Session(timeout=settings.timeout, debug=settings.debug, trace=logger.info)
    try:
        print(session.connect(settings.address), file=out)
        print(session.login(settings.user, settings.password), file=out)

        reply = session.pwd()
        print(reply, file=out)
        path = Parser.parse_pwd_response(reply)
        if path is not None:
            print(f"Current directory: {path}", file=out)

        if cwd:
            print(session.cwd(cwd), file=out)
        if pasv:
            print(session.pasv(), file=out)
            print(f"Passive data port: {session.pasv_host}:{session.pasv_port}", file=out)

        print(session.quit(), file=out)
        return 0
    except FTPError as e:
        logger.error(f"Session with {settings.address} failed: {e}")
        return 1
    finally:
        session.close()


def start_ui(host: str, port: int) -> int:
    logger.info(f"Starting Streamlit client UI on {host}:{port}...")
    cmd = [
        'streamlit',
        'run',
        UI_APP,
        f'--server.port={port}',
        f'--server.address={host}',
        '--client.showErrorDetails=true'
    ]
    try:
        os.execvp(cmd[0], cmd)
    except OSError as e:
        logger.error(f"Failed to exec Streamlit: {e}")
    # execvp only returns on failure
    try:
        return subprocess.run(cmd, check=True).returncode
    except subprocess.CalledProcessError as e:
        logger.error(f"Streamlit exited with error code {e.returncode}")
        return e.returncode
    except OSError as e:
        logger.error(f"Failed to start Streamlit: {e}")
        return 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"cable: configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(args.log_level or settings.log_level)

    if args.command == "ui":
        return start_ui(args.host, args.port or settings.ui_port)

    settings = settings.override(
        address=args.address,
        user=args.user,
        password=args.password,
        timeout=args.timeout,
        debug=args.debug,
    )
    return run_session(settings, cwd=args.cwd, pasv=args.pasv)


if __name__ == "__main__":
    sys.exit(main())
