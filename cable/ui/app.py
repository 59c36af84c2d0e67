import sys
import os

# Ensure project root is on sys.path so `import cable` resolves when Streamlit runs
# (Streamlit runs the script from its directory which can make package imports fail)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from datetime import datetime
import logging

from cable.config import Settings, configure_logging
from cable.core import FTPError, Parser, Session

import streamlit as st

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


st.set_page_config(page_title="cable FTP client", layout="wide")

# --- Helpers -----------------------------------------------------------------

def current_session() -> Session:
    return st.session_state.get("session")


def show_reply(reply):
    if reply.is_error:
        st.error(f"{reply.code} — {reply.message}")
    else:
        st.success(f"{reply.code} — {reply.message}")


def run(label, fn, *args):
    """Runs one session operation and reports the reply or the error."""
    logger.info(f"[UI] {label}")
    try:
        reply = fn(*args)
    except FTPError as e:
        logger.error(f"[UI] {label} failed: {e}")
        st.error(f"{label} failed: {e}")
        return None
    show_reply(reply)
    return reply


# --- UI ----------------------------------------------------------------------
st.title("cable — FTP control channel")

with st.sidebar:
    st.header("Connection")
    address = st.text_input("Address", value=settings.address)
    timeout = st.number_input("Timeout (s)", min_value=0.0, max_value=120.0,
                              value=float(settings.timeout or 0.0),
                              help="0 blocks until the server replies")
    debug = st.checkbox("Trace replies", value=settings.debug)

    if st.button("Connect"):
        session = current_session()
        if session is not None:
            session.close()
        session = Session(timeout=timeout or None, debug=debug, trace=logger.info)
        if run(f"Connect to {address}", session.connect, address) is not None:
            st.session_state["session"] = session

    st.header("Login")
    user = st.text_input("User", value=settings.user, placeholder="anonymous")
    password = st.text_input("Password", value=settings.password, type="password")
    if st.button("Login"):
        session = current_session()
        if session is None:
            st.error("Not connected. Connect first.")
        else:
            run("Login", session.login, user, password)

    if st.button("Quit"):
        session = current_session()
        if session is not None:
            run("Quit", session.quit)
            st.info("Disconnected")


session = current_session()

col1, col2 = st.columns([3, 2])

with col1:
    st.subheader("Commands")
    if session is None or session.conn is None:
        st.info("Not connected")
    else:
        st.caption(f"{session.address} — {session.state.value}")
        if st.button("PWD"):
            reply = run("PWD", session.pwd)
            if reply is not None:
                path = Parser.parse_pwd_response(reply)
                if path is not None:
                    st.write(f"Current directory: `{path}`")

        path = st.text_input("Directory", placeholder="/pub")
        if st.button("CWD") and path:
            run(f"CWD {path}", session.cwd, path)

        if st.button("PASV"):
            if run("PASV", session.pasv) is not None:
                st.write(f"Data channel: {session.pasv_host}:{session.pasv_port}")

with col2:
    st.subheader("History")
    if session is None:
        st.info("No history: not connected")
    else:
        if st.button("Clear History"):
            session.clear_history()
            st.rerun()
        for entry in reversed(session.get_history()[-100:]):
            t = entry.get("time")
            time_str = t.isoformat() if isinstance(t, datetime) else str(t)
            with st.expander(f"{time_str} — {entry.get('command')}"):
                reply = entry.get("reply")
                if reply is not None:
                    st.write(f"Code: {reply.code}")
                    st.write(f"Message: {reply.message}")
                    st.write(f"Type: {reply.type}")
                if entry.get("error") is not None:
                    st.error(str(entry.get("error")))


# Footer
st.markdown("---")
st.caption("cable Streamlit UI — control-channel commands and reply history.")
