"""
Streamlit front end for the FTP client.

Start it with the ``ftpclient-ui`` console script or
``streamlit run ftpclient/ui/app.py``.
"""

import os
import threading
import time
import logging
from datetime import datetime

import streamlit as st

from ftpclient.core import Client, CommandHandler, FTPError, UPLOAD_COMMANDS
from ftpclient.ui.levenstein import get_suggestion

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


st.set_page_config(page_title="FTP Client UI", layout="wide")

# --- Helpers -----------------------------------------------------------------

# Blocking network calls run in a worker thread; the script thread only waits
# for it, so the client never sees two callers at once.
def run_in_thread(fn, *args, **kwargs):
    result = {"value": None, "error": None}
    def target():
        try:
            result["value"] = fn(*args, **kwargs)
        except Exception as e:
            result["error"] = e
    t = threading.Thread(target=target)
    t.start()
    return t, result


def wait(t: threading.Thread, label: str):
    with st.spinner(label):
        while t.is_alive():
            time.sleep(0.05)


def disconnect():
    client = st.session_state.get("client")
    if client is not None:
        client.close()
    st.session_state["client"] = None
    st.session_state["handler"] = None


# --- UI ----------------------------------------------------------------------
st.title("FTP Client")

if "handler" not in st.session_state:
    st.session_state["client"] = None
    st.session_state["handler"] = None

with st.sidebar:
    st.header("Connection")
    host = st.text_input("Host", value=os.getenv("FTP_HOST", "localhost"))
    port = st.number_input("Port", min_value=1, max_value=65535, value=int(os.getenv("FTP_PORT", "21")))
    user = st.text_input("User", value=os.getenv("FTP_USER", "anonymous"))
    password = st.text_input("Password", value=os.getenv("FTP_PASSWORD", "anonymous@example.com"), type="password")
    timeout = st.number_input("Timeout (s)", min_value=1.0, max_value=60.0, value=10.0)
    if st.button("Connect"):
        disconnect()
        logger.info(f"[UI] Connecting to {host}:{port}")
        client = Client(host, int(port), float(timeout))
        t, result = run_in_thread(client.login, user, password)
        wait(t, "Logging in...")
        if result["error"]:
            logger.error(f"[UI] Login failed: {result['error']}")
            client.close()
            st.error(f"Login failed: {result['error']}")
        else:
            st.session_state["client"] = client
            st.session_state["handler"] = CommandHandler(client)
            st.success(f"Logged in to {host}:{port} as {user}")
    if st.button("Disconnect"):
        logger.info("[UI] Disconnect button clicked")
        disconnect()
        st.info("Disconnected")

col1, col2 = st.columns([3, 1])

with col1:
    st.subheader("Terminal")
    cmd = st.text_input("Command", placeholder="e.g. ls, cd pub, RETR readme.txt", key="cmd_input")
    uploaded_file = st.file_uploader("File for STOR / APPE", key="upload_file")
    cmd_run = st.button("Run")

    if cmd_run and cmd:
        handler: CommandHandler = st.session_state.get("handler")
        if handler is None:
            st.error("Not connected. Connect first.")
        else:
            line = handler.translate(cmd)
            verb, _, rest = line.partition(" ")
            verb = verb.upper()
            if verb in UPLOAD_COMMANDS:
                if uploaded_file is None:
                    st.error("Select a file to upload using the uploader above.")
                    st.stop()
                # Everything after the verb is the remote name, spaces included
                remote = rest.strip() or uploaded_file.name
                logger.info(f"[UI] Uploading {uploaded_file.name} as {remote}")
                t, result = run_in_thread(handler.upload, uploaded_file.getvalue(), remote, verb)
            else:
                logger.info(f"[UI] Command executed: {line}")
                t, result = run_in_thread(handler.execute, line)
            wait(t, "Running...")
            error = result["error"]
            if isinstance(error, FTPError):
                st.error(f"Error: {error}")
                disconnect()
            elif error is not None:
                st.error(f"Error: {error}")
            else:
                entry = result["value"]
                response = entry["response"]
                if response is not None:
                    show = st.error if response.is_error else st.success
                    show(f"{response.code} - {response.message}")
                    if response.code in (500, 502):
                        suggestion = get_suggestion(verb)
                        if suggestion:
                            st.write(f"Try with {suggestion}")
                elif entry["data"] is not None:
                    st.text_area("Output", value=entry["data"].decode("utf-8", errors="replace"), height=300)
                    if entry["file"]:
                        st.download_button("Download", data=entry["data"], file_name=os.path.basename(entry["file"]))
                else:
                    st.success(f"Uploaded {entry['file']}")

with col2:
    st.subheader("History")
    handler = st.session_state.get("handler")
    if handler is None:
        st.info("No history: not connected")
    else:
        if st.button("Clear History"):
            handler.clear_history()
            st.rerun()
        for entry in reversed(handler.get_history()[-100:]):
            t = entry.get("time")
            time_str = t.isoformat() if isinstance(t, datetime) else str(t)
            with st.expander(f"{time_str} — {entry.get('command')}"):
                response = entry.get("response")
                if response is not None:
                    st.write(f"Code: {response.code}")
                    st.write(f"Message: {response.message}")
                    st.write(f"Type: {response.type}")
                if entry.get("data") is not None:
                    st.write(f"{len(entry['data'])} bytes transferred")
                if entry.get("error"):
                    st.error("This entry had an error")

st.markdown("---")
st.caption("FTP client UI — passive mode, binary transfers.")
