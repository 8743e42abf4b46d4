import os
import logging
from datetime import datetime, timezone
from typing import BinaryIO, Dict, FrozenSet, Mapping, Union

from ftpclient.core.client import Client

logger = logging.getLogger(__name__)

# Verbs whose payload travels over a data connection
DATA_COMMANDS: FrozenSet[str] = frozenset({"RETR", "NLST", "LIST", "STOR", "APPE"})
UPLOAD_COMMANDS: FrozenSet[str] = frozenset({"STOR", "APPE"})

# Shell-like words accepted in place of FTP verbs
ALIASES: Mapping[str, str] = {
    "cd": "CWD",
    "ls": "NLST",
    "dir": "LIST",
    "cat": "RETR",
    "rm": "DELE",
    "pwd": "PWD",
    "mkdir": "MKD",
    "rmdir": "RMD",
    "put": "STOR",
    "get": "RETR",
}


class CommandHandler:
    """
    Runs lines typed by a user against a ``Client``.

    Lines are translated through the alias table, then sent with
    ``Client.data_cmd`` when the verb is a data command and ``Client.cmd``
    otherwise. Uploads read the named local file; ``get`` saves the download
    to a local file. Every line is recorded in ``history``.
    """

    def __init__(self, client: Client,
                 data_commands: FrozenSet[str] = DATA_COMMANDS,
                 aliases: Mapping[str, str] = ALIASES):
        self.client = client
        self.data_commands = frozenset(verb.upper() for verb in data_commands)
        self.aliases = dict(aliases)
        # list of dicts: {"time", "command", "response", "data", "file", "error"}
        self.history = []

    def translate(self, line: str) -> str:
        """Replaces a leading alias with its FTP verb; other lines pass through."""
        word, sep, rest = line.strip().partition(' ')
        verb = self.aliases.get(word)
        if verb is None:
            return line.strip()
        return f"{verb}{sep}{rest}"

    def is_data_command(self, line: str) -> bool:
        verb = line.strip().split(' ', 1)[0].upper()
        return verb in self.data_commands

    def execute(self, line: str) -> Dict:
        """
        Runs one line and returns its history entry.

        Errors from the client propagate after being recorded.
        """
        words = line.split()
        if not words:
            raise ValueError("empty command")
        if words[0] == "get":
            return self._download(words[1:])

        command = self.translate(line)
        verb = command.split(' ', 1)[0].upper()
        if verb in UPLOAD_COMMANDS and self.is_data_command(command):
            return self._upload(verb, command.split()[1:])
        if self.is_data_command(command):
            return self._record(command, lambda: {"data": self.client.data_cmd(command)})
        return self._record(command, lambda: {"response": self.client.cmd(command)})

    def _upload(self, verb: str, args):
        """``STOR <local> [remote]``: the remote name defaults to the local basename."""
        if not args or len(args) > 2:
            raise ValueError(f"usage: {verb} <local file> [remote name]")
        local_path = args[0]
        remote_name = args[1] if len(args) > 1 else os.path.basename(local_path)
        command = f"{verb} {remote_name}"

        def run():
            with open(local_path, 'rb') as f:
                self.client.data_cmd(command, payload=f)
            logger.info(f"Uploaded {local_path} as {remote_name}")
            return {"file": local_path}

        return self._record(command, run)

    def upload(self, payload: Union[bytes, BinaryIO], remote_name: str, verb: str = "STOR") -> Dict:
        """
        Sends ``payload`` (bytes or a binary file object) as ``remote_name``.

        The remote name is passed through as is, spaces included.
        """
        verb = verb.upper()
        if verb not in UPLOAD_COMMANDS:
            raise ValueError(f"not an upload command: {verb}")
        command = f"{verb} {remote_name}"

        def run():
            self.client.data_cmd(command, payload=payload)
            logger.info(f"Uploaded {remote_name}")
            return {"file": remote_name}

        return self._record(command, run)

    def _download(self, args):
        """``get <remote> [local]``: the local name defaults to the remote basename."""
        if not args or len(args) > 2:
            raise ValueError("usage: get <remote file> [local path]")
        remote_name = args[0]
        local_path = args[1] if len(args) > 1 else os.path.basename(remote_name)
        command = f"RETR {remote_name}"

        def run():
            data = self.client.data_cmd(command)
            with open(local_path, 'wb') as f:
                f.write(data)
            logger.info(f"Downloaded {remote_name} to {local_path}")
            return {"file": local_path, "data": data}

        return self._record(command, run)

    def _record(self, command: str, run) -> Dict:
        entry = {
            "time": datetime.now(timezone.utc),
            "command": "PASS ****" if command.upper().startswith("PASS ") else command,
            "response": None,
            "data": None,
            "file": None,
            "error": False,
        }
        self.history.append(entry)
        try:
            entry.update(run())
        except Exception:
            entry["error"] = True
            raise
        response = entry["response"]
        if response is not None:
            entry["error"] = response.is_error
        return entry

    # Helpers for UI
    def get_history(self):
        """Return a copy of the history list."""
        return list(self.history)

    def clear_history(self):
        self.history.clear()
