import argparse
import logging
import os
import sys
from typing import Iterable, Optional, TextIO

from ftpclient.core import Client, CommandHandler, FTPError
from ftpclient.ui.levenstein import get_suggestion

logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit")
PROMPT = "> "


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ftpclient", description="Minimal passive-mode FTP client")
    parser.add_argument("-H", "--host", default=os.getenv("FTP_HOST", "localhost"), help="hostname")
    parser.add_argument("-P", "--port", type=int, default=int(os.getenv("FTP_PORT", "21")), help="port number")
    parser.add_argument("-u", "--user", default=os.getenv("FTP_USER", "anonymous"), help="username")
    parser.add_argument("-p", "--password", default=os.getenv("FTP_PASSWORD", "anonymous@example.com"), help="password")
    parser.add_argument("-t", "--timeout", type=float, default=None, help="socket timeout in seconds (none by default)")
    parser.add_argument("-d", "--debug", action="store_true", help="enable debug log")
    return parser


def configure_logging(debug: bool):
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[FTP] %(message)s", stream=sys.stdout)


def print_entry(entry: dict, out: TextIO):
    response = entry["response"]
    if response is not None:
        print(f"FTP {response.code}\n{response.message}", file=out)
        if response.code in (500, 502):
            suggestion = get_suggestion(entry["command"].split(' ', 1)[0])
            if suggestion:
                print(f"Did you mean {suggestion}?", file=out)
    elif entry["file"] is not None:
        if entry["data"] is not None:
            print(f"Saved {len(entry['data'])} bytes to {entry['file']}", file=out)
        else:
            print(f"Uploaded {entry['file']}", file=out)
    else:
        print(entry["data"].decode('utf-8', errors='replace'), file=out)


def run_shell(handler: CommandHandler, lines: Iterable[str], out: Optional[TextIO] = None) -> int:
    """
    Reads commands until ``exit``/``quit`` or end of input.

    Returns the process exit code: 1 as soon as the server exchange fails,
    0 otherwise.
    """
    if out is None:
        out = sys.stdout
    print(PROMPT, end="", file=out, flush=True)
    for raw in lines:
        line = raw.strip()
        if not line:
            print(PROMPT, end="", file=out, flush=True)
            continue
        if line in EXIT_WORDS:
            break
        try:
            entry = handler.execute(line)
        except FTPError as e:
            print(e, file=out)
            return 1
        except (OSError, ValueError) as e:
            # Local problems (bad usage, missing file) keep the session alive
            print(e, file=out)
        else:
            print_entry(entry, out)
        print(PROMPT, end="", file=out, flush=True)
    return 0


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.host:
        parser.print_usage()
        return 2

    configure_logging(args.debug)

    with Client(args.host, args.port, args.timeout) as client:
        try:
            client.login(args.user, args.password)
        except FTPError as e:
            print(e)
            return 1
        logger.info(f"Logged in to {args.host}:{args.port} as {args.user}")
        return run_shell(CommandHandler(client), sys.stdin)
