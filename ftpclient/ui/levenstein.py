from functools import lru_cache

from ftpclient.core.commands import ALIASES

COMMANDS = [
    "USER",
    "PASS",
    "ACCT",
    "CWD",
    "CDUP",
    "SMNT",
    "QUIT",
    "REIN",
    "PASV",
    "TYPE",
    "STRU",
    "MODE",
    "RETR",
    "STOR",
    "STOU",
    "APPE",
    "ALLO",
    "ABOR",
    "RNFR",
    "RNTO",
    "DELE",
    "RMD",
    "MKD",
    "PWD",
    "LIST",
    "NLST",
    "SITE",
    "SYST",
    "STAT",
    "HELP",
    "NOOP"
]


@lru_cache(maxsize=1024)
def _levenstein(s1: str, s2: str) -> int:
    if len(s1) == 0:
        return len(s2)
    if len(s2) == 0:
        return len(s1)
    if s1[0] == s2[0]:
        return _levenstein(s1[1:], s2[1:])
    insert = _levenstein(s1, s2[1:])
    deleted = _levenstein(s1[1:], s2)
    change = _levenstein(s1[1:], s2[1:])
    return 1 + min(insert, deleted, change)


def get_suggestion(cmd: str, max_distance: int = 3) -> str:
    """Closest FTP verb or shell alias, or ``""`` if nothing is close enough."""
    dis = float('inf')
    suggestion = ""
    candidates = COMMANDS + sorted(ALIASES)
    for command in candidates:
        d = _levenstein(cmd.upper() if command.isupper() else cmd.lower(), command)
        if d < dis:
            dis = d
            suggestion = command
    return suggestion if dis <= max_distance else ""
