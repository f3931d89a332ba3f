"""Command-line handling shared by the client, terminal and server entry points."""

from __future__ import annotations

import argparse
import re
from dataclasses import dataclass
from pathlib import Path

from .sshpaths import get_local_username

__all__ = [
    "Destination",
    "ServerSettings",
    "build_client_parser",
    "parse_destination",
    "resolve_username",
    "resolve_jumphost",
    "split_idpasskey",
    "parse_terminal_handshake",
    "load_server_config",
]

DEFAULT_PORT = 2022
DEFAULT_MAX_LOG_SIZE = "20971520"
PASSKEY_LENGTH = 32
_TRAILING_SPACE = " \n\r\t"
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_COMMENT_PREFIXES = (";", "#")


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def _strict_int(text: str, what: str) -> int:
    number = _leading_int(text)
    if number is None:
        raise ValueError(f"invalid {what}: {text!r}")
    return number


def _lenient_int(text: str) -> int:
    number = _leading_int(text)
    return 0 if number is None else number


@dataclass(frozen=True)
class Destination:
    """Where the client connects: ``[user@]host[:port]`` split into its parts."""

    host: str
    port: int
    username: str = ""


@dataclass(frozen=True)
class ServerSettings:
    """Settings the server reads from its configuration file."""

    port: int = DEFAULT_PORT
    verbose: int | None = None
    silent: bool = False
    max_log_size: str = DEFAULT_MAX_LOG_SIZE


def build_client_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the client command."""
    parser = argparse.ArgumentParser(
        prog="et",
        description="Remote shell for the busy and impatient",
        usage="%(prog)s [options] [user@]hostname[:port]",
    )
    parser.add_argument("--version", action="store_true", help="Print version")
    parser.add_argument("-u", "--username", default="", help="Username")
    parser.add_argument("host", nargs="?", help="Remote host name")
    parser.add_argument(
        "-p", "--port", type=int, default=DEFAULT_PORT, help="Remote machine port"
    )
    parser.add_argument("-c", "--command", default="", help="Run command on connect")
    parser.add_argument(
        "--prefix",
        default="",
        help="Add prefix when launching etterminal on server side",
    )
    parser.add_argument(
        "-t",
        "--tunnel",
        default="",
        help=(
            "Tunnel: Array of source:destination ports or "
            "srcStart-srcEnd:dstStart-dstEnd (inclusive) port ranges (e.g. "
            "10080:80,10443:443, 10090-10092:8000-8002)"
        ),
    )
    parser.add_argument(
        "-r",
        "--reversetunnel",
        default="",
        help=(
            "Reverse Tunnel: Array of source:destination ports or "
            "srcStart-srcEnd:dstStart-dstEnd (inclusive) port ranges"
        ),
    )
    parser.add_argument(
        "--jumphost", default="", help="jumphost between localhost and destination"
    )
    parser.add_argument(
        "--jport", type=int, default=DEFAULT_PORT, help="Jumphost machine port"
    )
    parser.add_argument(
        "-x",
        "--kill-other-sessions",
        action="store_true",
        help="kill all old sessions belonging to the user",
    )
    parser.add_argument(
        "-v", "--verbose", type=int, default=0, help="Enable verbose logging"
    )
    parser.add_argument("--logtostdout", action="store_true", help="Write log to stdout")
    parser.add_argument("--silent", action="store_true", help="Disable logging")
    parser.add_argument(
        "-N", "--no-terminal", action="store_true", help="Do not create a terminal"
    )
    return parser


def parse_destination(arg: str, default_port: int = DEFAULT_PORT) -> Destination:
    """Split ``[user@]host[:port]``; the port defaults to *default_port*."""
    username = ""
    user, sep, rest = arg.partition("@")
    if sep:
        username, arg = user, rest
    port = default_port
    host, sep, port_text = arg.partition(":")
    if sep:
        port = _strict_int(port_text, "port")
        arg = host
    return Destination(host=arg, port=port, username=username)


def resolve_username(cli_username: str | None, config_username: str | None) -> str:
    """Pick the user name: command line, then ssh config, then the local user."""
    if cli_username:
        return cli_username
    if config_username is not None:
        return config_username
    local = get_local_username()
    if local is None:
        raise ValueError("cannot determine local user name")
    return local


def resolve_jumphost(cli_jumphost: str | None, proxy_jump: str | None) -> str:
    """Pick the jump host: command line first, else the ssh config ProxyJump."""
    jumphost = cli_jumphost or ""
    if proxy_jump and not jumphost:
        user_host, sep, _ = proxy_jump.partition(":")
        if sep:
            _, at, host = user_host.partition("@")
            if at:
                jumphost = host
        else:
            jumphost = proxy_jump
    return jumphost


def split_idpasskey(pair: str) -> tuple[str, str]:
    """Split an ``id/passkey`` pair, checking that the passkey has 32 characters."""
    trimmed = pair.rstrip(_TRAILING_SPACE)
    id_, sep, passkey = trimmed.partition("/")
    if not sep:
        raise ValueError(f"Invalid idPasskey id/key pair: {trimmed}")
    if len(passkey) != PASSKEY_LENGTH:
        raise ValueError(f"Invalid/missing passkey: {passkey} {len(passkey)}")
    return id_, passkey


def parse_terminal_handshake(line: str) -> tuple[str, str]:
    """Split the ``id/passkey_TERM`` line fed to the terminal on stdin."""
    tokens = line.rstrip("\r\n").split("_")
    if len(tokens) < 2:
        raise ValueError(f"expected id/passkey_TERM, got {line!r}")
    return tokens[0], tokens[1]


def _read_ini(path: str | Path) -> dict[tuple[str, str], str]:
    try:
        text = Path(path).read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as exc:
        raise ValueError(f"Invalid config file: {path}") from exc

    values: dict[tuple[str, str], str] = {}
    section = ""
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue
        if line.startswith("["):
            end = line.find("]")
            if end < 0:
                raise ValueError(f"Invalid config file: {path}")
            section = line[1:end].strip().lower()
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        # With several values for one key, the first one counts.
        values.setdefault((section, key.strip().lower()), value.strip())
    return values


def load_server_config(path: str | Path, port_given: bool) -> ServerSettings:
    """Read the server's ini file; its port is ignored when *port_given* is true."""
    values = _read_ini(path)

    port = 0
    if not port_given:
        port_text = values.get(("networking", "port"))
        if port_text is not None:
            port = _strict_int(port_text, "port")

    verbose_text = values.get(("debug", "verbose"))
    verbose = _lenient_int(verbose_text) if verbose_text is not None else None

    silent_text = values.get(("debug", "silent"))
    silent = silent_text is not None and _lenient_int(silent_text) != 0

    max_log_size = DEFAULT_MAX_LOG_SIZE
    logsize_text = values.get(("debug", "logsize"))
    if logsize_text is not None and _lenient_int(logsize_text) != 0:
        max_log_size = logsize_text

    return ServerSettings(
        port=port or DEFAULT_PORT,
        verbose=verbose,
        silent=silent,
        max_log_size=max_log_size,
    )