"""Home directory lookup and ssh-style path expansion (``~`` and ``%`` escapes)."""

from __future__ import annotations

import os
import pwd
import socket

__all__ = [
    "PathExpansionError",
    "get_user_home_dir",
    "get_local_username",
    "expand_tilde",
    "expand_escape",
]

MAX_BUF_SIZE = 4096
_MAX_USERNAME = 128


class PathExpansionError(ValueError):
    """Raised when a path cannot be expanded."""


def get_user_home_dir() -> str | None:
    """Return the current user's home directory, falling back to ``$HOME``."""
    try:
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return os.environ.get("HOME")


def get_local_username() -> str | None:
    """Return the login name of the current user, or None if it is unknown."""
    try:
        return pwd.getpwuid(os.getuid()).pw_name
    except KeyError:
        return None


def expand_tilde(path: str) -> str:
    """Expand a leading ``~`` or ``~user/`` in *path*."""
    if not path.startswith("~"):
        return path
    rest = path[1:]

    slash = rest.find("/")
    if slash > 0:
        user = rest[:slash]
        if len(user) >= _MAX_USERNAME:
            raise PathExpansionError(f"user name too long in {path!r}")
        try:
            home = pwd.getpwnam(user).pw_dir
        except KeyError:
            raise PathExpansionError(f"unknown user {user!r}") from None
        return home + rest[slash:]

    home = get_user_home_dir()
    if home is None:
        raise PathExpansionError("cannot determine home directory")
    return home + rest


def _escape_value(
    code: str,
    sshdir: str | None,
    host: str | None,
    username: str | None,
    port: int,
) -> str | None:
    if code == "d":
        return sshdir
    if code == "u":
        return get_local_username()
    if code == "l":
        return socket.gethostname()
    if code == "h":
        return host
    if code == "r":
        return username
    if code == "p":
        return str(port) if port < 65536 else None
    raise PathExpansionError(f"wrong escape sequence %{code}")


def expand_escape(
    path: str,
    sshdir: str | None = None,
    host: str | None = None,
    username: str | None = None,
    port: int = 0,
) -> str:
    """Expand ``~`` and the ``%d %u %l %h %r %p`` escapes in *path*.

    A lone ``%`` at the end of the path is dropped.
    """
    expanded = expand_tilde(path)
    if len(expanded) > MAX_BUF_SIZE:
        raise PathExpansionError("string to expand too long")

    out: list[str] = []
    length = 0
    chars = iter(expanded)
    for ch in chars:
        if ch != "%":
            piece = ch
        else:
            code = next(chars, None)
            if code is None:
                break
            value = _escape_value(code, sshdir, host, username, port)
            if value is None:
                raise PathExpansionError(f"no value for escape %{code}")
            piece = value
        length += len(piece)
        if length >= MAX_BUF_SIZE:
            raise PathExpansionError("string too long")
        out.append(piece)
    return "".join(out)