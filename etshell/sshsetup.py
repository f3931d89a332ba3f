"""Starting the remote terminal daemon over ssh and checking its id/passkey reply."""

from __future__ import annotations

import logging
import os
import secrets
import string
import subprocess

__all__ = [
    "SshSetupError",
    "gen_random",
    "gen_command",
    "extract_idpasskey",
    "extract_jump_idpasskey",
    "setup_ssh",
]

logger = logging.getLogger(__name__)

ALPHANUM = string.digits + string.ascii_uppercase + string.ascii_lowercase
ID_LENGTH = 16
PASSKEY_LENGTH = 32
IDPASSKEY_MARKER = "IDPASSKEY:"
_IDPASSKEY_LENGTH = ID_LENGTH + 1 + PASSKEY_LENGTH
_READ_LIMIT = 4096
_DEFAULT_TERM = "xterm-256color"


class SshSetupError(RuntimeError):
    """Raised when the remote daemon cannot be started or answers wrongly."""


def gen_random(length: int) -> str:
    """Return a random string of *length* letters and digits."""
    return "".join(secrets.choice(ALPHANUM) for _ in range(length))


def gen_command(
    passkey: str,
    id_: str,
    client_term: str,
    user: str,
    kill: bool,
    command_prefix: str,
    options: str,
) -> str:
    """Build the shell command that feeds the id/passkey to the remote terminal."""
    command = (
        f'echo "{id_}/{passkey}_{client_term}\n" | '
        f"{command_prefix} etterminal {options}"
    )
    if kill:
        return f"pkill etterminal -u {user}; {command}"
    return command


def _split_pair(text: str, source: str) -> tuple[str, str]:
    parts = text.split("/")
    if len(parts) < 2:
        raise SshSetupError(f"Error initializing connection: malformed id/passkey {source!r}")
    return parts[0], parts[1]


def extract_idpasskey(output: str) -> tuple[str, str]:
    """Find the ``IDPASSKEY:id/passkey`` reply in the daemon's output."""
    index = output.find(IDPASSKEY_MARKER)
    if index < 0:
        raise SshSetupError(
            f"Error in authentication with etserver: {output}, please make sure "
            "you don't print anything in server's .bashrc/.zshrc"
        )
    start = index + len(IDPASSKEY_MARKER)
    return _split_pair(output[start : start + _IDPASSKEY_LENGTH], output)


def extract_jump_idpasskey(output: str) -> tuple[str, str]:
    """Read the id/passkey reply printed by the jump host daemon."""
    parts = output.split(":")
    if len(parts) < 2:
        raise SshSetupError(f"Error initializing connection: no id/passkey in {output!r}")
    pair = parts[1].rstrip(" \n\r\t")[:_IDPASSKEY_LENGTH]
    return _split_pair(pair, output)


def _run_ssh(argv: list[str]) -> str:
    try:
        completed = subprocess.run(argv, stdout=subprocess.PIPE, check=False)
    except OSError as exc:
        raise SshSetupError(f"cannot run ssh: {exc}") from exc
    return (completed.stdout or b"")[:_READ_LIMIT].decode("utf-8", "replace")


def _check_pair(expected: tuple[str, str], returned: tuple[str, str]) -> None:
    if returned != expected:
        raise SshSetupError(
            f"client/server idpasskey doesn't match: {expected[0]} != {returned[0]} "
            f"or {expected[1]} != {returned[1]}"
        )


def setup_ssh(
    user: str,
    host: str,
    host_alias: str,
    port: int,
    jumphost: str,
    jport: int,
    kill: bool,
    vlevel: int,
    cmd_prefix: str,
) -> str:
    """Start the terminal daemon on the destination (and jump host) via ssh.

    Returns the ``id/passkey`` pair the client must use to connect.
    """
    client_term = os.environ.get("TERM", _DEFAULT_TERM)
    passkey = gen_random(PASSKEY_LENGTH)
    id_ = gen_random(ID_LENGTH)
    cmdoptions = f"--verbose={vlevel}"

    script = gen_command(passkey, id_, client_term, user, kill, cmd_prefix, cmdoptions)
    user_prefix = f"{user}@" if user else ""
    if jumphost:
        argv = ["ssh", "-J", user_prefix + jumphost, user_prefix + host_alias, script]
    else:
        argv = ["ssh", user_prefix + host_alias, script]

    output = _run_ssh(argv)
    if not output:
        raise SshSetupError(
            "Error starting ET process through ssh, please make sure your ssh works first"
        )
    _check_pair((id_, passkey), extract_idpasskey(output))
    logger.info("etserver started")

    if jumphost:
        jump_options = f"{cmdoptions} --jump --dsthost={host} --dstport={port}"
        jump_script = gen_command(
            passkey, id_, client_term, user, kill, cmd_prefix, jump_options
        )
        jump_script = f"$SHELL -lc '{jump_script}'"
        output = _run_ssh(["ssh", jumphost, jump_script])
        if not output:
            raise SshSetupError("etserver jumpclient failed to start")
        _check_pair((id_, passkey), extract_jump_idpasskey(output))
        logger.info("jump client started.")

    return f"{id_}/{passkey}"