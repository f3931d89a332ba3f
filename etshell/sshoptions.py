"""Connection options collected from the command line and ssh_config files."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .sshpaths import PathExpansionError, expand_escape, get_local_username

__all__ = ["OptionError", "SshOptions"]

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class OptionError(ValueError):
    """Raised when an option is given an invalid value."""


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def _require(value: object, what: str) -> None:
    if value is None or value == "":
        raise OptionError(f"invalid {what}")


@dataclass
class SshOptions:
    """Settings for reaching a remote host, as ssh understands them."""

    username: str | None = None
    host: str | None = None
    sshdir: str | None = None
    knownhosts: str | None = None
    proxy_command: str | None = None
    proxy_jump: str | None = None
    timeout: int = 0
    port: int = 0
    strict_host_key_checking: int = 0
    ssh2: int = 0
    ssh1: int = 0
    gss_server_identity: str | None = None
    gss_client_identity: str | None = None
    gss_delegate_creds: int = 0

    def set_host(self, value: str | None) -> None:
        """Set the host; a ``user@host`` value sets the user name as well."""
        _require(value, "host")
        user, sep, host = value.partition("@")
        if sep:
            self.host = host
            self.username = user
        else:
            self.host = value

    def set_port(self, value: int | None) -> None:
        """Set the port from a positive integer, kept to 16 bits."""
        if value is None or value <= 0:
            raise OptionError(f"invalid port {value!r}")
        self.port = value & 0xFFFF

    def set_port_str(self, value: str | None) -> None:
        """Set the port from the leading decimal number of a string."""
        _require(value, "port")
        number = _leading_int(value)
        if number is None or number <= 0:
            raise OptionError(f"invalid port {value!r}")
        self.port = number & 0xFFFF

    def set_user(self, value: str | None) -> None:
        """Set the user name; None selects the local user."""
        self.username = None
        if value is None:
            local = get_local_username()
            if local is None:
                raise OptionError("cannot determine local user name")
            self.username = local
            return
        if value == "":
            raise OptionError("invalid user name")
        self.username = value

    def set_proxy_jump(self, value: str | None) -> None:
        """Set the ProxyJump host."""
        self.proxy_jump = None
        _require(value, "proxy jump")
        self.proxy_jump = value

    def set_known_hosts(self, value: str | None) -> None:
        """Set the known hosts file; None selects ``known_hosts`` in the ssh directory."""
        self.knownhosts = None
        if value is None:
            try:
                self.knownhosts = expand_escape(
                    "%d/known_hosts", self.sshdir, self.host, self.username, self.port
                )
            except PathExpansionError as exc:
                raise OptionError(f"cannot expand known hosts path: {exc}") from exc
            return
        if value == "":
            raise OptionError("invalid known hosts file")
        self.knownhosts = value

    def set_timeout(self, value: int | None) -> None:
        """Set the connection timeout in seconds."""
        if value is None or value < 0:
            raise OptionError(f"invalid timeout {value!r}")
        self.timeout = value & 0xFFFFFFFF

    def set_ssh1(self, value: int | None) -> None:
        """Allow or deny protocol version 1."""
        if value is None or value < 0:
            raise OptionError(f"invalid ssh1 flag {value!r}")
        self.ssh1 = value

    def set_ssh2(self, value: int | None) -> None:
        """Allow or deny protocol version 2."""
        if value is None or value < 0:
            raise OptionError(f"invalid ssh2 flag {value!r}")
        self.ssh2 = value & 0xFFFF

    def set_strict_host_key_checking(self, value: int | None) -> None:
        """Set StrictHostKeyChecking."""
        if value is None:
            raise OptionError("invalid strict host key checking value")
        self.strict_host_key_checking = value

    def set_proxy_command(self, value: str | None) -> None:
        """Set the proxy command; ``none`` (any case) disables it."""
        _require(value, "proxy command")
        self.proxy_command = None
        if value.lower() != "none":
            self.proxy_command = value

    def set_gssapi_server_identity(self, value: str | None) -> None:
        """Set the expected GSSAPI server identity."""
        _require(value, "GSSAPI server identity")
        self.gss_server_identity = value

    def set_gssapi_client_identity(self, value: str | None) -> None:
        """Set the GSSAPI client identity."""
        _require(value, "GSSAPI client identity")
        self.gss_client_identity = value

    def set_gssapi_delegate_credentials(self, value: int | None) -> None:
        """Set whether GSSAPI credentials are delegated."""
        if value is None:
            raise OptionError("invalid GSSAPI delegate credentials value")
        self.gss_delegate_creds = value & 0xFF