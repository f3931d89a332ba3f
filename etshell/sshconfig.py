"""Reader for the subset of ssh_config that matters for opening a session."""

from __future__ import annotations

import logging
import os
import re
import string as _string
from enum import IntEnum
from typing import Callable

from .matching import MatchResult, match_hostname
from .sshoptions import OptionError, SshOptions
from .sshpaths import PathExpansionError, expand_escape

__all__ = ["ConfigOpcode", "SshConfigParser", "get_opcode", "parse_ssh_config_file"]

logger = logging.getLogger(__name__)

_NUL = "\0"
_BLANK = " \t"
_SPACE = " \t\n\v\f\r"
_ASCII_LOWER = str.maketrans(_string.ascii_uppercase, _string.ascii_lowercase)
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class ConfigOpcode(IntEnum):
    """Keywords understood in an ssh_config file."""

    UNSUPPORTED = -1
    HOST = 0
    HOSTNAME = 1
    PORT = 2
    USERNAME = 3
    TIMEOUT = 4
    PROTOCOL = 5
    STRICTHOSTKEYCHECK = 6
    KNOWNHOSTS = 7
    PROXYCOMMAND = 8
    GSSAPISERVERIDENTITY = 9
    GSSAPICLIENTIDENTITY = 10
    GSSAPIDELEGATECREDENTIALS = 11
    INCLUDE = 12
    PROXYJUMP = 13


_KEYWORDS = {
    "host": ConfigOpcode.HOST,
    "hostname": ConfigOpcode.HOSTNAME,
    "port": ConfigOpcode.PORT,
    "user": ConfigOpcode.USERNAME,
    "connecttimeout": ConfigOpcode.TIMEOUT,
    "protocol": ConfigOpcode.PROTOCOL,
    "stricthostkeychecking": ConfigOpcode.STRICTHOSTKEYCHECK,
    "userknownhostsfile": ConfigOpcode.KNOWNHOSTS,
    "proxycommand": ConfigOpcode.PROXYCOMMAND,
    "gssapiserveridentity": ConfigOpcode.GSSAPISERVERIDENTITY,
    "gssapiclientidentity": ConfigOpcode.GSSAPICLIENTIDENTITY,
    "gssapidelegatecredentials": ConfigOpcode.GSSAPIDELEGATECREDENTIALS,
    "include": ConfigOpcode.INCLUDE,
    "proxyjump": ConfigOpcode.PROXYJUMP,
}

# Keywords that may appear any number of times while a block applies.
_UNTRACKED = {ConfigOpcode.HOST, ConfigOpcode.UNSUPPORTED, ConfigOpcode.INCLUDE}


def get_opcode(keyword: str) -> ConfigOpcode:
    """Return the opcode for *keyword*, compared without regard to ASCII case."""
    return _KEYWORDS.get(keyword.translate(_ASCII_LOWER), ConfigOpcode.UNSUPPORTED)


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def _strip_trailing(line: str) -> str:
    stripped = line.rstrip(_SPACE)
    # The first character of a line is never stripped.
    if not stripped and line:
        return line[0]
    return stripped


class _Cursor:
    """Splits one config line into a command remainder and tokens."""

    def __init__(self, line: str) -> None:
        self._buf = list(line) + [_NUL]
        self._pos = 0

    def _text(self, start: int) -> str:
        end = self._buf.index(_NUL, start)
        return "".join(self._buf[start:end])

    def _command_start(self) -> int:
        buf = self._buf
        c = self._pos
        if c >= len(buf):
            return len(buf) - 1
        while buf[c] in _BLANK and buf[c] != _NUL:
            c += 1
        if buf[c] == '"':
            c += 1
            start = c
            while buf[c] != _NUL:
                if buf[c] == '"':
                    buf[c] = _NUL
                    self._pos = c + 1
                    return start
                c += 1
        start = c
        while buf[c] != _NUL:
            if buf[c] == "\n":
                buf[c] = _NUL
                self._pos = c + 1
                return start
            c += 1
        self._pos = c + 1
        return start

    def command(self) -> str:
        """Return the rest of the line, or the contents of a leading quoted string."""
        return self._text(self._command_start())

    def token(self) -> str:
        """Return the next word, ending at a blank or ``=``."""
        buf = self._buf
        start = c = self._command_start()
        while buf[c] != _NUL:
            if buf[c] in _BLANK or buf[c] == "=":
                buf[c] = _NUL
                self._pos = c + 1
                return self._text(start)
            c += 1
        self._pos = c + 1
        return self._text(start)

    def str_token(self) -> str | None:
        return self.token() or None

    def int_token(self, notfound: int) -> int:
        text = self.token()
        if not text:
            return notfound
        number = _leading_int(text)
        return notfound if number is None else number

    def yesno_token(self, notfound: int) -> int:
        text = self.str_token()
        if text is None:
            return notfound
        lowered = text.translate(_ASCII_LOWER)
        if lowered.startswith("yes"):
            return 1
        if lowered.startswith("no"):
            return 0
        return notfound


def _apply(setter: Callable[[object], None], value: object) -> None:
    try:
        setter(value)
    except OptionError as exc:
        logger.debug("ignoring config value %r: %s", value, exc)


class SshConfigParser:
    """Applies ssh_config lines to an :class:`SshOptions`, first value winning."""

    def __init__(self, options: SshOptions) -> None:
        self.options = options
        self.parsing = True
        self.seen: set[ConfigOpcode] = set()
        self._handlers: dict[ConfigOpcode, Callable[[_Cursor], None]] = {
            ConfigOpcode.INCLUDE: self._include,
            ConfigOpcode.HOST: self._host,
            ConfigOpcode.HOSTNAME: self._hostname,
            ConfigOpcode.PORT: self._port,
            ConfigOpcode.USERNAME: self._user,
            ConfigOpcode.PROXYJUMP: self._proxy_jump,
            ConfigOpcode.PROTOCOL: self._protocol,
            ConfigOpcode.TIMEOUT: self._timeout,
            ConfigOpcode.STRICTHOSTKEYCHECK: self._strict,
            ConfigOpcode.KNOWNHOSTS: self._known_hosts,
            ConfigOpcode.PROXYCOMMAND: self._proxy_command,
            ConfigOpcode.GSSAPISERVERIDENTITY: self._gss_server,
            ConfigOpcode.GSSAPICLIENTIDENTITY: self._gss_client,
            ConfigOpcode.GSSAPIDELEGATECREDENTIALS: self._gss_delegate,
        }

    def parse_file(self, filename: str | os.PathLike[str]) -> bool:
        """Parse every line of *filename*; return False if it cannot be opened."""
        try:
            handle = open(filename, "rb")
        except OSError:
            logger.info("%s not found", filename)
            return False
        with handle:
            for raw in handle:
                self.parse_line(raw.decode("utf-8", "surrogateescape"))
        return True

    def parse_line(self, line: str) -> None:
        """Apply a single config line."""
        cursor = _Cursor(_strip_trailing(line))
        keyword = cursor.token()
        if not keyword or keyword[0] in "#\n":
            return

        opcode = get_opcode(keyword)
        if self.parsing and opcode not in _UNTRACKED:
            if opcode in self.seen:
                return
            self.seen.add(opcode)

        handler = self._handlers.get(opcode)
        if handler is None:
            logger.info("unsupported config line: %s, ignored", line)
            return
        handler(cursor)

    def _include(self, cursor: _Cursor) -> None:
        path = cursor.str_token()
        if path and self.parsing:
            self.parse_file(path)

    def _host(self, cursor: _Cursor) -> None:
        self.parsing = False
        host = self.options.host
        lowered = host.translate(_ASCII_LOWER) if host is not None else None
        result = MatchResult.NONE
        while (pattern := cursor.str_token()) is not None:
            if result >= 0:
                result = match_hostname(lowered, pattern)
                if result < 0:
                    self.parsing = False
                elif result > 0:
                    self.parsing = True

    def _hostname(self, cursor: _Cursor) -> None:
        value = cursor.str_token()
        if value and self.parsing:
            opts = self.options
            try:
                expanded = expand_escape(
                    value, opts.sshdir, opts.host, opts.username, opts.port
                )
            except PathExpansionError:
                expanded = value
            _apply(opts.set_host, expanded)

    def _port(self, cursor: _Cursor) -> None:
        if self.options.port == 0:
            value = cursor.str_token()
            if value and self.parsing:
                _apply(self.options.set_port_str, value)

    def _user(self, cursor: _Cursor) -> None:
        if self.options.username is None:
            value = cursor.str_token()
            if value and self.parsing:
                _apply(self.options.set_user, value)

    def _proxy_jump(self, cursor: _Cursor) -> None:
        if self.options.proxy_jump is None:
            value = cursor.str_token()
            if value and self.parsing:
                _apply(self.options.set_proxy_jump, value)

    def _protocol(self, cursor: _Cursor) -> None:
        value = cursor.str_token()
        if not (value and self.parsing):
            return
        opts = self.options
        _apply(opts.set_ssh1, 0)
        _apply(opts.set_ssh2, 0)
        for piece in filter(None, value.split(",")):
            version = _leading_int(piece) or 0
            if version == 1:
                _apply(opts.set_ssh1, 1)
            elif version == 2:
                _apply(opts.set_ssh2, 1)

    def _timeout(self, cursor: _Cursor) -> None:
        value = cursor.int_token(-1)
        if value >= 0 and self.parsing:
            _apply(self.options.set_timeout, value)

    def _strict(self, cursor: _Cursor) -> None:
        value = cursor.yesno_token(-1)
        if value >= 0 and self.parsing:
            _apply(self.options.set_strict_host_key_checking, value)

    def _known_hosts(self, cursor: _Cursor) -> None:
        value = cursor.str_token()
        if value and self.parsing:
            _apply(self.options.set_known_hosts, value)

    def _proxy_command(self, cursor: _Cursor) -> None:
        value = cursor.command()
        if self.parsing:
            _apply(self.options.set_proxy_command, value)

    def _gss_server(self, cursor: _Cursor) -> None:
        value = cursor.str_token()
        if value and self.parsing:
            _apply(self.options.set_gssapi_server_identity, value)

    def _gss_client(self, cursor: _Cursor) -> None:
        value = cursor.str_token()
        if value and self.parsing:
            _apply(self.options.set_gssapi_client_identity, value)

    def _gss_delegate(self, cursor: _Cursor) -> None:
        value = cursor.yesno_token(-1)
        if value >= 0 and self.parsing:
            _apply(self.options.set_gssapi_delegate_credentials, value)


def parse_ssh_config_file(
    options: SshOptions, filename: str | os.PathLike[str]
) -> bool:
    """Apply an ssh_config file to *options*; return False if it was not found."""
    return SshConfigParser(options).parse_file(filename)