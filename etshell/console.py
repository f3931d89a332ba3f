"""The local side of a session: the terminal the user types into."""

from __future__ import annotations

import fcntl
import os
import struct
import sys
import termios
import tty
from abc import ABC, abstractmethod
from dataclasses import dataclass

__all__ = ["TerminalInfo", "Console", "PseudoTerminalConsole"]

_WINSIZE = struct.Struct("HHHH")


@dataclass(frozen=True)
class TerminalInfo:
    """Window size of a terminal, in character cells and pixels."""

    row: int = 0
    column: int = 0
    width: int = 0
    height: int = 0

    def to_winsize(self) -> bytes:
        """Pack into the ``struct winsize`` layout used by the tty ioctls."""
        return _WINSIZE.pack(self.row, self.column, self.width, self.height)

    @classmethod
    def from_winsize(cls, data: bytes) -> TerminalInfo:
        """Unpack a ``struct winsize`` buffer."""
        row, column, width, height = _WINSIZE.unpack(data[: _WINSIZE.size])
        return cls(row, column, width, height)


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


class Console(ABC):
    """A terminal the client reads keystrokes from and writes output to."""

    @abstractmethod
    def terminal_info(self) -> TerminalInfo:
        """Return the current window size."""

    @abstractmethod
    def setup(self) -> None:
        """Prepare the terminal for a session."""

    @abstractmethod
    def teardown(self) -> None:
        """Restore the terminal after a session."""

    @abstractmethod
    def fileno(self) -> int:
        """Return the file descriptor used for reading and writing."""

    def write(self, data: bytes | str) -> None:
        """Write all of *data* to the console."""
        if isinstance(data, str):
            data = data.encode("utf-8", "surrogateescape")
        _write_all(self.fileno(), data)


class PseudoTerminalConsole(Console):
    """The controlling terminal of this process, switched to raw mode for a session."""

    def __init__(self, input_fd: int | None = None, output_fd: int | None = None) -> None:
        self.input_fd = sys.stdin.fileno() if input_fd is None else input_fd
        self.output_fd = sys.stdout.fileno() if output_fd is None else output_fd
        self._backup: list | None = None

    def setup(self) -> None:
        """Save the terminal settings and switch to raw mode."""
        self._backup = termios.tcgetattr(self.input_fd)
        tty.setraw(self.input_fd, termios.TCSANOW)

    def teardown(self) -> None:
        """Put back the settings saved by :meth:`setup`."""
        if self._backup is not None:
            termios.tcsetattr(self.input_fd, termios.TCSANOW, self._backup)

    def terminal_info(self) -> TerminalInfo:
        """Read the window size of the output terminal."""
        data = fcntl.ioctl(self.output_fd, termios.TIOCGWINSZ, bytes(_WINSIZE.size))
        return TerminalInfo.from_winsize(data)

    def fileno(self) -> int:
        return self.input_fd