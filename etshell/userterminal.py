"""The remote side of a session: a login shell running on a pseudo terminal."""

from __future__ import annotations

import contextlib
import fcntl
import logging
import os
import pty
import pwd
import termios
from abc import ABC, abstractmethod

from .console import TerminalInfo

__all__ = ["UserTerminal", "PseudoUserTerminal"]

logger = logging.getLogger(__name__)

ET_VERSION = "0.1.0"


class UserTerminal(ABC):
    """A terminal that runs the user's shell for one session."""

    @abstractmethod
    def setup(self, router_fd: int) -> int:
        """Start the terminal and return the descriptor to talk to it."""

    @abstractmethod
    def run_terminal(self) -> None:
        """Run the shell; called in the process that owns the terminal."""

    @abstractmethod
    def handle_session_end(self) -> object:
        """Wait for the shell to finish."""

    @abstractmethod
    def cleanup(self) -> None:
        """Release what the session held."""

    @abstractmethod
    def fileno(self) -> int:
        """Return the descriptor of the terminal."""

    @abstractmethod
    def set_info(self, info: TerminalInfo) -> None:
        """Change the window size of the terminal."""


class PseudoUserTerminal(UserTerminal):
    """Runs the user's login shell on a freshly forked pseudo terminal."""

    def __init__(self) -> None:
        self.pid: int | None = None
        self._master_fd: int | None = None

    def setup(self, router_fd: int) -> int:
        """Fork a child on a new pty running the shell; return the master descriptor."""
        pid, master_fd = pty.fork()
        if pid == 0:
            try:
                with contextlib.suppress(OSError):
                    os.close(router_fd)
                self.run_terminal()
            finally:
                os._exit(0)
        self.pid = pid
        self._master_fd = master_fd
        return master_fd

    def run_terminal(self) -> None:
        """Replace this process with the user's login shell, started in the home directory."""
        os.chdir(pwd.getpwuid(os.getuid()).pw_dir)
        shell = os.environ["SHELL"]
        logger.debug("Child process launching terminal %s", shell)
        os.environ["ET_VERSION"] = ET_VERSION
        os.execl(shell, shell, "--login")

    def handle_session_end(self) -> int:
        """Wait for the shell to exit and return its exit code."""
        if self.pid is None:
            raise ValueError("terminal has not been set up")
        _, status = os.waitpid(self.pid, 0)
        return os.waitstatus_to_exitcode(status)

    def cleanup(self) -> None:
        """Close the master side of the pty."""
        if self._master_fd is not None:
            with contextlib.suppress(OSError):
                os.close(self._master_fd)
            self._master_fd = None

    def fileno(self) -> int:
        if self._master_fd is None:
            raise ValueError("terminal has not been set up")
        return self._master_fd

    def set_info(self, info: TerminalInfo) -> None:
        """Apply a new window size to the pty."""
        fcntl.ioctl(self.fileno(), termios.TIOCSWINSZ, info.to_winsize())