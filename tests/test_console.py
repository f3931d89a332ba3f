import fcntl
import os
import pty
import termios
import threading

import pytest

from etshell.console import Console, PseudoTerminalConsole, TerminalInfo


class PipeConsole(Console):
    def __init__(self):
        self.read_fd, self.write_fd = os.pipe()

    def terminal_info(self):
        return TerminalInfo(1, 1, 8, 10)

    def setup(self):
        pass

    def teardown(self):
        os.close(self.read_fd)
        os.close(self.write_fd)

    def fileno(self):
        return self.write_fd


@pytest.fixture
def pty_pair():
    master, slave = pty.openpty()
    yield master, slave
    os.close(master)
    os.close(slave)


def _read_exactly(fd, count):
    chunks = []
    remaining = count
    while remaining:
        chunk = os.read(fd, remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def test_terminal_info_winsize_round_trip():
    info = TerminalInfo(24, 80, 640, 480)
    assert TerminalInfo.from_winsize(info.to_winsize()) == info


def test_terminal_info_winsize_size():
    assert len(TerminalInfo(1, 2, 3, 4).to_winsize()) == 8


def test_console_is_abstract():
    with pytest.raises(TypeError):
        Console()


def test_console_write_large_buffer():
    console = PipeConsole()
    payload = bytes((i % 26) + 65 for i in range(64 * 1024 - 1)) + b"\0"
    received = []
    reader = threading.Thread(
        target=lambda: received.append(_read_exactly(console.read_fd, len(payload)))
    )
    reader.start()
    Console.write(console, payload)
    reader.join()
    console.teardown()
    assert received == [payload]


def test_console_write_accepts_text():
    console = PipeConsole()
    Console.write(console, "ET Phone Home")
    data = os.read(console.read_fd, 100)
    console.teardown()
    assert data == b"ET Phone Home"


def test_pseudo_console_reads_window_size(pty_pair):
    _, slave = pty_pair
    info = TerminalInfo(24, 80, 640, 480)
    fcntl.ioctl(slave, termios.TIOCSWINSZ, info.to_winsize())
    console = PseudoTerminalConsole(slave, slave)
    assert console.terminal_info() == info


def test_pseudo_console_fileno_is_input(pty_pair):
    _, slave = pty_pair
    console = PseudoTerminalConsole(slave, slave)
    assert console.fileno() == slave


def test_pseudo_console_setup_makes_raw_and_teardown_restores(pty_pair):
    _, slave = pty_pair
    original = termios.tcgetattr(slave)
    console = PseudoTerminalConsole(slave, slave)
    console.setup()
    raw = termios.tcgetattr(slave)
    assert raw[3] & termios.ICANON == 0
    assert raw[3] & termios.ECHO == 0
    console.teardown()
    assert termios.tcgetattr(slave) == original


def test_pseudo_console_write_reaches_master(pty_pair):
    master, slave = pty_pair
    info = TerminalInfo(30, 100, 800, 600)
    fcntl.ioctl(slave, termios.TIOCSWINSZ, info.to_winsize())
    console = PseudoTerminalConsole(slave, slave)
    console.write(b"hello")
    assert _read_exactly(master, 5) == b"hello"
    assert console.terminal_info() == info