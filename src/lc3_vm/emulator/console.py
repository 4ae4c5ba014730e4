"""
Console I/O for the LC-3 Emulator
=================================

The LC-3 talks to the outside world through a single character console:
the keyboard (polled through the memory-mapped KBSR/KBDR registers or read
by the GETC/IN traps) and a byte-oriented display written by the OUT, PUTS,
PUTSP, IN and HALT traps.

This module provides:

- **InputSource**: protocol for anything that can supply characters
- **TerminalInput**: select()-based reader for a host file descriptor
- **BufferedInput**: scripted input for tests and automation
- **Console**: input source + output stream pair used by the emulator
- **raw_terminal**: context manager switching a TTY to non-canonical,
  non-echoing input for the duration of a run

Input sources return character codes as ints. End of input is reported as
EOF (-1), which the machine sees as 0xFFFF, the same value a C getchar()
returns once cast to a 16-bit word.

Example:
    >>> import io
    >>> console = Console(BufferedInput("y"), io.BytesIO())
    >>> console.read_char(lambda: False)
    121

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

import logging
import os
import select
import sys
import termios
from collections import deque
from contextlib import contextmanager
from typing import BinaryIO, Callable, Iterator, Optional, Protocol

from lc3_vm.errors import ExecutionInterrupted

logger = logging.getLogger(__name__)

# End-of-input marker returned by InputSource.read_char
EOF = -1


class InputSource(Protocol):
    """
    Protocol defining a character input source.

    The keyboard device and the trap routines interact with the host
    through this interface.
    """
    def poll(self) -> bool:
        """Return True if a character can be read without blocking."""
        ...

    def read_char(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Read one character code.

        Waits at most `timeout` seconds (forever if None). Returns None if
        nothing arrived in time and EOF once input is exhausted.
        """
        ...


class TerminalInput:
    """
    Character input from a host file descriptor (stdin by default).

    Uses select() with a zero timeout for polling so that reads of the
    keyboard status register never block, as on real hardware.
    """

    def __init__(self, fd: Optional[int] = None):
        self.fd = sys.stdin.fileno() if fd is None else fd

    def _ready(self, timeout: Optional[float]) -> bool:
        readable, _, _ = select.select([self.fd], [], [], timeout)
        return bool(readable)

    def poll(self) -> bool:
        return self._ready(0)

    def read_char(self, timeout: Optional[float] = None) -> Optional[int]:
        if not self._ready(timeout):
            return None
        data = os.read(self.fd, 1)
        if not data:
            return EOF
        return data[0]


class BufferedInput:
    """
    Scripted character input.

    Characters queued with feed() are handed out one at a time. Once the
    queue is empty every read reports EOF, so a program waiting on GETC
    never hangs a test.

    Example:
        >>> source = BufferedInput("ab")
        >>> source.read_char(), source.read_char(), source.read_char()
        (97, 98, -1)
    """

    def __init__(self, text: str = ""):
        self._pending: deque[int] = deque()
        self.feed(text)

    def feed(self, text: str) -> None:
        """Append characters to the input queue."""
        self._pending.extend(ord(ch) & 0xFF for ch in text)

    @property
    def pending(self) -> int:
        """Number of characters not yet read."""
        return len(self._pending)

    def poll(self) -> bool:
        return bool(self._pending)

    def read_char(self, timeout: Optional[float] = None) -> Optional[int]:
        if not self._pending:
            return EOF
        return self._pending.popleft()


class Console:
    """
    Input source and output stream pair used by the emulator.

    Output is written as raw bytes: each LC-3 character is the low byte of
    a word, so no text encoding is applied.

    Attributes:
        input: The InputSource characters are read from
        output: Binary stream characters are written to
        poll_interval: Seconds between stop-flag checks during blocking reads
    """

    def __init__(
        self,
        input_source: Optional[InputSource] = None,
        output: Optional[BinaryIO] = None,
        poll_interval: float = 0.1,
    ):
        self.input = input_source if input_source is not None else TerminalInput()
        self.output = output if output is not None else sys.stdout.buffer
        self.poll_interval = poll_interval

    # =========================================================================
    # Input
    # =========================================================================

    def poll(self) -> bool:
        """Non-blocking check for a pending character."""
        return self.input.poll()

    def read_char(self, should_stop: Callable[[], bool]) -> int:
        """
        Block until a character arrives and return it as a 16-bit word.

        The wait is split into poll_interval slices; between slices
        should_stop() is consulted so an interrupt is honoured even while
        the machine sits in GETC.

        Raises:
            ExecutionInterrupted: If should_stop() returns True before a
                character arrives
        """
        while True:
            code = self.input.read_char(self.poll_interval)
            if code is not None:
                return code & 0xFFFF
            if should_stop():
                raise ExecutionInterrupted("Interrupted while waiting for input")

    def read_available(self) -> int:
        """Read a character already known to be pending (see poll())."""
        code = self.input.read_char(0)
        if code is None:
            return 0
        return code & 0xFFFF

    # =========================================================================
    # Output
    # =========================================================================

    def write_char(self, code: int) -> None:
        """Write the low byte of code."""
        self.output.write(bytes((code & 0xFF,)))

    def write(self, text: str) -> None:
        """Write a host-side message such as the IN prompt."""
        self.output.write(text.encode("latin-1"))

    def flush(self) -> None:
        self.output.flush()


# =============================================================================
# Terminal Mode
# =============================================================================

@contextmanager
def raw_terminal(fd: Optional[int] = None) -> Iterator[bool]:
    """
    Put a TTY into non-canonical, non-echoing input mode.

    Canonical line editing and echo are turned off so that every keypress
    reaches the machine immediately and the program decides what to echo.
    Signal generation is left on so Ctrl-C still delivers SIGINT. The
    original attributes are restored on every exit path.

    Yields True if the mode was changed, False if fd is not a terminal
    (piped input), in which case nothing is touched.
    """
    if fd is None:
        fd = sys.stdin.fileno()

    if not os.isatty(fd):
        logger.debug(f"fd {fd} is not a TTY, leaving terminal mode alone")
        yield False
        return

    original = termios.tcgetattr(fd)
    raw = termios.tcgetattr(fd)
    raw[3] &= ~(termios.ICANON | termios.ECHO)
    termios.tcsetattr(fd, termios.TCSANOW, raw)
    logger.debug(f"Terminal fd {fd} switched to raw input")
    try:
        yield True
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, original)
        logger.debug(f"Terminal fd {fd} restored")
