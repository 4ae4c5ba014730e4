"""
Keyboard Device for the LC-3 Emulator
=====================================

The LC-3 keyboard is exposed to programs through two memory-mapped device
registers:

    Address   Name   Contents
    -------   ----   --------
    $FE00     KBSR   Bit 15 set when a character is ready
    $FE02     KBDR   Bits 7-0 hold the last character read

Programs poll KBSR in a loop and read KBDR once bit 15 is set. Each read of
KBSR refreshes both registers from the host console without blocking:

- character pending: KBSR = $8000, KBDR = character (zero-extended)
- nothing pending:   KBSR = $0000, KBDR unchanged

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from enum import IntEnum

from .console import Console


class DeviceRegister(IntEnum):
    """Memory-mapped device register addresses."""
    KBSR = 0xFE00  # Keyboard status
    KBDR = 0xFE02  # Keyboard data


# Ready bit in KBSR
KBSR_READY = 0x8000


@dataclass
class KeyboardState:
    """
    Keyboard register contents.

    Attributes:
        status: KBSR value ($8000 or $0000)
        data: KBDR value (last character read)
    """
    status: int = 0
    data: int = 0


class Keyboard:
    """
    Keyboard status/data register pair backed by a Console.

    Example:
        >>> import io
        >>> from lc3_vm.emulator.console import BufferedInput
        >>> kb = Keyboard(Console(BufferedInput("q"), io.BytesIO()))
        >>> kb.poll()
        KeyboardState(status=32768, data=113)
        >>> kb.poll()
        KeyboardState(status=0, data=113)
    """

    def __init__(self, console: Console):
        self.console = console
        self.state = KeyboardState()

    def poll(self) -> KeyboardState:
        """
        Refresh KBSR/KBDR from the console without blocking.

        Returns:
            The updated register state
        """
        if self.console.poll():
            self.state.status = KBSR_READY
            self.state.data = self.console.read_available()
        else:
            self.state.status = 0
        return self.state

    def reset(self) -> None:
        """Clear both registers."""
        self.state = KeyboardState()
