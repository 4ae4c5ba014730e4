"""
Memory Subsystem for the LC-3 Emulator
======================================

The LC-3 has a flat, word-addressed memory of 65536 16-bit cells:

    $0000-$00FF  Trap vector table
    $0100-$01FF  Interrupt vector table
    $0200-$2FFF  Operating system and supervisor stack
    $3000-$FDFF  User programs (default load origin $3000)
    $FE00-$FFFF  Device registers

Only the keyboard registers are emulated as devices. Every other address,
including the rest of the device page, behaves as plain storage. Since the
address space covers the whole 16-bit range there are no bounds errors:
addresses and values are simply masked to 16 bits.

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

from typing import Iterable, Optional

from .keyboard import KBSR_READY, DeviceRegister, Keyboard

# Number of addressable words
MEMORY_SIZE = 1 << 16


class Memory:
    """
    65536-word memory with memory-mapped keyboard registers.

    Reading KBSR polls the keyboard first. The status cell always reflects
    the live input source; the data cell changes only when a character
    arrives.

    Attributes:
        keyboard: Device refreshed on reads of KBSR (optional for tests)
    """

    def __init__(self, keyboard: Optional[Keyboard] = None):
        self.keyboard = keyboard
        self._data = [0] * MEMORY_SIZE

    def read(self, address: int) -> int:
        """
        Read word from memory.

        Args:
            address: 16-bit address

        Returns:
            Word at address
        """
        address &= 0xFFFF
        if address == DeviceRegister.KBSR and self.keyboard is not None:
            state = self.keyboard.poll()
            self._data[DeviceRegister.KBSR] = state.status
            if state.status & KBSR_READY:
                self._data[DeviceRegister.KBDR] = state.data
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        """
        Write word to memory.

        Args:
            address: 16-bit address
            value: Word value (masked to 16 bits)
        """
        self._data[address & 0xFFFF] = value & 0xFFFF

    def load(self, origin: int, words: Iterable[int]) -> int:
        """
        Copy a block of words into memory starting at origin.

        Loading stops at the top of the address space; words that would
        fall past $FFFF are dropped.

        Returns:
            Number of words actually stored
        """
        address = origin & 0xFFFF
        count = 0
        for word in words:
            if address >= MEMORY_SIZE:
                break
            self._data[address] = word & 0xFFFF
            address += 1
            count += 1
        return count

    def clear(self) -> None:
        """Zero every cell."""
        self._data = [0] * MEMORY_SIZE

    def snapshot(self) -> list[int]:
        """Return a copy of the entire memory."""
        return self._data.copy()
