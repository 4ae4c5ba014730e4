"""
Trap Service Routines for the LC-3 Emulator
===========================================

The TRAP instruction saves the return address in R7 and invokes a system
service selected by its 8-bit vector. Real LC-3 systems implement these
services as OS code reached through the trap vector table at $0000-$00FF;
the emulator implements them natively instead:

    Vector  Name   Action
    ------  -----  ------
    $20     GETC   Read a character into R0 (no echo)
    $21     OUT    Write the character in R0[7:0]
    $22     PUTS   Write the string of one-character words at R0
    $23     IN     Prompt, read a character into R0 and echo it
    $24     PUTSP  Write the string of two-character words at R0
    $25     HALT   Print a halt notice and stop the machine

Any other vector does nothing beyond the R7 update the TRAP instruction
already performed.

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

import logging
from enum import IntEnum
from typing import Callable, TYPE_CHECKING

from .console import Console

if TYPE_CHECKING:
    from .cpu import LC3

logger = logging.getLogger(__name__)


class TrapVector(IntEnum):
    """Trap vectors serviced by the emulator."""
    GETC = 0x20
    OUT = 0x21
    PUTS = 0x22
    IN = 0x23
    PUTSP = 0x24
    HALT = 0x25


class TrapHandler:
    """
    Dispatcher for the built-in trap service routines.

    Attributes:
        console: Character I/O used by the routines
        should_stop: Consulted while GETC/IN wait for input; returning True
            aborts the wait with ExecutionInterrupted
        halt_message: Text written by HALT
        in_prompt: Text written by IN before reading
    """

    def __init__(
        self,
        console: Console,
        should_stop: Callable[[], bool] = lambda: False,
        halt_message: str = "HALT\n",
        in_prompt: str = "Enter a character: ",
    ):
        self.console = console
        self.should_stop = should_stop
        self.halt_message = halt_message
        self.in_prompt = in_prompt

    def dispatch(self, cpu: "LC3", vector: int) -> None:
        """
        Run the service routine for vector.

        Args:
            cpu: CPU whose registers and memory the routine uses
            vector: 8-bit trap vector
        """
        match vector:
            case TrapVector.GETC:
                self._getc(cpu)
            case TrapVector.OUT:
                self._out(cpu)
            case TrapVector.PUTS:
                self._puts(cpu)
            case TrapVector.IN:
                self._in(cpu)
            case TrapVector.PUTSP:
                self._putsp(cpu)
            case TrapVector.HALT:
                self._halt(cpu)
            case _:
                logger.debug(f"Ignoring unknown trap vector ${vector:02X} at ${cpu.pc:04X}")

    # ========================================
    # Service Routines
    # ========================================

    def _getc(self, cpu: "LC3") -> None:
        """GETC: R0 = next character, not echoed."""
        cpu.set_reg(0, self.console.read_char(self.should_stop))
        cpu.update_flags(0)

    def _out(self, cpu: "LC3") -> None:
        """OUT: write R0[7:0]."""
        self.console.write_char(cpu.reg(0))
        self.console.flush()

    def _puts(self, cpu: "LC3") -> None:
        """PUTS: one character per word, zero-terminated."""
        address = cpu.reg(0)
        word = cpu.memory.read(address)
        while word:
            self.console.write_char(word)
            address = (address + 1) & 0xFFFF
            word = cpu.memory.read(address)
        self.console.flush()

    def _in(self, cpu: "LC3") -> None:
        """IN: prompt, read a character and echo it."""
        self.console.write(self.in_prompt)
        self.console.flush()
        code = self.console.read_char(self.should_stop)
        self.console.write_char(code)
        self.console.flush()
        cpu.set_reg(0, code)
        cpu.update_flags(0)

    def _putsp(self, cpu: "LC3") -> None:
        """PUTSP: two characters per word, low byte first."""
        address = cpu.reg(0)
        word = cpu.memory.read(address)
        while word:
            self.console.write_char(word & 0xFF)
            high = word >> 8
            if high:
                self.console.write_char(high)
            address = (address + 1) & 0xFFFF
            word = cpu.memory.read(address)
        self.console.flush()

    def _halt(self, cpu: "LC3") -> None:
        """HALT: print the notice and stop the machine."""
        self.console.write(self.halt_message)
        self.console.flush()
        cpu.halt()
        logger.debug(f"HALT at ${(cpu.pc - 1) & 0xFFFF:04X}")
