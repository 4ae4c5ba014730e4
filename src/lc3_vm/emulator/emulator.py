"""
LC-3 Emulator - Main Orchestrator
=================================

This module provides the main `Emulator` class that wires the CPU, memory,
keyboard device, trap routines and console together and drives the
fetch-execute loop.

The Emulator class:
- Owns the complete machine state (memory + register file)
- Loads program images
- Runs until HALT, until a stop is requested, or for a bounded number
  of instructions
- Exposes a cooperative stop flag that a signal handler can set

Example usage:
    >>> from lc3_vm.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load_image("hello.obj")
    >>> event = emu.run()
    Hello World!
    HALT
    >>> event.reason
    <StopReason.HALTED: 1>

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Optional, Union

from lc3_vm.errors import ExecutionInterrupted

from .console import Console
from .cpu import LC3, CPUState
from .image import LoadedImage, load_image, load_image_bytes
from .keyboard import Keyboard
from .memory import Memory
from .traps import TrapHandler

logger = logging.getLogger(__name__)

# Default load origin and initial PC for user programs
PC_START = 0x3000


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        origin: Initial PC after reset. Default is $3000.
        halt_message: Text written by the HALT trap.
        in_prompt: Text written by the IN trap before reading.
        poll_interval: Seconds a blocking console read waits between checks
                       of the stop flag. Applies to the default console
                       only; an injected Console keeps its own setting.

    Example:
        >>> config = EmulatorConfig(halt_message="")  # Silent HALT
    """
    origin: int = PC_START
    halt_message: str = "HALT\n"
    in_prompt: str = "Enter a character: "
    poll_interval: float = 0.1


class MachineState(Enum):
    """Run state of the machine."""
    RUNNING = auto()
    HALTED = auto()


class StopReason(Enum):
    """Why Emulator.run() returned."""
    HALTED = auto()            # HALT trap executed
    INTERRUPTED = auto()       # request_stop() called
    MAX_INSTRUCTIONS = auto()  # Instruction budget used up


@dataclass
class StopEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: PC at the time of the stop
        instructions: Instructions executed by this run() call
        message: Human-readable description
    """
    reason: StopReason
    address: int
    instructions: int = 0
    message: str = ""

    def __str__(self) -> str:
        """Return human-readable description."""
        if self.message:
            return self.message
        match self.reason:
            case StopReason.HALTED:
                return f"Halted at ${self.address:04X}"
            case StopReason.INTERRUPTED:
                return f"Interrupted at ${self.address:04X}"
            case StopReason.MAX_INSTRUCTIONS:
                return f"Instruction limit reached at ${self.address:04X}"
            case _:
                return "Unknown"


class Emulator:
    """
    LC-3 machine: memory, registers, devices and run loop.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        console: Character I/O shared by the keyboard and trap routines
        memory: 64K-word memory with the keyboard mapped in
        keyboard: KBSR/KBDR device
        traps: Trap service routines
        cpu: The LC-3 CPU

    Example:
        >>> import io
        >>> from lc3_vm.emulator import BufferedInput, Console
        >>> out = io.BytesIO()
        >>> emu = Emulator(console=Console(BufferedInput(), out))
        >>> emu.inject_program([0xF025])  # HALT
        >>> emu.run().reason
        <StopReason.HALTED: 1>
        >>> out.getvalue()
        b'HALT\\n'
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        console: Optional[Console] = None,
    ):
        """
        Initialize the emulator.

        Args:
            config: EmulatorConfig; defaults are used if None.
            console: Console for program I/O. If None, the process
                     stdin/stdout are used.
        """
        self.config = config or EmulatorConfig()
        self.console = console or Console(poll_interval=self.config.poll_interval)

        self.keyboard = Keyboard(self.console)
        self.memory = Memory(self.keyboard)
        self.traps = TrapHandler(
            self.console,
            should_stop=self.stop_requested,
            halt_message=self.config.halt_message,
            in_prompt=self.config.in_prompt,
        )
        self.cpu = LC3(self.memory, self.traps)
        self.cpu.reset(self.config.origin)

        self._stop_requested = False
        self._total_instructions = 0

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_image(self, path: Union[str, Path]) -> LoadedImage:
        """
        Load an LC-3 object image into memory.

        PC is not changed: programs start at config.origin regardless of
        where images are placed.

        Raises:
            ImageLoadError: If the file cannot be read
            ImageFormatError: If the file is too short
        """
        return load_image(self.memory, path)

    def load_image_bytes(self, data: bytes) -> LoadedImage:
        """Load an image held in memory (origin word + program words)."""
        return load_image_bytes(self.memory, data)

    def load_words(self, origin: int, words: Iterable[int]) -> int:
        """Store raw words at origin. Returns the number stored."""
        return self.memory.load(origin, words)

    def inject_program(self, words: Iterable[int], origin: Optional[int] = None) -> None:
        """
        Store machine code and point PC at it.

        Args:
            words: Instruction/data words
            origin: Load address and new PC (default config.origin)
        """
        if origin is None:
            origin = self.config.origin
        self.load_words(origin, words)
        self.cpu.pc = origin

    # =========================================================================
    # Execution Control
    # =========================================================================

    def reset(self) -> None:
        """
        Reset to power-on state.

        Memory is cleared, registers zeroed, PC set to config.origin,
        COND set to Z and any pending stop request dropped.
        """
        self.memory.clear()
        self.keyboard.reset()
        self.cpu.reset(self.config.origin)
        self._stop_requested = False
        self._total_instructions = 0

    def request_stop(self) -> None:
        """
        Request execution to stop at the next instruction boundary.

        Safe to call from a signal handler. A console read blocked in
        GETC/IN also gives up.
        """
        self._stop_requested = True

    def clear_stop_request(self) -> None:
        """Clear any pending stop request."""
        self._stop_requested = False

    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def state(self) -> MachineState:
        """RUNNING until a HALT trap executes."""
        return MachineState.HALTED if self.cpu.halted else MachineState.RUNNING

    @property
    def registers(self) -> CPUState:
        """Live register file."""
        return self.cpu.state

    @property
    def total_instructions(self) -> int:
        """Instructions executed since the last reset."""
        return self._total_instructions

    def step(self) -> None:
        """
        Execute exactly one instruction (does nothing once halted).

        Raises:
            ExecutionInterrupted: If a stop is requested while GETC/IN
                waits for input. Unlike run(), the exception is not
                converted into a StopEvent.
        """
        if self.cpu.halted:
            return
        self.cpu.step()
        self._total_instructions += 1

    def run(self, max_instructions: Optional[int] = None) -> StopEvent:
        """
        Run until HALT, a stop request, or max_instructions.

        Args:
            max_instructions: Instruction budget; None runs without limit.

        Returns:
            StopEvent describing why execution stopped
        """
        executed = 0
        logger.debug(f"Run started at ${self.cpu.pc:04X}")

        try:
            while not self.cpu.halted:
                if self._stop_requested:
                    return self._stopped(StopReason.INTERRUPTED, executed)
                if max_instructions is not None and executed >= max_instructions:
                    return self._stopped(StopReason.MAX_INSTRUCTIONS, executed)
                self.cpu.step()
                executed += 1
                self._total_instructions += 1
        except ExecutionInterrupted:
            # The interrupted instruction still counts as executed
            executed += 1
            self._total_instructions += 1
            return self._stopped(StopReason.INTERRUPTED, executed)

        return self._stopped(StopReason.HALTED, executed)

    def _stopped(self, reason: StopReason, executed: int) -> StopEvent:
        event = StopEvent(reason, address=self.cpu.pc, instructions=executed)
        logger.debug(f"Run stopped: {event} after {executed} instructions")
        return event
