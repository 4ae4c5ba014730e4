"""
LC-3 Emulator
=============

An emulator for the LC-3 (Little Computer 3) educational architecture.

This package provides instruction-exact emulation of the LC-3, including:

- **CPU**: All 15 implemented opcodes with exact condition-code behaviour
- **Memory System**: 64K words with the memory-mapped keyboard
- **Keyboard Device**: KBSR/KBDR registers polled without blocking
- **Trap Routines**: GETC, OUT, PUTS, IN, PUTSP and HALT
- **Console**: Terminal or scripted character I/O

Quick Start
-----------

Basic usage::

    >>> from lc3_vm.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load_image("2048.obj")
    >>> event = emu.run()
    >>> print(event)
    Halted at $3012

Scripted I/O for tests::

    >>> import io
    >>> from lc3_vm.emulator import Emulator, Console, BufferedInput
    >>> out = io.BytesIO()
    >>> emu = Emulator(console=Console(BufferedInput("q"), out))

Module Structure
----------------

- `emulator.py`: Main Emulator class (high-level API and run loop)
- `cpu.py`: Register file, decoder and opcode semantics
- `memory.py`: 64K-word memory with mapped device registers
- `keyboard.py`: KBSR/KBDR keyboard device
- `traps.py`: Trap service routines
- `console.py`: Character I/O and terminal mode handling
- `image.py`: Object image loading

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

# Main entry point
from .emulator import (
    Emulator,
    EmulatorConfig,
    MachineState,
    StopEvent,
    StopReason,
    PC_START,
)

# CPU components
from .cpu import LC3, CPUState, CondFlag, Opcode, sign_extend

# Memory subsystem
from .memory import Memory, MEMORY_SIZE

# I/O
from .keyboard import Keyboard, KeyboardState, DeviceRegister, KBSR_READY
from .traps import TrapHandler, TrapVector
from .console import (
    Console,
    InputSource,
    TerminalInput,
    BufferedInput,
    raw_terminal,
    EOF,
)

# Program images
from .image import LoadedImage, load_image, load_image_bytes, decode_image

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",
    "MachineState",
    "StopEvent",
    "StopReason",
    "PC_START",

    # CPU
    "LC3",
    "CPUState",
    "CondFlag",
    "Opcode",
    "sign_extend",

    # Memory
    "Memory",
    "MEMORY_SIZE",

    # Keyboard
    "Keyboard",
    "KeyboardState",
    "DeviceRegister",
    "KBSR_READY",

    # Traps
    "TrapHandler",
    "TrapVector",

    # Console
    "Console",
    "InputSource",
    "TerminalInput",
    "BufferedInput",
    "raw_terminal",
    "EOF",

    # Images
    "LoadedImage",
    "load_image",
    "load_image_bytes",
    "decode_image",
]
