"""
LC3 VM - Virtual Machine for the LC-3 Architecture
==================================================

This package runs pre-assembled LC-3 object images: a 16-bit machine with
65536 words of memory, eight registers, a 16-opcode instruction set, a
memory-mapped keyboard and a small set of trap routines for console I/O.

Main Components
---------------
- **emulator**: CPU, memory, keyboard device, trap routines and run loop
- **cli**: The `lc3` command-line runner

Quick Start
-----------
Run an image from Python:
    >>> from lc3_vm import Emulator
    >>> emu = Emulator()
    >>> emu.load_image("hello.obj")
    >>> emu.run()

Or from the shell:
    $ lc3 hello.obj

Reference Documentation
-----------------------
- LC-3 ISA: Patt & Patel, "Introduction to Computing Systems", appendix A
- Object file format: big-endian words, first word is the load origin

Version History
---------------
1.0.0 - Initial release with emulator and command-line runner
"""

__version__ = "1.0.0"
__author__ = "Hugo José Pinto & Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from lc3_vm.emulator import (
    Emulator,
    EmulatorConfig,
    MachineState,
    StopEvent,
    StopReason,
)
from lc3_vm.errors import (
    LC3Error,
    ImageError,
    ImageLoadError,
    ImageFormatError,
    ExecutionInterrupted,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "MachineState",
    "StopEvent",
    "StopReason",
    # Exception hierarchy
    "LC3Error",
    "ImageError",
    "ImageLoadError",
    "ImageFormatError",
    "ExecutionInterrupted",
]
