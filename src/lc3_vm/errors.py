"""
LC-3 VM Error Hierarchy
=======================

This module defines the exception hierarchy for the LC-3 virtual machine.
All exceptions inherit from LC3Error, allowing callers to catch all
VM-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
LC3Error (base)
├── ImageError (program image handling)
│   ├── ImageLoadError - image file missing or unreadable
│   └── ImageFormatError - image too short to carry a load origin
└── ExecutionInterrupted - stop requested while waiting for input

Design Philosophy
-----------------
The LC-3 architecture has no runtime faults: unknown opcodes are no-ops
and every 16-bit address is valid. The only errors are therefore raised
before execution starts (loading images) or when the host asks the
machine to stop while it is blocked on console input.

Error messages follow this format:
    Failed to load image: path/to/image.obj
    reason: description of the underlying OS error
"""

from pathlib import Path
from typing import Optional, Union


# =============================================================================
# Base Exception Class
# =============================================================================

class LC3Error(Exception):
    """
    Base exception for all LC-3 VM errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch all VM-related errors with a single except clause:

        try:
            emu.load_image("program.obj")
        except LC3Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Image Exceptions
# =============================================================================

class ImageError(LC3Error):
    """
    Base exception for program image errors.

    Attributes:
        path: Path of the image that failed to load
        reason: Underlying cause (optional)
    """

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message naming the failing image.

        Example output:
            Failed to load image: rogue.obj
            reason: [Errno 2] No such file or directory: 'rogue.obj'
        """
        message = f"Failed to load image: {self.path}"
        if self.reason:
            message += f"\nreason: {self.reason}"
        return message


class ImageLoadError(ImageError):
    """
    Image file could not be opened or read.

    Raised when the path does not exist, is a directory, or the OS refuses
    to read it.
    """
    pass


class ImageFormatError(ImageError):
    """
    Image file contents are not a valid LC-3 image.

    An image must contain at least one big-endian word (the load origin).
    """
    pass


# =============================================================================
# Execution Exceptions
# =============================================================================

class ExecutionInterrupted(LC3Error):
    """
    Execution was cancelled while waiting for console input.

    Raised by Console.read_char when the stop flag is set during a
    blocking GETC/IN read. The run loop catches it and reports an
    interrupted stop, so it never escapes Emulator.run().
    Emulator.step() lets it propagate to the caller.
    """

    def __init__(self, message: str = "Execution interrupted"):
        super().__init__(message)
