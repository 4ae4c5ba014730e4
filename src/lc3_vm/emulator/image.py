"""
LC-3 Program Image Loader
=========================

LC-3 object images (.obj files produced by lc3as and compatible
assemblers) are a flat sequence of big-endian 16-bit words:

    Offset  Size  Contents
    ------  ----  --------
    0       2     Load origin (address of the first program word)
    2       2*n   Program words, loaded at origin, origin+1, ...

There is no length field: loading continues to end of file or to the top
of the address space, whichever comes first. A trailing odd byte is
ignored. Loading several images in turn overlays them, later images
overwriting any words they share with earlier ones.

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from lc3_vm.errors import ImageFormatError, ImageLoadError

from .memory import MEMORY_SIZE, Memory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedImage:
    """
    Summary of an image placed in memory.

    Attributes:
        origin: Address of the first program word
        size: Number of words stored
    """
    origin: int
    size: int

    @property
    def end(self) -> int:
        """Address one past the last stored word."""
        return self.origin + self.size


def decode_image(data: bytes) -> tuple[int, list[int]]:
    """
    Split raw image bytes into origin and program words.

    Words past the top of the address space are dropped.

    Raises:
        ValueError: If data is shorter than one word
    """
    if len(data) < 2:
        raise ValueError(f"image is {len(data)} byte(s), too short for a load origin")

    origin = struct.unpack_from(">H", data)[0]
    count = min((len(data) - 2) // 2, MEMORY_SIZE - origin)
    words = list(struct.unpack_from(f">{count}H", data, 2))
    return origin, words


def load_image_bytes(memory: Memory, data: bytes, name: str = "<bytes>") -> LoadedImage:
    """
    Load an in-memory image.

    Args:
        memory: Destination memory
        data: Image bytes (origin word followed by program words)
        name: Label used in error messages

    Raises:
        ImageFormatError: If data holds no origin word
    """
    try:
        origin, words = decode_image(data)
    except ValueError as e:
        raise ImageFormatError(name, str(e)) from e

    size = memory.load(origin, words)
    logger.debug(f"Loaded {name}: {size} words at ${origin:04X}")
    return LoadedImage(origin, size)


def load_image(memory: Memory, path: Union[str, Path]) -> LoadedImage:
    """
    Load an image file into memory.

    Args:
        memory: Destination memory
        path: Path to the .obj file

    Raises:
        ImageLoadError: If the file cannot be read
        ImageFormatError: If the file holds no origin word
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageLoadError(path, str(e)) from e

    return load_image_bytes(memory, data, str(path))
