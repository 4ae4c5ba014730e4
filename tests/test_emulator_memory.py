"""
Memory Subsystem Unit Tests
============================

Tests for the 64K-word Memory class and its memory-mapped keyboard
registers.

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

import io
import os

import pytest

from lc3_vm.emulator import (
    BufferedInput,
    Console,
    DeviceRegister,
    Keyboard,
    MEMORY_SIZE,
    Memory,
    TerminalInput,
)


def memory_with_input(text=""):
    console = Console(BufferedInput(text), io.BytesIO())
    return Memory(Keyboard(console))


# =============================================================================
# Plain Storage
# =============================================================================

class TestMemory:
    """Test read/write/load behaviour."""

    def test_size(self):
        assert MEMORY_SIZE == 65536
        assert len(Memory().snapshot()) == MEMORY_SIZE

    def test_zero_initialized(self):
        mem = Memory()
        assert mem.read(0x0000) == 0
        assert mem.read(0x3000) == 0
        assert mem.read(0xFFFF) == 0

    def test_read_write(self):
        mem = Memory()
        mem.write(0x3000, 0x1234)
        assert mem.read(0x3000) == 0x1234

        mem.write(0xFFFF, 0xABCD)
        assert mem.read(0xFFFF) == 0xABCD

    def test_values_masked(self):
        mem = Memory()
        mem.write(0x4000, 0x12345)
        assert mem.read(0x4000) == 0x2345

    def test_addresses_wrap(self):
        """Addresses are taken modulo 2^16."""
        mem = Memory()
        mem.write(0x10005, 7)
        assert mem.read(0x0005) == 7

    def test_load_block(self):
        mem = Memory()
        assert mem.load(0x3000, [1, 2, 3]) == 3
        assert [mem.read(a) for a in range(0x3000, 0x3003)] == [1, 2, 3]

    def test_load_stops_at_top(self):
        """Words past $FFFF are dropped."""
        mem = Memory()
        assert mem.load(0xFFFE, [1, 2, 3]) == 2
        assert mem.read(0xFFFE) == 1
        assert mem.read(0xFFFF) == 2
        assert mem.read(0x0000) == 0

    def test_clear(self):
        mem = Memory()
        mem.write(0x1234, 99)
        mem.clear()
        assert mem.read(0x1234) == 0

    def test_snapshot_is_copy(self):
        mem = Memory()
        snap = mem.snapshot()
        snap[0] = 42
        assert mem.read(0) == 0


# =============================================================================
# Memory-Mapped Keyboard
# =============================================================================

class TestKeyboardMapping:
    """Test KBSR/KBDR side effects."""

    def test_kbsr_ready(self):
        """Reading KBSR with input pending sets bit 15 and fills KBDR."""
        mem = memory_with_input("a")
        assert mem.read(DeviceRegister.KBSR) == 0x8000
        assert mem.read(DeviceRegister.KBDR) == ord("a")

    def test_kbsr_idle(self):
        """Reading KBSR with no input yields 0."""
        mem = memory_with_input()
        assert mem.read(DeviceRegister.KBSR) == 0

    def test_kbsr_consumes_character(self):
        mem = memory_with_input("ab")
        mem.read(DeviceRegister.KBSR)
        mem.read(DeviceRegister.KBSR)
        assert mem.read(DeviceRegister.KBDR) == ord("b")
        assert mem.read(DeviceRegister.KBSR) == 0
        # KBDR keeps the last character
        assert mem.read(DeviceRegister.KBDR) == ord("b")

    def test_kbdr_read_does_not_poll(self):
        """Only KBSR reads trigger a poll."""
        source = BufferedInput("x")
        mem = Memory(Keyboard(Console(source, io.BytesIO())))
        assert mem.read(DeviceRegister.KBDR) == 0
        assert source.pending == 1

    def test_kbsr_write_is_plain(self):
        """Writes to device addresses behave as storage."""
        mem = memory_with_input()
        mem.write(DeviceRegister.KBDR, 0x55)
        assert mem.read(DeviceRegister.KBDR) == 0x55

    def test_idle_kbsr_keeps_kbdr(self):
        """An idle KBSR read leaves a stored KBDR value alone."""
        mem = memory_with_input()
        mem.write(DeviceRegister.KBDR, 0x55)
        assert mem.read(DeviceRegister.KBSR) == 0
        assert mem.read(DeviceRegister.KBDR) == 0x55

    def test_without_keyboard(self):
        """Memory without a keyboard treats KBSR as storage."""
        mem = Memory()
        mem.write(DeviceRegister.KBSR, 0x1234)
        assert mem.read(DeviceRegister.KBSR) == 0x1234


class TestKeyboardPollNonBlocking:
    """Polling a real file descriptor must never block."""

    @pytest.fixture
    def pipe(self):
        read_fd, write_fd = os.pipe()
        yield read_fd, write_fd
        os.close(read_fd)
        os.close(write_fd)

    def test_empty_pipe(self, pipe):
        read_fd, _ = pipe
        mem = Memory(Keyboard(Console(TerminalInput(read_fd), io.BytesIO())))
        assert mem.read(DeviceRegister.KBSR) == 0

    def test_pending_byte(self, pipe):
        read_fd, write_fd = pipe
        os.write(write_fd, b"x")
        mem = Memory(Keyboard(Console(TerminalInput(read_fd), io.BytesIO())))
        assert mem.read(DeviceRegister.KBSR) == 0x8000
        assert mem.read(DeviceRegister.KBDR) == ord("x")
        assert mem.read(DeviceRegister.KBSR) == 0
