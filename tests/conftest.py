"""
Shared fixtures for the LC-3 emulator tests.
"""

import io

import pytest

from lc3_vm.emulator import BufferedInput, Console, Emulator, EmulatorConfig


@pytest.fixture
def output():
    """Captured program output."""
    return io.BytesIO()


@pytest.fixture
def make_emulator(output):
    """Factory for emulators with scripted input and captured output."""
    def _make(text="", **config):
        console = Console(BufferedInput(text), output)
        return Emulator(EmulatorConfig(**config), console=console)
    return _make
