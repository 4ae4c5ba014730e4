"""
Emulator Integration Tests
==========================

End-to-end tests running small LC-3 programs through the Emulator class
with scripted input and captured output.

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

import pytest

from lc3_vm.emulator import MachineState, StopReason
from lc3_encode import (
    add_imm, and_imm, br, jsr, ldi, lea, ret, trap, stringz, image,
)

HELLO = [lea(0, 2), trap(0x22), trap(0x25)] + stringz("Hello")


class SilentInput:
    """Input source that never produces a character."""

    def __init__(self, on_read=None):
        self.on_read = on_read

    def poll(self):
        return False

    def read_char(self, timeout=None):
        if self.on_read:
            self.on_read()
        return None


# =============================================================================
# Running Programs
# =============================================================================

class TestPrograms:
    """Test complete programs."""

    def test_hello(self, make_emulator, output):
        emu = make_emulator()
        emu.inject_program(HELLO)
        event = emu.run()
        assert event.reason == StopReason.HALTED
        assert event.instructions == 3
        assert output.getvalue() == b"HelloHALT\n"
        assert emu.state == MachineState.HALTED

    def test_hello_silent_halt(self, make_emulator, output):
        emu = make_emulator(halt_message="")
        emu.inject_program(HELLO)
        emu.run()
        assert output.getvalue() == b"Hello"

    def test_hello_from_image(self, make_emulator, output):
        emu = make_emulator()
        loaded = emu.load_image_bytes(image(0x3000, HELLO))
        assert loaded.origin == 0x3000
        emu.run()
        assert output.getvalue() == b"HelloHALT\n"

    def test_subroutine(self, make_emulator):
        """JSR/RET round trip."""
        emu = make_emulator()
        emu.inject_program([
            jsr(2),             # x3000
            trap(0x25),         # x3001
            0,                  # x3002
            and_imm(1, 1, 0),   # x3003
            add_imm(1, 1, 5),   # x3004
            ret(),              # x3005
        ])
        emu.run()
        assert emu.registers.registers[1] == 5
        assert emu.registers.registers[7] == 0x3001
        assert emu.state == MachineState.HALTED

    def test_keyboard_polling(self, make_emulator, output):
        """Busy-wait on KBSR, then echo KBDR."""
        emu = make_emulator("x", halt_message="")
        emu.inject_program([
            ldi(0, 4),          # x3000  R0 = mem[mem[x3005]] (KBSR)
            br(0b011, -2),      # x3001  BRzp back to x3000
            ldi(0, 3),          # x3002  R0 = KBDR
            trap(0x21),         # x3003  OUT
            trap(0x25),         # x3004  HALT
            0xFE00,             # x3005
            0xFE02,             # x3006
        ])
        event = emu.run(max_instructions=1000)
        assert event.reason == StopReason.HALTED
        assert output.getvalue() == b"x"

    def test_getc_echo(self, make_emulator, output):
        emu = make_emulator("q", halt_message="")
        emu.inject_program([trap(0x20), trap(0x21), trap(0x25)])
        emu.run()
        assert output.getvalue() == b"q"


# =============================================================================
# Stopping
# =============================================================================

class TestStopping:
    """Test stop requests and instruction budgets."""

    def test_max_instructions(self, make_emulator):
        emu = make_emulator()
        emu.inject_program([br(0b111, -1)])
        event = emu.run(max_instructions=100)
        assert event.reason == StopReason.MAX_INSTRUCTIONS
        assert event.instructions == 100
        assert emu.total_instructions == 100
        assert emu.state == MachineState.RUNNING

    def test_resume_after_budget(self, make_emulator):
        emu = make_emulator()
        emu.inject_program([br(0b111, -1)])
        emu.run(max_instructions=10)
        emu.run(max_instructions=5)
        assert emu.total_instructions == 15

    def test_stop_requested_before_run(self, make_emulator):
        emu = make_emulator()
        emu.inject_program([br(0b111, -1)])
        emu.request_stop()
        event = emu.run()
        assert event.reason == StopReason.INTERRUPTED
        assert event.instructions == 0
        assert event.address == 0x3000

    def test_clear_stop_request(self, make_emulator):
        emu = make_emulator()
        emu.inject_program(HELLO)
        emu.request_stop()
        emu.clear_stop_request()
        assert not emu.stop_requested()
        assert emu.run().reason == StopReason.HALTED

    def test_interrupt_during_getc(self, make_emulator, output):
        from lc3_vm.emulator import Console, Emulator, EmulatorConfig

        holder = {}
        source = SilentInput(on_read=lambda: holder["emu"].request_stop())
        emu = Emulator(
            EmulatorConfig(poll_interval=0),
            console=Console(source, output, poll_interval=0),
        )
        holder["emu"] = emu
        emu.inject_program([trap(0x20), trap(0x25)])
        event = emu.run()
        assert event.reason == StopReason.INTERRUPTED
        assert event.instructions == 1
        assert emu.state == MachineState.RUNNING
        assert output.getvalue() == b""

    def test_step_interrupted_during_getc(self, output):
        """step() propagates the interrupt instead of returning an event."""
        from lc3_vm.emulator import Console, Emulator
        from lc3_vm.errors import ExecutionInterrupted

        emu = Emulator(console=Console(SilentInput(), output, poll_interval=0))
        emu.inject_program([trap(0x20)])
        emu.request_stop()
        with pytest.raises(ExecutionInterrupted):
            emu.step()

    def test_injected_console_keeps_poll_interval(self, output):
        from lc3_vm.emulator import BufferedInput, Console, Emulator, EmulatorConfig

        console = Console(BufferedInput(), output, poll_interval=0.5)
        emu = Emulator(EmulatorConfig(poll_interval=0.01), console=console)
        assert emu.console.poll_interval == 0.5

    def test_stop_event_str(self, make_emulator):
        emu = make_emulator()
        emu.inject_program([trap(0x25)])
        assert str(emu.run()) == "Halted at $3001"


# =============================================================================
# Reset and State
# =============================================================================

class TestReset:
    """Test reset() and halted behaviour."""

    def test_run_when_halted(self, make_emulator):
        emu = make_emulator()
        emu.inject_program(HELLO)
        emu.run()
        event = emu.run()
        assert event.reason == StopReason.HALTED
        assert event.instructions == 0

    def test_step_when_halted(self, make_emulator):
        emu = make_emulator()
        emu.inject_program([trap(0x25)])
        emu.run()
        pc = emu.cpu.pc
        emu.step()
        assert emu.cpu.pc == pc

    def test_reset(self, make_emulator):
        emu = make_emulator()
        emu.inject_program(HELLO)
        emu.run()
        emu.reset()
        assert emu.state == MachineState.RUNNING
        assert emu.cpu.pc == 0x3000
        assert emu.memory.read(0x3000) == 0
        assert emu.total_instructions == 0
        assert emu.registers.registers == [0] * 8

    def test_custom_origin(self, make_emulator):
        emu = make_emulator(origin=0x4000)
        assert emu.cpu.pc == 0x4000

    def test_default_start(self, make_emulator):
        emu = make_emulator()
        assert emu.cpu.pc == 0x3000
        assert emu.cpu.cond.value == 2
