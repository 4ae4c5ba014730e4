"""
LC-3 CPU Emulator
=================

Register file, instruction decoder and execution engine for the LC-3.

The LC-3 is a 16-bit word-addressed machine with:
- 8 general purpose registers: R0-R7 (R7 receives return addresses)
- PC (program counter)
- COND: exactly one of P (positive), Z (zero), N (negative)

Instruction format: bits 15-12 select one of 16 opcodes, the remaining
bits are opcode-specific fields:

    15  12 11   9 8    6 5 4         0
    +-----+------+------+-+-----------+
    | op  |  DR  | SR1  |m|  SR2/imm5 |   ADD, AND
    +-----+------+------+-+-----------+
    | op  | nzp  |     PCoffset9      |   BR
    +-----+------+--------------------+
    | op  |  DR  |     PCoffset9      |   LD, LDI, LEA, ST, STI
    +-----+------+------+-------------+
    | op  |  DR  | BaseR|  offset6    |   LDR, STR
    +-----+------+------+-------------+

All PC-relative offsets are added to the incremented PC, i.e. the address
of the instruction following the one being executed.

Copyright (c) 2025 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Optional, Protocol


class Opcode(IntEnum):
    """Instruction opcodes (bits 15-12)."""
    BR = 0b0000    # Conditional branch
    ADD = 0b0001   # Add
    LD = 0b0010    # Load PC-relative
    ST = 0b0011    # Store PC-relative
    JSR = 0b0100   # Jump to subroutine (JSR/JSRR)
    AND = 0b0101   # Bitwise and
    LDR = 0b0110   # Load base+offset
    STR = 0b0111   # Store base+offset
    RTI = 0b1000   # Return from interrupt (unused)
    NOT = 0b1001   # Bitwise complement
    LDI = 0b1010   # Load indirect
    STI = 0b1011   # Store indirect
    JMP = 0b1100   # Jump (RET when BaseR = R7)
    RES = 0b1101   # Reserved
    LEA = 0b1110   # Load effective address
    TRAP = 0b1111  # System call


class CondFlag(IntFlag):
    """
    Condition code flags.

    COND always holds exactly one of these. BR tests them against its
    n, z, p bits (11, 10, 9), which use the same bit order.
    """
    POS = 0x01  # Positive
    ZRO = 0x02  # Zero
    NEG = 0x04  # Negative


# Trap argument/result register
R0 = 0
# Register holding subroutine/trap return addresses
R7 = 7


def sign_extend(value: int, bit_width: int) -> int:
    """
    Sign-extend the low bit_width bits of value to a 16-bit word.

    Example:
        >>> hex(sign_extend(0b11111, 5))
        '0xffff'
        >>> sign_extend(0b01111, 5)
        15
    """
    value &= (1 << bit_width) - 1
    if (value >> (bit_width - 1)) & 1:
        value |= (0xFFFF << bit_width) & 0xFFFF
    return value


class MemoryProtocol(Protocol):
    """Memory interface used by the CPU."""
    def read(self, address: int) -> int:
        ...

    def write(self, address: int, value: int) -> None:
        ...


class TrapProtocol(Protocol):
    """Trap service routine dispatcher used by the TRAP instruction."""
    def dispatch(self, cpu: "LC3", vector: int) -> None:
        ...


@dataclass
class CPUState:
    """
    Complete register file.

    All register values are 16-bit unsigned words.

    Attributes:
        registers: R0-R7
        pc: Program counter
        cond: Condition flags (one of CondFlag)
        halted: Set by the HALT trap
    """
    registers: list[int] = field(default_factory=lambda: [0] * 8)
    pc: int = 0x3000
    cond: CondFlag = CondFlag.ZRO
    halted: bool = False


class LC3:
    """
    LC-3 CPU: fetch, decode and execute.

    The CPU owns the register file and reaches memory and the trap
    routines through the objects it was constructed with, so tests can
    substitute either.

    Example:
        >>> cpu = LC3(memory, traps)
        >>> cpu.reset(0x3000)
        >>> cpu.step()
        >>> print(f"R0=${cpu.reg(0):04X} PC=${cpu.pc:04X}")
    """

    def __init__(self, memory: MemoryProtocol, traps: Optional[TrapProtocol] = None):
        self.memory = memory
        self.traps = traps
        self.state = CPUState()

    # ========================================
    # Registers
    # ========================================

    def reg(self, index: int) -> int:
        """Read general purpose register R0-R7."""
        return self.state.registers[index & 0x7]

    def set_reg(self, index: int, value: int) -> None:
        """Write general purpose register R0-R7 (masked to 16 bits)."""
        self.state.registers[index & 0x7] = value & 0xFFFF

    @property
    def registers(self) -> list[int]:
        """Copy of R0-R7."""
        return list(self.state.registers)

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & 0xFFFF

    @property
    def cond(self) -> CondFlag:
        """Condition flags."""
        return self.state.cond

    @property
    def halted(self) -> bool:
        return self.state.halted

    def halt(self) -> None:
        """Stop the machine (HALT trap)."""
        self.state.halted = True

    def update_flags(self, index: int) -> None:
        """Set COND from the sign of register index."""
        value = self.reg(index)
        if value == 0:
            self.state.cond = CondFlag.ZRO
        elif value & 0x8000:
            self.state.cond = CondFlag.NEG
        else:
            self.state.cond = CondFlag.POS

    def reset(self, origin: int = 0x3000) -> None:
        """
        Reset to power-on state.

        Clears R0-R7, sets PC to origin and COND to Z.
        """
        self.state = CPUState(pc=origin & 0xFFFF)

    # ========================================
    # Execution
    # ========================================

    def step(self) -> None:
        """Fetch the word at PC, advance PC, and execute it."""
        instr = self.memory.read(self.pc)
        self.pc = self.pc + 1
        self.execute_instruction(instr)

    def execute_instruction(self, instr: int) -> None:
        """
        Decode and execute a single instruction word.

        PC must already point past the instruction. Exactly one handler
        runs per call; RTI and RES are no-ops.

        Args:
            instr: 16-bit instruction word
        """
        instr &= 0xFFFF
        match instr >> 12:
            case Opcode.BR:
                if (instr >> 9) & 0x7 & self.state.cond:
                    self.pc = self.pc + sign_extend(instr, 9)
            case Opcode.ADD:
                dr = (instr >> 9) & 0x7
                self.set_reg(dr, self.reg(instr >> 6) + self._operand2(instr))
                self.update_flags(dr)
            case Opcode.LD:
                dr = (instr >> 9) & 0x7
                self.set_reg(dr, self.memory.read(self._pc_relative(instr)))
                self.update_flags(dr)
            case Opcode.ST:
                self.memory.write(self._pc_relative(instr), self.reg(instr >> 9))
            case Opcode.JSR:
                return_address = self.pc
                if (instr >> 11) & 0x1:
                    target = self.pc + sign_extend(instr, 11)  # JSR
                else:
                    target = self.reg(instr >> 6)  # JSRR
                self.set_reg(R7, return_address)
                self.pc = target
            case Opcode.AND:
                dr = (instr >> 9) & 0x7
                self.set_reg(dr, self.reg(instr >> 6) & self._operand2(instr))
                self.update_flags(dr)
            case Opcode.LDR:
                dr = (instr >> 9) & 0x7
                self.set_reg(dr, self.memory.read(self._base_offset(instr)))
                self.update_flags(dr)
            case Opcode.STR:
                self.memory.write(self._base_offset(instr), self.reg(instr >> 9))
            case Opcode.NOT:
                dr = (instr >> 9) & 0x7
                self.set_reg(dr, ~self.reg(instr >> 6))
                self.update_flags(dr)
            case Opcode.LDI:
                dr = (instr >> 9) & 0x7
                pointer = self.memory.read(self._pc_relative(instr))
                self.set_reg(dr, self.memory.read(pointer))
                self.update_flags(dr)
            case Opcode.STI:
                pointer = self.memory.read(self._pc_relative(instr))
                self.memory.write(pointer, self.reg(instr >> 9))
            case Opcode.JMP:
                self.pc = self.reg(instr >> 6)
            case Opcode.LEA:
                dr = (instr >> 9) & 0x7
                self.set_reg(dr, self._pc_relative(instr))
                self.update_flags(dr)
            case Opcode.TRAP:
                self.set_reg(R7, self.pc)
                if self.traps is not None:
                    self.traps.dispatch(self, instr & 0xFF)
            case Opcode.RTI | Opcode.RES:
                pass

    # ========================================
    # Operand Decoding
    # ========================================

    def _operand2(self, instr: int) -> int:
        """Second ADD/AND operand: sext(imm5) if bit 5 set, else SR2."""
        if (instr >> 5) & 0x1:
            return sign_extend(instr, 5)
        return self.reg(instr)

    def _pc_relative(self, instr: int) -> int:
        """PC + sext(PCoffset9)."""
        return (self.pc + sign_extend(instr, 9)) & 0xFFFF

    def _base_offset(self, instr: int) -> int:
        """BaseR + sext(offset6)."""
        return (self.reg(instr >> 6) + sign_extend(instr, 6)) & 0xFFFF
