"""The 6502 processor core: registers, status flags, addressing modes and instructions."""

from __future__ import annotations

import argparse
import enum
import sys
from typing import Callable, Optional

from .bus import Bus
from .cartridge import Cartridge, CartridgeError
from .opcodes import decode

STACK_BASE = 0x0100
RESET_VECTOR = 0xFFFC
IRQ_VECTOR = 0xFFFE

# Instructions that place the program counter themselves.
_OWN_PC = frozenset(
    {"JSR", "RTS", "BRK", "RTI", "JMP", "PHA", "PLA",
     "BCC", "BCS", "BEQ", "BMI", "BNE", "BPL", "BVC", "BVS"}
)
# Instructions that account for their whole cycle cost themselves.
_OWN_CYCLES = frozenset({"BRK", "RTI", "PHA", "PLA"})

# Operands of these mnemonics come through the store (address) helpers.
_ADDRESS_OPERAND = frozenset({"STA", "STX", "STY", "ASL", "LSR", "ROL"})


class Flag(enum.IntFlag):
    """Bits of the processor status register (N V - B D I Z C)."""

    CARRY = 0x01
    ZERO = 0x02
    INTERRUPT = 0x04
    DECIMAL = 0x08
    BREAK = 0x10
    UNUSED = 0x20
    OVERFLOW = 0x40
    NEGATIVE = 0x80


class CPU:
    """A 6502 core that executes one opcode at a time against a connected bus."""

    def __init__(self, bus: Optional[Bus] = None) -> None:
        self.bus = bus
        self.a = 0
        self.x = 0
        self.y = 0
        self.s = 0
        self.p = 0
        self.pc = 0
        self.cycles = 0
        self._handlers = self._build_handlers()

    # -- wiring -----------------------------------------------------------

    def connect_bus(self, bus: Bus) -> None:
        """Attach the bus used for every memory access."""
        self.bus = bus

    def _read(self, addr: int) -> int:
        if self.bus is None:
            raise RuntimeError("no bus connected")
        return self.bus.read(addr & 0xFFFF)

    def _write(self, addr: int, value: int) -> None:
        if self.bus is None:
            raise RuntimeError("no bus connected")
        self.bus.write(addr & 0xFFFF, value & 0xFF)

    def _build_handlers(self) -> dict[int, Callable[[], None]]:
        handlers: dict[int, Callable[[], None]] = {}
        for code in range(0x100):
            try:
                op = decode(code)
            except ValueError:
                continue
            handlers[code] = self._handler_for(op.mnemonic, op.mode)
        return handlers

    def _handler_for(self, mnemonic: str, mode: str) -> Callable[[], None]:
        name = "and_" if mnemonic == "AND" else mnemonic.lower()
        if mode == "accumulator":
            return getattr(self, f"{name}_a")
        if mode in ("implied", "relative"):
            return getattr(self, name)
        if mode == "indirect":
            return self.jmp_indirect
        instruction = getattr(self, name)
        prefix = "store" if mnemonic in _ADDRESS_OPERAND else "fetch"
        operand = getattr(self, f"{prefix}_{mode}")
        return lambda: instruction(operand())

    # -- control ----------------------------------------------------------

    def reset(self) -> None:
        """Enter the power-up state and load PC from the reset vector."""
        self.pc = self._read(RESET_VECTOR) | (self._read(RESET_VECTOR + 1) << 8)
        self.a = 0
        self.x = 0
        self.y = 0
        self.s = 0xFD
        self.p = 0b00100100
        self.cycles = 7

    def execute(self, code: int) -> None:
        """Run one opcode at the current PC, then advance PC and cycles."""
        op = decode(code)
        if self.bus is None:
            raise RuntimeError("no bus connected")
        self._handlers[code]()
        if op.mnemonic not in _OWN_PC:
            self.pc = (self.pc + op.size) & 0xFFFF
        if op.mnemonic not in _OWN_CYCLES:
            self.cycles += op.cycles

    # -- flags ------------------------------------------------------------

    def get_flag(self, flag: Flag) -> bool:
        """Return whether a status flag is set."""
        return bool(self.p & flag)

    def set_flag(self, flag: Flag, value: bool) -> None:
        """Set or clear a status flag."""
        if value:
            self.p |= flag
        else:
            self.p &= ~flag & 0xFF

    def _check(self, value: int) -> None:
        self.set_flag(Flag.ZERO, value == 0)
        self.set_flag(Flag.NEGATIVE, bool(value & 0x80))

    # -- addressing: operand values -----------------------------------------

    def _operand_word(self) -> int:
        return self._read(self.pc + 1) | (self._read(self.pc + 2) << 8)

    def _indexed(self, base: int, index: int) -> int:
        address = (base + index) & 0xFFFF
        if (base & 0xFF00) != (address & 0xFF00):
            self.cycles += 1
        return address

    def fetch_immediate(self) -> int:
        """Return the byte following the opcode."""
        return self._read(self.pc + 1)

    def fetch_zero_page(self) -> int:
        """Return the byte at the zero-page operand address."""
        return self._read(self._read(self.pc + 1))

    def fetch_zero_page_x(self) -> int:
        """Return the byte at the zero-page operand plus X, wrapped to the page."""
        return self._read((self._read(self.pc + 1) + self.x) & 0xFF)

    def fetch_zero_page_y(self) -> int:
        """Return the byte at the zero-page operand plus Y, wrapped to the page."""
        return self._read((self._read(self.pc + 1) + self.y) & 0xFF)

    def fetch_absolute(self) -> int:
        """Return the byte at the 16-bit operand address."""
        return self._read(self._operand_word())

    def fetch_absolute_x(self) -> int:
        """Return the byte at the operand plus X; a page crossing costs a cycle."""
        return self._read(self._indexed(self._operand_word(), self.x))

    def fetch_absolute_y(self) -> int:
        """Return the byte at the operand plus Y; a page crossing costs a cycle."""
        return self._read(self._indexed(self._operand_word(), self.y))

    def fetch_indirect_x(self) -> int:
        """Return the byte through the zero-page pointer at operand plus X."""
        pointer = (self._read(self.pc + 1) + self.x) & 0xFF
        low = self._read(pointer)
        high = self._read((pointer + 1) & 0xFF)
        return self._read((high << 8) | low)

    def fetch_indirect_y(self) -> int:
        """Return the byte at the zero-page pointer's target plus Y."""
        pointer = self._read(self.pc + 1)
        base = self._read(pointer) | (self._read((pointer + 1) & 0xFF) << 8)
        return self._read(self._indexed(base, self.y))

    # -- addressing: effective addresses -------------------------------------

    def store_zero_page(self) -> int:
        """Return the zero-page operand address."""
        return self._read(self.pc + 1)

    def store_zero_page_x(self) -> int:
        """Return the zero-page operand plus X, wrapped to the page."""
        return (self._read(self.pc + 1) + self.x) & 0xFF

    def store_zero_page_y(self) -> int:
        """Return the zero-page operand plus Y, wrapped to the page."""
        return (self._read(self.pc + 1) + self.y) & 0xFF

    def store_absolute(self) -> int:
        """Return the 16-bit operand address."""
        return self._operand_word()

    def store_absolute_x(self) -> int:
        """Return the 16-bit operand plus X."""
        return (self._operand_word() + self.x) & 0xFFFF

    def store_absolute_y(self) -> int:
        """Return the 16-bit operand plus Y."""
        return (self._operand_word() + self.y) & 0xFFFF

    def store_indirect_x(self) -> int:
        """Return the address held by the zero-page pointer at operand plus X."""
        index = (self._read(self.pc + 1) + self.x) & 0xFF
        return (self._read((index + 1) & 0xFF) << 8) | self._read(index)

    def store_indirect_y(self) -> int:
        """Return the address held by the zero-page pointer at operand plus Y."""
        index = (self._read(self.pc + 1) + self.y) & 0xFF
        return (self._read((index + 1) & 0xFF) << 8) | self._read(index)

    # -- loads and stores ----------------------------------------------------

    def lda(self, value: int) -> None:
        self.a = value & 0xFF
        self._check(self.a)

    def ldx(self, value: int) -> None:
        self.x = value & 0xFF
        self._check(self.x)

    def ldy(self, value: int) -> None:
        self.y = value & 0xFF
        self._check(self.y)

    def sta(self, addr: int) -> None:
        self._write(addr, self.a)

    def stx(self, addr: int) -> None:
        self._write(addr, self.x)

    def sty(self, addr: int) -> None:
        self._write(addr, self.y)

    # -- stack -------------------------------------------------------------

    def _push(self, value: int) -> None:
        self._write(STACK_BASE + self.s, value)
        self.s = (self.s - 1) & 0xFF

    def _pull(self) -> int:
        value = self._read(STACK_BASE + self.s)
        self.s = (self.s + 1) & 0xFF
        return value

    def pha(self) -> None:
        self._push(self.a)
        self.pc = (self.pc + 1) & 0xFFFF
        self.cycles += 3

    def pla(self) -> None:
        self.a = self._pull()
        self._check(self.a)
        self.pc = (self.pc + 1) & 0xFFFF
        self.cycles += 4

    def php(self) -> None:
        self._push(self.p)

    def plp(self) -> None:
        self.p = self._pull()

    # -- transfers, increments ----------------------------------------------

    def tax(self) -> None:
        self.x = self.a
        self._check(self.x)

    def tay(self) -> None:
        self.y = self.a
        self._check(self.y)

    def txa(self) -> None:
        self.a = self.x
        self._check(self.a)

    def tya(self) -> None:
        self.a = self.y
        self._check(self.a)

    def tsx(self) -> None:
        self.x = self.s

    def txs(self) -> None:
        self.s = self.x

    def inx(self) -> None:
        self.x = (self.x + 1) & 0xFF
        self._check(self.x)

    def iny(self) -> None:
        self.y = (self.y + 1) & 0xFF
        self._check(self.y)

    def dex(self) -> None:
        self.x = (self.x - 1) & 0xFF
        self._check(self.x)

    def dey(self) -> None:
        self.y = (self.y - 1) & 0xFF
        self._check(self.y)

    # -- subroutines and interrupts -------------------------------------------

    def jsr(self, addr: int) -> None:
        return_address = (self.pc + 2) & 0xFFFF
        self._push(return_address >> 8)
        self._push(return_address & 0xFF)
        self.pc = addr & 0xFFFF

    def rts(self) -> None:
        self.s = (self.s + 1) & 0xFF
        low = self._read(STACK_BASE + self.s)
        self.s = (self.s + 1) & 0xFF
        high = self._read(STACK_BASE + self.s)
        self.s = (self.s + 1) & 0xFF
        self.pc = (high << 8) | low

    def brk(self) -> None:
        self.pc = (self.pc + 1) & 0xFFFF
        self._push(self.pc >> 8)
        self._push(self.pc & 0xFF)
        self._push(self.p | 0x30)
        self.set_flag(Flag.INTERRUPT, True)
        self.pc = (self._read(IRQ_VECTOR + 1) << 8) | self._read(IRQ_VECTOR)
        self.cycles += 7

    def rti(self) -> None:
        self.p = self._pull()
        low = self._pull()
        high = self._read(STACK_BASE + self.s)
        self.s = (self.s + 1) & 0xFF
        self.pc = (high << 8) | low
        self.cycles += 6

    # -- arithmetic and logic ------------------------------------------------

    def adc(self, value: int) -> None:
        value &= 0xFF
        result = value + self.a + (self.p & Flag.CARRY)
        self.set_flag(Flag.CARRY, (result >> 8) != 0)
        self.set_flag(Flag.OVERFLOW, bool(~(value ^ self.a) & (result ^ value) & 0x80))
        self.a = result & 0xFF
        self._check(self.a)

    def sbc(self, value: int) -> None:
        value &= 0xFF
        result = (~value + self.a + (self.p & Flag.CARRY)) & 0xFFFF
        self.set_flag(Flag.CARRY, (result >> 8) == 0)
        self.set_flag(Flag.OVERFLOW, bool((result ^ self.a) & (result ^ ~value) & 0x80))
        self.a = result & 0xFF
        self._check(self.a)

    def and_(self, value: int) -> None:
        self.a &= value & 0xFF
        self._check(self.a)

    def eor(self, value: int) -> None:
        self.a ^= value & 0xFF
        self._check(self.a)

    def ora(self, value: int) -> None:
        self.a |= value & 0xFF
        self._check(self.a)

    # -- shifts and rotates --------------------------------------------------

    def _shift_left(self, value: int, carry_in: bool) -> int:
        self.set_flag(Flag.CARRY, bool(value & 0x80))
        result = ((value << 1) & 0xFF) | (0x01 if carry_in else 0)
        self._check(result)
        return result

    def _shift_right(self, value: int, carry_in: bool) -> int:
        self.set_flag(Flag.CARRY, bool(value & 0x01))
        result = (value >> 1) | (0x80 if carry_in else 0)
        self._check(result)
        return result

    def asl(self, addr: int) -> None:
        self._write(addr, self._shift_left(self._read(addr), False))

    def asl_a(self) -> None:
        self.a = self._shift_left(self.a, False)

    def lsr(self, addr: int) -> None:
        self._write(addr, self._shift_right(self._read(addr), False))

    def lsr_a(self) -> None:
        self.a = self._shift_right(self.a, False)

    def rol(self, addr: int) -> None:
        carry = self.get_flag(Flag.CARRY)
        self._write(addr, self._shift_left(self._read(addr), carry))

    def rol_a(self) -> None:
        self.a = self._shift_left(self.a, self.get_flag(Flag.CARRY))

    def ror(self, addr: int) -> None:
        carry = self.get_flag(Flag.CARRY)
        self._write(addr, self._shift_right(self._read(addr), carry))

    def ror_a(self) -> None:
        self.a = self._shift_right(self.a, self.get_flag(Flag.CARRY))

    # -- branches ------------------------------------------------------------

    def _branch(self, taken: bool) -> None:
        offset = self._read(self.pc + 1)
        if offset & 0x80:
            offset -= 0x100
        following = (self.pc + 2) & 0xFFFF
        if not taken:
            self.pc = following
            return
        target = (following + offset) & 0xFFFF
        if (target & 0xFF00) != (following & 0xFF00):
            self.cycles += 1
        self.pc = target
        self.cycles += 1

    def bcc(self) -> None:
        self._branch(not self.get_flag(Flag.CARRY))

    def bcs(self) -> None:
        self._branch(self.get_flag(Flag.CARRY))

    def beq(self) -> None:
        self._branch(self.get_flag(Flag.ZERO))

    def bmi(self) -> None:
        self._branch(self.get_flag(Flag.NEGATIVE))

    def bne(self) -> None:
        self._branch(not self.get_flag(Flag.ZERO))

    def bpl(self) -> None:
        self._branch(not self.get_flag(Flag.NEGATIVE))

    def bvc(self) -> None:
        self._branch(not self.get_flag(Flag.OVERFLOW))

    def bvs(self) -> None:
        self._branch(self.get_flag(Flag.OVERFLOW))

    # -- flags and comparisons -----------------------------------------------

    def bit(self, value: int) -> None:
        self.set_flag(Flag.ZERO, (self.a & value) == 0)
        self.set_flag(Flag.NEGATIVE, bool(value & 0x80))
        self.set_flag(Flag.OVERFLOW, bool(value & 0x40))

    def clc(self) -> None:
        self.set_flag(Flag.CARRY, False)

    def cld(self) -> None:
        self.set_flag(Flag.DECIMAL, False)

    def cli(self) -> None:
        self.set_flag(Flag.INTERRUPT, False)

    def clv(self) -> None:
        self.set_flag(Flag.OVERFLOW, False)

    def sec(self) -> None:
        self.set_flag(Flag.CARRY, True)

    def sed(self) -> None:
        self.set_flag(Flag.DECIMAL, True)

    def sei(self) -> None:
        self.set_flag(Flag.INTERRUPT, True)

    def _compare(self, register: int, value: int) -> None:
        value &= 0xFF
        self.set_flag(Flag.CARRY, register >= value)
        self.set_flag(Flag.ZERO, register == value)
        self.set_flag(Flag.NEGATIVE, bool((register - value) & 0x80))

    def cmp(self, value: int) -> None:
        self._compare(self.a, value)

    def cpx(self, value: int) -> None:
        self._compare(self.x, value)

    def cpy(self, value: int) -> None:
        self._compare(self.y, value)

    # -- memory increments and jumps ------------------------------------------

    def inc(self, addr: int) -> None:
        value = (self._read(addr) + 1) & 0xFF
        self._write(addr, value)
        self._check(value)

    def dec(self, addr: int) -> None:
        value = (self._read(addr) - 1) & 0xFF
        self._write(addr, value)
        self._check(value)

    def jmp(self, addr: int) -> None:
        self.pc = addr & 0xFFFF

    def jmp_indirect(self) -> None:
        pointer = self._operand_word()
        low = self._read(pointer)
        if (pointer & 0x00FF) == 0x00FF:
            high = self._read(pointer & 0xFF00)
        else:
            high = self._read(pointer + 1)
        self.pc = (high << 8) | low

    def nop(self) -> None:
        """Do nothing."""


def main(argv: Optional[list[str]] = None) -> int:
    """Load a cartridge, attach it to a CPU and bring the CPU out of reset."""
    parser = argparse.ArgumentParser(prog="nescpu")
    parser.add_argument("rom", nargs="?", default="nestest.nes")
    args = parser.parse_args(argv)
    try:
        cartridge = Cartridge.from_file(args.rom)
    except CartridgeError:
        print(f"Failed to load cartridge: {args.rom}", file=sys.stderr)
        return 1
    cpu = CPU()
    cpu.connect_bus(Bus(cartridge))
    cpu.reset()
    return 0