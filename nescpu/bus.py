"""The CPU address bus: internal RAM, register windows and cartridge space."""

from __future__ import annotations

from typing import Optional

from .cartridge import Cartridge

RAM_SIZE = 0x0800


class Bus:
    """Routes CPU reads and writes to RAM or to the connected cartridge."""

    def __init__(self, cartridge: Optional[Cartridge] = None) -> None:
        self.cartridge = cartridge
        self.ram = bytearray(RAM_SIZE)

    def read(self, addr: int) -> int:
        """Read one byte from the 16-bit address space."""
        addr &= 0xFFFF
        if addr <= 0x1FFF:
            return self.ram[addr % RAM_SIZE]
        if addr <= 0x401F:
            # PPU, APU and I/O registers are not attached.
            return 0
        return self.cartridge.read(addr) if self.cartridge is not None else 0

    def write(self, addr: int, value: int) -> None:
        """Write one byte into the 16-bit address space."""
        addr &= 0xFFFF
        value &= 0xFF
        if addr <= 0x1FFF:
            self.ram[addr % RAM_SIZE] = value
        elif addr <= 0x401F:
            return
        elif self.cartridge is not None:
            self.cartridge.write(addr, value)