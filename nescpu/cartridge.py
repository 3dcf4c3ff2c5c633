"""iNES cartridge images holding PRG-ROM mapped at $8000-$FFFF."""

from __future__ import annotations

import os
from dataclasses import dataclass

HEADER_SIZE = 16
PRG_BANK_SIZE = 16 * 1024
PRG_BASE = 0x8000


class CartridgeError(Exception):
    """Raised when a cartridge image cannot be loaded."""


@dataclass(frozen=True)
class Cartridge:
    """A read-only cartridge exposing 32 KiB of PRG-ROM."""

    prg_rom: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "Cartridge":
        """Build a cartridge from a raw iNES image.

        The 16-byte header is skipped. Two PRG banks are mapped as-is;
        any other bank count maps the first bank twice to fill 32 KiB.
        """
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise CartridgeError("image is shorter than the iNES header")
        bank_count = (len(data) - HEADER_SIZE) // PRG_BANK_SIZE
        if bank_count < 1:
            raise CartridgeError("image holds no complete PRG-ROM bank")
        first = data[HEADER_SIZE:HEADER_SIZE + PRG_BANK_SIZE]
        if bank_count == 2:
            second = data[HEADER_SIZE + PRG_BANK_SIZE:HEADER_SIZE + 2 * PRG_BANK_SIZE]
            return cls(first + second)
        return cls(first + first)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "Cartridge":
        """Load a cartridge from an iNES file on disk."""
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise CartridgeError(f"cannot read cartridge {path!s}: {exc}") from exc
        return cls.from_bytes(data)

    def read(self, addr: int) -> int:
        """Return the PRG-ROM byte at a CPU address, or 0 if unmapped."""
        index = (addr & 0xFFFF) - PRG_BASE
        if 0 <= index < len(self.prg_rom):
            return self.prg_rom[index]
        return 0

    def write(self, addr: int, value: int) -> None:
        """Accept a bus write and discard it, since the ROM is read-only.

        Raises ValueError if the address or value does not fit the bus.
        """
        if not 0 <= addr <= 0xFFFF:
            raise ValueError(f"address out of range: {addr!r}")
        if not 0 <= value <= 0xFF:
            raise ValueError(f"value out of range: {value!r}")