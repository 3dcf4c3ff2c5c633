"""NES CPU core, CPU memory bus, opcode table and iNES cartridge loader."""

__version__ = "0.1.0"
__all__ = ["bus", "cartridge", "cpu", "opcodes"]