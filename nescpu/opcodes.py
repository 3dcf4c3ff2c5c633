"""The table of supported 6502 opcodes with their size and base cycle cost."""

from __future__ import annotations

from dataclasses import dataclass

_IMP = "implied"
_ACC = "accumulator"
_IMM = "immediate"
_ZP = "zero_page"
_ZPX = "zero_page_x"
_ZPY = "zero_page_y"
_ABS = "absolute"
_ABSX = "absolute_x"
_ABSY = "absolute_y"
_IND = "indirect"
_INDX = "indirect_x"
_INDY = "indirect_y"
_REL = "relative"


@dataclass(frozen=True)
class Opcode:
    """One decoded instruction: mnemonic, addressing mode, byte length, cycles."""

    code: int
    mnemonic: str
    mode: str
    size: int
    cycles: int


def _standard(mnemonic: str, codes: tuple[int, ...]) -> list[tuple]:
    """Entries for the eight addressing modes shared by the ALU group."""
    layout = (
        (_IMM, 2, 2), (_ZP, 2, 3), (_ZPX, 2, 4), (_ABS, 3, 4),
        (_ABSX, 3, 4), (_ABSY, 3, 4), (_INDX, 2, 6), (_INDY, 2, 5),
    )
    return [(code, mnemonic, *shape) for code, shape in zip(codes, layout)]


def _read_modify_write(mnemonic: str, codes: tuple[int, ...]) -> list[tuple]:
    layout = ((_ZP, 2, 5), (_ZPX, 2, 6), (_ABS, 3, 6), (_ABSX, 3, 7))
    return [(code, mnemonic, *shape) for code, shape in zip(codes, layout)]


def _build() -> dict[int, Opcode]:
    entries: list[tuple] = []
    entries += _standard("LDA", (0xA9, 0xA5, 0xB5, 0xAD, 0xBD, 0xB9, 0xA1, 0xB1))
    entries += [
        (0x85, "STA", _ZP, 2, 3), (0x95, "STA", _ZPX, 2, 4),
        (0x8D, "STA", _ABS, 3, 4), (0x9D, "STA", _ABSX, 3, 5),
        (0x99, "STA", _ABSY, 3, 5), (0x81, "STA", _INDX, 2, 6),
        (0x91, "STA", _INDY, 2, 6),
        (0x86, "STX", _ZP, 2, 3), (0x96, "STX", _ZPY, 2, 4), (0x8E, "STX", _ABS, 3, 4),
        (0x84, "STY", _ZP, 2, 3), (0x94, "STY", _ZPX, 2, 4), (0x8C, "STY", _ABS, 3, 4),
        (0xA2, "LDX", _IMM, 2, 2), (0xA6, "LDX", _ZP, 2, 3), (0xB6, "LDX", _ZPY, 2, 4),
        (0xAE, "LDX", _ABS, 3, 4), (0xBE, "LDX", _ABSY, 3, 4),
        (0xA0, "LDY", _IMM, 2, 2), (0xA4, "LDY", _ZP, 2, 3), (0xB4, "LDY", _ZPX, 2, 4),
        (0xAC, "LDY", _ABS, 3, 4), (0xBC, "LDY", _ABSX, 3, 4),
    ]
    entries += [
        (code, name, _IMP, 1, 2)
        for code, name in (
            (0xAA, "TAX"), (0x8A, "TXA"), (0xA8, "TAY"), (0x98, "TYA"),
            (0xBA, "TSX"), (0x9A, "TXS"),
            (0x38, "SEC"), (0xF8, "SED"), (0x78, "SEI"),
            (0x18, "CLC"), (0xD8, "CLD"), (0x58, "CLI"), (0xB8, "CLV"),
            (0xE8, "INX"), (0xCA, "DEX"), (0xC8, "INY"), (0x88, "DEY"),
        )
    ]
    entries += [
        (0x48, "PHA", _IMP, 1, 3), (0x68, "PLA", _IMP, 1, 4),
        (0x08, "PHP", _IMP, 1, 3), (0x28, "PLP", _IMP, 1, 3),
        (0x20, "JSR", _ABS, 3, 6), (0x60, "RTS", _IMP, 1, 6),
        (0x00, "BRK", _IMP, 1, 7), (0x40, "RTI", _IMP, 1, 6),
        (0x4C, "JMP", _ABS, 3, 3), (0x6C, "JMP", _IND, 3, 5),
    ]
    entries += [
        (code, name, _REL, 2, 2)
        for code, name in (
            (0x90, "BCC"), (0xB0, "BCS"), (0xF0, "BEQ"), (0x30, "BMI"),
            (0xD0, "BNE"), (0x10, "BPL"), (0x50, "BVC"), (0x70, "BVS"),
        )
    ]
    entries += _standard("CMP", (0xC9, 0xC5, 0xD5, 0xCD, 0xDD, 0xD9, 0xC1, 0xD1))
    entries += [
        (0xE0, "CPX", _IMM, 2, 2), (0xE4, "CPX", _ZP, 2, 3), (0xEC, "CPX", _ABS, 3, 4),
        (0xC0, "CPY", _IMM, 2, 2), (0xC4, "CPY", _ZP, 2, 3), (0xCC, "CPY", _ABS, 3, 4),
    ]
    entries += _standard("ADC", (0x69, 0x65, 0x75, 0x6D, 0x7D, 0x79, 0x61, 0x71))
    entries += _standard("SBC", (0xE9, 0xE5, 0xF5, 0xED, 0xFD, 0xF9, 0xE1, 0xF1))
    entries += _standard("AND", (0x29, 0x25, 0x35, 0x2D, 0x3D, 0x39, 0x21, 0x31))
    entries += _standard("EOR", (0x49, 0x45, 0x55, 0x4D, 0x5D, 0x59, 0x41, 0x51))
    entries += _standard("ORA", (0x09, 0x05, 0x15, 0x0D, 0x1D, 0x19, 0x01, 0x11))
    entries += [(0x24, "BIT", _ZP, 2, 3), (0x2C, "BIT", _ABS, 3, 4)]
    entries += _read_modify_write("INC", (0xE6, 0xF6, 0xEE, 0xFE))
    entries += _read_modify_write("DEC", (0xC6, 0xD6, 0xCE, 0xDE))
    entries += [(0x0A, "ASL", _ACC, 1, 2)]
    entries += _read_modify_write("ASL", (0x06, 0x16, 0x0E, 0x1E))
    entries += [(0x4A, "LSR", _ACC, 1, 2)]
    entries += _read_modify_write("LSR", (0x46, 0x56, 0x4E, 0x5E))
    entries += [(0x2A, "ROL", _ACC, 1, 2), (0x26, "ROL", _ZP, 2, 5)]
    return {entry[0]: Opcode(*entry) for entry in entries}


_TABLE = _build()


def decode(code: int) -> Opcode:
    """Return the opcode description for a byte; raise ValueError if unsupported."""
    if not 0 <= code <= 0xFF:
        raise ValueError(f"opcode byte out of range: {code!r}")
    try:
        return _TABLE[code]
    except KeyError:
        raise ValueError(f"unsupported opcode: 0x{code:02X}") from None