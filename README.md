# nescpu

A small emulator core for the NES processor. It has the CPU with its
registers, status flags, addressing modes and instruction methods, the CPU
memory bus with 2 KiB of RAM, and a loader for iNES cartridges holding
PRG-ROM.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `nescpu.cartridge`

- `Cartridge.from_bytes(data)` builds a cartridge from a raw iNES image. The
  16-byte header is skipped. If the image holds exactly two complete 16 KiB
  PRG banks they are mapped in order. Any other count of complete banks
  maps the first bank twice, filling `0x8000`–`0xFFFF`.
- `Cartridge.from_file(path)` reads an iNES file and does the same.
- `CartridgeError` is raised in these cases:
  - the image is shorter than the header;
  - the image holds no complete PRG bank;
  - the file cannot be read.
- `Cartridge.read(addr)` returns the PRG-ROM byte for an address at
  `0x8000` or above. Any other address reads as 0.
- `Cartridge.write(addr, value)` discards the write. It raises `ValueError`
  if the address is outside `0x0000`–`0xFFFF` or the value is outside
  `0x00`–`0xFF`.
- The ROM bytes are available as `Cartridge.prg_rom`.

### `nescpu.bus`

`Bus(cartridge=None)` maps the 16-bit CPU address space.

| Range | What it maps to |
| --- | --- |
| `0x0000`–`0x1FFF` | 2 KiB of RAM (`Bus.ram`), mirrored every `0x0800` bytes |
| `0x2000`–`0x401F` | PPU, APU and I/O registers: reads return 0, writes are ignored |
| `0x4020`–`0xFFFF` | The connected cartridge, if any; otherwise reads return 0 and writes are ignored |

`Bus.read(addr)` and `Bus.write(addr, value)` mask the address to 16 bits and
the value to 8 bits.

### `nescpu.opcodes`

`decode(code)` returns the `Opcode` entry for an instruction byte. The entry
has these fields:

- `code`
- `mnemonic`
- `mode`, an addressing mode name such as `"immediate"` or `"absolute_x"`
- `size`, the length in bytes
- `cycles`, the base cycle count

`decode` raises `ValueError` for a byte outside `0x00`–`0xFF` or for an opcode
that is not in the table.

### `nescpu.cpu`

`CPU(bus=None)` holds these registers and counters as plain integer
attributes:

- `a`, `x`, `y`
- `s`, the stack pointer
- `p`, the status register
- `pc`, the program counter
- `cycles`

`Flag` is an `IntFlag` of the status bits: `CARRY`, `ZERO`, `INTERRUPT`,
`DECIMAL`, `BREAK`, `UNUSED`, `OVERFLOW` and `NEGATIVE`.

- `connect_bus(bus)` attaches the bus. Memory access without a bus raises
  `RuntimeError`.
- `reset()` loads `pc` from the reset vector at `0xFFFC`/`0xFFFD` and sets the
  power-up state:
  - `a`, `x` and `y` to 0
  - `s` to `0xFD`
  - `p` to `0x24`
  - `cycles` to 7
- `execute(code)` runs the given opcode against the operands at `pc + 1`.
  It then advances `pc` by the instruction size and adds the base cycles.
  Jumps, branches, calls, returns and the stack-pointer instructions that
  set `pc` themselves are the exception to both.
- `get_flag(flag)` and `set_flag(flag, value)` read and change status bits.
- Operand helpers:
  - `fetch_*` methods return operand values for each addressing mode. The
    indexed absolute and indirect-Y forms add a cycle on a page crossing.
  - `store_*` methods return effective addresses.
- There is one method per instruction:
  - `lda`, `sta`, `adc`, `sbc`, `cmp`, `bit`, `jsr`, `rts`, `brk`, `rti`, and so on
  - `and_` for AND
  - `asl_a`, `lsr_a`, `rol_a` and `ror_a` for the accumulator forms
  - `jmp_indirect`, which reproduces the page-wrap behaviour of the indirect jump

## Example

```python
from nescpu.bus import Bus
from nescpu.cartridge import Cartridge
from nescpu.cpu import CPU, Flag
from nescpu.opcodes import decode

# RAM is mirrored every 2 KiB.
bus = Bus()
bus.write(0x0002, 0x42)
assert bus.read(0x0802) == 0x42

# A single 16 KiB PRG bank appears at both 0x8000 and 0xC000.
image = bytes(16) + bytes(range(256)) * 64
cart = Cartridge.from_bytes(image)
assert cart.read(0x8005) == cart.read(0xC005) == 5

# Look up an instruction byte.
print(decode(0xA9))

# Drive the processor.
cpu = CPU()
cpu.connect_bus(bus)
cpu.reset()
cpu.execute(0xE8)   # INX
assert cpu.x == 1 and not cpu.get_flag(Flag.ZERO)
```

## Command line

```
nescpu nestest.nes
```

This loads the given iNES file as a cartridge, attaches it to a bus and a
CPU, and resets the CPU. The file defaults to `nestest.nes`. If the file
cannot be loaded, the command prints `Failed to load cartridge: <file>` to
standard error and exits with status 1. Otherwise it exits with status 0
and prints nothing.

## What this package does not do

- **No program run loop.** The CPU does not fetch and run instructions from
  memory on its own. `execute` takes the opcode byte from the caller, and
  the command line stops after reset.
- **Partial instruction table.** Only the opcodes in `nescpu.opcodes` can be
  executed. For example, the memory forms of ROL beyond zero page, ROR, and
  NOP have methods but no table entries.
- **No decimal mode or interrupt lines.** There is no decimal arithmetic, and
  no IRQ or NMI handling other than BRK.
- **No picture, sound or input.** There is no PPU, APU or controller input,
  so nothing is displayed or played.
- **NROM only.** Cartridges are plain PRG-ROM mappings; CHR-ROM and mappers
  are not supported.