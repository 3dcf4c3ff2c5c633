import pytest

from nescpu.bus import Bus
from nescpu.cartridge import Cartridge
from nescpu.cpu import CPU, Flag, main

START = 0x0200


def _cartridge(reset=(0x00, 0x80), irq=(0x00, 0x90)):
    prg = bytearray(0x8000)
    prg[0x7FFC], prg[0x7FFD] = reset
    prg[0x7FFE], prg[0x7FFF] = irq
    return Cartridge(bytes(prg))


def _cpu(program=b"", at=START):
    bus = Bus(_cartridge())
    for offset, byte in enumerate(program):
        bus.write(at + offset, byte)
    cpu = CPU()
    cpu.connect_bus(bus)
    cpu.pc = at
    cpu.s = 0xFD
    return cpu


def _run(cpu):
    cpu.execute(cpu.bus.read(cpu.pc))


def test_reset_state():
    cpu = CPU(Bus(_cartridge()))
    cpu.reset()
    assert cpu.pc == 0x8000
    assert (cpu.a, cpu.x, cpu.y) == (0, 0, 0)
    assert cpu.s == 0xFD
    assert cpu.p == 0b00100100
    assert cpu.cycles == 7


def test_lda_immediate_advances_pc_and_cycles():
    cpu = _cpu(bytes([0xA9, 0x42]))
    _run(cpu)
    assert cpu.a == 0x42
    assert cpu.pc == START + 2
    assert cpu.cycles == 2
    assert not cpu.get_flag(Flag.ZERO)
    assert not cpu.get_flag(Flag.NEGATIVE)


def test_lda_sets_zero_and_negative_flags():
    cpu = _cpu(bytes([0xA9, 0x00, 0xA9, 0x80]))
    _run(cpu)
    assert cpu.get_flag(Flag.ZERO)
    _run(cpu)
    assert cpu.get_flag(Flag.NEGATIVE)
    assert not cpu.get_flag(Flag.ZERO)


def test_sta_zero_page_writes_accumulator():
    cpu = _cpu(bytes([0x85, 0x10]))
    cpu.a = 0x37
    _run(cpu)
    assert cpu.bus.read(0x10) == 0x37


@pytest.mark.parametrize("a,value", [(0x10, 0x20), (0x7F, 0x01), (0xF0, 0x30), (0x00, 0xFF)])
def test_adc_then_sbc_restores_accumulator(a, value):
    cpu = _cpu()
    cpu.a = a
    cpu.clc()
    cpu.adc(value)
    cpu.sec()
    cpu.sbc(value)
    assert cpu.a == a


def test_adc_carry_out_wraps_to_zero():
    cpu = _cpu()
    cpu.a = 0xFF
    cpu.adc(0x01)
    assert cpu.a == 0
    assert cpu.get_flag(Flag.CARRY)
    assert cpu.get_flag(Flag.ZERO)


def test_adc_signed_overflow():
    cpu = _cpu()
    cpu.a = 0x7F
    cpu.adc(0x01)
    assert cpu.get_flag(Flag.OVERFLOW)
    assert cpu.get_flag(Flag.NEGATIVE)
    assert not cpu.get_flag(Flag.CARRY)


def test_sbc_equal_values_sets_carry_and_zero():
    cpu = _cpu()
    cpu.a = 0x05
    cpu.sec()
    cpu.sbc(0x05)
    assert cpu.a == 0
    assert cpu.get_flag(Flag.CARRY)
    assert cpu.get_flag(Flag.ZERO)


def test_cmp_flags():
    cpu = _cpu()
    cpu.a = 0x40
    cpu.cmp(0x40)
    assert cpu.get_flag(Flag.ZERO) and cpu.get_flag(Flag.CARRY)
    cpu.cmp(0x41)
    assert not cpu.get_flag(Flag.CARRY)
    assert cpu.get_flag(Flag.NEGATIVE)


def test_branch_not_taken():
    cpu = _cpu(bytes([0xD0, 0x04]))
    cpu.set_flag(Flag.ZERO, True)
    _run(cpu)
    assert cpu.pc == START + 2
    assert cpu.cycles == 2


def test_branch_taken_same_page():
    cpu = _cpu(bytes([0xD0, 0x04]))
    _run(cpu)
    assert cpu.pc == START + 2 + 0x04
    assert cpu.cycles == 3


def test_branch_backwards_to_itself():
    cpu = _cpu(bytes([0xF0, 0xFE]))
    cpu.set_flag(Flag.ZERO, True)
    _run(cpu)
    assert cpu.pc == START


def test_branch_page_cross_costs_extra_cycle():
    cpu = _cpu(bytes([0x10, 0x20]), at=0x02F0)
    _run(cpu)
    assert cpu.cycles == 4
    assert cpu.pc & 0xFF00 == 0x0300


def test_jsr_pushes_return_address():
    cpu = _cpu()
    cpu.jsr(0x0300)
    assert cpu.pc == 0x0300
    assert cpu.bus.read(0x01FD) == (START + 2) >> 8
    assert cpu.bus.read(0x01FC) == (START + 2) & 0xFF
    assert cpu.s == 0xFB


def test_jmp_indirect_page_wrap():
    cpu = _cpu(bytes([0x6C, 0xFF, 0x03]))
    cpu.bus.write(0x03FF, 0x34)
    cpu.bus.write(0x0300, 0x12)
    cpu.bus.write(0x0400, 0x99)
    _run(cpu)
    assert cpu.pc == 0x1234


def test_brk_pushes_state_and_jumps_to_vector():
    cpu = _cpu()
    cpu.p = 0
    cpu.brk()
    assert cpu.pc == 0x9000
    assert cpu.get_flag(Flag.INTERRUPT)
    assert cpu.bus.read(0x01FB) & 0x30 == 0x30
    assert cpu.cycles == 7
    assert cpu.s == 0xFA


def test_rti_reads_status_and_pc_from_stack():
    cpu = _cpu()
    cpu.s = 0xF0
    cpu.bus.write(0x01F0, 0xC3)
    cpu.bus.write(0x01F1, 0x78)
    cpu.bus.write(0x01F2, 0x05)
    cpu.rti()
    assert cpu.p == 0xC3
    assert cpu.pc == 0x0578
    assert cpu.s == 0xF3
    assert cpu.cycles == 6


def test_pha_writes_stack_and_moves_pc():
    cpu = _cpu(bytes([0x48]))
    cpu.a = 0x5A
    _run(cpu)
    assert cpu.bus.read(0x01FD) == 0x5A
    assert cpu.s == 0xFC
    assert cpu.pc == START + 1
    assert cpu.cycles == 3


def test_shift_and_rotate_accumulator():
    cpu = _cpu()
    cpu.a = 0x81
    cpu.asl_a()
    assert cpu.get_flag(Flag.CARRY)
    cpu.rol_a()
    assert cpu.a & 0x01 == 0x01
    cpu.a = 0x01
    cpu.clc()
    cpu.lsr_a()
    assert cpu.a == 0 and cpu.get_flag(Flag.ZERO) and cpu.get_flag(Flag.CARRY)
    cpu.ror_a()
    assert cpu.a == 0x80 and cpu.get_flag(Flag.NEGATIVE)


def test_inc_dec_memory_round_trip_and_wrap():
    cpu = _cpu()
    cpu.bus.write(0x20, 0xFF)
    cpu.inc(0x20)
    assert cpu.bus.read(0x20) == 0
    assert cpu.get_flag(Flag.ZERO)
    cpu.dec(0x20)
    assert cpu.bus.read(0x20) == 0xFF
    assert cpu.get_flag(Flag.NEGATIVE)


def test_inc_zero_page_opcode_uses_fetched_value_as_address():
    cpu = _cpu(bytes([0xE6, 0x10]))
    cpu.bus.write(0x10, 0x30)
    cpu.bus.write(0x30, 0x07)
    _run(cpu)
    assert cpu.bus.read(0x30) == 0x08
    assert cpu.bus.read(0x10) == 0x30


def test_bit_copies_high_bits():
    cpu = _cpu()
    cpu.a = 0x01
    cpu.bit(0xC0)
    assert cpu.get_flag(Flag.ZERO)
    assert cpu.get_flag(Flag.NEGATIVE)
    assert cpu.get_flag(Flag.OVERFLOW)


def test_fetch_absolute_x_page_cross_adds_cycle():
    cpu = _cpu(bytes([0xBD, 0xFF, 0x02]))
    cpu.x = 1
    cpu.bus.write(0x0300, 0x66)
    _run(cpu)
    assert cpu.a == 0x66
    assert cpu.cycles == 5


def test_store_indirect_y_indexes_the_pointer():
    cpu = _cpu(bytes([0x91, 0x10]))
    cpu.y = 2
    cpu.bus.write(0x12, 0x00)
    cpu.bus.write(0x13, 0x05)
    cpu.a = 0x44
    _run(cpu)
    assert cpu.bus.read(0x0500) == 0x44


def test_tsx_leaves_flags_alone():
    cpu = _cpu()
    cpu.s = 0
    cpu.p = 0
    cpu.tsx()
    assert cpu.x == 0
    assert not cpu.get_flag(Flag.ZERO)


def test_flag_round_trip():
    cpu = _cpu()
    cpu.p = 0
    for flag in Flag:
        cpu.set_flag(flag, True)
        assert cpu.get_flag(flag)
        cpu.set_flag(flag, False)
        assert not cpu.get_flag(flag)
    assert cpu.p == 0


def test_unsupported_opcode_raises():
    with pytest.raises(ValueError):
        _cpu().execute(0x02)


def test_execute_without_bus_raises():
    with pytest.raises(RuntimeError):
        CPU().execute(0xEA if False else 0xA9)


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "missing.nes"
    assert main([str(missing)]) == 1
    assert "Failed to load cartridge" in capsys.readouterr().err


def test_main_valid_file(tmp_path):
    rom = tmp_path / "game.nes"
    rom.write_bytes(bytes(16) + bytes(16 * 1024))
    assert main([str(rom)]) == 0