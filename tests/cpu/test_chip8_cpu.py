"""Tests for the CHIP-8 execution engine."""

from __future__ import annotations

import random

import pytest

from pychip8.cpu import CPU, UnknownInstructionError, decode
from pychip8.system import Machine, MachineConfig, create_machine


def make_machine(**kwargs) -> Machine:
    return create_machine(MachineConfig(**kwargs))


def execute(machine: Machine, raw: int) -> None:
    machine.cpu.execute(decode(raw), machine.bus)


def test_initial_state() -> None:
    machine = make_machine()
    state = machine.cpu.state

    assert state.pc == 0x200
    assert state.sp == 0
    assert state.i == 0
    assert list(state.v) == [0] * 16
    assert state.stack == [0] * 16


def test_cls_clears_display() -> None:
    machine = make_machine()
    display = machine.display
    display.draw_pixel(1, 0, 1.0, True)
    display.draw_pixel(1, 3, 1.0, True)
    display.draw_pixel(4, 1, 1.0, True)

    execute(machine, 0x00E0)

    assert not display.get_pixel(1, 0)
    assert not display.get_pixel(1, 3)
    assert not display.get_pixel(4, 1)
    assert machine.cpu.state.pc == 0x202


def test_jp_sets_pc_without_advance() -> None:
    machine = make_machine()
    execute(machine, 0x1ABA)
    assert machine.cpu.state.pc == 0xABA


def test_call_pushes_return_address() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0xCBD

    execute(machine, 0x2123)

    assert state.pc == 0x123
    assert state.sp == 1
    assert state.stack[state.sp - 1] == 0xCBF


def test_call_then_ret_round_trip() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0xCBD

    execute(machine, 0x2123)
    execute(machine, 0x00EE)

    assert state.pc == 0xCBF
    assert state.sp == 0


def test_nested_calls_unwind_in_order() -> None:
    machine = make_machine()
    state = machine.cpu.state

    execute(machine, 0x2300)
    execute(machine, 0x2400)
    assert state.sp == 2

    execute(machine, 0x00EE)
    assert state.pc == 0x302
    execute(machine, 0x00EE)
    assert state.pc == 0x202


def test_se_skips_when_equal() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0x5
    state.v[0x3] = 0x8

    execute(machine, 0x3307)
    assert state.pc == 0x7

    state.pc = 0x5
    execute(machine, 0x3308)
    assert state.pc == 0x9


def test_sne_skips_when_not_equal() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0x5
    state.v[0x3] = 0x21

    execute(machine, 0x4320)
    assert state.pc == 0x9

    state.pc = 0x5
    execute(machine, 0x4321)
    assert state.pc == 0x7


def test_ld_vx_byte() -> None:
    machine = make_machine()
    execute(machine, 0x6513)
    assert machine.cpu.state.v[0x5] == 0x13


def test_add_vx_byte_leaves_flag_alone() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0xC] = 0x12
    state.v[0xF] = 0x7

    execute(machine, 0x7C05)

    assert state.v[0xC] == 0x17
    assert state.v[0xF] == 0x7


def test_add_vx_byte_wraps() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x0] = 0xFF

    execute(machine, 0x7002)

    assert state.v[0x0] == 0x01
    assert state.v[0xF] == 0x00


def test_ld_vx_vy() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0xD] = 0xFF
    state.v[0xE] = 0x12

    execute(machine, 0x8DE0)

    assert state.v[0xD] == 0x12


def test_and_vx_vy() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0] = 0x3
    state.v[1] = 0xE

    execute(machine, 0x8012)

    assert state.v[0] == 0x2


def test_xor_vx_vy() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0xE] = 0xFF
    state.v[0x2] = 0x10

    execute(machine, 0x8E23)

    assert state.v[0xE] == 0xEF


def test_add_vx_vy_without_carry() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0xB] = 0x2
    state.v[0xA] = 0x2

    execute(machine, 0x8BA4)

    assert state.v[0xB] == 0x4
    assert state.v[0xF] == 0x0


def test_add_vx_vy_with_carry() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0xB] = 0xFF
    state.v[0xA] = 0x2

    execute(machine, 0x8BA4)

    assert state.v[0xB] == 0x1
    assert state.v[0xF] == 0x1


def test_sub_vx_vy_without_borrow() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x3] = 0x9
    state.v[0xB] = 0x4

    execute(machine, 0x83B5)

    assert state.v[0x3] == 0x5
    assert state.v[0xF] == 0x1


def test_sub_vx_vy_with_borrow_wraps() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x3] = 0x9
    state.v[0xB] = 0xF

    execute(machine, 0x83B5)

    assert state.v[0x3] == 0xFA
    assert state.v[0xF] == 0x0


def test_sub_equal_values_clears_flag() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x1] = 0x40
    state.v[0x2] = 0x40

    execute(machine, 0x8125)

    assert state.v[0x1] == 0x00
    assert state.v[0xF] == 0x0


def test_shr_sets_flag_from_low_bit() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x1] = 0b10111010

    execute(machine, 0x8106)
    assert state.v[0xF] == 0x0
    assert state.v[0x1] == 0b1011101

    state.v[0x1] = 0b11111011
    execute(machine, 0x8106)
    assert state.v[0xF] == 0x1
    assert state.v[0x1] == 0b1111101


def test_shr_ignores_vy() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x1] = 0x04
    state.v[0x2] = 0xFF

    execute(machine, 0x8126)

    assert state.v[0x1] == 0x02
    assert state.v[0x2] == 0xFF


def test_ld_i() -> None:
    machine = make_machine()
    execute(machine, 0xA123)
    assert machine.cpu.state.i == 0x123


def test_rnd_masks_random_byte() -> None:
    machine = make_machine(seed=1234)
    expected = random.Random(1234).randrange(0x100) & 0x0F

    execute(machine, 0xC40F)

    assert machine.cpu.state.v[0x4] == expected


def test_rnd_with_zero_mask_yields_zero() -> None:
    machine = make_machine(seed=7)
    machine.cpu.state.v[0x2] = 0xAA
    execute(machine, 0xC200)
    assert machine.cpu.state.v[0x2] == 0


def test_skp_skips_when_key_matches() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0x2
    state.v[0x3] = 0xA
    machine.keyboard.set_key(0xA)

    execute(machine, 0xE39E)

    assert state.pc == 0x6


def test_skp_does_not_skip_on_other_key() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0x2
    state.v[0x3] = 0xA
    machine.keyboard.set_key(0xB)

    execute(machine, 0xE39E)

    assert state.pc == 0x4


def test_sknp_skips_when_key_differs() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0x2
    state.v[0x2] = 0xA
    machine.keyboard.set_key(0xB)

    execute(machine, 0xE2A1)

    assert state.pc == 0x6


def test_ld_vx_dt() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.delay_timer = 0xF

    execute(machine, 0xF407)

    assert state.v[0x4] == 0xF


def test_ld_vx_k_waits_for_key() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.pc = 0x2

    execute(machine, 0xF10A)
    assert state.pc == 0x2
    assert state.v[0x1] == 0x0

    machine.keyboard.set_key(0xD)
    execute(machine, 0xF10A)
    assert state.pc == 0x4
    assert state.v[0x1] == 0xD


def test_ld_dt_and_st_from_register() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x3] = 0xBB
    state.v[0xA] = 0x7

    execute(machine, 0xF315)
    execute(machine, 0xFA18)

    assert state.delay_timer == 0xBB
    assert state.sound_timer == 0x7


def test_add_i_vx() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.i = 0x7
    state.v[0xB] = 0x3

    execute(machine, 0xFB1E)

    assert state.i == 0xA


def test_ld_f_points_at_font_glyph() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x2] = 0xA

    execute(machine, 0xF229)

    assert state.i == 0x32
    assert machine.memory.read_block(state.i, 5) == bytes([0xF0, 0x90, 0xF0, 0x90, 0x90])


def test_ld_bcd() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0xE] = 123
    state.i = 0x300

    execute(machine, 0xFE33)

    assert machine.memory.read_block(0x300, 3) == bytes([1, 2, 3])


def test_ld_bcd_single_digit() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x0] = 7
    state.i = 0x300

    execute(machine, 0xF033)

    assert machine.memory.read_block(0x300, 3) == bytes([0, 0, 7])


def test_store_registers_leaves_i_unchanged() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.i = 0x302
    state.v[0x0] = 0xB
    state.v[0x1] = 0xA
    state.v[0x2] = 0x9
    state.v[0x3] = 0x8

    execute(machine, 0xF255)

    assert machine.memory.read_block(0x302, 4) == bytes([0xB, 0xA, 0x9, 0x0])
    assert state.i == 0x302


def test_load_registers_leaves_i_unchanged() -> None:
    machine = make_machine()
    machine.memory.load_block(0x300, bytes([0x0, 0xF, 0xE, 0xD, 0xC, 0xB]))
    state = machine.cpu.state
    state.i = 0x301

    execute(machine, 0xF365)

    assert list(state.v[:5]) == [0xF, 0xE, 0xD, 0xC, 0x0]
    assert state.i == 0x301


@pytest.mark.parametrize("raw", [0x00E1, 0x0123, 0x5120, 0x8127, 0x9120, 0xB123, 0xE000, 0xF0FF])
def test_unknown_instruction_raises(raw: int) -> None:
    machine = make_machine()
    pc_before = machine.cpu.state.pc

    with pytest.raises(UnknownInstructionError) as excinfo:
        execute(machine, raw)

    assert excinfo.value.raw_opcode == raw
    assert f"{raw:#06x}" in str(excinfo.value)
    assert machine.cpu.state.pc == pc_before


def test_instruction_count_tracks_executed_words() -> None:
    machine = make_machine()
    execute(machine, 0x6001)
    execute(machine, 0x6102)
    assert machine.cpu.instruction_count == 2


def test_reset_clears_registers_and_display() -> None:
    machine = make_machine()
    cpu: CPU = machine.cpu
    cpu.state.v[0x4] = 0x55
    cpu.state.i = 0x123
    cpu.state.sp = 3
    cpu.state.delay_timer = 9
    machine.display.draw_pixel(0, 0, 1.0, True)

    cpu.reset(machine.display)

    assert cpu.state.v[0x4] == 0
    assert cpu.state.i == 0
    assert cpu.state.sp == 0
    assert cpu.state.pc == 0x200
    assert cpu.state.delay_timer == 0
    assert not machine.display.get_pixel(0, 0)


def test_state_clone_is_independent() -> None:
    machine = make_machine()
    state = machine.cpu.state
    state.v[0x1] = 0x11
    snapshot = state.clone()

    state.v[0x1] = 0x22
    state.stack[0] = 0x400

    assert snapshot.v[0x1] == 0x11
    assert snapshot.stack[0] == 0
