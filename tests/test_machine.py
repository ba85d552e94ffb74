"""Tests for the host-facing Machine wrapper."""

import numpy as np
import pytest
from chipcore import (
    Machine, MachineFault, DecodeError, StackUnderflowError, MemoryAccessError, RomTooLargeError
)
from chipcore.constants import MAX_ROM_SIZE
from chipcore.logging import ConsoleLogger
from conftest import rom


@pytest.fixture
def quiet_logger():
    return ConsoleLogger("test", log_level="CRITICAL")


def test_cycle_and_registers(quiet_logger):
    machine = Machine(rom(0x6005, 0x7003, 0xA123), logger=quiet_logger)

    for _ in range(3):
        machine.cycle()

    assert machine.V[0] == 8
    assert machine.I == 0x123
    assert machine.pc == 0x206
    assert not machine.halted


def test_display_is_read_only(quiet_logger):
    machine = Machine(rom(0xF029, 0xD005), logger=quiet_logger)
    machine.cycle()
    machine.cycle()

    display = machine.display
    assert display.shape == (32, 64)
    assert display.dtype == np.bool_
    assert display[0, :4].all()  # top of glyph 0 is 0xF0
    with pytest.raises(ValueError):
        display[0, 0] = False


def test_keys_reach_the_machine(quiet_logger):
    machine = Machine(rom(0xF20A), logger=quiet_logger)

    machine.cycle()
    assert machine.awaiting_key
    assert machine.pc == 0x200

    machine.cycle({0xB})
    assert not machine.awaiting_key
    assert machine.V[2] == 0xB


def test_sound_timer_and_tick(quiet_logger):
    machine = Machine(rom(0x6002, 0xF018), logger=quiet_logger)
    machine.cycle()
    machine.cycle()

    assert machine.sound_active
    machine.tick_timers()
    assert machine.sound_timer == 1
    machine.tick_timers()
    assert not machine.sound_active


def test_run_frame(quiet_logger):
    machine = Machine(rom(0x6030, 0xF015, 0x1204), logger=quiet_logger)
    machine.run_frame()

    assert machine.delay_timer == 0x2F


def test_decode_error_raised(quiet_logger):
    machine = Machine(rom(0x6001, 0xFFFF), logger=quiet_logger)
    machine.cycle()

    with pytest.raises(DecodeError) as excinfo:
        machine.cycle()

    assert excinfo.value.pc == 0x202
    assert excinfo.value.opcode == 0xFFFF
    assert machine.halted

    # A halted machine keeps reporting the same fault
    with pytest.raises(DecodeError):
        machine.cycle()


def test_stack_underflow_raised(quiet_logger):
    machine = Machine(rom(0x00EE), logger=quiet_logger)

    with pytest.raises(StackUnderflowError):
        machine.cycle()


def test_memory_fault_raised(quiet_logger):
    machine = Machine(rom(0xAFFF, 0xF133), logger=quiet_logger)
    machine.cycle()

    with pytest.raises(MemoryAccessError):
        machine.cycle()


def test_faults_share_a_base_class(quiet_logger):
    machine = Machine(rom(0x0000), logger=quiet_logger)

    with pytest.raises(MachineFault):
        machine.run_frame()


def test_rom_too_large(quiet_logger):
    with pytest.raises(RomTooLargeError):
        Machine(bytes(MAX_ROM_SIZE + 1), logger=quiet_logger)


def test_from_file(tmp_path, quiet_logger):
    path = tmp_path / "prog.ch8"
    path.write_bytes(rom(0x6A42))

    machine = Machine.from_file(str(path), legacy=True, logger=quiet_logger)
    machine.cycle()

    assert machine.V[0xA] == 0x42
    assert machine.state.legacy


def test_legacy_flag_selects_shift(quiet_logger):
    program = rom(0x6108, 0x6203, 0x8126)
    modern = Machine(program, logger=quiet_logger)
    legacy = Machine(program, legacy=True, logger=quiet_logger)
    for _ in range(3):
        modern.cycle()
        legacy.cycle()

    assert modern.V[1] == 0x04
    assert legacy.V[1] == 0x01


def test_logs_load_and_fault(capsys):
    machine = Machine(rom(0x0000), logger=ConsoleLogger("vm", use_colors=False, show_timestamps=False))
    with pytest.raises(DecodeError):
        machine.cycle()

    out = capsys.readouterr().out
    assert "[    INFO][vm] Loaded 2 byte ROM (modern mode)" in out
    assert "[   ERROR][vm] invalid opcode at 0x200 (opcode 0x0000)" in out


def test_timers_freeze_after_fault(quiet_logger):
    machine = Machine(rom(0x6004, 0xF018, 0x0000), logger=quiet_logger)
    machine.cycle()
    machine.cycle()
    with pytest.raises(DecodeError):
        machine.cycle()

    machine.tick_timers()
    assert machine.halted
    assert machine.sound_timer == 4
