"""Tests for miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
import pytest
from chipcore import execute
from chipcore.constants import FAULT_MEMORY, FONT_START
from conftest import set_registers


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = fresh_state

        state = execute(state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48


class TestBCD:
    """Test BCD conversion."""

    def test_misc_bcd_conversion(self, fresh_state):
        """Test BCD conversion with 156."""
        state = fresh_state

        state = execute(state, 0x609C)  # V0 = 156
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xF033)

        assert state.memory[0x300] == 1
        assert state.memory[0x301] == 5
        assert state.memory[0x302] == 6
        assert state.I == 0x300

    @pytest.mark.parametrize("value,digits", [(0, (0, 0, 0)), (7, (0, 0, 7)), (42, (0, 4, 2)), (255, (2, 5, 5))])
    def test_bcd_edge_cases(self, fresh_state, value, digits):
        """Test BCD with edge cases."""
        state = set_registers(fresh_state, V0=value)
        state = execute(state, 0xA400)
        state = execute(state, 0xF033)

        assert tuple(int(d) for d in state.memory[0x400:0x403]) == digits

    def test_bcd_past_end_of_memory_faults(self, fresh_state):
        """FX33 - Writing past 0xFFF faults and leaves memory alone."""
        state = set_registers(fresh_state, V0=123)
        state = execute(state, 0xAFFE)  # only 0xFFE and 0xFFF exist
        state = execute(state, 0xF033)

        assert state.fault == FAULT_MEMORY
        assert state.memory[0xFFE] == 0
        assert state.memory[0xFFF] == 0

    def test_bcd_at_last_valid_address(self, fresh_state):
        """FX33 - I = 0xFFD fits exactly."""
        state = set_registers(fresh_state, V0=123)
        state = execute(state, 0xAFFD)
        state = execute(state, 0xF033)

        assert state.fault == 0
        assert state.memory[0xFFF] == 3


class TestFont:
    """Test font character addressing."""

    def test_misc_font_character(self, fresh_state):
        """Test font character addressing."""
        state = execute(fresh_state, 0x600A)  # V0 = 0xA
        state = execute(state, 0xF029)

        assert state.I == 0x50 + (0xA * 5)

    def test_font_all_characters(self, fresh_state):
        """Test font addressing for all hex digits."""
        state = fresh_state

        for digit in range(16):
            state = execute(state, 0x6000 | digit)
            state = execute(state, 0xF029)

            assert state.I == FONT_START + digit * 5, f"Font address wrong for digit {digit:X}"

    def test_font_uses_low_nibble(self, fresh_state):
        """FX29 - Values above 0xF select the glyph of their low nibble."""
        state = set_registers(fresh_state, V0=0x1B)
        state = execute(state, 0xF029)

        assert state.I == FONT_START + 0xB * 5


class TestMemoryOperations:
    """Test store/load register operations."""

    @pytest.mark.parametrize("fixture", ["modern_state", "legacy_state"])
    def test_store_load_keeps_index(self, request, fixture):
        """FX55/FX65 - I is unchanged in both modes."""
        state = request.getfixturevalue(fixture)

        state = execute(state, 0x6001)  # V0 = 1
        state = execute(state, 0x6102)  # V1 = 2
        state = execute(state, 0x6203)  # V2 = 3
        state = execute(state, 0x6344)  # V3 = 0x44, not stored
        state = execute(state, 0xA300)

        state = execute(state, 0xF255)  # Store V0-V2
        assert state.I == 0x300
        assert [int(b) for b in state.memory[0x300:0x304]] == [1, 2, 3, 0]

        state = execute(state, 0x6000)
        state = execute(state, 0x6100)
        state = execute(state, 0x6200)
        state = execute(state, 0x6300)

        state = execute(state, 0xF265)  # Load V0-V2
        assert state.V[0] == 1
        assert state.V[1] == 2
        assert state.V[2] == 3
        assert state.V[3] == 0
        assert state.I == 0x300

    def test_store_all_registers(self, fresh_state):
        """FX55 with X = F stores all sixteen registers."""
        state = fresh_state.replace(V=jnp.arange(16, 32, dtype=jnp.uint8))
        state = execute(state, 0xA500)
        state = execute(state, 0xFF55)

        assert [int(b) for b in state.memory[0x500:0x510]] == list(range(16, 32))

    def test_store_past_end_of_memory_faults(self, fresh_state):
        """FX55 - A block running past 0xFFF faults without writing."""
        state = set_registers(fresh_state, V0=9, V1=9, V2=9)
        state = execute(state, 0xAFFE)
        state = execute(state, 0xF255)  # 0xFFE..0x1000

        assert state.fault == FAULT_MEMORY
        assert state.memory[0xFFE] == 0

    def test_load_past_end_of_memory_faults(self, fresh_state):
        """FX65 - Reading past 0xFFF faults without loading."""
        state = fresh_state.replace(memory=fresh_state.memory.at[0xFFF].set(7))
        state = execute(state, 0xAFFF)
        state = execute(state, 0xF165)

        assert state.fault == FAULT_MEMORY
        assert state.V[0] == 0

    def test_load_single_register_at_last_address(self, fresh_state):
        """FX65 - X = 0 at 0xFFF is in range."""
        state = fresh_state.replace(memory=fresh_state.memory.at[0xFFF].set(7))
        state = execute(state, 0xAFFF)
        state = execute(state, 0xF065)

        assert state.fault == 0
        assert state.V[0] == 7


class TestKeypad:
    """Test FX0A await key."""

    def test_wait_for_key_blocking(self, fresh_state):
        """FX0A - No key: rewind and flag the wait."""
        initial_pc = fresh_state.pc

        state = execute(fresh_state, 0xF00A)

        assert state.pc == initial_pc - 2
        assert state.awaiting_key

    def test_wait_for_key_release(self, fresh_state):
        """FX0A - A held key is stored and the wait ends."""
        state = fresh_state.replace(keypad=fresh_state.keypad.at[7].set(True), awaiting_key=jnp.array(True))
        initial_pc = state.pc

        state = execute(state, 0xF30A)

        assert state.V[3] == 7
        assert state.pc == initial_pc
        assert not state.awaiting_key

    def test_wait_for_key_takes_lowest(self, fresh_state):
        """FX0A - With several keys held the lowest code wins."""
        keypad = fresh_state.keypad.at[0xC].set(True).at[0x4].set(True)
        state = fresh_state.replace(keypad=keypad)

        state = execute(state, 0xF10A)

        assert state.V[1] == 4


class TestIndexArithmetic:
    """Test FX1E."""

    def test_add_to_index(self, fresh_state):
        """FX1E - Add VX to I register."""
        state = execute(fresh_state, 0x6010)
        state = execute(state, 0xA100)
        state = execute(state, 0xF01E)

        assert state.I == 0x110

    def test_add_to_index_leaves_vf(self, fresh_state):
        """FX1E - Passing 0xFFF sets no flag."""
        state = set_registers(fresh_state, V0=0x10, VF=0x00)
        state = execute(state, 0xAFFF)
        state = execute(state, 0xF01E)

        assert state.I == 0x100F
        assert state.V[15] == 0
