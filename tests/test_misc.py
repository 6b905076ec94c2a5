"""Tests for miscellaneous instructions (Fxxx)."""

import pytest
import jax.numpy as jnp
from superchip import execute, Fault, LARGE_FONT_START
from conftest import set_registers


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = fresh_state

        # Test FX15: Set delay timer
        state = execute(state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        # Test FX18: Set sound timer
        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32
        assert state.sound_started

        # Test FX07: Get delay timer
        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48

    def test_execute_does_not_tick(self, fresh_state):
        state = set_registers(fresh_state, V0=5)
        state = execute(state, 0xF015)
        state = execute(state, 0x6000)
        assert state.delay_timer == 5


class TestBCD:
    """Test BCD conversion."""

    def test_misc_bcd_conversion(self, fresh_state):
        """Test BCD conversion with 156."""
        state = fresh_state

        state = execute(state, 0x609C)  # V0 = 156
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xF033)  # BCD conversion

        assert state.memory[0x300] == 1  # Hundreds
        assert state.memory[0x301] == 5  # Tens
        assert state.memory[0x302] == 6  # Ones
        assert state.I == 0x300

    def test_bcd_edge_cases(self, fresh_state):
        """Test BCD with 0 and 255."""
        state = execute(fresh_state, 0x6000)
        state = execute(state, 0xA400)
        state = execute(state, 0xF033)
        assert [int(b) for b in state.memory[0x400:0x403]] == [0, 0, 0]

        state = execute(state, 0x60FF)
        state = execute(state, 0xA500)
        state = execute(state, 0xF033)
        assert [int(b) for b in state.memory[0x500:0x503]] == [2, 5, 5]

    def test_bcd_skips_interpreter_area(self, fresh_state):
        """Bytes below 0x200 are never written."""
        state = set_registers(fresh_state, V0=123)
        state = execute(state, 0xA1FF)
        state = execute(state, 0xF033)
        assert state.memory[0x1FF] == 0
        assert state.memory[0x200] == 2
        assert state.memory[0x201] == 3


class TestIndex:
    """Test FX1E, FX29 and FX30."""

    def test_add_to_index(self, fresh_state):
        state = set_registers(fresh_state, V4=0x10, VF=0x03)
        state = execute(state, 0xA300)
        state = execute(state, 0xF41E)
        assert state.I == 0x310
        assert state.V[15] == 0x03

    def test_add_to_index_wraps(self, fresh_state):
        state = set_registers(fresh_state, V4=0x02)
        state = execute(state, 0xAFFF)
        state = execute(state, 0xF41E)
        assert state.I == 0x001

    def test_font_character(self, fresh_state):
        """FX29 - glyph A lives at 5 * 10."""
        state = set_registers(fresh_state, V0=0xA)
        state = execute(state, 0xF029)
        assert state.I == 50

    def test_font_character_uses_low_nibble(self, fresh_state):
        state = set_registers(fresh_state, V0=0x1A)
        state = execute(state, 0xF029)
        assert state.I == 50

    def test_font_glyph_data(self, fresh_state):
        """Glyph 0 is drawn as 0xF0 0x90 0x90 0x90 0xF0."""
        state = execute(fresh_state, 0xF029)
        glyph = [int(b) for b in state.memory[int(state.I):int(state.I) + 5]]
        assert glyph == [0xF0, 0x90, 0x90, 0x90, 0xF0]

    def test_large_font_character(self, fresh_state):
        """FX30 - glyph 9 lives at 0x80 + 10 * 9."""
        state = set_registers(fresh_state, V0=9)
        state = execute(state, 0xF030)
        assert state.I == LARGE_FONT_START + 90
        assert state.memory[state.I] == 0x3C

    def test_large_font_character_invalid(self, fresh_state):
        """FX30 - No large glyph exists for 10 and above."""
        state = set_registers(fresh_state, V0=10)
        state = execute(state, 0xA123)
        state = execute(state, 0xF030)
        assert int(state.fault) == Fault.INVALID_GLYPH_INDEX
        assert state.I == 0x123


class TestRegisterTransfer:
    """Test FX55 and FX65."""

    def test_store_registers(self, fresh_state):
        state = set_registers(fresh_state, V0=1, V1=2, V2=3, V3=4)
        state = execute(state, 0xA300)
        state = execute(state, 0xF255)
        assert [int(b) for b in state.memory[0x300:0x304]] == [1, 2, 3, 0]
        assert state.I == 0x302

    def test_store_registers_super_mode_keeps_index(self, super_state):
        state = set_registers(super_state, V0=1, V1=2, V2=3)
        state = execute(state, 0xA300)
        state = execute(state, 0xF255)
        assert [int(b) for b in state.memory[0x300:0x303]] == [1, 2, 3]
        assert state.I == 0x300

    def test_load_registers(self, fresh_state):
        state = fresh_state.replace(
            memory=fresh_state.memory.at[0x300:0x304].set(jnp.array([9, 8, 7, 6], dtype=jnp.uint8))
        )
        state = execute(state, 0xA300)
        state = execute(state, 0xF265)
        assert [int(v) for v in state.V[:4]] == [9, 8, 7, 0]
        assert state.I == 0x302

    def test_load_registers_super_mode_keeps_index(self, super_state):
        state = super_state.replace(
            memory=super_state.memory.at[0x300].set(0x42)
        )
        state = execute(state, 0xA300)
        state = execute(state, 0xF065)
        assert state.V[0] == 0x42
        assert state.I == 0x300

    def test_store_registers_cannot_overwrite_font(self, fresh_state):
        state = set_registers(fresh_state, V0=0xAA)
        state = execute(state, 0xA000)
        state = execute(state, 0xF055)
        assert state.memory[0] == 0xF0


class TestFlagRegisters:
    """Test FX75 and FX85."""

    def test_store_and_load_flags(self, super_state):
        state = set_registers(super_state, V0=1, V1=2, V2=3, V3=4, V4=5)
        state = execute(state, 0xF375)
        assert [int(f) for f in state.flag_registers] == [1, 2, 3, 4, 0, 0, 0, 0]

        state = state.replace(V=jnp.zeros(16, dtype=jnp.uint8))
        state = execute(state, 0xF285)
        assert [int(v) for v in state.V[:5]] == [1, 2, 3, 0, 0]

    def test_flags_are_independent_of_memory(self, super_state):
        state = set_registers(super_state, V0=0x77)
        state = execute(state, 0xA300)
        state = execute(state, 0xF075)
        assert state.memory[0x300] == 0

    @pytest.mark.parametrize("instruction", [0xF875, 0xFF75, 0xF885, 0xFF85])
    def test_flag_register_range(self, super_state, instruction):
        state = execute(super_state, instruction)
        assert int(state.fault) == Fault.INVALID_FLAG_REGISTER_RANGE
        assert state.pc == 0x200


class TestWaitForKey:
    """Test FX0A."""

    def test_waits_without_key(self, fresh_state):
        state = execute(fresh_state, 0xF30A)
        assert state.pc == 0x200
        assert state.waiting_for_key

    def test_takes_lowest_pressed_key(self, fresh_state):
        state = fresh_state.replace(keypad=fresh_state.keypad.at[9].set(True).at[5].set(True))
        state = execute(state, 0xF30A)
        assert state.V[3] == 5
        assert state.pc == 0x202
        assert not state.waiting_for_key


@pytest.mark.parametrize("instruction", [0xF000, 0xF0FF, 0xF031, 0xF166])
def test_undefined_misc_instruction(fresh_state, instruction):
    state = execute(fresh_state, instruction)
    assert int(state.fault) == Fault.INVALID_OPCODE
