"""Tests for ALU operations (8xxx)."""

import pytest
from superchip import execute, Fault
from conftest import set_registers


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_same(self, fresh_state):
        """8XY3 - XOR with same value should be 0."""
        state = set_registers(fresh_state, V3=0xAA, V4=0xAA)

        state = execute(state, 0x8343)  # V3 ^= V4

        assert state.V[3] == 0x00

    @pytest.mark.parametrize("instruction", [0x8120, 0x8121, 0x8122, 0x8123])
    def test_logic_ops_leave_vf(self, fresh_state, instruction):
        """Logic operations have no flag result."""
        state = set_registers(fresh_state, V1=0x0F, V2=0xF0, VF=0x07)
        state = execute(state, instruction)
        assert state.V[15] == 0x07


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - 1 + 1."""
        state = set_registers(fresh_state, V1=0x01, V2=0x01, VF=0x05)
        state = execute(state, 0x8124)
        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - 0xFF + 1 wraps and carries."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x01)
        state = execute(state, 0x8124)
        assert state.V[1] == 0x00
        assert state.V[15] == 1

    def test_alu_add_255_does_not_carry(self, fresh_state):
        """8XY4 - A sum of exactly 255 fits."""
        state = set_registers(fresh_state, V1=0xFE, V2=0x01)
        state = execute(state, 0x8124)
        assert state.V[1] == 0xFF
        assert state.V[15] == 0

    def test_alu_sub_no_borrow(self, fresh_state):
        """8XY5 - 5 - 3."""
        state = set_registers(fresh_state, V1=0x05, V2=0x03)
        state = execute(state, 0x8125)
        assert state.V[1] == 0x02
        assert state.V[15] == 1

    def test_alu_sub_borrow(self, fresh_state):
        """8XY5 - 3 - 5 wraps and borrows."""
        state = set_registers(fresh_state, V1=0x03, V2=0x05)
        state = execute(state, 0x8125)
        assert state.V[1] == 0xFE
        assert state.V[15] == 0

    def test_alu_sub_equal_values(self, fresh_state):
        """8XY5 - Equal operands do not borrow."""
        state = set_registers(fresh_state, V1=0x42, V2=0x42)
        state = execute(state, 0x8125)
        assert state.V[1] == 0x00
        assert state.V[15] == 1

    def test_alu_reverse_sub(self, fresh_state):
        """8XY7 - VX = VY - VX."""
        state = set_registers(fresh_state, V1=0x03, V2=0x05)
        state = execute(state, 0x8127)
        assert state.V[1] == 0x02
        assert state.V[15] == 1

    def test_alu_reverse_sub_borrow(self, fresh_state):
        state = set_registers(fresh_state, V1=0x05, V2=0x03)
        state = execute(state, 0x8127)
        assert state.V[1] == 0xFE
        assert state.V[15] == 0

    def test_flag_overrides_result_in_vf(self, fresh_state):
        """8FY4 - VF holds the carry, not the sum."""
        state = set_registers(fresh_state, VF=0xFF, V1=0x01)
        state = execute(state, 0x8F14)
        assert state.V[15] == 1


class TestShifts:
    """Shift source depends on the SUPER-CHIP quirk."""

    def test_shift_right_uses_vy(self, fresh_state):
        """8XY6 - CHIP-8 shifts VY into VX."""
        state = set_registers(fresh_state, V1=0x00, V2=0x05)
        state = execute(state, 0x8126)
        assert state.V[1] == 0x02
        assert state.V[2] == 0x05
        assert state.V[15] == 1

    def test_shift_right_uses_vx_in_super_mode(self, super_state):
        """8XY6 - SUPER-CHIP shifts VX in place."""
        state = set_registers(super_state, V1=0x04, V2=0xFF)
        state = execute(state, 0x8126)
        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_shift_left_uses_vy(self, fresh_state):
        """8XYE - CHIP-8 shifts VY into VX."""
        state = set_registers(fresh_state, V1=0x00, V2=0x81)
        state = execute(state, 0x812E)
        assert state.V[1] == 0x02
        assert state.V[15] == 1

    def test_shift_left_uses_vx_in_super_mode(self, super_state):
        """8XYE - SUPER-CHIP shifts VX in place."""
        state = set_registers(super_state, V1=0x40, V2=0x81)
        state = execute(state, 0x812E)
        assert state.V[1] == 0x80
        assert state.V[15] == 0


@pytest.mark.parametrize("instruction", [0x8128, 0x8129, 0x812A, 0x812B, 0x812C, 0x812D, 0x812F])
def test_undefined_alu_operation(fresh_state, instruction):
    """8XY8-8XYD and 8XYF are invalid opcodes."""
    state = set_registers(fresh_state, V1=0x12)
    state = execute(state, instruction)
    assert int(state.fault) == Fault.INVALID_OPCODE
    assert state.fault_instruction == instruction
    assert state.V[1] == 0x12
    assert state.pc == 0x200
