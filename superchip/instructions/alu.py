"""SUPER-CHIP ALU operations (8xxx).

Every operation maps ``(vx, vy, vf)`` to ``(result, vf)``. Operations without
a documented flag result hand ``vf`` back unchanged. The flag is stored after
the result, so ``8FYN`` ends with the flag in VF.
"""

import jax
import jax.lax
import jax.numpy as jnp
from superchip.state import ProcessorState
from superchip.decode import DecodedInstruction
from superchip.instructions.system import invalid_opcode


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, vf


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, vf


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, vf


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, VF = 1 on carry."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    carry = jnp.astype(result > 255, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    result = (jnp.astype(vx, jnp.int32) - jnp.astype(vy, jnp.int32)) & 0xFF
    return jnp.astype(result, jnp.uint8), no_borrow


def alu_shift_right(source, vy, vf):
    """8XY6 - Shift right, VF = bit shifted out."""
    return source >> 1, source & 1


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow."""
    return alu_sub_xy(vy, vx, vf)


def alu_shift_left(source, vy, vf):
    """8XYE - Shift left, VF = bit shifted out."""
    return (source << 1) & 0xFF, (source >> 7) & 1


# Sub-operation nibble -> position in the switch below, -1 when undefined
_ALU_INDEX = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, -1, -1, -1, -1, -1, -1, 8, -1], dtype=jnp.int32)


def execute_alu_operation(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    vf = state.V[15]

    # SUPER-CHIP shifts VX in place; CHIP-8 shifts VY into VX
    shift_source = vx if state.super_mode else vy

    def _alu_shift_right(vx, vy, vf):
        return alu_shift_right(shift_source, vy, vf)

    def _alu_shift_left(vx, vy, vf):
        return alu_shift_left(shift_source, vy, vf)

    def apply(state):
        result, flag = jax.lax.switch(
            _ALU_INDEX[instruction.n],
            [alu_set, alu_or, alu_and, alu_xor, alu_add,
             alu_sub_xy, _alu_shift_right, alu_sub_yx, _alu_shift_left],
            vx, vy, vf
        )
        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        new_V = new_V.at[15].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)

    return jax.lax.cond(
        _ALU_INDEX[instruction.n] < 0,
        lambda s: invalid_opcode(s, instruction),
        apply,
        state
    )
