"""SUPER-CHIP control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from superchip.state import ProcessorState
from superchip.decode import DecodedInstruction
from superchip.constants import ADDRESS_MASK
from superchip.faults import Fault, raise_fault
from superchip.stack import push, is_full
from superchip.instructions.system import invalid_opcode, make_dispatcher


def execute_jump(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """2NNN - Call subroutine at NNN, pushing the address of this instruction."""
    def do_call(state):
        state = state.replace(stack=push(state.stack, state.pc - 2))
        return execute_jump(state, instruction)

    return jax.lax.cond(
        is_full(state.stack),
        lambda s: raise_fault(s, Fault.STACK_OVERFLOW),
        do_call,
        state
    )


def skip_next(state: ProcessorState) -> ProcessorState:
    return state.replace(pc=jnp.astype(state.pc + 2, jnp.uint16))


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            skip_next,
            lambda s: s,
            state
        )
    return skip_instruction


def require_zero_n(handler):
    """5XY0 and 9XY0 are only defined with a zero low nibble."""
    def checked(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
        return jax.lax.cond(
            instruction.n == 0,
            lambda s: handler(s, instruction),
            lambda s: invalid_opcode(s, instruction),
            state
        )
    return checked


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = require_zero_n(make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
))

execute_skip_if_not_equal_register = require_zero_n(make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
))


def execute_jump_with_offset(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (instruction.nnn + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def key_is_down(state: ProcessorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return state.keypad[state.V[instruction.x] & 0xF]


execute_skip_if_key = make_skip_instruction(key_is_down)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~key_is_down(state, inst)
)

_dispatch_key = make_dispatcher({
    0x9E: execute_skip_if_key,
    0xA1: execute_skip_if_not_key,
})


def execute_key_instruction(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """EX9E/EXA1 - Skip if key VX is pressed/not pressed."""
    return _dispatch_key(instruction.nn, state, instruction)
