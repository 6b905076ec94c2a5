"""SUPER-CHIP system instructions (0x0xxx) and the dispatch helpers they share."""

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from superchip.state import ProcessorState
from superchip.decode import DecodedInstruction
from superchip.faults import Fault, raise_fault
from superchip.stack import pop, is_empty

SCROLL_COLUMNS = 4


def invalid_opcode(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """Any word that matches no instruction form."""
    return raise_fault(state, Fault.INVALID_OPCODE)


def make_dispatcher(table: dict):
    """Build a dispatcher from ``{key: handler}``; unknown keys are invalid opcodes.

    Keys are byte values (0-255). The returned function takes the traced key
    plus the usual ``(state, instruction)`` pair.
    """
    handlers = [invalid_opcode]
    lookup = np.zeros(256, dtype=np.int32)
    for key, handler in table.items():
        if handler not in handlers:
            handlers.append(handler)
        lookup[key] = handlers.index(handler)
    lookup = jnp.asarray(lookup)

    def dispatch(key, state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
        return jax.lax.switch(lookup[key], handlers, state, instruction)

    return dispatch


def mark_dirty(state: ProcessorState, display: jnp.ndarray) -> ProcessorState:
    return state.replace(display=display, screen_dirty=jnp.asarray(True))


def execute_clear_screen(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00E0 - Clear the whole 128x64 canvas."""
    return mark_dirty(state, jnp.zeros_like(state.display))


def execute_return(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00EE - Return from subroutine to the instruction after the call."""
    def do_return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=jnp.astype(address + 2, jnp.uint16))

    return jax.lax.cond(
        is_empty(state.stack),
        lambda s: raise_fault(s, Fault.STACK_UNDERFLOW),
        do_return,
        state
    )


def shift_rows(display: jnp.ndarray, rows) -> jnp.ndarray:
    """Move the canvas down by ``rows``; rows scrolled in are blank."""
    source = jnp.arange(display.shape[1]) - rows
    valid = (source >= 0) & (source < display.shape[1])
    shifted = display[:, jnp.clip(source, 0, display.shape[1] - 1)]
    return shifted & valid[None, :]


def shift_columns(display: jnp.ndarray, columns) -> jnp.ndarray:
    """Move the canvas right by ``columns`` (negative moves left)."""
    source = jnp.arange(display.shape[0]) - columns
    valid = (source >= 0) & (source < display.shape[0])
    shifted = display[jnp.clip(source, 0, display.shape[0] - 1), :]
    return shifted & valid[:, None]


def execute_scroll_down(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00CN - Scroll the canvas down N rows; N must be even in low resolution."""
    odd_in_low_res = ~state.large_screen & ((instruction.n & 1) == 1)
    return jax.lax.cond(
        odd_in_low_res,
        lambda s: raise_fault(s, Fault.INVALID_SCROLL),
        lambda s: mark_dirty(s, shift_rows(s.display, instruction.n)),
        state
    )


def execute_scroll_right(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00FB - Scroll the canvas 4 columns right."""
    return mark_dirty(state, shift_columns(state.display, SCROLL_COLUMNS))


def execute_scroll_left(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00FC - Scroll the canvas 4 columns left."""
    return mark_dirty(state, shift_columns(state.display, -SCROLL_COLUMNS))


def execute_exit(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00FD - Halt the interpreter; PC stays on the exit instruction."""
    return state.replace(halted=jnp.asarray(True), pc=jnp.astype(state.pc - 2, jnp.uint16))


def execute_low_resolution(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00FE - Switch to 64x32 drawing (2x2 blocks)."""
    return state.replace(large_screen=jnp.asarray(False))


def execute_high_resolution(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """00FF - Switch to 128x64 drawing."""
    return state.replace(large_screen=jnp.asarray(True))


_dispatch_system = make_dispatcher({
    **{0xC0 | rows: execute_scroll_down for rows in range(16)},
    0xE0: execute_clear_screen,
    0xEE: execute_return,
    0xFB: execute_scroll_right,
    0xFC: execute_scroll_left,
    0xFD: execute_exit,
    0xFE: execute_low_resolution,
    0xFF: execute_high_resolution,
})


def execute_system_instruction(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """Dispatch 00xx instructions; 0NNN machine calls are not supported."""
    return jax.lax.cond(
        instruction.x == 0,
        lambda s: _dispatch_system(instruction.nn, s, instruction),
        lambda s: invalid_opcode(s, instruction),
        state
    )
