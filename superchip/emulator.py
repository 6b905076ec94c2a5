"""Main SUPER-CHIP execution engine."""

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from superchip.state import ProcessorState
from superchip.decode import decode, join_bytes
from superchip.constants import ADDRESS_MASK, MAX_PROGRAM_SIZE, NUM_KEYS, PROGRAM_START
from superchip.faults import Fault, ProgramTooLargeError
from superchip.instructions.system import execute_system_instruction
from superchip.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_key_instruction
)
from superchip.instructions.alu import execute_alu_operation
from superchip.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from superchip.instructions.display import execute_display
from superchip.instructions.misc import execute_misc_instruction

_FAMILIES = [
    execute_system_instruction,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_set,
    execute_add,
    execute_alu_operation,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_key_instruction,
    execute_misc_instruction,
]


def execute(state: ProcessorState, instruction: int) -> ProcessorState:
    """Execute the instruction word as if it had been fetched at ``state.pc``.

    PC moves past the instruction before the handler runs, so handlers that
    transfer control simply overwrite it. A faulting instruction leaves the
    state as it was and records the fault code, address and word instead.
    """
    decoded_instruction = decode(instruction)
    advanced = state.replace(pc=jnp.astype(state.pc + 2, jnp.uint16))
    executed = jax.lax.switch(decoded_instruction.opcode, _FAMILIES, advanced, decoded_instruction)

    return jax.lax.cond(
        executed.fault != int(Fault.NONE),
        lambda: state.replace(
            fault=executed.fault,
            fault_pc=state.pc,
            fault_instruction=jnp.astype(instruction, jnp.uint16),
        ),
        lambda: executed,
    )


def fetch(state: ProcessorState) -> jnp.ndarray:
    """Read the instruction word at PC; the address wraps at 4KB."""
    high = state.memory[state.pc & ADDRESS_MASK]
    low = state.memory[(state.pc + 1) & ADDRESS_MASK]
    return join_bytes(high, low)


@jax.jit
def step(state: ProcessorState, keypad: jnp.ndarray) -> ProcessorState:
    """Fetch and execute one instruction with the given key snapshot.

    Halted or faulted states are returned unchanged.
    """
    state = state.replace(
        keypad=keypad,
        screen_dirty=jnp.asarray(False),
        sound_started=jnp.asarray(False),
        waiting_for_key=jnp.asarray(False),
    )
    stopped = state.halted | (state.fault != int(Fault.NONE))
    return jax.lax.cond(stopped, lambda s: s, lambda s: execute(s, fetch(s)), state)


@jax.jit
def tick_timers(state: ProcessorState) -> ProcessorState:
    """One 60 Hz timer period: decrement nonzero delay and sound timers."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def empty_keypad() -> jnp.ndarray:
    return jnp.zeros(NUM_KEYS, dtype=jnp.bool_)


def load_program(state: ProcessorState, program: bytes, program_size: int | None = None) -> ProcessorState:
    """Copy program bytes into memory starting at 0x200."""
    if program_size is None:
        program_size = len(program)
    if program_size > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(
            f"Program is {program_size} bytes, at most {MAX_PROGRAM_SIZE} fit after 0x{PROGRAM_START:03X}"
        )
    program_array = jnp.asarray(np.frombuffer(bytes(program[:program_size]), dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program_array)].set(program_array)
    return state.replace(memory=new_memory)


def read_rom(filename: str) -> bytes:
    with open(filename, 'rb') as f:
        return f.read()


def load_rom(state: ProcessorState, filename: str) -> ProcessorState:
    """Load ROM data into memory starting at 0x200."""
    return load_program(state, read_rom(filename))
