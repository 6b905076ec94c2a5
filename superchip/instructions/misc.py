"""SUPER-CHIP miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from superchip.state import ProcessorState
from superchip.decode import DecodedInstruction
from superchip.constants import (
    ADDRESS_MASK, FONT_START, FONT_GLYPH_SIZE, LARGE_FONT_START,
    LARGE_FONT_GLYPH_SIZE, LARGE_FONT_GLYPHS, NUM_FLAG_REGISTERS, PROGRAM_START,
)
from superchip.faults import Fault, raise_fault
from superchip.instructions.system import make_dispatcher


def write_memory(state: ProcessorState, offsets: jnp.ndarray, values: jnp.ndarray, mask: jnp.ndarray) -> ProcessorState:
    """Store ``values`` at ``I + offsets`` where ``mask`` holds.

    Addresses wrap at 4KB and the interpreter area below PROGRAM_START is
    read-only.
    """
    addresses = (state.I + offsets) & ADDRESS_MASK
    writable = mask & (addresses >= PROGRAM_START)
    new_values = jnp.where(writable, values, state.memory[addresses])
    return state.replace(memory=state.memory.at[addresses].set(jnp.astype(new_values, jnp.uint8)))


def execute_get_delay_timer(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX18 - Set sound timer to VX and notify the sound sink."""
    return state.replace(sound_timer=state.V[instruction.x], sound_started=jnp.asarray(True))


def execute_add_to_index(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX1E - Add VX to I register. VF is left alone."""
    new_i = (state.I + jnp.astype(state.V[instruction.x], jnp.uint16)) & ADDRESS_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX0A - Wait for key press.

    Without a pressed key the instruction is retried on the next step.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(pc=jnp.astype(state.pc - 2, jnp.uint16), waiting_for_key=jnp.asarray(True))

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX29 - Set I to location of the 5-byte glyph for hex digit VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=jnp.astype(FONT_START + digit * FONT_GLYPH_SIZE, jnp.uint16))


def execute_large_font_character(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX30 - Set I to location of the 10-byte glyph for decimal digit VX."""
    digit = jnp.astype(state.V[instruction.x], jnp.uint16)
    address = jnp.astype(LARGE_FONT_START + digit * LARGE_FONT_GLYPH_SIZE, jnp.uint16)
    return jax.lax.cond(
        digit >= LARGE_FONT_GLYPHS,
        lambda s: raise_fault(s, Fault.INVALID_GLYPH_INDEX),
        lambda s: s.replace(I=address),
        state
    )


def execute_bcd_conversion(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    return write_memory(state, jnp.arange(3), digits, jnp.ones(3, dtype=jnp.bool_))


def advance_index(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    # SUPER-CHIP leaves I in place after a block transfer
    if state.super_mode:
        return state
    return state.replace(I=jnp.astype((state.I + instruction.x) & ADDRESS_MASK, jnp.uint16))


def execute_store_registers(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    register_mask = jnp.arange(16) <= instruction.x
    state = write_memory(state, jnp.arange(16), state.V, register_mask)
    return advance_index(state, instruction)


def execute_load_registers(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask = jnp.arange(16) <= instruction.x
    memory_values = state.memory[(state.I + jnp.arange(16)) & ADDRESS_MASK]
    new_V = jnp.where(register_mask, memory_values, state.V)
    return advance_index(state.replace(V=new_V), instruction)


def check_flag_register_range(handler):
    """FX75/FX85 only address flag registers 0-7."""
    def checked(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
        return jax.lax.cond(
            instruction.x >= NUM_FLAG_REGISTERS,
            lambda s: raise_fault(s, Fault.INVALID_FLAG_REGISTER_RANGE),
            lambda s: handler(s, instruction),
            state
        )
    return checked


@check_flag_register_range
def execute_store_flags(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX75 - Store V0 through VX in flag registers."""
    mask = jnp.arange(NUM_FLAG_REGISTERS) <= instruction.x
    new_flags = jnp.where(mask, state.V[:NUM_FLAG_REGISTERS], state.flag_registers)
    return state.replace(flag_registers=new_flags)


@check_flag_register_range
def execute_load_flags(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """FX85 - Load V0 through VX from flag registers."""
    mask = jnp.arange(NUM_FLAG_REGISTERS) <= instruction.x
    new_low = jnp.where(mask, state.flag_registers, state.V[:NUM_FLAG_REGISTERS])
    return state.replace(V=state.V.at[:NUM_FLAG_REGISTERS].set(new_low))


_dispatch_misc = make_dispatcher({
    0x07: execute_get_delay_timer,
    0x0A: execute_wait_for_key,
    0x15: execute_set_delay_timer,
    0x18: execute_set_sound_timer,
    0x1E: execute_add_to_index,
    0x29: execute_font_character,
    0x30: execute_large_font_character,
    0x33: execute_bcd_conversion,
    0x55: execute_store_registers,
    0x65: execute_load_registers,
    0x75: execute_store_flags,
    0x85: execute_load_flags,
})


def execute_misc_instruction(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """Dispatch FXNN instructions on NN."""
    return _dispatch_misc(instruction.nn, state, instruction)
