"""SUPER-CHIP register and index operations."""

import jax
import jax.numpy as jnp
from superchip.state import ProcessorState
from superchip.decode import DecodedInstruction
from superchip.constants import ADDRESS_MASK


def execute_set(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """7XNN - Add NN to VX, wrapping, VF untouched."""
    total = (jnp.astype(state.V[instruction.x], jnp.int32) + instruction.nn) & 0xFF
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(total, jnp.uint8)))


def execute_set_index(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn & ADDRESS_MASK, jnp.uint16))


def execute_random(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    masked = jnp.astype(random_value & instruction.nn, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key)
