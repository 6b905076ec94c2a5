"""SUPER-CHIP processor state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from superchip.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, LARGE_FONT_START, LARGE_FONT_DATA,
    MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE, NUM_REGISTERS,
    NUM_FLAG_REGISTERS, NUM_KEYS,
)


@dataclass(frozen=True)
class StackState:
    """Return address stack; ``pointer`` indexes the top entry, -1 when empty."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.asarray(-1, dtype=jnp.int32))


class ProcessorState(PyTreeNode):
    """Complete SUPER-CHIP machine state.

    ``display`` is indexed ``[x, y]`` over the full 128x64 canvas. Low
    resolution is drawn as 2x2 blocks on the same canvas.

    ``screen_dirty`` and ``sound_started`` describe the last executed
    instruction only; the host reads them to drive its callbacks. ``fault``
    holds a :class:`superchip.faults.Fault` code once an instruction faulted.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    flag_registers: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_FLAG_REGISTERS, dtype=jnp.uint8))
    large_screen: jnp.ndarray = field(default_factory=lambda: jnp.asarray(False))
    halted: jnp.ndarray = field(default_factory=lambda: jnp.asarray(False))
    waiting_for_key: jnp.ndarray = field(default_factory=lambda: jnp.asarray(False))
    screen_dirty: jnp.ndarray = field(default_factory=lambda: jnp.asarray(False))
    sound_started: jnp.ndarray = field(default_factory=lambda: jnp.asarray(False))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    fault_pc: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault_instruction: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    super_mode: bool = field(pytree_node=False, default=False)


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0), super_mode: bool = False) -> ProcessorState:
    """Create initial processor state with both fonts loaded."""
    state = ProcessorState(rng, super_mode=super_mode)
    memory = state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)
    memory = memory.at[LARGE_FONT_START:LARGE_FONT_START + len(LARGE_FONT_DATA)].set(LARGE_FONT_DATA)
    return state.replace(memory=memory)
