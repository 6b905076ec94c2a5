"""SUPER-CHIP sprite drawing (DXYN / DXY0).

Sprites are XOR-ed onto the full 128x64 canvas. In low resolution every
sprite bit covers a 2x2 block and coordinates wrap on the 64x32 logical
grid; in high resolution bits map 1:1 and wrap on 128x64. DXY0 draws a
16x16 sprite (two bytes per row) in high resolution and nothing in low
resolution.
"""

import jax.numpy as jnp
from superchip.state import ProcessorState
from superchip.decode import DecodedInstruction
from superchip.constants import SCREEN_WIDTH, SCREEN_HEIGHT, ADDRESS_MASK

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(state: ProcessorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Canvas-shaped mask of the pixels the sprite toggles."""
    scale = jnp.where(state.large_screen, 1, 2)
    width = SCREEN_WIDTH // scale
    height = SCREEN_HEIGHT // scale

    # Offset of each canvas pixel inside the sprite, wrapping at the screen edge
    col = (xx // scale - state.V[instruction.x]) % width
    row = (yy // scale - state.V[instruction.y]) % height

    wide = state.large_screen & (instruction.n == 0)
    sprite_width = jnp.where(wide, 16, 8)
    sprite_height = jnp.where(wide, 16, instruction.n)
    inside = (col < sprite_width) & (row < sprite_height)

    bytes_per_row = jnp.where(wide, 2, 1)
    address = state.I + row * bytes_per_row
    high = jnp.astype(state.memory[address & ADDRESS_MASK], jnp.int32)
    low = jnp.astype(state.memory[(address + 1) & ADDRESS_MASK], jnp.int32)
    bits = jnp.where(wide, (high << 8) | low, high)
    shift = jnp.clip(sprite_width - 1 - col, 0, 15)
    return (((bits >> shift) & 1) == 1) & inside


def execute_display(state: ProcessorState, instruction: DecodedInstruction) -> ProcessorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    sprite = sprite_mask(state, instruction)
    collision = jnp.any(state.display & sprite)
    low_res_wide = (instruction.n == 0) & ~state.large_screen
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[15].set(jnp.astype(collision, jnp.uint8)),
        screen_dirty=~low_res_wide,
    )
