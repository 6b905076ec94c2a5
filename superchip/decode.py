"""SUPER-CHIP instruction decoding.

An instruction word is two big-endian bytes read at ``pc``. Handlers address
its nibbles by role rather than position::

    word   = 0xD12F
    opcode = 0xD     x = 0x1     y = 0x2     n = 0xF
    nn     = 0x2F    nnn = 0x12F
"""

import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    raw: int
    opcode: int  # op1, selects the instruction family
    x: int       # op2, usually a register index
    y: int       # op3, usually a register index
    n: int       # op4, sub-operation or sprite height
    nn: int      # op3op4 byte
    nnn: int     # op2op3op4 address


def join_bytes(high, low) -> jnp.ndarray:
    """Combine the two instruction bytes into one 16-bit word."""
    return (jnp.astype(high, jnp.uint16) << 8) | jnp.astype(low, jnp.uint16)


def decode(instruction: int) -> DecodedInstruction:
    """Split a 16-bit instruction word into its operand fields."""
    return DecodedInstruction(
        raw=instruction,
        opcode=instruction >> 12,
        x=(instruction >> 8) & 0xF,
        y=(instruction >> 4) & 0xF,
        n=instruction & 0xF,
        nn=instruction & 0xFF,
        nnn=instruction & 0xFFF,
    )
