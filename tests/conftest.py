"""Test configuration and fixtures for SUPER-CHIP interpreter tests."""

import pytest
import jax.numpy as jnp
from superchip import create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh CHIP-8 mode state in low resolution."""
    return create_state()


@pytest.fixture
def super_state():
    """Provide a fresh state with SUPER-CHIP quirks enabled."""
    return create_state(super_mode=True)


@pytest.fixture
def hires_state():
    """Provide a fresh SUPER-CHIP state switched to 128x64 drawing."""
    return create_state(super_mode=True).replace(large_screen=jnp.asarray(True))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(s, V0=1, VF=2)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
