"""SUPER-CHIP return address stack operations."""

import jax.numpy as jnp
from superchip.constants import ADDRESS_MASK, STACK_SIZE
from superchip.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE - 1


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer < 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack. Callers check ``is_full`` first."""
    pointer = stack.pointer + 1
    masked_address = jnp.astype(address & ADDRESS_MASK, jnp.uint16)
    new_data = stack.data.at[pointer].set(masked_address)
    return stack.replace(data=new_data, pointer=pointer)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack. Callers check ``is_empty`` first."""
    popped_address = stack.data[stack.pointer]
    new_data = stack.data.at[stack.pointer].set(0)
    return stack.replace(data=new_data, pointer=stack.pointer - 1), popped_address
