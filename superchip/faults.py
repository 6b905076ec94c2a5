"""Processor fault codes and the exceptions the host raises for them.

The compiled engine cannot raise, so a faulting instruction records a
:class:`Fault` code in the state instead. :func:`fault_from_state` turns that
record into the matching :class:`Chip8Fault` subclass at the host boundary.
"""

from enum import IntEnum

import jax.numpy as jnp


class Fault(IntEnum):
    """Fault codes stored in ``ProcessorState.fault``."""
    NONE = 0
    INVALID_OPCODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3
    INVALID_SCROLL = 4
    INVALID_GLYPH_INDEX = 5
    INVALID_FLAG_REGISTER_RANGE = 6


class Chip8Fault(Exception):
    """Base class for program faults detected while executing an instruction."""

    description = "processor fault"

    def __init__(self, pc: int, instruction: int):
        self.pc = pc
        self.instruction = instruction
        super().__init__(f"0x{pc:03X}: {self.description} 0x{instruction:04X}")


class InvalidOpcode(Chip8Fault):
    description = "invalid opcode"


class StackOverflow(Chip8Fault):
    description = "stack overflow on"


class StackUnderflow(Chip8Fault):
    description = "return with empty stack on"


class InvalidScroll(Chip8Fault):
    description = "odd scroll in low resolution on"


class InvalidGlyphIndex(Chip8Fault):
    description = "no large glyph for digit in"


class InvalidFlagRegisterRange(Chip8Fault):
    description = "flag register index out of range in"


class ProgramTooLargeError(ValueError):
    """Program does not fit between PROGRAM_START and the end of memory."""


FAULT_EXCEPTIONS = {
    Fault.INVALID_OPCODE: InvalidOpcode,
    Fault.STACK_OVERFLOW: StackOverflow,
    Fault.STACK_UNDERFLOW: StackUnderflow,
    Fault.INVALID_SCROLL: InvalidScroll,
    Fault.INVALID_GLYPH_INDEX: InvalidGlyphIndex,
    Fault.INVALID_FLAG_REGISTER_RANGE: InvalidFlagRegisterRange,
}


def raise_fault(state, code: Fault):
    """Mark ``state`` as faulted with ``code``."""
    return state.replace(fault=jnp.asarray(int(code), dtype=jnp.uint8))


def fault_from_state(state) -> Chip8Fault | None:
    """Build the exception for the fault recorded in ``state``, if any."""
    code = Fault(int(state.fault))
    if code == Fault.NONE:
        return None
    return FAULT_EXCEPTIONS[code](int(state.fault_pc), int(state.fault_instruction))
