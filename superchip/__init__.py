"""SUPER-CHIP-48 / CHIP-8 interpreter package."""

from superchip.state import ProcessorState, StackState, create_state
from superchip.emulator import execute, fetch, step, tick_timers, load_program, load_rom
from superchip.decode import DecodedInstruction, decode
from superchip.constants import *
from superchip.faults import (
    Fault, Chip8Fault, InvalidOpcode, StackOverflow, StackUnderflow, InvalidScroll,
    InvalidGlyphIndex, InvalidFlagRegisterRange, ProgramTooLargeError,
)
from superchip.processor import Processor, StepResult, init, advance, tick

__all__ = [
    "ProcessorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "PROGRAM_START",
    "FONT_START",
    "LARGE_FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "Fault",
    "Chip8Fault",
    "InvalidOpcode",
    "StackOverflow",
    "StackUnderflow",
    "InvalidScroll",
    "InvalidGlyphIndex",
    "InvalidFlagRegisterRange",
    "ProgramTooLargeError",
    "Processor",
    "StepResult",
    "init",
    "advance",
    "tick",
]
