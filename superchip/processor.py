"""Host side of the interpreter.

:class:`Processor` owns the current :class:`ProcessorState`, runs one compiled
step per :meth:`Processor.advance` call and performs everything the compiled
engine cannot: polling keys, calling the screen and sound sinks, and raising
the exception for a recorded fault.
"""

import os
from enum import IntEnum
from typing import Callable, Optional

import jax
import jax.numpy as jnp
import numpy as np
from tqdm import tqdm

from superchip.constants import NUM_KEYS
from superchip.emulator import step, tick_timers, load_program, read_rom, empty_keypad
from superchip.faults import fault_from_state
from superchip.logging import ConsoleLogger, format_registers
from superchip.state import ProcessorState, create_state

ScreenSink = Callable[[np.ndarray], None]
SoundSink = Callable[[bool, ProcessorState], None]
KeyPressed = Callable[[int], bool]


class StepResult(IntEnum):
    """Outcome of one step; only ``HALTED`` is falsy."""
    HALTED = 0
    RUNNING = 1
    WAITING_FOR_KEY = 2


class Processor:
    """A loaded program plus the callbacks it talks to.

    Args:
        state: Initial processor state, normally from :func:`init`.
        screen_sink: Called with a read-only (128, 64) boolean frame after
            every instruction that changed the screen.
        sound_sink: Called with ``(is_playing, state)`` when the sound timer
            is written and again when it runs out.
        key_pressed: Called with a key code 0-F, returns whether it is down.
        logger: Console logger; a default INFO logger is created if omitted.
    """

    def __init__(
        self,
        state: ProcessorState,
        screen_sink: Optional[ScreenSink] = None,
        sound_sink: Optional[SoundSink] = None,
        key_pressed: Optional[KeyPressed] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.state = state
        self.screen_sink = screen_sink
        self.sound_sink = sound_sink
        self.key_pressed = key_pressed
        self.logger = logger or ConsoleLogger()
        self.steps = 0

    @classmethod
    def from_rom(cls, filename: str, **kwargs) -> "Processor":
        """Read a ROM file and build a processor for it (see :func:`init`)."""
        program = read_rom(filename)
        processor = init(program, **kwargs)
        processor.logger.info(f"Loaded {filename} ({len(program)} bytes)")
        return processor

    @property
    def halted(self) -> bool:
        return bool(self.state.halted)

    def frame(self) -> np.ndarray:
        """Read-only copy of the current canvas, indexed ``[x, y]``."""
        frame = np.array(self.state.display, dtype=np.bool_)
        frame.setflags(write=False)
        return frame

    def poll_keypad(self) -> jnp.ndarray:
        if self.key_pressed is None:
            return empty_keypad()
        return jnp.array([bool(self.key_pressed(code)) for code in range(NUM_KEYS)], dtype=jnp.bool_)

    def _raise_if_faulted(self):
        fault = fault_from_state(self.state)
        if fault is not None:
            raise fault

    def advance(self) -> StepResult:
        """Execute exactly one instruction.

        Raises:
            Chip8Fault: The instruction faulted. The state is left as it was
                before the instruction, apart from the fault record, and every
                later call raises the same fault.
        """
        self._raise_if_faulted()
        if self.halted:
            return StepResult.HALTED

        self.state = step(self.state, self.poll_keypad())
        self.steps += 1

        fault = fault_from_state(self.state)
        if fault is not None:
            self.logger.error(f"{fault} | {format_registers(self.state)}")
            raise fault

        if self.screen_sink is not None and bool(self.state.screen_dirty):
            self.screen_sink(self.frame())
        if self.sound_sink is not None and bool(self.state.sound_started):
            self.sound_sink(bool(self.state.sound_timer > 0), self.state)

        if self.halted:
            self.logger.info(f"Program exited after {self.steps} steps | {format_registers(self.state)}")
            return StepResult.HALTED
        if bool(self.state.waiting_for_key):
            return StepResult.WAITING_FOR_KEY
        return StepResult.RUNNING

    def tick(self):
        """Decrement the delay and sound timers once (call at 60 Hz)."""
        was_playing = bool(self.state.sound_timer > 0)
        self.state = tick_timers(self.state)
        if self.sound_sink is not None and was_playing and not bool(self.state.sound_timer > 0):
            self.sound_sink(False, self.state)

    def run(
        self,
        max_steps: Optional[int] = None,
        instructions_per_tick: int = 10,
        progress: bool = False,
    ) -> StepResult:
        """Advance until the program exits or ``max_steps`` steps have run.

        Timers tick once every ``instructions_per_tick`` steps. Without a
        ``key_pressed`` capability nothing can end a key wait, so the run also
        stops when the program starts waiting for a key.

        Raises:
            ValueError: ``instructions_per_tick`` is less than 1.
        """
        if instructions_per_tick < 1:
            raise ValueError(f"instructions_per_tick must be at least 1, got {instructions_per_tick}")
        bar = tqdm(total=max_steps, desc="Running", unit="step") if progress else None
        result = StepResult.RUNNING
        count = 0
        try:
            while max_steps is None or count < max_steps:
                result = self.advance()
                count += 1
                if bar is not None:
                    bar.update(1)
                if count % instructions_per_tick == 0:
                    self.tick()
                if result == StepResult.HALTED:
                    break
                if result == StepResult.WAITING_FOR_KEY and self.key_pressed is None:
                    self.logger.warning("Program is waiting for a key but no keyboard is attached")
                    break
        finally:
            if bar is not None:
                bar.close()
        return result


def init(
    program: bytes,
    program_size: Optional[int] = None,
    screen_sink: Optional[ScreenSink] = None,
    sound_sink: Optional[SoundSink] = None,
    super_mode: bool = False,
    key_pressed: Optional[KeyPressed] = None,
    seed: Optional[int] = None,
    logger: Optional[ConsoleLogger] = None,
) -> Processor:
    """Create a processor with fonts installed and ``program`` loaded at 0x200.

    The random source is seeded once here, from ``seed`` or from the OS.

    Raises:
        ProgramTooLargeError: ``program_size`` exceeds the space after 0x200.
    """
    if seed is None:
        seed = int.from_bytes(os.urandom(4), "little") & 0x7FFFFFFF
    state = create_state(jax.random.PRNGKey(seed), super_mode=super_mode)
    state = load_program(state, program, program_size)
    processor = Processor(state, screen_sink, sound_sink, key_pressed, logger)
    processor.logger.debug(
        f"Initialised {'SUPER-CHIP' if super_mode else 'CHIP-8'} processor, "
        f"{len(program) if program_size is None else program_size} program bytes, seed {seed}"
    )
    return processor


def advance(processor: Processor) -> StepResult:
    """Execute one instruction on ``processor``."""
    return processor.advance()


def tick(processor: Processor):
    """Run one 60 Hz timer period on ``processor``."""
    processor.tick()
