"""Stateful CHIP-8 engine for interactive drivers.

:class:`Engine` owns a single :class:`~chix8.state.EmulatorState` and exposes
the imperative surface a presentation loop needs: load a program, step,
tick timers against wall-clock time, feed the held key and pull frames.
Machine faults recorded by the functional core are raised here as
:class:`~chix8.errors.MachineFault` subclasses.
"""

import enum
from typing import Optional, Tuple

import jax
import numpy as np

from chix8 import emulator
from chix8.constants import (
    RUNNING, WAITING_FOR_KEY, HALTED, TIMER_FREQUENCY, PROGRAM_START, MAX_PROGRAM_SIZE, MEMORY_SIZE
)
from chix8.decode import disassemble
from chix8.errors import FAULT_ERRORS, LoadTooLargeError
from chix8.logging import ConsoleLogger
from chix8.state import EmulatorState, create_state


class Status(enum.IntEnum):
    RUNNING = RUNNING
    WAITING_FOR_KEY = WAITING_FOR_KEY
    HALTED = HALTED


class Engine:
    """CHIP-8 engine driven one instruction at a time.

    Example:
        >>> engine = Engine(seed=0)
        >>> engine.load(bytes([0x60, 0x05, 0x70, 0x03]))
        >>> _ = engine.run(2)
        >>> int(engine.state.V[0])
        8
    """

    def __init__(
        self,
        seed: int = 0,
        strict: bool = False,
        timer_frequency: float = TIMER_FREQUENCY,
        logger: Optional[ConsoleLogger] = None,
        log_level: str = "WARNING",
    ):
        """Create an engine with a fresh machine.

        Args:
            seed: Seed of the PRNG key used by the random opcode
            strict: Raise on unknown opcodes instead of skipping them
            timer_frequency: Timer decrements per second of elapsed time
            logger: Logger to report to. Created from ``log_level`` if omitted
            log_level: Level of the default logger
        """
        if timer_frequency <= 0:
            raise ValueError(f"timer_frequency must be positive, got {timer_frequency}")

        self.seed = seed
        self.strict = strict
        self.timer_frequency = timer_frequency
        self.logger = logger or ConsoleLogger(name="Engine", log_level=log_level)
        self.program = b""
        self.reset()

    def reset(self):
        """Recreate the machine and reload the last program."""
        self.state: EmulatorState = create_state(jax.random.PRNGKey(self.seed), strict=self.strict)
        self._timer_remainder = 0.0
        self._reported_fault = False
        if self.program:
            self.state = emulator.load_program(self.state, self.program)

    @property
    def status(self) -> Status:
        return Status(int(self.state.status))

    def load(self, program: bytes):
        """Start a fresh machine with ``program`` copied to 0x200.

        Raises:
            LoadTooLargeError: If the program does not fit; the machine is left untouched
        """
        if len(program) > MAX_PROGRAM_SIZE:
            raise LoadTooLargeError(len(program), MAX_PROGRAM_SIZE)
        self.program = bytes(program)
        self.reset()
        self.logger.info(f"Loaded {len(program)} bytes at 0x{PROGRAM_START:03X}")

    def load_rom(self, filename: str):
        """Read a ROM file and load it."""
        with open(filename, 'rb') as f:
            self.load(f.read())

    def step(self) -> Status:
        """Execute one instruction.

        Does nothing while waiting for a key or once halted.

        Returns:
            The status after the instruction

        Raises:
            MachineFault: When the instruction halted the machine
        """
        status = self.status
        if status != Status.RUNNING:
            return status

        if self.logger.is_enabled_for("DEBUG"):
            self.logger.debug(f"{int(self.state.pc):03X}: {disassemble(self._current_instruction())}")

        self.state = emulator.step(self.state)
        return self._check_status(Status.RUNNING)

    def run(self, n: int) -> Status:
        """Execute up to ``n`` instructions in one compiled call.

        Stops early, without error, when the machine starts waiting for a key.

        Raises:
            MachineFault: When an instruction halted the machine
        """
        status = self.status
        if status != Status.RUNNING:
            return status
        self.state = emulator.run_n_instructions(self.state, n)
        return self._check_status(Status.RUNNING)

    def tick_timers(self, elapsed: float) -> int:
        """Advance both timers by ``elapsed`` seconds of wall-clock time.

        Fractions of a tick are carried over to the next call.

        Returns:
            Number of whole ticks applied
        """
        if elapsed < 0:
            raise ValueError(f"elapsed must be non-negative, got {elapsed}")
        ticks = self._timer_remainder + elapsed * self.timer_frequency
        steps = int(ticks)
        self._timer_remainder = ticks - steps
        if steps:
            self.state = emulator.tick_timers(self.state, min(steps, 0xFF))
        return steps

    def set_input(self, key: Optional[int]):
        """Set the held key (0-15) or ``None``.

        Raises:
            InvalidKeyError: If ``key`` is out of range
        """
        previous = self.status
        self.state = emulator.set_input(self.state, key)
        if previous == Status.WAITING_FOR_KEY and self.status == Status.RUNNING:
            self.logger.debug(f"Key {key:X} resolved wait into V{int(self.state.wait_register):X}")

    def export_frame(self) -> Tuple[np.ndarray, bool]:
        """Return the display as a (32, 64) boolean array and whether it changed since the last call."""
        self.state, frame, changed = emulator.export_frame(self.state)
        return frame, changed

    def sound_active(self) -> bool:
        return emulator.sound_active(self.state)

    def _current_instruction(self) -> int:
        pc = int(self.state.pc)
        memory = self.state.memory
        return (int(memory[pc % MEMORY_SIZE]) << 8) | int(memory[(pc + 1) % MEMORY_SIZE])

    def _check_status(self, previous: Status) -> Status:
        status = self.status
        if status == Status.WAITING_FOR_KEY and previous != status:
            self.logger.debug(f"Waiting for key into V{int(self.state.wait_register):X}")
        elif status == Status.HALTED and not self._reported_fault:
            self._reported_fault = True
            error_cls = FAULT_ERRORS[int(self.state.fault)]
            error = error_cls(int(self.state.pc), self._current_instruction())
            self.logger.error(str(error))
            raise error
        return status
