"""CHIP-8 emulator package."""

from chix8.state import EmulatorState, StackState, create_state
from chix8.emulator import (
    execute, fetch, step, run_n_instructions, tick_timers, set_input,
    export_frame, sound_active, load_program, load_rom
)
from chix8.decode import DecodedInstruction, decode, disassemble
from chix8.constants import *
from chix8.errors import (
    Chip8Error, LoadTooLargeError, InvalidKeyError, MachineFault,
    StackOverflowError, StackUnderflowError, UnknownOpcodeError
)
from chix8.engine import Engine, Status

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_n_instructions",
    "tick_timers",
    "set_input",
    "export_frame",
    "sound_active",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "disassemble",
    "Chip8Error",
    "LoadTooLargeError",
    "InvalidKeyError",
    "MachineFault",
    "StackOverflowError",
    "StackUnderflowError",
    "UnknownOpcodeError",
    "Engine",
    "Status",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
