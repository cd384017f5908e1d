"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Optional

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np

from chix8.state import EmulatorState
from chix8.decode import decode
from chix8.constants import (
    ADDRESS_MASK, PROGRAM_START, MAX_PROGRAM_SIZE, MEMORY_SIZE, NUM_KEYS, NO_KEY, RUNNING, WAITING_FOR_KEY
)
from chix8.errors import LoadTooLargeError, InvalidKeyError
from chix8.instructions.system import execute_system_instruction
from chix8.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chix8.instructions.alu import execute_alu_operation
from chix8.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chix8.instructions.display import execute_display
from chix8.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Expects ``state.pc`` to already point past the instruction, as left by
    :func:`fetch`.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory."""
    instruction = _pack_u16(state.memory[state.pc % MEMORY_SIZE], state.memory[(state.pc + 1) % MEMORY_SIZE])
    return state.replace(pc=(state.pc + 2) & ADDRESS_MASK), instruction


def _fetch_and_execute(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return execute(state, instruction)


@jax.jit
def step(state: EmulatorState) -> EmulatorState:
    """Run one instruction if the machine is RUNNING, otherwise return the state unchanged."""
    return jax.lax.cond(state.status == RUNNING, _fetch_and_execute, lambda s: s, state)


@partial(jax.jit, static_argnums=1)
def run_n_instructions(state: EmulatorState, n: int) -> EmulatorState:
    """Step ``n`` times. Waiting or halted states are left untouched."""
    state, _ = jax.lax.scan(lambda s, _: (step(s), None), state, length=n)
    return state


@jax.jit
def tick_timers(state: EmulatorState, steps: int = 1) -> EmulatorState:
    """Count both timers down by ``steps`` 60 Hz ticks, stopping at zero."""
    steps = jnp.astype(steps, jnp.int32)
    return state.replace(
        delay_timer=jnp.astype(jnp.maximum(jnp.astype(state.delay_timer, jnp.int32) - steps, 0), jnp.uint8),
        sound_timer=jnp.astype(jnp.maximum(jnp.astype(state.sound_timer, jnp.int32) - steps, 0), jnp.uint8),
    )


def _resolve_wait(state: EmulatorState) -> EmulatorState:
    return state.replace(
        V=state.V.at[state.wait_register].set(jnp.astype(state.key, jnp.uint8)),
        status=jnp.asarray(RUNNING, dtype=jnp.uint8),
    )


def set_input(state: EmulatorState, key: Optional[int] = None) -> EmulatorState:
    """Set the currently held key (0-15), or release it with ``None``.

    A pending FX0A is completed as soon as a key is held.

    Raises:
        InvalidKeyError: If ``key`` is outside the 16-key keypad
    """
    if key is None:
        key = NO_KEY
    elif not 0 <= key < NUM_KEYS:
        raise InvalidKeyError(f"Key code must be in 0..{NUM_KEYS - 1} or None, got {key}")

    state = state.replace(key=jnp.asarray(key, dtype=jnp.int8))
    return jax.lax.cond(
        (state.status == WAITING_FOR_KEY) & (state.key >= 0),
        _resolve_wait,
        lambda s: s,
        state
    )


def export_frame(state: EmulatorState) -> tuple[EmulatorState, np.ndarray, bool]:
    """Snapshot the display and consume the redraw flag.

    Returns:
        Tuple of:
            - state: The state with its redraw flag cleared
            - frame: Boolean (32, 64) numpy copy of the display, indexed [row, column]
            - changed: Whether the display changed since the previous export
    """
    frame = np.array(state.display, dtype=np.bool_)
    changed = bool(state.redraw)
    return state.replace(redraw=jnp.asarray(False)), frame, changed


def sound_active(state: EmulatorState) -> bool:
    """Whether the sound timer is running."""
    return bool(state.sound_timer > 0)


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy a program image into memory starting at 0x200.

    Raises:
        LoadTooLargeError: If the program does not fit in memory
    """
    if len(program) > MAX_PROGRAM_SIZE:
        raise LoadTooLargeError(len(program), MAX_PROGRAM_SIZE)
    program_array = jnp.array(np.frombuffer(bytes(program), dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
