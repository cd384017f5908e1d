"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.constants import FONT_START, GLYPH_SIZE, MEMORY_SIZE, NUM_REGISTERS, WAITING_FOR_KEY
from chix8.instructions.system import undefined_instruction


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register. VF is not affected."""
    return state.replace(I=state.I + jnp.astype(state.V[instruction.x], jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    A key already held is taken at once. Otherwise the state switches to
    WAITING_FOR_KEY and ``set_input`` completes the instruction later.
    """
    def key_pressed_action(state):
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(state.key, jnp.uint8)))

    def wait_action(state):
        return state.replace(
            status=jnp.asarray(WAITING_FOR_KEY, dtype=jnp.uint8),
            wait_register=jnp.astype(instruction.x, jnp.uint8),
        )

    return jax.lax.cond(state.key >= 0, key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=FONT_START + digit * GLYPH_SIZE)


def _addresses_from_index(state: EmulatorState, count: int) -> jnp.ndarray:
    """Addresses I, I+1, ... I+count-1, wrapped to the memory size."""
    return (jnp.astype(state.I, jnp.int32) + jnp.arange(count)) % MEMORY_SIZE


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Write the hundreds, tens and ones digits of VX to I, I+1, I+2."""
    value = state.V[instruction.x]
    digits = jnp.stack([value // 100, value // 10 % 10, value % 10]).astype(jnp.uint8)
    return state.replace(memory=state.memory.at[_addresses_from_index(state, 3)].set(digits))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Copy V0..VX (inclusive) to memory at I. I is not changed."""
    addresses = _addresses_from_index(state, NUM_REGISTERS)
    selected = jnp.arange(NUM_REGISTERS) <= instruction.x
    block = jnp.where(selected, state.V, state.memory[addresses])
    return state.replace(memory=state.memory.at[addresses].set(block))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Copy memory at I into V0..VX (inclusive). I is not changed."""
    addresses = _addresses_from_index(state, NUM_REGISTERS)
    selected = jnp.arange(NUM_REGISTERS) <= instruction.x
    return state.replace(V=jnp.where(selected, state.memory[addresses], state.V))


MISC_HANDLERS = (
    (0x07, execute_get_delay_timer),
    (0x0A, execute_wait_for_key),
    (0x15, execute_set_delay_timer),
    (0x18, execute_set_sound_timer),
    (0x1E, execute_add_to_index),
    (0x29, execute_font_character),
    (0x33, execute_bcd_conversion),
    (0x55, execute_store_registers),
    (0x65, execute_load_registers),
)

# NN -> branch index; every unlisted NN lands on the trailing undefined branch
MISC_INDEX = jnp.full(256, len(MISC_HANDLERS), dtype=jnp.int32).at[
    jnp.array([nn for nn, _ in MISC_HANDLERS])
].set(jnp.arange(len(MISC_HANDLERS), dtype=jnp.int32))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch FXNN on its low byte."""
    return jax.lax.switch(
        MISC_INDEX[instruction.nn],
        [handler for _, handler in MISC_HANDLERS] + [undefined_instruction],
        state, instruction
    )
