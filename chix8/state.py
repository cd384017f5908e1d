"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chix8.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    NUM_REGISTERS, STACK_SIZE, NO_KEY, RUNNING, NO_FAULT
)


def _scalar(value, dtype):
    return field(default_factory=lambda: jnp.asarray(value, dtype=dtype))


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls.

    ``pointer`` counts the stored return addresses, so 0 means empty.
    """
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = _scalar(0, jnp.uint8)


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = _scalar(PROGRAM_START, jnp.uint16)
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = _scalar(0, jnp.uint8)
    sound_timer: jnp.ndarray = _scalar(0, jnp.uint8)
    key: jnp.ndarray = _scalar(NO_KEY, jnp.int8)
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = _scalar(0, jnp.uint16)
    redraw: jnp.ndarray = _scalar(False, jnp.bool_)
    status: jnp.ndarray = _scalar(RUNNING, jnp.uint8)
    fault: jnp.ndarray = _scalar(NO_FAULT, jnp.uint8)
    wait_register: jnp.ndarray = _scalar(0, jnp.uint8)
    strict: bool = field(pytree_node=False, default=False)


def create_state(rng: jax.Array = None, strict: bool = False) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Args:
        rng: PRNG key feeding the CXNN random opcode. Defaults to ``PRNGKey(0)``
        strict: Fault on unknown opcodes instead of skipping them

    Returns:
        A zeroed state with the font table at ``FONT_START``
    """
    if rng is None:
        rng = jax.random.PRNGKey(0)
    state = EmulatorState(rng, strict=strict)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
