"""CHIP-8 display operations."""

import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, FLAG_REGISTER

# Pre-computed coordinate grids for display operations, indexed [row, column]
rows, cols = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Every screen pixel is mapped back to the sprite pixel that lands on it, so
    sprites crossing an edge wrap around to the opposite side.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    row_offset = (rows - sprite_y) % SCREEN_HEIGHT
    col_offset = (cols - sprite_x) % SCREEN_WIDTH
    in_sprite = (row_offset < instruction.n) & (col_offset < 8)

    sprite_bytes = state.memory[(jnp.astype(state.I, jnp.int32) + row_offset) % MEMORY_SIZE]
    bit_shift = jnp.clip(7 - col_offset, 0, 7)
    sprite = (((sprite_bytes >> bit_shift) & 1) == 1) & in_sprite

    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        redraw=jnp.asarray(True),
    )
