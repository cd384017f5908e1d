"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. Only the operations
marked in ``SETS_FLAG`` write their flag to VF; the logical ones leave VF as is.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.constants import FLAG_REGISTER
from chix8.instructions.system import undefined_instruction


def _no_flag() -> jnp.ndarray:
    return jnp.zeros((), dtype=jnp.uint8)


def alu_set(vx: int, vy: int) -> tuple[int, int]:
    """8XY0 - Set: VX = VY."""
    return jnp.astype(vy, jnp.uint8), _no_flag()


def alu_or(vx: int, vy: int) -> tuple[int, int]:
    """8XY1 - Binary OR: VX |= VY."""
    return jnp.astype(vx | vy, jnp.uint8), _no_flag()


def alu_and(vx: int, vy: int) -> tuple[int, int]:
    """8XY2 - Binary AND: VX &= VY."""
    return jnp.astype(vx & vy, jnp.uint8), _no_flag()


def alu_xor(vx: int, vy: int) -> tuple[int, int]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return jnp.astype(vx ^ vy, jnp.uint8), _no_flag()


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.uint16) + jnp.astype(vy, jnp.uint16)
    carry = jnp.astype(result > 0xFF, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow."""
    not_borrow = jnp.astype(vx >= vy, jnp.uint8)
    result = (jnp.astype(vx, jnp.int32) - jnp.astype(vy, jnp.int32)) & 0xFF
    return jnp.astype(result, jnp.uint8), not_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1, VF = shifted out bit."""
    shifted_bit = jnp.astype(vx & 0x01, jnp.uint8)
    return jnp.astype(vx >> 1, jnp.uint8), shifted_bit


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow."""
    not_borrow = jnp.astype(vy >= vx, jnp.uint8)
    result = (jnp.astype(vy, jnp.int32) - jnp.astype(vx, jnp.int32)) & 0xFF
    return jnp.astype(result, jnp.uint8), not_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1, VF = shifted out bit."""
    # Normalized to 0/1, not the raw 0x80 mask
    shifted_bit = jnp.astype((vx >> 7) & 0x01, jnp.uint8)
    result = (jnp.astype(vx, jnp.uint16) << 1) & 0xFF
    return jnp.astype(result, jnp.uint8), shifted_bit


def alu_undefined(vx: int, vy: int) -> tuple[int, int]:
    """Undefined ALU operation."""
    return jnp.astype(vx, jnp.uint8), _no_flag()


# N nibble -> position in the switch table below; 9 is undefined
ALU_INDEX = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, 9, 9, 9, 9, 9, 9, 8, 9], dtype=jnp.int32)
VALID_OPS = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)
SETS_FLAG = jnp.array([0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]

    result, flag = jax.lax.switch(
        ALU_INDEX[instruction.n],
        [alu_set, alu_or, alu_and, alu_xor, alu_add,
         alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left, alu_undefined],
        vx, vy
    )

    # Flag is written last, so it wins when X is VF
    new_V = state.V.at[instruction.x].set(result)
    new_V = new_V.at[FLAG_REGISTER].set(jnp.where(SETS_FLAG[instruction.n], flag, new_V[FLAG_REGISTER]))

    return jax.lax.cond(
        VALID_OPS[instruction.n],
        lambda state: state.replace(V=new_V),
        lambda state: undefined_instruction(state, instruction),
        state
    )
