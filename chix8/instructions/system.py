"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.constants import ADDRESS_MASK, HALTED, STACK_UNDERFLOW, UNKNOWN_OPCODE
from chix8.stack import pop, is_empty


def fault(state: EmulatorState, code: int) -> EmulatorState:
    """Halt the machine, leaving pc on the faulting instruction."""
    return state.replace(
        status=jnp.asarray(HALTED, dtype=jnp.uint8),
        fault=jnp.asarray(code, dtype=jnp.uint8),
        pc=(state.pc - 2) & ADDRESS_MASK,
    )


def undefined_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unknown pattern: skipped, or a fault when the state is strict."""
    if state.strict:
        return fault(state, UNKNOWN_OPCODE)
    return state


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(
        display=jnp.zeros_like(state.display),
        redraw=jnp.asarray(True),
    )


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def return_action(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: fault(state, STACK_UNDERFLOW),
        return_action,
        state
    )


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            undefined_instruction,
            state, instruction
        ),
        state, instruction
    )
