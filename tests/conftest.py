"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chix8 import create_state, load_program, Engine


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def strict_state():
    """Provide a fresh state that faults on unknown opcodes."""
    return create_state(strict=True)


@pytest.fixture
def engine():
    """Provide a fresh engine with the default seed."""
    return Engine(seed=0)


def program_bytes(*instructions):
    """Assemble 16-bit instruction words into a big-endian program image."""
    return b"".join(instruction.to_bytes(2, "big") for instruction in instructions)


def load_instructions(state, *instructions):
    """Helper to load instruction words at 0x200."""
    return load_program(state, program_bytes(*instructions))


def set_register(state, index, value):
    """Helper to set a single V register."""
    return state.replace(V=state.V.at[index].set(value))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )
