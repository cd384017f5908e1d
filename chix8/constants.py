"""CHIP-8 machine constants."""

import jax.numpy as jnp

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START
ADDRESS_MASK = 0xFFF

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
STACK_SIZE = 12

NUM_KEYS = 16
NO_KEY = -1

TIMER_FREQUENCY = 60.0

# Machine status
RUNNING = 0
WAITING_FOR_KEY = 1
HALTED = 2

# Fault codes recorded when a state halts
NO_FAULT = 0
STACK_OVERFLOW = 1
STACK_UNDERFLOW = 2
UNKNOWN_OPCODE = 3

FONT_START = 0x000
GLYPH_SIZE = 5
FONT_DATA = jnp.array([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
], dtype=jnp.uint8)

__all__ = [
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "ADDRESS_MASK",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "NUM_REGISTERS",
    "FLAG_REGISTER",
    "STACK_SIZE",
    "NUM_KEYS",
    "NO_KEY",
    "TIMER_FREQUENCY",
    "RUNNING",
    "WAITING_FOR_KEY",
    "HALTED",
    "NO_FAULT",
    "STACK_OVERFLOW",
    "STACK_UNDERFLOW",
    "UNKNOWN_OPCODE",
    "FONT_START",
    "GLYPH_SIZE",
    "FONT_DATA",
]
