"""Tests for miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
import pytest
from chix8 import execute, step, set_input, InvalidKeyError
from chix8.constants import RUNNING, WAITING_FOR_KEY
from conftest import load_instructions, set_register


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Timers are loaded from the register value, not the register index."""
        state = execute(fresh_state, 0x6330)  # V3 = 48
        state = execute(state, 0xF315)  # Set delay timer to V3
        assert state.delay_timer == 48

        state = execute(state, 0x6420)  # V4 = 32
        state = execute(state, 0xF418)  # Set sound timer to V4
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48


class TestBCD:
    """Test BCD conversion."""

    @pytest.mark.parametrize("value,digits", [
        (234, [2, 3, 4]),
        (156, [1, 5, 6]),
        (0, [0, 0, 0]),
        (7, [0, 0, 7]),
        (40, [0, 4, 0]),
        (255, [2, 5, 5]),
    ])
    def test_bcd_conversion(self, fresh_state, value, digits):
        state = set_register(fresh_state, 6, value)
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xF633)

        assert list(map(int, state.memory[0x300:0x303])) == digits
        assert state.I == 0x300


class TestMemoryOperations:
    """Test store/load register operations."""

    def test_store_load_round_trip(self, fresh_state):
        """FX55 then FX65 restores V0..VX and leaves I alone."""
        state = execute(fresh_state, 0x6001)  # V0 = 1
        state = execute(state, 0x6102)  # V1 = 2
        state = execute(state, 0x6203)  # V2 = 3
        state = execute(state, 0xA300)  # I = 0x300

        state = execute(state, 0xF255)  # Store V0-V2
        assert state.I == 0x300
        assert list(map(int, state.memory[0x300:0x303])) == [1, 2, 3]

        state = execute(state, 0x6000)
        state = execute(state, 0x6100)
        state = execute(state, 0x6200)

        state = execute(state, 0xF265)  # Load V0-V2
        assert state.V[0] == 1
        assert state.V[1] == 2
        assert state.V[2] == 3
        assert state.I == 0x300

    def test_store_is_inclusive_and_bounded(self, fresh_state):
        """FX55 writes exactly X+1 bytes."""
        state = fresh_state.replace(V=jnp.arange(1, 17, dtype=jnp.uint8))
        state = state.replace(memory=state.memory.at[0x400:0x410].set(0xEE))
        state = execute(state, 0xA400)

        state = execute(state, 0xF355)

        assert list(map(int, state.memory[0x400:0x405])) == [1, 2, 3, 4, 0xEE]

    def test_load_is_inclusive_and_bounded(self, fresh_state):
        """FX65 fills exactly V0..VX."""
        state = fresh_state.replace(memory=fresh_state.memory.at[0x400:0x410].set(0x77))
        state = execute(state, 0xA400)

        state = execute(state, 0xF065)

        assert state.V[0] == 0x77
        assert state.V[1] == 0

    def test_store_all_registers(self, fresh_state):
        state = fresh_state.replace(V=jnp.arange(16, dtype=jnp.uint8) * 3)
        state = execute(state, 0xA500)

        state = execute(state, 0xFF55)

        assert jnp.array_equal(state.memory[0x500:0x510], jnp.arange(16, dtype=jnp.uint8) * 3)


class TestIndexArithmetic:
    """Test FX1E."""

    def test_add_to_index(self, fresh_state):
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xF01E)  # I += V0

        assert state.I == 0x310

    def test_add_to_index_leaves_flag(self, fresh_state):
        """Unlike 8XY4, FX1E never writes VF."""
        state = set_register(fresh_state, 15, 0x42)
        state = execute(state, 0x60FF)  # V0 = 0xFF
        state = execute(state, 0xAF80)  # I = 0xF80
        state = execute(state, 0xF01E)

        assert state.I == 0xF80 + 0xFF
        assert state.V[15] == 0x42


class TestWaitForKey:
    """Test FX0A and the waiting status."""

    def test_wait_enters_waiting_status(self, fresh_state):
        state = load_instructions(fresh_state, 0xF30A, 0x6001)

        state = step(state)

        assert state.status == WAITING_FOR_KEY
        assert state.wait_register == 3
        assert state.pc == 0x202

    def test_step_is_noop_while_waiting(self, fresh_state):
        state = step(load_instructions(fresh_state, 0xF30A, 0x6001))

        state = step(step(state))

        assert state.pc == 0x202
        assert state.V[0] == 0

    def test_key_resolves_wait(self, fresh_state):
        state = step(load_instructions(fresh_state, 0xF30A, 0x6001))

        state = set_input(state, None)
        assert state.status == WAITING_FOR_KEY

        state = set_input(state, 0xB)
        assert state.status == RUNNING
        assert state.V[3] == 0xB

        state = step(state)
        assert state.V[0] == 1

    def test_held_key_is_taken_immediately(self, fresh_state):
        state = set_input(load_instructions(fresh_state, 0xF50A), 7)

        state = step(state)

        assert state.status == RUNNING
        assert state.V[5] == 7
        assert state.pc == 0x202

    def test_key_zero_resolves_wait(self, fresh_state):
        state = step(load_instructions(fresh_state, 0xF10A))
        state = set_register(state, 1, 0x99)

        state = set_input(state, 0)

        assert state.status == RUNNING
        assert state.V[1] == 0

    @pytest.mark.parametrize("key", [-1, 16, 255])
    def test_invalid_key(self, fresh_state, key):
        with pytest.raises(InvalidKeyError):
            set_input(fresh_state, key)
