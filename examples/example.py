"""Run a ROM headless with the functional API and compare seeds in one batch.

    python examples/example.py roms/brix.ch8
"""
import sys
import time

import jax
import jax.numpy as jnp

from chix8 import create_state, load_rom, run_n_instructions, tick_timers
from chix8.rendering import create_video

INSTRUCTIONS_PER_FRAME = 10
NUM_FRAMES = 600


def rollout(state):
    def frame_step(state, _):
        state = run_n_instructions(state, INSTRUCTIONS_PER_FRAME)
        state = tick_timers(state)
        return state, state.display

    return jax.lax.scan(frame_step, state, length=NUM_FRAMES)


if __name__ == "__main__":
    filename = sys.argv[1]

    # The program image is shared, only the random source differs per machine
    base = load_rom(create_state(), filename)
    rngs = jax.random.split(jax.random.PRNGKey(0), 16)
    states = jax.vmap(lambda rng: base.replace(rng=rng))(rngs)

    start_compile = time.time()
    compiled = jax.jit(jax.vmap(rollout)).lower(states).compile()
    end_compile = time.time()
    print("Compilation time (s):", end_compile - start_compile)

    start_exec = time.time()
    final_states, frames = jax.block_until_ready(compiled(states))
    end_exec = time.time()
    print("Execution time (s):", end_exec - start_exec)

    diverged = jnp.any(frames[:, -1] != frames[0, -1], axis=(1, 2))
    print(f"{int(diverged.sum())}/{len(rngs)} machines ended on a different screen than seed 0")
    print("Status per machine:", final_states.status)

    create_video(frames[0], display=True)
