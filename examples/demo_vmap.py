"""
Run a batch of CHIP-8 machines in parallel with ``jax.vmap``.

Every machine runs the same ROM but gets its own PRNG key, so the CXNN
instructions draw a different font glyph at a different position on each
screen. The resulting framebuffers are tiled into a single image.
"""

import time

import jax
import numpy as np

from chipcore import batch_render, create_state, display_to_text, keys_to_keypad, run_frame

# V0 = rand & 0xF; I = glyph(V0); V1 = rand & 0x3F; V2 = rand & 0x1F; draw; spin
ROM = bytes.fromhex("C00F F029 C13F C21F D125 120A".replace(" ", ""))


def rollout(rng, frames: int = 10):
    state = create_state(ROM, rng=rng)
    keypad = keys_to_keypad(())

    def frame(state, _):
        return run_frame(state, keypad, 11), None

    state, _ = jax.lax.scan(frame, state, length=frames)
    return state


if __name__ == "__main__":
    rngs = jax.random.split(jax.random.PRNGKey(0), 16)

    batched = jax.jit(jax.vmap(rollout))

    start = time.perf_counter()
    states = jax.block_until_ready(batched(rngs))
    print(f"compile + run: {time.perf_counter() - start:.2f}s")

    start = time.perf_counter()
    states = jax.block_until_ready(batched(rngs))
    print(f"run: {time.perf_counter() - start:.4f}s for {len(rngs)} machines")

    print(display_to_text(states.display[0]))

    grid = batch_render(np.asarray(states.display), scale=4)
    print(f"grid image: {grid.shape}")
