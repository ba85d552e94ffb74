"""CHIP-8 display operations."""

import jax
import jax.numpy as jnp
from chipcore.state import EmulatorState, raise_fault
from chipcore.decode import DecodedInstruction
from chipcore.constants import SCREEN_WIDTH, SCREEN_HEIGHT, ADDRESS_MASK, FAULT_MEMORY
from chipcore.instructions.system import instruction_address

# Pre-computed row/column grids matching the row-major display
rows, cols = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Only the origin wraps; sprite pixels past the right or bottom edge are
    clipped. Every sprite row that lands on screen is read from memory, so a
    sprite running past 0xFFF faults instead of drawing.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT
    height = jnp.astype(instruction.n, jnp.int32)

    visible_rows = jnp.minimum(height, SCREEN_HEIGHT - sprite_y)
    last_address = jnp.astype(state.I, jnp.int32) + visible_rows - 1
    out_of_memory = (visible_rows > 0) & (last_address > ADDRESS_MASK)

    def fault(state):
        return raise_fault(state, FAULT_MEMORY, instruction_address(state), instruction.raw)

    def draw(state):
        in_sprite = (cols >= sprite_x) & (cols < sprite_x + 8) & (rows >= sprite_y) & (rows < sprite_y + height)

        row_offset = jnp.clip(rows - sprite_y, 0, 15)
        bit = jnp.clip(7 - (cols - sprite_x), 0, 7)
        addresses = jnp.clip(jnp.astype(state.I, jnp.int32) + row_offset, 0, ADDRESS_MASK)
        sprite_bytes = state.memory[addresses]
        sprite = (((sprite_bytes >> bit) & 1) == 1) & in_sprite

        collision = jnp.any(state.display & sprite)
        return state.replace(
            display=state.display ^ sprite,
            V=state.V.at[15].set(jnp.astype(collision, jnp.uint8))
        )

    return jax.lax.cond(out_of_memory, fault, draw, state)
