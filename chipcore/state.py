"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipcore.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
    MEMORY_SIZE, MAX_ROM_SIZE, NUM_REGISTERS, NUM_KEYS, FAULT_NONE
)
from chipcore.errors import RomTooLargeError


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The display is row-major: ``display[row, col]``, so the flattened index of a
    pixel is ``row * SCREEN_WIDTH + col``.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    awaiting_key: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    fault_pc: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault_opcode: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    legacy: bool = field(pytree_node=False, default=False)

    @property
    def halted(self) -> jnp.ndarray:
        """True once a fault has been raised."""
        return self.fault != FAULT_NONE


def raise_fault(state: EmulatorState, code: int, address, opcode) -> EmulatorState:
    """Record a fault; the machine stops executing afterwards."""
    return state.replace(
        fault=jnp.astype(code, jnp.uint8),
        fault_pc=jnp.astype(address, jnp.uint16),
        fault_opcode=jnp.astype(opcode, jnp.uint16),
    )


def rom_to_array(rom: bytes) -> jnp.ndarray:
    """Convert ROM bytes to a uint8 array, rejecting images that overflow memory."""
    if len(rom) > MAX_ROM_SIZE:
        raise RomTooLargeError(len(rom))
    return jnp.array(list(rom), dtype=jnp.uint8)


def create_state(
    rom: bytes = b"",
    legacy: bool = False,
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
) -> EmulatorState:
    """Create initial emulator state with font data and ROM loaded."""
    rom_array = rom_to_array(rom)
    state = EmulatorState(rng, legacy=legacy)
    memory = state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)
    memory = memory.at[PROGRAM_START:PROGRAM_START + len(rom_array)].set(rom_array)
    return state.replace(memory=memory)
