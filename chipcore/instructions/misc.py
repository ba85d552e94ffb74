"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState, raise_fault
from chipcore.decode import DecodedInstruction
from chipcore.constants import FONT_START, FONT_CHAR_SIZE, ADDRESS_MASK, MEMORY_SIZE, NUM_REGISTERS, FAULT_MEMORY
from chipcore.instructions.system import instruction_address


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register (16-bit wraparound, VF untouched)."""
    new_i = jnp.astype(state.I + jnp.astype(state.V[instruction.x], jnp.uint16), jnp.uint16)
    return state.replace(I=new_i)


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Without a key the instruction is rewound so the next cycle runs it again,
    and ``awaiting_key`` stays set until a key arrives.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(
            V=state.V.at[instruction.x].set(pressed_key),
            awaiting_key=jnp.zeros((), dtype=jnp.bool_),
        )

    def wait_action(state):
        return state.replace(pc=state.pc - 2, awaiting_key=jnp.ones((), dtype=jnp.bool_))

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX (low nibble)."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=jnp.astype(FONT_START + digit * FONT_CHAR_SIZE, jnp.uint16))


def make_block_instruction(span_fn, body_fn):
    """Factory for instructions touching memory[I..I+span-1]; overruns past 0xFFF fault."""
    def block_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        last_address = jnp.astype(state.I, jnp.int32) + span_fn(instruction) - 1
        return jax.lax.cond(
            last_address > ADDRESS_MASK,
            lambda s: raise_fault(s, FAULT_MEMORY, instruction_address(s), instruction.raw),
            lambda s: body_fn(s, instruction),
            state
        )
    return block_instruction


def _bcd(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    return state.replace(memory=state.memory.at[indices].set(digits))


def _store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    # Unselected registers target an out-of-range slot and are dropped
    targets = jnp.where(register_mask, base_indices, MEMORY_SIZE)
    return state.replace(memory=state.memory.at[targets].set(state.V, mode="drop"))


def _load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
    return state.replace(V=jnp.where(register_mask, memory_values, state.V))


execute_bcd_conversion = make_block_instruction(lambda inst: 3, _bcd)
execute_bcd_conversion.__doc__ = "FX33 - Store BCD representation of VX at I, I+1, I+2."

execute_store_registers = make_block_instruction(lambda inst: jnp.astype(inst.x, jnp.int32) + 1, _store_registers)
execute_store_registers.__doc__ = "FX55 - Store V0 through VX in memory starting at I."

execute_load_registers = make_block_instruction(lambda inst: jnp.astype(inst.x, jnp.int32) + 1, _load_registers)
execute_load_registers.__doc__ = "FX65 - Load V0 through VX from memory starting at I."
