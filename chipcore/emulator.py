"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Iterable

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState, raise_fault, rom_to_array
from chipcore.decode import Op, decode
from chipcore.constants import PROGRAM_START, ADDRESS_MASK, NUM_KEYS, INSTRUCTIONS_PER_FRAME, FAULT_MEMORY
from chipcore.instructions.system import execute_invalid, execute_clear_screen, execute_return
from chipcore.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chipcore.instructions.alu import (
    execute_copy, execute_or, execute_and, execute_xor, execute_add_registers,
    execute_sub, execute_subn, execute_shift_right, execute_shift_left
)
from chipcore.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipcore.instructions.display import execute_display
from chipcore.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

HANDLERS = {
    Op.INVALID: execute_invalid,
    Op.CLEAR: execute_clear_screen,
    Op.RETURN: execute_return,
    Op.JUMP: execute_jump,
    Op.CALL: execute_call,
    Op.SKIP_EQ_IMM: execute_skip_if_equal_immediate,
    Op.SKIP_NE_IMM: execute_skip_if_not_equal_immediate,
    Op.SKIP_EQ_REG: execute_skip_if_equal_register,
    Op.SKIP_NE_REG: execute_skip_if_not_equal_register,
    Op.LOAD_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.COPY: execute_copy,
    Op.OR: execute_or,
    Op.AND: execute_and,
    Op.XOR: execute_xor,
    Op.ADD: execute_add_registers,
    Op.SUB: execute_sub,
    Op.SHR: execute_shift_right,
    Op.SUBN: execute_subn,
    Op.SHL: execute_shift_left,
    Op.LOAD_INDEX: execute_set_index,
    Op.JUMP_OFFSET: execute_jump_with_offset,
    Op.RANDOM: execute_random,
    Op.DRAW: execute_display,
    Op.SKIP_KEY: execute_skip_if_key,
    Op.SKIP_NOT_KEY: execute_skip_if_not_key,
    Op.GET_DELAY: execute_get_delay_timer,
    Op.AWAIT_KEY: execute_wait_for_key,
    Op.SET_DELAY: execute_set_delay_timer,
    Op.SET_SOUND: execute_set_sound_timer,
    Op.ADD_INDEX: execute_add_to_index,
    Op.FONT: execute_font_character,
    Op.BCD: execute_bcd_conversion,
    Op.STORE: execute_store_registers,
    Op.LOAD: execute_load_registers,
}


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(
        decoded_instruction.op,
        [HANDLERS[op] for op in Op],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory.

    A program counter with no room for a full instruction word raises a memory
    fault; the returned instruction is then 0 and must not be executed.
    """
    def read(state):
        instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
        return state.replace(pc=state.pc + 2), instruction

    def overrun(state):
        return raise_fault(state, FAULT_MEMORY, state.pc, 0), jnp.zeros((), dtype=jnp.uint16)

    return jax.lax.cond(jnp.astype(state.pc, jnp.int32) + 1 > ADDRESS_MASK, overrun, read, state)


def cycle(state: EmulatorState, keypad: jnp.ndarray) -> EmulatorState:
    """Run one fetch/execute cycle with the given keypad. Halted states are left untouched."""
    def step(state):
        state, instruction = fetch(state)
        return jax.lax.cond(state.halted, lambda s, i: s, execute, state, instruction)

    state = state.replace(keypad=jnp.astype(keypad, jnp.bool_))
    return jax.lax.cond(state.halted, lambda s: s, step, state)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers toward zero; called at 60 Hz by the host.

    A halted machine keeps its timers frozen.
    """
    running = ~state.halted
    return state.replace(
        delay_timer=jnp.where(running & (state.delay_timer > 0), state.delay_timer - 1, state.delay_timer).astype(jnp.uint8),
        sound_timer=jnp.where(running & (state.sound_timer > 0), state.sound_timer - 1, state.sound_timer).astype(jnp.uint8),
    )


@partial(jax.jit, static_argnums=2)
def run_frame(state: EmulatorState, keypad: jnp.ndarray, n: int = INSTRUCTIONS_PER_FRAME) -> EmulatorState:
    """Run ``n`` cycles with a fixed keypad, then tick the timers once."""
    def run_instruction(state, _):
        return cycle(state, keypad), None

    state, _ = jax.lax.scan(run_instruction, state, length=n)
    return tick_timers(state)


def keys_to_keypad(keys: Iterable[int]) -> jnp.ndarray:
    """Convert pressed key codes (0x0-0xF) into a keypad array."""
    keypad = [False] * NUM_KEYS
    for key in keys:
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key code {key!r} is outside the hex keypad (0x0-0xF)")
        keypad[key] = True
    return jnp.array(keypad, dtype=jnp.bool_)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    rom_array = rom_to_array(rom_data)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_array)].set(rom_array)
    return state.replace(memory=new_memory)
