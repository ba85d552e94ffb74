"""CHIP-8 system instructions (0x0xxx) and decode faults."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState, raise_fault
from chipcore.decode import DecodedInstruction
from chipcore.constants import FAULT_DECODE, FAULT_STACK_UNDERFLOW
from chipcore.stack import pop, is_empty


def instruction_address(state: EmulatorState) -> jnp.ndarray:
    """Address of the instruction being executed (pc already advanced by fetch)."""
    return state.pc - 2


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unmatched opcode - halt with a decode fault."""
    return raise_fault(state, FAULT_DECODE, instruction_address(state), instruction.raw)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def underflow(state):
        return raise_fault(state, FAULT_STACK_UNDERFLOW, instruction_address(state), instruction.raw)

    def ret(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(is_empty(state.stack), underflow, ret, state)
