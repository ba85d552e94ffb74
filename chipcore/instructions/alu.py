"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction


def alu_set(vx: int, vy: int) -> int:
    """8XY0 - Set: VX = VY."""
    return vy


def alu_or(vx: int, vy: int) -> int:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy


def alu_and(vx: int, vy: int) -> int:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy


def alu_xor(vx: int, vy: int) -> int:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = jnp.astype(result > 255, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, set borrow flag."""
    borrow_flag = jnp.astype(vx >= vy, jnp.uint8)
    result = (jnp.astype(vx, jnp.int32) - vy) & 0xFF
    return jnp.astype(result, jnp.uint8), borrow_flag


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, set borrow flag."""
    return alu_sub_xy(vy, vx)


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1."""
    shifted_bit = jnp.astype(vx & 1, jnp.uint8)
    result = jnp.astype(vx >> 1, jnp.uint8)
    return result, shifted_bit


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1."""
    shifted_bit = jnp.astype((vx & 0x80) >> 7, jnp.uint8)
    result = jnp.astype((jnp.astype(vx, jnp.int32) << 1) & 0xFF, jnp.uint8)
    return result, shifted_bit


def make_logic_instruction(alu_fn):
    """Factory for 8XYN operations that leave VF alone."""
    def logic_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result = alu_fn(state.V[instruction.x], state.V[instruction.y])
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8)))
    return logic_instruction


def make_flag_instruction(alu_fn, copy_vy: bool = False):
    """Factory for 8XYN operations that report through VF.

    VF is written before VX, so when X is F the result wins over the flag.
    With ``copy_vy`` the legacy COSMAC VIP behaviour applies: VX = VY first.
    """
    def flag_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if copy_vy and state.legacy:
            vx = vy
        result, vf = alu_fn(vx, vy)
        new_V = state.V.at[15].set(vf)
        new_V = new_V.at[instruction.x].set(result)
        return state.replace(V=new_V)
    return flag_instruction


execute_copy = make_logic_instruction(alu_set)
execute_or = make_logic_instruction(alu_or)
execute_and = make_logic_instruction(alu_and)
execute_xor = make_logic_instruction(alu_xor)
execute_add_registers = make_flag_instruction(alu_add)
execute_sub = make_flag_instruction(alu_sub_xy)
execute_subn = make_flag_instruction(alu_sub_yx)
execute_shift_right = make_flag_instruction(alu_shift_right, copy_vy=True)
execute_shift_left = make_flag_instruction(alu_shift_left, copy_vy=True)
