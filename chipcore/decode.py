"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Op(IntEnum):
    """Every operation an instruction word can decode to."""
    INVALID = 0
    CLEAR = 1
    RETURN = 2
    JUMP = 3
    CALL = 4
    SKIP_EQ_IMM = 5
    SKIP_NE_IMM = 6
    SKIP_EQ_REG = 7
    SKIP_NE_REG = 8
    LOAD_IMM = 9
    ADD_IMM = 10
    COPY = 11
    OR = 12
    AND = 13
    XOR = 14
    ADD = 15
    SUB = 16
    SHR = 17
    SUBN = 18
    SHL = 19
    LOAD_INDEX = 20
    JUMP_OFFSET = 21
    RANDOM = 22
    DRAW = 23
    SKIP_KEY = 24
    SKIP_NOT_KEY = 25
    GET_DELAY = 26
    AWAIT_KEY = 27
    SET_DELAY = 28
    SET_SOUND = 29
    ADD_INDEX = 30
    FONT = 31
    BCD = 32
    STORE = 33
    LOAD = 34


# (mask, pattern, op): a word decodes to op when word & mask == pattern
OPCODE_PATTERNS = (
    (0xFFFF, 0x00E0, Op.CLEAR),
    (0xFFFF, 0x00EE, Op.RETURN),
    (0xF000, 0x1000, Op.JUMP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SKIP_EQ_IMM),
    (0xF000, 0x4000, Op.SKIP_NE_IMM),
    (0xF00F, 0x5000, Op.SKIP_EQ_REG),
    (0xF00F, 0x9000, Op.SKIP_NE_REG),
    (0xF000, 0x6000, Op.LOAD_IMM),
    (0xF000, 0x7000, Op.ADD_IMM),
    (0xF00F, 0x8000, Op.COPY),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),
    (0xF000, 0xA000, Op.LOAD_INDEX),
    (0xF000, 0xB000, Op.JUMP_OFFSET),
    (0xF000, 0xC000, Op.RANDOM),
    (0xF000, 0xD000, Op.DRAW),
    (0xF0FF, 0xE09E, Op.SKIP_KEY),
    (0xF0FF, 0xE0A1, Op.SKIP_NOT_KEY),
    (0xF0FF, 0xF007, Op.GET_DELAY),
    (0xF0FF, 0xF00A, Op.AWAIT_KEY),
    (0xF0FF, 0xF015, Op.SET_DELAY),
    (0xF0FF, 0xF018, Op.SET_SOUND),
    (0xF0FF, 0xF01E, Op.ADD_INDEX),
    (0xF0FF, 0xF029, Op.FONT),
    (0xF0FF, 0xF033, Op.BCD),
    (0xF0FF, 0xF055, Op.STORE),
    (0xF0FF, 0xF065, Op.LOAD),
)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op member, Op.INVALID if unmatched
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode_op(instruction: int) -> jnp.ndarray:
    """Classify an instruction word into its Op."""
    return jnp.select(
        [(instruction & mask) == pattern for mask, pattern, _ in OPCODE_PATTERNS],
        [int(op) for _, _, op in OPCODE_PATTERNS],
        default=int(Op.INVALID),
    )


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        op=decode_op(instruction),
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
