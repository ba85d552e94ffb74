"""Exceptions raised by the host-facing machine wrapper."""

from chipcore.constants import (
    FAULT_DECODE, FAULT_STACK_UNDERFLOW, FAULT_STACK_OVERFLOW, FAULT_MEMORY, MAX_ROM_SIZE
)


class ChipError(Exception):
    """Base error for chipcore failures."""


class RomTooLargeError(ChipError, ValueError):
    """Raised when a ROM does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int):
        super().__init__(f"ROM is {size} bytes, at most {MAX_ROM_SIZE} bytes fit in memory")
        self.size = size


class MachineFault(ChipError):
    """Raised when the machine halts on a fault."""

    code = 0
    reason = "machine fault"

    def __init__(self, pc: int, opcode: int):
        super().__init__(f"{self.reason} at 0x{pc:03X} (opcode 0x{opcode:04X})")
        self.pc = pc
        self.opcode = opcode


class DecodeError(MachineFault):
    code = FAULT_DECODE
    reason = "invalid opcode"


class StackUnderflowError(MachineFault):
    code = FAULT_STACK_UNDERFLOW
    reason = "return with empty call stack"


class StackOverflowError(MachineFault):
    code = FAULT_STACK_OVERFLOW
    reason = "call stack full"


class MemoryAccessError(MachineFault):
    code = FAULT_MEMORY
    reason = "memory access out of range"


FAULTS = {cls.code: cls for cls in (DecodeError, StackUnderflowError, StackOverflowError, MemoryAccessError)}


def fault_from_code(code: int, pc: int, opcode: int) -> MachineFault:
    """Build the exception matching a fault code stored in the state."""
    return FAULTS.get(code, MachineFault)(pc, opcode)
