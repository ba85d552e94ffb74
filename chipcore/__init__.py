"""CHIP-8 virtual machine package."""

from chipcore.constants import PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT
from chipcore.state import EmulatorState, create_state
from chipcore.decode import DecodedInstruction, Op, decode
from chipcore.emulator import execute, fetch, cycle, tick_timers, run_frame, keys_to_keypad, load_rom
from chipcore.errors import (
    ChipError, RomTooLargeError, MachineFault, DecodeError,
    StackUnderflowError, StackOverflowError, MemoryAccessError
)
from chipcore.machine import Machine
from chipcore.rendering import display_to_rgb, display_to_text, create_color_scheme, batch_render

__all__ = [
    "EmulatorState",
    "create_state",
    "fetch",
    "execute",
    "cycle",
    "tick_timers",
    "run_frame",
    "keys_to_keypad",
    "load_rom",
    "DecodedInstruction",
    "Op",
    "decode",
    "Machine",
    "ChipError",
    "RomTooLargeError",
    "MachineFault",
    "DecodeError",
    "StackUnderflowError",
    "StackOverflowError",
    "MemoryAccessError",
    "PROGRAM_START",
    "FONT_START",
    "FONT_DATA",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_to_rgb",
    "display_to_text",
    "create_color_scheme",
    "batch_render",
]
