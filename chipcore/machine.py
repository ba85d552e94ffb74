"""Host-facing CHIP-8 machine.

``Machine`` wraps the functional core: it owns one ``EmulatorState``, runs
the jit-compiled cycle, and turns faults recorded in the state into Python
exceptions.
"""

from typing import Iterable, Optional

import jax
import numpy as np

from chipcore.constants import INSTRUCTIONS_PER_FRAME
from chipcore.emulator import cycle, tick_timers, run_frame, keys_to_keypad
from chipcore.errors import fault_from_code
from chipcore.logging import ConsoleLogger
from chipcore.state import EmulatorState, create_state

_cycle = jax.jit(cycle)
_tick_timers = jax.jit(tick_timers)


class Machine:
    """A CHIP-8 machine built from a ROM image.

    Args:
        rom: Program bytes, loaded at 0x200
        legacy: Use the COSMAC VIP shift behaviour (VX = VY before shifting)
        seed: Seed for the CXNN random source
        logger: Logger for load and fault messages
    """

    def __init__(
        self,
        rom: bytes,
        legacy: bool = False,
        seed: int = 0,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.logger = logger or ConsoleLogger("Machine")
        self._state = create_state(rom, legacy=legacy, rng=jax.random.PRNGKey(seed))
        mode = "legacy" if legacy else "modern"
        self.logger.info(f"Loaded {len(rom)} byte ROM ({mode} mode)")

    @classmethod
    def from_file(cls, path: str, **kwargs) -> "Machine":
        """Build a machine from a ROM file on disk."""
        with open(path, "rb") as f:
            rom = f.read()
        return cls(rom, **kwargs)

    def cycle(self, keys: Iterable[int] = ()) -> None:
        """Execute one instruction with ``keys`` held down."""
        self._state = _cycle(self._state, keys_to_keypad(keys))
        self._raise_on_fault()

    def tick_timers(self) -> None:
        """Advance delay and sound timers by one 60 Hz tick."""
        self._state = _tick_timers(self._state)

    def run_frame(self, keys: Iterable[int] = (), instructions_per_frame: int = INSTRUCTIONS_PER_FRAME) -> None:
        """Run one 60 Hz frame: ``instructions_per_frame`` cycles then a timer tick."""
        self._state = run_frame(self._state, keys_to_keypad(keys), instructions_per_frame)
        self._raise_on_fault()

    def _raise_on_fault(self):
        code = int(self._state.fault)
        if code:
            fault = fault_from_code(code, int(self._state.fault_pc), int(self._state.fault_opcode))
            self.logger.error(str(fault))
            self.logger.registers(self._state)
            raise fault

    @property
    def state(self) -> EmulatorState:
        return self._state

    @property
    def display(self) -> np.ndarray:
        """Read-only (32, 64) boolean framebuffer, indexed [row, col]."""
        pixels = np.array(self._state.display, dtype=np.bool_)
        pixels.flags.writeable = False
        return pixels

    @property
    def pc(self) -> int:
        return int(self._state.pc)

    @property
    def I(self) -> int:
        return int(self._state.I)

    @property
    def V(self) -> tuple[int, ...]:
        return tuple(int(v) for v in self._state.V)

    @property
    def delay_timer(self) -> int:
        return int(self._state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self._state.sound_timer)

    @property
    def sound_active(self) -> bool:
        """True while a host should be beeping."""
        return self.sound_timer > 0

    @property
    def awaiting_key(self) -> bool:
        return bool(self._state.awaiting_key)

    @property
    def halted(self) -> bool:
        return bool(self._state.halted)
