"""
pygame front-end for the chipcore CHIP-8 machine
"""

import argparse

import numpy as np
import pygame

from chipcore import Machine, MachineFault, create_color_scheme, display_to_rgb, display_to_text
from chipcore.constants import SCREEN_WIDTH, SCREEN_HEIGHT, INSTRUCTIONS_PER_FRAME, TIMER_FREQUENCY
from chipcore.logging import ConsoleLogger, frame_progress

# COSMAC VIP hex keypad laid over the left side of a QWERTY keyboard
#   1 2 3 C      1 2 3 4
#   4 5 6 D  ->  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

logger = ConsoleLogger("chipcore")


def run_headless(machine: Machine, frames: int, ipf: int):
    """Run a fixed number of frames without a window and print the final screen."""
    try:
        for _ in frame_progress(frames):
            machine.run_frame((), ipf)
    except MachineFault:
        logger.warning("Stopped early on machine fault")
    print(display_to_text(machine.display))


def run_emulator(machine: Machine, scale: int = 10, ipf: int = INSTRUCTIONS_PER_FRAME, color_scheme: str = "classic"):
    """Main loop: one frame of ``ipf`` cycles plus a timer tick at 60 Hz."""
    on_color, off_color = create_color_scheme(color_scheme)

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption("chipcore")
    clock = pygame.time.Clock()

    pressed = set()
    running = True
    paused = False

    logger.info("Controls: ESC=Quit, P=Pause, keypad on 1234/QWER/ASDF/ZXCV")

    while running:
        clock.tick(TIMER_FREQUENCY)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key in KEY_MAP:
                    pressed.add(KEY_MAP[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    pressed.discard(KEY_MAP[event.key])

        if not paused:
            try:
                machine.run_frame(sorted(pressed), ipf)
            except MachineFault:
                # Already logged by the machine; keep the last frame on screen
                paused = True

        frame = display_to_rgb(machine.display, scale, on_color, off_color)
        # pygame surfaces are indexed (x, y)
        surface = pygame.surfarray.make_surface(np.transpose(frame, (1, 0, 2)))
        screen.blit(surface, (0, 0))

        title = "chipcore"
        if machine.sound_active:
            title += " - BEEP"
        if paused:
            title += " - PAUSED"
        pygame.display.set_caption(title)
        pygame.display.flip()

    pygame.quit()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 virtual machine")
    parser.add_argument("rom", help="Path to CHIP-8 ROM")
    parser.add_argument("--legacy", action="store_true",
                        help="COSMAC VIP shift behaviour (8XY6/8XYE copy VY first)")
    parser.add_argument("--scale", type=int, default=10, help="Pixel scale factor")
    parser.add_argument("--ipf", type=int, default=INSTRUCTIONS_PER_FRAME,
                        help="Instructions per 60 Hz frame")
    parser.add_argument("--color-scheme", default="classic", help="Display color scheme")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for CXNN")
    parser.add_argument("--headless", type=int, metavar="FRAMES",
                        help="Run FRAMES frames without a window and print the screen")
    parser.add_argument("--log-level", default="INFO",
                        help="DEBUG also dumps registers when the machine faults")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logger.set_level(args.log_level)
    machine = Machine.from_file(args.rom, legacy=args.legacy, seed=args.seed, logger=logger)
    if args.headless is not None:
        run_headless(machine, args.headless, args.ipf)
    else:
        run_emulator(machine, scale=args.scale, ipf=args.ipf, color_scheme=args.color_scheme)
