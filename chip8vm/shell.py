# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Command line front end: loads a ROM and runs it in a pygame window."""

import argparse
import logging
import random
import sys
import time

import pygame

from . import audio
from .cadence import Cadence
from .constants import CYCLE_HZ
from .decoder import Op, disassemble
from .display import Display
from .engine import Engine
from .errors import Chip8Error
from .palette import PALETTES, get_palette
from .quirks import PRESETS

aparser = argparse.ArgumentParser(prog="chip8vm", description="A step-driven Chip-8 interpreter")
aparser.add_argument('program',
    help="A compiled Chip-8 program to load")
aparser.add_argument('--breakpoint',
    help="A hexadecimal program address at which to pause execution",
    metavar="X",
    nargs="+",
    default=[],
    type=lambda x: int(x, 0))
aparser.add_argument('--debug',
    help="Enable verbose debug logging",
    action="store_true")
aparser.add_argument('--speed',
    help=f"Instructions executed per second (default {CYCLE_HZ})",
    metavar="HZ",
    default=CYCLE_HZ,
    type=int)
aparser.add_argument('--palette',
    help="Display colour scheme",
    choices=list(PALETTES),
    default="default")
aparser.add_argument('--quirks',
    help="Compatibility behaviour for ambiguous instructions",
    choices=list(PRESETS),
    default="modern")
aparser.add_argument('--seed',
    help="Seed for the RND instruction, for repeatable runs",
    type=int)
aparser.add_argument('--disassemble',
    help="Print a listing of the program and exit",
    action="store_true")

# The key map is a little jumbled since the
# Chip-8 has a slightly skewed layout, where
# internal key values are identical to their
# face value in hex.
# I've mapped their equivalents to a grid beginning at key 2 and
# proceeding 4 keys across each row and all the way down

# +-----+-----+-----+-----+
# | 1/1 | 2/2 | 3/3 | C/4 |
# +-----+-----+-----+-----+
# | 4/Q | 5/W | 6/E | D/R |
# +-----+-----+-----+-----+
# | 7/A | 8/S | 9/D | E/F |
# +-----+-----+-----+-----+
# | A/Z | 0/X | B/C | F/V |
# +-----+-----+-----+-----+

KEY_MAP = [
    pygame.K_x, pygame.K_1, pygame.K_2, pygame.K_3,
    pygame.K_q, pygame.K_w, pygame.K_e, pygame.K_a,
    pygame.K_s, pygame.K_d, pygame.K_z, pygame.K_c,
    pygame.K_4, pygame.K_r, pygame.K_f, pygame.K_v
]

# Instructions that write memory at I, and how many bytes they write
MEMORY_WRITES = {
    Op.LD_B_VX: lambda ins: 3,
    Op.LD_I_VX: lambda ins: ins.x + 1,
}


def read_program(path):
    try:
        with open(path, 'rb') as p:
            return p.read()
    except OSError as e:
        aparser.error(f"can't read {path}: {e.strerror}")


def print_listing(program):
    for address, word, text in disassemble(program):
        print(f"{address:04x}: {word:04x}  {text}")


def main(argv):
    logging.basicConfig(level=logging.INFO)
    args = aparser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    if args.speed <= 0:
        aparser.error("--speed must be a positive number of instructions per second")

    program = read_program(args.program)
    if args.disassemble:
        print_listing(program)
        return 0

    logging.info("chip8vm - a step-driven Chip-8 interpreter")
    engine = Engine(quirks=PRESETS[args.quirks], rng=random.Random(args.seed))
    machine = engine.machine
    try:
        engine.load(program)
    except Chip8Error as e:
        logging.error(e)
        return 1
    logging.info(f"Loaded {args.program}, {len(program)} bytes at 0x{machine.pc:04x}")

    logging.info("Initialise display engine")
    audio.pre_init()
    pygame.init()
    display = Display(get_palette(args.palette))
    beeper = audio.Beeper()
    try:
        session = Session(engine, display, beeper, Cadence(args.speed), args.breakpoint)
        return run_session(session)
    finally:
        beeper.close()
        pygame.display.quit()
        pygame.quit()


class Session:
    """Pause, single-step, breakpoint and keypad handling for one program.

    run_session() feeds it pygame events and wall-clock time; everything
    else about driving the engine happens here.
    """

    def __init__(self, engine, display, beeper, cadence, breakpoints=()):
        self.engine = engine
        self.machine = engine.machine
        self.display = display
        self.beeper = beeper
        self.cadence = cadence
        self.breakpoints = set(breakpoints)
        self.paused = self.machine.pc in self.breakpoints
        self.single_step = False
        self.running = True
        # Keys pressed since the last step ran, and releases held back
        # until a step has seen the press
        self._fresh_keys = set()
        self._held_releases = set()

    def handle_event(self, event):
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
            pressed = event.type == pygame.KEYDOWN
            if event.key in KEY_MAP:
                self.set_key(KEY_MAP.index(event.key), pressed)
            elif pressed and event.key == pygame.K_ESCAPE:
                self.running = False
            elif pressed and event.key == pygame.K_SPACE:
                self.single_step = True
            elif pressed and event.key == pygame.K_p:
                self.resume()

    def set_key(self, index, pressed):
        if pressed:
            self._fresh_keys.add(index)
            self._held_releases.discard(index)
            self.machine.set_key(index, True)
        elif index in self._fresh_keys:
            self._held_releases.add(index)
        else:
            self.machine.set_key(index, False)

    def resume(self):
        if self.paused:
            self.paused = False
            # Time spent paused is not owed to the program
            self.cadence.reset()

    def frame(self, elapsed):
        """Run the steps and timer ticks owed for elapsed seconds.

        Raises Chip8Error if the program fails.
        """
        steps, ticks = self.cadence.advance(elapsed)
        if self.paused:
            steps, ticks = (1, 0) if self.single_step else (0, 0)
            self.single_step = False

        if self._run_steps(steps):
            for index in self._held_releases:
                self.machine.set_key(index, False)
            self._held_releases.clear()
            self._fresh_keys.clear()

        for _ in range(ticks):
            self.engine.tick_timers()
        self.beeper.update(self.machine.audio_active and not self.paused)

    def _run_steps(self, steps):
        m = self.machine
        for count in range(steps):
            pc = m.pc
            start = m.i
            instruction = self.engine.step()
            if instruction is None:
                continue
            if instruction.op in MEMORY_WRITES:
                self.display.draw_ram(m.memory, start, MEMORY_WRITES[instruction.op](instruction))
            # A key wait leaves PC where it was, which is not arriving
            # at a breakpoint
            if m.pc != pc and m.pc in self.breakpoints and not self.paused:
                logging.info(f"Breakpoint at 0x{m.pc:04x}, SPACE steps, P resumes")
                self.paused = True
                return count + 1
        return steps

    def render(self):
        m = self.machine
        if m.dirty:
            self.display.draw_video(m.read_framebuffer())
        self.display.draw_registers(m, "PAUSED" if self.paused else self.engine.mode.value)
        self.display.flip()


def run_session(session):
    """Main emulation loop. Returns the process exit status."""
    machine = session.machine
    session.display.draw_ram(machine.memory)

    logging.info("Emulation starting")
    last = time.perf_counter()
    while session.running:
        for event in pygame.event.get():
            session.handle_event(event)

        now = time.perf_counter()
        try:
            session.frame(now - last)
        except Chip8Error as e:
            logging.error(f"{e}\n{machine}")
            return 1
        last = now

        session.render()
        # Give the rest of the frame back to the OS
        pygame.time.wait(1)

    logging.info("Emulation halted.")
    return 0


def run():
    sys.exit(main(sys.argv[1:]))
