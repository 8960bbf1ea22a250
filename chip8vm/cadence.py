# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Wall-clock pacing for the host loop.

Instructions and timers run at unrelated rates: the CPU at a configurable
CYCLE_HZ, the timers at a fixed TIMER_HZ. Python's sleep() is not fine
grained enough to pace single instructions, so instead the host measures
how long each pass of its loop took and asks the Cadence how much work
that time is worth.
"""

from .constants import CYCLE_HZ, TIMER_HZ

# Longest stretch of wall time made up for in one go
MAX_CATCHUP = 0.25


class Cadence:

    def __init__(self, cycle_hz=CYCLE_HZ, timer_hz=TIMER_HZ):
        if cycle_hz <= 0 or timer_hz <= 0:
            raise ValueError("Clock rates must be positive")
        self.cycle_hz = cycle_hz
        self.timer_hz = timer_hz
        self._step_credit = 0.0
        self._tick_credit = 0.0

    def advance(self, elapsed):
        """Return (steps, ticks) owed for elapsed seconds of wall time.

        Fractions of a step or tick are kept and paid out on a later call.
        """
        elapsed = min(max(elapsed, 0.0), MAX_CATCHUP)
        self._step_credit += elapsed * self.cycle_hz
        self._tick_credit += elapsed * self.timer_hz
        steps = int(self._step_credit)
        ticks = int(self._tick_credit)
        self._step_credit -= steps
        self._tick_credit -= ticks
        return steps, ticks

    def reset(self):
        self._step_credit = 0.0
        self._tick_credit = 0.0
