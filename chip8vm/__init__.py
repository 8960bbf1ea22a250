# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""chip8vm: a step-driven Chip-8 interpreter.

The interpreter core is three pieces:
    MachineState  memory, registers, stack, timers, framebuffer and keys
    decode        instruction word -> Instruction
    Engine        step() / tick_timers() driving a MachineState

The pygame front end lives in chip8vm.shell and is not imported here.
"""

__version__ = "0.2.0"

from .cadence import Cadence
from .decoder import Instruction, Op, decode, disassemble
from .engine import Engine, Mode
from .errors import (
    Chip8Error, InvalidAddress, InvalidKeyIndex, LoadTooLarge, StackOverflow,
    StackUnderflow, UnknownInstruction,
)
from .machine import MachineState
from .quirks import COSMAC, MODERN, Quirks

__all__ = [
    "Cadence", "Instruction", "Op", "decode", "disassemble", "Engine", "Mode",
    "Chip8Error", "InvalidAddress", "InvalidKeyIndex", "LoadTooLarge",
    "StackOverflow", "StackUnderflow", "UnknownInstruction", "MachineState",
    "COSMAC", "MODERN", "Quirks",
]
