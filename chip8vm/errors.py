# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Fatal interpreter errors.

None of these are recoverable: a program that trips one is either corrupt
or relies on behaviour this interpreter does not provide, so the session
ends and the host decides what to tell the user.
"""

from .constants import KEY_COUNT, MAX_PROGRAM_SIZE


class Chip8Error(Exception):
    """Base class for everything the interpreter raises"""


class LoadTooLarge(Chip8Error):
    def __init__(self, size):
        self.size = size
        super().__init__(f"Program is too large: {size} bytes, at most {MAX_PROGRAM_SIZE} fit")


class InvalidAddress(Chip8Error):
    def __init__(self, address, reason="outside of memory"):
        self.address = address
        super().__init__(f"Memory access error at 0x{address:04x}: {reason}")


class StackOverflow(Chip8Error):
    def __init__(self, address):
        self.address = address
        super().__init__(f"Stack overflow calling 0x{address:03x}")


class StackUnderflow(Chip8Error):
    def __init__(self):
        super().__init__("Stack underflow: return with no subroutine active")


class UnknownInstruction(Chip8Error):
    def __init__(self, word):
        self.word = word
        super().__init__(f"Undefined opcode {word:04x}")


class InvalidKeyIndex(Chip8Error):
    def __init__(self, index):
        self.index = index
        super().__init__(f"Key index {index!r} is not in 0..{KEY_COUNT - 1}")
