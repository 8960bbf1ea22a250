# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Machine state for a single Chip-8 session.

MachineState owns every mutable piece of the machine: memory, registers,
the call stack, timers, the framebuffer and the keypad snapshot. It has no
behaviour of its own beyond keeping those invariants; the Engine does all
of the instruction work through the helpers below.

System memory map:
    0x000-0x1FF  Reserved for the interpreter (font table at 0x050)
    0x200-0xFFF  Program ROM and work RAM
"""

from .constants import (
    FONT_LOAD, FONT_MAP, KEY_COUNT, LOAD_POS, MAX_ADDRESS, MAX_PROGRAM_SIZE,
    REGISTER_COUNT, SPRITE_WIDTH, STACK_DEPTH, TOTAL_RAM, VIDEO_X, VIDEO_Y,
)
from .errors import (
    InvalidAddress, InvalidKeyIndex, LoadTooLarge, StackOverflow, StackUnderflow,
)


class MachineState:

    def __init__(self):
        self.reset()

    def reset(self):
        """Zero the whole machine and reload the font table"""
        self.memory = bytearray(TOTAL_RAM)
        self.memory[FONT_LOAD:FONT_LOAD + len(FONT_MAP)] = bytes(FONT_MAP)
        self.v = bytearray(REGISTER_COUNT)
        self.i = 0
        self.pc = LOAD_POS
        self.stack = []
        self.delay_timer = 0
        self.sound_timer = 0
        self._keys = [False] * KEY_COUNT
        self._framebuffer = [bytearray(VIDEO_X) for y in range(VIDEO_Y)]
        # A freshly reset screen still needs painting once
        self._dirty = True

    def load(self, image):
        """Reset the machine and copy a program image to LOAD_POS.

        The size is checked before anything is reset, so a rejected image
        leaves the current session untouched.
        """
        image = bytes(image)
        if len(image) > MAX_PROGRAM_SIZE:
            raise LoadTooLarge(len(image))
        self.reset()
        self.memory[LOAD_POS:LOAD_POS + len(image)] = image

    ## Memory ##

    def read(self, address, count=1):
        """Return count bytes starting at address"""
        self._check_range(address, count)
        return bytes(self.memory[address:address + count])

    def write(self, address, data):
        data = bytes(data)
        self._check_range(address, len(data))
        self.memory[address:address + len(data)] = data

    def fetch(self):
        """Read the big-endian instruction word at PC"""
        self.check_pc(self.pc)
        return self.memory[self.pc] << 8 | self.memory[self.pc + 1]

    def check_pc(self, address):
        if address % 2:
            raise InvalidAddress(address, "instruction address is not aligned")
        self._check_range(address, 2)

    def _check_range(self, address, count):
        if count and (address < 0 or address + count - 1 > MAX_ADDRESS):
            raise InvalidAddress(address)

    ## Stack ##

    def push(self, address):
        if len(self.stack) >= STACK_DEPTH:
            raise StackOverflow(address)
        self.stack.append(address)

    def pop(self):
        if not self.stack:
            raise StackUnderflow()
        return self.stack.pop()

    @property
    def sp(self):
        return len(self.stack)

    ## Video ##

    def clear_screen(self):
        for row in self._framebuffer:
            row[:] = bytes(VIDEO_X)
        self._dirty = True

    def draw_sprite(self, x, y, rows):
        """XOR an 8 pixel wide sprite onto the framebuffer at (x, y).

        Each byte in rows is one line of the sprite, most significant bit
        leftmost. Pixels wrap around both edges of the screen. Returns True
        if any pixel that was on got switched off.
        """
        collision = False
        for row, sprite in enumerate(rows):
            line = self._framebuffer[(y + row) % VIDEO_Y]
            for col in range(SPRITE_WIDTH):
                newpx = sprite >> (7 - col) & 0x1
                if not newpx:
                    continue
                x_off = (x + col) % VIDEO_X
                if line[x_off]:
                    collision = True
                line[x_off] ^= 1
        self._dirty = True
        return collision

    def read_framebuffer(self):
        """Return an immutable copy of the screen as 32 rows of 64 0/1 bytes.

        Reading clears the dirty flag.
        """
        self._dirty = False
        return tuple(bytes(row) for row in self._framebuffer)

    @property
    def dirty(self):
        """True if the framebuffer changed since the last read"""
        return self._dirty

    ## Input ##

    def set_key(self, index, pressed):
        if not isinstance(index, int) or not 0 <= index < KEY_COUNT:
            raise InvalidKeyIndex(index)
        self._keys[index] = bool(pressed)

    def set_keys(self, states):
        """Replace all sixteen key states at once"""
        states = [bool(pressed) for pressed in states]
        if len(states) > KEY_COUNT:
            raise InvalidKeyIndex(KEY_COUNT)
        if len(states) < KEY_COUNT:
            raise ValueError(f"Expected {KEY_COUNT} key states, got {len(states)}")
        self._keys = states

    def is_pressed(self, index):
        return self._keys[index]

    @property
    def keys(self):
        return tuple(self._keys)

    ## Timers ##

    @property
    def audio_active(self):
        return self.sound_timer > 0

    def __str__(self):
        lines = [f"PC: 0x{self.pc:04x} I:  0x{self.i:04x} SP: {self.sp:2d} "
                 f"DT: 0x{self.delay_timer:02x} ST: 0x{self.sound_timer:02x}"]
        for x in range(0, REGISTER_COUNT, 4):
            lines.append(" ".join(f"V{x+r:1X}: 0x{self.v[x+r]:02x}" for r in range(4)))
        return "\n".join(lines)
