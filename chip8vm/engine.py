# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""The Chip-8 execution engine.

The host drives the engine with two calls: step() runs one instruction and
tick_timers() counts the delay and sound timers down. The host decides how
often to call each; see cadence.Cadence for the usual 500Hz/60Hz split.
"""

import enum
import logging
import random

from .constants import FLAG_REGISTER, FONT_HEIGHT, FONT_LOAD, KEY_COUNT
from .decoder import Op, decode
from .machine import MachineState
from .quirks import MODERN


class Mode(enum.Enum):
    RUNNING = "running"
    WAITING_FOR_KEY = "waiting-for-key"


class Engine:
    """Fetch, decode and execute instructions against a MachineState.

    Any Chip8Error raised by step() is fatal for the session; the engine
    makes no attempt to carry on past one.
    """

    def __init__(self, machine=None, quirks=MODERN, rng=None):
        self.machine = machine if machine is not None else MachineState()
        self.quirks = quirks
        self.rng = rng if rng is not None else random.Random()
        self.mode = Mode.RUNNING
        self._wait_register = 0
        self._wait_keys = ()
        self._handlers = {
            Op.CLS: self._ins_cls,
            Op.RET: self._ins_ret,
            Op.JP: self._ins_jp,
            Op.CALL: self._ins_call,
            Op.SE_VX_BYTE: self._ins_se_byte,
            Op.SNE_VX_BYTE: self._ins_sne_byte,
            Op.SE_VX_VY: self._ins_se_reg,
            Op.LD_VX_BYTE: self._ins_ld_byte,
            Op.ADD_VX_BYTE: self._ins_add_byte,
            Op.LD_VX_VY: self._ins_ld_reg,
            Op.OR: self._ins_or,
            Op.AND: self._ins_and,
            Op.XOR: self._ins_xor,
            Op.ADD_VX_VY: self._ins_add_reg,
            Op.SUB: self._ins_sub,
            Op.SHR: self._ins_shr,
            Op.SUBN: self._ins_subn,
            Op.SHL: self._ins_shl,
            Op.SNE_VX_VY: self._ins_sne_reg,
            Op.LD_I: self._ins_ld_i,
            Op.JP_V0: self._ins_jp_v0,
            Op.RND: self._ins_rnd,
            Op.DRW: self._ins_drw,
            Op.SKP: self._ins_skp,
            Op.SKNP: self._ins_sknp,
            Op.LD_VX_DT: self._ins_ld_vx_dt,
            Op.LD_VX_K: self._ins_ld_vx_k,
            Op.LD_DT_VX: self._ins_ld_dt_vx,
            Op.LD_ST_VX: self._ins_ld_st_vx,
            Op.ADD_I_VX: self._ins_add_i,
            Op.LD_F_VX: self._ins_ld_f,
            Op.LD_B_VX: self._ins_ld_b,
            Op.LD_I_VX: self._ins_store_regs,
            Op.LD_VX_I: self._ins_load_regs,
        }

    def load(self, image):
        """Start a new session with a program image"""
        self.machine.load(image)
        self.mode = Mode.RUNNING
        self._wait_keys = ()

    def step(self):
        """Run one instruction.

        Returns the Instruction executed, or None if the engine is waiting
        for a key and nothing has been pressed yet.
        """
        if self.mode is Mode.WAITING_FOR_KEY:
            self._poll_keys()
            return None

        m = self.machine
        pc = m.pc
        instruction = decode(m.fetch())
        logging.debug(f"{pc:04x} | OP 0x{instruction.word:04x} - {instruction}")
        # Handlers see PC already pointing at the next instruction
        m.pc += 2
        self._handlers[instruction.op](instruction)
        return instruction

    def run(self, count):
        """Call step() count times"""
        for _ in range(count):
            self.step()

    def tick_timers(self):
        """Count both timers down by one, stopping at zero"""
        m = self.machine
        if m.delay_timer > 0:
            m.delay_timer -= 1
        if m.sound_timer > 0:
            m.sound_timer -= 1

    ## Helpers ##

    def _jump(self, target):
        self.machine.check_pc(target)
        self.machine.pc = target

    def _skip_if(self, condition):
        if condition:
            self.machine.pc += 2

    def _set_with_flag(self, x, result, flag):
        v = self.machine.v
        if self.quirks.flag_after_result:
            v[x] = result
            v[FLAG_REGISTER] = flag
        else:
            v[FLAG_REGISTER] = flag
            v[x] = result

    def _poll_keys(self):
        keys = self.machine.keys
        for index in range(KEY_COUNT):
            if keys[index] and not self._wait_keys[index]:
                logging.debug(f"Key {index:1X} pressed, stored to V{self._wait_register:1X}")
                self.machine.v[self._wait_register] = index
                self.machine.pc += 2
                self.mode = Mode.RUNNING
                return
        # Keys held when the wait began only count once they are released
        # and pressed again
        self._wait_keys = keys

    ## Instructions ##

    def _ins_cls(self, ins):
        self.machine.clear_screen()

    def _ins_ret(self, ins):
        self.machine.pc = self.machine.pop()

    def _ins_jp(self, ins):
        self._jump(ins.nnn)

    def _ins_call(self, ins):
        self.machine.push(self.machine.pc)
        self._jump(ins.nnn)

    def _ins_se_byte(self, ins):
        self._skip_if(self.machine.v[ins.x] == ins.kk)

    def _ins_sne_byte(self, ins):
        self._skip_if(self.machine.v[ins.x] != ins.kk)

    def _ins_se_reg(self, ins):
        v = self.machine.v
        self._skip_if(v[ins.x] == v[ins.y])

    def _ins_sne_reg(self, ins):
        v = self.machine.v
        self._skip_if(v[ins.x] != v[ins.y])

    def _ins_ld_byte(self, ins):
        self.machine.v[ins.x] = ins.kk

    def _ins_add_byte(self, ins):
        # No carry flag for the immediate form
        v = self.machine.v
        v[ins.x] = (v[ins.x] + ins.kk) & 0xFF

    def _ins_ld_reg(self, ins):
        v = self.machine.v
        v[ins.x] = v[ins.y]

    def _logic(self, ins, result):
        v = self.machine.v
        v[ins.x] = result
        if self.quirks.logic_resets_flag:
            v[FLAG_REGISTER] = 0

    def _ins_or(self, ins):
        v = self.machine.v
        self._logic(ins, v[ins.x] | v[ins.y])

    def _ins_and(self, ins):
        v = self.machine.v
        self._logic(ins, v[ins.x] & v[ins.y])

    def _ins_xor(self, ins):
        v = self.machine.v
        self._logic(ins, v[ins.x] ^ v[ins.y])

    def _ins_add_reg(self, ins):
        v = self.machine.v
        result = v[ins.x] + v[ins.y]
        self._set_with_flag(ins.x, result & 0xFF, int(result > 0xFF))

    def _ins_sub(self, ins):
        # VF is set when there is no borrow
        v = self.machine.v
        vx, vy = v[ins.x], v[ins.y]
        self._set_with_flag(ins.x, (vx - vy) & 0xFF, int(vx >= vy))

    def _ins_subn(self, ins):
        v = self.machine.v
        vx, vy = v[ins.x], v[ins.y]
        self._set_with_flag(ins.x, (vy - vx) & 0xFF, int(vy >= vx))

    def _shift_source(self, ins):
        v = self.machine.v
        return v[ins.y] if self.quirks.shift_uses_vy else v[ins.x]

    def _ins_shr(self, ins):
        value = self._shift_source(ins)
        self._set_with_flag(ins.x, value >> 1, value & 0x1)

    def _ins_shl(self, ins):
        value = self._shift_source(ins)
        self._set_with_flag(ins.x, (value << 1) & 0xFF, value >> 7)

    def _ins_ld_i(self, ins):
        self.machine.i = ins.nnn

    def _ins_jp_v0(self, ins):
        offset = self.machine.v[ins.x if self.quirks.jump_uses_vx else 0]
        self._jump(ins.nnn + offset)

    def _ins_rnd(self, ins):
        self.machine.v[ins.x] = self.rng.randint(0, 255) & ins.kk

    def _ins_drw(self, ins):
        m = self.machine
        rows = m.read(m.i, ins.n)
        collision = m.draw_sprite(m.v[ins.x], m.v[ins.y], rows)
        m.v[FLAG_REGISTER] = int(collision)

    def _ins_skp(self, ins):
        m = self.machine
        self._skip_if(m.is_pressed(m.v[ins.x] & 0xF))

    def _ins_sknp(self, ins):
        m = self.machine
        self._skip_if(not m.is_pressed(m.v[ins.x] & 0xF))

    def _ins_ld_vx_dt(self, ins):
        self.machine.v[ins.x] = self.machine.delay_timer

    def _ins_ld_vx_k(self, ins):
        # Stay on this instruction until a key goes down; step() polls
        # the keypad in the meantime without executing anything.
        m = self.machine
        m.pc -= 2
        self.mode = Mode.WAITING_FOR_KEY
        self._wait_register = ins.x
        self._wait_keys = m.keys
        logging.debug(f"{m.pc:04x} | Waiting for key into V{ins.x:1X}")

    def _ins_ld_dt_vx(self, ins):
        self.machine.delay_timer = self.machine.v[ins.x]

    def _ins_ld_st_vx(self, ins):
        self.machine.sound_timer = self.machine.v[ins.x]

    def _ins_add_i(self, ins):
        m = self.machine
        m.i = (m.i + m.v[ins.x]) & 0xFFFF

    def _ins_ld_f(self, ins):
        m = self.machine
        m.i = FONT_LOAD + FONT_HEIGHT * (m.v[ins.x] & 0xF)

    def _ins_ld_b(self, ins):
        m = self.machine
        value = m.v[ins.x]
        m.write(m.i, (value // 100, value // 10 % 10, value % 10))

    def _ins_store_regs(self, ins):
        m = self.machine
        m.write(m.i, m.v[:ins.x + 1])
        if self.quirks.increment_index:
            m.i = (m.i + ins.x + 1) & 0xFFFF

    def _ins_load_regs(self, ins):
        m = self.machine
        m.v[:ins.x + 1] = m.read(m.i, ins.x + 1)
        if self.quirks.increment_index:
            m.i = (m.i + ins.x + 1) & 0xFFFF
