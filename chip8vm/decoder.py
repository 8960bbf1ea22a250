# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Instruction decoding.

decode() turns a 16-bit instruction word into an Instruction: the operation
plus every operand field the word carries. Which fields matter depends on
the operation. Decoding is pure and never touches machine state.

Operand naming follows the usual Chip-8 notation:
    nnn  12-bit address
    kk   8-bit immediate
    n    4-bit immediate
    x/y  register index (0-F)
"""

from enum import Enum
from typing import NamedTuple

from .errors import UnknownInstruction


class Op(Enum):
    """Every instruction form the interpreter understands.

    The value is the assembler template used to print a decoded instruction.
    """
    CLS = "CLS"
    RET = "RET"
    JP = "JP {nnn:03x}"
    CALL = "CALL {nnn:03x}"
    SE_VX_BYTE = "SE V{x:X}, {kk:02x}"
    SNE_VX_BYTE = "SNE V{x:X}, {kk:02x}"
    SE_VX_VY = "SE V{x:X}, V{y:X}"
    LD_VX_BYTE = "LD V{x:X}, {kk:02x}"
    ADD_VX_BYTE = "ADD V{x:X}, {kk:02x}"
    LD_VX_VY = "LD V{x:X}, V{y:X}"
    OR = "OR V{x:X}, V{y:X}"
    AND = "AND V{x:X}, V{y:X}"
    XOR = "XOR V{x:X}, V{y:X}"
    ADD_VX_VY = "ADD V{x:X}, V{y:X}"
    SUB = "SUB V{x:X}, V{y:X}"
    SHR = "SHR V{x:X}, V{y:X}"
    SUBN = "SUBN V{x:X}, V{y:X}"
    SHL = "SHL V{x:X}, V{y:X}"
    SNE_VX_VY = "SNE V{x:X}, V{y:X}"
    LD_I = "LD I, {nnn:03x}"
    JP_V0 = "JP V0, {nnn:03x}"
    RND = "RND V{x:X}, {kk:02x}"
    DRW = "DRW V{x:X}, V{y:X}, {n:1x}"
    SKP = "SKP V{x:X}"
    SKNP = "SKNP V{x:X}"
    LD_VX_DT = "LD V{x:X}, DT"
    LD_VX_K = "LD V{x:X}, K"
    LD_DT_VX = "LD DT, V{x:X}"
    LD_ST_VX = "LD ST, V{x:X}"
    ADD_I_VX = "ADD I, V{x:X}"
    LD_F_VX = "LD F, V{x:X}"
    LD_B_VX = "LD B, V{x:X}"
    LD_I_VX = "LD [I], V{x:X}"
    LD_VX_I = "LD V{x:X}, [I]"


class Instruction(NamedTuple):
    op: Op
    word: int
    x: int
    y: int
    n: int
    kk: int
    nnn: int

    def __str__(self):
        return self.op.value.format(**self._asdict())


# Instructions identified by the whole word
_EXACT = {
    0x00E0: Op.CLS,
    0x00EE: Op.RET,
}

# Instructions identified by the high nibble alone
_BY_NIBBLE = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_VX_BYTE,
    0x4: Op.SNE_VX_BYTE,
    0x6: Op.LD_VX_BYTE,
    0x7: Op.ADD_VX_BYTE,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

# High nibble, then low nibble
_BY_LOW_NIBBLE = {
    0x5: {0x0: Op.SE_VX_VY},
    0x8: {
        0x0: Op.LD_VX_VY,
        0x1: Op.OR,
        0x2: Op.AND,
        0x3: Op.XOR,
        0x4: Op.ADD_VX_VY,
        0x5: Op.SUB,
        0x6: Op.SHR,
        0x7: Op.SUBN,
        0xE: Op.SHL,
    },
    0x9: {0x0: Op.SNE_VX_VY},
}

# High nibble, then low byte
_BY_LOW_BYTE = {
    0xE: {
        0x9E: Op.SKP,
        0xA1: Op.SKNP,
    },
    0xF: {
        0x07: Op.LD_VX_DT,
        0x0A: Op.LD_VX_K,
        0x15: Op.LD_DT_VX,
        0x18: Op.LD_ST_VX,
        0x1E: Op.ADD_I_VX,
        0x29: Op.LD_F_VX,
        0x33: Op.LD_B_VX,
        0x55: Op.LD_I_VX,
        0x65: Op.LD_VX_I,
    },
}


def decode(word):
    """Decode a 16-bit instruction word.

    Raises UnknownInstruction for any word outside the instruction set,
    including 0nnn (calls into native machine code, which can't be run here).
    """
    if not 0 <= word <= 0xFFFF:
        raise UnknownInstruction(word)
    nibble = word >> 12
    n = word & 0x000F
    kk = word & 0x00FF

    op = _EXACT.get(word) or _BY_NIBBLE.get(nibble)
    if op is None and nibble in _BY_LOW_NIBBLE:
        op = _BY_LOW_NIBBLE[nibble].get(n)
    elif op is None and nibble in _BY_LOW_BYTE:
        op = _BY_LOW_BYTE[nibble].get(kk)
    if op is None:
        raise UnknownInstruction(word)

    return Instruction(
        op=op,
        word=word,
        x=word >> 8 & 0x0F,
        y=word >> 4 & 0x0F,
        n=n,
        kk=kk,
        nnn=word & 0x0FFF,
    )


def disassemble(image, origin=0x200):
    """Yield (address, word, text) for each instruction word in image.

    Words that don't decode (sprite data, usually) are shown as raw data.
    """
    for offset in range(0, len(image) - 1, 2):
        word = image[offset] << 8 | image[offset + 1]
        try:
            text = str(decode(word))
        except UnknownInstruction:
            text = f"DW {word:04x}"
        yield origin + offset, word, text
