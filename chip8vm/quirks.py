# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Compatibility policy for the instructions whose behaviour differs between
historical interpreters.

A Quirks value is chosen once, when the Engine is built, and never changes
during a session.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Quirks:
    """
    shift_uses_vy       8xy6/8xyE shift Vy into Vx instead of shifting Vx in place
    logic_resets_flag   8xy1/8xy2/8xy3 clear VF
    increment_index     Fx55/Fx65 leave I pointing past the last register copied
    jump_uses_vx        Bnnn adds Vx (x from the address) instead of V0
    flag_after_result   VF is written after the result, so VF as a destination
                        ends up holding the flag
    """
    shift_uses_vy: bool = False
    logic_resets_flag: bool = False
    increment_index: bool = False
    jump_uses_vx: bool = False
    flag_after_result: bool = True


# Behaviour of most interpreters written since the HP-48 ports
MODERN = Quirks()

# The original COSMAC VIP interpreter
COSMAC = Quirks(
    shift_uses_vy=True,
    logic_resets_flag=True,
    increment_index=True,
)

PRESETS = {
    "modern": MODERN,
    "cosmac": COSMAC,
}
