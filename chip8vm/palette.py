# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Colour schemes for the display."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Palette:
    name: str
    background: tuple
    foreground: tuple
    # Used for the debug panels around the game screen
    gutter: tuple


def _inverse(rgb):
    return tuple(255 - c for c in rgb)


def _palette(name, background, foreground):
    return Palette(name, background, foreground, _inverse(background))


PALETTES = {p.name: p for p in (
    _palette("default", (34, 35, 35), (240, 246, 240)),
    _palette("bitbee", (41, 43, 48), (207, 171, 74)),
    _palette("neutral-green", (0, 76, 61), (255, 234, 249)),
    _palette("mac-paint", (139, 200, 254), (5, 27, 44)),
    _palette("paper-back", (184, 194, 185), (56, 43, 38)),
)}

DEFAULT_PALETTE = PALETTES["default"]


def get_palette(name):
    try:
        return PALETTES[name]
    except KeyError:
        raise ValueError(f"Unknown palette {name!r}, choose from {', '.join(PALETTES)}") from None
