# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""pygame rendering of the machine.

The window shows the Chip-8 screen on the left, a colour map of main
memory on the right and the register file underneath.
"""

import logging

import pygame

from .constants import REGISTER_COUNT, TOTAL_RAM, VIDEO_X, VIDEO_Y
from .palette import DEFAULT_PALETTE

# Chip-8 Video display constants
VIDEO_RES = 8

# RAM Display constants
RAM_X = 64 # bytes to display per row
RAM_Y = TOTAL_RAM // RAM_X # total rows to display
RAM_RES = 4

# Resolution of fonts used for register display
REG_FONT_RES = 18
REG_FONT_PAD = 10
REG_DISP_X_OFF = 0
REG_DISP_Y_OFF = (VIDEO_Y * VIDEO_RES)
REG_DISP_W = (VIDEO_X * VIDEO_RES) + (RAM_X * RAM_RES)
REG_DISP_H = (5 * REG_FONT_RES) + REG_FONT_PAD


class Display:

    def __init__(self, palette=DEFAULT_PALETTE, caption="CHIP8VM DISPLAY"):
        self.palette = palette
        pygame.font.init()
        self.font = pygame.font.SysFont('Consolas', REG_FONT_RES)

        logging.debug(f"Video memory display {VIDEO_X} by {VIDEO_Y}, {VIDEO_X*VIDEO_RES} x {VIDEO_Y * VIDEO_RES} pixels")
        logging.debug(f"Main memory display {RAM_X} by {RAM_Y}, {RAM_X*RAM_RES} x {RAM_Y*RAM_RES} pixels")
        logging.debug(f"Register display {REG_DISP_W} x {REG_DISP_H} pixels")

        # Total pygame display size
        screen_x = (VIDEO_X * VIDEO_RES) + (RAM_X * RAM_RES)
        screen_y = max(VIDEO_Y * VIDEO_RES, RAM_Y * RAM_RES) + REG_DISP_H
        pygame.display.set_caption(caption)
        logging.info(f"Display mode {screen_x} x {screen_y}")
        self.screen = pygame.display.set_mode([screen_x, screen_y])
        self.screen.fill(palette.gutter)

    def draw_video(self, framebuffer):
        """Paint a framebuffer snapshot (rows of 0/1 values)"""
        self.screen.fill(self.palette.background, (0, 0, VIDEO_X * VIDEO_RES, VIDEO_Y * VIDEO_RES))
        for y_off, row in enumerate(framebuffer):
            for x_off, pixel in enumerate(row):
                if pixel:
                    pygame.draw.rect(self.screen, self.palette.foreground,
                        (x_off*VIDEO_RES, y_off*VIDEO_RES, VIDEO_RES, VIDEO_RES))

    def draw_ram(self, memory, start=0, n=TOTAL_RAM):
        """Update the ram display with contents of memory from start for n bytes"""
        for cell in range(start, min(start + n, len(memory))):
            col = cell % RAM_X
            row = cell // RAM_X
            byte = memory[cell]
            r = (byte >> 5 & 0x07) << 5
            g = (byte >> 2 & 0x07) << 5
            b = (byte & 0x03) << 6
            pygame.draw.rect(self.screen, (r, g, b),
                (VIDEO_X*VIDEO_RES + col*RAM_RES, row*RAM_RES, RAM_RES, RAM_RES))

    def draw_registers(self, machine, status=""):
        line_off = self.font.size("V")[1]
        # This just blanks the register display.
        self.screen.fill(self.palette.gutter, (REG_DISP_X_OFF, REG_DISP_Y_OFF, REG_DISP_W, REG_DISP_H))
        ink = self.palette.background
        for x in range(0, REGISTER_COUNT, 4):
            disp = " ".join(f"V{x+r:1X}: 0x{machine.v[x+r]:02x}" for r in range(4))
            ts = self.font.render(disp, False, ink)
            self.screen.blit(ts, (REG_DISP_X_OFF, REG_DISP_Y_OFF + line_off * (x // 4)))

        disp = (f"PC: 0x{machine.pc:04x} I: 0x{machine.i:04x} SP: {machine.sp:2d} "
                f"DT: 0x{machine.delay_timer:02x} ST: 0x{machine.sound_timer:02x} {status}")
        ts = self.font.render(disp, False, ink)
        self.screen.blit(ts, (REG_DISP_X_OFF, REG_DISP_Y_OFF + line_off * 4))

    def flip(self):
        pygame.display.flip()
