# chip8vm, a step-driven Chip-8 interpreter.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Buzzer output.

Chip-8 has a single tone that sounds while the sound timer is non-zero.
The Beeper plays a looped square wave for as long as the engine reports
audio as active.
"""

import array
import logging

import pygame

SAMPLE_RATE = 44100
TONE_HZ = 440
VOLUME = 0.2


def pre_init():
    """Ask for a mono 16-bit mixer. Must run before pygame.init()."""
    pygame.mixer.pre_init(SAMPLE_RATE, -16, 1, 512)


def square_wave(sample_rate=SAMPLE_RATE, tone_hz=TONE_HZ, volume=VOLUME, channels=1):
    """One period of a signed 16-bit square wave, interleaved for channels"""
    period = max(2, sample_rate // tone_hz)
    amplitude = int(32767 * volume)
    samples = []
    for s in range(period):
        level = amplitude if s < period // 2 else -amplitude
        samples.extend([level] * channels)
    return array.array('h', samples)


class Beeper:

    def __init__(self):
        self.sound = None
        self.playing = False
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init()
        except pygame.error as e:
            logging.warning(f"Audio unavailable, running silent: {e}")
            return
        # The mixer may not have honoured pre_init() (e.g. it was already running)
        sample_rate, _, channels = pygame.mixer.get_init()
        logging.debug(f"Mixer {sample_rate}Hz, {channels} channel(s)")
        self.sound = pygame.mixer.Sound(buffer=square_wave(sample_rate, channels=channels).tobytes())

    def update(self, active):
        """Start or stop the tone to follow the audio signal"""
        if self.sound is None or active == self.playing:
            return
        if active:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self.playing = active

    def close(self):
        self.update(False)
        if self.sound is not None:
            pygame.mixer.quit()
