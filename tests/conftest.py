import os
import random

import pytest

# Keep pygame quiet and headless when the shell module is imported
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from chip8vm import COSMAC, Engine, MODERN


def program(*words):
    """Assemble instruction words into a big-endian image"""
    image = bytearray()
    for word in words:
        image += word.to_bytes(2, "big")
    return bytes(image)


@pytest.fixture
def engine():
    return Engine(quirks=MODERN, rng=random.Random(1))


@pytest.fixture
def cosmac():
    return Engine(quirks=COSMAC, rng=random.Random(1))


@pytest.fixture
def run_program():
    """Load words into an engine and step once per word"""
    def run(engine, *words, steps=None):
        engine.load(program(*words))
        engine.run(len(words) if steps is None else steps)
        return engine.machine
    return run


@pytest.fixture
def assemble():
    return program
