# CHIP-8 PERIPHERALS
# the devices wired around the interpreter core: a scaled pygame window
# for the 64x32 framebuffer, the 16 key hex keypad and a square wave beeper


import logging

import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import numpy as np
import pygame
from pygame.locals import (
    K_1, K_2, K_3, K_4,
    K_q, K_w, K_e, K_r,
    K_a, K_s, K_d, K_f,
    K_z, K_x, K_c, K_v,
)


logger = logging.getLogger(__name__)


# ******************** STATIC SECTION
# the left side of a QWERTY keyboard mirrors the COSMAC VIP keypad layout
#   1 2 3 4        1 2 3 C
#   Q W E R   ->   4 5 6 D
#   A S D F        7 8 9 E
#   Z X C V        A 0 B F
KEY_MAPPINGS = {
    K_1: 0x1, K_2: 0x2, K_3: 0x3, K_4: 0xC,
    K_q: 0x4, K_w: 0x5, K_e: 0x6, K_r: 0xD,
    K_a: 0x7, K_s: 0x8, K_d: 0x9, K_f: 0xE,
    K_z: 0xA, K_x: 0x0, K_c: 0xB, K_v: 0xF,
}

SCREEN_HEIGHT = 32
SCREEN_WIDTH = 64
SCALE = 12
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)

SAMPLE_RATE = 44100
SAMPLE_SIZE = -16                           # signed 16 bit samples
TONE_HZ = 440
VOLUME = 0.2
BUFFER_SAMPLES = SAMPLE_RATE // 60          # one buffer lasts one timer step
QUEUE_THRESHOLD = 2


# ******************** DISPLAY
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)

    def read_pixel(self, x, y):
        """return 1 if pixel is ON, return 0 if pixel is OFF"""
        p = self.surface.get_at((x * self.scale, y * self.scale))
        return 0 if p == self.background else 1

    def render(self, vram):
        """
        redraw the whole frame from a row-major framebuffer of 0/1 cells
        there is no differential update, every set cell is blitted again on each call
        """
        self.surface.fill(self.background)
        for i, pixel in enumerate(vram):
            if pixel:
                y, x = divmod(i, self.w)
                pygame.draw.rect(
                    self.surface,
                    self.foreground,
                    (x * self.scale, y * self.scale, self.scale, self.scale)
                )
        pygame.display.flip()


# ******************** INPUT
class Keypad:
    def __init__(self, mappings=None):
        self.mappings = KEY_MAPPINGS if mappings is None else mappings

    def poll(self, keypad, pressed=None):
        """
        overwrite every entry of the 16 keys keypad with the current physical key state
        pressed defaults to pygame's keyboard snapshot, which is refreshed by the event pump
        """
        if pressed is None:
            pressed = pygame.key.get_pressed()
        for physical, logical in self.mappings.items():
            keypad[logical] = bool(pressed[physical])
        return keypad


# ******************** AUDIO
def square_wave(start, length, tone_hz=TONE_HZ, sample_rate=SAMPLE_RATE, volume=VOLUME):
    """
    return `length` mono int16 samples of a square wave, starting at sample number `start`
    the phase is computed with integer arithmetic so that consecutive buffers join seamlessly
    """
    t = np.arange(start, start + length, dtype=np.int64)
    half_periods = (t * tone_hz * 2) // sample_rate
    amplitude = int(volume * 32767)
    return np.where(half_periods % 2 == 0, amplitude, -amplitude).astype(np.int16)


class Speaker:
    def __init__(self, tone_hz=TONE_HZ, buffer_samples=BUFFER_SAMPLES, threshold=QUEUE_THRESHOLD):
        if not pygame.mixer.get_init():
            pygame.mixer.init(SAMPLE_RATE, SAMPLE_SIZE, 1, 512)
        self.sample_rate, _, self.channels = pygame.mixer.get_init()
        self.tone_hz = tone_hz
        self.buffer_samples = buffer_samples
        self.threshold = threshold
        self.sample_index = 0   # wraps every second of audio to keep the phase math small
        self.channel = pygame.mixer.Channel(0)
        logger.debug(f"Mixer ready: {self.sample_rate} Hz, {self.channels} channel(s)")

    def pending(self):
        """number of buffers playing or waiting on the channel"""
        return int(bool(self.channel.get_busy())) + int(self.channel.get_queue() is not None)

    def _next_buffer(self):
        samples = square_wave(self.sample_index, self.buffer_samples, self.tone_hz, self.sample_rate)
        self.sample_index = (self.sample_index + self.buffer_samples) % self.sample_rate
        if self.channels > 1:
            samples = np.repeat(samples[:, np.newaxis], self.channels, axis=1)
        return pygame.sndarray.make_sound(samples)

    def update(self, sound_timer):
        """keep the tone going while the sound timer is running, silence it once the timer runs out"""
        if sound_timer > 0:
            if self.pending() < self.threshold:
                self.channel.queue(self._next_buffer())
        elif self.pending():
            self.channel.stop()
