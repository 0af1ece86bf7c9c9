"""Game controller input via pygame joystick polling."""

import logging
import threading
import time
from typing import Optional, Callable

import pygame

logger = logging.getLogger(__name__)


class Chip8Controller:
    """Controller input handler mapping buttons and D-pad to keypad keys"""

    # Controller button mappings for PS5/Atari style
    BUTTON_SQUARE = 0
    BUTTON_CIRCLE = 1
    BUTTON_CROSS = 2
    BUTTON_TRIANGLE = 3
    BUTTON_L1 = 4
    BUTTON_R1 = 5
    BUTTON_L2 = 6
    BUTTON_R2 = 7
    BUTTON_SHARE = 8
    BUTTON_OPTIONS = 9
    BUTTON_PS = 12
    BUTTON_TOUCHPAD = 13

    # D-Pad (as hat)
    HAT_UP = (0, 1)
    HAT_DOWN = (0, -1)
    HAT_LEFT = (-1, 0)
    HAT_RIGHT = (1, 0)

    BUTTON_TO_KEY = {
        BUTTON_CIRCLE: 0x1,
        BUTTON_SQUARE: 0x2,
        BUTTON_TRIANGLE: 0x3,
        BUTTON_CROSS: 0xC,
        BUTTON_L1: 0x4,
        BUTTON_R1: 0x5,
        BUTTON_L2: 0xD,
        BUTTON_R2: 0xE,
        BUTTON_SHARE: 0x7,
        BUTTON_OPTIONS: 0x8,
        BUTTON_PS: 0x9,
        BUTTON_TOUCHPAD: 0xA,
    }

    # D-pad to CHIP-8 keys (2=down, 4=left, 6=right, 8=up)
    HAT_TO_KEY = {
        HAT_UP: 0x8,
        HAT_DOWN: 0x2,
        HAT_LEFT: 0x4,
        HAT_RIGHT: 0x6,
    }

    def __init__(self, on_key_change: Callable[[int, bool], None]):
        self.on_key_change = on_key_change
        self.joystick: Optional[pygame.joystick.JoystickType] = None
        self.connected = False
        self.running = False
        self._thread: Optional[threading.Thread] = None

        # Special action callbacks
        self.on_reset: Optional[Callable] = None
        self.on_pause_toggle: Optional[Callable] = None
        self.on_speed_increase: Optional[Callable] = None
        self.on_speed_decrease: Optional[Callable] = None
        self.on_toggle_scanlines: Optional[Callable] = None

        pygame.init()
        pygame.joystick.init()

    def start(self):
        """Start controller polling thread"""
        self.running = True
        self._thread = threading.Thread(target=self._poll_loop, daemon=True)
        self._thread.start()

    def stop(self):
        self.running = False
        if self._thread:
            self._thread.join(timeout=1.0)

    def _poll_loop(self):
        while self.running:
            self._check_connection()
            if self.connected:
                self._process_input()
            time.sleep(1/120)  # 120Hz polling

    def _check_connection(self):
        pygame.event.pump()
        joystick_count = pygame.joystick.get_count()

        if joystick_count > 0 and not self.connected:
            # Connect to first available controller
            self.joystick = pygame.joystick.Joystick(0)
            self.joystick.init()
            self.connected = True
            logger.info("controller connected: %s", self.joystick.get_name())
        elif joystick_count == 0 and self.connected:
            self.connected = False
            self.joystick = None
            logger.info("controller disconnected")

    def _process_input(self):
        for event in pygame.event.get():
            if event.type == pygame.JOYBUTTONDOWN:
                self._handle_button(event.button, True)
            elif event.type == pygame.JOYBUTTONUP:
                self._handle_button(event.button, False)
            elif event.type == pygame.JOYHATMOTION:
                self._handle_hat(event.value)

    def _handle_button(self, button: int, pressed: bool):
        if pressed:
            actions = {
                self.BUTTON_CIRCLE: self.on_reset,
                self.BUTTON_CROSS: self.on_pause_toggle,
                self.BUTTON_L1: self.on_speed_increase,
                self.BUTTON_L2: self.on_speed_decrease,
                self.BUTTON_TOUCHPAD: self.on_toggle_scanlines,
            }
            action = actions.get(button)
            if action:
                action()

        if button in self.BUTTON_TO_KEY:
            self.on_key_change(self.BUTTON_TO_KEY[button], pressed)

    def _handle_hat(self, value: tuple):
        if value in self.HAT_TO_KEY:
            self.on_key_change(self.HAT_TO_KEY[value], True)
        elif value == (0, 0):
            # Released
            for key in self.HAT_TO_KEY.values():
                self.on_key_change(key, False)
