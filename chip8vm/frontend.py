"""
Tkinter host shell for the CHIP-8 core.

Drives ``Chip8CPU.cycle()`` from an emulation thread, repaints the
canvas when the framebuffer is dirty, maps keyboard and controller
input onto the keypad and rings the terminal bell on the tone signal.
"""

import argparse
import logging
import threading
import time
import tkinter as tk
from tkinter import filedialog
from dataclasses import dataclass
from typing import Optional

from .constants import DISPLAY_WIDTH, DISPLAY_HEIGHT
from .controller import Chip8Controller
from .cpu import Chip8CPU
from .session import EmulationSession
from .keymap import translate_key

logger = logging.getLogger(__name__)


@dataclass
class HostConfig:
    """Host shell settings"""
    cpu_frequency: int = 500      # Instructions per second
    target_fps: int = 60
    scale: int = 10
    pixel_color: str = "#C0C0C0"
    bg_color: str = "#1A1A1A"
    status_bg: str = "#2A2A2A"
    status_fg: str = "#888888"
    status_bar_height: int = 30
    scanlines: bool = False
    key_layout: str = "cosmac"
    max_speed: int = 8


class Chip8Audio:
    """Terminal bell on the tone signal, one bell per beep burst"""

    def __init__(self, min_gap: float = 0.1):
        self.min_gap = min_gap
        self._last_tone = 0.0

    def tone(self):
        now = time.monotonic()
        if now - self._last_tone > self.min_gap:
            print('\a', end='', flush=True)
        self._last_tone = now


class Chip8Display:
    """Tkinter display renderer"""

    def __init__(self, canvas: tk.Canvas, config: HostConfig):
        self.canvas = canvas
        self.config = config
        self.scanlines_enabled = config.scanlines
        self.pixel_rects = {}
        self.scanline_rects = []

        # Pre-create pixel rectangles for efficiency
        self._create_pixels()

    def _create_pixels(self):
        self.canvas.delete("all")
        self.pixel_rects = {}
        scale = self.config.scale

        for y in range(DISPLAY_HEIGHT):
            for x in range(DISPLAY_WIDTH):
                rect = self.canvas.create_rectangle(
                    x * scale, y * scale, (x + 1) * scale, (y + 1) * scale,
                    fill=self.config.bg_color, outline=""
                )
                self.pixel_rects[(x, y)] = rect

        self._create_scanlines()

    def _create_scanlines(self):
        for rect in self.scanline_rects:
            self.canvas.delete(rect)
        self.scanline_rects = []

        if self.scanlines_enabled:
            scale = self.config.scale
            width = DISPLAY_WIDTH * scale
            for y in range(DISPLAY_HEIGHT):
                rect = self.canvas.create_rectangle(
                    0, y * scale + scale // 2, width, (y + 1) * scale,
                    fill="#000000", stipple="gray50", outline=""
                )
                self.scanline_rects.append(rect)

    def toggle_scanlines(self):
        self.scanlines_enabled = not self.scanlines_enabled
        self._create_scanlines()

    def render(self, pixels):
        """Paint a row-major 64x32 pixel buffer"""
        for y in range(DISPLAY_HEIGHT):
            base = y * DISPLAY_WIDTH
            for x in range(DISPLAY_WIDTH):
                color = (self.config.pixel_color if pixels[base + x]
                         else self.config.bg_color)
                self.canvas.itemconfig(self.pixel_rects[(x, y)], fill=color)


class Chip8GUI:
    """Main application window"""

    def __init__(self, config: Optional[HostConfig] = None):
        self.config = config or HostConfig()
        self.root = tk.Tk()
        self.root.title("CHIP-8")
        self.root.resizable(False, False)
        self.root.configure(bg=self.config.bg_color)

        # Components
        self.audio = Chip8Audio()
        self.session = EmulationSession(Chip8CPU(on_tone=self.audio.tone))
        self.cpu = self.session.cpu

        self.speed_multiplier = 1

        self._create_ui()
        self.display_renderer = Chip8Display(self.canvas, self.config)

        self.controller = Chip8Controller(self._on_controller_key)
        self._setup_controller_callbacks()
        self._bind_keys()
        self.controller.start()

        self._emu_thread: Optional[threading.Thread] = None
        self._emu_running = False

    def _create_ui(self):
        cfg = self.config
        self.canvas = tk.Canvas(
            self.root,
            width=DISPLAY_WIDTH * cfg.scale,
            height=DISPLAY_HEIGHT * cfg.scale,
            bg=cfg.bg_color,
            highlightthickness=0
        )
        self.canvas.pack(side=tk.TOP)

        self.status_frame = tk.Frame(
            self.root, height=cfg.status_bar_height, bg=cfg.status_bg)
        self.status_frame.pack(side=tk.BOTTOM, fill=tk.X)
        self.status_frame.pack_propagate(False)

        label_opts = dict(fg=cfg.status_fg, bg=cfg.status_bg,
                          font=("Courier", 10))
        self.rom_label = tk.Label(self.status_frame, text="No ROM", **label_opts)
        self.rom_label.pack(side=tk.LEFT, padx=10)
        self.state_label = tk.Label(self.status_frame, text="Stopped",
                                    **label_opts)
        self.state_label.pack(side=tk.RIGHT, padx=10)
        self.speed_label = tk.Label(self.status_frame, text="1×", **label_opts)
        self.speed_label.pack(side=tk.RIGHT, padx=10)

    def _bind_keys(self):
        self.root.bind("<KeyPress>", self._on_key_down)
        self.root.bind("<KeyRelease>", self._on_key_up)

        # Control keys
        self.root.bind("<Control-r>", lambda e: self._reset())
        self.root.bind("<Control-o>", lambda e: self._open_file_dialog())
        self.root.bind("<space>", lambda e: self._toggle_pause())
        self.root.bind("<F1>", lambda e: self._decrease_speed())
        self.root.bind("<F2>", lambda e: self._increase_speed())
        self.root.bind("<F3>", lambda e: self._toggle_scanlines())
        self.root.bind("<F4>", lambda e: self._dump_state())

    def _on_key_down(self, event):
        key = translate_key(event.keysym, self.config.key_layout)
        if key is not None:
            self.cpu.key_down(key)

    def _on_key_up(self, event):
        key = translate_key(event.keysym, self.config.key_layout)
        if key is not None:
            self.cpu.key_up(key)

    def _on_controller_key(self, key: int, pressed: bool):
        self.cpu.keypad.set_key(key, pressed)

    def _on_tk_thread(self, action):
        """Wrap ``action`` so calls from the controller thread run in Tk"""
        return lambda: self.root.after(0, action)

    def _setup_controller_callbacks(self):
        self.controller.on_reset = self._on_tk_thread(self._reset)
        self.controller.on_pause_toggle = self._on_tk_thread(self._toggle_pause)
        self.controller.on_speed_increase = self._on_tk_thread(
            self._increase_speed)
        self.controller.on_speed_decrease = self._on_tk_thread(
            self._decrease_speed)
        self.controller.on_toggle_scanlines = self._on_tk_thread(
            self._toggle_scanlines)

    def _open_file_dialog(self):
        filepath = filedialog.askopenfilename(
            title="Select CHIP-8 ROM",
            filetypes=[("CHIP-8 ROM", "*.ch8"), ("All files", "*.*")]
        )
        if filepath:
            self.load_rom(filepath)

    def load_rom(self, filepath: str) -> bool:
        if not self.session.load(filepath):
            self.rom_label.config(text="Load failed")
            self._update_status()
            return False
        self.rom_label.config(text=f"ROM: {self.cpu.rom_name}")
        self._start_emulation()
        return True

    def _start_emulation(self):
        self.session.paused = False
        if self._emu_running:
            self._update_status()
            return

        self._emu_running = True
        self._update_status()

        self._emu_thread = threading.Thread(target=self._emulation_loop,
                                            daemon=True)
        self._emu_thread.start()
        self._render_loop()

    def _emulation_loop(self):
        """Run the core at cpu_frequency * speed in frame-sized batches"""
        frame = 1.0 / self.config.target_fps

        while self._emu_running:
            start_time = time.perf_counter()
            cycles = (self.config.cpu_frequency * self.speed_multiplier
                      // self.config.target_fps)
            self.session.run_frame(cycles)

            sleep_time = frame - (time.perf_counter() - start_time)
            if sleep_time > 0:
                time.sleep(sleep_time)

    def _render_loop(self):
        if not self._emu_running:
            return

        frame = self.session.take_frame()
        if frame is not None:
            self.display_renderer.render(frame)

        self._update_status()
        self.root.after(1000 // self.config.target_fps, self._render_loop)

    def _update_status(self):
        if self.session.fault:
            self.state_label.config(text=f"Fault: {self.session.fault}")
        elif self.session.paused:
            self.state_label.config(text="Paused")
        elif self._emu_running and self.cpu.rom_loaded:
            self.state_label.config(text=self.cpu.state.value.capitalize())
        else:
            self.state_label.config(text="Stopped")

        self.speed_label.config(text=f"{self.speed_multiplier}×")

    def _reset(self):
        """Reload the current ROM from disk"""
        if self.session.rom_path is None:
            return
        if self.session.reload():
            self.display_renderer.render(
                bytes(DISPLAY_WIDTH * DISPLAY_HEIGHT))
            self._start_emulation()
        else:
            self.rom_label.config(text="Load failed")
            self._update_status()

    def _toggle_pause(self):
        self.session.paused = not self.session.paused
        self._update_status()

    def _increase_speed(self):
        if self.speed_multiplier < self.config.max_speed:
            self.speed_multiplier *= 2
            self._update_status()

    def _decrease_speed(self):
        if self.speed_multiplier > 1:
            self.speed_multiplier //= 2
            self._update_status()

    def _toggle_scanlines(self):
        self.display_renderer.toggle_scanlines()

    def _dump_state(self):
        with self.session.lock:
            state = self.cpu.dump_state()
        logger.info("PC: %04X  I: %04X  SP: %d  DT: %d  ST: %d  (%s)",
                    state["pc"], state["i"], state["sp"],
                    state["delay"], state["sound"], state["state"])
        logger.info("V: %s", " ".join(f"{v:02X}" for v in state["v"]))

    def run(self):
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)
        self.root.mainloop()

    def _on_close(self):
        self._emu_running = False
        self.controller.stop()
        self.root.destroy()


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(
        prog="chip8vm", description="CHIP-8 interpreter")
    parser.add_argument("rom", nargs="?", help="ROM image to run")
    parser.add_argument("--speed", type=int, default=500, metavar="HZ",
                        help="instructions per second (default: %(default)s)")
    parser.add_argument("--scale", type=int, default=10,
                        help="window pixels per CHIP-8 pixel")
    parser.add_argument("--layout", choices=("cosmac", "hex"), default="cosmac",
                        help="keyboard layout")
    parser.add_argument("--scanlines", action="store_true",
                        help="draw a scanline overlay")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="increase logging verbosity")
    args = parser.parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level,
                        format="%(levelname)s %(name)s: %(message)s")

    config = HostConfig(cpu_frequency=args.speed, scale=args.scale,
                        key_layout=args.layout, scanlines=args.scanlines)
    app = Chip8GUI(config)
    if args.rom:
        app.load_rom(args.rom)
    else:
        app.root.after(0, app._open_file_dialog)
    app.run()
