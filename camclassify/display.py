"""Driver for ST7735 TFT panels, with an in-memory panel that emulates the controller."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

MADCTL_MY = 0x80
MADCTL_MX = 0x40
MADCTL_MV = 0x20
MADCTL_ML = 0x10
MADCTL_RGB = 0x00
MADCTL_BGR = 0x08
MADCTL_MH = 0x04

NOP = 0x00
SWRESET = 0x01
RDDID = 0x04
RDDST = 0x09
SLPIN = 0x10
SLPOUT = 0x11
PTLON = 0x12
NORON = 0x13
INVOFF = 0x20
INVON = 0x21
GAMSET = 0x26
DISPOFF = 0x28
DISPON = 0x29
CASET = 0x2A
RASET = 0x2B
RAMWR = 0x2C
RAMRD = 0x2E
PTLAR = 0x30
COLMOD = 0x3A
MADCTL = 0x36
FRMCTR1 = 0xB1
FRMCTR2 = 0xB2
FRMCTR3 = 0xB3
INVCTR = 0xB4
DISSET5 = 0xB6
PWCTR1 = 0xC0
PWCTR2 = 0xC1
PWCTR3 = 0xC2
PWCTR4 = 0xC3
PWCTR5 = 0xC4
VMCTR1 = 0xC5
RDID1 = 0xDA
RDID2 = 0xDB
RDID3 = 0xDC
RDID4 = 0xDD
PWCTR6 = 0xFC
GMCTRP1 = 0xE0
GMCTRN1 = 0xE1

BLACK = 0x0000
BLUE = 0x001F
RED = 0xF800
GREEN = 0x07E0
CYAN = 0x07FF
MAGENTA = 0xF81F
YELLOW = 0xFFE0
WHITE = 0xFFFF


def color565(r: int, g: int, b: int) -> int:
    """Pack 8-bit red, green and blue into an RGB565 colour."""
    return ((r & 0xF8) << 8) | ((g & 0xFC) << 3) | ((b & 0xF8) >> 3)


class Gamma(IntEnum):
    """Gamma curves selectable with the GAMSET command."""

    GAMMA_10 = 0x01
    GAMMA_25 = 0x02
    GAMMA_22 = 0x04
    GAMMA_18 = 0x08


# One step of an initialisation sequence: command, argument bytes, delay in ms afterwards.
_Step = tuple[int, bytes, int]

_INIT_PART1: tuple[_Step, ...] = (
    (SWRESET, b"", 150),
    (SLPOUT, b"", 500),
    (FRMCTR1, bytes((0x01, 0x2C, 0x2D)), 0),
    (FRMCTR2, bytes((0x01, 0x2C, 0x2D)), 0),
    (FRMCTR3, bytes((0x01, 0x2C, 0x2D, 0x01, 0x2C, 0x2D)), 0),
    (INVCTR, bytes((0x07,)), 0),
    (PWCTR1, bytes((0xA2, 0x02, 0x84)), 0),
    (PWCTR2, bytes((0xC5,)), 0),
    (PWCTR3, bytes((0x0A, 0x00)), 0),
    (PWCTR4, bytes((0x8A, 0x2A)), 0),
    (PWCTR5, bytes((0x8A, 0xEE)), 0),
    (VMCTR1, bytes((0x0E,)), 0),
    (INVOFF, b"", 0),
)

_INIT_PART2: dict[str, tuple[_Step, ...]] = {
    "128x128": (
        (CASET, bytes((0x00, 0x00, 0x00, 0x7F)), 0),
        (RASET, bytes((0x00, 0x00, 0x00, 0x7F)), 0),
    ),
    "160x128": (
        (CASET, bytes((0x00, 0x00, 0x00, 0x7F)), 0),
        (RASET, bytes((0x00, 0x00, 0x00, 0x7F)), 0),
    ),
    "160x80": (
        (CASET, bytes((0x00, 0x00, 0x00, 0x4F)), 0),
        (RASET, bytes((0x00, 0x00, 0x00, 0x9F)), 0),
        (INVON, b"", 0),
    ),
}

_INIT_PART3: tuple[_Step, ...] = (
    (GMCTRP1, bytes((0x02, 0x1C, 0x07, 0x12, 0x37, 0x32, 0x29, 0x2D,
                     0x29, 0x25, 0x2B, 0x39, 0x00, 0x01, 0x03, 0x10)), 0),
    (GMCTRN1, bytes((0x03, 0x1D, 0x07, 0x06, 0x2E, 0x2C, 0x29, 0x2D,
                     0x2E, 0x2E, 0x37, 0x3F, 0x00, 0x00, 0x02, 0x10)), 0),
    (NORON, b"", 10),
    (DISPON, b"", 100),
)


@dataclass(frozen=True)
class PanelConfig:
    """Geometry and orientation of a particular ST7735 module."""

    width: int = 128
    height: int = 160
    x_start: int = 0
    y_start: int = 0
    rotation: int = MADCTL_MX | MADCTL_MY
    size: str = "160x128"

    def __post_init__(self) -> None:
        if self.size not in _INIT_PART2:
            raise ValueError(f"unknown panel size {self.size!r}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("panel width and height must be positive")
        if not 0 <= self.rotation <= 0xFF:
            raise ValueError("rotation must fit in one byte")


class Bus(Protocol):
    """What the driver needs from the wiring to the panel."""

    def write_command(self, command: int) -> None: ...
    def write_data(self, data: bytes) -> None: ...
    def select(self, active: bool) -> None: ...
    def reset(self) -> None: ...
    def delay(self, ms: int) -> None: ...


class SimulatedPanel:
    """An ST7735 controller kept in memory: it records every transfer and fills a frame store."""

    _RAM_COLUMNS = 132
    _RAM_ROWS = 162

    def __init__(self) -> None:
        self.transfers: list[tuple[str, int | bytes]] = []
        self.memory: dict[tuple[int, int], int] = {}
        self.elapsed_ms = 0
        self.resets = 0
        self.selected = False
        self._power_on()

    def _power_on(self) -> None:
        self.sleeping = True
        self.display_on = False
        self.inverted = False
        self.madctl = 0
        self.colmod = 0
        self.gamma: int | None = None
        self.columns = (0, self._RAM_COLUMNS - 1)
        self.rows = (0, self._RAM_ROWS - 1)
        self._command: int | None = None
        self._args = bytearray()
        self._cursor: tuple[int, int] | None = None
        self._partial = b""

    def write_command(self, command: int) -> None:
        """Latch a command byte; ignored while the chip is not selected."""
        if not self.selected:
            return
        self.transfers.append(("command", command))
        self._command = command
        self._args = bytearray()
        self._partial = b""
        if command == SWRESET:
            self._power_on()
        elif command == SLPOUT:
            self.sleeping = False
        elif command == SLPIN:
            self.sleeping = True
        elif command == INVON:
            self.inverted = True
        elif command == INVOFF:
            self.inverted = False
        elif command == DISPON:
            self.display_on = True
        elif command == DISPOFF:
            self.display_on = False
        elif command == RAMWR:
            self._cursor = (self.columns[0], self.rows[0])

    def write_data(self, data: bytes) -> None:
        """Take parameter or pixel bytes for the last command; ignored while not selected."""
        if not self.selected:
            return
        data = bytes(data)
        self.transfers.append(("data", data))
        if self._command == RAMWR:
            self._stream_pixels(data)
        elif self._command in (CASET, RASET, MADCTL, COLMOD, GAMSET):
            self._args.extend(data)
            self._apply_args()

    def _apply_args(self) -> None:
        args = self._args
        if self._command in (CASET, RASET) and len(args) >= 4:
            window = ((args[0] << 8) | args[1], (args[2] << 8) | args[3])
            if self._command == CASET:
                self.columns = window
            else:
                self.rows = window
        elif self._command == MADCTL and args:
            self.madctl = args[0]
        elif self._command == COLMOD and args:
            self.colmod = args[0]
        elif self._command == GAMSET and args:
            self.gamma = args[0]

    def _stream_pixels(self, data: bytes) -> None:
        buffer = self._partial + data
        pairs = iter(buffer)
        for high, low in zip(pairs, pairs):
            self._put((high << 8) | low)
        self._partial = buffer[-1:] if len(buffer) % 2 else b""

    def _put(self, color: int) -> None:
        if self._cursor is None:
            return
        col, row = self._cursor
        self.memory[(col, row)] = color
        col += 1
        if col > self.columns[1]:
            col = self.columns[0]
            row += 1
            if row > self.rows[1]:
                row = self.rows[0]
        self._cursor = (col, row)

    def select(self, active: bool) -> None:
        """Drive chip select: True selects the controller."""
        self.selected = bool(active)

    def reset(self) -> None:
        """Pulse the hardware reset line, holding it low for 5 ms."""
        self.delay(5)
        self.resets += 1
        self._power_on()

    def delay(self, ms: int) -> None:
        """Let time pass."""
        self.elapsed_ms += ms

    def pixel(self, x: int, y: int) -> int:
        """Colour stored at controller address (x, y); 0 where nothing was written."""
        return self.memory.get((x, y), 0)


def _check_word(*values: int) -> None:
    for value in values:
        if not isinstance(value, int) or not 0 <= value <= 0xFFFF:
            raise ValueError(f"{value!r} is not an unsigned 16-bit value")


class ST7735:
    """Drawing operations for an ST7735 panel reached through a bus."""

    def __init__(self, bus: Bus, config: PanelConfig | None = None) -> None:
        self.bus = bus
        self.config = config if config is not None else PanelConfig()

    @contextmanager
    def _selected(self) -> Iterator[None]:
        self.bus.select(True)
        try:
            yield
        finally:
            self.bus.select(False)

    def _run(self, steps: Iterable[_Step]) -> None:
        for command, args, delay in steps:
            self.bus.write_command(command)
            if args:
                self.bus.write_data(args)
            if delay:
                self.bus.delay(delay)

    def _set_window(self, x0: int, y0: int, x1: int, y1: int) -> None:
        xs, ys = self.config.x_start, self.config.y_start
        self.bus.write_command(CASET)
        self.bus.write_data(bytes((0x00, (x0 + xs) & 0xFF, 0x00, (x1 + xs) & 0xFF)))
        self.bus.write_command(RASET)
        self.bus.write_data(bytes((0x00, (y0 + ys) & 0xFF, 0x00, (y1 + ys) & 0xFF)))
        self.bus.write_command(RAMWR)

    def _clip(self, x: int, y: int, w: int, h: int) -> tuple[int, int] | None:
        width, height = self.config.width, self.config.height
        if x >= width or y >= height:
            return None
        if x + w - 1 >= width:
            w = width - x
        if y + h - 1 >= height:
            h = height - y
        return w, h

    def init(self) -> None:
        """Reset the panel and send the full power-up sequence."""
        with self._selected():
            self.bus.reset()
            self._run(_INIT_PART1)
            self._run((
                (MADCTL, bytes((self.config.rotation,)), 0),
                (COLMOD, bytes((0x05,)), 0),
            ))
            self._run(_INIT_PART2[self.config.size])
            self._run(_INIT_PART3)

    def draw_pixel(self, x: int, y: int, color: int) -> None:
        """Set one pixel; points outside the panel are ignored."""
        _check_word(x, y, color)
        if x >= self.config.width or y >= self.config.height:
            return
        with self._selected():
            self._set_window(x, y, x + 1, y + 1)
            self.bus.write_data(bytes((color >> 8, color & 0xFF)))

    def fill_rectangle(self, x: int, y: int, w: int, h: int, color: int) -> None:
        """Fill a rectangle, clipped to the panel, sending one pixel per transfer."""
        _check_word(x, y, w, h, color)
        clipped = self._clip(x, y, w, h)
        if clipped is None:
            return
        w, h = clipped
        pixel = bytes((color >> 8, color & 0xFF))
        with self._selected():
            self._set_window(x, y, x + w - 1, y + h - 1)
            for _ in range(w * h):
                self.bus.write_data(pixel)

    def fill_rectangle_fast(self, x: int, y: int, w: int, h: int, color: int) -> None:
        """Fill a rectangle, clipped to the panel, sending one whole row per transfer."""
        _check_word(x, y, w, h, color)
        clipped = self._clip(x, y, w, h)
        if clipped is None:
            return
        w, h = clipped
        line = bytes((color >> 8, color & 0xFF)) * w
        with self._selected():
            self._set_window(x, y, x + w - 1, y + h - 1)
            for _ in range(h):
                self.bus.write_data(line)

    def fill_screen(self, color: int) -> None:
        """Paint the whole panel one colour."""
        self.fill_rectangle(0, 0, self.config.width, self.config.height, color)

    def fill_screen_fast(self, color: int) -> None:
        """Paint the whole panel one colour, a row at a time."""
        self.fill_rectangle_fast(0, 0, self.config.width, self.config.height, color)

    def draw_image(self, x: int, y: int, w: int, h: int, data: Sequence[int]) -> None:
        """Blit w*h 16-bit words, sent in little-endian memory order.

        Images that do not fit entirely on the panel are not drawn.
        """
        _check_word(x, y, w, h)
        width, height = self.config.width, self.config.height
        if x >= width or y >= height:
            return
        if x + w - 1 >= width or y + h - 1 >= height:
            return
        words = list(data)
        count = w * h
        if len(words) < count:
            raise ValueError(f"image needs {count} words, got {len(words)}")
        words = words[:count]
        _check_word(*words)
        with self._selected():
            self._set_window(x, y, x + w - 1, y + h - 1)
            self.bus.write_data(struct.pack(f"<{count}H", *words))

    def invert_colors(self, invert: bool) -> None:
        """Turn display inversion on or off."""
        with self._selected():
            self.bus.write_command(INVON if invert else INVOFF)

    def set_gamma(self, gamma: Gamma | int) -> None:
        """Select one of the controller's predefined gamma curves."""
        curve = Gamma(gamma)
        with self._selected():
            self.bus.write_command(GAMSET)
            self.bus.write_data(bytes((int(curve),)))