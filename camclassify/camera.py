"""Control of an OV7670 camera over SCCB with frames delivered by a parallel capture interface."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum
from typing import Protocol

log = logging.getLogger(__name__)

SLAVE_ADDRESS = 0x42
REG_BATT = 0xFF
REG_COM7 = 0x12
REG_PID = 0x0B
COM7_RESET = 0x80

QVGA_WIDTH = 320
QVGA_HEIGHT = 240
FRAME_WORDS = QVGA_WIDTH * QVGA_HEIGHT // 2


class OutputMode(IntEnum):
    """Pixel formats the sensor can produce."""

    QVGA_RGB565 = 0
    QVGA_YUV = 1


class CaptureMode(IntEnum):
    """How the capture interface takes frames."""

    CONTINUOUS = 0
    SINGLE_FRAME = 1


# Register writes applied after a sensor reset, in order.
REGISTERS: tuple[tuple[int, int], ...] = (
    # colour mode
    (0x12, 0x04),
    (0x8C, 0x00),
    (0x40, 0x10 + 0xC0),
    (0x3A, 0x04 + 8),
    (0x3D, 0x80 + 0x00),
    (0xB0, 0x84),
    # clock
    (0x0C, 0x04),
    (0x3E, 0x1A),
    (0x70, 0x3A),
    (0x71, 0x35),
    (0x72, 0x22),
    (0x73, 0xF2),
    # windowing
    (0x17, 0x16),
    (0x18, 0x04),
    (0x32, 0xA4),
    (0x19, 0x02),
    (0x1A, 0x7A),
    (0x03, 0xA4),
    # colour matrix
    (0x4F, 0x80),
    (0x50, 0x80),
    (0x51, 0x00),
    (0x52, 0x22),
    (0x53, 0x5E),
    (0x54, 0x80),
    (0x58, 0x9E),
    # edge enhancement, de-noise, AWB gain
    (0x41, 0x38),
    # gamma curve
    (0x7B, 16),
    (0x7C, 30),
    (0x7D, 53),
    (0x7E, 90),
    (0x7F, 105),
    (0x80, 118),
    (0x81, 130),
    (0x82, 140),
    (0x83, 150),
    (0x84, 160),
    (0x85, 180),
    (0x86, 195),
    (0x87, 215),
    (0x88, 230),
    (0x89, 244),
    (0x7A, 16),
    # clock pre-scaler 1/1
    (0x11, 0x00),
    # mirror and flip
    (0x1E, 0x31),
)


class _Hardware(Protocol):
    def i2c_mem_write(self, address: int, register: int, value: int) -> None: ...
    def i2c_transmit(self, address: int, data: bytes) -> None: ...
    def i2c_receive(self, address: int, count: int) -> bytes: ...
    def set_reset(self, level: bool) -> None: ...
    def delay(self, ms: int) -> None: ...
    def dcmi_start(self, mode: CaptureMode, destination: int, length: int) -> None: ...
    def dcmi_stop(self) -> None: ...
    def dma_start(self, destination: int, length: int) -> None: ...


def _check_byte(name: str, value: int) -> None:
    if not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise ValueError(f"{name} {value!r} does not fit in one byte")


class OV7670:
    """An OV7670 sensor reached through the given hardware interface."""

    def __init__(self, hardware: _Hardware) -> None:
        self.hardware = hardware
        self.destination = 0
        self.current_h = 0
        self.current_v = 0
        self.on_hsync: Callable[[int], None] | None = None
        self.on_vsync: Callable[[int], None] | None = None

    def init(self) -> int:
        """Pulse the reset line, soft-reset the sensor and return its product id."""
        hw = self.hardware
        self.destination = 0
        hw.set_reset(False)
        hw.delay(100)
        hw.set_reset(True)
        hw.delay(100)
        self.write_register(REG_COM7, COM7_RESET)
        hw.delay(30)
        device_id = self.read_register(REG_PID)
        log.info("[OV7670] dev id = %02X", device_id)
        return device_id

    def configure(self, mode: OutputMode | int) -> None:
        """Stop capture, soft-reset the sensor and load the register table."""
        OutputMode(mode)
        self.stop_capture()
        self.write_register(REG_COM7, COM7_RESET)
        self.hardware.delay(30)
        for register, value in REGISTERS:
            self.write_register(register, value)
            self.hardware.delay(1)

    def start_capture(self, mode: CaptureMode | int, destination: int) -> None:
        """Begin filling the buffer at destination with frames."""
        mode = CaptureMode(mode)
        self.stop_capture()
        self.destination = destination if mode is CaptureMode.CONTINUOUS else 0
        self.hardware.dcmi_start(mode, destination, FRAME_WORDS)

    def stop_capture(self) -> None:
        """Halt the capture interface."""
        self.hardware.dcmi_stop()

    def register_callbacks(self, on_hsync: Callable[[int], None] | None,
                           on_vsync: Callable[[int], None] | None) -> None:
        """Set the functions told about line and frame boundaries."""
        self.on_hsync = on_hsync
        self.on_vsync = on_vsync

    def frame_event(self) -> None:
        """Handle the end of a frame: notify, re-arm DMA in continuous mode, count."""
        if self.on_vsync is not None:
            self.on_vsync(self.current_v)
        if self.destination != 0:
            self.hardware.dma_start(self.destination, FRAME_WORDS)
        self.current_v += 1
        self.current_h = 0

    def write_register(self, register: int, value: int) -> None:
        """Write one sensor register."""
        _check_byte("register", register)
        _check_byte("value", value)
        self.hardware.i2c_mem_write(SLAVE_ADDRESS, register, value)

    def read_register(self, register: int) -> int:
        """Read one sensor register with a plain write followed by a read."""
        _check_byte("register", register)
        self.hardware.i2c_transmit(SLAVE_ADDRESS, bytes((register,)))
        data = self.hardware.i2c_receive(SLAVE_ADDRESS, 1)
        if len(data) < 1:
            raise OSError("no data received from the sensor")
        return data[0]