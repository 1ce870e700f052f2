"""One camera cycle: show a captured frame, shrink it to 32x32, classify it, report the result."""

from __future__ import annotations

import argparse
import struct
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from camclassify.display import BLACK, BLUE, WHITE, SimulatedPanel, ST7735
from camclassify.model import INPUT_SIDE, Classification, classify
from camclassify.text import draw_string, draw_text_background, int_to_string

CAPTURE_LINES = 120
CAPTURE_LINE_LENGTH = 160
FRAME_PIXELS = CAPTURE_LINES * CAPTURE_LINE_LENGTH

# After rotation the frame is read as an image 120 pixels wide and 160 tall.
UPRIGHT_WIDTH = CAPTURE_LINES
UPRIGHT_HEIGHT = CAPTURE_LINE_LENGTH

X_RATIO = UPRIGHT_WIDTH / INPUT_SIDE
Y_RATIO = UPRIGHT_HEIGHT / INPUT_SIDE


@dataclass(frozen=True)
class FrameResult:
    """The classification of one frame and the 32x32 image it was made from."""

    classification: Classification
    pixels: tuple[int, ...]


def _checked(frame: Sequence[int], count: int) -> tuple[int, ...]:
    values = tuple(frame)
    if len(values) != count:
        raise ValueError(f"expected {count} pixels, got {len(values)}")
    for value in values:
        if not isinstance(value, int) or not 0 <= value <= 0xFFFF:
            raise ValueError(f"pixel {value!r} is not a 16-bit RGB565 value")
    return values


def rotate_frame(frame: Sequence[int]) -> tuple[int, ...]:
    """Reverse each 160-pixel capture line, putting the picture the right way up."""
    values = _checked(frame, FRAME_PIXELS)
    return tuple(
        pixel
        for start in range(0, FRAME_PIXELS, CAPTURE_LINE_LENGTH)
        for pixel in reversed(values[start:start + CAPTURE_LINE_LENGTH])
    )


def _span(dest: int, ratio: float, limit: int) -> range:
    return range(int(dest * ratio), min(int((dest + 1) * ratio), limit))


def downscale(frame: Sequence[int]) -> tuple[int, ...]:
    """Box-average an upright 120x160 RGB565 frame down to a row-major 32x32 image."""
    values = _checked(frame, FRAME_PIXELS)
    result = []
    for dest_y in range(INPUT_SIDE):
        rows = _span(dest_y, Y_RATIO, UPRIGHT_HEIGHT)
        for dest_x in range(INPUT_SIDE):
            columns = _span(dest_x, X_RATIO, UPRIGHT_WIDTH)
            block = [values[x + y * UPRIGHT_WIDTH] for x in columns for y in rows]
            if not block:
                result.append(0)
                continue
            count = len(block)
            red = sum((p >> 11) & 0x1F for p in block) // count
            green = sum((p >> 5) & 0x3F for p in block) // count
            blue = sum(p & 0x1F for p in block) // count
            result.append(((red & 0x1F) << 11) | ((green & 0x3F) << 5) | (blue & 0x1F))
    return tuple(result)


def analyse(frame: Sequence[int]) -> FrameResult:
    """Rotate, shrink and classify a raw captured frame."""
    pixels = downscale(rotate_frame(frame))
    return FrameResult(classify(pixels), pixels)


def show_frame(display, frame: Sequence[int]) -> None:
    """Draw a raw captured frame, each capture line as a column from the bottom up."""
    values = _checked(frame, FRAME_PIXELS)
    for index, color in enumerate(values):
        x, offset = divmod(index, CAPTURE_LINE_LENGTH)
        display.draw_pixel(x, CAPTURE_LINE_LENGTH - 1 - offset, color)


def render_result(display, result: FrameResult, elapsed_ms: int) -> None:
    """Overlay the class name, confidence and processing time at the top of the screen."""
    draw_text_background(display, 0, 0, 128, 40, BLUE)
    draw_string(display, 5, 5, result.classification.label(), WHITE, BLUE)
    percent = int(result.classification.confidence * 100.0)
    draw_string(display, 80, 5, int_to_string(percent, 2), WHITE, BLUE)
    draw_string(display, 95, 5, "%", WHITE, BLUE)
    draw_string(display, 5, 20, "Time:", WHITE, BLUE)
    draw_string(display, 60, 20, int_to_string(elapsed_ms, 4), WHITE, BLUE)
    draw_string(display, 95, 20, "ms", WHITE, BLUE)


def _load_frame(path: Path) -> tuple[int, ...]:
    data = path.read_bytes()
    if len(data) != FRAME_PIXELS * 2:
        raise ValueError(
            f"{path}: expected {FRAME_PIXELS * 2} bytes of RGB565 data, got {len(data)}"
        )
    return struct.unpack(f"<{FRAME_PIXELS}H", data)


def main(argv: Sequence[str] | None = None) -> int:
    """Classify raw 120x160 RGB565 frames (little-endian) on a simulated panel."""
    parser = argparse.ArgumentParser(
        prog="camclassify",
        description="Classify captured camera frames into CIFAR-10 classes.",
    )
    parser.add_argument("frames", nargs="+", type=Path, help="raw RGB565 frame files")
    args = parser.parse_args(argv)

    display = ST7735(SimulatedPanel())
    display.init()
    display.fill_screen(BLACK)
    display.fill_rectangle(0, 0, 128, 20, BLUE)
    draw_string(display, 10, 5, "CIFAR-10 Camera", WHITE, BLUE)
    draw_string(display, 10, 30, "Initializing...", WHITE, BLACK)
    display.fill_screen(BLACK)

    status = 0
    for path in args.frames:
        try:
            frame = _load_frame(path)
        except (OSError, ValueError) as error:
            print(f"camclassify: {error}", file=sys.stderr)
            status = 1
            continue
        draw_text_background(display, 0, 0, 128, 20, BLUE)
        draw_string(display, 5, 5, "Processing...", WHITE, BLUE)
        started = time.monotonic()
        show_frame(display, frame)
        result = analyse(frame)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        render_result(display, result, elapsed_ms)
        percent = int(result.classification.confidence * 100.0)
        print(f"{path}: {result.classification.label()} {percent}% {elapsed_ms} ms")
    return status


if __name__ == "__main__":
    sys.exit(main())