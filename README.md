# camclassify

A small image classifier for 32×32 RGB565 pictures, with the pieces around
it: frame processing for 120×160 camera frames, a driver for ST7735 TFT
panels together with an in-memory panel, a 5×7 bitmap font, and control
logic for an OV7670 camera.

The classifier averages each colour channel over 8×8 blocks into 48
features in [-1, 1], runs them through two fully connected layers
(48 → 16 with ReLU, 16 → 10) and applies a softmax over the ten CIFAR-10
classes: plane, car, bird, cat, deer, dog, frog, horse, ship, truck.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Classifying an image

`camclassify.model.classify(pixels)` takes 1024 RGB565 values (row by row,
32 per row) and returns a `Classification` with the winning `index`, its
`confidence` and all ten `probabilities`; `label()` gives the class name.
Input of the wrong length, or values outside 0–0xFFFF, raise `ValueError`.

```python
from camclassify.model import classify

pixels = [0xFFFF] * (32 * 32)          # an all-white image
result = classify(pixels)
print(result.label(), result.confidence)
```

`camclassify.model.pooled_features(pixels)` returns the 48 features the
network sees, ordered by channel (R, G, B), then pool row, then pool column.
The class names and weights are available as `CLASS_NAMES`, `FC1_WEIGHT`,
`FC1_BIAS`, `FC2_WEIGHT` and `FC2_BIAS`.

## Processing a camera frame

`camclassify.pipeline` works on 120×160 frames of 19200 RGB565 values, as
120 capture lines of 160 pixels:

- `rotate_frame(frame)` reverses each capture line, giving an upright image
  120 pixels wide and 160 tall,
- `downscale(frame)` box-averages an upright frame down to 32×32,
- `analyse(frame)` rotates, downscales and classifies a raw frame,
  returning a `FrameResult` with `classification` and the 32×32 `pixels`,
- `show_frame(display, frame)` draws the raw frame, each capture line as a
  column from the bottom up,
- `render_result(display, result, elapsed_ms)` draws a blue overlay with the
  class name, the confidence as two digits, and the time as four digits.

## The display

`camclassify.display.ST7735(bus, config=None)` draws through any object with
`write_command`, `write_data`, `select`, `reset` and `delay` methods.
`PanelConfig` sets width, height, start offsets, rotation and panel size
(`"160x128"`, `"128x128"` or `"160x80"`); the default is a 128×160 panel.

Methods: `init`, `draw_pixel`, `fill_rectangle`, `fill_rectangle_fast`,
`fill_screen`, `fill_screen_fast`, `draw_image`, `invert_colors` and
`set_gamma`. Rectangles are clipped to the panel; pixels and images that do
not fit are not drawn.

`SimulatedPanel` is such a bus kept in memory: it records every transfer in
`transfers`, follows the controller's state (sleep, inversion, gamma,
address window) and stores written pixels, readable with `pixel(x, y)`.
`color565(r, g, b)` packs 8-bit channels into RGB565, and `Gamma` lists the
selectable gamma curves.

## Text

`camclassify.text` draws with a 5×7 font on anything that has `draw_pixel`
and `fill_rectangle`: `draw_char`, `draw_string` (6 pixels per character),
`draw_text_background`, `glyph(c)` for a character's column bitmap (unknown
characters show as a space), and `int_to_string(num, digits)`, which gives
the lowest `digits` decimal digits, zero padded.

## The camera

`camclassify.camera.OV7670(hardware)` drives the sensor through an object
providing `i2c_mem_write`, `i2c_transmit`, `i2c_receive`, `set_reset`,
`delay`, `dcmi_start`, `dcmi_stop` and `dma_start`. `init()` resets the
sensor and returns its product id; `configure(mode)` loads the register
table `REGISTERS`; `start_capture(mode, destination)` and `stop_capture()`
control capture (`CaptureMode.CONTINUOUS` or `CaptureMode.SINGLE_FRAME`);
`frame_event()` handles a frame boundary, calling the callbacks set with
`register_callbacks` and re-arming DMA in continuous mode.

## Command line

```
camclassify FRAME [FRAME ...]
```

Each `FRAME` is a file of 120×160 raw RGB565 pixels, little-endian (38400
bytes). The frames are drawn on a simulated panel, classified, and for each
one a line `PATH: LABEL PERCENT% TIME ms` is printed. Files that cannot be
read or have the wrong size are reported on standard error and the exit
status is 1.

## What it does not do

The package contains no connection to real hardware: there is no I2C, SPI
or capture-interface backend for the camera or the panel, so it cannot take
live pictures or light a physical screen. Those objects must be supplied by
the caller; the command line works only on frame files and the in-memory
panel.