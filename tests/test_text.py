import pytest
from hypothesis import given, strategies as st

from camclassify.display import BLACK, BLUE, WHITE, SimulatedPanel, ST7735
from camclassify.text import (
    ADVANCE,
    CHAR_HEIGHT,
    CHAR_SPACING,
    CHAR_WIDTH,
    draw_char,
    draw_string,
    draw_text_background,
    glyph,
    int_to_string,
)


class Recorder:
    def __init__(self):
        self.calls = []
        self.rects = []

    def draw_pixel(self, x, y, color):
        self.calls.append((x, y, color))

    def fill_rectangle(self, x, y, w, h, color):
        self.rects.append((x, y, w, h, color))


def test_glyph_letter_a():
    assert glyph("A") == bytes((0x7E, 0x11, 0x11, 0x11, 0x7E))


def test_glyph_digit_zero():
    assert glyph("0") == bytes((0x3E, 0x51, 0x49, 0x45, 0x3E))


def test_glyph_tilde_is_arrow():
    assert glyph("~") == bytes((0x08, 0x08, 0x2A, 0x1C, 0x08))


@pytest.mark.parametrize("c", ["\n", "\x7f", "\x00", "é"])
def test_glyph_out_of_range_is_space(c):
    assert glyph(c) == glyph(" ")


def test_glyph_rejects_multiple_characters():
    with pytest.raises(ValueError):
        glyph("ab")


def test_draw_char_space_same_colors_draws_nothing():
    rec = Recorder()
    draw_char(rec, 0, 0, " ", WHITE, WHITE)
    assert rec.calls == []


def test_draw_char_bar_foreground_only():
    rec = Recorder()
    draw_char(rec, 10, 20, "|", WHITE, WHITE)
    assert {(x, y) for x, y, _ in rec.calls} == {(10 + 2, 20 + j) for j in range(CHAR_HEIGHT)}
    assert all(color == WHITE for _, _, color in rec.calls)


def test_draw_char_with_background_fills_cell():
    rec = Recorder()
    draw_char(rec, 3, 4, "A", WHITE, BLUE)
    positions = [(x, y) for x, y, _ in rec.calls]
    assert len(positions) == (CHAR_WIDTH + CHAR_SPACING) * CHAR_HEIGHT
    assert len(set(positions)) == len(positions)
    foreground = sum(1 for _, _, color in rec.calls if color == WHITE)
    bits = sum(bin(column & 0x7F).count("1") for column in glyph("A"))
    assert foreground == bits
    spacing = [color for x, _, color in rec.calls if x == 3 + CHAR_WIDTH]
    assert spacing == [BLUE] * CHAR_HEIGHT


def test_draw_string_advances_per_character():
    rec = Recorder()
    draw_string(rec, 5, 7, "AB", WHITE, BLACK)
    expected = Recorder()
    draw_char(expected, 5, 7, "A", WHITE, BLACK)
    draw_char(expected, 5 + ADVANCE, 7, "B", WHITE, BLACK)
    assert rec.calls == expected.calls


def test_draw_string_empty_draws_nothing():
    rec = Recorder()
    draw_string(rec, 0, 0, "", WHITE, BLACK)
    assert rec.calls == []


def test_draw_text_background_fills_rectangle():
    rec = Recorder()
    draw_text_background(rec, 0, 0, 128, 40, BLUE)
    assert rec.rects == [(0, 0, 128, 40, BLUE)]


def test_draw_char_on_simulated_panel():
    panel = SimulatedPanel()
    lcd = ST7735(panel)
    draw_char(lcd, 10, 20, "|", WHITE, BLACK)
    assert all(panel.pixel(12, 20 + j) == WHITE for j in range(CHAR_HEIGHT))
    assert panel.pixel(10, 20) == BLACK
    assert panel.pixel(10 + CHAR_WIDTH, 20) == BLACK


def test_int_to_string_keeps_low_digits():
    assert int_to_string(123, 2) == "23"


def test_int_to_string_zero_pads():
    assert int_to_string(7, 3) == "007"


def test_int_to_string_zero_digits():
    assert int_to_string(42, 0) == ""


def test_int_to_string_negative_digits_rejected():
    with pytest.raises(ValueError):
        int_to_string(5, -1)


@given(st.integers(min_value=0, max_value=10**9), st.integers(min_value=1, max_value=12))
def test_int_to_string_round_trip(num, digits):
    text = int_to_string(num, digits)
    assert len(text) == digits
    assert text.isdigit()
    assert int(text) == num % 10**digits