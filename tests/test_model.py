import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from camclassify.model import (
    CLASS_NAMES,
    Classification,
    classify,
    pooled_features,
)

PIXELS = 32 * 32


def solid(value):
    return [value] * PIXELS


def test_black_image_pools_to_minus_one():
    assert pooled_features(solid(0x0000)) == pytest.approx([-1.0] * 48)


def test_white_image_pools_to_plus_one():
    assert pooled_features(solid(0xFFFF)) == pytest.approx([1.0] * 48)


def test_pure_red_only_sets_red_channel():
    features = pooled_features(solid(0xF800))
    assert features[:16] == pytest.approx([1.0] * 16)
    assert features[16:] == pytest.approx([-1.0] * 32)


def test_pure_green_only_sets_green_channel():
    features = pooled_features(solid(0x07E0))
    assert features[16:32] == pytest.approx([1.0] * 16)
    assert features[:16] == pytest.approx([-1.0] * 16)
    assert features[32:] == pytest.approx([-1.0] * 16)


def test_top_left_block_maps_to_first_cell():
    pixels = solid(0)
    for row in range(8):
        for col in range(8):
            pixels[row * 32 + col] = 0x001F
    features = pooled_features(pixels)
    assert features[32] == pytest.approx(1.0)
    assert features[33:] == pytest.approx([-1.0] * 15)
    assert features[:32] == pytest.approx([-1.0] * 32)


def test_bottom_right_block_maps_to_last_cell():
    pixels = solid(0)
    for row in range(24, 32):
        for col in range(24, 32):
            pixels[row * 32 + col] = 0xF800
    features = pooled_features(pixels)
    assert features[15] == pytest.approx(1.0)
    assert features[:15] == pytest.approx([-1.0] * 15)


def test_wrong_length_rejected():
    with pytest.raises(ValueError):
        pooled_features([0] * 100)
    with pytest.raises(ValueError):
        classify([0] * (PIXELS + 1))


def test_out_of_range_pixel_rejected():
    pixels = solid(0)
    pixels[5] = 0x10000
    with pytest.raises(ValueError):
        classify(pixels)
    pixels[5] = -1
    with pytest.raises(ValueError):
        pooled_features(pixels)


def test_class_names_match_source_order():
    probabilities = tuple([0.1] * 10)
    assert Classification(0, 0.1, probabilities).label() == "plane"
    assert Classification(9, 0.1, probabilities).label() == "truck"
    assert len(CLASS_NAMES) == 10


def test_label_looks_up_name():
    result = Classification(3, 0.5, tuple([0.05] * 10))
    assert result.label() == "cat"


def test_classify_is_deterministic():
    pixels = [(i * 37) & 0xFFFF for i in range(PIXELS)]
    first = classify(pixels)
    second = classify(list(pixels))
    assert 0 <= first.index < 10
    assert first.index == second.index
    assert first.confidence == second.confidence
    assert first.probabilities == second.probabilities


def test_classify_accepts_any_iterable():
    pixels = [0x1234] * PIXELS
    assert classify(iter(pixels)) == classify(tuple(pixels))


@settings(max_examples=25, deadline=None)
@given(st.lists(st.integers(0, 0xFFFF), min_size=PIXELS, max_size=PIXELS))
def test_features_stay_in_range(pixels):
    features = pooled_features(pixels)
    assert len(features) == 48
    assert all(-1.0 - 1e-9 <= f <= 1.0 + 1e-9 for f in features)


@settings(max_examples=25, deadline=None)
@given(st.lists(st.integers(0, 0xFFFF), min_size=PIXELS, max_size=PIXELS))
def test_classification_invariants(pixels):
    result = classify(pixels)
    assert len(result.probabilities) == 10
    assert math.isclose(sum(result.probabilities), 1.0, rel_tol=1e-9)
    assert result.confidence == max(result.probabilities)
    assert result.probabilities[result.index] == result.confidence
    assert result.probabilities.index(result.confidence) == result.index
    assert 0.1 <= result.confidence <= 1.0
    assert result.label() in CLASS_NAMES


@pytest.mark.parametrize("value", [0x0000, 0xFFFF, 0xF800, 0x07E0, 0x001F])
def test_solid_colours_give_valid_distribution(value):
    result = classify(solid(value))
    assert all(p > 0.0 for p in result.probabilities)
    assert math.isclose(sum(result.probabilities), 1.0, rel_tol=1e-9)
    assert result.label() == CLASS_NAMES[result.index]