import math

import numpy as np
import pytest

from perlin_terrain.color_classifier import DEFAULT_BANDS, ColorClassifier, ElevationBand
from perlin_terrain.config import ConfigurationError


@pytest.fixture
def classifier():
    return ColorClassifier()


@pytest.mark.parametrize(
    "height,name",
    [
        (0.0, "deep_ocean"),
        (0.0999, "deep_ocean"),
        (0.10, "ocean"),
        (0.1999, "ocean"),
        (0.20, "beach"),
        (0.3999, "beach"),
        (0.40, "sand"),
        (0.4899, "sand"),
        (0.49, "forest"),
        (0.6999, "forest"),
        (0.70, "highland"),
        (0.7999, "highland"),
        (0.80, "low_mountain"),
        (0.8499, "low_mountain"),
        (0.85, "mountain"),
        (0.8999, "mountain"),
        (0.90, "snow"),
        (1.0, "snow"),
    ],
)
def test_reference_bands(classifier, height, name):
    assert classifier.band_name(height) == name


def test_reference_colors(classifier):
    assert classifier.classify(0.05) == (54, 62, 164)
    assert classifier.classify(0.15) == (75, 128, 202)
    assert classifier.classify(0.3) == (104, 194, 211)
    assert classifier.classify(0.45) == (237, 225, 158)
    assert classifier.classify(0.6) == (194, 211, 104)
    assert classifier.classify(0.75) == (138, 176, 96)
    assert classifier.classify(0.82) == (146, 146, 146)
    assert classifier.classify(0.87) == (100, 99, 101)
    assert classifier.classify(0.95) == (242, 240, 229)


def test_out_of_range_is_clamped(classifier):
    assert classifier.classify(-0.3) == classifier.classify(0.0)
    assert classifier.classify(7.0) == classifier.classify(1.0)
    assert classifier.classify(-math.inf) == classifier.classify(0.0)


def test_nan_rejected(classifier):
    with pytest.raises(ValueError):
        classifier.classify(float("nan"))
    with pytest.raises(ValueError):
        classifier.classify_grid(np.array([[0.2, np.nan]]))


def test_monotonic_partition(classifier):
    heights = np.linspace(0.0, 1.0, 10001)
    indices = [classifier.band_index(h) for h in heights]
    assert indices == sorted(indices)
    assert set(indices) == set(range(len(DEFAULT_BANDS)))

    # Equal band index implies equal color
    for h1, h2 in zip(heights[:-1], heights[1:]):
        if classifier.band_index(h1) == classifier.band_index(h2):
            assert classifier.classify(h1) == classifier.classify(h2)


def test_grid_matches_scalar(classifier):
    rng = np.random.RandomState(4)
    grid = rng.uniform(-0.2, 1.2, size=(13, 9))
    colors = classifier.classify_grid(grid)
    assert colors.shape == (13, 9, 3)
    assert colors.dtype == np.uint8
    for (y, x), h in np.ndenumerate(grid):
        assert tuple(colors[y, x].tolist()) == classifier.classify(h)


def test_custom_bands():
    bands = [
        ElevationBand(0.5, "water", (0, 0, 255)),
        ElevationBand(math.inf, "land", (0, 255, 0)),
    ]
    classifier = ColorClassifier(bands)
    assert classifier.classify(0.49) == (0, 0, 255)
    assert classifier.classify(0.5) == (0, 255, 0)


@pytest.mark.parametrize(
    "bands",
    [
        [],
        [(0.5, "a", (0, 0, 0)), (0.9, "b", (1, 1, 1))],
        [(0.5, "a", (0, 0, 0)), (0.4, "b", (1, 1, 1)), (math.inf, "c", (2, 2, 2))],
        [(1.5, "a", (0, 0, 0)), (math.inf, "b", (1, 1, 1))],
        [(0.5, "a", (0, 0, 300)), (math.inf, "b", (1, 1, 1))],
        [(0.5, "a", (0, 0)), (math.inf, "b", (1, 1, 1))],
    ],
)
def test_invalid_bands_rejected(bands):
    with pytest.raises(ConfigurationError):
        ColorClassifier(bands)
