"""
color_classifier.py
-------------------
Maps normalized heights to elevation band colors.

Purpose in Pipeline:
    - Step 4 in `main.py`: turns the normalized heightmap into an RGB raster.

Workflow:
    1. Clamp heights into [0, 1].
    2. Find the first band whose upper threshold is above the height
       (`np.digitize` over the band thresholds).
    3. Look up that band's RGB color.

Example:
    classifier = ColorClassifier()
    classifier.classify(0.05)          # (54, 62, 164), deep ocean
    rgb = classifier.classify_grid(heightmap)
"""

import math
from collections import namedtuple

import numpy as np

from perlin_terrain.config import ConfigurationError

ElevationBand = namedtuple("ElevationBand", ["upper", "name", "color"])

# Upper bounds are exclusive; the last band catches everything else.
DEFAULT_BANDS = (
    ElevationBand(0.10, "deep_ocean", (54, 62, 164)),
    ElevationBand(0.20, "ocean", (75, 128, 202)),
    ElevationBand(0.40, "beach", (104, 194, 211)),
    ElevationBand(0.49, "sand", (237, 225, 158)),
    ElevationBand(0.70, "forest", (194, 211, 104)),
    ElevationBand(0.80, "highland", (138, 176, 96)),
    ElevationBand(0.85, "low_mountain", (146, 146, 146)),
    ElevationBand(0.90, "mountain", (100, 99, 101)),
    ElevationBand(math.inf, "snow", (242, 240, 229)),
)


class ColorClassifier:
    """
    Total, deterministic height -> color lookup over ordered bands.
    """

    def __init__(self, bands=DEFAULT_BANDS):
        self.bands = tuple(ElevationBand(*band) for band in bands)
        self._validate()
        self.thresholds = np.array([band.upper for band in self.bands[:-1]], dtype=np.float64)
        self.palette = np.array([band.color for band in self.bands], dtype=np.uint8)

    def _validate(self):
        if not self.bands:
            raise ConfigurationError("at least one elevation band is required")
        if self.bands[-1].upper != math.inf:
            raise ConfigurationError("the last elevation band must be open-ended (upper=inf)")

        uppers = [band.upper for band in self.bands[:-1]]
        for lower, upper in zip([-math.inf] + uppers, uppers):
            if not upper > lower:
                raise ConfigurationError(f"band thresholds must be ascending, got {uppers}")
        if uppers and not (0.0 < uppers[0] and uppers[-1] <= 1.0):
            raise ConfigurationError(f"band thresholds must lie in (0, 1], got {uppers}")

        for band in self.bands:
            if len(band.color) != 3 or not all(
                isinstance(c, (int, np.integer)) and 0 <= c <= 255 for c in band.color
            ):
                raise ConfigurationError(
                    f"band {band.name!r} color must be three 8-bit channels, got {band.color}"
                )

    def band_index(self, height):
        if math.isnan(height):
            raise ValueError("cannot classify NaN height")
        height = min(max(float(height), 0.0), 1.0)
        return int(np.digitize(height, self.thresholds))

    def band_name(self, height):
        return self.bands[self.band_index(height)].name

    def classify(self, height):
        """
        Args:
            height (float): Normalized height; values outside [0, 1] are clamped.

        Returns:
            tuple[int, int, int]: RGB color of the matching band.
        """
        return tuple(self.bands[self.band_index(height)].color)

    def classify_grid(self, heightmap):
        """
        Vectorized `classify` over a whole heightmap.

        Returns:
            np.ndarray: uint8 array of shape (H, W, 3).
        """
        heights = np.asarray(heightmap, dtype=np.float64)
        if np.isnan(heights).any():
            raise ValueError("cannot classify NaN heights")
        indices = np.digitize(np.clip(heights, 0.0, 1.0), self.thresholds)
        return self.palette[indices]
