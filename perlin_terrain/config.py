"""
config.py
---------
Default terrain parameters and validation of user supplied settings.

Purpose in Pipeline:
    - Step 1 in `main.py`: CLI arguments are mapped onto a `TerrainConfig`.
    - `generate_heightmap()` validates through the same class, so bad input is
      rejected before any noise is evaluated.

Dependencies:
    - numpy
"""

import math
import numbers

import numpy as np

# === Defaults ===
WIDTH, HEIGHT = 512, 512
SCALE = 0.01
OCTAVES = 4
PERSISTENCE = 0.5
LACUNARITY = 2.0
OUTPUT_FILE = "terrain.bmp"

MAX_SEED = 2**64


class ConfigurationError(ValueError):
    """Raised when terrain settings are rejected at construction time."""


def _is_int(value):
    return isinstance(value, (numbers.Integral, np.integer)) and not isinstance(
        value, (bool, np.bool_)
    )


def check_seed(seed):
    """
    Validates a permutation seed.

    Args:
        seed (int or None): None for a non-reproducible table.

    Returns:
        int or None: The seed as a plain int.
    """
    if seed is None:
        return None
    if not _is_int(seed):
        raise ConfigurationError(f"seed must be an integer, got {seed!r}")
    seed = int(seed)
    if not 0 <= seed < MAX_SEED:
        raise ConfigurationError(f"seed must be in [0, 2**64), got {seed}")
    return seed


class TerrainConfig:
    """
    Settings for one heightmap synthesis run.
    """

    def __init__(
        self,
        width=WIDTH,
        height=HEIGHT,
        scale=SCALE,  # Spatial frequency, smaller = larger features
        octaves=OCTAVES,  # Number of fractal layers
        persistence=PERSISTENCE,  # Amplitude decay per octave
        lacunarity=LACUNARITY,  # Frequency growth per octave
        seed=None,
        offset_x=0.0,
        offset_y=0.0,
        workers=1,
    ):
        self.width = width
        self.height = height
        self.scale = scale
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity
        self.seed = seed
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.workers = workers

    def validate(self):
        """
        Checks every field and raises ConfigurationError on the first bad one.

        Returns:
            TerrainConfig: self, so calls can be chained.
        """
        for name in ("width", "height"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive integer, got {value!r}"
                )

        if not _is_int(self.octaves) or self.octaves < 0:
            raise ConfigurationError(
                f"octaves must be a non-negative integer, got {self.octaves!r}"
            )

        if not _is_int(self.workers) or self.workers < 1:
            raise ConfigurationError(
                f"workers must be a positive integer, got {self.workers!r}"
            )

        for name in ("scale", "persistence", "lacunarity", "offset_x", "offset_y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (numbers.Real, np.floating)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value!r}")

        self.seed = check_seed(self.seed)
        self._check_coordinate_range()
        return self

    def _check_coordinate_range(self):
        # Largest noise coordinate reached by the last octave must stay finite.
        if self.octaves == 0:
            return
        reach = max(
            abs(self.offset_x) + self.width, abs(self.offset_y) + self.height
        )
        with np.errstate(over="ignore", invalid="ignore"):
            top_frequency = np.float64(abs(self.lacunarity)) ** (self.octaves - 1)
            extent = np.float64(reach) * abs(self.scale) * top_frequency
        if not (np.isfinite(top_frequency) and np.isfinite(extent)):
            raise ConfigurationError(
                "scale and lacunarity produce non-finite noise coordinates "
                f"after {self.octaves} octaves"
            )
        if not np.isfinite(self.worst_case_span()):
            raise ConfigurationError(
                f"persistence overflows the height range after {self.octaves} octaves"
            )

    def worst_case_span(self):
        """
        Upper bound on max - min of the raw octave sums: 2 * sum(|persistence|^i).

        Returns:
            np.float64: inf when the bound does not fit in a float.
        """
        persistence = np.float64(abs(self.persistence))
        amplitude = np.float64(1.0)
        total = np.float64(0.0)
        with np.errstate(over="ignore", invalid="ignore"):
            for _ in range(self.octaves):
                total += amplitude
                amplitude *= persistence
                if not np.isfinite(total) or amplitude == 0.0:
                    break
            return 2.0 * total

    def as_dict(self):
        return {
            "width": self.width,
            "height": self.height,
            "scale": self.scale,
            "octaves": self.octaves,
            "persistence": self.persistence,
            "lacunarity": self.lacunarity,
            "seed": self.seed,
            "offset_x": self.offset_x,
            "offset_y": self.offset_y,
            "workers": self.workers,
        }

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.as_dict().items())
        return f"TerrainConfig({fields})"
